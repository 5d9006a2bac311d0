import logging
import os
import sys

DEFAULT_HALL_ORDER = [
    "601", "602", "603", "604", "605", "606", "607", "608",
    "502", "503", "504", "508", "509",
    "302", "303", "304", "307",
    "202", "203",
    "A101", "A102", "A103",
    "A201", "A202", "A203",
    "A301",
    "B102", "B201", "B202",
    "S23", "S24", "S15", "S16", "S17", "S18", "S20", "S21", "S22", "S26", "S27",
]

YEAR_COLLECTIONS = {
    "1": "I_year",
    "2": "II_year",
    "3": "III_year",
    "4": "IV_year",
}


def _env_bool(name, default):
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def _env_list(name, default):
    value = os.environ.get(name)
    if not value:
        return list(default)
    return [item.strip() for item in value.split(",") if item.strip()]


class Config:
    MONGO_URI = os.environ.get("MONGO_URI", "mongodb://localhost:27017")
    MONGO_DB = os.environ.get("MONGO_DB", "exam_seating_db")
    SECRET_KEY = os.environ.get("SECRET_KEY", "change-this-secret-key")

    SEAT_ROWS = int(os.environ.get("SEAT_ROWS", 8))
    SEAT_COLUMNS = int(os.environ.get("SEAT_COLUMNS", 5))
    BENCH_POLICY = os.environ.get("BENCH_POLICY", "grouped")
    STRICT_FIRST_YEAR = _env_bool("STRICT_FIRST_YEAR", True)
    SOLO_SINGLE_DEPARTMENT = _env_bool("SOLO_SINGLE_DEPARTMENT", True)
    FETCH_BATCH_SIZE = int(os.environ.get("FETCH_BATCH_SIZE", 1000))
    MAX_STUDENTS_COUNT = int(os.environ.get("MAX_STUDENTS_COUNT", 10000))
    HALL_ORDER = _env_list("HALL_ORDER", DEFAULT_HALL_ORDER)

    LOG_DIR = os.environ.get("LOG_DIR", "logs")
    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")


def setup_logging(log_dir=None, level=None):
    """
    Configure the 'seating' logger:
      - execution.log : everything at the configured level
      - errors.txt    : ERROR and above
      - stdout        : same as execution.log
    Calling it again returns the already configured logger.
    """
    logger = logging.getLogger("seating")
    if logger.handlers:
        return logger

    log_dir = log_dir or Config.LOG_DIR
    level = getattr(logging, str(level or Config.LOG_LEVEL).upper(), logging.INFO)
    os.makedirs(log_dir, exist_ok=True)
    logger.setLevel(level)

    fmt = logging.Formatter("%(asctime)s - %(levelname)s - %(message)s")

    exec_handler = logging.FileHandler(os.path.join(log_dir, "execution.log"))
    exec_handler.setLevel(level)
    exec_handler.setFormatter(fmt)

    error_handler = logging.FileHandler(os.path.join(log_dir, "errors.txt"))
    error_handler.setLevel(logging.ERROR)
    error_handler.setFormatter(fmt)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(fmt)

    logger.addHandler(exec_handler)
    logger.addHandler(error_handler)
    logger.addHandler(console_handler)

    return logger
