import csv
import logging
from collections import OrderedDict
from io import BytesIO, StringIO
from typing import Any, Dict, Iterable, List, Mapping

import pandas as pd

from errors import InvalidHallPlan, MissingInput
from seating_logic import MAX_STUDENTS_COUNT

logger = logging.getLogger("seating.hall_plan")

HallPlanDoc = Dict[str, List[Dict[str, Any]]]

_HEADER_ALIASES = {
    "hall": "hall",
    "hallno": "hall",
    "hallname": "hall",
    "room": "hall",
    "roomno": "hall",
    "department": "department",
    "dept": "department",
    "studentscount": "students_count",
    "studentcount": "students_count",
    "count": "students_count",
}

REQUIRED_COLUMNS = ("hall", "department", "students_count")


def _normalise_header(name: Any) -> str:
    key = str(name or "").strip().lower().replace(" ", "").replace("_", "").replace(".", "")
    return _HEADER_ALIASES.get(key, key)


def _cell(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, float):
        if value != value:  # NaN from empty Excel cells
            return ""
        if value.is_integer():
            return str(int(value))
    return str(value).strip()


def _parse_count(raw: str, line_no: int, max_count: int = MAX_STUDENTS_COUNT) -> int:
    try:
        count = int(float(raw))
    except (ValueError, OverflowError):
        raise InvalidHallPlan(f"Row {line_no}: students_count '{raw}' is not a number.")
    if count != float(raw):
        raise InvalidHallPlan(f"Row {line_no}: students_count '{raw}' is not a whole number.")
    if count < 0:
        raise InvalidHallPlan(f"Row {line_no}: students_count cannot be negative ({count}).")
    if count > max_count:
        raise InvalidHallPlan(f"Row {line_no}: students_count {count} exceeds the limit of {max_count}.")
    return count


def rows_to_hall_plan(rows: Iterable[Mapping[str, Any]], max_count: int = MAX_STUDENTS_COUNT) -> HallPlanDoc:
    """
    Fold spreadsheet rows into {hall: [{department, students_count}, ...]}.
    Hall order and department order follow the sheet. Entirely blank rows
    are skipped; any other gap is an error for the whole upload.
    """
    plan: HallPlanDoc = OrderedDict()
    # Line 1 is the header row
    for line_no, row in enumerate(rows, 2):
        values = {_normalise_header(k): _cell(v) for k, v in row.items()}
        hall = values.get("hall", "")
        dept = values.get("department", "")
        raw_count = values.get("students_count", "")
        if not (hall or dept or raw_count):
            continue
        if not hall:
            raise InvalidHallPlan(f"Row {line_no}: hall name is empty.")
        if not dept:
            raise InvalidHallPlan(f"Row {line_no}: department is empty.")
        if not raw_count:
            raise InvalidHallPlan(f"Row {line_no}: students_count is empty.")
        plan.setdefault(hall, []).append({
            "department": dept.upper(),
            "students_count": _parse_count(raw_count, line_no, max_count),
        })
    return plan


def _check_columns(fieldnames: Iterable[Any]) -> None:
    present = {_normalise_header(name) for name in fieldnames}
    missing = [col for col in REQUIRED_COLUMNS if col not in present]
    if missing:
        raise InvalidHallPlan(f"Hall plan must contain: {', '.join(REQUIRED_COLUMNS)} (missing {', '.join(missing)}).")


def parse_hall_plan(stream, filename: str, max_count: int = MAX_STUDENTS_COUNT) -> HallPlanDoc:
    """Parse an uploaded hall plan (.csv, .xlsx or .xls)."""
    ext = filename.rsplit(".", 1)[-1].lower() if "." in filename else ""
    data = stream.read()

    if ext == "csv":
        content = data.decode("utf-8-sig") if isinstance(data, bytes) else data
        reader = csv.DictReader(StringIO(content))
        _check_columns(reader.fieldnames or [])
        plan = rows_to_hall_plan(reader, max_count)
    elif ext in ("xlsx", "xls"):
        df = pd.read_excel(BytesIO(data), dtype=object)
        _check_columns(df.columns)
        plan = rows_to_hall_plan(df.to_dict(orient="records"), max_count)
    else:
        raise InvalidHallPlan("Invalid file type. Please upload Excel (.xlsx, .xls) or CSV.")

    if not plan:
        raise MissingInput("The hall plan file has no rows.")
    logger.info("Parsed hall plan %s: %d halls.", filename, len(plan))
    return plan
