import csv
import logging
from collections import OrderedDict
from io import StringIO
from typing import Any, Dict, List, Mapping, Optional

from pymongo import ASCENDING
from pymongo.database import Database

from config import YEAR_COLLECTIONS, Config
from dept_codes import register_value
from errors import MissingInput, SeatingError
from seating_logic import BenchPolicy, build_seat_index, build_seating_plan

logger = logging.getLogger("seating.store")

REG_FIELD = "Reg_No"


def _year_collection(year: Any) -> str:
    name = YEAR_COLLECTIONS.get(str(year).strip())
    if not name:
        raise MissingInput("Invalid year selected.")
    return name


def parse_roster_csv(stream) -> List[str]:
    """Register numbers from an uploaded CSV; the register column is detected by name."""
    data = stream.read()
    content = data.decode("utf-8-sig") if isinstance(data, bytes) else data
    reader = csv.DictReader(StringIO(content))
    if not reader.fieldnames:
        raise MissingInput("The roster CSV is empty.")
    regs = []
    for row in reader:
        reg = register_value(row).upper()
        if reg:
            regs.append(reg)
    return regs


def import_roster(db: Database, year: Any, register_numbers: List[str]) -> int:
    """Replace the roster of one year with the given register numbers."""
    collection = _year_collection(year)
    docs = [{REG_FIELD: reg} for reg in register_numbers if reg]
    if not docs:
        raise MissingInput("No register numbers found in the uploaded roster.")
    db.drop_collection(collection)
    db[collection].insert_many(docs)
    logger.info("Imported %d register numbers into %s.", len(docs), collection)
    return len(docs)


def fetch_register_numbers(db: Database, year: Any, batch_size: int = 1000) -> List[Dict[str, str]]:
    """
    Read the whole roster of a year in `_id` order, one page at a time.
    Each page starts strictly after the last `_id` seen, so rows are never
    repeated or skipped; a short page means the collection is exhausted.
    """
    collection = _year_collection(year)
    rows: List[Dict[str, str]] = []
    last_id = None
    while True:
        query = {} if last_id is None else {"_id": {"$gt": last_id}}
        batch = list(
            db[collection]
            .find(query, {REG_FIELD: 1})
            .sort("_id", ASCENDING)
            .limit(batch_size)
        )
        for doc in batch:
            rows.append({"Roll_No": doc.get(REG_FIELD)})
        if len(batch) < batch_size:
            break
        last_id = batch[-1]["_id"]
    logger.info("Fetched %d register numbers from %s.", len(rows), collection)
    return rows


def save_hall_plan(db: Database, plan: Mapping[str, List[Mapping[str, Any]]]) -> int:
    docs = []
    for hall, entries in plan.items():
        for entry in entries:
            docs.append({
                "order": len(docs),
                "hall": hall,
                "department": entry["department"],
                "students_count": int(entry["students_count"]),
            })
    if not docs:
        raise MissingInput("The hall plan is empty.")
    db.drop_collection("hall_plans")
    db.hall_plans.insert_many(docs)
    return len(plan)


def load_hall_plan(db: Database) -> Dict[str, List[Dict[str, Any]]]:
    plan: Dict[str, List[Dict[str, Any]]] = OrderedDict()
    for doc in db.hall_plans.find({}).sort("order", ASCENDING):
        plan.setdefault(doc["hall"], []).append({
            "department": doc["department"],
            "students_count": doc["students_count"],
        })
    return plan


def _default_settings() -> Dict[str, Any]:
    return {key: getattr(Config, key) for key in dir(Config) if key.isupper()}


def run_allocation(db: Database, year: Any, settings: Optional[Mapping[str, Any]] = None) -> Dict[str, Any]:
    """
    Fetch the inputs for a year and build the seating plan from them.
    `settings` is any mapping with the Config keys (Flask's app.config works).
    """
    cfg = _default_settings()
    if settings:
        cfg.update({key: settings[key] for key in cfg if key in settings})
    roster = fetch_register_numbers(db, year, batch_size=cfg["FETCH_BATCH_SIZE"])
    hall_plan = load_hall_plan(db)
    try:
        policy = BenchPolicy.from_name(cfg["BENCH_POLICY"])
    except ValueError as e:
        raise SeatingError(str(e))
    return build_seating_plan(
        roster,
        hall_plan,
        hall_order=cfg["HALL_ORDER"],
        rows=cfg["SEAT_ROWS"],
        columns=cfg["SEAT_COLUMNS"],
        policy=policy,
        strict=cfg["STRICT_FIRST_YEAR"],
        solo_single_department=cfg["SOLO_SINGLE_DEPARTMENT"],
        max_count=cfg["MAX_STUDENTS_COUNT"],
    )


def save_assignments(db: Database, plan: Mapping[str, Any]) -> int:
    index = build_seat_index(plan)
    docs = [
        {
            "reg_no": reg,
            "hall": seat["hall"],
            "seat_no": seat["seat"],
            "page": seat["page"],
            "position": seat["position"],
        }
        for reg, seat in index.items()
    ]
    db.drop_collection("seat_assignments")
    if docs:
        db.seat_assignments.insert_many(docs)
        db.seat_assignments.create_index("reg_no", unique=True)
    logger.info("Stored %d seat assignments.", len(docs))
    return len(docs)


def find_seat(db: Database, reg_no: Any, hall: Optional[str] = None) -> Dict[str, Any]:
    reg = register_value(reg_no).upper()
    doc = db.seat_assignments.find_one({"reg_no": reg}) if reg else None
    if doc is None or (hall and doc["hall"] != hall):
        return {"found": False, "status": "INVALID", "reg_no": reg}
    return {
        "found": True,
        "reg_no": reg,
        "hall": doc["hall"],
        "seat": doc["seat_no"],
        "page": doc["page"],
        "position": doc["position"],
    }
