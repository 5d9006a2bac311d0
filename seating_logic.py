import logging
from collections import OrderedDict
from enum import Enum
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from dept_codes import UNKNOWN, classify, register_value, resolve_plan_department
from errors import InvalidHallPlan, MissingInput

logger = logging.getLogger("seating.logic")

EMPTY = ""

# Upper bound for one department entry of one hall
MAX_STUDENTS_COUNT = 10000

Bench = Tuple[str, str]
EMPTY_BENCH: Bench = (EMPTY, EMPTY)

DeptQueues = Dict[str, List[str]]
HallPlan = Mapping[str, Sequence[Mapping[str, Any]]]


class BenchPolicy(Enum):
    GROUPED = "grouped"
    INTERLEAVED = "interleaved"

    @classmethod
    def from_name(cls, name: str) -> "BenchPolicy":
        try:
            return cls(str(name).strip().lower())
        except ValueError:
            raise ValueError(f"Unknown bench policy '{name}'. Use 'grouped' or 'interleaved'.")


# ---------------------------------------------------------------------------
# Roster partitioning
# ---------------------------------------------------------------------------

def partition(all_ids: Iterable[Any], strict: bool = True) -> DeptQueues:
    """
    Group register numbers by department, keeping roster order inside each
    department. Blank entries are skipped; a repeated register number keeps
    its first position only.
    """
    queues: DeptQueues = OrderedDict()
    seen = set()
    duplicates = 0

    for item in all_ids:
        reg = register_value(item)
        if not reg:
            continue
        if reg in seen:
            duplicates += 1
            continue
        seen.add(reg)
        queues.setdefault(classify(reg, strict=strict), []).append(reg)

    if duplicates:
        logger.warning("Roster contained %d duplicate register numbers; kept first occurrences.", duplicates)
    if queues.get(UNKNOWN):
        logger.warning(
            "%d register numbers could not be mapped to a department (e.g. %s).",
            len(queues[UNKNOWN]), queues[UNKNOWN][0],
        )
    return queues


class DepartmentCursor:
    """
    Read positions into each department queue for one allocation run.
    Positions only move forward, so a register number handed to one hall is
    never handed to another.
    """

    def __init__(self, queues: Mapping[str, Sequence[str]]):
        self._queues = {dept: list(ids) for dept, ids in queues.items()}
        self._positions: Dict[str, int] = {dept: 0 for dept in self._queues}

    def position(self, department: str) -> int:
        return self._positions.get(department, 0)

    def remaining(self, department: str) -> int:
        queue = self._queues.get(department, [])
        return max(len(queue) - self.position(department), 0)

    def take_next(self, department: str, count: int) -> List[str]:
        if count < 0:
            raise InvalidHallPlan(f"Negative seat count {count} for department '{department}'.")
        start = self.position(department)
        taken = self._queues.get(department, [])[start:start + count]
        self._positions[department] = start + count
        return taken + [EMPTY] * (count - len(taken))

    def unseated(self) -> Dict[str, List[str]]:
        leftovers = {}
        for dept, queue in self._queues.items():
            rest = queue[self.position(dept):]
            if rest:
                leftovers[dept] = rest
        return leftovers


# ---------------------------------------------------------------------------
# Bench composition
# ---------------------------------------------------------------------------

def _pair_up(seats: Sequence[str]) -> List[Bench]:
    benches = []
    for i in range(0, len(seats), 2):
        second = seats[i + 1] if i + 1 < len(seats) else EMPTY
        benches.append((seats[i], second))
    return benches


def compose_grouped(dept_slices: Mapping[str, Sequence[str]]) -> List[Bench]:
    """Same department on a bench first; single leftovers get mixed at the end."""
    benches: List[Bench] = []
    leftovers: List[str] = []

    for dept in dept_slices:
        seats = list(dept_slices[dept])
        while len(seats) >= 2:
            benches.append((seats.pop(0), seats.pop(0)))
        if seats:
            leftovers.append(seats.pop(0))

    benches.extend(_pair_up(leftovers))
    return benches


def compose_interleaved(dept_slices: Mapping[str, Sequence[str]]) -> List[Bench]:
    """Round-robin one seat per department per sweep, then pair neighbours."""
    pending = [list(seats) for seats in dept_slices.values()]
    mixed: List[str] = []
    while any(pending):
        for seats in pending:
            if seats:
                mixed.append(seats.pop(0))
    return _pair_up(mixed)


_COMPOSERS = {
    BenchPolicy.GROUPED: compose_grouped,
    BenchPolicy.INTERLEAVED: compose_interleaved,
}


def compose(dept_slices: Mapping[str, Sequence[str]],
            policy: BenchPolicy = BenchPolicy.GROUPED,
            solo_single_department: bool = True) -> List[Bench]:
    active = [dept for dept, seats in dept_slices.items() if seats]
    if solo_single_department and len(active) == 1:
        # One department in the hall: nobody shares a bench
        return [(seat, EMPTY) for seat in dept_slices[active[0]]]
    return _COMPOSERS[policy](dept_slices)


# ---------------------------------------------------------------------------
# Page layout
# ---------------------------------------------------------------------------

def _check_grid(rows: int, columns: int) -> None:
    if rows < 1 or columns < 1:
        raise InvalidHallPlan(f"Grid must have at least one row and one column (got {rows}x{columns}).")


def seat_label(row: int, column: int, rows: int) -> int:
    """Serial number of a grid cell; odd columns count upwards from the back."""
    if column % 2 == 0:
        return column * rows + row + 1
    return (column + 1) * rows - row


def seat_order(rows: int, columns: int) -> List[Tuple[int, int]]:
    """(row, column) cells in serpentine order: down column 0, up column 1, ..."""
    _check_grid(rows, columns)
    order = []
    for c in range(columns):
        row_range = range(rows) if c % 2 == 0 else range(rows - 1, -1, -1)
        for r in row_range:
            order.append((r, c))
    return order


def layout(benches: Sequence[Bench], rows: int, columns: int, hall: str = "") -> List[Dict[str, Any]]:
    _check_grid(rows, columns)
    capacity = rows * columns
    order = seat_order(rows, columns)
    serials = [[seat_label(r, c, rows) for c in range(columns)] for r in range(rows)]

    pages = []
    for page_no, start in enumerate(range(0, len(benches), capacity), 1):
        chunk = benches[start:start + capacity]
        grid = [[EMPTY_BENCH for _ in range(columns)] for _ in range(rows)]
        for (r, c), bench in zip(order, chunk):
            grid[r][c] = tuple(bench)
        pages.append({
            "hall": hall,
            "page": page_no,
            "rows": rows,
            "columns": columns,
            "grid": grid,
            "serials": [list(line) for line in serials],
        })
    return pages


def page_header(columns: int) -> List[str]:
    header = []
    for i in range(columns):
        header.extend([f"Seat {i + 1}", "S.No"])
    return header


def page_rows(page: Mapping[str, Any]) -> List[List[str]]:
    """Table body for one page: (occupants, serial) pairs per seating column."""
    body = []
    for bench_row, serial_row in zip(page["grid"], page["serials"]):
        line = []
        for bench, serial in zip(bench_row, serial_row):
            line.extend([f"{bench[0]}\n{bench[1]}", str(serial)])
        body.append(line)
    return body


# ---------------------------------------------------------------------------
# Whole run
# ---------------------------------------------------------------------------

def validate_hall_plan(hall_plan: HallPlan, max_count: int = MAX_STUDENTS_COUNT) -> None:
    for hall, entries in hall_plan.items():
        if not str(hall or "").strip():
            raise InvalidHallPlan("Hall plan contains a hall with an empty name.")
        for entry in entries:
            if not isinstance(entry, Mapping):
                raise InvalidHallPlan(f"Hall {hall}: expected a department entry, got {entry!r}.")
            dept = str(entry.get("department") or "").strip()
            if not dept:
                raise InvalidHallPlan(f"Hall {hall}: department name is empty.")
            count = entry.get("students_count")
            if isinstance(count, bool) or not isinstance(count, int):
                raise InvalidHallPlan(f"Hall {hall}, {dept}: students_count must be an integer, got {count!r}.")
            if count < 0:
                raise InvalidHallPlan(f"Hall {hall}, {dept}: students_count cannot be negative ({count}).")
            if count > max_count:
                raise InvalidHallPlan(f"Hall {hall}, {dept}: students_count {count} exceeds the limit of {max_count}.")


def _ordered_halls(hall_plan: HallPlan, hall_order: Optional[Sequence[str]]) -> Tuple[List[str], List[str]]:
    if hall_order is None:
        return list(hall_plan.keys()), []
    # A hall listed twice is still visited once
    order = list(OrderedDict.fromkeys(hall_order))
    canonical = [hall for hall in order if hall in hall_plan]
    skipped = [hall for hall in hall_plan if hall not in set(order)]
    return canonical, skipped


def build_seating_plan(roster: Sequence[Any],
                       hall_plan: HallPlan,
                       hall_order: Optional[Sequence[str]] = None,
                       rows: int = 8,
                       columns: int = 5,
                       policy: BenchPolicy = BenchPolicy.GROUPED,
                       strict: bool = True,
                       solo_single_department: bool = True,
                       max_count: int = MAX_STUDENTS_COUNT) -> Dict[str, Any]:
    """
    Seat the roster hall by hall.

    Halls are visited in `hall_order` (halls missing from the plan are
    skipped, plan halls missing from `hall_order` are reported and skipped).
    Every department draws from one shared cursor, so the order halls are
    visited in decides who sits where. Nothing is produced if the inputs are
    missing or malformed.
    """
    if not roster:
        raise MissingInput("No register numbers available. Upload or fetch the roster first.")
    if not hall_plan:
        raise MissingInput("No hall plan available. Upload the hall plan first.")
    validate_hall_plan(hall_plan, max_count)
    _check_grid(rows, columns)

    queues = partition(roster, strict=strict)
    cursor = DepartmentCursor(queues)
    halls, skipped = _ordered_halls(hall_plan, hall_order)
    for hall in skipped:
        logger.warning("Hall %s is not in the configured hall order; skipped.", hall)

    plan_halls = []
    shortfalls = []
    for hall in halls:
        dept_slices: Dict[str, List[str]] = OrderedDict()
        for entry in hall_plan[hall]:
            dept = resolve_plan_department(entry["department"], queues.keys())
            requested = entry["students_count"]
            available = min(cursor.remaining(dept), requested)
            dept_slices.setdefault(dept, []).extend(cursor.take_next(dept, requested))
            if available < requested:
                shortfalls.append({
                    "hall": hall, "department": dept,
                    "requested": requested, "available": available,
                })
                logger.warning(
                    "Hall %s: %s requested %d seats but only %d candidates were left.",
                    hall, dept, requested, available,
                )

        benches = compose(dept_slices, policy=policy, solo_single_department=solo_single_department)
        pages = layout(benches, rows, columns, hall=hall)
        if pages:
            plan_halls.append({"hall": hall, "pages": pages})
        logger.info("Hall %s: %d benches over %d page(s).", hall, len(benches), len(pages))

    unseated = cursor.unseated()
    for dept, ids in unseated.items():
        logger.info("%d %s candidates were not given a seat by the hall plan.", len(ids), dept)

    return {
        "halls": plan_halls,
        "rows": rows,
        "columns": columns,
        "policy": policy.value,
        "shortfalls": shortfalls,
        "unseated": unseated,
        "skipped_halls": skipped,
    }


# ---------------------------------------------------------------------------
# Reverse index for seat lookup
# ---------------------------------------------------------------------------

def build_seat_index(plan: Mapping[str, Any]) -> Dict[str, Dict[str, Any]]:
    index = {}
    for hall_entry in plan["halls"]:
        for page in hall_entry["pages"]:
            for bench_row, serial_row in zip(page["grid"], page["serials"]):
                for bench, serial in zip(bench_row, serial_row):
                    for position, reg in enumerate(bench, 1):
                        if reg:
                            index[reg] = {
                                "hall": hall_entry["hall"],
                                "page": page["page"],
                                "seat": serial,
                                "position": position,
                            }
    return index


def lookup_seat(index: Mapping[str, Mapping[str, Any]], reg_no: Any, hall: Optional[str] = None) -> Dict[str, Any]:
    reg = register_value(reg_no)
    found = (index.get(reg) or index.get(reg.upper())) if reg else None
    if found is None or (hall and found["hall"] != hall):
        return {"found": False, "status": "INVALID", "reg_no": reg}
    result = {"found": True, "reg_no": reg}
    result.update(found)
    return result
