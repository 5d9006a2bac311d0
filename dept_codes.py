from typing import Any, Dict, Iterable, Mapping, Union

UNKNOWN = "UNKNOWN"

# First year register numbers carry a numeric branch code at [6:9]
FIRST_YEAR_CODES: Dict[str, str] = {
    "104": "CSE", "243": "AIDS", "149": "CS", "244": "CSBS",
    "160": "VLSI", "161": "ACT", "106": "ECE", "121": "BME",
    "105": "EEE", "115": "MCT", "114": "MECH", "103": "CIVIL",
    "205": "IT", "148": "AIML",
}

SECOND_YEAR_CODES: Dict[str, str] = {
    "BM": "BME", "CE": "CIVIL", "CS": "CSE", "AM": "AIML",
    "CZ": "CS", "EC": "ECE", "AC": "ACT", "AD": "AIDS",
    "CB": "CSBS", "EE": "EEE", "IT": "IT", "ME": "MECH",
    "MT": "MCT", "VL": "VLSI",
}

THIRD_YEAR_CODES: Dict[str, str] = dict(SECOND_YEAR_CODES)

# Year tag -> code table for the coded admission schemes
CODED_SCHEMES: Dict[str, Dict[str, str]] = {
    "24": SECOND_YEAR_CODES,
    "25": THIRD_YEAR_CODES,
}

FIRST_YEAR_OFFSET = 6
FIRST_YEAR_MIN_LENGTH = 9

_REG_KEY_HINTS = ("reg", "roll", "register")

RegisterRecord = Union[str, Mapping[str, Any], None]


def register_value(record: RegisterRecord) -> str:
    """
    Pull the register number out of an upstream record.
    - Bare strings are stripped and returned.
    - For row mappings, the first key that looks like a registration number
      wins (Reg_No, Roll_No, ...); otherwise the first key. Mongo's '_id'
      is never used.
    """
    if record is None:
        return ""
    if isinstance(record, str):
        return record.strip()
    if isinstance(record, Mapping):
        keys = [k for k in record.keys() if k != "_id"]
        if not keys:
            return ""
        chosen = keys[0]
        for key in keys:
            if any(hint in str(key).lower() for hint in _REG_KEY_HINTS):
                chosen = key
                break
        value = record.get(chosen)
        return "" if value is None else str(value).strip()
    return str(record).strip()


def classify(record: RegisterRecord, strict: bool = True) -> str:
    """
    Map a register number to its department label.

    Coded schemes ('24...', '25...') read the two characters after the year
    tag. Everything else is treated as a first-year number whose branch code
    sits at [6:9]. With strict=False a first-year number shorter than 9
    characters is resolved from whatever part of the code is present.
    Unresolved numbers always come back as UNKNOWN.
    """
    reg = register_value(record)
    if not reg:
        return UNKNOWN

    for tag, table in CODED_SCHEMES.items():
        if reg.startswith(tag):
            return table.get(reg[len(tag):len(tag) + 2], UNKNOWN)

    if len(reg) >= FIRST_YEAR_MIN_LENGTH:
        code = reg[FIRST_YEAR_OFFSET:FIRST_YEAR_OFFSET + 3]
        return FIRST_YEAR_CODES.get(code, UNKNOWN)

    if strict:
        return UNKNOWN
    code = reg[FIRST_YEAR_OFFSET:FIRST_YEAR_OFFSET + 3]
    if not code:
        return UNKNOWN
    return FIRST_YEAR_CODES.get(code, code)


def resolve_plan_department(name: str, labels: Iterable[str] = ()) -> str:
    """
    Hall plans may use a label ('CSE') or a scheme code ('CS', 'AM').
    A name that is already one of the roster's department labels is taken
    as is, so 'CS' stays Cyber Security for a first-year roster; otherwise
    scheme codes are translated to their label.
    """
    name = (name or "").strip().upper()
    if name in set(labels):
        return name
    return SECOND_YEAR_CODES.get(name, name)
