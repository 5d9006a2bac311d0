from io import BytesIO

import pandas as pd
import pytest

from errors import InvalidHallPlan, MissingInput
from hall_plan import parse_hall_plan, rows_to_hall_plan


def _csv(text):
    return BytesIO(text.encode("utf-8"))


def test_csv_keeps_hall_and_department_order():
    plan = parse_hall_plan(_csv(
        "Hall,Department,Students_Count\n"
        "602,CSE,20\n"
        "601,ECE,10\n"
        "602,aiml,5\n"
        ",,\n"
    ), "halls.csv")
    assert list(plan.keys()) == ["602", "601"]
    assert plan["602"] == [
        {"department": "CSE", "students_count": 20},
        {"department": "AIML", "students_count": 5},
    ]
    assert plan["601"] == [{"department": "ECE", "students_count": 10}]


def test_csv_header_aliases():
    plan = parse_hall_plan(_csv("room no,dept,count\nA101,IT,4\n"), "plan.CSV")
    assert plan == {"A101": [{"department": "IT", "students_count": 4}]}


def test_missing_column_is_rejected():
    with pytest.raises(InvalidHallPlan):
        parse_hall_plan(_csv("hall,department\n601,CSE\n"), "halls.csv")


@pytest.mark.parametrize("body", [
    "601,CSE,-3\n",
    "601,CSE,abc\n",
    "601,CSE,2.5\n",
    ",CSE,3\n",
    "601,,3\n",
    "601,CSE,\n",
])
def test_bad_rows_fail_the_upload(body):
    with pytest.raises(InvalidHallPlan):
        parse_hall_plan(_csv("hall,department,students_count\n" + body), "halls.csv")


def test_error_names_the_row():
    with pytest.raises(InvalidHallPlan, match="Row 3"):
        parse_hall_plan(_csv("hall,department,students_count\n601,CSE,1\n601,ECE,-1\n"), "halls.csv")


def test_empty_sheet_is_missing_input():
    with pytest.raises(MissingInput):
        parse_hall_plan(_csv("hall,department,students_count\n"), "halls.csv")


def test_unsupported_extension():
    with pytest.raises(InvalidHallPlan):
        parse_hall_plan(_csv("x"), "halls.pdf")


def test_excel_upload():
    df = pd.DataFrame({
        "Hall": ["A101", "A101", 602],
        "Department": ["CSE", "ECE", "MECH"],
        "Students Count": [10, 12.0, 3],
    })
    buffer = BytesIO()
    df.to_excel(buffer, index=False)
    buffer.seek(0)

    plan = parse_hall_plan(buffer, "halls.xlsx")
    assert plan == {
        "A101": [
            {"department": "CSE", "students_count": 10},
            {"department": "ECE", "students_count": 12},
        ],
        "602": [{"department": "MECH", "students_count": 3}],
    }


def test_rows_to_hall_plan_skips_blank_excel_rows():
    rows = [
        {"hall": "601", "department": "CSE", "students_count": 2.0},
        {"hall": float("nan"), "department": float("nan"), "students_count": float("nan")},
    ]
    assert rows_to_hall_plan(rows) == {"601": [{"department": "CSE", "students_count": 2}]}


def test_count_above_limit_fails_the_upload():
    with pytest.raises(InvalidHallPlan, match="Row 2"):
        parse_hall_plan(_csv("hall,department,students_count\n601,CSE,100000000\n"), "halls.csv")
    with pytest.raises(InvalidHallPlan):
        parse_hall_plan(_csv("hall,department,students_count\n601,CSE,50\n"), "halls.csv", max_count=40)
    plan = parse_hall_plan(_csv("hall,department,students_count\n601,CSE,40\n"), "halls.csv", max_count=40)
    assert plan == {"601": [{"department": "CSE", "students_count": 40}]}
