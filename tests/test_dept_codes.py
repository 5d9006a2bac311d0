from dept_codes import UNKNOWN, classify, register_value, resolve_plan_department


def test_second_and_third_year_codes():
    assert classify("24CS0001") == "CSE"
    assert classify("24AM0001") == "AIML"
    assert classify("25CZ0042") == "CS"
    assert classify("25EC0100") == "ECE"


def test_coded_scheme_with_unknown_code():
    assert classify("24XX0001") == UNKNOWN


def test_first_year_code_at_fixed_offset():
    assert classify("711723104001") == "CSE"
    assert classify("711723148017") == "AIML"
    assert classify("711723999001") == UNKNOWN


def test_first_year_short_id_strict():
    assert classify("7117231") == UNKNOWN
    assert classify("71172") == UNKNOWN


def test_first_year_short_id_lenient():
    # Only "10" survives at [6:9]; not in the table, so the raw code is used
    assert classify("71172310", strict=False) == "10"
    # Nothing at the offset at all
    assert classify("71172", strict=False) == UNKNOWN
    # Long ids behave the same in both modes
    assert classify("711723104001", strict=False) == "CSE"
    assert classify("711723999001", strict=False) == UNKNOWN


def test_blank_and_none_are_unknown():
    assert classify("") == UNKNOWN
    assert classify("   ") == UNKNOWN
    assert classify(None) == UNKNOWN


def test_register_value_prefers_registration_keys():
    assert register_value({"name": "ASHA", "Reg_No": " 24CS0001 "}) == "24CS0001"
    assert register_value({"Roll_No": "24CS0002"}) == "24CS0002"
    assert register_value({"_id": 7, "value": "24CS0003"}) == "24CS0003"
    assert register_value({"Reg_No": None}) == ""
    assert register_value({}) == ""


def test_classify_accepts_row_objects():
    assert classify({"Roll_No": "24CS0001"}) == "CSE"


def test_reclassifying_is_stable():
    ids = ["24CS0001", "711723104001", "24ZZ0001", "abc"]
    first = [classify(i) for i in ids]
    for _ in range(3):
        assert [classify(i) for i in ids] == first


def test_resolve_plan_department():
    assert resolve_plan_department("CS") == "CSE"
    assert resolve_plan_department("am") == "AIML"
    assert resolve_plan_department("AIML") == "AIML"
    assert resolve_plan_department(" cse ") == "CSE"
    assert resolve_plan_department("CZ") == "CS"


def test_resolve_plan_department_prefers_roster_labels():
    # First-year rosters bucket code 149 as "CS", so "CS" must stay literal
    assert resolve_plan_department("CS", ["CS", "CSE"]) == "CS"
    assert resolve_plan_department("cs", {"CS": [], "ECE": []}) == "CS"
    # Without a "CS" bucket the scheme code still maps to CSE
    assert resolve_plan_department("CS", ["CSE", "AIML"]) == "CSE"
