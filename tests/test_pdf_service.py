from reportlab.platypus import PageBreak, Paragraph, Table

from pdf_service import build_story, generate_seating_pdf
from seating_logic import build_seating_plan


def _plan():
    roster = ["24CS%04d" % i for i in range(1, 7)] + ["24EC0001"]
    hall_plan = {
        "T1": [{"department": "CSE", "students_count": 5}],
        "T2": [{"department": "CSE", "students_count": 1}, {"department": "ECE", "students_count": 1}],
    }
    return build_seating_plan(roster, hall_plan, rows=2, columns=2)


def _texts(story):
    return [f.getPlainText() for f in story if isinstance(f, Paragraph)]


def test_pages_follow_hall_order_without_blank_separators():
    story = build_story(_plan(), "2026-11-02", "2026-11-09")
    tables = [f for f in story if isinstance(f, Table)]
    breaks = [f for f in story if isinstance(f, PageBreak)]
    # T1 needs two pages (5 solo benches, 4 per page), T2 one
    assert len(tables) == 3
    assert len(breaks) == 2
    assert not isinstance(story[-1], PageBreak)
    halls = [t for t in _texts(story) if t.startswith("Hall:")]
    assert halls == ["Hall: T1", "Hall: T1", "Hall: T2"]
    assert "Date: 2026-11-02 to 2026-11-09" in _texts(story)


def test_date_line_needs_both_dates():
    story = build_story(_plan(), "2026-11-02", None)
    assert not any(t.startswith("Date:") for t in _texts(story))


def test_empty_plan_renders_placeholder():
    story = build_story({"halls": []})
    assert _texts(story) == ["No seating to display."]


def test_generate_seating_pdf_returns_pdf_bytes():
    buffer = generate_seating_pdf(_plan())
    assert buffer.read(5) == b"%PDF-"
