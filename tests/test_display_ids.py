from __future__ import annotations

from firdesk.core import display_ids, issue_schema
from firdesk.core.display_ids import (
    find_duplicate_display_ids,
    format_display_id,
    next_display_id,
    parse_display_number,
)
from firdesk.core.issue_model import Issue


def test_next_id_skips_past_the_highest_existing():
    assert next_display_id(["FIR-0001", "FIR-0003"]) == "FIR-0004"


def test_next_id_for_empty_list_is_first():
    assert next_display_id([]) == "FIR-0001"


def test_next_id_accepts_issue_objects():
    issues = [Issue(id="a", display_id="FIR-0009"), Issue(id="b", display_id="FIR-0002")]
    assert next_display_id(issues) == "FIR-0010"


def test_only_leading_digits_after_the_prefix_count():
    assert parse_display_number("FIR-12abc") == 12
    assert parse_display_number("fir-0007") == 7
    assert parse_display_number("FIR-x12") == 0
    assert next_display_id(["FIR-12abc", "FIR-0003"]) == "FIR-0013"


def test_modules_keep_their_docstrings():
    assert display_ids.__doc__ and "allocation" in display_ids.__doc__.lower()
    assert issue_schema.__doc__


def test_unparseable_ids_count_as_zero():
    assert parse_display_number("FIR-abc") == 0
    assert parse_display_number(None) == 0
    assert parse_display_number("") == 0
    assert next_display_id(["garbage", "FIR-"]) == "FIR-0001"


def test_format_pads_to_four_digits_and_grows_beyond():
    assert format_display_id(7) == "FIR-0007"
    assert format_display_id(12345) == "FIR-12345"


def test_duplicates_are_reported_with_counts():
    dupes = find_duplicate_display_ids(["FIR-0001", "FIR-0002", "FIR-0002", "FIR-0002", ""])
    assert dupes == {"FIR-0002": 3}
    assert find_duplicate_display_ids(["FIR-0001", "FIR-0002"]) == {}
