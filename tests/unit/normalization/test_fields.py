import math

import pytest

from edge_dashboard.normalization.fields import (
    get_path,
    pick,
    pick_dict,
    pick_int,
    pick_list,
    pick_str,
    to_number,
)

CANDIDATES = ("SiteId", "siteId", "Id")


class TestPick:
    @pytest.mark.parametrize("present", CANDIDATES)
    def test_single_present_candidate_wins_regardless_of_position(self, present):
        assert pick({present: "s-1"}, *CANDIDATES) == "s-1"

    def test_earlier_candidate_has_priority(self):
        assert pick({"Id": "late", "siteId": "early"}, *CANDIDATES) == "early"

    def test_null_is_skipped(self):
        assert pick({"SiteId": None, "Id": "x"}, *CANDIDATES) == "x"

    def test_falsy_values_are_kept(self):
        assert pick({"SiteId": 0, "Id": 7}, *CANDIDATES) == 0
        assert pick({"SiteId": "", "Id": "x"}, *CANDIDATES) == ""

    def test_default(self):
        assert pick({}, *CANDIDATES, default="none") == "none"

    def test_non_mapping_input(self):
        assert pick(["garbage"], *CANDIDATES) is None
        assert pick(None, *CANDIDATES) is None


def test_get_path_indexes_lists():
    doc = {"data": {"viewer": {"zones": [{"groups": [1, 2]}]}}}
    assert get_path(doc, "data.viewer.zones.0.groups") == [1, 2]
    assert get_path(doc, "data.viewer.zones.3.groups") is None
    assert get_path(doc, "data.viewer.missing") is None


class TestToNumber:
    @pytest.mark.parametrize(
        "raw, expected",
        [
            (None, 0),
            ("12", 12),
            ("1.5", 1.5),
            ("abc", 0),
            (-4, 0),
            (3.0, 3),
            (math.nan, 0),
            (math.inf, 0),
            ({"x": 1}, 0),
        ],
    )
    def test_coercion(self, raw, expected):
        assert to_number(raw) == expected

    def test_integral_float_becomes_int(self):
        assert isinstance(to_number(3.0), int)


def test_typed_helpers():
    record = {"Count": "42", "Name": 5, "Nested": {"Site": [1, 2]}, "Items": {"a": 1}}

    assert pick_int(record, "Count") == 42
    assert pick_str(record, "Name") == "5"
    assert pick_str(record, "Items", default="-") == "-"
    assert pick_list(record, "Nested", "Nested.Site") == [1, 2]
    assert pick_list(record, "Missing") == []
    assert pick_dict(record, "Nested.Site", "Items") == {"a": 1}
