"""Tests for answer/reference text normalization (F1)."""

import pytest

from tagdrill.core.text_normalizer import NOISE_TOKENS, normalize


class TestNormalizeBasics:
    """Tests for empty input, case and whitespace."""

    def test_empty_and_none(self):
        """Empty or absent input normalizes to empty string."""
        assert normalize(None) == ""
        assert normalize("") == ""
        assert normalize("   ") == ""

    def test_case_insensitive(self):
        """Uppercase and lowercase answers normalize identically."""
        assert normalize("WATER") == normalize("water") == "water"

    def test_spaces_removed(self):
        """Inner spaces are removed, not collapsed."""
        assert normalize("  cooling water ") == "coolingwater"


class TestUnitStripping:
    """Tests for removal of unit abbreviations."""

    def test_kw_with_and_without_space(self):
        """10 KW, 10kw and 10 all compare equal."""
        assert normalize("10 KW") == normalize("10kw") == normalize("10") == "10"

    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("1450 rpm", "1450"),
            ("1450 r/min", "1450"),
            ("120 m3/h", "120"),
            ("120 m3h", "120"),
            ("35 m3", "35"),
            ("6 bar", "6"),
            ("1.6 MPa", "1.6"),
            ("32 m", "32"),
        ],
    )
    def test_units(self, raw, expected):
        """Each documented unit abbreviation is stripped."""
        assert normalize(raw) == expected

    def test_punctuation_full_and_half_width(self):
        """Parentheses, colons and commas of both widths are stripped."""
        assert normalize("（水）") == "水"
        assert normalize("(水)") == "水"
        assert normalize("压力：6") == "压力6"
        assert normalize("1,450") == "1450"
        assert normalize("1，450") == "1450"

    def test_bare_m_removed_everywhere(self):
        """The bare `m` token is removed inside words as well."""
        assert normalize("Pump A") == "pupa"

    def test_noise_order_kw_before_m(self):
        """Token order is fixed: kw is listed before the bare m."""
        assert NOISE_TOKENS.index("kw") < NOISE_TOKENS.index("m")
        assert NOISE_TOKENS.index("m3/h") < NOISE_TOKENS.index("m3")


class TestSeparatorFolding:
    """Tests for range separator folding."""

    def test_range_separators_equivalent(self):
        """Hyphen, tilde and slash ranges normalize identically."""
        assert normalize("10-20") == normalize("10~20") == normalize("10/20") == "10/20"

    def test_full_width_separators(self):
        """Full-width slash, tilde and hyphen fold to the ASCII slash."""
        assert normalize("10／20") == "10/20"
        assert normalize("10～20") == "10/20"
        assert normalize("10－20") == "10/20"

    def test_units_stripped_before_folding(self):
        """Units inside a range are stripped before separators fold."""
        assert normalize("10kw-20kw") == "10/20"


class TestIdempotence:
    """normalize(normalize(x)) == normalize(x)."""

    @pytest.mark.parametrize(
        "raw",
        [
            "10 KW",
            "10-20",
            "Centrifugal Pump A",
            "kkww",
            "10-h",
            "bmar",
            "m\tx",
            "（1.6 MPa）",
            "",
        ],
    )
    def test_idempotent(self, raw):
        """A second pass never changes an already normalized value."""
        once = normalize(raw)
        assert normalize(once) == once

    def test_exposed_tokens_are_stripped(self):
        """Tokens exposed by an earlier removal are stripped too."""
        assert normalize("kkww") == ""
        assert normalize("10-h") == "10"
