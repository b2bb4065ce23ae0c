"""Tests for kernel version parsing and ordering."""

import itertools

import pytest

from errors import ParseError
from versioning.models import SemanticVersion, compare

SAMPLES = [
    "2.6.32",
    "2.6.32.71",
    "4.9.337",
    "5.10.0",
    "5.15",
    "5.15.3",
    "5.15.3-Custom",
    "5.15.3-custom",
    "5.15.3-foo_bar",
    "5.15.3-foo.bar",
    "6.1",
    "6.2-rc1",
    "6.2-rc1-custom",
    "6.2-rc7",
    "6.2",
    "6.10",
]


class TestParsing:
    """Parsing of version strings."""

    def test_keeps_raw_text(self):
        assert str(SemanticVersion("5.15.3")) == "5.15.3"

    def test_strips_whitespace(self):
        assert SemanticVersion(" 5.15.3\n") == SemanticVersion("5.15.3")

    def test_release_components(self):
        assert SemanticVersion("5.15.3").release == (5, 15, 3)

    @pytest.mark.parametrize("bad", ["", "   ", "next-20230101", "linux", "-rc1"])
    def test_malformed_raises(self, bad):
        with pytest.raises(ParseError):
            SemanticVersion(bad)

    def test_non_string_raises(self):
        with pytest.raises(ParseError):
            SemanticVersion(5)

    def test_parse_is_deterministic(self):
        assert SemanticVersion.parse("6.2-rc1") == SemanticVersion.parse("6.2-rc1")

    def test_prerelease_flag(self):
        assert SemanticVersion("6.2-rc1").is_prerelease
        assert not SemanticVersion("6.2").is_prerelease


class TestOrdering:
    """Comparison semantics."""

    def test_numeric_components_compare_numerically(self):
        assert SemanticVersion("6.10") > SemanticVersion("6.9")
        assert SemanticVersion("5.15.3") > SemanticVersion("5.4.250")

    def test_trailing_zero_is_insignificant(self):
        assert SemanticVersion("6.1") == SemanticVersion("6.1.0")
        assert hash(SemanticVersion("6.1")) == hash(SemanticVersion("6.1.0"))

    def test_release_candidates_precede_release(self):
        assert SemanticVersion("6.2-rc1") < SemanticVersion("6.2-rc7") < SemanticVersion("6.2")
        assert SemanticVersion("6.2-rc1") > SemanticVersion("6.1.99")

    def test_suffix_sorts_after_plain_release(self):
        assert SemanticVersion("5.15.3-custom") > SemanticVersion("5.15.3")
        assert SemanticVersion("5.15.3-custom") < SemanticVersion("5.15.4")

    def test_suffixed_release_candidate_stays_a_prerelease(self):
        assert SemanticVersion("6.2-rc1-custom").is_prerelease
        assert (SemanticVersion("6.2-rc1")
                < SemanticVersion("6.2-rc1-custom")
                < SemanticVersion("6.2-rc2")
                < SemanticVersion("6.2"))

    @pytest.mark.parametrize("a,b", [
        ("5.15.3-Custom", "5.15.3-custom"),
        ("5.15.3-foo.bar", "5.15.3-foo_bar"),
    ])
    def test_suffix_spelling_is_significant(self, a, b):
        assert SemanticVersion(a) != SemanticVersion(b)
        assert len({SemanticVersion(a), SemanticVersion(b)}) == 2
        assert SemanticVersion(a) < SemanticVersion(b)

    def test_compare_is_three_way(self):
        assert compare(SemanticVersion("5.10.0"), SemanticVersion("5.15.3")) == -1
        assert compare(SemanticVersion("5.15.3"), SemanticVersion("5.15.3")) == 0
        assert compare(SemanticVersion("5.15.3"), SemanticVersion("5.10.0")) == 1

    def test_exactly_one_relation_holds(self):
        versions = [SemanticVersion(s) for s in SAMPLES]
        for a, b in itertools.product(versions, repeat=2):
            relations = [a < b, a == b, a > b]
            assert relations.count(True) == 1, (a, b)

    def test_order_is_transitive(self):
        versions = [SemanticVersion(s) for s in SAMPLES]
        for a, b, c in itertools.product(versions, repeat=3):
            if a < b and b < c:
                assert a < c, (a, b, c)

    def test_sorting(self):
        ordered = sorted(SemanticVersion(s) for s in ["6.2", "5.10.0", "6.2-rc1", "5.15.3"])
        assert [str(v) for v in ordered] == ["5.10.0", "5.15.3", "6.2-rc1", "6.2"]

    def test_not_equal_to_strings(self):
        assert SemanticVersion("5.15.3") != "5.15.3"
