"""Tests for the deterministic hash source."""

import pytest

from campaign_sim.domain.hash_source import (
    derive_seed,
    fnv1a_32,
    roll_percent,
    unit_interval,
    variance_points,
)


class TestFnv1a:
    @pytest.mark.parametrize(
        "seed, expected",
        [("", 0x811C9DC5), ("a", 0xE40C292C), ("foobar", 0xBF9CF968)],
    )
    def test_known_vectors(self, seed, expected):
        assert fnv1a_32(seed) == expected

    def test_same_seed_same_hash(self):
        assert fnv1a_32("candidate-a-election-1") == fnv1a_32("candidate-a-election-1")

    def test_fits_in_32_bits(self):
        for seed in ["x" * 500, "ünïcödé", "candidate-a-election-99"]:
            assert 0 <= fnv1a_32(seed) <= 0xFFFFFFFF

    def test_purpose_tag_changes_the_hash(self):
        assert fnv1a_32(derive_seed("s", "election", 1)) != fnv1a_32(derive_seed("s", "negative-ad", 1))


class TestDerivedValues:
    def test_derive_seed_format(self):
        assert derive_seed("abc", "election", 3) == "abc-election-3"

    def test_roll_is_hash_mod_100(self):
        assert roll_percent(1340) == 40
        assert roll_percent(99) == 99

    def test_variance_range(self):
        assert variance_points(0) == pytest.approx(-5.0)
        assert variance_points(300) == pytest.approx(-2.0)
        assert variance_points(500) == pytest.approx(0.0)
        assert variance_points(999) == pytest.approx(4.99)

    def test_unit_interval(self):
        assert unit_interval(0) == 0.0
        assert unit_interval(12345) == pytest.approx(0.2345)
        assert unit_interval(9999) < 1.0
