"""Tests for version parsing and transition classification."""

from __future__ import annotations

import pytest

from cluster_upgrade_gate.versions import (
    InvalidVersionError,
    compare,
    effective_minor,
    is_minor_bump,
    is_patch_only,
    parse,
)


class TestParse:
    def test_full_version(self) -> None:
        v = parse("4.14.15")
        assert (v.major, v.minor, v.patch) == (4, 14, 15)

    def test_missing_patch_defaults_to_zero(self) -> None:
        v = parse("4.1")
        assert (v.major, v.minor, v.patch) == (4, 1, 0)

    def test_leading_v_and_whitespace(self) -> None:
        assert parse(" v4.7.2 ") == parse("4.7.2")

    def test_prerelease_and_build(self) -> None:
        v = parse("4.16.0-rc.3+abc123")
        assert v.prerelease == "rc.3"
        assert v.build == "abc123"

    @pytest.mark.parametrize("raw", ["", "   ", "v", "something@very-differe", "4.7.12.3", "four.one", "V4.7.2"])
    def test_invalid_strings_raise(self, raw: str) -> None:
        with pytest.raises(InvalidVersionError, match="Invalid version"):
            parse(raw)

    def test_invalid_version_error_is_value_error(self) -> None:
        with pytest.raises(ValueError):
            parse("not-a-version")


class TestCompare:
    def test_ordering(self) -> None:
        assert compare(parse("4.1.3"), parse("4.1.4")) == -1
        assert compare(parse("4.2.0"), parse("4.1.9")) == 1
        assert compare(parse("4.1"), parse("4.1.0")) == 0

    def test_prerelease_sorts_before_release(self) -> None:
        assert compare(parse("4.16.0-rc.1"), parse("4.16.0")) == -1

    def test_build_metadata_ignored(self) -> None:
        assert compare(parse("4.16.0+build.1"), parse("4.16.0+build.2")) == 0


class TestClassification:
    def test_minor_bump_forward_and_backward(self) -> None:
        assert is_minor_bump(parse("4.1.0"), parse("4.2.0")) is True
        assert is_minor_bump(parse("4.2.0"), parse("4.1.0")) is True

    def test_major_change_is_not_minor_bump(self) -> None:
        assert is_minor_bump(parse("4.1.0"), parse("5.2.0")) is False

    def test_patch_only_includes_downgrade(self) -> None:
        assert is_patch_only(parse("4.1.3"), parse("4.1.4")) is True
        assert is_patch_only(parse("4.1.4"), parse("4.1.3")) is True

    def test_patch_only_requires_same_major(self) -> None:
        assert is_patch_only(parse("4.1.3"), parse("5.1.3")) is False


class TestEffectiveMinor:
    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("", ""),
            ("something@very-differe", ""),
            ("v4.7.12.3+foo", "7"),
            ("v4.7", "7"),
            ("4", ""),
        ],
    )
    def test_effective_minor(self, raw: str, expected: str) -> None:
        assert effective_minor(raw) == expected
