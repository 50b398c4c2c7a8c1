"""Unit tests — utils/guid.py (fnv1a, guid_for_recording)."""

from __future__ import annotations

import pytest

from tapedeck.utils.guid import fnv1a, guid_for_recording


@pytest.mark.unit
class TestFnv1a:
    def test_empty_string_is_offset_basis(self) -> None:
        assert fnv1a("") == 0x811C9DC5

    def test_reference_vectors(self) -> None:
        assert fnv1a("a") == 0xE40C292C
        assert fnv1a("foobar") == 0xBF9CF968

    def test_fits_in_32_bits(self) -> None:
        assert 0 <= fnv1a("a much longer value with ünicode ✓") <= 0xFFFFFFFF


@pytest.mark.unit
class TestGuidForRecording:
    def test_single_segment(self) -> None:
        assert guid_for_recording("a") == f"a_{0xE40C292C}"

    def test_whitespace_becomes_dash(self) -> None:
        guid = guid_for_recording("create a user")
        assert guid.startswith("create-a-user_")
        assert guid == f"create-a-user_{fnv1a('create a user')}"

    def test_unsafe_characters_dropped(self) -> None:
        guid = guid_for_recording("GET api?x=1")
        assert guid.split("_")[0] == "GET-apix1"

    def test_segments_hashed_independently(self) -> None:
        guid = guid_for_recording("users/create a user")
        first, second = guid.split("/")
        assert first == f"users_{fnv1a('users')}"
        assert second == f"create-a-user_{fnv1a('create a user')}"

    def test_deterministic(self) -> None:
        assert guid_for_recording("users/list") == guid_for_recording("users/list")

    def test_names_equal_after_sanitising_stay_distinct(self) -> None:
        assert guid_for_recording("a b") != guid_for_recording("a-b")
        assert guid_for_recording("a?") != guid_for_recording("a")
