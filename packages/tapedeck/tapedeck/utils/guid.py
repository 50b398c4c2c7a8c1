"""Deterministic recording identifiers.

A recording name such as ``"users/create a user"`` maps to
``"users_<hash>/create-a-user_<hash>"``: every ``/``-separated segment is
sanitised for use as a path component and suffixed with the 32-bit FNV-1a
hash of the raw segment, so distinct names stay distinct after sanitising.
"""

from __future__ import annotations

import re

_FNV_OFFSET_BASIS = 0x811C9DC5
_FNV_PRIME = 0x01000193

_WHITESPACE = re.compile(r"\s+")
_UNSAFE = re.compile(r"[^a-zA-Z0-9\-]")


def fnv1a(value: str) -> int:
    """Return the 32-bit FNV-1a hash of the UTF-8 encoding of *value*."""
    h = _FNV_OFFSET_BASIS
    for byte in value.encode("utf-8"):
        h ^= byte
        h = (h * _FNV_PRIME) & 0xFFFFFFFF
    return h


def _sanitize(segment: str) -> str:
    return _UNSAFE.sub("", _WHITESPACE.sub("-", segment.strip()))


def guid_for_recording(name: str) -> str:
    return "/".join(
        f"{_sanitize(segment)}_{fnv1a(segment)}" for segment in (name or "").split("/")
    )
