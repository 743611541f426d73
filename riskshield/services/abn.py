"""Australian Business Number helpers."""

from __future__ import annotations

import re

_ABN_WEIGHTS = (10, 1, 3, 5, 7, 9, 11, 13, 15, 17, 19)
_NON_DIGITS = re.compile(r"[\s-]")


def normalize_abn(value: str | None) -> str:
    """Strip spaces and dashes: ``"51 824 753 556"`` → ``"51824753556"``."""
    return _NON_DIGITS.sub("", value or "")


def is_valid_abn(value: str | None) -> bool:
    """11 digits passing the ABR weighted mod-89 checksum."""
    abn = normalize_abn(value)
    if len(abn) != 11 or not abn.isdigit():
        return False
    digits = [int(ch) for ch in abn]
    digits[0] -= 1
    return sum(d * w for d, w in zip(digits, _ABN_WEIGHTS)) % 89 == 0


def format_abn(value: str | None) -> str:
    """Group a valid-length ABN as ``51 824 753 556``; anything else is returned stripped."""
    abn = normalize_abn(value)
    if len(abn) != 11:
        return abn
    return f"{abn[:2]} {abn[2:5]} {abn[5:8]} {abn[8:]}"
