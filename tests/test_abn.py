"""Tests for ABN normalisation and checksum validation."""

import pytest

from riskshield.services.abn import format_abn, is_valid_abn, normalize_abn


@pytest.mark.parametrize("abn", ["51824753556", "51 824 753 556", "53-004-085-616"])
def test_valid_abns(abn):
    assert is_valid_abn(abn)


@pytest.mark.parametrize(
    "abn", ["12345678901", "5182475355", "518247535567", "5182475355X", "", None]
)
def test_invalid_abns(abn):
    assert not is_valid_abn(abn)


def test_normalize_strips_spaces_and_dashes():
    assert normalize_abn(" 51 824-753 556 ") == "51824753556"
    assert normalize_abn(None) == ""


def test_format_groups_digits():
    assert format_abn("51824753556") == "51 824 753 556"
    assert format_abn("123") == "123"
