"""Tests for scalar normalizers: text, dates, vote values and hashed ids."""
import sys
import os

# Ensure the ingestion directory is in path so stage modules are importable
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import pytest

from transforms.values import normalize_text, normalize_vote_value, parse_date, sha1_hex


def test_normalize_text_collapses_whitespace():
    assert normalize_text("  Pedro   Sánchez\n Pérez-Castejón ") == "Pedro Sánchez Pérez-Castejón"


def test_normalize_text_none_is_empty():
    assert normalize_text(None) == ""


def test_normalize_text_stringifies_numbers():
    assert normalize_text(15) == "15"


@pytest.mark.parametrize(
    "value, expected",
    [
        ("05/03/2021", "2021-03-05"),
        ("2021-03-05T10:00:00Z", "2021-03-05"),
        ("2021-03-05", "2021-03-05"),
        (" 31/12/2019 ", "2019-12-31"),
    ],
)
def test_parse_date_known_formats(value, expected):
    assert parse_date(value) == expected


def test_parse_date_converts_aware_timestamps_to_utc():
    assert parse_date("2021-03-05T23:30:00-05:00") == "2021-03-06"


@pytest.mark.parametrize("value", ["not-a-date", "", "   ", None])
def test_parse_date_unparseable_is_none(value):
    assert parse_date(value) is None


@pytest.mark.parametrize("value", ["10:00", "03/2021", "Tuesday", "marzo 2021"])
def test_parse_date_incomplete_dates_are_none(value):
    # Missing parts would otherwise be filled from the current date
    assert parse_date(value) is None


@pytest.mark.parametrize(
    "value, expected",
    [
        ("5/3/2021", "2021-03-05"),
        ("17/08/2023 00:00:00", "2023-08-17"),
        ("March 5, 2021", "2021-03-05"),
    ],
)
def test_parse_date_complete_free_form_dates(value, expected):
    assert parse_date(value) == expected


@pytest.mark.parametrize(
    "value, expected",
    [
        ("Sí", "si"),
        ("SI", "si"),
        ("NO", "no"),
        ("No vota", "no"),
        ("Abstención", "abstencion"),
        ("Ausente", "ausente"),
        ("Presente", "presente"),
        ("Pareado", "pareado"),
        ("Sí (no presencial)", "si"),
        ("  Libre   Elección ", "libre_elección"),
        (None, "desconocido"),
        ("", "desconocido"),
    ],
)
def test_normalize_vote_value(value, expected):
    assert normalize_vote_value(value) == expected


def test_sha1_is_deterministic():
    key = "Ana Pastor Julián|Leg15|2023-08-17"
    assert sha1_hex(key) == sha1_hex(key)
    assert len(sha1_hex(key)) == 40
    assert sha1_hex(key) != sha1_hex(key + " ")
