"""Tests for deputy, party and membership normalization."""
import sys
import os

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from transforms.dedup import dedupe_by
from transforms.diputados import (
    NO_NAME,
    build_name_lookup,
    build_raw_deputies,
    flatten_diputado_raw,
    normalize_deputies,
    party_id_for,
    unwrap_deputy_list,
)
from transforms.values import sha1_hex


def _record(name, legislature="XV", start="17/08/2023", **extra):
    rec = {
        "NOMBRE": name,
        "LEGISLATURA": legislature,
        "FECHAINICIOLEGISLATURA": start,
        "GRUPOPARLAMENTARIO": "Grupo Parlamentario Socialista",
        "CIRCUNSCRIPCION": "Madrid",
    }
    rec.update(extra)
    return rec


def test_end_to_end_three_records_last_duplicate_wins():
    records = [
        _record("María Jesús Montero", SEXO="M", FECHANACIMIENTO="04/02/1966"),
        _record("Santiago Abascal Conde"),
        _record("María Jesús Montero", SEXO="Mujer", FECHANACIMIENTO="04/02/1966",
                LUGARNACIMIENTO="Sevilla"),
    ]
    bundle = normalize_deputies(records)

    assert len(bundle.deputies) == 2
    montero = next(d for d in bundle.deputies if d["full_name"] == "María Jesús Montero")
    assert montero["gender"] == "Mujer"
    assert montero["birthplace"] == "Sevilla"
    assert montero["birth_date"] == "1966-02-04"


def test_raw_rows_dedupe_on_name_legislature_start():
    records = [
        _record("Ana Pastor Julián", PERFIL="uno"),
        _record("Ana Pastor Julián", legislature="XIV"),
        _record("Ana Pastor Julián", PERFIL="dos"),
    ]
    rows = build_raw_deputies(records, "https://example.test/diputados.json")

    assert len(rows) == 2
    assert rows[0]["raw"]["PERFIL"] == "dos"
    assert rows[0]["id"] == sha1_hex("Ana Pastor Julián|XV|2023-08-17")


def test_raw_row_keeps_payload_verbatim_and_defaults_name():
    item = {"LEGISLATURA": "XV", "extra": {"nested": [1, 2]}}
    row = flatten_diputado_raw(item, None)
    assert row["full_name"] == NO_NAME
    assert row["raw"] is item
    assert row["raw"] == {"LEGISLATURA": "XV", "extra": {"nested": [1, 2]}}


def test_raw_row_uses_surname_when_no_name_fields():
    row = flatten_diputado_raw({"APELLIDOS": "  Rufián   Romero "}, None)
    assert row["full_name"] == "Rufián Romero"


def test_deputy_id_prefers_upstream_id():
    bundle = normalize_deputies([_record("Aitor Esteban", IDDIPUTADO=123)])
    assert bundle.deputies[0]["id"] == "123"


def test_deputy_id_hash_of_name_is_stable_across_runs():
    first = normalize_deputies([_record("Yolanda Díaz Pérez")])
    second = normalize_deputies([_record("Yolanda  Díaz Pérez ")])
    assert first.deputies[0]["id"] == second.deputies[0]["id"] == sha1_hex("Yolanda Díaz Pérez")


def test_deputy_without_name_hashes_whole_record():
    a = normalize_deputies([{"SEXO": "H"}]).deputies[0]
    b = normalize_deputies([{"SEXO": "M"}]).deputies[0]
    assert a["full_name"] == NO_NAME
    assert a["id"] != b["id"]


def test_party_and_membership_derived_when_group_present():
    bundle = normalize_deputies([_record("Cuca Gamarra", GRUPOPARLAMENTARIO="Grupo Parlamentario Popular")])

    assert bundle.parties == [
        {
            "id": party_id_for("Grupo Parlamentario Popular"),
            "name": "Grupo Parlamentario Popular",
            "abbreviation": None,
        }
    ]
    membership = bundle.memberships[0]
    deputy_id = bundle.deputies[0]["id"]
    assert membership["deputy_id"] == deputy_id
    assert membership["legislature_id"] == "XV"
    assert membership["constituency"] == "Madrid"
    assert membership["start_date"] == "2023-08-17"
    assert membership["id"] == sha1_hex(
        f"{deputy_id}|XV|{party_id_for('Grupo Parlamentario Popular')}|2023-08-17"
    )


def test_party_id_is_case_insensitive():
    assert party_id_for("Grupo Mixto") == party_id_for("GRUPO MIXTO")


def test_no_party_means_no_membership():
    bundle = normalize_deputies([{"NOMBRE": "Sin Grupo"}])
    assert len(bundle.deputies) == 1
    assert bundle.parties == []
    assert bundle.memberships == []


def test_same_deputy_across_legislatures_has_two_memberships():
    bundle = normalize_deputies([
        _record("Pedro Sánchez", legislature="XIV", start="03/12/2019"),
        _record("Pedro Sánchez", legislature="XV", start="17/08/2023"),
    ])
    assert len(bundle.deputies) == 1
    assert len(bundle.memberships) == 2
    assert len(bundle.parties) == 1


def test_non_dict_items_are_skipped():
    bundle = normalize_deputies(["basura", None, _record("Íñigo Errejón")])
    assert len(bundle.deputies) == 1


def test_unwrap_deputy_list_shapes():
    assert unwrap_deputy_list([{"a": 1}]) == [{"a": 1}]
    assert unwrap_deputy_list({"diputados": [{"a": 1}]}) == [{"a": 1}]
    assert unwrap_deputy_list({"otra": []}) == []
    assert unwrap_deputy_list(None) == []


def test_name_lookup_skips_sentinel_and_normalizes():
    lookup = build_name_lookup([
        {"id": "1", "full_name": "Ana  Pastor"},
        {"id": "2", "full_name": NO_NAME},
    ])
    assert lookup == {"Ana Pastor": "1"}


def test_dedupe_by_last_write_wins_keeps_first_position():
    rows = [{"id": "a", "v": 1}, {"id": "b", "v": 2}, {"id": "a", "v": 3}]
    assert dedupe_by(rows, lambda r: r["id"]) == [{"id": "a", "v": 3}, {"id": "b", "v": 2}]


def test_partial_start_date_gives_stable_membership_id():
    bundle = normalize_deputies([{"NOMBRE": "Néstor Rego Candamil", "LEGISLATURA": "XV",
                                  "GRUPOPARLAMENTARIO": "Grupo Mixto", "FECHAALTA": "03/2021"}])
    membership = bundle.memberships[0]
    assert membership["start_date"] is None
    assert membership["id"] == sha1_hex(
        f"{bundle.deputies[0]['id']}|XV|{party_id_for('Grupo Mixto')}|"
    )
