"""Tests for vote and vote-result normalization."""
import sys
import os

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from transforms.diputados import party_id_for, stable_json
from transforms.values import sha1_hex
from transforms.votaciones import flatten_votacion_raw, normalize_votes, unwrap_vote_rows

VOTE_URL = (
    "https://www.congreso.es/webpublica/opendata/votaciones/"
    "Leg15/Sesion12/20240215/Votacion003/VOT_20240215120000.json"
)


def _payload():
    return {
        "informacion": {
            "sesion": 12,
            "titulo": "no se usa: el título va en la raíz",
        },
        "TITULO": "  Proyecto de Ley   de Amnistía ",
        "RESULTADO": "Aprobado",
        "IDEXPEDIENTE": 121000001,
        "votaciones": {
            "votos": [
                {"diputado": "Montero Cuadrado, María Jesús", "grupo": "GS", "voto": "Sí"},
                {"idDiputado": 77, "voto": "No"},
                {"diputado": "Desconocido, Fulano", "voto": "Sí"},
                {"diputado": "Gamarra Ruiz-Clavijo, Concepción", "voto": "No vota"},
            ]
        },
    }


NAME_LOOKUP = {
    "Montero Cuadrado, María Jesús": "dep-montero",
    "Gamarra Ruiz-Clavijo, Concepción": "dep-gamarra",
}


def test_raw_row_meta_from_official_url():
    row = flatten_votacion_raw(VOTE_URL, {"x": 1})
    assert row == {
        "id": "VOT_20240215120000",
        "legislature": "Leg15",
        "session_date": "2024-02-15",
        "source_url": VOTE_URL,
        "raw": {"x": 1},
    }


def test_vote_fields_from_snapshot_row_and_payload():
    bundle = normalize_votes([flatten_votacion_raw(VOTE_URL, _payload())], NAME_LOOKUP)

    assert bundle.votes == [
        {
            "id": "VOT_20240215120000",
            "legislature_id": "Leg15",
            "session_date": "2024-02-15",
            "title": "Proyecto de Ley de Amnistía",
            "summary": None,
            "initiative_id": "121000001",
            "result": "Aprobado",
        }
    ]


def test_vote_results_resolve_by_id_or_name():
    bundle = normalize_votes([flatten_votacion_raw(VOTE_URL, _payload())], NAME_LOOKUP)
    by_deputy = {r["deputy_id"]: r for r in bundle.vote_results}

    assert set(by_deputy) == {"dep-montero", "77", "dep-gamarra"}
    assert by_deputy["dep-montero"]["vote_value"] == "si"
    assert by_deputy["dep-montero"]["party_id"] == party_id_for("GS")
    assert by_deputy["77"]["vote_value"] == "no"
    assert by_deputy["77"]["party_id"] is None
    assert by_deputy["dep-gamarra"]["vote_value"] == "no"


def test_unresolved_entry_is_dropped_and_counted():
    raw = {"ID": "v1", "votos": [{"nombre": "Nadie Conocido", "voto": "Sí"}]}
    bundle = normalize_votes([raw], NAME_LOOKUP)

    assert len(bundle.votes) == 1
    assert bundle.vote_results == []
    assert bundle.dropped == 1


def test_bare_payload_uses_payload_fields():
    raw = {"idVotacion": 991, "fecha": "05/03/2021", "legislatura": "XIV", "votos": []}
    vote = normalize_votes([raw], {}).votes[0]
    assert vote["id"] == "991"
    assert vote["session_date"] == "2021-03-05"
    assert vote["legislature_id"] == "XIV"


def test_nested_expediente_is_not_an_initiative_id():
    raw = {"ID": "v2", "expediente": {"titulo": "Moción sobre vivienda", "numero": 7}, "votos": []}
    vote = normalize_votes([raw], {}).votes[0]
    assert vote["title"] == "Moción sobre vivienda"
    assert vote["initiative_id"] is None


def test_scalar_expediente_is_kept_as_text():
    vote = normalize_votes([{"ID": "v3", "expediente": " 162/000123 ", "votos": []}], {}).votes[0]
    assert vote["initiative_id"] == "162/000123"


def test_vote_without_any_id_hashes_payload():
    raw = {"TITULO": "Moción", "votos": []}
    first = normalize_votes([raw], {}).votes[0]
    second = normalize_votes([dict(raw)], {}).votes[0]
    assert first["id"] == second["id"] == sha1_hex(stable_json(raw))


def test_duplicate_votes_and_results_last_write_wins():
    row_a = flatten_votacion_raw(VOTE_URL, {"RESULTADO": "Rechazado", "votos": [{"id": "d1", "voto": "No"}]})
    row_b = flatten_votacion_raw(VOTE_URL, {"RESULTADO": "Aprobado", "votos": [{"id": "d1", "voto": "Sí"}]})
    bundle = normalize_votes([row_a, row_b], {})

    assert len(bundle.votes) == 1
    assert bundle.votes[0]["result"] == "Aprobado"
    assert bundle.vote_results == [
        {"vote_id": "VOT_20240215120000", "deputy_id": "d1", "party_id": None, "vote_value": "si"}
    ]


def test_normalizing_twice_is_identical():
    rows = [flatten_votacion_raw(VOTE_URL, _payload())]
    first = normalize_votes(rows, NAME_LOOKUP)
    second = normalize_votes(rows, NAME_LOOKUP)
    assert first.votes == second.votes
    assert first.vote_results == second.vote_results


def test_raw_payload_is_not_mutated():
    payload = _payload()
    snapshot = stable_json(payload)
    normalize_votes([flatten_votacion_raw(VOTE_URL, payload)], NAME_LOOKUP)
    assert stable_json(payload) == snapshot


def test_unwrap_vote_rows_shapes():
    assert unwrap_vote_rows([{"id": 1}]) == [{"id": 1}]
    assert unwrap_vote_rows({"votaciones": [{"id": 1}]}) == [{"id": 1}]
    assert unwrap_vote_rows("x") == []
