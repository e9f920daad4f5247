"""Field extraction over upstream records whose shape is not fixed.

Field names differ between legislatures and between sources (``NOMBRE`` vs
``nombre`` vs ``nombreCompleto``; ``ID_DIPUTADO`` vs ``idDiputado``), and the
per-deputy vote list sits at different depths depending on the export
version. Instead of probing ad hoc, every canonical field is declared once in
``FIELDS`` as an ordered tuple of candidate paths. The order is the priority
policy: ``pick_first`` returns the first candidate that holds a value, no
matter how keys are ordered in the record itself.
"""

from typing import Any, Mapping, Sequence

Path = tuple[str, ...]


def _paths(*dotted: str) -> tuple[Path, ...]:
    """``"expediente.titulo"`` -> ``("expediente", "titulo")``."""
    return tuple(tuple(d.split(".")) for d in dotted)


FIELDS: dict[str, tuple[Path, ...]] = {
    # ---- deputies ----
    "deputy_id": _paths(
        "ID_DIPUTADO", "IDDIPUTADO", "idDiputado", "ID", "id", "IDPERSONA", "idPersona",
    ),
    # Name used to hash a deputy id when no upstream id exists
    "deputy_id_name": _paths(
        "NOMBRE", "NOMBRECOMPLETO", "NOMBREYAPELLIDOS", "APELLIDOS",
        "nombre", "nombreCompleto", "nombreyapellidos",
    ),
    "deputy_name": _paths(
        "NOMBRECOMPLETO", "NOMBREYAPELLIDOS", "NOMBRE", "APELLIDOS",
        "nombreCompleto", "nombreyapellidos", "nombre", "apellidos",
    ),
    "party": _paths(
        "GRUPO", "GRUPOPARLAMENTARIO", "GRUP_PARL", "PARTIDO",
        "grupo", "grupoParlamentario", "partido",
    ),
    "legislature":   _paths("LEGISLATURA", "legislatura", "Legislatura", "LEG", "leg"),
    "start_date":    _paths("FECHAINICIOLEGISLATURA", "FECHAINICIO", "FECHAALTA"),
    "end_date":      _paths("FECHAFINLEGISLATURA", "FECHAFIN", "FECHABAJA"),
    "birth_date":    _paths("FECHANACIMIENTO", "fechaNacimiento", "NACIMIENTO"),
    "birthplace":    _paths("LUGARNACIMIENTO", "lugarNacimiento"),
    "gender":        _paths("SEXO", "sexo"),
    "photo_url":     _paths("FOTO", "FOTOURL", "foto", "fotoUrl"),
    "profile_url":   _paths("URL", "url", "PERFIL"),
    "constituency":  _paths("CIRCUNSCRIPCION", "circunscripcion"),
    # Raw deputy snapshot rows (deputies_raw) name their deputy this way
    "raw_deputy_name":    _paths("NOMBRE", "NOMBRECOMPLETO", "NOMBREYAPELLIDOS"),
    "raw_deputy_surname": _paths("APELLIDOS"),
    # ---- votes ----
    "vote_id":   _paths("ID", "id", "IDVOTACION", "idVotacion"),
    "vote_date": _paths("FECHA", "fecha", "FECHAVOTACION", "fechaVotacion"),
    "vote_title": _paths(
        "TITULO", "TITULOEXPEDIENTE", "ASUNTO", "DESCRIPCION",
        "descripcion", "titulo", "expediente.titulo",
    ),
    "vote_summary":    _paths("RESUMEN", "resumen", "OBSERVACIONES", "observaciones"),
    "vote_initiative": _paths("IDEXPEDIENTE", "idExpediente", "EXPEDIENTE", "expediente"),
    "vote_result":     _paths("RESULTADO", "resultado", "ACUERDO", "acuerdo"),
    # ---- individual vote entries ----
    "entry_deputy_id": _paths("ID_DIPUTADO", "IDDIPUTADO", "idDiputado", "id", "ID"),
    "entry_deputy_name": _paths(
        "NOMBRE", "APELLIDOS", "NOMBRECOMPLETO", "NOMBREYAPELLIDOS",
        "nombre", "apellidos", "nombreCompleto", "nombreyapellidos",
        "DIPUTADO", "diputado",
    ),
    "entry_vote_value": _paths(
        "VOTO", "VOTACION", "voto", "votacion", "VOTO_TEXTO", "votoTexto",
        "DECISION", "decision",
    ),
}

# Keys under which the per-deputy vote list may appear
VOTE_ENTRY_KEYS = (
    "VOTOS", "VOTANTES", "votos", "votantes", "DIPUTADOS", "diputados",
    "VOTACIONINDIVIDUAL", "votacionIndividual",
)
# Last resort when none of VOTE_ENTRY_KEYS holds a list
VOTE_ENTRY_FALLBACK_KEYS = ("votacion", "VOTACION")


def get_path(record: Any, path: Sequence[str]) -> Any:
    """Walk ``path`` through nested mappings; ``None`` if any step is missing."""
    current = record
    for key in path:
        if not isinstance(current, Mapping) or key not in current:
            return None
        current = current[key]
    return current


def pick_first(record: Any, paths: Sequence[Sequence[str]]) -> Any:
    """Value at the first candidate path that is neither ``None`` nor ``""``."""
    for path in paths:
        value = get_path(record, path)
        if value is not None and value != "":
            return value
    return None


def pick(record: Any, field: str) -> Any:
    """``pick_first`` using the declared candidates for ``field``."""
    return pick_first(record, FIELDS[field])


def find_array(record: Any, keys: Sequence[str]) -> list | None:
    """Find a list under one of ``keys``, at the top level or one level down.

    Top-level keys win. Otherwise each mapping-valued top-level field is
    searched in record order, trying ``keys`` in order inside it.
    """
    if not isinstance(record, Mapping):
        return None
    for key in keys:
        if isinstance(record.get(key), list):
            return record[key]
    for value in record.values():
        if isinstance(value, Mapping):
            for key in keys:
                if isinstance(value.get(key), list):
                    return value[key]
    return None


def extract_vote_entries(raw: Any) -> list:
    """Return the per-deputy vote entries of one vote payload (``[]`` if none)."""
    entries = find_array(raw, VOTE_ENTRY_KEYS)
    if entries is not None:
        return entries
    if isinstance(raw, Mapping):
        for key in VOTE_ENTRY_FALLBACK_KEYS:
            if isinstance(raw.get(key), list):
                return raw[key]
    return []
