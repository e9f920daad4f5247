"""Deputy, party and membership rows from the portal's deputies export.

Two shapes are produced from the same upstream list:

  flatten_diputado_raw(): one ``deputies_raw`` row per record, keyed by
    (name, legislature, start date) and carrying the
    untouched record in ``raw`` for audit/replay.
  normalize_deputies(): canonical ``deputies``, ``parties`` and
    ``deputy_memberships`` rows.

A canonical deputy is identified by the upstream id when the export has one,
otherwise by a hash of the normalized name (so the same person across
legislatures is one deputy with several memberships), and as a last resort by
a hash of the whole record.
"""

import json
from dataclasses import dataclass, field
from typing import Any, TypedDict

from transforms.dedup import by_id, dedupe_by
from transforms.fields import pick
from transforms.values import normalize_text, parse_date, sha1_hex

NO_NAME = "(sin nombre)"


class RawDeputyRow(TypedDict):
    id: str
    full_name: str
    legislature: str | None
    start_date: str | None
    end_date: str | None
    source_url: str | None
    raw: dict[str, Any]


class DeputyRow(TypedDict):
    id: str
    full_name: str
    gender: str | None
    birth_date: str | None
    birthplace: str | None
    profile_url: str | None
    photo_url: str | None


class PartyRow(TypedDict):
    id: str
    name: str
    abbreviation: str | None


class MembershipRow(TypedDict):
    id: str
    deputy_id: str
    legislature_id: str | None
    party_id: str
    constituency: str | None
    start_date: str | None
    end_date: str | None


@dataclass
class DeputyBundle:
    deputies: list[DeputyRow] = field(default_factory=list)
    parties: list[PartyRow] = field(default_factory=list)
    memberships: list[MembershipRow] = field(default_factory=list)


def stable_json(value: Any) -> str:
    """Compact JSON used when a whole record has to be hashed."""
    return json.dumps(value, ensure_ascii=False, separators=(",", ":"))


def unwrap_deputy_list(payload: Any) -> list:
    """The export is usually a bare list; older dumps wrap it in ``diputados``."""
    if isinstance(payload, list):
        return payload
    if isinstance(payload, dict) and isinstance(payload.get("diputados"), list):
        return payload["diputados"]
    return []


def _text_or_none(value) -> str | None:
    return normalize_text(value) or None


# ---------------------------------------------------------------------------
# deputies_raw
# ---------------------------------------------------------------------------


def flatten_diputado_raw(item: dict, source_url: str | None) -> RawDeputyRow:
    """Flatten one export record into a ``deputies_raw`` row."""
    name = normalize_text(pick(item, "raw_deputy_name"))
    if not name:
        # Surname-only records
        name = normalize_text(pick(item, "raw_deputy_surname"))
    legislature = pick(item, "legislature")
    legislature = str(legislature) if legislature is not None else None
    start = parse_date(pick(item, "start_date"))
    return {
        "id":          sha1_hex(f"{name}|{legislature or ''}|{start or ''}"),
        "full_name":   name or NO_NAME,
        "legislature": legislature,
        "start_date":  start,
        "end_date":    parse_date(pick(item, "end_date")),
        "source_url":  source_url,
        "raw":         item,
    }


def build_raw_deputies(items: list, source_url: str | None) -> list[RawDeputyRow]:
    rows = [flatten_diputado_raw(item, source_url) for item in items if isinstance(item, dict)]
    return dedupe_by(rows, by_id)


# ---------------------------------------------------------------------------
# Canonical deputies / parties / memberships
# ---------------------------------------------------------------------------


def deputy_id_for(item: dict) -> str:
    """Upstream id, else hash of the normalized name, else hash of the record."""
    raw_id = pick(item, "deputy_id")
    if raw_id is not None:
        return str(raw_id)
    name = normalize_text(pick(item, "deputy_id_name"))
    return sha1_hex(name or stable_json(item))


def party_id_for(party_name: str) -> str:
    return sha1_hex(party_name.upper())


def flatten_deputado(item: dict) -> DeputyRow:
    """Flatten one export record into a canonical ``deputies`` row."""
    return {
        "id":          deputy_id_for(item),
        "full_name":   normalize_text(pick(item, "deputy_name")) or NO_NAME,
        "gender":      _text_or_none(pick(item, "gender")),
        "birth_date":  parse_date(pick(item, "birth_date")),
        "birthplace":  _text_or_none(pick(item, "birthplace")),
        "profile_url": _text_or_none(pick(item, "profile_url")),
        "photo_url":   _text_or_none(pick(item, "photo_url")),
    }


def flatten_membership(item: dict, deputy_id: str, party_id: str) -> MembershipRow:
    """One deputy's affiliation interval, identified by its own key hash."""
    legislature = normalize_text(pick(item, "legislature"))
    start = parse_date(pick(item, "start_date"))
    return {
        "id":             sha1_hex(f"{deputy_id}|{legislature}|{party_id}|{start or ''}"),
        "deputy_id":      deputy_id,
        "legislature_id": legislature or None,
        "party_id":       party_id,
        "constituency":   _text_or_none(pick(item, "constituency")),
        "start_date":     start,
        "end_date":       parse_date(pick(item, "end_date")),
    }


def normalize_deputies(items: list) -> DeputyBundle:
    """Build deduplicated deputies, parties and memberships from raw records.

    Records without a party yield a deputy only. Every collection is
    deduplicated by id with the later record winning.
    """
    deputies: list[DeputyRow] = []
    parties: list[PartyRow] = []
    memberships: list[MembershipRow] = []

    for item in items:
        if not isinstance(item, dict):
            continue
        deputy = flatten_deputado(item)
        deputies.append(deputy)

        party_name = normalize_text(pick(item, "party"))
        if party_name:
            party_id = party_id_for(party_name)
            parties.append({"id": party_id, "name": party_name, "abbreviation": None})
            memberships.append(flatten_membership(item, deputy["id"], party_id))

    return DeputyBundle(
        deputies=dedupe_by(deputies, by_id),
        parties=dedupe_by(parties, by_id),
        memberships=dedupe_by(memberships, by_id),
    )


def build_name_lookup(deputies: list[DeputyRow]) -> dict[str, str]:
    """Normalized full name -> deputy id, used to resolve vote entries by name."""
    lookup: dict[str, str] = {}
    for deputy in deputies:
        name = normalize_text(deputy["full_name"])
        if name and name != NO_NAME:
            lookup[name] = deputy["id"]
    return lookup
