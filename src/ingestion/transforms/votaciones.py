"""Vote and vote-result rows from the official per-vote JSON files.

  flatten_votacion_raw(): one ``votes_raw`` row per fetched JSON file
  normalize_votes(): canonical ``votes`` and ``vote_results`` rows

Each vote file holds session metadata plus a list of individual votes whose
location and field names vary between legislatures (see transforms.fields).
An individual vote is kept only if its deputy can be resolved, by the id in
the entry or by exact match of the normalized name against the deputies
built earlier in the run. Unresolved entries are dropped and counted in
``VoteBundle.dropped``.
"""

from dataclasses import dataclass, field
from typing import Any, Mapping, TypedDict

from crawler import vote_meta_from_url
from transforms.dedup import by_id, dedupe_by
from transforms.diputados import party_id_for, stable_json
from transforms.fields import extract_vote_entries, pick
from transforms.values import normalize_text, normalize_vote_value, parse_date, sha1_hex


class RawVoteRow(TypedDict):
    id: str
    legislature: str | None
    session_date: str | None
    source_url: str
    raw: Any


class VoteRow(TypedDict):
    id: str
    legislature_id: str | None
    session_date: str | None
    title: str | None
    summary: str | None
    initiative_id: str | None
    result: str | None


class VoteResultRow(TypedDict):
    vote_id: str
    deputy_id: str
    party_id: str | None
    vote_value: str


@dataclass
class VoteBundle:
    votes: list[VoteRow] = field(default_factory=list)
    vote_results: list[VoteResultRow] = field(default_factory=list)
    dropped: int = 0


def vote_result_key(row: VoteResultRow) -> tuple[str, str]:
    return (row["vote_id"], row["deputy_id"])


def flatten_votacion_raw(url: str, raw: Any) -> RawVoteRow:
    """Wrap one fetched vote file as a ``votes_raw`` row.

    The id comes from the official URL, so the same vote reached through the
    portal or through the mirror gets the same id.
    """
    meta = vote_meta_from_url(url)
    return {
        "id":           meta.id or sha1_hex(url),
        "legislature":  meta.legislature,
        "session_date": meta.session_date,
        "source_url":   url,
        "raw":          raw,
    }


def unwrap_vote_rows(payload: Any) -> list:
    """Vote snapshots are a list of rows; older dumps wrap it in ``votaciones``."""
    if isinstance(payload, list):
        return payload
    if isinstance(payload, dict) and isinstance(payload.get("votaciones"), list):
        return payload["votaciones"]
    return []


def _vote_id(row: Mapping, raw: Any) -> str:
    explicit = row.get("id")
    if explicit in (None, ""):
        explicit = pick(raw, "vote_id")
    if explicit in (None, ""):
        return sha1_hex(stable_json(raw))
    return str(explicit)


def _scalar_text(value: Any) -> str | None:
    """Text of a scalar field; objects and lists (e.g. a nested ``expediente``) give ``None``."""
    if isinstance(value, bool) or not isinstance(value, (str, int, float)):
        return None
    return normalize_text(value) or None


def flatten_votacion(row: Mapping, raw: Any, vote_id: str) -> VoteRow:
    """Session-level fields; the snapshot row's own fields win over the payload's."""
    legislature = row.get("legislature") or normalize_text(pick(raw, "legislature"))
    session_date = row.get("session_date") or parse_date(pick(raw, "vote_date"))
    initiative = pick(raw, "vote_initiative")
    return {
        "id":             vote_id,
        "legislature_id": legislature or None,
        "session_date":   session_date,
        "title":          normalize_text(pick(raw, "vote_title")) or None,
        "summary":        normalize_text(pick(raw, "vote_summary")) or None,
        "initiative_id":  _scalar_text(initiative),
        "result":         normalize_text(pick(raw, "vote_result")) or None,
    }


def flatten_vote_result(
    vote_id: str, entry: Any, name_lookup: Mapping[str, str]
) -> VoteResultRow | None:
    """One deputy's vote, or ``None`` when the deputy cannot be resolved."""
    explicit = pick(entry, "entry_deputy_id")
    if explicit is not None:
        deputy_id = str(explicit)
    else:
        deputy_id = name_lookup.get(normalize_text(pick(entry, "entry_deputy_name")))
    if not deputy_id:
        return None

    party_name = normalize_text(pick(entry, "party"))
    return {
        "vote_id":    vote_id,
        "deputy_id":  deputy_id,
        "party_id":   party_id_for(party_name) if party_name else None,
        "vote_value": normalize_vote_value(pick(entry, "entry_vote_value")),
    }


def normalize_votes(rows: list, name_lookup: Mapping[str, str]) -> VoteBundle:
    """Build deduplicated votes and vote results from ``votes_raw`` rows.

    Rows may be snapshot rows (``{"id", "legislature", ..., "raw"}``) or bare
    upstream payloads.
    """
    votes: list[VoteRow] = []
    results: list[VoteResultRow] = []
    dropped = 0

    for row in rows:
        if not isinstance(row, Mapping):
            continue
        raw = row["raw"] if row.get("raw") is not None else row
        vote_id = _vote_id(row, raw)
        votes.append(flatten_votacion(row, raw, vote_id))

        for entry in extract_vote_entries(raw):
            result = flatten_vote_result(vote_id, entry, name_lookup)
            if result is None:
                dropped += 1
                continue
            results.append(result)

    return VoteBundle(
        votes=dedupe_by(votes, by_id),
        vote_results=dedupe_by(results, vote_result_key),
        dropped=dropped,
    )
