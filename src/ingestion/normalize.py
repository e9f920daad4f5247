"""
Build the canonical tables from the raw snapshots of a previous run.

Inputs (written by extract_diputados.py / extract_votaciones.py):
  data/diputados.json: raw deputies export
  data/votaciones.json: votes_raw rows

Outputs:
  data/normalized/{deputies,parties,memberships,votes,vote_results}.json
  data/normalized/<table>.parquet: same rows, for the query layer
  Supabase: deputies, parties, deputy_memberships, votes, vote_results

Deputies are normalized first so vote entries that only carry a name can be
matched to a deputy id. Entries that match nothing are dropped; the count is
reported in the summary line.
"""

import json
from dataclasses import dataclass
from pathlib import Path

from config import IngestConfig
from errors import IngestError, ParseError
from extract_diputados import SNAPSHOT_NAME as DIPUTADOS_SNAPSHOT
from extract_votaciones import SNAPSHOT_NAME as VOTACIONES_SNAPSHOT
from persist import SupabaseWriter
from transforms.diputados import DeputyBundle, build_name_lookup, normalize_deputies, unwrap_deputy_list
from transforms.votaciones import VoteBundle, normalize_votes, unwrap_vote_rows
from utils import configure_utf8, load_json, save_json, save_parquet

# snapshot stem -> (destination table, parquet sort columns)
OUTPUTS = {
    "deputies":     ("deputies",           ["id"]),
    "parties":      ("parties",            ["id"]),
    "memberships":  ("deputy_memberships", ["deputy_id", "start_date"]),
    "votes":        ("votes",              ["session_date", "id"]),
    "vote_results": ("vote_results",       ["vote_id", "deputy_id"]),
}


@dataclass
class NormalizeSummary:
    deputies: int
    parties: int
    memberships: int
    votes: int
    vote_results: int
    dropped: int

    def __str__(self) -> str:
        return (
            f"deputies {self.deputies} | parties {self.parties} | "
            f"memberships {self.memberships} | votes {self.votes} | "
            f"vote_results {self.vote_results} | dropped {self.dropped}"
        )


def _read_snapshot(path: Path):
    if not path.exists():
        raise IngestError(f"Snapshot not found: {path} (run the extraction stage first)")
    try:
        return load_json(path)
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise ParseError(str(path), f"corrupt snapshot: {exc}") from exc


def normalize_snapshots(data_dir: Path) -> tuple[DeputyBundle, VoteBundle]:
    """Normalize the raw snapshots in ``data_dir`` (no I/O beyond reading)."""
    deputies = normalize_deputies(unwrap_deputy_list(_read_snapshot(data_dir / DIPUTADOS_SNAPSHOT)))
    name_lookup = build_name_lookup(deputies.deputies)
    votes = normalize_votes(unwrap_vote_rows(_read_snapshot(data_dir / VOTACIONES_SNAPSHOT)), name_lookup)
    return deputies, votes


def extract_all(config: IngestConfig) -> NormalizeSummary:
    deputies, votes = normalize_snapshots(config.data_dir)
    tables = {
        "deputies":     deputies.deputies,
        "parties":      deputies.parties,
        "memberships":  deputies.memberships,
        "votes":        votes.votes,
        "vote_results": votes.vote_results,
    }

    for stem, rows in tables.items():
        _, sort_by = OUTPUTS[stem]
        save_json(config.out_dir / f"{stem}.json", rows)
        save_parquet(rows, config.out_dir / f"{stem}.parquet", sort_by=sort_by, safe_schema=True)

    summary = NormalizeSummary(
        deputies=len(deputies.deputies),
        parties=len(deputies.parties),
        memberships=len(deputies.memberships),
        votes=len(votes.votes),
        vote_results=len(votes.vote_results),
        dropped=votes.dropped,
    )

    if config.dry_run:
        print(f"[normalize] {summary} (dry run)")
        return summary

    # Parents before children so foreign keys resolve on first load
    with SupabaseWriter.from_config(config) as writer:
        for stem, rows in tables.items():
            table, _ = OUTPUTS[stem]
            print(f"[normalize] supabase: {writer.upsert(table, rows)}")
    print(f"[normalize] {summary}")
    return summary


if __name__ == "__main__":
    configure_utf8()
    extract_all(IngestConfig.from_env())
