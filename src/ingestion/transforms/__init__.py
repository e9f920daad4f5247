"""
Pure transformation functions for the Congreso data domains.

Re-exports the public functions so callers can import from the top-level
package without knowing which submodule a function lives in:

    from transforms import normalize_deputies, normalize_votes
    # equivalent to:
    from transforms.diputados import normalize_deputies
    from transforms.votaciones import normalize_votes

Each submodule contains only dict-in / dict-out code: no HTTP, no files.
"""

from .values import sha1_hex, normalize_text, parse_date, normalize_vote_value
from .fields import FIELDS, pick, pick_first, find_array, extract_vote_entries
from .dedup import dedupe_by
from .diputados import (
    DeputyBundle,
    flatten_diputado_raw,
    build_raw_deputies,
    normalize_deputies,
    build_name_lookup,
)
from .votaciones import VoteBundle, flatten_votacion_raw, normalize_votes

__all__ = [
    "sha1_hex",
    "normalize_text",
    "parse_date",
    "normalize_vote_value",
    "FIELDS",
    "pick",
    "pick_first",
    "find_array",
    "extract_vote_entries",
    "dedupe_by",
    "DeputyBundle",
    "flatten_diputado_raw",
    "build_raw_deputies",
    "normalize_deputies",
    "build_name_lookup",
    "VoteBundle",
    "flatten_votacion_raw",
    "normalize_votes",
]
