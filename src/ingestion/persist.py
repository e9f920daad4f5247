"""
Chunked, idempotent upserts into the Supabase (PostgREST) destination store.

Every request is

    POST {SUPABASE_URL}/rest/v1/{table}?on_conflict=col1,col2
    Prefer: resolution=merge-duplicates

so re-sending rows that already exist overwrites them instead of inserting
duplicates. Because every id is content-addressed, a failed run can simply be
re-run.

Chunks are committed independently: if chunk k fails, chunks 0..k-1 stay in
the store and PersistError is raised. There is no rollback.

Usage example:
    with SupabaseWriter(url, key, chunk_size=500) as writer:
        result = writer.upsert("vote_results", rows, ["vote_id", "deputy_id"])
        print(result)   # vote_results: 1234 rows committed
"""

from dataclasses import dataclass
from typing import Any, Sequence

import httpx

from config import IngestConfig
from errors import PersistError

# Conflict targets per destination table
CONFLICT_COLUMNS: dict[str, list[str]] = {
    "deputies_raw":       ["id"],
    "votes_raw":          ["id"],
    "deputies":           ["id"],
    "parties":            ["id"],
    "deputy_memberships": ["deputy_id", "legislature_id", "party_id", "start_date"],
    "votes":              ["id"],
    "vote_results":       ["vote_id", "deputy_id"],
}


@dataclass(frozen=True)
class UpsertResult:
    table: str
    committed: int
    skipped: bool = False

    def __str__(self) -> str:
        if self.skipped:
            return f"{self.table}: skipped (store not configured)"
        return f"{self.table}: {self.committed} rows committed"


class SupabaseWriter:
    """
    Writes rows to the destination store in fixed-size chunks.

    Parameters
    ----------
    base_url : str
        Project URL, e.g. ``https://xyz.supabase.co``. Empty disables writes.
    service_key : str
        Service-role key, sent as both ``apikey`` and bearer token.
    chunk_size : int
        Rows per request (default 500). Independent of the fetch batch size.
    timeout : float
        HTTP request timeout in seconds.
    client : httpx.Client, optional
        Pre-built client (tests pass one backed by ``httpx.MockTransport``).
    """

    def __init__(
        self,
        base_url: str,
        service_key: str,
        *,
        chunk_size: int = 500,
        timeout: float = 60.0,
        client: httpx.Client | None = None,
    ) -> None:
        if chunk_size <= 0:
            raise ValueError("chunk_size must be positive")
        self._base_url = base_url.rstrip("/")
        self._key = service_key
        self._chunk_size = chunk_size
        self._client = client or httpx.Client(timeout=timeout)

    @classmethod
    def from_config(cls, config: IngestConfig) -> "SupabaseWriter":
        return cls(
            config.supabase_url,
            config.supabase_key,
            chunk_size=config.persist_chunk_size,
            timeout=config.timeout,
        )

    @property
    def configured(self) -> bool:
        return bool(self._base_url and self._key)

    def upsert(
        self,
        table: str,
        rows: Sequence[dict[str, Any]],
        conflict_columns: Sequence[str] | None = None,
    ) -> UpsertResult:
        """
        Upsert ``rows`` into ``table``, one request per chunk.

        Parameters
        ----------
        table : str
            Destination table name.
        rows : sequence of dict
            JSON-serializable rows.
        conflict_columns : sequence of str, optional
            Conflict target. Defaults to ``CONFLICT_COLUMNS[table]``, else ``id``.

        Returns
        -------
        UpsertResult
            Number of rows committed; ``skipped=True`` when the store is not
            configured.

        Raises
        ------
        PersistError
            On the first chunk that is not accepted. Earlier chunks stay committed.
        """
        if not self.configured:
            return UpsertResult(table, 0, skipped=True)
        if conflict_columns is None:
            conflict_columns = CONFLICT_COLUMNS.get(table, ["id"])

        committed = 0
        for chunk in chunked(rows, self._chunk_size):
            self._post(table, chunk, conflict_columns)
            committed += len(chunk)
        return UpsertResult(table, committed)

    def close(self) -> None:
        self._client.close()

    def __enter__(self):
        return self

    def __exit__(self, *_):
        self.close()

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _post(self, table: str, chunk: list[dict], conflict_columns: Sequence[str]) -> None:
        url = f"{self._base_url}/rest/v1/{table}"
        try:
            resp = self._client.post(
                url,
                params={"on_conflict": ",".join(conflict_columns)},
                headers={
                    "apikey":        self._key,
                    "Authorization": f"Bearer {self._key}",
                    "Content-Type":  "application/json",
                    "Prefer":        "resolution=merge-duplicates",
                },
                json=chunk,
            )
        except httpx.HTTPError as exc:
            raise PersistError(table, None, str(exc)) from exc
        if not resp.is_success:
            raise PersistError(table, resp.status_code, resp.text)


def chunked(rows: Sequence[Any], size: int) -> list[list[Any]]:
    """Split ``rows`` into consecutive lists of at most ``size`` items."""
    return [list(rows[i: i + size]) for i in range(0, len(rows), size)]
