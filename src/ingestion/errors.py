"""Exception hierarchy for the ingestion pipeline.

Every fatal condition derives from ``IngestError`` so the pipeline entry point
can catch one type, print the message and exit non-zero.

An unresolved vote-result reference is not an error: it is counted and the
entry is dropped (see ``transforms.votaciones.VoteBundle.dropped``).
"""


class IngestError(Exception):
    """Base class for all pipeline failures."""


class ConfigError(IngestError):
    """Missing or malformed environment configuration."""


class FetchError(IngestError):
    """Non-2xx HTTP status or transport failure on a GET.

    ``status`` is ``None`` when the request never produced a response.
    """

    def __init__(self, status: int | None, url: str, detail: str = "") -> None:
        self.status = status
        self.url = url
        self.detail = detail
        prefix = f"Fetch failed {status}" if status is not None else "Fetch failed"
        message = f"{prefix} for {url}"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)


class ParseError(FetchError):
    """Response body was not valid JSON. Handled exactly like a FetchError."""

    def __init__(self, url: str, detail: str = "") -> None:
        super().__init__(None, url, detail or "invalid JSON body")


class PersistError(IngestError):
    """Destination store rejected a chunk. Earlier chunks stay committed."""

    def __init__(self, table: str, status: int | None, body: str) -> None:
        self.table = table
        self.status = status
        self.body = body
        super().__init__(f"Supabase upsert failed ({table}): {status} {body}")
