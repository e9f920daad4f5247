import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping

from dotenv import load_dotenv

from errors import ConfigError

# Resolve paths relative to this file so stages work from any CWD
_REPO_ROOT = Path(__file__).resolve().parent.parent.parent

# Congreso de los Diputados open-data portal
BASE_URL = "https://www.congreso.es"
ENDPOINTS = {
    "diputados":   f"{BASE_URL}/es/opendata/diputados",
    "votaciones":  f"{BASE_URL}/es/opendata/votaciones",
    "iniciativas": f"{BASE_URL}/es/opendata/iniciativas",
}
VOTES_JSON_PREFIX = "/webpublica/opendata/votaciones/"
INITIATIVES_JSON_PREFIX = "/webpublica/opendata/iniciativas/"
DIPUTADOS_LABEL = "Todos los diputados y diputadas de todas las legislaturas"

# Third-party mirror that embeds the official vote URLs in its pages
QUESEVOTA_BASE_URL = "https://quesevota.es"

USER_AGENT = "congreso-votos-ingest/0.1"
QUESEVOTA_USER_AGENT = "congreso-votos-quesevota/0.1"


@dataclass(frozen=True)
class IngestConfig:
    """Run-wide settings, built once at startup and passed to every stage."""

    data_dir: Path
    out_dir: Path
    limit_votes: int = 50
    vote_batch_size: int = 200
    persist_chunk_size: int = 500
    sleep_seconds: float = 0.0
    dry_run: bool = False
    qv_max_pages: int = 309
    qv_ingest: bool = False
    supabase_url: str = ""
    supabase_key: str = ""
    timeout: float = 60.0

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "IngestConfig":
        """Build the config from environment variables (and ``.env``, if present).

        ``SLEEP_MS`` is given in milliseconds, as in the shell wrappers; it is
        stored as seconds. Boolean flags are on only when set to ``"1"``.
        """
        if environ is None:
            load_dotenv()
            environ = os.environ

        data_dir = Path(environ.get("DATA_DIR") or _REPO_ROOT / "data")
        out_dir = Path(environ.get("OUT_DIR") or data_dir / "normalized")

        return cls(
            data_dir=data_dir,
            out_dir=out_dir,
            limit_votes=_int(environ, "LIMIT_VOTES", 50),
            vote_batch_size=_positive_int(environ, "VOTE_BATCH_SIZE", 200),
            persist_chunk_size=_positive_int(environ, "PERSIST_CHUNK_SIZE", 500),
            sleep_seconds=_int(environ, "SLEEP_MS", 0) / 1000,
            dry_run=environ.get("DRY_RUN") == "1",
            qv_max_pages=_int(environ, "QV_MAX_PAGES", 309),
            qv_ingest=environ.get("QV_INGEST") == "1",
            supabase_url=(environ.get("SUPABASE_URL") or "").rstrip("/"),
            supabase_key=environ.get("SUPABASE_SERVICE_ROLE_KEY") or "",
            timeout=_float(environ, "HTTP_TIMEOUT", 60.0),
        )


def _int(environ: Mapping[str, str], name: str, default: int) -> int:
    raw = environ.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ConfigError(f"{name} must be an integer, got {raw!r}") from None


def _positive_int(environ: Mapping[str, str], name: str, default: int) -> int:
    value = _int(environ, name, default)
    if value <= 0:
        raise ConfigError(f"{name} must be greater than zero, got {value}")
    return value


def _float(environ: Mapping[str, str], name: str, default: float) -> float:
    raw = environ.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        raise ConfigError(f"{name} must be a number, got {raw!r}") from None
