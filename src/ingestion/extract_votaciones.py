"""
Extract roll-call vote files from the Congreso open-data portal.

Source:
  https://www.congreso.es/es/opendata/votaciones
  -- Listing page linking to per-legislature pages, which in turn link to one
     JSON file per vote under /webpublica/opendata/votaciones/.

Strategy:
  - Discover vote JSON URLs (crawler.collect_vote_json_urls).
  - Keep the first LIMIT_VOTES of them (0 = all).
  - Fetch in batches of VOTE_BATCH_SIZE; after each batch, upsert that batch
    into Supabase ``votes_raw``. A failure in a later batch leaves earlier
    batches committed; re-running is safe because ids come from the URL.
  - All fetched rows → data/votaciones.json (input of normalize.py)

Row id, legislature and session date are read from the URL path
(.../Leg15/Sesion12/20240215/...).
"""

from config import ENDPOINTS, IngestConfig
from congreso_client import CongresoClient
from crawler import collect_vote_json_urls
from persist import SupabaseWriter
from transforms.dedup import by_id, dedupe_by
from transforms.votaciones import RawVoteRow, flatten_votacion_raw
from utils import configure_utf8, save_json

SNAPSHOT_NAME = "votaciones.json"


def limit_urls(urls: list[str], limit: int) -> list[str]:
    """First ``limit`` URLs; a non-positive limit keeps them all."""
    return urls[:limit] if limit > 0 else urls


def fetch_vote_rows(client: CongresoClient, urls: list[str]) -> list[RawVoteRow]:
    """Fetch each vote file and wrap it as a ``votes_raw`` row (deduplicated)."""
    rows = [flatten_votacion_raw(url, client.get_json(url)) for url in urls]
    return dedupe_by(rows, by_id)


def extract_all(config: IngestConfig) -> int:
    """Crawl, fetch and upsert vote files. Returns the number of rows kept."""
    with CongresoClient(delay=config.sleep_seconds, timeout=config.timeout) as client:
        urls = limit_urls(
            collect_vote_json_urls(client, ENDPOINTS["votaciones"]),
            config.limit_votes,
        )
        if not urls:
            print("[votaciones] no se encontraron URLs")
            return 0

        print(f"[votaciones] {len(urls)} URLs a procesar")
        writer = None if config.dry_run else SupabaseWriter.from_config(config)
        all_rows: list[RawVoteRow] = []
        total_committed = 0
        try:
            batch_size = config.vote_batch_size
            for start in range(0, len(urls), batch_size):
                batch = urls[start: start + batch_size]
                rows = fetch_vote_rows(client, batch)
                all_rows.extend(rows)
                label = f"lote {start + 1}-{start + len(batch)}"
                if writer is None:
                    print(f"[votaciones] {label} (dry run)")
                    continue
                result = writer.upsert("votes_raw", rows)
                total_committed += result.committed
                print(f"[votaciones] {label} | supabase: {result}")
        finally:
            if writer is not None:
                writer.close()

    all_rows = dedupe_by(all_rows, by_id)
    save_json(config.data_dir / SNAPSHOT_NAME, all_rows)

    if config.dry_run:
        print(f"[votaciones] {len(all_rows)} votos (dry run)")
    else:
        print(f"[votaciones] total insertados: {total_committed}")
    return len(all_rows)


if __name__ == "__main__":
    configure_utf8()
    extract_all(IngestConfig.from_env())
