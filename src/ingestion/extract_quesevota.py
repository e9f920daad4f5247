"""
Recover official vote URLs through the quesevota.es mirror.

The mirror lists every vote on paginated pages (/votaciones?page=N) and links
to a detail page per vote; each detail page embeds the official
www.congreso.es JSON URL inside serialized page state, often escaped.

Strategy:
  - Crawl QV_MAX_PAGES listing pages, then every detail page
    (crawler.crawl_mirror).
  - Discovered official URLs → data/quesevota_vote_urls.json
  - With QV_INGEST=1: fetch each official file and upsert it into
    ``votes_raw``, using the same URL-derived ids as extract_votaciones.py so
    the two sources do not produce duplicate votes.

This stage is opt-in (``pipeline.py quesevota``) and not part of ``all``:
a full crawl is several hundred listing pages plus one request per vote.
"""

from config import QUESEVOTA_USER_AGENT, IngestConfig
from congreso_client import CongresoClient
from crawler import crawl_mirror
from extract_votaciones import fetch_vote_rows, limit_urls
from persist import SupabaseWriter
from utils import configure_utf8, save_json

SNAPSHOT_NAME = "quesevota_vote_urls.json"


def extract_all(config: IngestConfig) -> int:
    """Crawl the mirror and optionally ingest the recovered vote files.

    Returns the number of official URLs discovered.
    """
    with CongresoClient(
        delay=config.sleep_seconds,
        timeout=config.timeout,
        user_agent=QUESEVOTA_USER_AGENT,
    ) as client:
        json_urls = crawl_mirror(client, config.qv_max_pages)
        save_json(config.data_dir / SNAPSHOT_NAME, json_urls)
        print(f"[quesevota] {len(json_urls)} urls oficiales encontradas")

        if not config.qv_ingest:
            print("[quesevota] QV_INGEST=1 para cargar en Supabase")
            return len(json_urls)

        rows = fetch_vote_rows(client, limit_urls(json_urls, config.limit_votes))

    if config.dry_run:
        print(f"[quesevota] {len(rows)} votos (dry run)")
        return len(json_urls)

    with SupabaseWriter.from_config(config) as writer:
        result = writer.upsert("votes_raw", rows)
    print(f"[quesevota] {len(rows)} votos | supabase: {result}")
    return len(json_urls)


if __name__ == "__main__":
    configure_utf8()
    extract_all(IngestConfig.from_env())
