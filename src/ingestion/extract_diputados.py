"""
Extract the deputies export from the Congreso open-data portal.

Source:
  https://www.congreso.es/es/opendata/diputados
  -- HTML page offering several JSON/XML/CSV downloads side by side. The JSON
     link for "all deputies of all legislatures" is found by scanning a short
     window after that label (the link URL itself changes between releases).

Strategy:
  - Fetch the listing page, locate the JSON link, fetch the export.
  - Raw export            → data/diputados.json         (snapshot, verbatim)
  - One row per record    → Supabase ``deputies_raw``   (id = hash of name|legislature|start)

Canonical deputies/parties/memberships are built later by normalize.py from
the snapshot.
"""

from config import DIPUTADOS_LABEL, ENDPOINTS, IngestConfig
from congreso_client import CongresoClient
from errors import FetchError
from links import find_json_link_after_label
from persist import SupabaseWriter
from transforms.diputados import build_raw_deputies, unwrap_deputy_list
from utils import configure_utf8, save_json

SNAPSHOT_NAME = "diputados.json"


def extract_all(config: IngestConfig) -> int:
    """Fetch the deputies export, snapshot it and upsert ``deputies_raw``.

    Returns the number of distinct raw deputy rows.
    """
    listing_url = ENDPOINTS["diputados"]
    with CongresoClient(delay=config.sleep_seconds, timeout=config.timeout) as client:
        html = client.get_text(listing_url)
        json_url = find_json_link_after_label(html, DIPUTADOS_LABEL)
        if not json_url:
            raise FetchError(None, listing_url, "no JSON link found for all deputies")
        payload = client.get_json(json_url)

    rows = build_raw_deputies(unwrap_deputy_list(payload), json_url)
    save_json(config.data_dir / SNAPSHOT_NAME, payload)

    if config.dry_run:
        print(f"[diputados] {len(rows)} registros (dry run)")
        return len(rows)

    with SupabaseWriter.from_config(config) as writer:
        result = writer.upsert("deputies_raw", rows)
    print(f"[diputados] {len(rows)} registros | supabase: {result}")
    return len(rows)


if __name__ == "__main__":
    configure_utf8()
    extract_all(IngestConfig.from_env())
