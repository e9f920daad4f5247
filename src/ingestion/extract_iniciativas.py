"""
Discover initiative JSON links on the Congreso open-data portal.

Source:
  https://www.congreso.es/es/opendata/iniciativas

Only the links are recorded (data/iniciativas_links.json); the initiative
files themselves are not fetched or persisted yet.
"""

from config import ENDPOINTS, IngestConfig
from congreso_client import CongresoClient
from crawler import collect_initiative_json_urls
from utils import configure_utf8, save_json

SNAPSHOT_NAME = "iniciativas_links.json"


def extract_all(config: IngestConfig) -> int:
    with CongresoClient(delay=config.sleep_seconds, timeout=config.timeout) as client:
        links = collect_initiative_json_urls(client, ENDPOINTS["iniciativas"])

    save_json(config.data_dir / SNAPSHOT_NAME, links)
    print(f"[iniciativas] {len(links)} enlaces JSON guardados.")
    return len(links)


if __name__ == "__main__":
    configure_utf8()
    extract_all(IngestConfig.from_env())
