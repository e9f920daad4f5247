"""
Discovery of vote and initiative JSON resources.

Official portal (www.congreso.es):
  1. Fetch the votes listing page and keep same-origin links that look like
     per-legislature sub-pages (``legis`` / ``legislatura`` in the URL).
     If there are none, the listing page itself is the only crawl target.
  2. Fetch each retained page and collect every
     ``/webpublica/opendata/votaciones/...json`` link into an ordered set.

Mirror (quesevota.es):
  1. Walk ``/votaciones?page=1..N`` and collect ``/votacion/...`` detail links.
  2. Fetch each detail page and recover the official JSON URL embedded in it.
     The mirror serializes its page state into nested JSON strings, so the URL
     may appear plain, with escaped slashes (``https:\\/\\/www...``, possibly
     escaped twice) or as an escaped relative path (``\\/webpublica\\/...``).
     All three forms are scanned and normalized back to a plain absolute URL.

Ordered sets are plain dicts (``dict.fromkeys``): first-seen order is kept so a
run processes URLs in the same order every time.
"""

import re
from dataclasses import dataclass

from config import (
    BASE_URL,
    INITIATIVES_JSON_PREFIX,
    QUESEVOTA_BASE_URL,
    VOTES_JSON_PREFIX,
)
from congreso_client import CongresoClient
from links import extract_hrefs, resolve_all

_LEGISLATURE_PAGE_RE = re.compile(r"legis|legislatura", re.IGNORECASE)
_VOTE_URL_META_RE = re.compile(r"/Leg(\d+)/Sesion(\d+)/(\d{8})/")

_MIRROR_DETAIL_RE = re.compile(r'href="(/votacion/[^"]+)"', re.IGNORECASE)
# An escaped slash is one or more backslashes followed by "/" (\/ or \\\/)
_ESC_SLASH = r"(?:\\+/)"
_ESCAPED_SLASHES_RE = re.compile(r"\\+/")

_MIRROR_JSON_PATTERNS = [
    # plain
    re.compile(
        r"https://www\.congreso\.es/webpublica/opendata/votaciones/[^\"'\s]+\.json",
        re.IGNORECASE,
    ),
    # escaped, absolute
    re.compile(
        rf"https:{_ESC_SLASH}{{2}}www\.congreso\.es{_ESC_SLASH}webpublica{_ESC_SLASH}"
        rf"opendata{_ESC_SLASH}votaciones{_ESC_SLASH}[^\"'\s]+\.json",
        re.IGNORECASE,
    ),
    # escaped, relative to the portal
    re.compile(
        rf"{_ESC_SLASH}webpublica{_ESC_SLASH}opendata{_ESC_SLASH}votaciones{_ESC_SLASH}"
        r"[^\"'\s]+\.json",
        re.IGNORECASE,
    ),
]


@dataclass(frozen=True)
class VoteMeta:
    id: str
    legislature: str | None
    session_date: str | None


# ---------------------------------------------------------------------------
# Official portal
# ---------------------------------------------------------------------------


def discover_vote_pages(client: CongresoClient, listing_url: str) -> list[str]:
    """Return the per-legislature pages linked from the votes listing."""
    hrefs = resolve_all(extract_hrefs(client.get_text(listing_url)))
    pages = [
        href for href in hrefs
        if href.startswith(listing_url) and _LEGISLATURE_PAGE_RE.search(href)
    ]
    if not pages:
        return [listing_url]
    return list(dict.fromkeys(pages))


def collect_vote_json_urls(client: CongresoClient, listing_url: str) -> list[str]:
    """Crawl the listing's legislature pages and return every vote JSON URL."""
    urls: dict[str, None] = {}
    for page in discover_vote_pages(client, listing_url):
        for href in resolve_all(extract_hrefs(client.get_text(page))):
            if VOTES_JSON_PREFIX in href and href.endswith(".json"):
                urls.setdefault(href)
    return list(urls)


def collect_initiative_json_urls(client: CongresoClient, listing_url: str) -> list[str]:
    """Return the initiative JSON links on the initiatives page, in document order."""
    hrefs = resolve_all(extract_hrefs(client.get_text(listing_url)))
    return [h for h in hrefs if INITIATIVES_JSON_PREFIX in h and h.endswith(".json")]


def vote_meta_from_url(url: str) -> VoteMeta:
    """Derive id, legislature and session date from an official vote URL.

    Official URLs look like
    ``.../votaciones/Leg15/Sesion12/20240215/Votacion003/VOT_20240215.json``:
    the file stem is the vote id, ``Leg15`` the legislature and the 8-digit
    segment the session date.
    """
    stem = url.rsplit("/", 1)[-1]
    vote_id = re.sub(r"\.json$", "", stem, flags=re.IGNORECASE)
    match = _VOTE_URL_META_RE.search(url)
    if not match:
        return VoteMeta(id=vote_id, legislature=None, session_date=None)
    ymd = match.group(3)
    return VoteMeta(
        id=vote_id,
        legislature=f"Leg{match.group(1)}",
        session_date=f"{ymd[:4]}-{ymd[4:6]}-{ymd[6:]}",
    )


# ---------------------------------------------------------------------------
# Mirror
# ---------------------------------------------------------------------------


def extract_vote_page_links(html: str, base: str = QUESEVOTA_BASE_URL) -> list[str]:
    """Return absolute vote-detail links found on one mirror listing page."""
    links = dict.fromkeys(f"{base}{path}" for path in _MIRROR_DETAIL_RE.findall(html or ""))
    return list(links)


def extract_official_json_urls(html: str) -> list[str]:
    """Recover official vote JSON URLs embedded (possibly escaped) in ``html``."""
    results: dict[str, None] = {}
    for pattern in _MIRROR_JSON_PATTERNS:
        for raw in pattern.findall(html or ""):
            cleaned = _ESCAPED_SLASHES_RE.sub("/", raw)
            url = cleaned if cleaned.lower().startswith("http") else f"{BASE_URL}{cleaned}"
            results.setdefault(url)
    return list(results)


def crawl_mirror(client: CongresoClient, max_pages: int) -> list[str]:
    """Walk ``max_pages`` mirror listing pages and return the official JSON URLs."""
    detail_pages: dict[str, None] = {}
    for page in range(1, max_pages + 1):
        html = client.get_text(f"{QUESEVOTA_BASE_URL}/votaciones?page={page}")
        links = extract_vote_page_links(html)
        for link in links:
            detail_pages.setdefault(link)
        print(f"[quesevota] page {page} -> {len(links)} links")

    json_urls: dict[str, None] = {}
    for link in detail_pages:
        for url in extract_official_json_urls(client.get_text(link)):
            json_urls.setdefault(url)
    return list(json_urls)
