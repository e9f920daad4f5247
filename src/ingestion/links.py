"""
Hyperlink discovery over raw HTML.

The portal's listing pages mix several data-interchange links with no stable
markup (no ids, no consistent classes), so links are located by regex rather
than by DOM queries:

  extract_hrefs()               every href="..." value, in document order
  resolve_url()                 fragment -> absolute URL against the portal origin
  find_json_link_after_label()  first .json href shortly after a visible label
"""

import re
from typing import Iterable
from urllib.parse import urljoin, urlsplit

from config import BASE_URL

_HREF_RE = re.compile(r'href="([^"]+)"', re.IGNORECASE)
_JSON_HREF_RE = re.compile(r'href="([^"]+\.json[^"]*)"', re.IGNORECASE)

# Characters scanned after the label when looking for its JSON link
LABEL_WINDOW = 2000


def extract_hrefs(html: str) -> list[str]:
    """Return every ``href`` attribute value in document order (no dedup)."""
    return _HREF_RE.findall(html or "")


def resolve_url(fragment: str | None, base: str = BASE_URL) -> str | None:
    """Resolve ``fragment`` against ``base``; ``None`` when it is unusable."""
    if not fragment or not fragment.strip():
        return None
    try:
        url = urljoin(base, fragment.strip())
        parts = urlsplit(url)
    except ValueError:
        return None
    if parts.scheme not in ("http", "https") or not parts.netloc:
        return None
    return url


def resolve_all(hrefs: Iterable[str], base: str = BASE_URL) -> list[str]:
    """Resolve each fragment, dropping those that do not resolve."""
    resolved = (resolve_url(h, base) for h in hrefs)
    return [url for url in resolved if url]


def find_json_link_after_label(
    html: str,
    label: str,
    *,
    window: int = LABEL_WINDOW,
    base: str = BASE_URL,
) -> str | None:
    """Return the first ``.json`` link within ``window`` chars after ``label``.

    The listing pages offer several JSON downloads side by side; the visible
    label text next to each one is the only reliable anchor.
    """
    idx = (html or "").find(label)
    if idx == -1:
        return None
    match = _JSON_HREF_RE.search(html[idx: idx + window])
    if not match:
        return None
    return resolve_url(match.group(1), base)
