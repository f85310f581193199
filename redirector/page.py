"""
Redirect page glue.

Reads the server-computed old and new URLs from the page's meta tags, applies
the browser fragment, and writes the results back into the page.
"""

import re
from dataclasses import dataclass
from typing import Optional

from bs4 import BeautifulSoup

from .logger import get_logger
from .xform import DEFAULT_SITE_ROOT, DisplayMode, explain

logger = get_logger()

_UNESCAPE_RE = re.compile(r"%u([0-9a-fA-F]{4})|%([0-9a-fA-F]{2})")


def js_unescape(value: str) -> str:
    """Decode %XX and %uXXXX escapes, leaving malformed sequences alone."""
    def _sub(m: re.Match) -> str:
        return chr(int(m.group(1) or m.group(2), 16))

    # %uD83D%uDE00 is a surrogate pair; join it into one code point
    decoded = _UNESCAPE_RE.sub(_sub, value)
    return decoded.encode("utf-16-le", "surrogatepass").decode("utf-16-le", "surrogatepass")


def read_meta(soup: BeautifulSoup, element_id: str) -> str:
    """Return the unescaped content of the meta tag with the given id, or ''."""
    el = soup.find(id=element_id)
    if el is None:
        logger.warning("Meta tag not found", id=element_id)
        return ""
    return js_unescape(el.get("content") or "")


@dataclass
class RedirectUrls:
    old_url: str
    new_url: str


def read_redirect_urls(soup: BeautifulSoup) -> RedirectUrls:
    return RedirectUrls(
        old_url=read_meta(soup, "meta_old_url"),
        new_url=read_meta(soup, "meta_new_url"),
    )


def finalize_urls(
    old_url: str,
    new_url: str,
    fragment: str,
    site_root: str = DEFAULT_SITE_ROOT,
) -> RedirectUrls:
    """
    Apply the browser fragment to both URLs.

    The old URL only gets the raw fragment appended; the new URL goes through
    the reconciler in full mode.
    """
    if not fragment:
        return RedirectUrls(old_url=old_url, new_url=new_url)

    result = explain(new_url, fragment, DisplayMode.FULL, site_root)
    logger.record_reconciliation(result.provenance)
    logger.debug(
        "Reconciled redirect target",
        new_url=new_url,
        fragment=fragment,
        result=result.url,
        rule=result.provenance.value,
    )
    return RedirectUrls(old_url=old_url + fragment, new_url=result.url)


def write_redirect_urls(soup: BeautifulSoup, urls: RedirectUrls) -> None:
    old_el = soup.find(id="old_url")
    if old_el is None:
        logger.warning("Display element not found", id="old_url")
    else:
        old_el.string = urls.old_url

    new_el = soup.find(id="new_url")
    if new_el is None:
        logger.warning("Display element not found", id="new_url")
    else:
        new_el["href"] = urls.new_url
        new_el.string = urls.new_url


@dataclass
class FinalizedPage:
    urls: RedirectUrls
    html: str


def finalize_page(
    html: str,
    fragment: str = "",
    site_root: Optional[str] = None,
) -> FinalizedPage:
    """
    Finalize a server-rendered redirect page for the given browser fragment.

    Args:
        html: Redirect page HTML
        fragment: Browser fragment ('' when the browser had none)
        site_root: Scheme + host for full-mode rewrites (default: ncbi)

    Returns:
        FinalizedPage with the final URLs and the updated HTML
    """
    soup = BeautifulSoup(html, "html.parser")
    read = read_redirect_urls(soup)
    urls = finalize_urls(read.old_url, read.new_url, fragment, site_root or DEFAULT_SITE_ROOT)
    write_redirect_urls(soup, urls)
    logger.info("Redirect page finalized", old_url=urls.old_url, new_url=urls.new_url)
    return FinalizedPage(urls=urls, html=str(soup))
