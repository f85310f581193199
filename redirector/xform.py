"""
Client-side reconciliation of a redirect target with the browser's URL fragment.

The server computes the new URL for a moved page but never sees the fragment
the browser was pointed at. The rules below decide whether to keep the server's
guess, append the browser fragment, or apply one of the known rewrites.
Rules are evaluated in order and the first match wins.
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Callable, List, Tuple, Union

INVALID_URL = "(invalid input)"
DEFAULT_SITE_ROOT = "http://www.ncbi.nlm.nih.gov"
DISCLAIMER_PATH = "/About/disclaimer.html"

# Tails never cross a line terminator (\n, \r, U+2028, U+2029)
COPYRIGHT_HASH_RE = re.compile(r"#_ncbi_dlg_cpyrght_[^\n\r\u2028\u2029]*")
FOOTNOTE_HASH_RE = re.compile(r"#__pp_([a-zA-Z0-9_.-]+)_TF_([0-9]+)")
TABLE_URL_RE = re.compile(r"([^\n\r\u2028\u2029]*\.T)([0-9]+)")


class DisplayMode(str, Enum):
    """How the copyright rewrite renders its result."""

    FULL = "full"  # scheme + host prefixed
    PATH = "path"  # host-relative


class Provenance(str, Enum):
    UNCHANGED = "unchanged"
    PASSTHROUGH = "passthrough"
    COPYRIGHT = "copyright"
    HASH_APPENDED = "hash-appended"
    FOOTNOTE = "footnote"


@dataclass(frozen=True)
class Reconciliation:
    """Reconciled URL and the rule that produced it."""

    url: str
    provenance: Provenance


Mode = Union[DisplayMode, str]
Predicate = Callable[[str, str], bool]
Handler = Callable[[str, str, Mode, str], Reconciliation]


def _is_passthrough(url: str, fragment: str) -> bool:
    return not url or url == INVALID_URL


def _passthrough(url: str, fragment: str, mode: Mode, site_root: str) -> Reconciliation:
    return Reconciliation(url, Provenance.PASSTHROUGH)


def _is_copyright(url: str, fragment: str) -> bool:
    return COPYRIGHT_HASH_RE.fullmatch(fragment) is not None


def _copyright(url: str, fragment: str, mode: Mode, site_root: str) -> Reconciliation:
    prefix = site_root if mode == DisplayMode.FULL else ""
    return Reconciliation(prefix + DISCLAIMER_PATH, Provenance.COPYRIGHT)


def _has_no_hash(url: str, fragment: str) -> bool:
    return "#" not in url


def _append_hash(url: str, fragment: str, mode: Mode, site_root: str) -> Reconciliation:
    if not fragment:
        return Reconciliation(url, Provenance.UNCHANGED)
    return Reconciliation(url + fragment, Provenance.HASH_APPENDED)


def _refine_footnote(url: str, fragment: str, mode: Mode, site_root: str) -> Reconciliation:
    """
    Keep the server-side hash unless it names a table whose footnote the
    browser points at.

    Example:
        incoming:    /books/n/toolkit/ch_libconfig/table/ch_libconfig.T8/?report=objectonly#__pp_ch_libconfig_TF_24
        from server: /toolkit/doc/book/ch_libconfig/?report=objectonly#ch_libconfig.T8
        reconciled:  /toolkit/doc/book/ch_libconfig/?report=objectonly#ch_libconfig.TF.24
    """
    client = FOOTNOTE_HASH_RE.fullmatch(fragment)
    if client is None:
        return Reconciliation(url, Provenance.UNCHANGED)
    # Matched against the whole URL, not only its fragment
    server = TABLE_URL_RE.fullmatch(url)
    if server is None:
        return Reconciliation(url, Provenance.UNCHANGED)
    return Reconciliation(server.group(1) + "F." + client.group(2), Provenance.FOOTNOTE)


RULES: List[Tuple[Predicate, Handler]] = [
    (_is_passthrough, _passthrough),
    (_is_copyright, _copyright),
    (_has_no_hash, _append_hash),
]


def explain(
    url: str,
    fragment: str,
    mode: Mode = DisplayMode.PATH,
    site_root: str = DEFAULT_SITE_ROOT,
) -> Reconciliation:
    """
    Reconcile a server-computed URL with the browser fragment.

    Args:
        url: Candidate URL computed by the server (may be empty or INVALID_URL)
        fragment: Browser fragment, empty or starting with '#'
        mode: DisplayMode.FULL or DisplayMode.PATH (plain strings accepted)
        site_root: Scheme + host used by the copyright rewrite in full mode

    Returns:
        Reconciliation with the resulting URL and the rule that produced it
    """
    for predicate, handler in RULES:
        if predicate(url, fragment):
            return handler(url, fragment, mode, site_root)
    # Both sides carry a hash
    return _refine_footnote(url, fragment, mode, site_root)


def reconcile(
    url: str,
    fragment: str,
    mode: Mode = DisplayMode.PATH,
    site_root: str = DEFAULT_SITE_ROOT,
) -> str:
    """Return only the reconciled URL. See explain()."""
    return explain(url, fragment, mode, site_root).url
