"""URL classification and resolution for generated pages.

mkdocs writes every internal reference relative to the page that contains
it (``../routing/``, ``assets/stylesheets/main.css``). Those only work when
the site is served from the root of a host. To serve it under a prefix such
as ``/blacksheep/`` or ``/blacksheep/v1/``, each relative reference is
resolved against the page's directory inside the site tree and re-rooted at
the prefix.

Reference kinds::

    ""                      EMPTY       left as is
    "#install"  "?q=1"      FRAGMENT    same document, left as is
    "https://…" "mailto:…"  EXTERNAL    has a scheme or is protocol-relative
    "/blacksheep/…"         PREFIXED    already rooted at the base path
    "/img/logo.png"         ROOTED      under a rooted prefix, gets the base path
    "/rodi/"                ABSOLUTE    another site on the same host, left as is
    "../routing/"           RELATIVE    resolved and re-rooted

Examples:
    >>> normalize_base_path("blacksheep", "v1")
    '/blacksheep/v1/'
    >>> resolve("../routing/#query", "getting-started", "/blacksheep/")
    '/blacksheep/routing/#query'
"""

from __future__ import annotations

import posixpath
import re
from collections.abc import Iterable
from enum import Enum
from urllib.parse import urlsplit

from sitepub.core.errors import LinkRewriteError

_SCHEME_RE = re.compile(r"^[a-zA-Z][a-zA-Z0-9+.\-]*:")


class RefKind(str, Enum):
    """Kind of a reference found in an ``href``/``src`` attribute."""

    EMPTY = "empty"
    FRAGMENT = "fragment"
    EXTERNAL = "external"
    PREFIXED = "prefixed"
    ROOTED = "rooted"
    ABSOLUTE = "absolute"
    RELATIVE = "relative"


def normalize_base_path(path: str | None, version: str | None = None) -> str:
    """Return ``/segment/.../`` with a leading and trailing slash.

    An optional version is appended as a further segment.
    """
    segments = [s for s in (path or "").split("/") if s]
    if version:
        segments.extend(s for s in version.split("/") if s)
    return "/" + "".join(f"{s}/" for s in segments)


def base_path_from_site_url(site_url: str | None) -> str:
    """Extract the base path from an mkdocs ``site_url``.

    ``https://www.neoteroi.dev/blacksheep/`` → ``/blacksheep/``
    """
    if not site_url:
        return "/"
    return normalize_base_path(urlsplit(site_url).path)


def split_suffix(url: str) -> tuple[str, str]:
    """Split ``path?query#fragment`` into ``(path, "?query#fragment")``."""
    cut = len(url)
    for marker in ("?", "#"):
        index = url.find(marker)
        if index != -1:
            cut = min(cut, index)
    return url[:cut], url[cut:]


def _is_under(path: str, prefix: str) -> bool:
    prefix = prefix.rstrip("/")
    return path == prefix or path.startswith(prefix + "/")


def classify(
    url: str,
    base_path: str,
    rooted_prefixes: Iterable[str] = (),
) -> RefKind:
    """Classify a reference relative to the site's base path."""
    if not url.strip():
        return RefKind.EMPTY
    if url[0] in "#?":
        return RefKind.FRAGMENT
    if url.startswith("//") or _SCHEME_RE.match(url):
        return RefKind.EXTERNAL
    if url.startswith("/"):
        path, _ = split_suffix(url)
        if base_path == "/" or _is_under(path, base_path):
            return RefKind.PREFIXED
        if any(_is_under(path, prefix) for prefix in rooted_prefixes):
            return RefKind.ROOTED
        return RefKind.ABSOLUTE
    return RefKind.RELATIVE


def _points_to_directory(path: str) -> bool:
    return path.endswith("/") or posixpath.basename(path) in (".", "..")


def resolve(url: str, page_dir: str, base_path: str) -> str:
    """Resolve a relative reference from ``page_dir`` and root it at ``base_path``.

    ``page_dir`` is the POSIX path of the page's directory relative to the
    site root (``""`` for pages at the root). Query strings and fragments are
    preserved. Raises :class:`LinkRewriteError` if the reference climbs above
    the site root.
    """
    path, suffix = split_suffix(url)
    joined = posixpath.join(page_dir, path) if page_dir else path
    normalized = posixpath.normpath(joined) if joined else "."
    if normalized == ".." or normalized.startswith("../"):
        raise LinkRewriteError(
            f"Reference {url!r} escapes the site root"
        ).with_context(path=page_dir or ".")
    if normalized == ".":
        return base_path + suffix
    trailing = "/" if _points_to_directory(path) else ""
    return f"{base_path}{normalized}{trailing}{suffix}"


def root(url: str, base_path: str) -> str:
    """Prefix a root-absolute path with the base path."""
    return base_path.rstrip("/") + url


__all__ = [
    "RefKind",
    "base_path_from_site_url",
    "classify",
    "normalize_base_path",
    "resolve",
    "root",
    "split_suffix",
]
