"""Link fixing for generated documentation sites."""

from sitepub.links.rewriter import LinkRewriter, fix_links
from sitepub.links.urls import (
    RefKind,
    base_path_from_site_url,
    classify,
    normalize_base_path,
    resolve,
)

__all__ = [
    "LinkRewriter",
    "RefKind",
    "base_path_from_site_url",
    "classify",
    "fix_links",
    "normalize_base_path",
    "resolve",
]
