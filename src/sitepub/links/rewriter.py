"""HTML link rewriting for sites served under a path prefix.

``LinkRewriter`` walks the tree produced by ``mkdocs build`` and rewrites
every site-relative reference so the pages work when published under a
prefix such as ``/blacksheep/`` (or ``/blacksheep/v1/`` for a versioned
copy). Three kinds of text are touched:

1. ``href`` and ``src`` attribute values, single or double quoted.
2. The theme bootstrap configuration emitted by mkdocs-material, in either
   its object-literal form (``base: ".."``, ``worker: "../assets/…"``) or its
   JSON form (``"base": ".."``, ``"search": "../assets/…"``).
3. Stray ``<base>https://`` / ``<base>http://`` sequences left behind by
   earlier prefixing tools, which are collapsed back to the bare URL.

External URLs, same-document references and root-absolute paths that belong
to other sites on the host are never modified. References already under the
base path are left alone, so running the rewriter twice is a no-op.

Output::

    site/index.html                   href="getting-started/"  → /blacksheep/getting-started/
    site/getting-started/index.html   src="../assets/x.js"     → /blacksheep/assets/x.js
    site/getting-started/index.html   href=".."                → /blacksheep/

Tags:
    links, html, rewrite, mkdocs, base-path
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from pathlib import Path

from sitepub.core.errors import LinkRewriteError
from sitepub.core.logging import get_logger
from sitepub.links.urls import (
    RefKind,
    classify,
    normalize_base_path,
    resolve,
    root,
)
from sitepub.results import LinkFixResult, PageRewrite

logger = get_logger(__name__)

_ATTR_RE = re.compile(
    r"""(?P<lead>(?<![\w:-])(?:href|src)\s*=\s*)(?:"(?P<dq>[^"]*)"|'(?P<sq>[^']*)')""",
    re.IGNORECASE,
)

_THEME_RE = re.compile(
    r"""(?P<lead>(?:(?<![\w"])(?P<bare>base|worker)|"(?P<quoted>base|search)")\s*:\s*")(?P<value>[^"]*)(?P<tail>")"""
)


class LinkRewriter:
    """Rewrites site-relative references in generated HTML.

    Parameters
    ----------
    base_path
        URL prefix the site is served under; normalised to ``/…/``.
    rooted_prefixes
        Root-absolute paths that belong to the site even though mkdocs did
        not make them relative (images referenced as ``/img/…`` from
        Markdown, for example).

    Example::

        rewriter = LinkRewriter("/blacksheep/")
        result = rewriter.rewrite_tree(Path("site"))
        print(result.summary())
    """

    def __init__(
        self,
        base_path: str = "/",
        rooted_prefixes: Iterable[str] = ("/img",),
    ) -> None:
        self.base_path = normalize_base_path(base_path)
        self.rooted_prefixes = tuple(rooted_prefixes)

    # ------------------------------------------------------------------
    # Text
    # ------------------------------------------------------------------

    def rewrite_reference(self, url: str, page_dir: str) -> str:
        """Return the rewritten form of a single reference."""
        kind = classify(url, self.base_path, self.rooted_prefixes)
        if kind == RefKind.RELATIVE:
            return resolve(url, page_dir, self.base_path)
        if kind == RefKind.ROOTED:
            return root(url, self.base_path)
        return url

    def rewrite_html(self, html: str, page_dir: str = "", path: str = "") -> tuple[str, PageRewrite]:
        """Rewrite one page's markup.

        Parameters
        ----------
        html
            Page content.
        page_dir
            Directory of the page relative to the site root, POSIX style,
            ``""`` for the root.
        path
            Page path used for reporting.

        Returns
        -------
        tuple[str, PageRewrite]
            New content and the per-page report.
        """
        report = PageRewrite(path=path or page_dir or ".")

        def _sub_attr(match: re.Match[str]) -> str:
            quote = '"' if match.group("dq") is not None else "'"
            url = match.group("dq") if match.group("dq") is not None else match.group("sq")
            new_url = self._rewrite_or_record(url, page_dir, report)
            if new_url == url:
                return match.group(0)
            report.replacements += 1
            return f"{match.group('lead')}{quote}{new_url}{quote}"

        def _sub_theme(match: re.Match[str]) -> str:
            value = match.group("value")
            key = match.group("bare") or match.group("quoted")
            candidate = value
            if key == "base" and value and not value.endswith("/"):
                candidate = value + "/"
            new_value = self._rewrite_or_record(candidate, page_dir, report)
            if new_value == candidate:
                return match.group(0)
            report.replacements += 1
            return f"{match.group('lead')}{new_value}{match.group('tail')}"

        html = _ATTR_RE.sub(_sub_attr, html)
        html = _THEME_RE.sub(_sub_theme, html)
        html = self._repair_prefixed_urls(html, report)
        return html, report

    def _rewrite_or_record(self, url: str, page_dir: str, report: PageRewrite) -> str:
        try:
            return self.rewrite_reference(url, page_dir)
        except LinkRewriteError:
            report.unresolved.append(url)
            logger.warning("links.unresolved", page=report.path, reference=url)
            return url

    def _repair_prefixed_urls(self, html: str, report: PageRewrite) -> str:
        if self.base_path == "/":
            return html
        for scheme in ("https://", "http://"):
            broken = f"{self.base_path}{scheme}"
            count = html.count(broken)
            if count:
                html = html.replace(broken, scheme)
                report.replacements += count
        return html

    # ------------------------------------------------------------------
    # Files
    # ------------------------------------------------------------------

    def rewrite_file(self, path: Path, site_dir: Path, dry_run: bool = False) -> PageRewrite:
        """Rewrite a page in place; nothing is written when unchanged or ``dry_run``."""
        relative = path.relative_to(site_dir)
        page_dir = relative.parent.as_posix()
        if page_dir == ".":
            page_dir = ""

        try:
            original = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise LinkRewriteError(f"Cannot read {relative}", cause=e).with_context(
                step="fixlinks", path=str(path)
            ) from e

        updated, report = self.rewrite_html(original, page_dir, relative.as_posix())

        if report.changed and not dry_run:
            try:
                path.write_text(updated, encoding="utf-8")
            except OSError as e:
                raise LinkRewriteError(f"Cannot write {relative}", cause=e).with_context(
                    step="fixlinks", path=str(path)
                ) from e

        logger.debug(
            "links.page_rewritten",
            page=report.path,
            replacements=report.replacements,
            dry_run=dry_run,
        )
        return report

    def rewrite_tree(self, site_dir: Path, dry_run: bool = False) -> LinkFixResult:
        """Rewrite every ``*.html`` file below ``site_dir``, at any depth."""
        site_dir = Path(site_dir)
        if not site_dir.is_dir():
            raise LinkRewriteError(
                f"Site directory not found: {site_dir}. Run the build first."
            ).with_context(step="fixlinks", path=str(site_dir))

        result = LinkFixResult(
            site_dir=str(site_dir),
            base_path=self.base_path,
            dry_run=dry_run,
        )
        logger.info("links.fix_started", site_dir=str(site_dir), base_path=self.base_path)

        for page in sorted(site_dir.rglob("*.html")):
            if page.is_file():
                result.pages.append(self.rewrite_file(page, site_dir, dry_run=dry_run))

        logger.info(
            "links.fix_complete",
            pages=result.files_scanned,
            changed=result.files_changed,
            replacements=result.replacements,
            unresolved=len(result.unresolved),
        )
        return result


def fix_links(
    site_dir: Path,
    base_path: str = "/",
    version: str | None = None,
    rooted_prefixes: Iterable[str] = ("/img",),
    dry_run: bool = False,
) -> LinkFixResult:
    """Rewrite a site tree for ``base_path`` (plus optional ``version`` segment)."""
    rewriter = LinkRewriter(normalize_base_path(base_path, version), rooted_prefixes)
    return rewriter.rewrite_tree(site_dir, dry_run=dry_run)


__all__ = ["LinkRewriter", "fix_links"]
