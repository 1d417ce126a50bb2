"""Head metadata extraction: social tags, link rels, canonical URL."""
from __future__ import annotations

from collections.abc import Iterable

from bs4 import BeautifulSoup

from site_audit.fetcher.url import normalize_whitespace, safe_resolve_url


def get_meta_content(soup: BeautifulSoup, tag_name: str) -> str | None:
    """First non-empty content of a meta tag matched by property or name."""
    for node in soup.find_all("meta"):
        if node.get("property") != tag_name and node.get("name") != tag_name:
            continue
        content = normalize_whitespace(node.get("content"))
        if content:
            return content
    return None


def _tag_presence(soup: BeautifulSoup, tags: Iterable[str]) -> dict:
    tags = list(tags)
    present = [tag for tag in tags if get_meta_content(soup, tag)]
    return {
        "required_tags": tags,
        "present_tags": present,
        "missing_tags": [tag for tag in tags if tag not in present],
    }


def analyze_social_tags(
    soup: BeautifulSoup,
    open_graph_tags: Iterable[str],
    twitter_tags: Iterable[str],
) -> dict:
    """Check Open Graph and Twitter card tags."""
    open_graph = _tag_presence(soup, open_graph_tags)
    twitter = _tag_presence(soup, twitter_tags)
    return {
        "open_graph": open_graph,
        "twitter": twitter,
        "has_missing_og_image": "og:image" in open_graph["missing_tags"],
        "has_missing_og_title": "og:title" in open_graph["missing_tags"],
    }


def _rel_tokens(node) -> list[str]:
    rel = node.get("rel")
    # bs4 returns rel as a list of tokens
    if isinstance(rel, str):
        rel = rel.split()
    return [normalize_whitespace(token).lower() for token in rel or [] if token.strip()]


def build_link_rel_set(soup: BeautifulSoup) -> set[str]:
    """All rel tokens used by <link> elements, lowercased."""
    tokens: set[str] = set()
    for node in soup.find_all("link", rel=True):
        tokens.update(_rel_tokens(node))
    return tokens


def find_canonical_url(soup: BeautifulSoup, base_url: str) -> str | None:
    """Resolved href of the first canonical link, if any."""
    for node in soup.find_all("link", rel=True):
        if "canonical" in _rel_tokens(node):
            return safe_resolve_url(node.get("href"), base_url)
    return None
