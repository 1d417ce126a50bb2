"""On-page SEO auditor."""
from __future__ import annotations

import asyncio
import json

import httpx
from bs4 import BeautifulSoup

from site_audit.audit.base import AuditInput, AuditResult, BaseAuditor, LogEntry, LogLevel
from site_audit.auditors.common import Priority, add_recommendation, error, info, scoring, warning
from site_audit.config.settings import SeoSettings, Settings
from site_audit.config.settings import settings as default_settings
from site_audit.fetcher.http import ensure_ok, fetch_with_timeout, open_client, resolve_timeout_ms
from site_audit.fetcher.url import normalize_whitespace
from site_audit.seo.content import calculate_text_to_html_ratio, extract_top_keywords, get_word_count
from site_audit.seo.crawlability import audit_crawlability
from site_audit.seo.links import analyze_link_health, analyze_links
from site_audit.seo.metadata import (
    analyze_social_tags,
    build_link_rel_set,
    find_canonical_url,
    get_meta_content,
)

_NON_CONTENT_TAGS = ["script", "style", "noscript", "template"]


def visible_text(soup: BeautifulSoup) -> str:
    """Whitespace-normalized text of the page body, without scripts and styles."""
    root = soup.body or soup
    for node in root.find_all(_NON_CONTENT_TAGS):
        node.decompose()
    return normalize_whitespace(root.get_text(" "))


def count_images_without_alt(soup: BeautifulSoup) -> int:
    return sum(
        1 for img in soup.find_all("img")
        if not normalize_whitespace(img.get("alt"))
    )


def inspect_json_ld(soup: BeautifulSoup) -> dict:
    count = 0
    invalid = 0
    for node in soup.find_all("script", type="application/ld+json"):
        count += 1
        try:
            json.loads(node.get_text())
        except ValueError:
            invalid += 1
    return {"count": count, "invalid_count": invalid}


def calculate_score(findings: dict, cfg: SeoSettings) -> int:
    """Weighted deduction score, floored at 0."""
    score = 100
    score -= len(findings["missing_meta_tags"]) * cfg.missing_meta_weight
    score -= len(findings["missing_link_rels"]) * cfg.missing_canonical_weight
    if findings["has_missing_h1"]:
        score -= cfg.missing_h1_weight
    if findings["has_multiple_h1"]:
        score -= cfg.multiple_h1_weight
    score -= findings["invalid_json_ld_count"] * cfg.invalid_json_ld_weight
    if findings["is_thin_content"]:
        score -= cfg.thin_content_weight
    score -= min(findings["without_alt"], cfg.missing_alt_cap) * cfg.missing_alt_weight
    score -= findings["legacy_tags_count"] * cfg.legacy_tag_weight
    score -= min(
        findings["internal_broken_count"] * cfg.internal_broken_link_weight,
        cfg.internal_broken_link_max,
    )
    score -= min(
        findings["external_broken_count"] * cfg.external_broken_link_weight,
        cfg.external_broken_link_max,
    )
    if findings["has_missing_og_image"]:
        score -= cfg.missing_og_image_weight
    if findings["has_blocking_root_robots"]:
        score -= cfg.blocking_root_robots_weight
    if findings["has_missing_sitemap"]:
        score -= cfg.missing_sitemap_weight
    return max(0, score)


class SeoAuditor(BaseAuditor):
    """Checks metadata, structure, content, links and crawlability of a page."""

    def __init__(
        self,
        client: httpx.AsyncClient | None = None,
        settings: Settings | None = None,
    ):
        self._client = client
        self._settings = settings or default_settings

    @property
    def key(self) -> str:
        return "seo"

    @property
    def name(self) -> str:
        return "SEO Auditor"

    @property
    def description(self) -> str:
        return "Checks meta tags, headings, structured data, images, links, robots.txt and sitemap"

    async def run(self, audit_input: AuditInput) -> AuditResult:
        cfg = self._settings.seo
        url = audit_input.url
        timeout_ms = resolve_timeout_ms(audit_input.timeout_ms, self._settings.fetcher)

        async with open_client(self._client, self._settings.fetcher) as client:
            response = await fetch_with_timeout(client, url, timeout_ms=timeout_ms)
            ensure_ok(response, "SEO fetch")
            html = response.text
            soup = BeautifulSoup(html, "lxml")

            links = analyze_links(soup, url)
            link_health, crawlability = await asyncio.gather(
                self._link_health(client, links, timeout_ms),
                self._crawlability(client, url, timeout_ms),
            )

        logs: list[LogEntry] = []
        recommendations: list[dict] = []

        missing_meta = [name for name in cfg.required_meta if soup.find("meta", attrs={"name": name}) is None]
        for name in missing_meta:
            logs.append(warning(f"Missing meta {name}"))
        if missing_meta:
            add_recommendation(
                recommendations, Priority.MEDIUM, "Meta Tags",
                "Add missing meta description and viewport tags.",
                "Improves search snippets and mobile rendering guidance.",
            )

        rel_set = build_link_rel_set(soup)
        missing_rels = [rel for rel in cfg.required_link_rel if rel not in rel_set]
        for rel in missing_rels:
            logs.append(warning(f"Missing link rel={rel}"))
        if missing_rels:
            add_recommendation(
                recommendations, Priority.MEDIUM, "Canonical",
                "Define canonical URL to avoid duplicate-content ambiguity.",
                "Improves indexing consistency.",
            )

        h1_count = len(soup.find_all("h1"))
        if h1_count == 0:
            logs.append(warning("No H1 heading found"))
            add_recommendation(
                recommendations, Priority.MEDIUM, "Headings",
                "Add a single H1 heading that describes the page content.",
                "Clarifies the page topic for search engines.",
            )
        elif h1_count > 1:
            logs.append(warning(f"Multiple H1 headings found ({h1_count})"))
            add_recommendation(
                recommendations, Priority.LOW, "Headings",
                "Keep one H1 per page and demote the others to H2.",
                "Improves heading hierarchy.",
            )

        json_ld = inspect_json_ld(soup)
        if json_ld["count"] == 0:
            logs.append(warning("No JSON-LD schema found"))
            add_recommendation(
                recommendations, Priority.MEDIUM, "Structured Data",
                "Add JSON-LD schema for key entities (Organization, WebSite, Breadcrumb, etc.).",
                "Improves rich result eligibility.",
            )
        if json_ld["invalid_count"] > 0:
            logs.append(error("Invalid JSON-LD detected"))
            add_recommendation(
                recommendations, Priority.HIGH, "Structured Data",
                "Fix invalid JSON-LD syntax and validate schema markup.",
                "Restores structured data visibility in search.",
            )

        text = visible_text(BeautifulSoup(html, "lxml"))
        word_count = get_word_count(text)
        is_thin = word_count < cfg.min_content_words
        if is_thin:
            logs.append(warning(f"Thin content ({word_count} words)"))
            add_recommendation(
                recommendations, Priority.LOW, "Content",
                f"Expand the main content to at least {cfg.min_content_words} words.",
                "Gives search engines more context to rank the page.",
            )

        total_images = len(soup.find_all("img"))
        without_alt = count_images_without_alt(soup)
        if without_alt > 0:
            logs.append(warning(f"{without_alt} image(s) missing alt attribute"))
            add_recommendation(
                recommendations, Priority.LOW, "Accessibility/SEO",
                "Provide descriptive alt text for content images.",
                "Improves accessibility and image search relevance.",
            )

        legacy_tags = [tag for tag in cfg.legacy_dom_tags if soup.find(tag) is not None]
        if legacy_tags:
            logs.append(warning("Legacy DOM detected"))
            add_recommendation(
                recommendations, Priority.LOW, "Markup Quality",
                "Replace deprecated HTML tags with semantic modern markup and CSS.",
                "Improves maintainability and rendering consistency.",
            )

        social = analyze_social_tags(soup, cfg.open_graph_tags, cfg.twitter_tags)
        if social["has_missing_og_image"]:
            logs.append(warning("Missing Open Graph tag: og:image"))
            add_recommendation(
                recommendations, Priority.LOW, "Social Sharing",
                "Add og:image so shared links render a preview.",
                "Improves click-through from social platforms.",
            )
        other_missing = [
            tag for tag in social["open_graph"]["missing_tags"] + social["twitter"]["missing_tags"]
            if tag != "og:image"
        ]
        if other_missing:
            logs.append(info(f"Missing social tags: {', '.join(other_missing)}"))

        self._log_link_health(link_health, logs, recommendations)
        self._log_crawlability(crawlability, logs, recommendations)

        if not any(entry.level != LogLevel.INFO for entry in logs):
            logs.append(info("No major SEO issues detected"))

        robots = (crawlability or {}).get("robots", {})
        sitemap = (crawlability or {}).get("sitemap", {})
        score = calculate_score(
            {
                "missing_meta_tags": missing_meta,
                "missing_link_rels": missing_rels,
                "has_missing_h1": h1_count == 0,
                "has_multiple_h1": h1_count > 1,
                "invalid_json_ld_count": json_ld["invalid_count"],
                "is_thin_content": is_thin,
                "without_alt": without_alt,
                "legacy_tags_count": len(legacy_tags),
                "internal_broken_count": (link_health or {}).get("internal_broken_count", 0),
                "external_broken_count": (link_health or {}).get("external_broken_count", 0),
                "has_missing_og_image": social["has_missing_og_image"],
                "has_blocking_root_robots": robots.get("is_blocking_root", False),
                "has_missing_sitemap": crawlability is not None and not sitemap.get("exists", False),
            },
            cfg,
        )

        return AuditResult.from_logs(
            self.key,
            self.name,
            logs,
            details={
                "title": normalize_whitespace(soup.title.get_text()) if soup.title else None,
                "description": get_meta_content(soup, "description"),
                "canonical_url": find_canonical_url(soup, url),
                "missing_meta_tags": missing_meta,
                "missing_link_rels": missing_rels,
                "headings": {"h1_count": h1_count},
                "json_ld": json_ld,
                "content": {
                    "word_count": word_count,
                    "text_to_html_ratio": calculate_text_to_html_ratio(text, html),
                    **extract_top_keywords(text, cfg.top_keywords),
                },
                "images": {"total": total_images, "without_alt": without_alt},
                "legacy_dom_tags": legacy_tags,
                "social": social,
                "links": links,
                "link_health": link_health,
                "crawlability": crawlability,
                "score": score,
                "scoring": scoring(score),
                "recommendations": recommendations,
            },
        )

    async def _link_health(self, client: httpx.AsyncClient, links: dict, timeout_ms: int) -> dict | None:
        if not self._settings.seo.check_links:
            return None
        return await analyze_link_health(client, links, self._settings.seo, timeout_ms)

    async def _crawlability(self, client: httpx.AsyncClient, url: str, timeout_ms: int) -> dict | None:
        if not self._settings.seo.check_crawlability:
            return None
        return await audit_crawlability(client, url, timeout_ms)

    @staticmethod
    def _log_link_health(link_health, logs, recommendations) -> None:
        if not link_health:
            return
        internal_broken = link_health["internal_broken_count"]
        external_broken = link_health["external_broken_count"]
        if internal_broken:
            logs.append(error(f"{internal_broken} broken internal link(s)"))
            add_recommendation(
                recommendations, Priority.HIGH, "Links",
                "Fix or remove broken internal links.",
                "Preserves crawl budget and link equity.",
            )
        if external_broken:
            logs.append(warning(f"{external_broken} broken external link(s)"))
            add_recommendation(
                recommendations, Priority.MEDIUM, "Links",
                "Update or remove dead outbound links.",
                "Improves user trust and content quality signals.",
            )

    @staticmethod
    def _log_crawlability(crawlability, logs, recommendations) -> None:
        if not crawlability:
            return
        robots = crawlability["robots"]
        sitemap = crawlability["sitemap"]
        if robots["is_blocking_root"]:
            logs.append(error("robots.txt blocks the entire site (Disallow: /)"))
            add_recommendation(
                recommendations, Priority.HIGH, "Crawlability",
                "Remove the site-wide Disallow rule from robots.txt.",
                "Lets search engines crawl and index the site.",
            )
        elif not robots["exists"]:
            logs.append(info("robots.txt not found"))
        if not sitemap["exists"]:
            logs.append(warning("XML sitemap not found"))
            add_recommendation(
                recommendations, Priority.MEDIUM, "Crawlability",
                "Publish an XML sitemap and reference it from robots.txt.",
                "Helps search engines discover all pages.",
            )
