"""HTML inspection helpers used by the SEO auditor."""
from site_audit.seo.content import calculate_text_to_html_ratio, extract_top_keywords, get_word_count
from site_audit.seo.crawlability import audit_crawlability
from site_audit.seo.links import analyze_link_health, analyze_links
from site_audit.seo.metadata import analyze_social_tags, build_link_rel_set, find_canonical_url

__all__ = [
    "analyze_link_health",
    "analyze_links",
    "analyze_social_tags",
    "audit_crawlability",
    "build_link_rel_set",
    "calculate_text_to_html_ratio",
    "extract_top_keywords",
    "find_canonical_url",
    "get_word_count",
]
