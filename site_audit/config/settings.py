"""Centralized configuration settings."""
from __future__ import annotations

import os
from dataclasses import dataclass, field


@dataclass
class FetcherSettings:
    """Settings for outbound HTTP requests."""
    default_timeout_ms: int = 0  # 0 = no timeout
    user_agent: str = "Site-Audit/1.0 (+https://github.com/site-audit)"
    follow_redirects: bool = True


@dataclass
class PerformanceSettings:
    """Settings for the PageSpeed Insights auditor."""
    psi_endpoint: str = "https://www.googleapis.com/pagespeedonline/v5/runPagespeed"
    strategy: str = "mobile"
    api_key: str = ""

    # Core Web Vitals thresholds
    lcp_poor_ms: int = 2500
    lcp_needs_improvement_ms: int = 2000
    inp_poor_ms: int = 500
    inp_needs_improvement_ms: int = 200
    fid_poor_ms: int = 300
    fid_needs_improvement_ms: int = 100
    cls_poor: float = 0.25
    cls_needs_improvement: float = 0.1

    # Score penalties
    error_penalty: int = 25
    warning_penalty: int = 10


@dataclass
class SeoSettings:
    """Settings for SEO auditor thresholds and score weights."""
    required_meta: tuple[str, ...] = ("description", "viewport")
    required_link_rel: tuple[str, ...] = ("canonical",)
    legacy_dom_tags: tuple[str, ...] = ("center", "font", "marquee")
    open_graph_tags: tuple[str, ...] = ("og:title", "og:description", "og:image", "og:url")
    twitter_tags: tuple[str, ...] = ("twitter:card", "twitter:title", "twitter:description")
    min_content_words: int = 300  # Thin content threshold
    top_keywords: int = 5

    # Link health
    check_links: bool = True
    max_links_checked: int = 50
    link_check_concurrency: int = 8
    link_check_timeout_ms: int = 5000
    link_check_get_fallback_timeout_ms: int = 8000
    known_bot_blockers: tuple[str, ...] = (
        "linkedin.com",
        "www.linkedin.com",
        "instagram.com",
        "www.instagram.com",
        "facebook.com",
        "www.facebook.com",
        "x.com",
        "twitter.com",
    )

    # Crawlability
    check_crawlability: bool = True

    # Score weights (points deducted)
    missing_meta_weight: int = 8
    missing_canonical_weight: int = 8
    missing_h1_weight: int = 8
    multiple_h1_weight: int = 4
    invalid_json_ld_weight: int = 20
    thin_content_weight: int = 6
    missing_alt_weight: int = 2
    missing_alt_cap: int = 10
    legacy_tag_weight: int = 4
    internal_broken_link_weight: int = 5
    internal_broken_link_max: int = 20
    external_broken_link_weight: int = 2
    external_broken_link_max: int = 10
    missing_og_image_weight: int = 3
    blocking_root_robots_weight: int = 25
    missing_sitemap_weight: int = 5


@dataclass
class SecuritySettings:
    """Settings for the security header auditor."""
    required_headers: tuple[str, ...] = ("content-security-policy", "x-frame-options")
    recommended_headers: tuple[str, ...] = ("x-content-type-options",)
    fingerprint_headers: tuple[str, ...] = ("server", "x-powered-by")
    missing_required_penalty: int = 30
    missing_recommended_penalty: int = 10


@dataclass
class DeepAnalysisSettings:
    """Settings for the LLM deep analysis layer."""
    api_key: str = ""
    base_url: str = "https://api.groq.com/openai/v1"
    model: str = "llama-3.3-70b-versatile"
    timeout_seconds: float = 15.0
    temperature: float = 0.1
    max_tokens: int = 1024
    heartbeat_interval: float = 2.0  # seconds
    skip_min_score: int = 90


@dataclass
class APISettings:
    """API-specific settings."""
    cache_ttl_ms: int = 60_000  # 0 disables the response cache
    cache_max_entries: int = 256

    # CORS
    cors_origins: list[str] = field(default_factory=lambda: ["*"])


@dataclass
class Settings:
    """Main application settings container."""
    fetcher: FetcherSettings = field(default_factory=FetcherSettings)
    performance: PerformanceSettings = field(default_factory=PerformanceSettings)
    seo: SeoSettings = field(default_factory=SeoSettings)
    security: SecuritySettings = field(default_factory=SecuritySettings)
    deep: DeepAnalysisSettings = field(default_factory=DeepAnalysisSettings)
    api: APISettings = field(default_factory=APISettings)

    # Application settings
    debug: bool = False

    def __post_init__(self):
        """Load settings from environment variables."""
        self.debug = os.environ.get("SITE_AUDIT_DEBUG", "").lower() in ("true", "1", "yes")

        # Fetcher overrides
        if timeout := os.environ.get("SITE_AUDIT_TIMEOUT_MS"):
            self.fetcher.default_timeout_ms = int(timeout)
        if user_agent := os.environ.get("SITE_AUDIT_USER_AGENT"):
            self.fetcher.user_agent = user_agent

        # Third-party API keys
        if psi_key := os.environ.get("PAGESPEEDINSIGHTS_API_KEY"):
            self.performance.api_key = psi_key
        if groq_key := os.environ.get("GROQ_API_KEY"):
            self.deep.api_key = groq_key
        if model := os.environ.get("SITE_AUDIT_DEEP_MODEL"):
            self.deep.model = model

        # SEO overrides
        if check_links := os.environ.get("SITE_AUDIT_CHECK_LINKS"):
            self.seo.check_links = check_links.lower() in ("true", "1", "yes")

        # API overrides
        if cache_ttl := os.environ.get("AUDIT_CACHE_TTL_MS"):
            self.api.cache_ttl_ms = int(cache_ttl)
        if cors := os.environ.get("SITE_AUDIT_CORS_ORIGINS"):
            self.api.cors_origins = [o.strip() for o in cors.split(",")]


# Global settings instance
settings = Settings()
