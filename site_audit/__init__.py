"""Site Audit - concurrent performance, SEO and security audits for web pages."""

__version__ = "1.0.0"
