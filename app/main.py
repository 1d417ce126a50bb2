"""FastAPI entry point."""
import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.base import BaseHTTPMiddleware

from app.api.exception_handlers import register_exception_handlers
from app.api.v1.deps import get_settings
from app.api.v1.router import router as api_router
from site_audit import __version__

settings = get_settings()

logging.basicConfig(
    level=logging.DEBUG if settings.debug else logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

DOCS_PATHS = frozenset({"/api/docs", "/api/redoc", "/api/openapi.json"})

# Swagger UI and ReDoc load their assets from jsdelivr
DOCS_CSP = (
    "default-src 'self'; "
    "script-src 'self' 'unsafe-inline' https://cdn.jsdelivr.net; "
    "style-src 'self' 'unsafe-inline' https://cdn.jsdelivr.net; "
    "img-src 'self' data: https://cdn.jsdelivr.net https://fastapi.tiangolo.com; "
    "frame-ancestors 'none'"
)

API_HEADERS = {
    "content-security-policy": "default-src 'none'; frame-ancestors 'none'",
    "x-frame-options": "DENY",
    "x-content-type-options": "nosniff",
    "referrer-policy": "no-referrer",
}


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Send the headers the security auditor checks for on every response."""

    def __init__(self, app, headers: dict[str, str], docs_csp: str):
        super().__init__(app)
        self.headers = headers
        self.docs_csp = docs_csp

    async def dispatch(self, request: Request, call_next):
        response = await call_next(request)
        for name, value in self.headers.items():
            response.headers.setdefault(name, value)
        if request.url.path in DOCS_PATHS:
            response.headers["content-security-policy"] = self.docs_csp
        return response


app = FastAPI(
    title="Site Audit API",
    description="""
API for auditing web pages for performance, SEO and security.

## Audits

- **perf**: Core Web Vitals (LCP, INP/FID, CLS) from PageSpeed Insights
- **seo**: Meta tags, headings, structured data, content, links, robots.txt and sitemap
- **security**: HTTP security response headers

## Deep Analysis

`POST /api/v1/audits/deep` runs every audit, then asks an LLM for a fix plan.
`POST /api/v1/audits/deep/stream` streams the same flow as Server-Sent Events.

## Errors

Errors use `{"error": {"code", "message", "details"}}`. Invalid URLs and
unknown audit types return 400, upstream timeouts 504, upstream failures 502.
""",
    version=__version__,
    docs_url="/api/docs",
    redoc_url="/api/redoc",
    openapi_url="/api/openapi.json",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.api.cors_origins,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Content-Type"],
)
app.add_middleware(SecurityHeadersMiddleware, headers=API_HEADERS, docs_csp=DOCS_CSP)

register_exception_handlers(app)

app.include_router(api_router, prefix="/api/v1")
