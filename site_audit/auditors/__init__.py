"""Built-in auditors."""
from site_audit.auditors.performance import PerformanceAuditor
from site_audit.auditors.security import SecurityAuditor
from site_audit.auditors.seo import SeoAuditor

__all__ = ["PerformanceAuditor", "SecurityAuditor", "SeoAuditor"]
