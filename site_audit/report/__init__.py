from site_audit.report.formatter import OUTPUT_FORMATS, OutputFormat, format_report

__all__ = ["OUTPUT_FORMATS", "OutputFormat", "format_report"]
