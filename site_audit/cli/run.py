"""CLI commands."""
from __future__ import annotations

import asyncio
import logging
from pathlib import Path

import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel

from site_audit import __version__
from site_audit.analyze import analyze_website, create_default_registry
from site_audit.audit.base import AuditInput, AuditStatus
from site_audit.audit.errors import AuditError, InvalidUrlError, UnknownAuditTypeError
from site_audit.audit.events import AuditEvent, AuditEventType
from site_audit.config.settings import Settings
from site_audit.report.formatter import OUTPUT_FORMATS, OutputFormat, format_report

app = typer.Typer(
    add_completion=False,
    help="Site Audit - Performance, SEO and security checks for web pages",
)
console = Console()
err_console = Console(stderr=True)

_EVENT_STYLES = {
    AuditEventType.STARTED: "[blue]…[/blue]",
    AuditEventType.COMPLETED: "[green]✓[/green]",
    AuditEventType.FAILED: "[red]✗[/red]",
}


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )


def _print_event(event: AuditEvent) -> None:
    line = f"  {_EVENT_STYLES[event.type]} {event.audit_name}"
    if event.result is not None:
        line += f" [dim]({event.result.status.value})[/dim]"
    err_console.print(line)


@app.command()
def run(
    target: str = typer.Argument(..., help="URL to audit"),
    types: str | None = typer.Option(
        None,
        "--type",
        "-t",
        help="Comma-separated audit types (perf, seo, security). Default: all",
    ),
    timeout_ms: int = typer.Option(
        0,
        "--timeout-ms",
        min=0,
        help="Per-request timeout in milliseconds, 0 disables it",
    ),
    pagespeed_key: str | None = typer.Option(
        None,
        "--pagespeed-key",
        help="PageSpeed Insights API key (defaults to PAGESPEEDINSIGHTS_API_KEY)",
    ),
    output: str = typer.Option(
        "cli",
        "--output",
        "-o",
        help="Output format: cli, json, markdown",
    ),
    save: str | None = typer.Option(
        None,
        "--save",
        "-s",
        help="Save report to file",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Show debug logging",
    ),
) -> None:
    """Run performance, SEO and security audits against a URL.

    Examples:
        site-audit run https://example.com
        site-audit run https://example.com -t seo,security -o json
        site-audit run https://example.com -o markdown -s report.md
    """
    if output not in OUTPUT_FORMATS:
        err_console.print(f"[red]Error:[/red] Invalid output format '{output}'. Use cli, json, or markdown.")
        raise typer.Exit(1)

    output_format: OutputFormat = output  # type: ignore
    load_dotenv()
    _configure_logging(verbose)
    settings = Settings()

    err_console.print(Panel.fit(
        f"[bold cyan]Site Audit[/bold cyan]\n[dim]Auditing:[/dim] {target}",
        border_style="cyan",
    ))

    audit_input = AuditInput(
        url=target,
        timeout_ms=timeout_ms,
        types=types.split(",") if types else None,
        page_speed_api_key=pagespeed_key,
    )
    registry = create_default_registry(settings=settings)

    try:
        report = asyncio.run(
            analyze_website(audit_input, registry=registry, on_audit_event=_print_event)
        )
    except (InvalidUrlError, UnknownAuditTypeError) as e:
        err_console.print(f"\n[red]Error:[/red] {e}")
        raise typer.Exit(1)
    except AuditError as e:
        err_console.print(f"\n[red]Audit Error:[/red] {e}")
        raise typer.Exit(1)

    rendered = format_report(report.to_dict(), output_format)

    if save:
        save_path = Path(save)
        save_path.write_text(rendered, encoding="utf-8")
        err_console.print(f"\n[green]Report saved to:[/green] {save_path}")
    elif output_format == "cli":
        console.print("")
        console.print(rendered)
    else:
        # stdout carries only the report so it can be piped
        console.print(rendered, markup=False, highlight=False, soft_wrap=True)

    if any(audit.status == AuditStatus.FAIL for audit in report.audits):
        raise typer.Exit(1)


@app.command()
def version() -> None:
    """Show version information."""
    console.print(f"[bold]Site Audit[/bold] v{__version__}")
    console.print("[dim]Performance, SEO and security auditor[/dim]")


if __name__ == "__main__":
    app()
