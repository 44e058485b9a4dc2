"""Main Typer application for govmocks."""

import json
import logging
from enum import Enum
from pathlib import Path
from typing import Annotated

import typer
import yaml
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from govmocks.cli.errorhandler import handle_cli_errors
from govmocks.core.config import ToolSettings
from govmocks.core.exporters import display_value, render_drupal_settings, render_overrides
from govmocks.core.logging import configure_logging
from govmocks.core.overlay import thaw
from govmocks.core.registry import ConfigOverrideRegistry, load_layered

console = Console()
logger = logging.getLogger(__name__)

app = typer.Typer(
    name="govmocks",
    help="Validate and export configuration overrides for Danish government mock services",
    add_completion=False,
)


class ExportFormat(str, Enum):
    OVERRIDES = "overrides"
    DRUPAL = "drupal"
    YAML = "yaml"
    JSON = "json"


SourcesArgument = Annotated[
    list[Path] | None,
    typer.Argument(help="Override sources, applied left to right (.overrides, .yml or .toml)"),
]
DebugOption = Annotated[bool, typer.Option("--debug", help="Show full tracebacks on errors")]


@app.callback()
def main(
    log_level: Annotated[
        str | None,
        typer.Option("--log-level", help="Logging level (defaults to GOVMOCKS_LOG_LEVEL or INFO)"),
    ] = None,
) -> None:
    """Validate and export configuration overrides for Danish government mock services."""
    configure_logging(log_level or ToolSettings().log_level)


def _load(sources: list[Path] | None) -> ConfigOverrideRegistry:
    paths = sources or ToolSettings().default_sources
    if not paths:
        msg = "No override sources given and GOVMOCKS_DEFAULT_SOURCES is not set"
        raise typer.BadParameter(msg, param_hint="SOURCES")
    return load_layered(*paths)


def _build_summary(registry: ConfigOverrideRegistry) -> str:
    lines = [f"[green]Configuration is valid![/green] ({len(registry)} entries)", ""]

    oidc = registry.openid_connect
    lines.append("[cyan]OpenID Connect (MitID mock):[/cyan]")
    if oidc is None:
        lines.append("  Not configured")
    else:
        lines.append(f"  Enabled: {'yes' if oidc.enabled else 'no'}")
        lines.append(f"  Client ID: {escape(oidc.settings.client_id) or '-'}")
        lines.append(f"  Authorization: {oidc.settings.authorization_endpoint or '-'}")
        lines.append(f"  Token: {oidc.settings.token_endpoint or '-'}")

    lines.append("")
    platform = registry.serviceplatformen
    lines.append("[cyan]Serviceplatformen:[/cyan]")
    if platform is None:
        lines.append("  Not configured")
    else:
        lines.append(f"  CPR: {platform.cpr_endpoint or '-'}")
        lines.append(f"  CVR: {platform.cvr_endpoint or '-'}")
        lines.append(f"  Digital Post: {platform.digital_post_endpoint or '-'}")

    return "\n".join(lines)


@app.command()
def check(sources: SourcesArgument = None, debug: DebugOption = False) -> None:
    """Load and validate override sources.

    Examples:
        govmocks check local.overrides ddev.overrides

    """
    with handle_cli_errors(debug=debug):
        registry = _load(sources)
    console.print(Panel(_build_summary(registry), title="govmocks", border_style="green"))


@app.command()
def get(
    key: Annotated[str, typer.Argument(help="Dotted key path, e.g. serviceplatformen.settings.cpr_endpoint")],
    sources: SourcesArgument = None,
    debug: DebugOption = False,
) -> None:
    """Print the value stored at KEY."""
    with handle_cli_errors(debug=debug):
        value = _load(sources).get(key)

    if isinstance(value, bool):
        typer.echo("true" if value else "false")
    elif isinstance(value, str):
        typer.echo(value)
    else:
        # yaml.safe_dump cannot represent read-only mappings
        typer.echo(yaml.safe_dump(thaw(value), sort_keys=False).rstrip("\n"))


@app.command()
def show(
    sources: SourcesArgument = None,
    reveal: Annotated[bool, typer.Option("--reveal", help="Show secret values in clear text")] = False,
    debug: DebugOption = False,
) -> None:
    """List every override entry, masking secrets."""
    with handle_cli_errors(debug=debug):
        registry = _load(sources)

    table = Table(title=f"Overrides ({registry.source_name})")
    table.add_column("Key", style="cyan", overflow="fold")
    table.add_column("Value", style="green", overflow="fold")
    for entry in registry.entries:
        table.add_row(entry.dotted_path, escape(display_value(entry.key_path, entry.value, reveal=reveal)))
    console.print(table)


@app.command()
def export(
    sources: SourcesArgument = None,
    output_format: Annotated[
        ExportFormat,
        typer.Option("--format", "-f", help="Output format", case_sensitive=False),
    ] = ExportFormat.OVERRIDES,
    output: Annotated[
        Path | None,
        typer.Option("--output", "-o", help="Write to this file instead of stdout"),
    ] = None,
    debug: DebugOption = False,
) -> None:
    """Render the merged overrides in another format."""
    with handle_cli_errors(debug=debug):
        registry = _load(sources)

        if output_format is ExportFormat.DRUPAL:
            text = render_drupal_settings(registry)
        elif output_format is ExportFormat.YAML:
            text = yaml.safe_dump(registry.as_dict(), sort_keys=False, allow_unicode=True)
        elif output_format is ExportFormat.JSON:
            text = json.dumps(registry.as_dict(), indent=2, ensure_ascii=False) + "\n"
        else:
            text = render_overrides(registry)

        if output is None:
            typer.echo(text, nl=False)
            return

        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(text, encoding="utf-8")
    logger.info("Wrote %s export to %s", output_format.value, output)
