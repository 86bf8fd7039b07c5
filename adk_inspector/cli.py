"""adk-inspector CLI: render detection results.

Commands:
- detect PATH: classify one directory
- find PATH: list ADK projects under a tree
- config PATH: configuration facts, issues and recommendations
- validate FILE...: admission verdicts and statistics for candidate files
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import NoReturn

import typer
from rich import print as rprint
from rich.console import Console
from rich.table import Table

from adk_inspector.detect.config import ConfigAnalyzer
from adk_inspector.detect.files import FileValidator, format_file_size
from adk_inspector.detect.project import ProjectClassifier
from adk_inspector.errors import DetectionError
from adk_inspector.logging import set_level
from adk_inspector.settings import load_preset

app = typer.Typer(add_completion=False, help="Detect and inspect Google ADK projects")
console = Console()

_VALIDATORS = {
    "default": FileValidator.default,
    "code-review": FileValidator.for_code_review,
    "config-files": FileValidator.for_config_files,
}
_MASK = "***"


@app.callback()
def main(verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging")) -> None:
    if verbose:
        set_level(logging.DEBUG)


def _fail(exc: Exception) -> NoReturn:
    rprint(f"[red]Error:[/red] {exc}")
    raise typer.Exit(code=1)


@app.command()
def detect(
    path: str = typer.Argument(".", help="Directory to classify"),
    preset: str = typer.Option("default", help="default | code-review | project-analysis"),
    as_json: bool = typer.Option(False, "--json", help="Emit JSON"),
) -> None:
    try:
        classifier = ProjectClassifier.from_config(load_preset(preset))
        info = classifier.detect(Path(path))
    except (DetectionError, ValueError) as exc:
        _fail(exc)
    if as_json:
        print(info.model_dump_json(indent=2))
        return

    table = Table(title=f"Project: {info.root_path}")
    table.add_column("Field", style="cyan")
    table.add_column("Value")
    table.add_row("type", info.project_type)
    table.add_row("Cargo.toml", str(info.has_build_descriptor))
    table.add_row("requirements.txt", str(info.has_requirements_manifest))
    table.add_row("ADK dependencies", str(info.has_sdk_dependencies))
    table.add_row("ADK config", str(info.has_sdk_config))
    table.add_row("ADK version", info.sdk_version or "-")
    table.add_row("estimated size", format_file_size(info.estimated_size))
    console.print(table)


@app.command()
def find(
    path: str = typer.Argument(".", help="Root of the tree to search"),
    preset: str = typer.Option("default", help="default | code-review | project-analysis"),
    max_depth: int | None = typer.Option(None, "--max-depth", help="Override preset depth"),
    as_json: bool = typer.Option(False, "--json", help="Emit JSON"),
) -> None:
    try:
        config = load_preset(preset)
    except ValueError as exc:
        _fail(exc)
    if max_depth is not None:
        config = config.model_copy(update={"max_depth": max_depth})
    projects = ProjectClassifier.from_config(config).find_projects(Path(path))

    if as_json:
        print(json.dumps([p.model_dump(mode="json") for p in projects], indent=2))
        return
    if not projects:
        rprint("[yellow]No ADK projects found[/yellow]")
        return
    table = Table(title="ADK projects")
    table.add_column("Path", style="cyan")
    table.add_column("Type")
    table.add_column("Version")
    for p in projects:
        table.add_row(str(p.root_path), p.project_type, p.sdk_version or "-")
    console.print(table)


@app.command()
def config(
    path: str = typer.Argument(".", help="Project root"),
    as_json: bool = typer.Option(False, "--json", help="Emit JSON"),
    show_secrets: bool = typer.Option(
        False, "--show-secrets", help="Print environment values instead of masking them"
    ),
) -> None:
    analyzer = ConfigAnalyzer()
    try:
        info = analyzer.detect(Path(path))
    except DetectionError as exc:
        _fail(exc)
    issues = analyzer.validate(info)
    recs = analyzer.recommendations(info)

    if as_json:
        payload = info.model_dump(mode="json")
        if not show_secrets:
            payload["environment_variables"] = {
                key: _MASK for key in payload["environment_variables"]
            }
        payload["issues"] = issues
        payload["recommendations"] = recs
        print(json.dumps(payload, indent=2))
        return

    table = Table(title="Configuration files")
    table.add_column("File", style="cyan")
    table.add_column("Type")
    table.add_column("Settings")
    for f in info.config_files:
        table.add_row(str(f.path), f.config_type, ", ".join(f.detected_settings) or "-")
    console.print(table)
    rprint(f"ADK config: {info.has_sdk_config}  version: {info.sdk_version or '-'}")
    rprint(
        f"Google API: {info.primary_api_configured}  Vertex AI: {info.secondary_api_configured}"
        f"  MCP: {info.mcp_server_configured}"
    )
    for key, value in sorted(info.environment_variables.items()):
        shown = f"= {value}" if show_secrets else "is set"
        rprint(f"  [cyan]{key}[/cyan] {shown}")
    for issue in issues:
        rprint(f"[red]issue:[/red] {issue}")
    for rec in recs:
        rprint(f"[green]hint:[/green] {rec}")


@app.command()
def validate(
    files: list[str] = typer.Argument(..., help="Files to check"),
    preset: str = typer.Option("default", help="default | code-review | config-files"),
    as_json: bool = typer.Option(False, "--json", help="Emit JSON"),
) -> None:
    if preset not in _VALIDATORS:
        _fail(ValueError(f"Unknown preset {preset!r} (choose from {', '.join(_VALIDATORS)})"))
    validator = _VALIDATORS[preset]()
    results = validator.validate_files([Path(f) for f in files])
    stats = FileValidator.statistics(results)

    if as_json:
        print(
            json.dumps(
                {
                    "results": [r.model_dump(mode="json") for r in results],
                    "statistics": stats.model_dump(),
                },
                indent=2,
            )
        )
        return

    table = Table(title=f"Validation ({preset})")
    table.add_column("File", style="cyan")
    table.add_column("Type")
    table.add_column("Size")
    table.add_column("Verdict")
    for r in results:
        verdict = "[green]ok[/green]" if r.is_valid else f"[red]{r.reason}[/red]"
        table.add_row(str(r.path), r.file_type, format_file_size(r.file_size), verdict)
    console.print(table)
    rprint(
        f"{stats.valid_files}/{stats.total_files} valid ({stats.valid_percentage:.0f}%),"
        f" {format_file_size(stats.valid_size)} admitted"
    )


if __name__ == "__main__":
    app()
