#!/usr/bin/env python3
"""
Validate a CV markdown file for an output format.

Usage:
    python scripts/validate_cv.py resume.md
    python scripts/validate_cv.py resume.md --format rirekisho --env-file .env
    python scripts/validate_cv.py resume.md --diagnostics
"""

import json
from pathlib import Path
from typing import Optional

import typer

from cvmark.contexts.editor.diagnostics import DiagnosticSeverity, collect_diagnostics
from cvmark.contexts.parsing.cv_parser import parse_markdown
from cvmark.contexts.validation.logger import setup_validation_logger
from cvmark.contexts.validation.validator import format_validation_error, validate_cv
from cvmark.utils.config import ConfigError, load_config, load_env_file
from cvmark.utils.result import is_failure

app = typer.Typer(help="Validate CV markdown files.")


class _EchoLogger:
    def __init__(self):
        self.count = 0

    def warning(self, message: str) -> None:
        self.count += 1
        typer.secho(f"  ! {message}", fg=typer.colors.YELLOW)


@app.command()
def main(
    input_path: Path = typer.Argument(..., help="CV markdown file"),
    format: Optional[str] = typer.Option(
        None, "--format", "-f", help="Output format: cv, rirekisho or both"
    ),
    config: Optional[Path] = typer.Option(None, "--config", help="YAML/JSON config file"),
    env_file: Optional[Path] = typer.Option(
        None, "--env-file", help=".env file with metadata fallbacks"
    ),
    log_dir: Optional[Path] = typer.Option(None, "--log-dir", help="Directory for log files"),
    debug: bool = typer.Option(False, "--debug", help="Show debug logging"),
    diagnostics: bool = typer.Option(
        False, "--diagnostics", help="Print editor diagnostics as JSON instead"
    ),
):
    """Parse and validate a CV, listing parse issues, errors and warnings."""
    try:
        settings = load_config(
            config,
            overrides={
                "format": format,
                "log_dir": str(log_dir) if log_dir else None,
                "env_file": str(env_file) if env_file else None,
                "log_level": "DEBUG" if debug else None,
            },
        )
        if settings["env_file"]:
            load_env_file(Path(settings["env_file"]))
    except ConfigError as e:
        typer.echo(f"ERROR: {e}", err=True)
        raise typer.Exit(2)

    if not input_path.exists():
        typer.echo(f"ERROR: File not found: {input_path}", err=True)
        raise typer.Exit(2)

    setup_validation_logger(
        Path(settings["log_dir"]) if settings["log_dir"] else None,
        format=settings["format"],
        level=settings["log_level"],
    )
    text = input_path.read_text(encoding="utf-8")

    if diagnostics:
        found = collect_diagnostics(text, settings["format"])
        typer.echo(json.dumps([d.to_dict() for d in found], ensure_ascii=False, indent=2))
        raise typer.Exit(1 if any(d.severity is DiagnosticSeverity.ERROR for d in found) else 0)

    typer.echo(f"Validating {input_path} for {settings['format']}")
    cv = parse_markdown(text)

    typer.echo(f"\n=== Sections ({len(cv.sections)}) ===")
    for section in cv.sections:
        typer.echo(f"  {section.id}: {section.title} ({section.content.kind.value})")

    if cv.issues:
        typer.echo(f"\n=== Parse Issues ({len(cv.issues)}) ===")
        for issue in cv.issues:
            start = issue.range.start
            typer.echo(f"  {start.line + 1}:{start.character + 1} [{issue.source}] {issue.message}")

    typer.echo("\n=== Warnings ===")
    echo_logger = _EchoLogger()
    result = validate_cv(cv, settings["format"], logger=echo_logger)
    if not echo_logger.count:
        typer.echo("  None")

    if is_failure(result):
        errors = result.error
        typer.echo(f"\n=== Errors ({len(errors)}) ===")
        for error in errors:
            typer.secho(f"  x {format_validation_error(error)}", fg=typer.colors.RED)
        raise typer.Exit(1)

    typer.secho("\n✓ Validation successful", fg=typer.colors.GREEN)


if __name__ == "__main__":
    app()
