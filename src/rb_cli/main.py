import logging
from pathlib import Path
from typing import Optional

import typer
from rb_linter.engine import LinterEngine
from rb_linter.exceptions import LintError
from rb_linter.registry import registry
from rb_tree.exceptions import MalformedTreeError

from .config import ConfigError, LintConfig
from .converters import diagnostic_to_lint_issue
from .models import FileReport, LintReport

logger = logging.getLogger(__name__)

app = typer.Typer(help="rb-lint - Pattern-based Ruby linter with autocorrection")


def _read_source(file_path: Path) -> str:
    with open(file_path, encoding="utf-8", newline="") as f:
        return f.read()


def _write_source(file_path: Path, source: str) -> None:
    with open(file_path, "w", encoding="utf-8", newline="") as f:
        f.write(source)


def _lint_one(engine: LinterEngine, file_path: Path, fix: bool, max_passes: int) -> FileReport:
    report = FileReport(file_path=str(file_path))
    try:
        source = _read_source(file_path)
        result = engine.lint_string(source, str(file_path))
        report.parse_errors = result.parse_errors

        corrected = False
        if fix and any(d.auto_fixable for d in result.diagnostics):
            fix_result = engine.fix_string(source, str(file_path), max_passes=max_passes)
            if fix_result.modified:
                _write_source(file_path, fix_result.source)
                corrected = True

        report.issues = [
            diagnostic_to_lint_issue(d, result.buffer, str(file_path), corrected=corrected and d.auto_fixable)
            for d in result.diagnostics
        ]
    except (OSError, UnicodeDecodeError, LintError, MalformedTreeError) as e:
        logger.debug("Failed to lint %s", file_path, exc_info=True)
        report.error = str(e)
    return report


@app.command()
def lint(
    files: list[Path] = typer.Argument(..., help="Ruby files to lint"),
    config_file: Optional[Path] = typer.Option(None, "--config", help="Path to config file"),
    fix: bool = typer.Option(False, help="Automatically fix offenses"),
    json_output: bool = typer.Option(False, "--json", help="Print the report as JSON"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
):
    """Run linter on Ruby files"""
    logging.basicConfig(level=logging.DEBUG if verbose else logging.WARNING, format="%(levelname)s %(name)s: %(message)s")

    try:
        if config_file is not None:
            if not config_file.exists():
                raise ConfigError(f"Config file {config_file} does not exist")
            config = LintConfig(config_file)
        else:
            config = LintConfig.discover(Path.cwd())
    except ConfigError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=2)

    engine = LinterEngine(rules=config.apply_to_registry(registry))
    report = LintReport()
    for file_path in files:
        report.files.append(_lint_one(engine, file_path, fix, config.max_fix_passes))

    if json_output:
        typer.echo(report.model_dump_json(indent=2))
    else:
        for file_report in report.files:
            if file_report.error:
                typer.echo(f"ERROR: {file_report.file_path} - {file_report.error}")
            for error in file_report.parse_errors:
                typer.echo(f"PARSE: {file_report.file_path} - {error}")
            for issue in sorted(file_report.issues, key=lambda x: (x.line_number, x.column)):
                status = " [Corrected]" if issue.corrected else ""
                typer.echo(
                    f"{issue.severity.value}: {issue.file_path}:{issue.line_number}:{issue.column + 1} "
                    f"[{issue.rule_id}]{status} - {issue.message}"
                )
        corrected = report.issue_count - report.offense_count
        typer.echo(f"\nTotal issues found: {report.issue_count} ({corrected} corrected)")

    if any(f.error for f in report.files):
        raise typer.Exit(code=2)
    if report.offense_count > 0:
        raise typer.Exit(code=1)


@app.command()
def rules():
    """List available rules"""
    for rule in registry.get_all_rules():
        fixable = " (autocorrectable)" if rule.auto_fixable else ""
        typer.echo(f"{rule.rule_id}{fixable}: {rule.description}")


if __name__ == "__main__":
    app()
