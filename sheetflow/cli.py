"""Typer based command line entry points for SheetFlow."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import NoReturn, Optional

import typer

from sheetflow.config import WEBHOOK_OPERATIONS, Settings, get_webhook_url, load_settings
from sheetflow.core.errors import SheetFlowError
from sheetflow.core.logger import get_logger
from sheetflow.core.pipeline import EditRouter, build_cache
from sheetflow.services.context import ContextService
from sheetflow.services.sheets import EditEvent, Spreadsheet, load_workbook

app = typer.Typer(help="Spreadsheet edit automation: context caching and webhook delivery.")

_STATE: dict[str, Optional[Path]] = {"config": None}


@app.callback()
def main_callback(
    log_level: str = typer.Option(
        "INFO",
        "--log-level",
        help="Set global logging level (e.g. DEBUG/INFO/WARNING).",
    ),
    config: Optional[Path] = typer.Option(
        None,
        "--config",
        help="Settings YAML file (defaults to $SHEETFLOW_CONFIG or the packaged settings).",
    ),
) -> None:
    """Configure global CLI behaviour before executing commands."""

    logger = get_logger()
    level_value = getattr(logging, log_level.upper(), None)
    if not isinstance(level_value, int):
        raise typer.BadParameter(f"Unknown log level: {log_level}")
    logger.setLevel(level_value)
    _STATE["config"] = config


def _settings() -> Settings:
    try:
        return load_settings(_STATE["config"])
    except SheetFlowError as exc:
        _fail(exc)


def _open_workbook(path: Path, spreadsheet_id: Optional[str]) -> Spreadsheet:
    try:
        return load_workbook(path, spreadsheet_id=spreadsheet_id)
    except SheetFlowError as exc:
        _fail(exc)


def _fail(exc: Exception) -> NoReturn:
    get_logger().error("sheetflow.cli failed: %s", exc)
    typer.secho(f"Error: {exc}", fg=typer.colors.RED, err=True)
    raise typer.Exit(code=1)


def _echo_json(data: object) -> None:
    typer.echo(json.dumps(data, ensure_ascii=False, indent=2))


@app.command("context")
def cmd_context(
    workbook: Path = typer.Argument(..., exists=True, dir_okay=False, help="Excel workbook with a Context sheet"),
    spreadsheet_id: Optional[str] = typer.Option(None, "--spreadsheet-id", help="Override the spreadsheet id"),
    refresh: bool = typer.Option(False, "--refresh", help="Rebuild and re-cache instead of reading the cache"),
) -> None:
    """Print the context tree built from the Context sheet."""

    settings = _settings()
    spreadsheet = _open_workbook(workbook, spreadsheet_id)
    service = ContextService(settings, build_cache(settings, persistent=True))
    try:
        tree = service.refresh(spreadsheet) if refresh else service.get_context(spreadsheet)
    except SheetFlowError as exc:
        _fail(exc)
    else:
        _echo_json(tree)


@app.command("edit")
def cmd_edit(
    workbook: Path = typer.Argument(..., exists=True, dir_okay=False, help="Excel workbook"),
    sheet: str = typer.Option(..., "--sheet", help="Edited sheet name (Context or Epics)"),
    row: int = typer.Option(..., "--row", min=1, help="1-based edited row"),
    column: int = typer.Option(..., "--column", min=1, help="1-based edited column"),
    value: Optional[str] = typer.Option(None, "--value", help="New cell value (defaults to the workbook cell)"),
    user: str = typer.Option("", "--user", help="Acting user email"),
    spreadsheet_id: Optional[str] = typer.Option(None, "--spreadsheet-id", help="Override the spreadsheet id"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Print the payload instead of posting it"),
) -> None:
    """Replay an edit trigger against a workbook."""

    settings = _settings()
    spreadsheet = _open_workbook(workbook, spreadsheet_id)
    if value is None:
        edited = spreadsheet.get_sheet_by_name(sheet)
        cell_value = edited.cell(row, column) if edited is not None else ""
    else:
        cell_value = value
    event = EditEvent(
        spreadsheet=spreadsheet,
        sheet_name=sheet,
        row=row,
        column=column,
        value=cell_value,
        user=user,
    )
    router = EditRouter.from_settings(settings, cache=build_cache(settings, persistent=True))
    try:
        outcome = router.handle_edit(event, dry_run=dry_run)
    finally:
        router.close()
    typer.echo(f"{outcome.sheet}: {outcome.action} {outcome.detail}".rstrip())
    if outcome.payload is not None and (dry_run or outcome.action == "context_cached"):
        _echo_json(outcome.payload)
    if not outcome.ok:
        raise typer.Exit(code=1)


@app.command("webhooks")
def cmd_webhooks() -> None:
    """List webhook operations and whether a URL is configured."""

    settings = _settings()
    operations = list(WEBHOOK_OPERATIONS) + sorted(set(settings.webhooks) - set(WEBHOOK_OPERATIONS))
    for operation in operations:
        url = get_webhook_url(settings, operation)
        typer.echo(f"{operation:32} {'configured' if url else '<not set>'}")


if __name__ == "__main__":  # pragma: no cover
    app()
