from __future__ import annotations

from pathlib import Path
from typing import Optional

import orjson
import typer

from .config import Settings
from .core.engine import ViewTreeClassifier
from .errors import MalformedTree, SnapshotParsingError
from .logging import setup_logging
from .types import Node, parse_view_tree

app = typer.Typer(no_args_is_help=True, help="Detect login forms in view-tree snapshots.")


def main() -> None:
    app()


def _load_settings(denylist: Optional[str], log_file: Optional[Path]) -> Settings:
    settings = Settings.from_env()
    if denylist:
        settings = settings.with_denylist(denylist.split(","))
    setup_logging(settings.log_level, log_file)
    return settings


def _load_snapshot(snapshot: Path) -> Node:
    try:
        return parse_view_tree(snapshot.read_bytes())
    except SnapshotParsingError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from exc


@app.command()
def classify(
    snapshot: Path = typer.Argument(..., exists=True, dir_okay=False, help="JSON view-tree snapshot"),
    origin: str = typer.Option(..., help="Requesting package name or web origin"),
    save: bool = typer.Option(False, help="Build a save plan instead of a fill plan"),
    denylist: Optional[str] = typer.Option(None, help="Comma separated origins to never fill"),
    log_file: Optional[Path] = typer.Option(None, help="Also write JSON logs to this file"),
) -> None:
    settings = _load_settings(denylist, log_file)
    root = _load_snapshot(snapshot)
    classifier = ViewTreeClassifier(settings)
    try:
        if save:
            plan = classifier.classify_save_request(root, origin)
        else:
            plan = classifier.classify_fill_request(root, origin)
    except MalformedTree as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from exc

    if plan is None:
        typer.echo("No login form found.")
        return
    typer.echo(orjson.dumps(plan.model_dump(mode="json"), option=orjson.OPT_INDENT_2 | orjson.OPT_SORT_KEYS).decode())


@app.command()
def fields(
    snapshot: Path = typer.Argument(..., exists=True, dir_okay=False, help="JSON view-tree snapshot"),
    log_file: Optional[Path] = typer.Option(None, help="Also write JSON logs to this file"),
) -> None:
    settings = _load_settings(None, log_file)
    root = _load_snapshot(snapshot)
    try:
        nodes = ViewTreeClassifier(settings).classify_nodes(root)
    except MalformedTree as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from exc

    for node in nodes:
        indent = "  " * len(node.ancestors)
        typer.echo(f"{indent}{node.address}: {node.field.role} (rule {node.field.confidence})")
