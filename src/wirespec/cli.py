from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from wirespec.config import CompilerConfig
from wirespec.emitter.endpoint import Endpoint, compile_endpoint
from wirespec.errors import CodecError, DescriptionError, SchemaError
from wirespec.frontend.loader import load_descriptions
from wirespec.orchestrator.pipeline import run_check

app = typer.Typer(no_args_is_help=True, add_completion=False)

console = Console()


@app.callback()
def main_options(
    log_level: Optional[str] = typer.Option(None, help="Log level (default: WIRESPEC_LOG_LEVEL or WARNING)"),
) -> None:
    level = (log_level or CompilerConfig.from_env().log_level).upper()
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def _config() -> CompilerConfig:
    try:
        return CompilerConfig.from_env()
    except ValueError as e:
        raise typer.BadParameter(str(e))


def _print_schema_error(e: SchemaError) -> None:
    table = Table(show_header=True, header_style="bold", title=f"[red]{escape(e.endpoint or 'endpoint')}[/red]")
    table.add_column("ISSUE", no_wrap=True)
    table.add_column("MESSAGE")
    table.add_column("FIELDS")
    for issue in e.issues:
        table.add_row(issue.code, escape(issue.message), escape(", ".join(issue.locations)))
    console.print(table)


def _load_one(file: Path, name: Optional[str]) -> Endpoint:
    if not file.exists():
        raise typer.BadParameter(f"File does not exist: {file}")
    try:
        descriptions = load_descriptions(file)
    except DescriptionError as e:
        console.print(f"[bold red]error[/bold red] {escape(str(e))}")
        raise typer.Exit(code=1)

    if name is not None:
        descriptions = [d for d in descriptions if d.metadata.name == name]
        if not descriptions:
            raise typer.BadParameter(f"No endpoint named {name!r} in {file}")
    elif len(descriptions) != 1:
        names = ", ".join(d.metadata.name for d in descriptions)
        raise typer.BadParameter(f"{file} holds {len(descriptions)} endpoints ({names}); pick one with --name")

    try:
        return compile_endpoint(descriptions[0], _config())
    except SchemaError as e:
        _print_schema_error(e)
        raise typer.Exit(code=1)


@app.command()
def check(
    paths: List[Path] = typer.Argument(..., help="Description files or directories to scan"),
) -> None:
    """Compile every endpoint description and report all schema errors."""
    for p in paths:
        if not p.exists():
            raise typer.BadParameter(f"Path does not exist: {p}")

    result = run_check(paths, _config())

    console.print(f"Description files: {result.files_scanned}")
    console.print(f"Endpoints: {len(result.results)} ({len(result.failed)} failed)")

    for r in result.results:
        if r.ok:
            m = r.endpoint.metadata
            console.print(f"  [green]ok[/green]    {m.method:<6} {escape(m.path):<40} {escape(m.name)}")
            continue

        label = r.name or Path(r.source).name
        console.print(f"  [red]error[/red] {escape(label)}  ({escape(r.source)})")
        if r.error:
            console.print(f"        {escape(r.error)}")
        for issue in r.issues:
            where = f"  [{', '.join(issue.locations)}]" if issue.locations else ""
            console.print(escape(f"        [{issue.code}] {issue.message}{where}"))

    if not result.ok:
        raise typer.Exit(code=1)


@app.command()
def describe(
    file: Path = typer.Argument(..., help="Description file"),
    name: Optional[str] = typer.Option(None, help="Endpoint name when the file holds several"),
    format: str = typer.Option("table", help="Output format: table|json"),
) -> None:
    """Print metadata and classified fields of one endpoint."""
    fmt = format.lower().strip()
    if fmt not in ("table", "json"):
        raise typer.BadParameter("format must be one of: table, json")

    endpoint = _load_one(file, name)
    info = endpoint.describe()

    if fmt == "json":
        console.print_json(json.dumps(info))
        return

    console.print(f"[bold]{escape(info['name'])}[/bold]  {info['method']} {escape(info['path'])}")
    if info["description"]:
        console.print(escape(info["description"]))
    console.print(
        f"rate_limited={info['rate_limited']}  requires_authentication={info['requires_authentication']}"
    )

    for side in ("request", "response"):
        table = Table(show_header=True, header_style="bold", title=f"{side} (body: {info[side]['body_mode']})")
        table.add_column("FIELD", no_wrap=True)
        table.add_column("TYPE")
        table.add_column("KIND", no_wrap=True)
        for row in info[side]["fields"]:
            table.add_row(escape(row["name"]), escape(row["type"]), escape(row["kind"]))
        console.print(table)


@app.command("encode-request")
def encode_request(
    file: Path = typer.Argument(..., help="Description file"),
    values: str = typer.Option(..., help="Request field values as a JSON object"),
    name: Optional[str] = typer.Option(None, help="Endpoint name when the file holds several"),
) -> None:
    """Build a request from JSON values and print the raw HTTP request."""
    endpoint = _load_one(file, name)

    try:
        data = json.loads(values)
    except json.JSONDecodeError as e:
        raise typer.BadParameter(f"--values is not valid JSON: {e}")
    if not isinstance(data, dict):
        raise typer.BadParameter("--values must be a JSON object")

    try:
        raw = endpoint.encode_request(data)
    except (CodecError, ValueError) as e:
        console.print(f"[bold red]error[/bold red] {escape(str(e))}")
        raise typer.Exit(code=1)

    console.print_json(json.dumps(raw.to_dict()))


def main() -> None:
    app()


if __name__ == "__main__":
    main()
