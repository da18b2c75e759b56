from __future__ import annotations

from dataclasses import dataclass
import json
from pathlib import Path
from typing import Annotated, Any

import typer
from rich.console import Console
from rich.table import Table

from artref.api.server_http import run_http_server
from artref.config import load_config, write_default_config
from artref.paths import default_config_path
from artref.query import DEFAULT_PAGE_SIZE
from artref.service import ArtrefService
from artref.util.logging import setup_logging, use_color

app = typer.Typer(help="artref: browse tagged reference image folders")


@dataclass(slots=True)
class AppState:
    service: ArtrefService
    console: Console
    config_path: Path


def _state(ctx: typer.Context) -> AppState:
    st = ctx.obj
    if not isinstance(st, AppState):
        raise RuntimeError("app state not initialized")
    return st


def _emit_obj(console: Console, obj: dict, json_out: bool) -> None:
    if json_out:
        typer.echo(json.dumps(obj, indent=2))
        return
    for k, v in obj.items():
        console.print(f"[bold]{k}[/bold]: {v}")


def _images_table(title: str, rows: list[dict[str, Any]]) -> Table:
    table = Table(title=title)
    table.add_column("folder")
    table.add_column("file")
    table.add_column("url")
    table.add_column("tags")
    for row in rows:
        table.add_row(
            str(row.get("folderName", "")),
            str(row.get("fileName", "")),
            str(row.get("url", "")),
            ", ".join(row.get("tags") or []),
        )
    return table


@app.callback()
def main(
    ctx: typer.Context,
    config: Annotated[Path | None, typer.Option("--config", help="Config YAML path")] = None,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Verbose logging")] = False,
    quiet: Annotated[bool, typer.Option("--quiet", "-q", help="Only log warnings and errors")] = False,
    root: Annotated[Path | None, typer.Option("--root", help="Override the image root folder")] = None,
    base_path: Annotated[str | None, typer.Option("--base-path", help="Override the image URL prefix")] = None,
) -> None:
    setup_logging(verbose, quiet)
    cfg_path = config.expanduser() if config else default_config_path()
    if not cfg_path.exists():
        write_default_config(cfg_path)
    overrides: dict[str, Any] = {}
    if root is not None:
        overrides.setdefault("images", {})["root_path"] = str(root)
    if base_path is not None:
        overrides.setdefault("images", {})["base_serve_path"] = base_path
    cfg = load_config(cfg_path, overrides=overrides)
    color_on = use_color()
    console = Console(color_system="auto" if color_on else None)
    ctx.obj = AppState(
        service=ArtrefService(cfg),
        console=console,
        config_path=cfg_path,
    )


@app.command("init-config")
def init_config(
    ctx: typer.Context,
    path: Annotated[Path | None, typer.Option("--path", help="Write config to this path")] = None,
    json_out: Annotated[bool, typer.Option("--json")] = False,
) -> None:
    st = _state(ctx)
    written = write_default_config(path.expanduser() if path else st.config_path)
    _emit_obj(st.console, {"config_path": str(written)}, json_out)


@app.command("rebuild")
def rebuild_cmd(
    ctx: typer.Context,
    json_out: Annotated[bool, typer.Option("--json")] = False,
) -> None:
    st = _state(ctx)
    _emit_obj(st.console, st.service.rebuild(), json_out)


@app.command("random")
def random_cmd(
    ctx: typer.Context,
    folder: Annotated[str | None, typer.Option("-f", "--folder")] = None,
    tags: Annotated[str | None, typer.Option("-t", "--tags", help="Comma-separated tags, any may match")] = None,
    json_out: Annotated[bool, typer.Option("--json")] = False,
) -> None:
    st = _state(ctx)
    image = st.service.random_image(folder, tags)
    if image is None:
        st.console.print("[red]No matching image found for the selected criteria.[/red]")
        raise typer.Exit(1)
    if json_out:
        typer.echo(json.dumps(image, indent=2))
        return
    st.console.print(_images_table("random image", [image]))


@app.command("gallery")
def gallery_cmd(
    ctx: typer.Context,
    page: Annotated[int, typer.Option("-p", "--page")] = 1,
    page_size: Annotated[int, typer.Option("-n", "--page-size")] = DEFAULT_PAGE_SIZE,
    folder: Annotated[str | None, typer.Option("-f", "--folder")] = None,
    tags: Annotated[str | None, typer.Option("-t", "--tags", help="Comma-separated tags, any may match")] = None,
    json_out: Annotated[bool, typer.Option("--json")] = False,
) -> None:
    st = _state(ctx)
    result = st.service.gallery(page=page, page_size=page_size, folder=folder, tags=tags)
    if json_out:
        typer.echo(json.dumps(result, indent=2))
        return
    if not result["items"]:
        st.console.print("[dim]no images[/dim]")
    else:
        st.console.print(_images_table("gallery", result["items"]))
    st.console.print(
        f"[dim]page {result['pageNumber']}/{result['totalPages']} "
        f"({result['totalCount']} images, {result['pageSize']} per page)[/dim]"
    )


@app.command("folders")
def folders_cmd(
    ctx: typer.Context,
    tags: Annotated[str | None, typer.Option("-t", "--tags", help="Comma-separated tags, any may match")] = None,
    json_out: Annotated[bool, typer.Option("--json")] = False,
) -> None:
    st = _state(ctx)
    rows = st.service.folders(tags)
    if json_out:
        typer.echo(json.dumps(rows, indent=2))
        return
    table = Table(title="folders")
    table.add_column("name")
    table.add_column("images", justify="right")
    table.add_column("tags")
    for row in rows:
        table.add_row(str(row["name"]), str(row["imageCount"]), ", ".join(row["tags"]))
    st.console.print(table)


@app.command("tags")
def tags_cmd(
    ctx: typer.Context,
    json_out: Annotated[bool, typer.Option("--json")] = False,
) -> None:
    st = _state(ctx)
    rows = st.service.tags()
    if json_out:
        typer.echo(json.dumps(rows, indent=2))
        return
    if not rows:
        st.console.print("[dim]no tags[/dim]")
        return
    for tag in rows:
        typer.echo(tag)


@app.command("status")
def status_cmd(
    ctx: typer.Context,
    json_out: Annotated[bool, typer.Option("--json")] = False,
) -> None:
    st = _state(ctx)
    st.service.store.current_snapshot()
    _emit_obj(st.console, st.service.status(), json_out)


@app.command("serve")
def serve_cmd(
    ctx: typer.Context,
    host: Annotated[str | None, typer.Option("--host")] = None,
    port: Annotated[int | None, typer.Option("--port")] = None,
) -> None:
    st = _state(ctx)
    server_cfg = st.service.config.server
    code = run_http_server(
        st.service,
        host=host or server_cfg.host,
        port=port if port is not None else server_cfg.port,
    )
    raise typer.Exit(code)


if __name__ == "__main__":
    app()
