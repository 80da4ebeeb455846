from __future__ import annotations

import json
import logging
import os
from pathlib import Path

import typer

from apod_store import (
    ConfigurationError,
    Failed,
    Fetched,
    Picture,
    PictureStore,
    StoreConfig,
    load_config,
)

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
)

app = typer.Typer(help="Daily picture store CLI")

_CONFIG_OPTION = typer.Option(
    Path("config/apod.yaml"),
    "--config",
    help="Config file path (JSON or YAML).",
    exists=True,
    dir_okay=False,
    readable=True,
)
_API_KEY_ENV_OPTION = typer.Option(
    None,
    "--api-key-env",
    help="Environment variable to read the API key from.",
)


@app.command("sync")
def sync_store(
    config_path: Path = _CONFIG_OPTION,
    api_key_env: str | None = _API_KEY_ENV_OPTION,
    limit: int | None = typer.Option(
        None,
        "--limit",
        help="Maximum number of days to download in this run.",
        min=0,
    ),
) -> None:
    """Download every missing day from today back to start_date."""
    config = _load_config_or_exit(config_path, api_key_env=api_key_env)

    fetched = 0
    skipped = 0
    failed = 0
    with PictureStore(config) as store:
        for outcome in store.synchronize(limit=limit):
            if isinstance(outcome, Fetched):
                fetched += 1
                typer.echo(f"new {outcome.date} {_title(outcome.picture)}")
            elif isinstance(outcome, Failed):
                failed += 1
                typer.echo(f"error {outcome.date} {outcome.error.message}", err=True)
            else:
                skipped += 1

    typer.echo(f"fetched={fetched} skipped={skipped} failed={failed}")


@app.command("page")
def show_page(
    config_path: Path = _CONFIG_OPTION,
    page: int = typer.Option(0, "--page", help="Page number, 0 is the newest.", min=0),
    page_size: int = typer.Option(24, "--page-size", help="Days per page.", min=1),
    as_json: bool = typer.Option(False, "--json", help="Print records as JSON."),
) -> None:
    """List stored days for one page."""
    config = _load_config_or_exit(config_path)
    with PictureStore(config) as store:
        pictures = store.paginate(page, page_size)

    if as_json:
        payload = {day: picture.to_dict() for day, picture in pictures.items()}
        typer.echo(json.dumps(payload, ensure_ascii=False, indent=2))
        return

    if not pictures:
        typer.echo("no stored pictures on this page")
        return
    for day, picture in pictures.items():
        thumbnail = picture.thumbnail_url or "-"
        typer.echo(f"{day} | {picture.media_type} | {_title(picture)} | {thumbnail}")


@app.command("clear")
def clear_store(
    config_path: Path = _CONFIG_OPTION,
    yes: bool = typer.Option(False, "--yes", help="Confirm deletion of all stored files."),
) -> None:
    """Delete every stored record and thumbnail."""
    if not yes:
        typer.echo("refusing to clear the store without --yes", err=True)
        raise typer.Exit(code=1)

    config = _load_config_or_exit(config_path)
    with PictureStore(config) as store:
        removed = store.clear()
    typer.echo(f"removed={removed}")


def _load_config_or_exit(config_path: Path, *, api_key_env: str | None = None) -> StoreConfig:
    overrides: dict[str, str] = {}
    if api_key_env:
        api_key = os.getenv(api_key_env, "").strip()
        if not api_key:
            typer.echo(f"Environment variable {api_key_env} is not set.", err=True)
            raise typer.Exit(code=1)
        overrides["api_key"] = api_key

    try:
        return load_config(config_path, **overrides)
    except ConfigurationError as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(code=1) from exc


def _title(picture: Picture) -> str:
    extra = picture.model_extra or {}
    return str(extra.get("title") or "-")


def main() -> None:
    """CLI entrypoint."""
    app()


if __name__ == "__main__":
    main()
