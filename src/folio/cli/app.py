"""Typer-based CLI for folio."""

from pathlib import Path
from typing import Annotated, NoReturn

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from folio.core.config import FolioConfig
from folio.core.exceptions import FolioError
from folio.core.logging import configure_logging
from folio.core.ordering import OrderMode
from folio.core.pipeline import build_site, collect

app = typer.Typer(name="folio", help="Publish front-matter Markdown articles as a static page set.")

console = Console()

ContentDirArg = Annotated[
    Path | None, typer.Argument(help="Directory of Markdown sources (default: paths.content_dir)")
]
SiteRootOpt = Annotated[Path, typer.Option("--site-root", help="Directory holding .folio.toml")]


@app.callback()
def main() -> None:
    """Configure logging before any command runs."""
    configure_logging()


def _load_config(site_root: Path, content_dir: Path | None, **overrides: object) -> FolioConfig:
    """Load .folio.toml/env settings and apply command-line overrides on top."""
    config = FolioConfig.load(site_root)

    path_updates = {"content_dir": content_dir, "output_dir": overrides.get("output_dir")}
    order_updates = {"mode": overrides.get("mode"), "descending": overrides.get("descending")}
    build_updates = {"workers": overrides.get("workers")}

    return config.model_copy(
        update={
            "paths": config.paths.model_copy(update={k: v for k, v in path_updates.items() if v is not None}),
            "ordering": config.ordering.model_copy(
                update={k: v for k, v in order_updates.items() if v is not None}
            ),
            "build": config.build.model_copy(update={k: v for k, v in build_updates.items() if v is not None}),
        }
    )


def _fail(exc: Exception) -> NoReturn:
    console.print(f"[bold red]Build failed:[/bold red] {escape(str(exc))}", highlight=False, soft_wrap=True)
    raise typer.Exit(1) from exc


@app.command()
def build(
    content_dir: ContentDirArg = None,
    output: Annotated[Path | None, typer.Option("--output", "-o", help="Output directory")] = None,
    site_root: SiteRootOpt = Path(),
    workers: Annotated[int | None, typer.Option(min=1, help="Threads for parsing and writing")] = None,
    mode: Annotated[OrderMode | None, typer.Option(help="Ordering comparison rule")] = None,
    descending: Annotated[
        bool | None, typer.Option("--descending/--ascending", help="Sort direction")
    ] = None,
) -> None:
    """Render every published document and the index page."""
    try:
        config = _load_config(
            site_root, content_dir, output_dir=output, workers=workers, mode=mode, descending=descending
        )
        report = build_site(config)
    except (FolioError, OSError) as exc:
        _fail(exc)

    console.print(
        f"[bold green]Published {report.document_count} documents[/bold green] "
        f"to {config.paths.abs_output_dir}",
        highlight=False,
        soft_wrap=True,
    )


@app.command()
def check(content_dir: ContentDirArg = None, site_root: SiteRootOpt = Path()) -> None:
    """Load and index the documents without writing anything."""
    try:
        config = _load_config(site_root, content_dir)
        collection = collect(config)
    except (FolioError, OSError) as exc:
        _fail(exc)

    table = Table(title=config.build.site_title)
    table.add_column("#", justify="right")
    table.add_column("Identifier", style="bold cyan")
    table.add_column("Title")
    table.add_column("Order")
    table.add_column("Source")

    for position, doc in enumerate(collection, 1):
        order = "" if doc.order is None else str(doc.order)
        table.add_row(str(position), doc.identifier, doc.title, order, doc.source)

    console.print(table)
    console.print(f"{len(collection)} published documents", highlight=False)


if __name__ == "__main__":
    app()
