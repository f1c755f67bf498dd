"""Command-line entry point: print the XPath candidates for one node."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

import click
from lxml import etree
from playwright.sync_api import Error as PlaywrightError
from playwright.sync_api import sync_playwright
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table
from rich.text import Text

from . import __version__
from .dom_tree import PageTree, TreeAccessor, short_xpath
from .locator_generator import generate_candidates, group_candidates
from .models import GenerationResult
from .oracle import PageOracle
from .page_capture import capture_page_tree, is_missing_browser_error, locate_element
from .settings import EngineSettings, load_settings

console = Console()


def setup_logging(verbose: bool = False) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False, rich_tracebacks=True)],
        force=True,
    )


@click.group()
@click.version_option(version=__version__, prog_name="xpathfinder")
def cli() -> None:
    """Generate alternative XPath locators for an element."""


@cli.command()
@click.argument("source")
@click.option("--target", "-t", required=True, help="XPath selecting the element to inspect; must match one node.")
@click.option("--frame", "frame_name", default=None, help="Name of the frame holding the target (URL sources only).")
@click.option("--json", "as_json", is_flag=True, help="Print candidate records as JSON.")
@click.option("--full", is_flag=True, help="Show every strategy instead of the basic groups.")
@click.option("--config", "config_path", type=click.Path(dir_okay=False, path_type=Path), default=None)
@click.option("--verbose", is_flag=True, help="Enable debug logging.")
def inspect(
    source: str,
    target: str,
    frame_name: str | None,
    as_json: bool,
    full: bool,
    config_path: Path | None,
    verbose: bool,
) -> None:
    """Inspect the element TARGET selects in SOURCE (an HTML file or an http(s) URL).

    \b
    Examples:
        xpathfinder inspect page.html --target "//button[1]"
        xpathfinder inspect https://example.com -t "//h1" --json
    """
    setup_logging(verbose)
    settings = load_settings(config_path)

    if source.startswith(("http://", "https://")):
        result, header = _inspect_url(source, target, frame_name, settings)
    else:
        if frame_name:
            raise click.UsageError("--frame is only supported for URL sources.")
        path = Path(source)
        if not path.is_file():
            raise click.UsageError(f"File not found: {source}")
        tree = PageTree.from_html(path.read_bytes(), name=path.name)
        node = _select_single(tree.top.root, target)
        accessor = TreeAccessor(tree)
        header = short_xpath(accessor, node)
        result = generate_candidates(accessor, node, settings=settings)

    if as_json:
        click.echo(json.dumps(result.to_records(), indent=2, ensure_ascii=False))
        return
    _render_result(result, header, simple=not full)


def _inspect_url(source: str, target: str, frame_name: str | None, settings: EngineSettings) -> tuple[GenerationResult, str]:
    try:
        with sync_playwright() as playwright:
            browser = playwright.chromium.launch(headless=True)
            try:
                page = browser.new_page()
                page.goto(source, wait_until="load")
                frame = page.frame(name=frame_name) if frame_name else page.main_frame
                if frame is None:
                    raise click.UsageError(f"No frame named {frame_name!r} on the page.")

                locator = frame.locator(f"xpath={target}")
                count = locator.count()
                if count != 1:
                    raise click.UsageError(f"--target matched {count} elements; it must match exactly one.")
                handle = locator.element_handle()

                tree = capture_page_tree(page)
                node = locate_element(tree, handle)
                if node is None:
                    raise click.ClickException("The selected element could not be mapped onto the page snapshot.")
                accessor = TreeAccessor(tree)
                result = generate_candidates(accessor, node, oracle=PageOracle(), settings=settings)
                return result, short_xpath(accessor, node)
            finally:
                browser.close()
    except PlaywrightError as exc:
        if is_missing_browser_error(exc):
            raise click.ClickException("Chromium is not installed. Run `playwright install chromium`.") from exc
        raise click.ClickException(f"Browser error: {exc}") from exc


def _select_single(root: Any, target: str) -> Any:
    try:
        matches = root.getroottree().xpath(target)
    except etree.XPathError as exc:
        raise click.UsageError(f"Invalid --target expression: {exc}") from exc
    elements = [item for item in matches if isinstance(item, etree._Element)] if isinstance(matches, list) else []
    if len(elements) != 1:
        raise click.UsageError(f"--target matched {len(elements)} elements; it must match exactly one.")
    return elements[0]


def _render_result(result: GenerationResult, header: str, *, simple: bool) -> None:
    console.print(f"Selected element: {header}", markup=False)
    if result.status == "no_candidates":
        console.print(result.message, style="bold red", markup=False)
        return

    table = Table(title=f"{result.count} XPath candidate(s) for <{result.tag}>")
    table.add_column("Type", style="cyan", no_wrap=True)
    table.add_column("Expression", overflow="fold")
    table.add_column("Description", style="dim")
    for kind, candidates in group_candidates(result, simple=simple).items():
        for candidate in candidates:
            table.add_row(kind, Text(candidate.expression), Text(candidate.description))
    console.print(table)
