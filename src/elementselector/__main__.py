from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path
from typing import Any, Sequence

from lxml import etree

from .ancestry import describe_ancestry, render_ancestry_tree
from .html_tree import HtmlTree
from .locator_generator import SelectorSynthesizer
from .settings import CONFIG_DIR, SynthesisSettings, load_settings
from .tree import DocumentTree, TargetNotFoundError

LOG_FORMAT = "%(asctime)s %(levelname)s %(message)s"


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="elementselector",
        description="Synthesize a CSS locator for one element of an HTML document or live page.",
    )
    parser.add_argument("file", nargs="?", help="HTML file to read (declarative shadow roots are honoured).")
    parser.add_argument("--url", help="Open this URL in headless Chromium instead of reading a file.")
    parser.add_argument("--target", required=True, help="CSS locator picking the element; ' >>> ' enters shadow roots.")
    parser.add_argument("--no-deep-shadow", action="store_true", help="Do not walk out through open shadow roots.")
    parser.add_argument("--config", help="Settings file (default: ~/.elementselector/config.json).")
    parser.add_argument("--tree", action="store_true", help="Also print the ancestor trail of the element.")
    parser.add_argument("--verbose", action="store_true", help="Log debug records.")
    return parser


def _build_logger(verbose: bool = False, log_dir: Path | None = None) -> logging.Logger:
    package_logger = logging.getLogger("elementselector")
    package_logger.setLevel(logging.DEBUG if verbose else logging.INFO)
    if package_logger.handlers:
        return logging.getLogger("elementselector.cli")

    package_logger.propagate = False
    try:
        target_dir = log_dir or CONFIG_DIR
        target_dir.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(target_dir / "cli.log", encoding="utf-8")
        file_handler.setFormatter(logging.Formatter(LOG_FORMAT))
        package_logger.addHandler(file_handler)
    except OSError:
        # Fallback to stderr logging if the log file cannot be opened.
        stream_handler = logging.StreamHandler()
        stream_handler.setFormatter(logging.Formatter(LOG_FORMAT))
        package_logger.addHandler(stream_handler)
    return logging.getLogger("elementselector.cli")


def _normalize_url(raw_url: str) -> str:
    raw_url = raw_url.strip()
    if not raw_url:
        return ""
    if raw_url.startswith(("http://", "https://", "file://")):
        return raw_url
    return f"https://{raw_url}"


def _inspect(tree: Any, target: str, settings: SynthesisSettings, show_tree: bool) -> tuple[dict[str, Any], str]:
    node = tree.select_target(target)
    result = SelectorSynthesizer(tree=tree, settings=settings).synthesize(node)
    trail = ""
    if show_tree:
        entries = describe_ancestry(tree, node, settings.class_policy())
        trail = render_ancestry_tree(entries, result.primary_locator)
    return result.to_payload(), trail


def _inspect_file(path: Path, target: str, settings: SynthesisSettings, show_tree: bool) -> tuple[dict[str, Any], str]:
    try:
        markup = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise SystemExit(f"Could not read {path}: {exc}") from exc
    try:
        tree: DocumentTree = HtmlTree.from_html(markup)
    except etree.LxmlError as exc:
        raise SystemExit(f"Could not parse {path}: {exc}") from exc
    return _inspect(tree, target, settings, show_tree)


def _inspect_url(url: str, target: str, settings: SynthesisSettings, show_tree: bool) -> tuple[dict[str, Any], str]:
    from playwright.sync_api import Error as PlaywrightError
    from playwright.sync_api import sync_playwright

    from .playwright_tree import PlaywrightTree

    try:
        with sync_playwright() as playwright:
            browser = playwright.chromium.launch(headless=True)
            try:
                page = browser.new_page()
                page.goto(url, wait_until="domcontentloaded")
                return _inspect(PlaywrightTree.from_page(page), target, settings, show_tree)
            finally:
                browser.close()
    except PlaywrightError as exc:
        raise SystemExit(f"Browser session failed for {url}: {exc}") from exc


def main(argv: Sequence[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    if bool(args.file) == bool(args.url):
        parser.error("provide exactly one of FILE or --url")

    logger = _build_logger(verbose=args.verbose)
    settings = load_settings(Path(args.config).expanduser() if args.config else None)
    if args.no_deep_shadow:
        settings.deep_shadow_traversal = False

    try:
        if args.url:
            url = _normalize_url(args.url)
            logger.info("Inspecting %s for %s", url, args.target)
            payload, trail = _inspect_url(url, args.target, settings, args.tree)
        else:
            logger.info("Inspecting %s for %s", args.file, args.target)
            payload, trail = _inspect_file(Path(args.file), args.target, settings, args.tree)
    except TargetNotFoundError as exc:
        logger.warning("%s", exc)
        raise SystemExit(str(exc)) from exc

    print(json.dumps(payload, ensure_ascii=False, indent=2))
    if trail:
        print(trail)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
