#!/usr/bin/env python3
"""
Glossa CLI - bilingual annotation of game pages

Usage:
    glossa run [url] [--dictionary manifest.yaml] [--headless]
    glossa annotate <page.html> [--dictionary manifest.yaml] [-o out.html]
    glossa check [manifest.yaml]
"""

import argparse
import asyncio
import json
import sys
from dataclasses import replace
from pathlib import Path

from ..browser_setup import launch_page
from ..config import Config, config
from ..diagnostics import enable_diagnostics, get_logger
from ..dictionary import load_dictionary_store
from ..dom import SoupDocument
from ..engine import AnnotationEngine, EngineSettings
from ..error_handler import create_error_response, format_error_for_logging
from ..errors import GlossaError
from ..live import attach
from ..page_profile import load_page_profile
from ..templates import compile_templates

logger = get_logger(__name__)


def _configure_diagnostics(args):
    if getattr(args, "verbose", False) or config.enable_debug:
        enable_diagnostics("DEBUG")
    elif getattr(args, "quiet", False):
        enable_diagnostics("ERROR")
    else:
        enable_diagnostics("INFO")


def _manifest_path(args) -> Path:
    return Path(args.dictionary) if args.dictionary else config.dictionary_manifest


def _load(manifest: Path):
    return load_dictionary_store(manifest), load_page_profile(manifest)


def _report_error(error: Exception, context: str) -> None:
    print(format_error_for_logging(error, context), file=sys.stderr)


async def _run_live(url: str, manifest: Path, cfg: Config) -> None:
    store, profile = _load(manifest)
    handle = await launch_page(cfg)
    try:
        await handle.page.goto(url)
        session = await attach(
            handle.page,
            store,
            profile,
            EngineSettings.from_config(cfg),
            ready_timeout_ms=cfg.page_ready_timeout_ms,
        )
        logger.info("Annotating until the browser window is closed (Ctrl-C to stop)")
        try:
            await session.wait_closed()
        finally:
            session.close()
    finally:
        await handle.close()


def cmd_run(args):
    """Open a page and keep it annotated"""
    _configure_diagnostics(args)
    url = args.url or config.start_url
    if not url:
        print("Error: no URL given and GLOSSA_START_URL is not set", file=sys.stderr)
        return 1
    cfg = replace(config, headless=True) if args.headless else config
    try:
        asyncio.run(_run_live(url, _manifest_path(args), cfg))
    except KeyboardInterrupt:
        logger.info("Stopped")
        return 0
    except Exception as e:
        _report_error(e, "run")
        if args.verbose:
            import traceback
            traceback.print_exc()
        return 1
    return 0


async def _annotate_file(document: SoupDocument, manifest: Path):
    store, profile = _load(manifest)
    engine = AnnotationEngine(document, store, profile)
    return await engine.run_pass()


def cmd_annotate(args):
    """Annotate a saved HTML page once"""
    _configure_diagnostics(args)
    try:
        with open(args.input, "r", encoding="utf-8") as f:
            document = SoupDocument(f.read())
        report = asyncio.run(_annotate_file(document, _manifest_path(args)))

        if args.output:
            with open(args.output, "w", encoding="utf-8") as f:
                f.write(document.html())
            logger.info(f"Annotated page written to: {args.output}")
        else:
            print(document.html())
    except (GlossaError, OSError) as e:
        _report_error(e, "annotate")
        return 1

    for error in report.errors:
        logger.warning(f"Strategy error: {error}")
    logger.info(f"Annotated {report.total} node(s): {report.counts}")
    return 0


def cmd_check(args):
    """Validate a dictionary manifest"""
    enable_diagnostics("DEBUG" if args.verbose else "WARNING")
    manifest = Path(args.manifest) if args.manifest else config.dictionary_manifest

    try:
        store, profile = _load(manifest)
    except (GlossaError, OSError) as e:
        if args.json:
            print(json.dumps(create_error_response(e, "check"), indent=2))
        else:
            _report_error(e, "check")
        return 1

    literal = [m.template for m in compile_templates(store.templates) if m.is_literal]
    if args.json:
        print(json.dumps({
            "success": True,
            "manifest": str(manifest),
            "entries": store.summary(),
            "targets": len(profile.targets),
            "literal_templates": literal,
        }, indent=2, ensure_ascii=False))
        return 0

    print(f"✓ Dictionaries are valid: {manifest}")
    for section, count in store.summary().items():
        print(f"  {section:<10} {count} entries")
    print(f"  targets    {len(profile.targets)} selector groups")
    if literal:
        print(f"\nTemplates without a '#' placeholder ({len(literal)}):")
        for template in literal:
            print(f"  - {template}")
    return 0


MANIFEST_ARG_HELP = "Path to dictionary manifest (default: GLOSSA_DICTIONARY)"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="glossa",
        description="Glossa - bilingual annotation of game pages",
        formatter_class=argparse.RawDescriptionHelpFormatter
    )

    subparsers = parser.add_subparsers(dest='command', help='Commands')

    # Run command
    run_parser = subparsers.add_parser('run', help='Open a page in a browser and keep it annotated')
    run_parser.add_argument('url', nargs='?', help='Page URL (default: GLOSSA_START_URL)')
    run_parser.add_argument('--dictionary', '-d', help=MANIFEST_ARG_HELP)
    run_parser.add_argument('--headless', action='store_true', help='Run the browser headless')
    run_parser.add_argument('--verbose', action='store_true', help='Verbose output')
    run_parser.add_argument('--quiet', '-q', action='store_true', help='Quiet mode')
    run_parser.set_defaults(func=cmd_run)

    # Annotate command
    annotate_parser = subparsers.add_parser('annotate', help='Annotate a saved HTML page once')
    annotate_parser.add_argument('input', help='HTML file')
    annotate_parser.add_argument('--dictionary', '-d', help=MANIFEST_ARG_HELP)
    annotate_parser.add_argument('--output', '-o', help='Output file (default: stdout)')
    annotate_parser.add_argument('--verbose', action='store_true', help='Verbose output')
    annotate_parser.add_argument('--quiet', '-q', action='store_true', help='Quiet mode')
    annotate_parser.set_defaults(func=cmd_annotate)

    # Check command
    check_parser = subparsers.add_parser('check', help='Validate a dictionary manifest')
    check_parser.add_argument('manifest', nargs='?', help=MANIFEST_ARG_HELP)
    check_parser.add_argument('--json', action='store_true', help='Machine-readable output')
    check_parser.add_argument('--verbose', action='store_true', help='Verbose output')
    check_parser.set_defaults(func=cmd_check)

    return parser


def main(argv=None):
    """Main CLI entry point"""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
