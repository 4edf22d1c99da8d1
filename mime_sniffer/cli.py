#!/usr/bin/env python3
"""
MimeSniffer CLI

Identify file types from their content.
"""

import argparse
import json
import logging
import os
import sys
from typing import List, Optional

from rich import box
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from .catalog import SignatureCatalog
from .detector import MimeDetector
from .signatures import format_header
from .utils import format_size, hex_dump
from . import __version__


def create_parser() -> argparse.ArgumentParser:
    """Create argument parser."""
    parser = argparse.ArgumentParser(
        prog='mime-sniffer',
        description='MimeSniffer - identify file types from their magic bytes',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog='''
Examples:
  # Identify files
  mime-sniffer upload.bin report.pdf

  # Machine-readable output
  mime-sniffer --json *.docx

  # Add custom signatures
  mime-sniffer --signatures extra.json firmware.img

  # List known types
  mime-sniffer --list-types
'''
    )

    parser.add_argument(
        'files',
        nargs='*',
        help='Files to identify'
    )
    parser.add_argument(
        '--list-types',
        action='store_true',
        help='List all known signatures and exit'
    )
    parser.add_argument(
        '--json',
        action='store_true',
        help='Print results as JSON'
    )

    # Catalog options
    parser.add_argument(
        '--signatures',
        type=str,
        default=None,
        help='JSON file with additional signatures'
    )
    parser.add_argument(
        '--no-defaults',
        action='store_true',
        help='Do not load the built-in signature table'
    )
    parser.add_argument(
        '--no-extension-fallback',
        action='store_true',
        help='Never identify a file by its extension alone'
    )

    # Verbosity
    parser.add_argument(
        '-v', '--verbose',
        action='store_true',
        help='Verbose output (debug logging, header dumps)'
    )
    parser.add_argument(
        '-q', '--quiet',
        action='store_true',
        help='Quiet mode (errors only)'
    )
    parser.add_argument(
        '--version',
        action='version',
        version=f'%(prog)s {__version__}'
    )

    return parser


def build_catalog(args: argparse.Namespace) -> SignatureCatalog:
    """Build the signature catalog selected by the command line."""
    catalog = SignatureCatalog(load_defaults=not args.no_defaults)
    if args.signatures:
        catalog.load_json(args.signatures)
    return catalog


def list_types(catalog: SignatureCatalog, console: Console):
    """List known signatures."""
    table = Table(
        title="Known Signatures",
        box=box.ROUNDED,
        header_style="bold cyan"
    )
    table.add_column("Extension", style="green")
    table.add_column("MIME Type")
    table.add_column("Offset", justify="right")
    table.add_column("Header")
    table.add_column("Needs Ext.")

    for record in catalog:
        table.add_row(
            record.extension,
            record.mime_type,
            str(record.offset),
            format_header(record.header or ()) or "-",
            "yes" if record.requires_extension_confirmation else ""
        )

    console.print(table)


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    parser = create_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s"
    )

    console = Console()
    err_console = Console(stderr=True)

    def print_error(msg):
        err_console.print(f"[bold red]Error:[/] {msg}")

    try:
        catalog = build_catalog(args)
    except (OSError, ValueError) as e:
        print_error(escape(str(e)))
        return 1

    if args.list_types:
        list_types(catalog, console)
        return 0

    if not args.files:
        parser.error("no files given (use --list-types to list known signatures)")

    detector = MimeDetector(catalog, extension_fallback=not args.no_extension_fallback)

    results = []
    exit_code = 0
    for path in args.files:
        try:
            result = detector.detect_file(path)
            size = os.path.getsize(path)
        except OSError as e:
            print_error(f"{escape(path)}: {escape(str(e))}")
            if args.verbose:
                import traceback
                traceback.print_exc()
            exit_code = 1
            continue

        if result is None:
            exit_code = 1
        results.append((path, size, result))

        if args.verbose and not args.json:
            console.print(f"[dim]{escape(path)}[/]")
            console.print(hex_dump(detector.read_header(path)), markup=False, highlight=False)

    if args.json:
        entries = []
        for path, size, result in results:
            entry = {"file": path, "size": size}
            if result is None:
                entry.update({
                    "mime_type": None,
                    "extension": None,
                    "matched_by": None,
                    "claimed_extension": detector.claimed_extension(path),
                    "extension_mismatch": False,
                })
            else:
                entry.update(result.as_dict())
            entries.append(entry)
        print(json.dumps(entries, indent=2))
        return exit_code

    if args.quiet:
        return exit_code

    table = Table(box=box.SIMPLE, header_style="bold cyan")
    table.add_column("File", overflow="fold")
    table.add_column("MIME Type", style="green", overflow="fold")
    table.add_column("Extension")
    table.add_column("Matched By")
    table.add_column("Size", justify="right")

    for path, size, result in results:
        if result is None:
            table.add_row(escape(path), "[yellow]unknown[/]", "-", "-", format_size(size))
            continue
        extension = result.extension
        if result.extension_mismatch:
            extension = f"[yellow]{extension} (claimed {result.claimed_extension})[/]"
        table.add_row(escape(path), result.mime_type, extension, result.matched_by, format_size(size))

    console.print(table)
    return exit_code


if __name__ == '__main__':
    sys.exit(main())
