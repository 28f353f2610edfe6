#!/usr/bin/env python3
"""
savedit - convert game saves to JSON, back again, or edit them in place.

Usage:
    savedit to-json -i save_0.sav -o save_0.json
    savedit from-json -i save_0.json -o save_0.sav
    savedit edit profile.sav --editor "code --wait"
    savedit test-resave profile.sav --debug

Examples:
    # Inspect with jq
    savedit to-json < profile.sav | jq .version

    # Use a codec from another package
    savedit --codec mygame.codec:SaveCodec to-json -i slot1.sav
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from savedit import __version__
from savedit.commands import check_resave, edit, from_json, make_bridge, to_json
from savedit.config import Settings
from savedit.const import CODEC_ENV, DEFAULT_CODEC, DEFAULT_EDITOR, EDITOR_ENV, STDIO_TOKEN
from savedit.errors import SaveditError
from savedit.log import log


def _add_io_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        '--input',
        '-i',
        default=STDIO_TOKEN,
        help=f'Input file, {STDIO_TOKEN!r} for stdin (default: {STDIO_TOKEN})',
    )
    parser.add_argument(
        '--output',
        '-o',
        default=STDIO_TOKEN,
        help=f'Output file, {STDIO_TOKEN!r} for stdout (default: {STDIO_TOKEN})',
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='savedit',
        description='Convert binary game saves to JSON and back, or edit them in place',
    )
    parser.add_argument('--version', action='version', version=f'%(prog)s {__version__}')
    parser.add_argument(
        '--codec',
        help=f'Codec name or "module:attribute" path (default: ${CODEC_ENV} or {DEFAULT_CODEC})',
    )
    parser.add_argument(
        '--verbose',
        '-v',
        action='store_true',
        help='Enable debug logging',
    )

    subparsers = parser.add_subparsers(dest='action', metavar='COMMAND', required=True)

    to_json_parser = subparsers.add_parser('to-json', help='Convert binary save to plain text JSON')
    _add_io_arguments(to_json_parser)

    from_json_parser = subparsers.add_parser('from-json', help='Convert JSON back to binary save')
    _add_io_arguments(from_json_parser)

    edit_parser = subparsers.add_parser('edit', help='Launch $EDITOR to edit a save file as JSON in place')
    edit_parser.add_argument('path', type=Path, help='Save file to edit')
    edit_parser.add_argument(
        '--editor',
        '-e',
        help=f'Editor command (default: ${EDITOR_ENV} or {DEFAULT_EDITOR})',
    )

    resave_parser = subparsers.add_parser('test-resave', help='Test that a save survives decode and encode unchanged')
    resave_parser.add_argument('path', type=Path, help='Save file to test')
    resave_parser.add_argument(
        '--debug',
        '-d',
        action='store_true',
        help='If resave fails, write input.sav and output.sav to working directory for debugging',
    )

    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    if args.verbose:
        log.setLevel(logging.DEBUG)

    settings = Settings.resolve(editor=getattr(args, 'editor', None), codec=args.codec)

    try:
        bridge = make_bridge(settings)
        if args.action == 'to-json':
            to_json(bridge, args.input, args.output)
        elif args.action == 'from-json':
            from_json(bridge, args.input, args.output)
        elif args.action == 'edit':
            edit(bridge, args.path, settings)
        elif args.action == 'test-resave':
            check_resave(bridge, args.path, debug=args.debug)
    except (SaveditError, OSError) as e:
        log.error(f'{type(e).__name__}: {e}')
        return 1

    return 0


def run() -> None:
    sys.exit(main())


if __name__ == '__main__':
    run()
