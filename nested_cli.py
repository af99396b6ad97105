"""CLI tool to flatten nested struct declarations."""

import argparse
import json
import logging
import sys
from typing import List, Optional

from nested_conversion import block_to_dict, declarations_from_json_list, declarations_to_json_list
from nested_emit import emit_declarations
from nested_flatten import DEFAULT_MAX_DEPTH, NestingTooDeep, flatten, flatten_block
from nested_parser import ParseError, parse_block

logger = logging.getLogger(__name__)


def _read_input(path: str) -> str:
    if path == "-":
        return sys.stdin.read()
    with open(path, "r", encoding="utf-8") as f:
        return f.read()


def _write_output(text: str, out_path: Optional[str]) -> None:
    if out_path is None:
        sys.stdout.write(text)
        return
    with open(out_path, "w", encoding="utf-8") as fw:
        fw.write(text)
    logger.info("Wrote %s", out_path)


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Split nested struct declarations into top-level structs."
    )
    parser.add_argument("path", help="Path to a file holding one nested struct block, or '-' for stdin")
    parser.add_argument(
        "-o",
        "--out",
        dest="out",
        default=None,
        help="Write the result to this file instead of stdout",
    )
    mode = parser.add_mutually_exclusive_group()
    mode.add_argument(
        "--json",
        dest="emit_json",
        action="store_true",
        help="Emit the flattened declarations as JSON",
    )
    mode.add_argument(
        "--ast",
        dest="emit_ast",
        action="store_true",
        help="Emit the parsed block as JSON without flattening it",
    )
    mode.add_argument(
        "--from-json",
        dest="from_json",
        action="store_true",
        help="Input is a JSON list of declarations; flatten and render it as source",
    )
    parser.add_argument(
        "--max-depth",
        dest="max_depth",
        type=int,
        default=DEFAULT_MAX_DEPTH,
        help=f"Reject input nested deeper than this (default: {DEFAULT_MAX_DEPTH})",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Log each flattened declaration",
    )
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_arg_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if args.max_depth < 1:
        raise SystemExit(f"--max-depth must be at least 1, got {args.max_depth}")

    content = _read_input(args.path)

    if args.from_json:
        try:
            roots = declarations_from_json_list(json.loads(content))
        except (ValueError, KeyError, TypeError, AttributeError) as e:
            raise SystemExit(f"Error reading JSON declarations from {args.path}: {e}")
        try:
            decls = [d for root in roots for d in flatten(root, max_depth=args.max_depth)]
        except NestingTooDeep as e:
            raise SystemExit(f"Error flattening {args.path}: {e}")
        _write_output(emit_declarations(decls), args.out)
        return 0

    try:
        block = parse_block(content, max_depth=args.max_depth)
        if args.emit_ast:
            _write_output(json.dumps(block_to_dict(block), indent=4) + "\n", args.out)
            return 0
        decls = flatten_block(block, max_depth=args.max_depth)
    except (ParseError, NestingTooDeep) as e:
        raise SystemExit(f"Error flattening {args.path}: {e}")

    if args.emit_json:
        _write_output(json.dumps(declarations_to_json_list(decls), indent=4) + "\n", args.out)
    else:
        _write_output(emit_declarations(decls), args.out)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
