#!/usr/bin/env python3
"""
bftool — Brainfuck toolchain for the Logisim-evolution Brainfuck CPU
====================================================================

One CLI for both halves of the toolchain:
    bftool bin  — Encode a program as a Logisim-evolution ROM image
    bftool sim  — Simulate a program

Usage:
    python bftool.py bin [file] [-o output]
    python bftool.py sim [file] [-8b | -16b | -32b] [--max-steps N]

If the file is omitted, stdin is used.

Examples:
    python bftool.py bin hello.bf -o hello.rom
    python bftool.py sim hello.bf
    python bftool.py sim -16b primes.bf
    cat hello.bf | python bftool.py bin
"""

import argparse
import logging
import sys
import os

# Allow running from project root without installing
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from bf_toolchain import __version__, encode, read_source
from bf_toolchain.errors import ToolchainError
from bf_toolchain.machine import Machine, StopReason, DEFAULT_CELL_WIDTH

logger = logging.getLogger("bftool")


class _CellWidthAction(argparse.Action):
    """-8b / -16b / -32b: may be given at most once per invocation."""

    def __call__(self, parser, namespace, values, option_string=None):
        if getattr(namespace, self.dest, None) is not None:
            parser.error(f'Cannot specify multiple cell widths: error on "{option_string}"')
        setattr(namespace, self.dest, self.const)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="bftool",
        description="Brainfuck toolchain — build Logisim ROM images, simulate programs",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""commands:
  bin        Make a Logisim-evolution ROM image
  sim        Simulate a Brainfuck program

If the file is omitted, stdin is used.
""",
    )
    parser.add_argument("--version", action="version", version=f"bftool {__version__}")
    parser.add_argument("-v", "--verbose", action="store_true",
                        help="Debug logging to stderr")
    sub = parser.add_subparsers(dest="command", metavar="command")

    # ── bin ──────────────────────────────────────────────────────────────
    p_bin = sub.add_parser("bin", help="Make a Logisim-evolution ROM image")
    p_bin.add_argument("input", nargs="?", default="",
                       help="Brainfuck source file (default: stdin)")
    p_bin.add_argument("-o", "--output", help="Output ROM file (default: stdout)")

    # ── sim ──────────────────────────────────────────────────────────────
    p_sim = sub.add_parser("sim", help="Simulate a Brainfuck program")
    p_sim.add_argument("input", nargs="?", default="",
                       help="Brainfuck source file (default: stdin)")
    for width in (8, 16, 32):
        p_sim.add_argument(f"-{width}b", dest="cell_width", action=_CellWidthAction,
                           nargs=0, const=width, default=None,
                           help=f"{width}-bit cells" +
                                (" (default)" if width == DEFAULT_CELL_WIDTH else ""))
    p_sim.add_argument("--max-steps", type=int, default=None,
                       help="Stop after N processed characters")

    return parser


def setup_logging(verbose: bool):
    """Log to stderr; stdout carries program output."""
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter('%(levelname)s: %(message)s'))
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        handlers=[handler],
        force=True,
    )


def cmd_bin(args):
    source = read_source(args.input)
    rom = encode(source)
    text = rom.render()

    if args.output:
        with open(args.output, "w", encoding="ascii", newline="\n") as f:
            f.write(text)
            f.write("\n")
        logger.info("Wrote %s (%d words)", args.output, len(rom))
    else:
        print(text)
    return 0


def cmd_sim(args):
    source = read_source(args.input)
    width = args.cell_width if args.cell_width is not None else DEFAULT_CELL_WIDTH

    machine = Machine(cell_width=width)
    reason = machine.run(source, max_steps=args.max_steps)
    if reason is StopReason.TIMEOUT:
        logger.warning("Stopped after %d steps at pc=%d",
                       machine.state.steps, machine.state.program_counter)
    return 0


COMMANDS = {
    "bin": cmd_bin,
    "sim": cmd_sim,
}


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help(sys.stderr)
        return 1

    setup_logging(args.verbose)

    try:
        return COMMANDS[args.command](args)
    except ToolchainError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except Exception as e:
        print(f"Internal error: {e}", file=sys.stderr)
        if args.verbose:
            import traceback
            traceback.print_exc()
        return 2


if __name__ == "__main__":
    sys.exit(main())
