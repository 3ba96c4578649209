"""
Brainfuck Toolchain for the Logisim-evolution Brainfuck CPU
===========================================================
A simulator for Brainfuck programs plus an encoder that lowers the same
programs into a ROM image for a Brainfuck CPU built in Logisim-evolution.

Architecture:
    ┌──────────┐    ┌──────────────┐    ┌─────────────┐
    │  Source  │───>│ instructions │───>│   machine   │  (sim: execute)
    │ (bytes)  │    │  (mapper)    │    └─────────────┘
    └──────────┘    │              │    ┌─────────────┐
                    │              │───>│     rom     │  (bin: ROM text)
                    └──────────────┘    └─────────────┘

    - instructions.py: Instruction enum, char -> instruction, instruction <-> digit
    - machine.py:      MachineState + single-step interpreter with fast-forward
    - rom.py:          ROM image with prologue/epilogue, 16 words per line
    - source.py:       read a program from a file or stdin
    - errors.py:       ToolchainError hierarchy
"""

__version__ = "1.0.0"

from typing import BinaryIO, Optional, Union

from .errors import (ToolchainError, ConfigError, SourceError, RomError,
                     MachineError, UnmatchedLoopClose, UnterminatedLoop,
                     StackOverflow)
from .instructions import (Instruction, map_char, encode_digit, decode_digit,
                           instruction_count)
from .machine import (Machine, MachineState, StopReason, CELL_WIDTHS,
                      DEFAULT_CELL_WIDTH, MEMORY_SIZE, STACK_SIZE, cell_mask)
from .rom import RomImage, encode
from .source import read_source


def encode_source(source: Union[bytes, str]) -> str:
    """Encode a program and return the rendered ROM image text."""
    return encode(source).render()


def run_source(source: Union[bytes, str], *, cell_width: int = DEFAULT_CELL_WIDTH,
               stdin: Optional[BinaryIO] = None, stdout: Optional[BinaryIO] = None,
               max_steps: Optional[int] = None) -> Machine:
    """Run a program to completion and return the machine for inspection.

    Args:
        source: Program text.
        cell_width: 8, 16 or 32 bits per cell.
        stdin / stdout: Binary streams for ',' and '.' (default: process stdio).
        max_steps: Optional step budget; check machine.state.program_counter
            to tell whether the program finished.
    """
    machine = Machine(cell_width=cell_width, stdin=stdin, stdout=stdout)
    machine.run(source, max_steps=max_steps)
    return machine
