"""
Instruction model shared by the execution engine and the ROM encoder.

The language has eight instructions, one per source character. Every
other character is inert: it maps to no instruction and no ROM digit, so
comments and whitespace pass through both consumers silently.

ROM digit encoding (one octal digit per instruction):

    >  MoveRight   0        .  Output     4
    <  MoveLeft    1        ,  Input      5
    +  Increment   2        [  LoopOpen   6
    -  Decrement   3        ]  LoopClose  7
"""

from __future__ import annotations
import enum
from typing import Dict, Iterable, Optional, Union


# ──────────────────────────────────────────────
# Instruction variants
# ──────────────────────────────────────────────

class Instruction(enum.Enum):
    MOVE_RIGHT = ">"
    MOVE_LEFT = "<"
    INCREMENT = "+"
    DECREMENT = "-"
    OUTPUT = "."
    INPUT = ","
    LOOP_OPEN = "["
    LOOP_CLOSE = "]"

    def __repr__(self):
        return f"Instruction.{self.name}"


# Keyed by byte value so both str and bytes sources resolve with one lookup
_BY_ORDINAL: Dict[int, Instruction] = {ord(i.value): i for i in Instruction}


# ──────────────────────────────────────────────
# Digit encoding
# ──────────────────────────────────────────────

DIGITS: Dict[Instruction, int] = {
    Instruction.MOVE_RIGHT: 0,
    Instruction.MOVE_LEFT: 1,
    Instruction.INCREMENT: 2,
    Instruction.DECREMENT: 3,
    Instruction.OUTPUT: 4,
    Instruction.INPUT: 5,
    Instruction.LOOP_OPEN: 6,
    Instruction.LOOP_CLOSE: 7,
}

_BY_DIGIT: Dict[int, Instruction] = {d: i for i, d in DIGITS.items()}


def map_char(c: Union[str, int]) -> Optional[Instruction]:
    """Map a source character (one-char str or byte value) to its instruction.

    Returns None for anything that is not one of the eight instruction
    characters. Never raises.
    """
    if isinstance(c, str):
        if len(c) != 1:
            return None
        c = ord(c)
    return _BY_ORDINAL.get(c)


def encode_digit(instr: Instruction) -> int:
    """Return the ROM digit (0-7) for an instruction."""
    return DIGITS[instr]


def decode_digit(digit: int) -> Instruction:
    """Inverse of encode_digit(). Raises ValueError outside 0-7."""
    try:
        return _BY_DIGIT[digit]
    except KeyError:
        raise ValueError(f"Not an instruction digit: {digit!r}") from None


def instruction_count(source: Iterable[Union[str, int]]) -> int:
    """Count the mappable characters in a source."""
    return sum(1 for c in source if map_char(c) is not None)
