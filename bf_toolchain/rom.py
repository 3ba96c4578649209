"""
ROM image encoder for the Logisim-evolution Brainfuck CPU.

Input:  Program source (any bytes; only instruction characters count)
Output: ROM image text loadable into a Logisim-evolution ROM component

Image layout:
  v3.0 hex words plain          <- format header line
  0 1 ...                       <- prologue: '>' '<'
  ... program digits ...
  6 3 7 2 6 7                   <- epilogue: '[-]+[]'

One octal digit per instruction (see instructions.DIGITS), each followed
by a separator: a newline after every 16th digit, a space otherwise.

Why the padding:
  The prologue steps the data pointer out and back, since the CPU may not
  address memory correctly on its very first instructions. The epilogue
  clears the current cell, sets it to 1 and enters '[]', an endless loop
  with no effect, which is how the CPU halts.
"""

from __future__ import annotations
import logging
from dataclasses import dataclass, field
from typing import List, Union

from .errors import RomError
from .instructions import Instruction, decode_digit, encode_digit, map_char

__all__ = ['RomImage', 'encode', 'rom_instruction_count', 'nth_rom_instruction',
           'ROM_HEADER', 'PROLOGUE', 'EPILOGUE', 'WORDS_PER_LINE']

logger = logging.getLogger(__name__)


ROM_HEADER = "v3.0 hex words plain"
PROLOGUE = b"><"
EPILOGUE = b"[-]+[]"
WORDS_PER_LINE = 16


def _as_bytes(source: Union[bytes, str]) -> bytes:
    if isinstance(source, str):
        return source.encode("utf-8")
    return source


def rom_instruction_count(source: Union[bytes, str]) -> int:
    """Size of the virtual index space: prologue + source + epilogue."""
    return len(PROLOGUE) + len(_as_bytes(source)) + len(EPILOGUE)


def nth_rom_instruction(source: Union[bytes, str], n: int) -> int:
    """Return the character (byte value) at virtual ROM index n."""
    source = _as_bytes(source)
    total = len(PROLOGUE) + len(source) + len(EPILOGUE)
    if not 0 <= n < total:
        raise IndexError(f"ROM index {n} out of range (0..{total - 1})")
    if n < len(PROLOGUE):
        return PROLOGUE[n]
    n -= len(PROLOGUE)
    if n < len(source):
        return source[n]
    return EPILOGUE[n - len(source)]


# ──────────────────────────────────────────────
# ROM image
# ──────────────────────────────────────────────

@dataclass
class RomImage:
    """Ordered ROM digits, prologue and epilogue included."""
    digits: List[int] = field(default_factory=list)

    def __len__(self):
        return len(self.digits)

    def render(self) -> str:
        """Return the ROM file text (header line + wrapped digits)."""
        parts = [ROM_HEADER, "\n"]
        for count, digit in enumerate(self.digits, start=1):
            parts.append(str(digit))
            parts.append("\n" if count % WORDS_PER_LINE == 0 else " ")
        return "".join(parts)

    def instructions(self) -> List[Instruction]:
        """Decode every digit back to its instruction."""
        return [decode_digit(d) for d in self.digits]

    def program_instructions(self) -> List[Instruction]:
        """Decoded instructions without the prologue and epilogue."""
        instrs = self.instructions()
        return instrs[len(PROLOGUE):len(instrs) - len(EPILOGUE)]

    @classmethod
    def parse(cls, text: str) -> "RomImage":
        """Read a rendered ROM image back. Raises RomError."""
        lines = text.split("\n")
        if lines[0].strip() != ROM_HEADER:
            raise RomError(f"Expected header {ROM_HEADER!r}, got {lines[0]!r}", 1)

        digits = []
        for line_num, line in enumerate(lines[1:], start=2):
            for tok in line.split():
                if len(tok) != 1 or tok not in "01234567":
                    raise RomError(f"Invalid instruction word {tok!r}", line_num)
                digits.append(int(tok))
        return cls(digits)


def encode(source: Union[bytes, str]) -> RomImage:
    """Encode a program into a ROM image. Never fails; inert characters are dropped."""
    source = _as_bytes(source)
    digits = []
    for n in range(rom_instruction_count(source)):
        instr = map_char(nth_rom_instruction(source, n))
        if instr is not None:
            digits.append(encode_digit(instr))

    logger.debug("ROM: %d source bytes -> %d words", len(source), len(digits))
    return RomImage(digits)
