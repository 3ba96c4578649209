"""
Brainfuck Execution Engine — machine state + single-step interpreter

Machine model:
  memory      — MEMORY_SIZE cells, each W bits wide (W = 8, 16 or 32)
  data_pointer — index into memory, wraps modulo MEMORY_SIZE
  program_counter — index into the source; the run ends when it reaches
                    the source length (there is no halt instruction)
  call_stack  — return addresses, one per open '[' (at most STACK_SIZE)

Loops are matched at run time through the call stack instead of a
precomputed jump table:
  '['  pushes pc + 1. If the current cell is zero the machine enters
       fast-forward and records the stack depth as the anchor.
  ']'  leaves fast-forward when the depth equals the anchor. Then, if the
       cell is zero the entry is popped (loop exits); otherwise pc jumps
       back to the address on top of the stack.

While fast-forwarding, data and I/O effects are suppressed but '[' and
']' still push and pop, so loops nested inside a skipped body keep the
stack balanced and cannot end the skip early.

Execution model (run):
  1. Fetch the character at pc
  2. step(): apply effect (unless fast-forwarding), then loop control
  3. Check termination (end of source, or step budget)

Termination reasons:
  - DONE:     program counter reached the end of the source
  - TIMEOUT:  max_steps exhausted before the end of the source
"""

from __future__ import annotations
import logging
import sys
from enum import Enum
from typing import BinaryIO, Dict, List, Optional, Union

from .errors import (ConfigError, StackOverflow, UnmatchedLoopClose,
                     UnterminatedLoop)
from .instructions import Instruction, map_char

__all__ = ['Machine', 'MachineState', 'StopReason', 'CELL_WIDTHS',
           'DEFAULT_CELL_WIDTH', 'MEMORY_SIZE', 'STACK_SIZE', 'cell_mask']

logger = logging.getLogger(__name__)


MEMORY_SIZE = 0x10000
STACK_SIZE = 0x100

TAB = 0x09
SPACE = 0x20


# ──────────────────────────────────────────────
# Cell width profiles
# ──────────────────────────────────────────────

CELL_WIDTHS: Dict[int, int] = {
    8: 0xFF,
    16: 0xFFFF,
    32: 0xFFFFFFFF,
}

DEFAULT_CELL_WIDTH = 8


def cell_mask(width: int) -> int:
    """Return the arithmetic mask for a cell width. Raises ConfigError."""
    try:
        return CELL_WIDTHS[width]
    except KeyError:
        choices = ", ".join(str(w) for w in CELL_WIDTHS)
        raise ConfigError(
            f"Unsupported cell width: {width!r} (choose from {choices})") from None


class StopReason(Enum):
    DONE = 'DONE'
    TIMEOUT = 'TIMEOUT'


# ──────────────────────────────────────────────
# Machine state
# ──────────────────────────────────────────────

class MachineState:
    """Mutable state of one run. Created zeroed, mutated in place by step()."""

    __slots__ = ('data_pointer', 'memory', 'program_counter', 'call_stack',
                 'fast_forward', 'fast_forward_anchor', 'cell_mask',
                 'steps', 'fast_forward_entries')

    def __init__(self, mask: int = CELL_WIDTHS[DEFAULT_CELL_WIDTH]):
        self.data_pointer: int = 0
        self.memory: List[int] = [0] * MEMORY_SIZE
        self.program_counter: int = 0
        self.call_stack: List[int] = []
        self.fast_forward: bool = False
        self.fast_forward_anchor: int = 0   # stack depth when the skip began
        self.cell_mask: int = mask
        self.steps: int = 0                 # characters processed
        self.fast_forward_entries: int = 0

    @property
    def cell(self) -> int:
        """Value of the cell under the data pointer."""
        return self.memory[self.data_pointer]

    @cell.setter
    def cell(self, value: int):
        self.memory[self.data_pointer] = value & self.cell_mask

    @property
    def depth(self) -> int:
        return len(self.call_stack)

    def display(self) -> str:
        """One-line register dump for traces."""
        ff = f" FF@{self.fast_forward_anchor}" if self.fast_forward else ""
        return (f"PC={self.program_counter} DP={self.data_pointer:04X} "
                f"CELL={self.cell} SP={self.depth}{ff}")

    def __repr__(self):
        return f"MachineState({self.display()})"


# ──────────────────────────────────────────────
# Execution engine
# ──────────────────────────────────────────────

class Machine:
    """Brainfuck interpreter over a 64K-cell tape.

    Usage:
        m = Machine(cell_width=16, stdin=io.BytesIO(b"x"), stdout=out)
        reason = m.run(b",[.-]")
        m.state.memory[0]
    """

    def __init__(self, cell_width: int = DEFAULT_CELL_WIDTH,
                 stdin: Optional[BinaryIO] = None,
                 stdout: Optional[BinaryIO] = None):
        self.cell_width = cell_width
        self.state = MachineState(cell_mask(cell_width))
        self.stdin = stdin if stdin is not None else sys.stdin.buffer
        self.stdout = stdout if stdout is not None else sys.stdout.buffer

        self._trace = False
        self._trace_output: List[str] = []

    def enable_trace(self, enabled: bool = True):
        """Record a state dump after every executed instruction."""
        self._trace = enabled

    @property
    def trace_output(self) -> List[str]:
        return self._trace_output

    # ══════════════════════════════════════════════
    # Execution
    # ══════════════════════════════════════════════

    def step(self, char: Union[str, int]):
        """Process one source character, updating the machine's state."""
        st = self.state
        instr = map_char(char)
        advance = True

        if not st.fast_forward:
            self._apply_effect(instr)

        # Only the loop instructions act while fast-forwarding
        if instr is Instruction.LOOP_OPEN:
            if st.depth >= STACK_SIZE:
                raise StackOverflow(
                    f"more than {STACK_SIZE} nested loops", st.program_counter)
            st.call_stack.append(st.program_counter + 1)
            if st.cell == 0 and not st.fast_forward:
                st.fast_forward = True
                st.fast_forward_anchor = st.depth
                st.fast_forward_entries += 1
                logger.debug("fast-forward from pc=%d at depth %d",
                             st.program_counter, st.depth)

        elif instr is Instruction.LOOP_CLOSE:
            if not st.call_stack:
                raise UnmatchedLoopClose("']' without an open loop",
                                         st.program_counter)
            if st.fast_forward and st.depth == st.fast_forward_anchor:
                st.fast_forward = False
                st.fast_forward_anchor = 0
                logger.debug("fast-forward ends at pc=%d", st.program_counter)

            if st.cell == 0:
                st.call_stack.pop()
            else:
                st.program_counter = st.call_stack[-1]
                advance = False

        if advance:
            st.program_counter += 1
        st.steps += 1

        if self._trace and instr is not None:
            self._trace_output.append(f"{instr.value} {st.display()}")

    def _apply_effect(self, instr: Optional[Instruction]):
        st = self.state

        if instr is Instruction.MOVE_RIGHT:
            st.data_pointer = (st.data_pointer + 1) % MEMORY_SIZE

        elif instr is Instruction.MOVE_LEFT:
            st.data_pointer = (st.data_pointer - 1) % MEMORY_SIZE

        elif instr is Instruction.INCREMENT:
            st.cell = st.cell + 1

        elif instr is Instruction.DECREMENT:
            st.cell = st.cell - 1

        elif instr is Instruction.OUTPUT:
            # The hardware terminal cannot render tabs; it prints a space
            value = SPACE if st.cell == TAB else st.cell & 0xFF
            self.stdout.write(bytes([value]))

        elif instr is Instruction.INPUT:
            self.stdout.flush()
            data = self.stdin.read(1)
            if data:
                st.cell = data[0]
            # EOF leaves the cell unchanged

    def run(self, source: Union[bytes, str],
            max_steps: Optional[int] = None) -> StopReason:
        """Run until the program counter reaches the end of the source.

        Args:
            source: Program text. str sources are encoded as UTF-8.
            max_steps: Optional budget of processed characters → TIMEOUT

        Returns:
            StopReason indicating why execution stopped

        Raises:
            UnmatchedLoopClose, StackOverflow: during execution
            UnterminatedLoop: the source ended with loops still open
        """
        if isinstance(source, str):
            source = source.encode("utf-8")
        st = self.state
        length = len(source)
        logger.debug("run: %d characters, %d-bit cells", length, self.cell_width)

        try:
            while st.program_counter < length:
                if max_steps is not None and st.steps >= max_steps:
                    logger.debug("step budget of %d exhausted at pc=%d",
                                 max_steps, st.program_counter)
                    return StopReason.TIMEOUT
                self.step(source[st.program_counter])
        finally:
            self.stdout.flush()

        if st.call_stack:
            raise UnterminatedLoop(
                f"{st.depth} loop(s) still open at end of program",
                st.program_counter)

        logger.debug("run finished after %d steps", st.steps)
        return StopReason.DONE
