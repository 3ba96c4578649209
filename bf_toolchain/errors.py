"""
Exception hierarchy for the Brainfuck toolchain.

Library code raises these; only the CLI (bftool.py) catches them and turns
them into exit codes.
"""

from __future__ import annotations


class ToolchainError(Exception):
    """Base class for every error raised by the toolchain."""


class ConfigError(ToolchainError):
    """Raised on an invalid run-wide setting (e.g. unsupported cell width)."""


class SourceError(ToolchainError):
    """Raised when a program source cannot be read."""
    def __init__(self, path: str, reason: str = ""):
        self.path = path
        self.reason = reason
        where = path if path else "<stdin>"
        msg = f'Error opening file: "{where}"'
        super().__init__(f"{msg} ({reason})" if reason else msg)


class RomError(ToolchainError):
    """Raised when a ROM image text cannot be parsed."""
    def __init__(self, message: str, line_num: int = 0):
        self.line_num = line_num
        super().__init__(f"Line {line_num}: {message}" if line_num else message)


class MachineError(ToolchainError):
    """Raised when a program drives the machine into an undefined state."""
    def __init__(self, message: str, pc: int):
        self.pc = pc
        super().__init__(f"pc={pc}: {message}")


class UnmatchedLoopClose(MachineError):
    """A ']' was executed with no open loop on the call stack."""


class UnterminatedLoop(MachineError):
    """The program ended while loops were still open."""


class StackOverflow(MachineError):
    """More loops were opened than the call stack can hold."""
