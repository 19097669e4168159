"""
Jack VM Writer

Defines the VM memory segments and arithmetic commands, and writes VM
instructions to a text stream, one instruction per line.
"""

from enum import Enum
from typing import TextIO, Union

from .symbol_table import Kind


class Segment(Enum):
    """VM memory segments."""

    CONSTANT = "constant"
    ARGUMENT = "argument"
    LOCAL = "local"
    STATIC = "static"
    THIS = "this"
    THAT = "that"
    POINTER = "pointer"
    TEMP = "temp"


class Command(Enum):
    """VM arithmetic and logical commands."""

    ADD = "add"
    SUB = "sub"
    NEG = "neg"
    EQ = "eq"
    GT = "gt"
    LT = "lt"
    AND = "and"
    OR = "or"
    NOT = "not"


# Segment a variable of each kind lives in
KIND_SEGMENTS = {
    Kind.STATIC: Segment.STATIC,
    Kind.FIELD: Segment.THIS,
    Kind.ARG: Segment.ARGUMENT,
    Kind.VAR: Segment.LOCAL,
}


def segment_of(kind: Kind) -> Segment:
    """Return the segment a variable of ``kind`` is stored in."""
    return KIND_SEGMENTS[kind]


class VMWriter:
    """Writes VM commands to an output stream."""

    def __init__(self, out: TextIO):
        self.out = out

    def write_push(self, segment: Union[Segment, str], index: int) -> None:
        """Write a push command."""
        segment = Segment(segment)
        self._check_index(index)
        self._write(f"push {segment.value} {index}")

    def write_pop(self, segment: Union[Segment, str], index: int) -> None:
        """Write a pop command. Popping into the constant segment is invalid."""
        segment = Segment(segment)
        if segment == Segment.CONSTANT:
            raise ValueError("Cannot pop into the constant segment")
        self._check_index(index)
        self._write(f"pop {segment.value} {index}")

    def write_arithmetic(self, command: Union[Command, str]) -> None:
        """Write an arithmetic-logical command."""
        self._write(Command(command).value)

    def write_label(self, label: str) -> None:
        self._write(f"label {label}")

    def write_goto(self, label: str) -> None:
        self._write(f"goto {label}")

    def write_if(self, label: str) -> None:
        """Write an if-goto command."""
        self._write(f"if-goto {label}")

    def write_call(self, name: str, n_args: int) -> None:
        self._check_index(n_args)
        self._write(f"call {name} {n_args}")

    def write_function(self, name: str, n_locals: int) -> None:
        self._check_index(n_locals)
        self._write(f"function {name} {n_locals}")

    def write_return(self) -> None:
        self._write("return")

    def _write(self, line: str) -> None:
        self.out.write(f"{line}\n")

    @staticmethod
    def _check_index(value: int) -> None:
        if value < 0:
            raise ValueError(f"VM operand must be non-negative, got {value}")
