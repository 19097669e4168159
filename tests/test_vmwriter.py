"""
VM writer tests.
"""

import io

import pytest
from jackc import VMWriter, Segment, Command, Kind
from jackc.vmwriter import segment_of


@pytest.fixture
def out():
    return io.StringIO()


@pytest.fixture
def writer(out):
    return VMWriter(out)


class TestVMWriter:
    """One line per command."""

    def test_push_pop(self, writer, out):
        writer.write_push(Segment.CONSTANT, 7)
        writer.write_pop(Segment.LOCAL, 2)
        writer.write_push("that", 0)
        assert out.getvalue() == "push constant 7\npop local 2\npush that 0\n"

    @pytest.mark.parametrize("command", list(Command))
    def test_arithmetic(self, writer, out, command):
        writer.write_arithmetic(command)
        assert out.getvalue() == f"{command.value}\n"

    def test_arithmetic_from_string(self, writer, out):
        writer.write_arithmetic("not")
        assert out.getvalue() == "not\n"

    def test_branching(self, writer, out):
        writer.write_label("WHILE_START_0")
        writer.write_if("WHILE_END_0")
        writer.write_goto("WHILE_START_0")
        assert out.getvalue().splitlines() == [
            "label WHILE_START_0",
            "if-goto WHILE_END_0",
            "goto WHILE_START_0",
        ]

    def test_functions(self, writer, out):
        writer.write_function("Main.main", 3)
        writer.write_call("Math.multiply", 2)
        writer.write_return()
        assert out.getvalue().splitlines() == [
            "function Main.main 3",
            "call Math.multiply 2",
            "return",
        ]

    def test_commands_are_written_in_order(self, writer, out):
        for i in range(3):
            writer.write_push(Segment.TEMP, i)
        assert out.getvalue() == "push temp 0\npush temp 1\npush temp 2\n"


class TestVMWriterErrors:
    """Invalid command tests."""

    def test_pop_constant(self, writer):
        with pytest.raises(ValueError):
            writer.write_pop(Segment.CONSTANT, 0)

    def test_unknown_segment(self, writer):
        with pytest.raises(ValueError):
            writer.write_push("heap", 0)

    def test_unknown_command(self, writer):
        with pytest.raises(ValueError):
            writer.write_arithmetic("mul")

    def test_negative_index(self, writer):
        with pytest.raises(ValueError):
            writer.write_push(Segment.LOCAL, -1)


class TestSegments:
    """Variable kind to segment mapping."""

    @pytest.mark.parametrize("kind,segment", [
        (Kind.STATIC, Segment.STATIC),
        (Kind.FIELD, Segment.THIS),
        (Kind.ARG, Segment.ARGUMENT),
        (Kind.VAR, Segment.LOCAL),
    ])
    def test_segment_of(self, kind, segment):
        assert segment_of(kind) == segment
