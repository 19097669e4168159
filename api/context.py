"""
Jack Compiler Context

The main interface for compiling Jack classes from Python.
"""

import io
import logging
from typing import Iterator, List, Optional, TextIO, Union
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path

from jackc import Lexer, CompilationEngine, VMWriter, Token, tokens_to_xml
from jackc.lexer import DEFAULT_CHUNK_SIZE

logger = logging.getLogger(__name__)

VM_SUFFIX = ".vm"


@dataclass
class CompiledClass:
    """
    A compiled Jack class.

    Holds the VM code produced for one class together with its origin.
    """

    source: str
    class_name: str
    vm_code: str
    filename: Optional[str] = None

    @property
    def lines(self) -> List[str]:
        """VM instructions, one per item."""
        return self.vm_code.splitlines()

    def __len__(self) -> int:
        return len(self.lines)

    def save(self, path: Optional[str] = None) -> Path:
        """
        Write the VM code to a file.

        Args:
            path: Destination; defaults to the source filename with a .vm suffix

        Returns:
            The path written
        """
        if path is None:
            if self.filename is None:
                raise ValueError("No output path given and the class has no filename")
            path = Path(self.filename).with_suffix(VM_SUFFIX)
        path = Path(path)
        path.write_text(self.vm_code, encoding='utf-8')
        return path

    @classmethod
    def load(cls, path: str) -> 'CompiledClass':
        """Load VM code previously written by :meth:`save`."""
        path = Path(path)
        vm_code = path.read_text(encoding='utf-8')
        return cls(source="", class_name=path.stem, vm_code=vm_code, filename=str(path))


class Context:
    """
    Jack compilation context.

    Holds the compiler options and compiles one class per call.

    Example:
        ctx = Context()
        compiled = ctx.compile('class Main { function void main() { return; } }')
        print(compiled.vm_code)
    """

    def __init__(self,
                 chunk_size: int = DEFAULT_CHUNK_SIZE,
                 strict: bool = False,
                 debug: bool = False):
        """
        Create a new compilation context.

        Args:
            chunk_size: Number of characters the lexer reads at a time
            strict: Reject a variable name defined twice in the same scope
            debug: Log at DEBUG level while this context compiles or
                tokenizes; logger levels are restored afterwards
        """
        if chunk_size <= 0:
            raise ValueError(f"chunk_size must be positive, got {chunk_size}")

        self.chunk_size = chunk_size
        self.strict = strict
        self.debug = debug

    def compile(self, source: Union[str, TextIO],
                filename: Optional[str] = None) -> CompiledClass:
        """
        Compile the source code of one Jack class.

        Args:
            source: Jack source code string, or a text stream
            filename: Optional filename for error messages

        Returns:
            Compiled class

        Raises:
            JackError: If the class does not compile
        """
        reader = io.StringIO(source) if isinstance(source, str) else source
        recorder = _RecordingReader(reader)

        with self._logging():
            lexer = Lexer(recorder, chunk_size=self.chunk_size, filename=filename)
            out = io.StringIO()
            engine = CompilationEngine(lexer, VMWriter(out), strict=self.strict)
            engine.compile_class()

            compiled = CompiledClass(
                source=recorder.text,
                class_name=engine.context.class_name,
                vm_code=out.getvalue(),
                filename=filename,
            )
            logger.info("Compiled class %s (%d instructions)",
                        compiled.class_name, len(compiled))
        return compiled

    def compile_file(self, path: str) -> CompiledClass:
        """
        Compile a Jack source file.

        Args:
            path: Path to a .jack source file

        Returns:
            Compiled class
        """
        with open(path, 'r', encoding='utf-8') as f:
            return self.compile(f, filename=str(path))

    def tokenize(self, source: Union[str, TextIO],
                 filename: Optional[str] = None) -> List[Token]:
        """Split source code into tokens without compiling it."""
        with self._logging():
            return Lexer(source, chunk_size=self.chunk_size, filename=filename).tokenize()

    def tokens_xml(self, source: Union[str, TextIO],
                   filename: Optional[str] = None) -> str:
        """Render the tokens of ``source`` as an XML token listing."""
        return tokens_to_xml(self.tokenize(source, filename))

    @contextmanager
    def _logging(self) -> Iterator[None]:
        """Lower the compiler loggers to DEBUG for the duration of a call."""
        if not self.debug:
            yield
            return

        loggers = [logging.getLogger("jackc"), logger]
        levels = [lg.level for lg in loggers]
        for lg in loggers:
            lg.setLevel(logging.DEBUG)
        try:
            yield
        finally:
            for lg, level in zip(loggers, levels):
                lg.setLevel(level)


class _RecordingReader:
    """Text stream wrapper that keeps a copy of everything read through it."""

    def __init__(self, reader: TextIO):
        self._reader = reader
        self._parts: List[str] = []

    def read(self, size: int = -1) -> str:
        data = self._reader.read(size)
        self._parts.append(data)
        return data

    @property
    def text(self) -> str:
        return ''.join(self._parts)


# Convenience functions
def create_context(**kwargs) -> Context:
    """Create a new compilation context."""
    return Context(**kwargs)


def compile_class(source: str, **kwargs) -> CompiledClass:
    """
    Compile one Jack class with a fresh context.

    Args:
        source: Jack source code
        **kwargs: Context options

    Returns:
        Compiled class
    """
    return Context(**kwargs).compile(source)
