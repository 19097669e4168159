"""
Jack Compiler Package

A single-pass compiler for the Jack language.
Compiles one Jack class into VM code for the stack-based virtual machine.
"""

import io
from typing import Optional, TextIO, Union

from .tokens import Token, TokenType
from .lexer import Lexer, tokens_to_xml, DEFAULT_CHUNK_SIZE
from .symbol_table import SymbolTable, SymbolEntry, Kind
from .vmwriter import VMWriter, Segment, Command
from .labels import LabelGenerator
from .engine import CompilationEngine, CompilationContext, SubroutineKind
from .errors import JackError, LexicalError, ParseError, CompileError

__version__ = "0.1.0"
__all__ = [
    "Token",
    "TokenType",
    "Lexer",
    "tokens_to_xml",
    "SymbolTable",
    "SymbolEntry",
    "Kind",
    "VMWriter",
    "Segment",
    "Command",
    "LabelGenerator",
    "CompilationEngine",
    "CompilationContext",
    "SubroutineKind",
    "JackError",
    "LexicalError",
    "ParseError",
    "CompileError",
    "compile_source",
    "compile_file",
]


def compile_source(source: Union[str, TextIO], filename: Optional[str] = None,
                   strict: bool = False,
                   chunk_size: int = DEFAULT_CHUNK_SIZE) -> str:
    """
    Compile one Jack class to VM code.

    Args:
        source: Jack source code string, or a text stream
        filename: Name used in error messages
        strict: Reject a name defined twice in the same scope
        chunk_size: Number of characters the lexer reads at a time

    Returns:
        The VM code, one instruction per line

    Raises:
        JackError: If compilation fails
    """
    lexer = Lexer(source, chunk_size=chunk_size, filename=filename)
    out = io.StringIO()
    engine = CompilationEngine(lexer, VMWriter(out), strict=strict)
    engine.compile_class()
    return out.getvalue()


def compile_file(filepath: str, strict: bool = False) -> str:
    """
    Compile a Jack source file to VM code.

    Args:
        filepath: Path to a .jack source file

    Returns:
        The VM code, one instruction per line
    """
    with open(filepath, 'r', encoding='utf-8') as f:
        return compile_source(f, filename=filepath, strict=strict)
