"""
Jack Compiler Errors

Defines exception classes for compilation errors.
"""

from typing import Optional


class JackError(Exception):
    """Base exception for all Jack compiler errors."""

    def __init__(self, message: str, line: Optional[int] = None,
                 column: Optional[int] = None, filename: Optional[str] = None):
        self.message = message
        self.line = line
        self.column = column
        self.filename = filename
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format the error message with location information."""
        parts = []

        if self.filename:
            parts.append(self.filename)

        if self.line is not None:
            if parts:
                parts.append(str(self.line))
            else:
                parts.append(f"line {self.line}")

            if self.column is not None:
                parts.append(str(self.column))

        if parts:
            return f"{':'.join(parts)}: {self.message}"
        return self.message


class LexicalError(JackError):
    """Raised when the source cannot be split into tokens."""
    pass


class ParseError(JackError):
    """Raised when an expected token is not found."""

    def __init__(self, expected: str, actual: str, line: Optional[int] = None,
                 column: Optional[int] = None, filename: Optional[str] = None):
        self.expected = expected
        self.actual = actual
        super().__init__(f"Expected {expected}, got {actual}", line, column, filename)


class CompileError(JackError):
    """Raised for semantic errors during compilation."""
    pass
