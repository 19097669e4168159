"""
Jack Lexer

Splits Jack source code into a forward-only stream of tokens.
"""

import io
import logging
import string
from typing import Iterable, Iterator, List, Optional, TextIO, Union
from xml.sax.saxutils import escape

from .tokens import Token, TokenType, KEYWORDS, SYMBOLS, MAX_INT
from .errors import LexicalError

logger = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = 4096

DIGITS = frozenset(string.digits)
IDENTIFIER_START = frozenset(string.ascii_letters + '_')
IDENTIFIER_CHARS = IDENTIFIER_START | DIGITS

# saxutils.escape only handles &, < and > by default
_XML_ENTITIES = {'"': '&quot;', "'": '&apos;'}


class Lexer:
    """Lexical analyzer for Jack source code.

    The lexer pulls characters from its source in chunks and produces one
    token per call to :meth:`advance`. It cannot be rewound.
    """

    def __init__(self, source: Union[str, TextIO],
                 chunk_size: int = DEFAULT_CHUNK_SIZE,
                 filename: Optional[str] = None):
        """
        Initialize the lexer.

        Args:
            source: Jack source code, or a text stream to read it from
            chunk_size: Number of characters to pull per read
            filename: Name used in error messages
        """
        if chunk_size <= 0:
            raise ValueError(f"chunk_size must be positive, got {chunk_size}")

        if isinstance(source, str):
            source = io.StringIO(source)

        self.reader = source
        self.chunk_size = chunk_size
        self.filename = filename

        self.buffer = ""        # Characters read but not yet consumed
        self.pos = 0            # Current position in buffer
        self.exhausted = False  # Source has no more characters
        self.line = 1
        self.column = 1

        self._pending: Optional[Token] = None

    def has_next(self) -> bool:
        """Check if another token is available, reading ahead if needed."""
        if self._pending is None:
            self._pending = self.scan_token()
        return self._pending is not None

    def advance(self) -> Token:
        """Consume and return the next token."""
        if not self.has_next():
            raise LexicalError("Unexpected end of input", self.line,
                               self.column, self.filename)
        token = self._pending
        self._pending = None
        return token

    def __iter__(self) -> Iterator[Token]:
        while self.has_next():
            yield self.advance()

    def tokenize(self) -> List[Token]:
        """
        Tokenize the remaining source code.

        Returns:
            List of tokens
        """
        return list(self)

    # =========================================================================
    # Scanning
    # =========================================================================

    def scan_token(self) -> Optional[Token]:
        """Scan the next token, or return None at end of input."""
        self.skip_ignored()

        c = self.peek()
        if c == '':
            return None

        line, column = self.line, self.column

        if c in SYMBOLS:
            self.advance_char()
            return Token(TokenType.SYMBOL, c, c, line, column)

        if c in DIGITS:
            return self.number(line, column)

        if c == '"':
            return self.string(line, column)

        if c in IDENTIFIER_START:
            return self.identifier(line, column)

        raise LexicalError(f"Unexpected character: {c!r}", line, column, self.filename)

    def skip_ignored(self) -> None:
        """Skip whitespace and comments."""
        while True:
            c = self.peek()
            if c.isspace():
                self.advance_char()
            elif c == '/' and self.peek(1) == '/':
                self.line_comment()
            elif c == '/' and self.peek(1) == '*':
                self.block_comment()
            else:
                return

    def line_comment(self) -> None:
        """Skip a line comment // ..."""
        while self.peek() not in ('\n', ''):
            self.advance_char()

    def block_comment(self) -> None:
        """Skip a block comment /* ... */"""
        line, column = self.line, self.column
        self.advance_char()
        self.advance_char()

        while True:
            c = self.peek()
            if c == '':
                raise LexicalError("Unterminated block comment", line, column, self.filename)
            if c == '*' and self.peek(1) == '/':
                self.advance_char()
                self.advance_char()
                return
            self.advance_char()

    def number(self, line: int, column: int) -> Token:
        """Scan an integer constant."""
        chars = []
        while self.peek() in DIGITS:
            chars.append(self.advance_char())

        text = ''.join(chars)
        value = int(text)
        if value > MAX_INT:
            raise LexicalError(
                f"Integer constant {text} out of range (0..{MAX_INT})",
                line, column, self.filename
            )
        return Token(TokenType.INT_CONST, text, value, line, column)

    def string(self, line: int, column: int) -> Token:
        """Scan a string constant. No escape sequences are recognized."""
        self.advance_char()  # Opening quote
        chars = []

        while True:
            c = self.peek()
            if c in ('', '\n', '\r'):
                raise LexicalError("Unterminated string", line, column, self.filename)
            if c == '"':
                self.advance_char()
                break
            if ord(c) > MAX_INT:
                raise LexicalError(
                    f"Character U+{ord(c):04X} in string constant out of range (0..{MAX_INT})",
                    line, column, self.filename
                )
            chars.append(self.advance_char())

        value = ''.join(chars)
        return Token(TokenType.STRING_CONST, f'"{value}"', value, line, column)

    def identifier(self, line: int, column: int) -> Token:
        """Scan an identifier or keyword."""
        chars = []
        while self.peek() in IDENTIFIER_CHARS:
            chars.append(self.advance_char())

        text = ''.join(chars)
        if text in KEYWORDS:
            return Token(TokenType.KEYWORD, text, text, line, column)
        return Token(TokenType.IDENTIFIER, text, text, line, column)

    # =========================================================================
    # Character buffer
    # =========================================================================

    def peek(self, offset: int = 0) -> str:
        """Return the character ``offset`` places ahead, or '' at end of input."""
        self._fill(offset + 1)
        index = self.pos + offset
        if index < len(self.buffer):
            return self.buffer[index]
        return ''

    def advance_char(self) -> str:
        """Consume and return the current character."""
        c = self.peek()
        if c == '':
            return c

        self.pos += 1
        if c == '\n':
            self.line += 1
            self.column = 1
        else:
            self.column += 1
        return c

    def _fill(self, needed: int) -> None:
        """Refill the buffer until ``needed`` unconsumed characters are available."""
        while len(self.buffer) - self.pos < needed and not self.exhausted:
            chunk = self.reader.read(self.chunk_size)
            if not chunk:
                self.exhausted = True
                break
            self.buffer = self.buffer[self.pos:] + chunk
            self.pos = 0
            logger.debug("Read %d characters (line %d)", len(chunk), self.line)


def tokens_to_xml(tokens: Iterable[Token]) -> str:
    """
    Render tokens as an XML token listing.

    Each token becomes one ``<kind> text </kind>`` line inside ``<tokens>``.
    String constants are written without their quotes.
    """
    lines = ['<tokens>']
    for token in tokens:
        tag = token.type.value
        text = token.value if token.type == TokenType.STRING_CONST else token.lexeme
        lines.append(f"<{tag}> {escape(text, _XML_ENTITIES)} </{tag}>")
    lines.append('</tokens>')
    return '\n'.join(lines) + '\n'
