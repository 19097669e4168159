"""
Jack Compilation Engine

Recursive descent parser that resolves names and writes VM code in a single
pass. There is no syntax tree: each compile_* method consumes exactly the
tokens of its grammar rule and emits the matching VM instructions as it goes.
"""

import logging
from enum import Enum
from dataclasses import dataclass, field
from typing import Optional

from .tokens import (
    Token, TokenType, BINARY_OPS, BINARY_CALLS, UNARY_OPS, KEYWORD_CONSTANTS,
)
from .lexer import Lexer
from .symbol_table import SymbolTable, SymbolEntry, Kind
from .vmwriter import VMWriter, Segment, Command, segment_of
from .labels import LabelGenerator
from .errors import ParseError, CompileError

logger = logging.getLogger(__name__)

STATEMENT_KEYWORDS = ('let', 'if', 'while', 'do', 'return')


class SubroutineKind(Enum):
    """Kinds of subroutine declarations."""

    CONSTRUCTOR = "constructor"
    FUNCTION = "function"
    METHOD = "method"


@dataclass
class CompilationContext:
    """State carried across the productions of one class."""

    class_name: str = ""
    subroutine_name: str = ""
    subroutine_kind: Optional[SubroutineKind] = None
    if_labels: LabelGenerator = field(default_factory=lambda: LabelGenerator("IF"))
    while_labels: LabelGenerator = field(default_factory=lambda: LabelGenerator("WHILE"))

    def begin_subroutine(self, name: str, kind: SubroutineKind) -> None:
        self.subroutine_name = name
        self.subroutine_kind = kind

    @property
    def qualified_name(self) -> str:
        """Name of the current subroutine as seen by the VM, e.g. ``Main.main``."""
        return f"{self.class_name}.{self.subroutine_name}"


class CompilationEngine:
    """Compiles one Jack class into VM code."""

    def __init__(self, lexer: Lexer, writer: VMWriter, strict: bool = False,
                 filename: Optional[str] = None):
        """
        Initialize the engine and read the first token.

        Args:
            lexer: Token source for one class
            writer: Destination of the generated VM code
            strict: Reject a name defined twice in the same scope
            filename: Name used in error messages (defaults to the lexer's)
        """
        self.lexer = lexer
        self.vm = writer
        self.strict = strict
        self.filename = filename if filename is not None else lexer.filename

        self.class_symbols = SymbolTable()
        self.subroutine_symbols = SymbolTable()
        self.context = CompilationContext()

        # Two-slot cursor: the last consumed token and the one under it
        self.previous: Optional[Token] = None
        self.current: Token = self._next_token()

    # =========================================================================
    # Program structure
    # =========================================================================

    def compile_class(self) -> None:
        """class: 'class' className '{' classVarDec* subroutineDec* '}'"""
        self.process_keyword('class')
        self.context.class_name = self.process_identifier()
        logger.debug("Compiling class %s", self.context.class_name)
        self.process_symbol('{')

        while self.check_keyword('static', 'field'):
            self.compile_class_var_dec()

        while self.check_keyword('constructor', 'function', 'method'):
            self.compile_subroutine()

        self.process_symbol('}')

        if self.current.type != TokenType.EOF:
            raise self.error_expected("end of input")

    def compile_class_var_dec(self) -> None:
        """classVarDec: ('static' | 'field') type varName (',' varName)* ';'"""
        kind = Kind(self.process_keyword('static', 'field'))
        var_type = self.process_type()
        self.define(self.class_symbols, self.process_identifier(), var_type, kind)

        while self.check_symbol(','):
            self.process_symbol(',')
            self.define(self.class_symbols, self.process_identifier(), var_type, kind)

        self.process_symbol(';')

    def compile_subroutine(self) -> None:
        """
        subroutineDec: ('constructor' | 'function' | 'method')
                       ('void' | type) subroutineName '(' parameterList ')'
                       subroutineBody
        """
        self.subroutine_symbols.reset()
        kind = SubroutineKind(self.process_keyword('constructor', 'function', 'method'))
        self.process_type(allow_void=True)
        name = self.process_identifier()
        self.context.begin_subroutine(name, kind)

        if kind == SubroutineKind.METHOD:
            # The receiver is passed as argument 0
            self.subroutine_symbols.define('this', self.context.class_name, Kind.ARG)

        self.process_symbol('(')
        self.compile_parameter_list()
        self.process_symbol(')')
        self.compile_subroutine_body()

    def compile_parameter_list(self) -> None:
        """parameterList: ((type varName) (',' type varName)*)?"""
        if not self.current.is_type():
            return

        var_type = self.process_type()
        self.define(self.subroutine_symbols, self.process_identifier(), var_type, Kind.ARG)

        while self.check_symbol(','):
            self.process_symbol(',')
            var_type = self.process_type()
            self.define(self.subroutine_symbols, self.process_identifier(), var_type, Kind.ARG)

    def compile_subroutine_body(self) -> None:
        """subroutineBody: '{' varDec* statements '}'"""
        self.process_symbol('{')

        while self.check_keyword('var'):
            self.compile_var_dec()

        n_locals = self.subroutine_symbols.var_count(Kind.VAR)
        self.vm.write_function(self.context.qualified_name, n_locals)
        logger.debug("Compiling %s %s (%d locals)",
                     self.context.subroutine_kind.value,
                     self.context.qualified_name, n_locals)

        if self.context.subroutine_kind == SubroutineKind.CONSTRUCTOR:
            # Allocate the object and anchor THIS to it
            self.vm.write_push(Segment.CONSTANT, self.class_symbols.var_count(Kind.FIELD))
            self.vm.write_call('Memory.alloc', 1)
            self.vm.write_pop(Segment.POINTER, 0)
        elif self.context.subroutine_kind == SubroutineKind.METHOD:
            self.vm.write_push(Segment.ARGUMENT, 0)
            self.vm.write_pop(Segment.POINTER, 0)

        self.compile_statements()
        self.process_symbol('}')

    def compile_var_dec(self) -> None:
        """varDec: 'var' type varName (',' varName)* ';'"""
        self.process_keyword('var')
        var_type = self.process_type()
        self.define(self.subroutine_symbols, self.process_identifier(), var_type, Kind.VAR)

        while self.check_symbol(','):
            self.process_symbol(',')
            self.define(self.subroutine_symbols, self.process_identifier(), var_type, Kind.VAR)

        self.process_symbol(';')

    # =========================================================================
    # Statements
    # =========================================================================

    def compile_statements(self) -> None:
        """statements: statement*  (the enclosing braces belong to the caller)"""
        while self.check_keyword(*STATEMENT_KEYWORDS):
            getattr(self, f"compile_{self.current.value}")()

    def compile_let(self) -> None:
        """letStatement: 'let' varName ('[' expression ']')? '=' expression ';'"""
        self.process_keyword('let')
        name = self.process_identifier()
        target = self.require_variable(name, self.previous)

        if self.check_symbol('['):
            self.push_variable(target)
            self.process_symbol('[')
            self.compile_expression()
            self.process_symbol(']')
            self.vm.write_arithmetic(Command.ADD)

            self.process_symbol('=')
            self.compile_expression()
            self.process_symbol(';')

            # Address stays on the stack until the right-hand side is done
            # with THAT
            self.vm.write_pop(Segment.TEMP, 0)
            self.vm.write_pop(Segment.POINTER, 1)
            self.vm.write_push(Segment.TEMP, 0)
            self.vm.write_pop(Segment.THAT, 0)
        else:
            self.process_symbol('=')
            self.compile_expression()
            self.process_symbol(';')
            self.pop_variable(target)

    def compile_if(self) -> None:
        """ifStatement: 'if' '(' expression ')' '{' statements '}'
                        ('else' '{' statements '}')?"""
        else_label, end_label = self.context.if_labels.new_labels('GOTO_NOT', 'GOTO_END')

        self.process_keyword('if')
        self.process_symbol('(')
        self.compile_expression()
        self.process_symbol(')')

        self.vm.write_arithmetic(Command.NOT)
        self.vm.write_if(else_label)

        self.process_symbol('{')
        self.compile_statements()
        self.process_symbol('}')

        self.vm.write_goto(end_label)
        self.vm.write_label(else_label)

        if self.check_keyword('else'):
            self.process_keyword('else')
            self.process_symbol('{')
            self.compile_statements()
            self.process_symbol('}')

        self.vm.write_label(end_label)

    def compile_while(self) -> None:
        """whileStatement: 'while' '(' expression ')' '{' statements '}'"""
        start_label, end_label = self.context.while_labels.new_labels('START', 'END')

        self.vm.write_label(start_label)
        self.process_keyword('while')
        self.process_symbol('(')
        self.compile_expression()
        self.process_symbol(')')

        self.vm.write_arithmetic(Command.NOT)
        self.vm.write_if(end_label)

        self.process_symbol('{')
        self.compile_statements()
        self.process_symbol('}')

        self.vm.write_goto(start_label)
        self.vm.write_label(end_label)

    def compile_do(self) -> None:
        """doStatement: 'do' subroutineCall ';'"""
        self.process_keyword('do')
        self.compile_subroutine_call()
        self.process_symbol(';')
        # Discard the returned value
        self.vm.write_pop(Segment.TEMP, 0)

    def compile_return(self) -> None:
        """returnStatement: 'return' expression? ';'"""
        self.process_keyword('return')
        if self.check_symbol(';'):
            # void subroutines still return a value
            self.vm.write_push(Segment.CONSTANT, 0)
        else:
            self.compile_expression()
        self.process_symbol(';')
        self.vm.write_return()

    # =========================================================================
    # Expressions
    # =========================================================================

    def compile_expression(self) -> None:
        """
        expression: term (op term)*

        Operators have no precedence and associate to the left:
        ``a + b * c`` computes ``(a + b) * c``.
        """
        self.compile_term()

        while self.current.is_binary_op():
            op = self.advance().value
            self.compile_term()
            if op in BINARY_CALLS:
                self.vm.write_call(BINARY_CALLS[op], 2)
            else:
                self.vm.write_arithmetic(BINARY_OPS[op])

    def compile_term(self) -> None:
        """
        term: integerConstant | stringConstant | keywordConstant | varName |
              varName '[' expression ']' | subroutineCall | '(' expression ')' |
              unaryOp term

        An identifier is consumed first; the token after it ('[', '(' or '.')
        tells a variable, an array element and a call apart.
        """
        token = self.current

        if token.type == TokenType.INT_CONST:
            self.advance()
            self.vm.write_push(Segment.CONSTANT, token.value)

        elif token.type == TokenType.STRING_CONST:
            self.advance()
            self.compile_string(token.value)

        elif token.is_keyword(*KEYWORD_CONSTANTS):
            self.advance()
            self.compile_keyword_constant(token.value)

        elif token.is_symbol('('):
            self.process_symbol('(')
            self.compile_expression()
            self.process_symbol(')')

        elif token.is_unary_op():
            op = self.advance().value
            self.compile_term()
            self.vm.write_arithmetic(UNARY_OPS[op])

        elif token.is_identifier():
            name = self.process_identifier()

            if self.check_symbol('['):
                self.push_variable(self.require_variable(name, token))
                self.process_symbol('[')
                self.compile_expression()
                self.process_symbol(']')
                self.vm.write_arithmetic(Command.ADD)
                self.vm.write_pop(Segment.POINTER, 1)
                self.vm.write_push(Segment.THAT, 0)
            elif self.check_symbol('(', '.'):
                self.compile_subroutine_call(name)
            else:
                self.push_variable(self.require_variable(name, token))

        else:
            raise self.error_expected("term")

    def compile_string(self, value: str) -> None:
        """Build a String object holding ``value`` one character at a time."""
        self.vm.write_push(Segment.CONSTANT, len(value))
        self.vm.write_call('String.new', 1)
        for char in value:
            self.vm.write_push(Segment.CONSTANT, ord(char))
            self.vm.write_call('String.appendChar', 2)

    def compile_keyword_constant(self, word: str) -> None:
        if word == 'true':
            # All bits set; constants cannot be negative
            self.vm.write_push(Segment.CONSTANT, 1)
            self.vm.write_arithmetic(Command.NEG)
        elif word == 'this':
            self.vm.write_push(Segment.POINTER, 0)
        else:
            self.vm.write_push(Segment.CONSTANT, 0)

    def compile_subroutine_call(self, name: Optional[str] = None) -> None:
        """
        subroutineCall: subroutineName '(' expressionList ')' |
                        (className | varName) '.' subroutineName '(' expressionList ')'

        Args:
            name: The leading identifier, when the caller already consumed it
        """
        if name is None:
            name = self.process_identifier()

        n_args = 0
        if self.check_symbol('.'):
            self.process_symbol('.')
            method_name = self.process_identifier()
            receiver = self.resolve_variable(name)
            if receiver is not None:
                # Method call on an object: it travels as argument 0
                self.push_variable(receiver)
                callee = f"{receiver.type}.{method_name}"
                n_args = 1
            else:
                callee = f"{name}.{method_name}"
        else:
            # Method call on the current object
            self.vm.write_push(Segment.POINTER, 0)
            callee = f"{self.context.class_name}.{name}"
            n_args = 1

        self.process_symbol('(')
        n_args += self.compile_expression_list()
        self.process_symbol(')')
        self.vm.write_call(callee, n_args)

    def compile_expression_list(self) -> int:
        """
        expressionList: (expression (',' expression)*)?

        Returns:
            Number of expressions compiled
        """
        if self.check_symbol(')'):
            return 0

        self.compile_expression()
        count = 1
        while self.check_symbol(','):
            self.process_symbol(',')
            self.compile_expression()
            count += 1
        return count

    # =========================================================================
    # Symbols
    # =========================================================================

    def define(self, table: SymbolTable, name: str, var_type: str, kind: Kind) -> None:
        """Define ``name`` (the identifier just consumed) in ``table``."""
        if self.strict and name in table:
            raise CompileError(
                f"Variable '{name}' is already defined in this scope",
                self.previous.line, self.previous.column, self.filename
            )
        table.define(name, var_type, kind)

    def resolve_variable(self, name: str) -> Optional[SymbolEntry]:
        """Look ``name`` up in the subroutine scope, then the class scope."""
        entry = self.subroutine_symbols.lookup(name)
        if entry is None:
            entry = self.class_symbols.lookup(name)
        return entry

    def require_variable(self, name: str, token: Token) -> SymbolEntry:
        entry = self.resolve_variable(name)
        if entry is None:
            raise CompileError(f"Undefined variable '{name}'",
                               token.line, token.column, self.filename)
        return entry

    def push_variable(self, entry: SymbolEntry) -> None:
        self.vm.write_push(segment_of(entry.kind), entry.index)

    def pop_variable(self, entry: SymbolEntry) -> None:
        self.vm.write_pop(segment_of(entry.kind), entry.index)

    # =========================================================================
    # Token helpers
    # =========================================================================

    def _next_token(self) -> Token:
        if self.lexer.has_next():
            return self.lexer.advance()
        return Token(TokenType.EOF, "", None, self.lexer.line, self.lexer.column)

    def advance(self) -> Token:
        """Consume and return the current token."""
        self.previous = self.current
        if self.current.type != TokenType.EOF:
            self.current = self._next_token()
        return self.previous

    def check_keyword(self, *words: str) -> bool:
        return self.current.is_keyword(*words)

    def check_symbol(self, *chars: str) -> bool:
        return self.current.is_symbol(*chars)

    def process_keyword(self, *words: str) -> str:
        """Consume one of the keywords ``words`` or raise ParseError."""
        if self.check_keyword(*words):
            return self.advance().value
        raise self.error_expected(" or ".join(f"'{word}'" for word in words))

    def process_symbol(self, *chars: str) -> str:
        """Consume one of the symbols ``chars`` or raise ParseError."""
        if self.check_symbol(*chars):
            return self.advance().value
        raise self.error_expected(" or ".join(f"'{char}'" for char in chars))

    def process_identifier(self) -> str:
        if self.current.is_identifier():
            return self.advance().value
        raise self.error_expected("identifier")

    def process_type(self, allow_void: bool = False) -> str:
        """Consume a type name: int, char, boolean, a class name, or void if allowed."""
        if self.current.is_type() or (allow_void and self.check_keyword('void')):
            return self.advance().value
        raise self.error_expected("'void' or type" if allow_void else "type")

    def error_expected(self, expected: str) -> ParseError:
        token = self.current
        return ParseError(expected, str(token), token.line, token.column, self.filename)
