"""
Predicate Parser - Text to AST Conversion

Parses refinement predicates such as

    #v >= 0 AND #v < n + 1
    x != 0 || (2 * y <= x / 3)

into the AST of `ast.py`. `!=` is desugared to NOT (==); `&&`, `||` and `!`
are accepted as spellings of AND, OR and NOT.
"""

import re
from pathlib import Path
from typing import List, Optional
from dataclasses import dataclass

from .ast import (
    Expression,
    Variable,
    Literal,
    BinaryOp,
    UnaryOp,
    ComparisonOperator,
    LogicalOperator,
    ArithmeticOperator,
)


# ============================================================================
# EXCEPTIONS
# ============================================================================

class ParseError(Exception):
    """Base exception for parsing errors"""

    def __init__(self, message: str, line: int = 0, column: int = 0):
        self.message = message
        self.line = line
        self.column = column
        super().__init__(f"Line {line}, Col {column}: {message}")


# ============================================================================
# TOKENIZER
# ============================================================================

@dataclass
class Token:
    """Lexical token"""
    type: str
    value: str
    line: int
    column: int


class Tokenizer:
    """
    Regex-based tokenizer for predicates.

    Token types:
    - KEYWORD: AND, OR, NOT, TRUE, FALSE (case-insensitive)
    - IDENTIFIER: variable names, optionally starting with '#' (#v)
    - NUMBER: integers, decimals, exponents
    - OPERATOR: == != <= >= < > + - * / && || !
    - DELIMITER: ( )
    - COMMENT: // to end of line
    """

    KEYWORDS = {'AND', 'OR', 'NOT', 'TRUE', 'FALSE'}

    # Symbolic spellings folded onto keywords
    SYMBOL_KEYWORDS = {'&&': 'AND', '||': 'OR', '!': 'NOT'}

    PATTERNS = [
        ('COMMENT_SINGLE', r'//.*?$'),
        ('NUMBER', r'\d+(\.\d+)?([eE][-+]?\d+)?'),
        ('OPERATOR', r'==|!=|<=|>=|&&|\|\||<|>|\+|-|\*|/|!'),
        ('DELIMITER', r'[()]'),
        ('IDENTIFIER', r'#?[a-zA-Z_][a-zA-Z0-9_]*'),
        ('WHITESPACE', r'\s+'),
    ]

    _COMPILED = [(name, re.compile(pattern, re.MULTILINE)) for name, pattern in PATTERNS]

    def __init__(self, text: str):
        self.text = text
        self.position = 0
        self.line = 1
        self.column = 1
        self.tokens: List[Token] = []

    def tokenize(self) -> List[Token]:
        """Tokenize entire text"""
        while self.position < len(self.text):
            self._next_token()
        return self.tokens

    def _next_token(self):
        """Extract next token"""
        for token_type, regex in self._COMPILED:
            match = regex.match(self.text, self.position)
            if not match:
                continue

            value = match.group(0)

            if token_type in ('COMMENT_SINGLE', 'WHITESPACE'):
                self._advance(len(value))
                return

            if token_type == 'IDENTIFIER' and value.upper() in self.KEYWORDS:
                token_type = 'KEYWORD'
                value = value.upper()
            elif token_type == 'OPERATOR' and value in self.SYMBOL_KEYWORDS:
                token_type = 'KEYWORD'
                value = self.SYMBOL_KEYWORDS[value]

            self.tokens.append(Token(type=token_type, value=value, line=self.line, column=self.column))
            self._advance(len(match.group(0)))
            return

        raise ParseError(
            f"Unexpected character: '{self.text[self.position]}'",
            self.line,
            self.column
        )

    def _advance(self, count: int):
        """Advance position and update line/column"""
        for _ in range(count):
            if self.position < len(self.text):
                if self.text[self.position] == '\n':
                    self.line += 1
                    self.column = 1
                else:
                    self.column += 1
                self.position += 1


# ============================================================================
# PARSER
# ============================================================================

class PredicateParser:
    """
    Recursive descent parser for predicates.

    Grammar:
        predicate      ::= or_expr EOF
        or_expr        ::= and_expr ("OR" and_expr)*
        and_expr       ::= comparison ("AND" comparison)*
        comparison     ::= additive (cmp_op additive)?
        additive       ::= multiplicative (("+" | "-") multiplicative)*
        multiplicative ::= unary (("*" | "/") unary)*
        unary          ::= ("-" | "NOT") unary | primary
        primary        ::= NUMBER | IDENTIFIER | TRUE | FALSE | "(" or_expr ")"
    """

    COMPARISON_OPS = {
        '==': ComparisonOperator.EQ,
        '!=': ComparisonOperator.NEQ,
        '<': ComparisonOperator.LT,
        '>': ComparisonOperator.GT,
        '<=': ComparisonOperator.LTE,
        '>=': ComparisonOperator.GTE,
    }

    def __init__(self):
        self.tokens: List[Token] = []
        self.position = 0
        self.current_token: Optional[Token] = None

    def parse(self, text: str) -> Expression:
        """
        Parse predicate text into an AST.

        Raises:
            ParseError: On lexical or syntax error
        """
        self.tokens = Tokenizer(text).tokenize()
        self.position = 0
        self.current_token = self.tokens[0] if self.tokens else None

        if self.current_token is None:
            raise ParseError("Empty predicate", 1, 1)

        try:
            expr = self._parse_expression()
        except RecursionError:
            line = self.current_token.line if self.current_token else 0
            column = self.current_token.column if self.current_token else 0
            raise ParseError(
                "Input too complex: Maximum nesting depth exceeded",
                line,
                column
            )

        if self.current_token is not None:
            raise ParseError(
                f"Unexpected token after predicate: {self.current_token.type}({self.current_token.value})",
                self.current_token.line,
                self.current_token.column
            )
        return expr

    # ========================================================================
    # TOKEN HELPERS
    # ========================================================================

    def _advance(self):
        """Move to next token"""
        self.position += 1
        if self.position < len(self.tokens):
            self.current_token = self.tokens[self.position]
        else:
            self.current_token = None

    def _expect(self, token_type: str, value: Optional[str] = None) -> Token:
        """
        Expect specific token type/value.

        Raises ParseError if not matched.
        """
        if not self.current_token:
            last = self.tokens[-1] if self.tokens else None
            raise ParseError(
                f"Unexpected end of input, expected {value or token_type}",
                last.line if last else 0,
                (last.column + len(last.value)) if last else 0
            )

        if not self._match(token_type, value):
            raise ParseError(
                f"Expected {value or token_type}, got {self.current_token.type}({self.current_token.value})",
                self.current_token.line,
                self.current_token.column
            )

        token = self.current_token
        self._advance()
        return token

    def _match(self, token_type: str, value: Optional[str] = None) -> bool:
        """Check if current token matches"""
        if not self.current_token:
            return False

        if self.current_token.type != token_type:
            return False

        if value and self.current_token.value != value:
            return False

        return True

    def _loc(self) -> Optional[tuple]:
        if self.current_token:
            return (self.current_token.line, self.current_token.column)
        return None

    # ========================================================================
    # EXPRESSION PARSING
    # ========================================================================

    def _parse_expression(self) -> Expression:
        """Parse expression (recursive descent)"""
        return self._parse_logical_or()

    def _parse_logical_or(self) -> Expression:
        """Parse OR expressions"""
        left = self._parse_logical_and()

        while self._match('KEYWORD', 'OR'):
            loc = self._loc()
            self._advance()
            right = self._parse_logical_and()
            left = BinaryOp(left=left, operator=LogicalOperator.OR, right=right, location=loc)

        return left

    def _parse_logical_and(self) -> Expression:
        """Parse AND expressions"""
        left = self._parse_comparison()

        while self._match('KEYWORD', 'AND'):
            loc = self._loc()
            self._advance()
            right = self._parse_comparison()
            left = BinaryOp(left=left, operator=LogicalOperator.AND, right=right, location=loc)

        return left

    def _parse_comparison(self) -> Expression:
        """Parse comparison expressions (non-associative)"""
        left = self._parse_additive()

        if self._match('OPERATOR') and self.current_token.value in self.COMPARISON_OPS:
            loc = self._loc()
            op = self.COMPARISON_OPS[self.current_token.value]
            self._advance()
            right = self._parse_additive()

            if op == ComparisonOperator.NEQ:
                return UnaryOp(
                    operator=LogicalOperator.NOT,
                    operand=BinaryOp(left=left, operator=ComparisonOperator.EQ, right=right, location=loc),
                    location=loc
                )
            return BinaryOp(left=left, operator=op, right=right, location=loc)

        return left

    def _parse_additive(self) -> Expression:
        """Parse addition/subtraction"""
        left = self._parse_multiplicative()

        while self._match('OPERATOR') and self.current_token.value in ('+', '-'):
            loc = self._loc()
            op_value = self.current_token.value
            self._advance()
            right = self._parse_multiplicative()

            op = ArithmeticOperator.ADD if op_value == '+' else ArithmeticOperator.SUB
            left = BinaryOp(left=left, operator=op, right=right, location=loc)

        return left

    def _parse_multiplicative(self) -> Expression:
        """Parse multiplication/division"""
        left = self._parse_unary()

        while self._match('OPERATOR') and self.current_token.value in ('*', '/'):
            loc = self._loc()
            op_value = self.current_token.value
            self._advance()
            right = self._parse_unary()

            op = ArithmeticOperator.MUL if op_value == '*' else ArithmeticOperator.DIV
            left = BinaryOp(left=left, operator=op, right=right, location=loc)

        return left

    def _parse_unary(self) -> Expression:
        """Parse unary expressions"""
        if self._match('OPERATOR', '-'):
            loc = self._loc()
            self._advance()
            operand = self._parse_unary()
            return UnaryOp(operator=ArithmeticOperator.SUB, operand=operand, location=loc)

        if self._match('KEYWORD', 'NOT'):
            loc = self._loc()
            self._advance()
            operand = self._parse_unary()
            return UnaryOp(operator=LogicalOperator.NOT, operand=operand, location=loc)

        return self._parse_primary()

    def _parse_primary(self) -> Expression:
        """Parse primary expressions (literals, variables, parenthesized)"""

        # 1. NUMBER
        if self._match('NUMBER'):
            token = self.current_token
            self._advance()

            value_str = token.value
            if '.' in value_str or 'e' in value_str.lower():
                value = float(value_str)
                value_type = "float"
            else:
                value = int(value_str)
                value_type = "int"

            return Literal(value=value, type=value_type, location=(token.line, token.column))

        # 2. BOOLEAN (parsed so the validator can reject it with a location)
        if self._match('KEYWORD', 'TRUE') or self._match('KEYWORD', 'FALSE'):
            token = self.current_token
            self._advance()
            return Literal(value=(token.value == 'TRUE'), type="bool", location=(token.line, token.column))

        # 3. VARIABLE
        if self._match('IDENTIFIER'):
            token = self.current_token
            self._advance()
            return Variable(name=token.value, location=(token.line, token.column))

        # 4. PARENTHESIZED EXPRESSION
        if self._match('DELIMITER', '('):
            self._advance()
            expr = self._parse_expression()
            self._expect('DELIMITER', ')')
            return expr

        # Error Handler
        if self.current_token:
            raise ParseError(
                f"Unexpected token: {self.current_token.type}({self.current_token.value})",
                self.current_token.line,
                self.current_token.column
            )
        last = self.tokens[-1]
        raise ParseError("Unexpected end of input", last.line, last.column + len(last.value))


# ============================================================================
# CONVENIENCE FUNCTIONS
# ============================================================================

def parse_predicate(text: str) -> Expression:
    """Parse predicate text into an AST"""
    return PredicateParser().parse(text)


def parse_predicate_file(filepath: str) -> Expression:
    """Parse a predicate file into an AST"""
    return parse_predicate(Path(filepath).read_text(encoding="utf-8"))
