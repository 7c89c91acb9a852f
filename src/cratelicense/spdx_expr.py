# Copyright 2026 Google LLC
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
#
# SPDX-License-Identifier: Apache-2.0


r"""License expression parser for Cargo ``license`` fields.

Parses SPDX-style license expressions into a small expression tree that
:mod:`cratelicense.normalize` rewrites into canonical form.

Grammar (lax SPDX, as found in the wild on crates.io)::

    expression  = and_expr (("OR" / "/") and_expr)*
    and_expr    = with_expr ("AND" with_expr)*
    with_expr   = simple_expr ("WITH" idstring)?
    simple_expr = "(" expression ")" / idstring
    idstring    = 1*(ALPHA / DIGIT / "-" / "." / "_" / ":") ["+"]

Operator precedence (tightest to loosest)::

    WITH  >  AND  >  OR, /

Lax rules:
    - Operators are matched case-insensitively (``and``, ``Or``, ...).
    - ``/`` is a legacy spelling of ``OR`` (``MIT/Apache-2.0``).
    - Identifiers are opaque: ``Foo-Custom-1.0`` is accepted even though
      it is not on the SPDX license list.

Key Concepts (ELI5)::

    ┌─────────────────────┬──────────────────────────────────────────────┐
    │ Concept             │ Plain-English                                │
    ├─────────────────────┼──────────────────────────────────────────────┤
    │ LicenseReq          │ One license, optionally with an exception:  │
    │                     │ ``Apache-2.0 WITH LLVM-exception``.         │
    ├─────────────────────┼──────────────────────────────────────────────┤
    │ Or                  │ The user may pick any one of the children.  │
    ├─────────────────────┼──────────────────────────────────────────────┤
    │ And                 │ The user must comply with every child.      │
    └─────────────────────┴──────────────────────────────────────────────┘

Usage::

    from cratelicense.spdx_expr import parse, LicenseReq, Or

    expr = parse('MIT/Apache-2.0')
    assert expr == Or((LicenseReq('MIT'), LicenseReq('Apache-2.0')))
"""

from __future__ import annotations

import re
from dataclasses import dataclass

__all__ = [
    'And',
    'LicenseExpr',
    'LicenseReq',
    'MalformedLicenseExpression',
    'Or',
    'ParseError',
    'leaves',
    'license_ids',
    'parse',
    'tokenize',
]


# ---------------------------------------------------------------------------
# Expression tree
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class LicenseReq:
    """A single license requirement.

    Attributes:
        license: The license identifier, including a ``+`` suffix if present.
        exception: Exception identifier from a ``WITH`` clause, or ``""``.
    """

    license: str
    exception: str = ''

    def __str__(self) -> str:
        """Return ``license`` or ``license WITH exception``."""
        if self.exception:
            return f'{self.license} WITH {self.exception}'
        return self.license


@dataclass(frozen=True)
class Or:
    """Disjunction: any one child may be chosen.

    Attributes:
        args: Two or more child expressions.
    """

    args: tuple[LicenseExpr, ...]

    def __str__(self) -> str:
        """Return the children joined with ``OR``."""
        return ' OR '.join(_operand(arg, self) for arg in self.args)


@dataclass(frozen=True)
class And:
    """Conjunction: every child applies.

    Attributes:
        args: Two or more child expressions.
    """

    args: tuple[LicenseExpr, ...]

    def __str__(self) -> str:
        """Return the children joined with ``AND``."""
        return ' AND '.join(_operand(arg, self) for arg in self.args)


LicenseExpr = LicenseReq | Or | And


def _operand(child: LicenseExpr, parent: Or | And) -> str:
    """Render *child* as an operand of *parent*, parenthesized when needed.

    Parentheses are required only around an operator of the other kind.
    """
    if isinstance(child, LicenseReq) or type(child) is type(parent):
        return str(child)
    return f'({child})'


# ---------------------------------------------------------------------------
# Parse errors
# ---------------------------------------------------------------------------


class ParseError(ValueError):
    """Raised when a license expression cannot be parsed.

    Attributes:
        expression: The original expression string.
        position: Character offset where the error was detected.
        detail: Human-readable description of the problem.
    """

    def __init__(self, expression: str, position: int, detail: str) -> None:
        """Initialize with expression text, error position, and detail message."""
        self.expression = expression
        self.position = position
        self.detail = detail
        marker = ' ' * position + '^'
        super().__init__(f'license parse error at position {position}: {detail}\n  {expression}\n  {marker}')


MalformedLicenseExpression = ParseError


# ---------------------------------------------------------------------------
# Tokenizer
# ---------------------------------------------------------------------------

_TOKEN_RE = re.compile(
    r"""
    (?:
        (?P<lparen>\()
      | (?P<rparen>\))
      | (?P<slash>/)
      | (?P<word>[A-Za-z0-9._:\-]+\+?)
    )
    """,
    re.VERBOSE,
)

_TOK_AND = 'AND'
_TOK_OR = 'OR'
_TOK_WITH = 'WITH'
_TOK_LPAREN = '('
_TOK_RPAREN = ')'
_TOK_ID = 'ID'
_TOK_EOF = 'EOF'

_OPERATORS = frozenset({_TOK_AND, _TOK_OR, _TOK_WITH})


@dataclass
class _Token:
    kind: str
    value: str
    pos: int


def tokenize(expr: str) -> list[_Token]:
    """Split a license expression into tokens.

    ``/`` is emitted as an ``OR`` token. The returned list always ends
    with an ``EOF`` token.

    Raises:
        ParseError: On a character that cannot start any token.
    """
    tokens: list[_Token] = []
    pos = 0
    while pos < len(expr):
        if expr[pos].isspace():
            pos += 1
            continue
        m = _TOKEN_RE.match(expr, pos)
        if m is None:
            raise ParseError(expr, pos, f'unexpected character {expr[pos]!r}')
        if m.group('lparen'):
            tokens.append(_Token(_TOK_LPAREN, '(', pos))
        elif m.group('rparen'):
            tokens.append(_Token(_TOK_RPAREN, ')', pos))
        elif m.group('slash'):
            tokens.append(_Token(_TOK_OR, '/', pos))
        else:
            word = m.group('word')
            upper = word.upper()
            kind = upper if upper in _OPERATORS else _TOK_ID
            tokens.append(_Token(kind, word, pos))
        pos = m.end()
    tokens.append(_Token(_TOK_EOF, '', len(expr)))
    return tokens


# ---------------------------------------------------------------------------
# Recursive descent parser
# ---------------------------------------------------------------------------


class _Parser:
    """Recursive descent parser over a token list."""

    def __init__(self, expr: str, tokens: list[_Token]) -> None:
        self._expr = expr
        self._tokens = tokens
        self._pos = 0

    def _peek(self) -> _Token:
        return self._tokens[self._pos]

    def _advance(self) -> _Token:
        tok = self._tokens[self._pos]
        self._pos += 1
        return tok

    def _expect(self, kind: str) -> _Token:
        tok = self._peek()
        if tok.kind != kind:
            raise ParseError(
                self._expr,
                tok.pos,
                f'expected {kind}, got {tok.kind} ({tok.value!r})',
            )
        return self._advance()

    # expression = and_expr ("OR" and_expr)*
    def parse_expression(self) -> LicenseExpr:
        left = self._parse_and_expr()
        while self._peek().kind == _TOK_OR:
            self._advance()
            right = self._parse_and_expr()
            left = Or((left, right))
        return left

    # and_expr = with_expr ("AND" with_expr)*
    def _parse_and_expr(self) -> LicenseExpr:
        left = self._parse_with_expr()
        while self._peek().kind == _TOK_AND:
            self._advance()
            right = self._parse_with_expr()
            left = And((left, right))
        return left

    # with_expr = simple_expr ("WITH" idstring)?
    def _parse_with_expr(self) -> LicenseExpr:
        node = self._parse_simple_expr()
        if self._peek().kind == _TOK_WITH:
            with_tok = self._advance()
            exc_tok = self._expect(_TOK_ID)
            if not isinstance(node, LicenseReq) or node.exception:
                raise ParseError(
                    self._expr,
                    with_tok.pos,
                    'WITH requires a single license on its left',
                )
            node = LicenseReq(node.license, exc_tok.value)
        return node

    # simple_expr = "(" expression ")" / idstring
    def _parse_simple_expr(self) -> LicenseExpr:
        tok = self._peek()
        if tok.kind == _TOK_LPAREN:
            self._advance()
            node = self.parse_expression()
            self._expect(_TOK_RPAREN)
            return node
        if tok.kind == _TOK_ID:
            self._advance()
            return LicenseReq(tok.value)
        raise ParseError(
            self._expr,
            tok.pos,
            f'expected license identifier or "(", got {tok.kind} ({tok.value!r})',
        )


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def parse(expression: str) -> LicenseExpr:
    """Parse a license expression into a tree of binary nodes.

    Args:
        expression: A license expression (e.g. ``"MIT OR Apache-2.0"``).

    Returns:
        The root of the parsed tree. ``Or``/``And`` nodes produced here
        always have exactly two children.

    Raises:
        ParseError: If the expression is empty or syntactically invalid.

    Examples::

        >>> parse('MIT')
        LicenseReq(license='MIT', exception='')

        >>> parse('Apache-2.0 WITH LLVM-exception')
        LicenseReq(license='Apache-2.0', exception='LLVM-exception')
    """
    stripped = expression.strip()
    if not stripped:
        raise ParseError(expression, 0, 'empty expression')
    parser = _Parser(stripped, tokenize(stripped))
    result = parser.parse_expression()
    end_tok = parser._peek()  # noqa: SLF001
    if end_tok.kind != _TOK_EOF:
        raise ParseError(
            stripped,
            end_tok.pos,
            f'unexpected token after expression: {end_tok.kind} ({end_tok.value!r})',
        )
    return result


def leaves(node: LicenseExpr) -> list[LicenseReq]:
    """Return the requirements of *node* in left-to-right order."""
    if isinstance(node, LicenseReq):
        return [node]
    out: list[LicenseReq] = []
    for child in node.args:
        out.extend(leaves(child))
    return out


def license_ids(node: LicenseExpr) -> list[str]:
    """Return the distinct license identifiers of *node*, in leaf order.

    Exceptions are dropped: ``Apache-2.0 WITH LLVM-exception`` yields
    ``Apache-2.0``.
    """
    seen: dict[str, None] = {}
    for req in leaves(node):
        seen.setdefault(req.license, None)
    return list(seen)
