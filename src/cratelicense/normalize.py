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


r"""Canonical form for license expressions.

Two crates that declare ``MIT/Apache-2.0`` and ``Apache-2.0 OR MIT`` are
licensed identically, and a report should group them together.
:func:`normalize_license` rewrites any declaration into one canonical
string:

    1. **Lexical pass** — fix spelling: ``/`` becomes ``OR``, operators
       are upper-cased, known identifiers get their SPDX casing, aliases
       such as ``Apache 2.0`` and deprecated ids such as ``GPL-2.0+``
       are replaced.
    2. **Parse** — :func:`cratelicense.spdx_expr.parse`.
    3. **Flatten** — ``A OR (B OR C)`` becomes ``A OR B OR C``.
    4. **Sort** — children are ordered by their leaf sequence.
    5. **Dedup** — ``MIT OR MIT`` becomes ``MIT``.
    6. **Render** — parentheses only where precedence requires them.

Anything that fails to parse comes back verbatim, so every input has
*some* canonical form.

Examples::

    >>> normalize_license('MIT/Apache-2.0')
    'Apache-2.0 OR MIT'
    >>> normalize_license('Apache-2.0 AND (Apache-2.0 OR MIT)')
    '(Apache-2.0 OR MIT) AND Apache-2.0'
    >>> normalize_license('???not-a-license???')
    '???not-a-license???'
"""

from __future__ import annotations

import functools
import re

from cratelicense.license_data import LicenseDatabase
from cratelicense.logging import get_logger
from cratelicense.spdx_expr import (
    And,
    LicenseExpr,
    LicenseReq,
    Or,
    ParseError,
    leaves,
    parse,
    tokenize,
)

__all__ = [
    'canonicalize',
    'compare_expressions',
    'normalize_license',
    'simplify',
]

logger = get_logger(__name__)

_OPERATOR_KINDS = frozenset({'AND', 'OR', 'WITH'})


def canonicalize(raw: str, db: LicenseDatabase | None = None) -> str | None:
    """Fix the spelling of a license expression without changing its structure.

    Args:
        raw: The license string as declared in ``Cargo.toml``.
        db: License data used to map aliases and casing. Defaults to the
            bundled database.

    Returns:
        The rewritten expression, or ``None`` if *raw* is already in
        canonical spelling.

    Raises:
        ParseError: If *raw* contains characters no token can start with.
    """
    if db is None:
        db = LicenseDatabase.default()

    text = raw
    pattern = db.phrase_pattern
    if pattern is not None:
        text = pattern.sub(lambda m: db.canonical_id(m.group(0)) or m.group(0), text)

    parts: list[str] = []
    after_with = False
    for tok in tokenize(text)[:-1]:
        if tok.kind == 'ID':
            if after_with:
                value = db.canonical_exception(tok.value) or tok.value
            else:
                value = db.canonical_id(tok.value) or tok.value
        elif tok.kind in _OPERATOR_KINDS:
            value = tok.kind
        else:
            value = tok.value
        after_with = tok.kind == 'WITH'
        parts.append(value)

    rendered = re.sub(r'\( | \)', lambda m: m.group(0).strip(), ' '.join(parts))
    if rendered == raw:
        return None
    return rendered


def _leaf_texts(node: LicenseExpr) -> list[str]:
    return [str(req) for req in leaves(node)]


def compare_expressions(a: LicenseExpr, b: LicenseExpr) -> int:
    """Order two subtrees by their leaves, read left to right.

    The first differing leaf decides. When one leaf sequence is a prefix
    of the other, the subtree with more leaves comes first. Subtrees with
    identical leaves are ordered by their rendered text.

    Returns:
        A negative number, zero, or a positive number, like ``cmp``.
    """
    la, lb = _leaf_texts(a), _leaf_texts(b)
    for x, y in zip(la, lb):
        if x != y:
            return -1 if x < y else 1
    if len(la) != len(lb):
        return -1 if len(la) > len(lb) else 1
    sa, sb = str(a), str(b)
    return (sa > sb) - (sa < sb)


def simplify(node: LicenseExpr) -> LicenseExpr:
    """Flatten, sort and deduplicate *node* bottom-up.

    An operator left with a single distinct child is replaced by that
    child, so ``MIT OR MIT`` simplifies to ``MIT``.
    """
    if isinstance(node, LicenseReq):
        return node

    op = type(node)
    children: list[LicenseExpr] = []
    for arg in node.args:
        child = simplify(arg)
        if isinstance(child, op):
            children.extend(child.args)
        else:
            children.append(child)

    children.sort(key=functools.cmp_to_key(compare_expressions))
    unique: list[LicenseExpr] = []
    for child in children:
        if not unique or unique[-1] != child:
            unique.append(child)

    if len(unique) == 1:
        return unique[0]
    return Or(tuple(unique)) if op is Or else And(tuple(unique))


def normalize_license(raw: str) -> str:
    """Return the canonical form of a license declaration.

    Never raises: an expression that cannot be parsed is returned
    unchanged.
    """
    try:
        canonical = canonicalize(raw)
    except ParseError:
        canonical = None
    text = raw if canonical is None else canonical

    try:
        tree = parse(text)
    except ParseError as exc:
        logger.debug('license_unparseable', license=raw, detail=exc.detail)
        return raw
    return str(simplify(tree))
