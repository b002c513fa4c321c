# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Canonical rendering and parsing of provider declarations."""

import ast
import logging

from tps.errors import ValidationError

logger = logging.getLogger(__name__)


def canonical_text(class_def: ast.ClassDef) -> str:
    """Render a class declaration to its canonical text.

    Rendering goes through the AST, so comments, line continuations and
    incidental whitespace never reach the output while declaration order,
    decorators and docstrings are preserved.

    Args:
        class_def: Class declaration node.

    Returns:
        Canonical source text of the declaration.
    """
    return ast.unparse(class_def)


def parse_declaration(source: str) -> ast.ClassDef:
    """Parse text holding exactly one class declaration.

    Args:
        source: Source text of a single class declaration.

    Returns:
        Parsed class declaration node.

    Raises:
        ValidationError: If the text does not parse or does not hold exactly
            one top-level class declaration.
    """
    try:
        module = ast.parse(source)
    except (SyntaxError, ValueError) as exc:
        logger.debug(f"Declaration text failed to parse (error={exc})")
        raise ValidationError(f"Expected a class declaration: {exc}") from exc
    if len(module.body) != 1 or not isinstance(module.body[0], ast.ClassDef):
        raise ValidationError(
            "Expected a class declaration",
            module.body[0] if module.body else None,
        )
    return module.body[0]


def dotted_name(node: ast.expr) -> str | None:
    """Return ``a.b.c`` for a name or attribute chain, ``None`` otherwise."""
    parts: list[str] = []
    while isinstance(node, ast.Attribute):
        parts.append(node.attr)
        node = node.value
    if not isinstance(node, ast.Name):
        return None
    parts.append(node.id)
    return ".".join(reversed(parts))
