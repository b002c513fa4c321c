# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Provider naming helpers.

Provider names end up inside system-level static tracing identifiers, which
accept a restricted character set (no dots, no colons). Names produced here
only contain lowercase ASCII letters, digits and underscores.
"""

import re

_ACRONYM_BOUNDARY = re.compile(r"([A-Z]+)([A-Z][a-z])")
_WORD_BOUNDARY = re.compile(r"([a-z0-9])([A-Z])")
_DISALLOWED = re.compile(r"[^a-z0-9]+")

FALLBACK_NAME = "provider"


def to_snake_case(identifier: str) -> str:
    """Convert an identifier to lowercase-underscore form.

    Args:
        identifier: Identifier in ``CapWords``, ``camelCase`` or mixed style.

    Returns:
        Lowercase underscore-separated name, e.g. ``FooBarBaz`` becomes
        ``foo_bar_baz`` and ``HTTPServer`` becomes ``http_server``.
    """
    text = _ACRONYM_BOUNDARY.sub(r"\1_\2", identifier)
    text = _WORD_BOUNDARY.sub(r"\1_\2", text)
    text = _DISALLOWED.sub("_", text.lower()).strip("_")
    return text or FALLBACK_NAME


def provider_name_from_class(class_name: str) -> str:
    """Derive the base provider name from a provider class name.

    The base name is meant for human-facing output. Two providers declared in
    different modules with the same class name share a base name; use
    :func:`unique_name` wherever global distinctness matters.
    """
    return to_snake_case(class_name)


def unique_name(base_name: str, content_hash: str) -> str:
    """Combine a base name and content hash, e.g. ``my_provider_deadc0de1918df00``."""
    return f"{base_name}_{content_hash}"
