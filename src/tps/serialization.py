# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""JSON serialization of provider specifications.

The declaration node itself is not serialized. Its canonical text is, and
reading re-parses that text and checks it against the stored hash and name,
so a record that was corrupted in storage is rejected instead of trusted.
"""

import json
import logging
from typing import Any

from tps.canonical import parse_declaration
from tps.errors import FormatError, ValidationError
from tps.hashing import hash_text
from tps.names import provider_name_from_class
from tps.probe import ArgType, ProbeArgument, ProbeSpecification
from tps.provider import ProviderSpecification

logger = logging.getLogger(__name__)

SCHEMA_VERSION = 1


def to_dict(spec: ProviderSpecification) -> dict[str, Any]:
    """Convert a specification to a JSON-compatible mapping."""
    return {
        "version": SCHEMA_VERSION,
        "name": spec.name,
        "hash": spec.content_hash,
        "canonical_text": spec.canonical_text,
        "probes": [
            {
                "name": probe.name,
                "args": [
                    {
                        "name": arg.name,
                        "python_type": arg.arg_type.python_type,
                        "c_type": arg.arg_type.c_type,
                        "nullable": arg.arg_type.nullable,
                    }
                    for arg in probe.args
                ],
            }
            for probe in spec.probes
        ],
    }


def from_dict(payload: Any) -> ProviderSpecification:
    """Rebuild a specification from a mapping produced by :func:`to_dict`.

    Args:
        payload: Decoded JSON object.

    Returns:
        Restored provider specification.

    Raises:
        FormatError: If fields are missing or mistyped, the canonical text
            does not parse to a class, or the stored hash or name do not match
            the canonical text.
    """
    if not isinstance(payload, dict):
        raise FormatError("Provider payload must be a JSON object")
    name = _require(payload, "name", str)
    content_hash = _require(payload, "hash", str)
    text = _require(payload, "canonical_text", str)
    probe_payloads = _require(payload, "probes", list)

    try:
        declaration = parse_declaration(text)
    except ValidationError as exc:
        raise FormatError(
            f"Stored canonical text is not a class declaration: {exc}"
        ) from exc
    actual_hash = hash_text(text)
    if actual_hash != content_hash:
        logger.warning(
            f"Provider hash mismatch (name={name} stored={content_hash} actual={actual_hash})"
        )
        raise FormatError(
            f"Hash mismatch for provider '{name}': stored {content_hash}, computed {actual_hash}"
        )
    expected_name = provider_name_from_class(declaration.name)
    if expected_name != name:
        raise FormatError(
            f"Name mismatch for provider: stored '{name}', declaration gives '{expected_name}'"
        )

    return ProviderSpecification(
        name=name,
        content_hash=content_hash,
        canonical_text=text,
        declaration=declaration,
        probes=tuple(_probe_from_dict(item) for item in probe_payloads),
    )


def serialize(spec: ProviderSpecification) -> bytes:
    """Serialize a specification to UTF-8 encoded JSON."""
    return json.dumps(to_dict(spec), sort_keys=True).encode("utf-8")


def deserialize(data: bytes) -> ProviderSpecification:
    """Deserialize a specification produced by :func:`serialize`.

    Raises:
        FormatError: If the input is not a valid serialized specification.
    """
    return from_dict(_decode(data))


def dump_providers(specs: list[ProviderSpecification]) -> bytes:
    """Serialize a list of specifications to one JSON array."""
    return json.dumps([to_dict(spec) for spec in specs], sort_keys=True).encode(
        "utf-8"
    )


def load_providers(data: bytes) -> list[ProviderSpecification]:
    """Deserialize a JSON array produced by :func:`dump_providers`.

    Raises:
        FormatError: If the input or any element is malformed.
    """
    payload = _decode(data)
    if not isinstance(payload, list):
        raise FormatError("Provider list payload must be a JSON array")
    return [from_dict(item) for item in payload]


def _decode(data: bytes) -> Any:
    try:
        return json.loads(data.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise FormatError(f"Invalid provider JSON: {exc}") from exc


def _probe_from_dict(payload: Any) -> ProbeSpecification:
    if not isinstance(payload, dict):
        raise FormatError("Probe payload must be a JSON object")
    args: list[ProbeArgument] = []
    for arg in _require(payload, "args", list):
        if not isinstance(arg, dict):
            raise FormatError("Probe argument payload must be a JSON object")
        args.append(
            ProbeArgument(
                name=_require(arg, "name", str),
                arg_type=ArgType(
                    python_type=_require(arg, "python_type", str),
                    c_type=_require(arg, "c_type", str),
                    nullable=_require(arg, "nullable", bool),
                ),
            )
        )
    return ProbeSpecification(name=_require(payload, "name", str), args=tuple(args))


def _require(payload: dict[str, Any], key: str, expected: type) -> Any:
    if key not in payload:
        raise FormatError(f"Missing field '{key}'")
    value = payload[key]
    if not isinstance(value, expected):
        raise FormatError(
            f"Field '{key}' must be of type {expected.__name__}, got {type(value).__name__}"
        )
    return value
