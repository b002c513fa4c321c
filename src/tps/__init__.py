# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Public import surface for tracing provider specification extraction."""

from tps.errors import ExtractionError, FormatError, TracingSpecError, ValidationError
from tps.probe import ArgType, ProbeArgument, ProbeSpecification, extract_probe
from tps.provider import (
    ProviderSpecification,
    ValidatedProvider,
    build_provider,
    find_probes,
    validate_provider,
)
from tps.scanner import (
    NameCollision,
    ProviderScanner,
    find_name_collisions,
    find_providers,
    make_marker_predicate,
)
from tps.serialization import deserialize, serialize

__all__ = [
    "ArgType",
    "ExtractionError",
    "FormatError",
    "NameCollision",
    "ProbeArgument",
    "ProbeSpecification",
    "ProviderScanner",
    "ProviderSpecification",
    "TracingSpecError",
    "ValidatedProvider",
    "ValidationError",
    "build_provider",
    "deserialize",
    "extract_probe",
    "find_name_collisions",
    "find_probes",
    "find_providers",
    "make_marker_predicate",
    "serialize",
    "validate_provider",
]
