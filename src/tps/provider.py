# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Validate provider classes and build provider specifications."""

import ast
import copy
import logging
from dataclasses import dataclass, field, replace

from tps.canonical import canonical_text, dotted_name, parse_declaration
from tps.errors import ValidationError
from tps.hashing import hash_text
from tps.names import provider_name_from_class, unique_name
from tps.probe import (
    ProbeExtractor,
    ProbeSpecification,
    extract_probe,
    is_filler_statement,
)

logger = logging.getLogger(__name__)

_GENERIC_BASES: set[str] = {"Generic", "Protocol"}


@dataclass(frozen=True)
class ValidatedProvider:
    """Pair a provider class that passed validation with its probes."""

    declaration: ast.ClassDef
    probes: tuple[ProbeSpecification, ...]


@dataclass(frozen=True)
class ProviderSpecification:
    """Represent one tracing provider and its probes.

    Attributes:
        name: Base provider name in lowercase-underscore form.
        content_hash: Fixed-width hex hash of ``canonical_text``.
        canonical_text: Canonical text of the whole declaration.
        declaration: Provider class node owned by this record.
        probes: Probes in declaration order.
    """

    name: str
    content_hash: str
    canonical_text: str
    declaration: ast.ClassDef = field(compare=False, repr=False)
    probes: tuple[ProbeSpecification, ...] = ()

    @classmethod
    def from_class(
        cls,
        class_def: ast.ClassDef,
        extractor: ProbeExtractor = extract_probe,
    ) -> "ProviderSpecification":
        """Build a specification from a class declaration.

        Raises:
            ValidationError: If the class is not a valid provider.
        """
        return build_provider(validate_provider(class_def, extractor=extractor))

    @classmethod
    def from_source(
        cls,
        source: str,
        extractor: ProbeExtractor = extract_probe,
    ) -> "ProviderSpecification":
        """Build a specification from source text of a single class.

        Raises:
            ValidationError: If the text is not a single valid provider class.
        """
        return cls.from_class(parse_declaration(source), extractor=extractor)

    @property
    def unique_name(self) -> str:
        """Name qualified by content hash, safe as a system-level provider name."""
        return unique_name(self.name, self.content_hash)

    @property
    def class_name(self) -> str:
        return self.declaration.name

    @property
    def is_public(self) -> bool:
        return not self.declaration.name.startswith("_")

    def separate_probes(
        self,
    ) -> tuple["ProviderSpecification", tuple[ProbeSpecification, ...]]:
        """Split the probes off this specification.

        Returns:
            A copy of this specification without probes, owning its own copy
            of the declaration, and the probes.
        """
        without = replace(
            self, probes=(), declaration=copy.deepcopy(self.declaration)
        )
        return without, self.probes


def validate_provider(
    class_def: ast.ClassDef,
    extractor: ProbeExtractor = extract_probe,
) -> ValidatedProvider:
    """Validate that a class declaration can be used as a tracing provider.

    Rules are checked in order and the first failure is raised:

    1. the class takes no type parameters (PEP 695 parameters, or a
       subscripted ``Generic``/``Protocol`` base);
    2. the class body holds nothing but methods (docstrings, ``pass`` and
       ``...`` are ignored);
    3. every method is accepted by ``extractor``.

    Args:
        class_def: Candidate provider class.
        extractor: Method-to-probe extractor.

    Returns:
        The declaration paired with its probes in declaration order.

    Raises:
        ValidationError: If any rule fails. Extraction failures propagate as
            raised by ``extractor``.
    """
    probes = find_probes(class_def, extractor=extractor)
    return ValidatedProvider(declaration=class_def, probes=tuple(probes))


def find_probes(
    class_def: ast.ClassDef,
    extractor: ProbeExtractor = extract_probe,
) -> list[ProbeSpecification]:
    """Deduce the probes declared by a provider class.

    Raises:
        ValidationError: If the class is not a valid provider.
    """
    if _has_type_parameters(class_def):
        raise ValidationError(
            "Provider classes must not take any type parameters",
            class_def,
        )

    methods: list[ast.FunctionDef | ast.AsyncFunctionDef] = []
    for member in class_def.body:
        if is_filler_statement(member):
            continue
        if not isinstance(member, (ast.FunctionDef, ast.AsyncFunctionDef)):
            raise ValidationError(
                "Provider classes must consist entirely of methods, no other contents",
                member,
            )
        methods.append(member)

    return [extractor(class_def, method) for method in methods]


def build_provider(validated: ValidatedProvider) -> ProviderSpecification:
    """Assemble the specification of an already validated provider.

    Args:
        validated: Output of :func:`validate_provider`.

    Returns:
        Immutable provider specification.
    """
    declaration = copy.deepcopy(validated.declaration)
    text = canonical_text(declaration)
    spec = ProviderSpecification(
        name=provider_name_from_class(declaration.name),
        content_hash=hash_text(text),
        canonical_text=text,
        declaration=declaration,
        probes=validated.probes,
    )
    logger.debug(
        f"Built provider (class={declaration.name} unique_name={spec.unique_name} probes={len(spec.probes)})"
    )
    return spec


def _has_type_parameters(class_def: ast.ClassDef) -> bool:
    if getattr(class_def, "type_params", None):
        return True
    for base in class_def.bases:
        if not isinstance(base, ast.Subscript):
            continue
        name = dotted_name(base.value)
        if name is not None and name.rsplit(".", 1)[-1] in _GENERIC_BASES:
            return True
    return False
