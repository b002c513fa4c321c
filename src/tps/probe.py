# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Probe specifications and the default method-to-probe extractor."""

import ast
import logging
import re
from dataclasses import dataclass
from typing import Protocol

from tps.canonical import dotted_name
from tps.errors import ExtractionError

logger = logging.getLogger(__name__)

MAX_PROBE_ARGS = 12

_PROBE_NAME = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")
_ALLOWED_DECORATORS: set[str] = {"staticmethod"}
_RECEIVER_NAMES: set[str] = {"self", "cls"}
_MODULE_PREFIXES: tuple[str, ...] = ("ctypes.", "typing.")


@dataclass(frozen=True)
class ArgType:
    """Describe the type of one probe argument.

    Attributes:
        python_type: Canonical Python annotation, without ``Optional``.
        c_type: C type the argument is lowered to.
        nullable: Whether ``None`` is an accepted value.
    """

    python_type: str
    c_type: str
    nullable: bool = False


@dataclass(frozen=True)
class ProbeArgument:
    """Represent one positional probe argument."""

    name: str
    arg_type: ArgType


@dataclass(frozen=True)
class ProbeSpecification:
    """Represent one probe derived from a provider method.

    Attributes:
        name: Probe name, taken from the method name.
        args: Arguments in declaration order; position maps to the probe slot.
    """

    name: str
    args: tuple[ProbeArgument, ...] = ()

    @property
    def arg_types(self) -> tuple[ArgType, ...]:
        return tuple(arg.arg_type for arg in self.args)


class ProbeExtractor(Protocol):
    """Turn one provider method into a probe specification."""

    def __call__(
        self,
        provider: ast.ClassDef,
        method: ast.FunctionDef | ast.AsyncFunctionDef,
    ) -> ProbeSpecification:
        """Extract a probe from a method declaration.

        Raises:
            ExtractionError: If the method signature is not supported.
        """


SUPPORTED_TYPES: dict[str, ArgType] = {
    "bool": ArgType("bool", "uint8_t"),
    "int": ArgType("int", "int64_t"),
    "str": ArgType("str", "char *"),
    "bytes": ArgType("bytes", "char *"),
    "c_bool": ArgType("c_bool", "uint8_t"),
    "c_int8": ArgType("c_int8", "int8_t"),
    "c_uint8": ArgType("c_uint8", "uint8_t"),
    "c_int16": ArgType("c_int16", "int16_t"),
    "c_uint16": ArgType("c_uint16", "uint16_t"),
    "c_int32": ArgType("c_int32", "int32_t"),
    "c_uint32": ArgType("c_uint32", "uint32_t"),
    "c_int64": ArgType("c_int64", "int64_t"),
    "c_uint64": ArgType("c_uint64", "uint64_t"),
    "c_size_t": ArgType("c_size_t", "size_t"),
    "c_ssize_t": ArgType("c_ssize_t", "ssize_t"),
    "c_char_p": ArgType("c_char_p", "char *", nullable=True),
}

NULLABLE_TYPES: set[str] = {"str", "bytes"}


def extract_probe(
    provider: ast.ClassDef,
    method: ast.FunctionDef | ast.AsyncFunctionDef,
) -> ProbeSpecification:
    """Build a probe specification from a provider method.

    Args:
        provider: Class declaring the method.
        method: Method declaration.

    Returns:
        Probe specification with arguments in declaration order.

    Raises:
        ExtractionError: If the method cannot be used as a probe.
    """
    if isinstance(method, ast.AsyncFunctionDef):
        raise ExtractionError("Probe methods must not be async", method)
    if not _PROBE_NAME.match(method.name):
        raise ExtractionError("Probe names must be ASCII identifiers", method)
    if method.name.startswith("__") and method.name.endswith("__"):
        raise ExtractionError("Probe methods must not be special methods", method)
    for decorator in method.decorator_list:
        if dotted_name(decorator) not in _ALLOWED_DECORATORS:
            raise ExtractionError(
                "Probe methods must not have decorators other than staticmethod",
                decorator,
            )
    if getattr(method, "type_params", None):
        raise ExtractionError("Probe methods must not take any type parameters", method)

    arguments = method.args
    positional = [*arguments.posonlyargs, *arguments.args]
    if positional and positional[0].arg in _RECEIVER_NAMES:
        raise ExtractionError(
            "Probe methods must not take a self or cls parameter", positional[0]
        )
    if arguments.vararg is not None or arguments.kwarg is not None:
        raise ExtractionError("Probe methods must not take variadic arguments", method)
    if arguments.kwonlyargs:
        raise ExtractionError(
            "Probe methods must take positional arguments only",
            arguments.kwonlyargs[0],
        )
    if arguments.defaults:
        raise ExtractionError(
            "Probe arguments must not have default values", arguments.defaults[0]
        )
    if len(positional) > MAX_PROBE_ARGS:
        raise ExtractionError(
            f"Probe methods cannot have more than {MAX_PROBE_ARGS} arguments", method
        )
    if method.returns is not None and not _is_none(method.returns):
        raise ExtractionError("Probe methods must not return a value", method.returns)
    for statement in method.body:
        if not is_filler_statement(statement):
            raise ExtractionError(
                "Probe methods must not have an implementation", statement
            )

    args: list[ProbeArgument] = []
    for argument in positional:
        if argument.annotation is None:
            raise ExtractionError(
                f"Probe argument '{argument.arg}' must have a type annotation",
                argument,
            )
        arg_type = resolve_annotation(argument.annotation)
        if arg_type is None:
            raise ExtractionError(
                f"Probe argument '{argument.arg}' has an unsupported type",
                argument,
            )
        args.append(ProbeArgument(name=argument.arg, arg_type=arg_type))

    logger.debug(
        f"Extracted probe (provider={provider.name} probe={method.name} args={len(args)})"
    )
    return ProbeSpecification(name=method.name, args=tuple(args))


def resolve_annotation(annotation: ast.expr) -> ArgType | None:
    """Map an argument annotation to a supported probe argument type.

    Args:
        annotation: Annotation expression of one argument.

    Returns:
        Matching argument type, or ``None`` when the annotation is unsupported.
    """
    if isinstance(annotation, ast.Constant) and isinstance(annotation.value, str):
        try:
            parsed = ast.parse(annotation.value, mode="eval")
        except (SyntaxError, ValueError):
            return None
        return resolve_annotation(parsed.body)
    if isinstance(annotation, (ast.Name, ast.Attribute)):
        name = _strip_module(dotted_name(annotation))
        return SUPPORTED_TYPES.get(name) if name is not None else None
    if isinstance(annotation, ast.Subscript):
        if _strip_module(dotted_name(annotation.value)) != "Optional":
            return None
        return _nullable(annotation.slice)
    if isinstance(annotation, ast.BinOp) and isinstance(annotation.op, ast.BitOr):
        if _is_none(annotation.right):
            return _nullable(annotation.left)
        if _is_none(annotation.left):
            return _nullable(annotation.right)
    return None


def is_filler_statement(statement: ast.stmt) -> bool:
    """Check whether a statement is a docstring, ``pass`` or ``...``."""
    if isinstance(statement, ast.Pass):
        return True
    return (
        isinstance(statement, ast.Expr)
        and isinstance(statement.value, ast.Constant)
        and (statement.value.value is Ellipsis or isinstance(statement.value.value, str))
    )


def _nullable(inner: ast.expr) -> ArgType | None:
    arg_type = resolve_annotation(inner)
    if arg_type is None or arg_type.python_type not in NULLABLE_TYPES:
        return None
    return ArgType(arg_type.python_type, arg_type.c_type, nullable=True)


def _is_none(node: ast.expr) -> bool:
    return isinstance(node, ast.Constant) and node.value is None


def _strip_module(name: str | None) -> str | None:
    if name is None:
        return None
    for prefix in _MODULE_PREFIXES:
        if name.startswith(prefix):
            return name[len(prefix) :]
    return name
