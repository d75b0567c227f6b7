"""
Handler directive classification.

This module recognizes the three handler directives a method may carry and
separates them from the rest of its attributes:

- ``#[simple(Msg)]``: call the method and reply with its return value
- ``#[handler(Msg)]``: the method returns a result; reply on Ok, fail on Err
- ``#[stream(Msg, Err)]``: like ``handler``, plus a streaming input marker

Each directive argument is either a bare identifier or a literal whose
text names the type:

Example:
    >>> directive, remaining = classify(method.attrs)
    >>> directive.message.render()
    'Ping'
"""

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from typing import ClassVar

from handlergen.exceptions import DirectiveSyntaxError
from handlergen.syntax import Attribute, ListMeta, LiteralMeta, NestedMeta, Path, WordMeta

logger = logging.getLogger(__name__)


# =============================================================================
# Directives
# =============================================================================


@dataclass(frozen=True)
class SimpleDirective:
    """Direct call-through handler."""

    name: ClassVar[str] = "simple"

    message: Path


@dataclass(frozen=True)
class ResultDirective:
    """Handler whose method returns a success/failure outcome."""

    name: ClassVar[str] = "handler"

    message: Path


@dataclass(frozen=True)
class StreamDirective:
    """Result handler that is also bound to the streaming input trait."""

    name: ClassVar[str] = "stream"

    message: Path
    error: Path


HandlerDirective = SimpleDirective | ResultDirective | StreamDirective

DIRECTIVE_NAMES: frozenset[str] = frozenset(
    {SimpleDirective.name, ResultDirective.name, StreamDirective.name}
)


# =============================================================================
# Directive arguments
# =============================================================================


@dataclass(frozen=True)
class IdentArgument:
    """A bare identifier argument: ``Ping``."""

    name: str


@dataclass(frozen=True)
class LiteralArgument:
    """A literal argument with its quoting stripped: ``"Ping"`` -> ``Ping``."""

    text: str


@dataclass(frozen=True)
class UnsupportedArgument:
    """Any other argument shape. Always rejected."""

    node: NestedMeta


DirectiveArgument = IdentArgument | LiteralArgument | UnsupportedArgument


def argument_shape(node: NestedMeta) -> DirectiveArgument:
    """Sort a directive argument into one of the supported shapes."""
    if isinstance(node, WordMeta):
        return IdentArgument(node.name)
    if isinstance(node, LiteralMeta):
        return LiteralArgument(node.lit.value)
    return UnsupportedArgument(node)


def resolve_argument(directive: str, node: NestedMeta) -> Path:
    """
    Resolve a directive argument to the type path it names.

    Args:
        directive: Name of the directive, used in error messages
        node: The argument as it appears in the attribute

    Returns:
        The named type path

    Raises:
        DirectiveSyntaxError: If the argument is not an identifier or a
            literal naming a type path
    """
    shape = argument_shape(node)
    if isinstance(shape, UnsupportedArgument):
        raise DirectiveSyntaxError(directive, f"`{shape.node.render()}` is not supported")

    text = shape.name if isinstance(shape, IdentArgument) else shape.text
    try:
        return Path.parse(text)
    except ValueError:
        raise DirectiveSyntaxError(
            directive, f"`{node.render()}` does not name a type"
        ) from None


def _parse_directive(meta: ListMeta) -> HandlerDirective:
    nested = meta.nested

    if meta.name == StreamDirective.name:
        if len(nested) != 2:
            raise DirectiveSyntaxError(
                meta.name, f"accepts exactly two arguments, got {len(nested)}"
            )
        return StreamDirective(
            message=resolve_argument(meta.name, nested[0]),
            error=resolve_argument(meta.name, nested[1]),
        )

    if len(nested) != 1:
        raise DirectiveSyntaxError(meta.name, f"accepts only one argument, got {len(nested)}")
    message = resolve_argument(meta.name, nested[0])
    if meta.name == SimpleDirective.name:
        return SimpleDirective(message)
    return ResultDirective(message)


def is_directive(attr: Attribute) -> bool:
    """Return True if the attribute is list-form ``simple``, ``handler`` or ``stream``."""
    return isinstance(attr.meta, ListMeta) and attr.meta.name in DIRECTIVE_NAMES


def classify(
    attrs: Sequence[Attribute],
    *,
    method_name: str | None = None,
    strict: bool = False,
) -> tuple[HandlerDirective | None, tuple[Attribute, ...]]:
    """
    Extract the handler directive from a method's attributes.

    The input is not modified. Unrecognized attributes, including word-form
    ``#[handler]``, are returned in their original order.

    Args:
        attrs: The method's attributes
        method_name: Name of the method, for log messages
        strict: Raise if more than one directive is present instead of
            keeping the last one

    Returns:
        Tuple of (directive or None, remaining attributes)

    Raises:
        DirectiveSyntaxError: If a directive is malformed, or if strict is
            set and a second directive is found
    """
    directive: HandlerDirective | None = None
    remaining: list[Attribute] = []

    for attr in attrs:
        meta = attr.meta
        if not isinstance(meta, ListMeta) or meta.name not in DIRECTIVE_NAMES:
            remaining.append(attr)
            continue

        parsed = _parse_directive(meta)

        if directive is not None:
            if strict:
                raise DirectiveSyntaxError(
                    meta.name,
                    f"conflicts with #[{directive.name}(..)]; "
                    f"a method can carry only one handler directive",
                )
            logger.warning(
                "Method %s carries more than one handler directive; #[%s(..)] replaces #[%s(..)]",
                method_name or "<unknown>",
                parsed.name,
                directive.name,
                extra={
                    "method": method_name,
                    "kept": parsed.name,
                    "dropped": directive.name,
                },
            )
        directive = parsed

    if directive is not None:
        logger.debug(
            "Classified %s as #[%s(..)] handler",
            method_name or "<unknown>",
            directive.name,
            extra={
                "method": method_name,
                "directive": directive.name,
                "message_type": directive.message.render(),
            },
        )

    return directive, tuple(remaining)


__all__ = [
    "DIRECTIVE_NAMES",
    "DirectiveArgument",
    "HandlerDirective",
    "IdentArgument",
    "LiteralArgument",
    "ResultDirective",
    "SimpleDirective",
    "StreamDirective",
    "UnsupportedArgument",
    "argument_shape",
    "classify",
    "is_directive",
    "resolve_argument",
]
