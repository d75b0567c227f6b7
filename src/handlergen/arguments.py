"""
Mapping of handler method parameters onto the incoming message.

Generated dispatch functions receive the message and the dispatch context;
each parameter of the user's method is fed from one of those:

- a parameter named ``ctx`` receives the dispatch context
- a parameter typed as the message type receives the whole message
- any other parameter receives the message field of the same name
"""

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum

from handlergen.exceptions import IgnoredParameterError, UnsupportedParameterPatternError
from handlergen.syntax import FnArg, IdentPat, IgnoredArg, Path, PathType, SelfArg

logger = logging.getLogger(__name__)


class BindingKind(Enum):
    """Which value a handler parameter receives."""

    CONTEXT = "context"
    MESSAGE = "message"
    FIELD = "field"


@dataclass(frozen=True)
class ArgumentBinding:
    """
    How one method parameter is supplied from inside the dispatch function.

    Attributes:
        kind: Which value is passed
        field: Name of the projected message field (FIELD bindings only)
    """

    kind: BindingKind
    field: str | None = None

    @classmethod
    def context(cls) -> "ArgumentBinding":
        return cls(BindingKind.CONTEXT)

    @classmethod
    def message(cls) -> "ArgumentBinding":
        return cls(BindingKind.MESSAGE)

    @classmethod
    def project(cls, field: str) -> "ArgumentBinding":
        return cls(BindingKind.FIELD, field)

    def render(self, message_param: str = "msg", context_param: str = "ctx") -> str:
        """Render the binding as an argument expression."""
        if self.kind is BindingKind.CONTEXT:
            return context_param
        if self.kind is BindingKind.MESSAGE:
            return message_param
        return f"{message_param}.{self.field}"


def map_arguments(
    inputs: Sequence[FnArg],
    message: Path,
    *,
    method_name: str,
    context_name: str = "ctx",
) -> list[ArgumentBinding]:
    """
    Derive the argument bindings for a handler method.

    Bindings follow declaration order; the receiver is skipped.

    Args:
        inputs: The method's parameters, receiver included
        message: The message type named by the method's directive
        method_name: Name of the method, for error messages
        context_name: Parameter name that receives the dispatch context

    Returns:
        One binding per non-receiver parameter

    Raises:
        UnsupportedParameterPatternError: If a parameter is not bound to a
            plain identifier
        IgnoredParameterError: If a parameter has no binding at all
    """
    bindings: list[ArgumentBinding] = []

    for arg in inputs:
        if isinstance(arg, SelfArg):
            continue
        if isinstance(arg, IgnoredArg):
            raise IgnoredParameterError(method_name)

        pat = arg.pat
        if not isinstance(pat, IdentPat):
            raise UnsupportedParameterPatternError(method_name, pat.render())

        if pat.name == context_name:
            bindings.append(ArgumentBinding.context())
        elif isinstance(arg.ty, PathType) and arg.ty.path == message:
            bindings.append(ArgumentBinding.message())
        else:
            bindings.append(ArgumentBinding.project(pat.name))

    logger.debug(
        "Mapped %d argument(s) for %s",
        len(bindings),
        method_name,
        extra={
            "method": method_name,
            "message_type": message.render(),
            "bindings": [binding.kind.value for binding in bindings],
        },
    )
    return bindings


__all__ = [
    "ArgumentBinding",
    "BindingKind",
    "map_arguments",
]
