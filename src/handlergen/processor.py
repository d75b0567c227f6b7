"""
Entry point: turn one annotated impl block into handler implementations.

The processor validates its target, then walks the block's methods in
declaration order. For every method carrying a handler directive it maps
the parameters and emits the trait implementations; everything else in the
block is left exactly as written.

Processing is fail-fast. The first error aborts the invocation and nothing
is emitted.

Example:
    >>> from handlergen import build_handler, parse_item
    >>>
    >>> unit = build_handler(parse_item(tree), context="Context<Self>")
    >>> print(unit.text)
    #[allow(non_upper_case_globals, ...)]
    const _impl_handlers_..._Server: () = {
        extern crate actix;
        use actix::{Context, FramedContext};
        ...
    };
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any

from handlergen.arguments import map_arguments
from handlergen.config import DEFAULT_CONFIG, FrameworkConfig
from handlergen.directives import classify
from handlergen.emitter import HandlerEmission, HandlerEmitter
from handlergen.exceptions import InvalidTargetError
from handlergen.naming import CompilationUnit, get_default_unit
from handlergen.syntax import AnnotatedMethod, ImplBlock, ImplMember, NamedItem, Path

logger = logging.getLogger(__name__)


class ProcessorState(Enum):
    """Stage of an invocation."""

    VALIDATING = "validating"
    EMITTING = "emitting"


@dataclass(frozen=True)
class GeneratedUnit:
    """
    Result of processing one impl block.

    Attributes:
        scope_name: Identifier of the constant wrapping the generated code
        item: The impl block with handler directives removed; all other
            attributes and members are untouched
        handler_methods: Names of the methods that produced handlers, in
            declaration order
        implementations: Every emitted implementation, lifecycle first
        imports: Framework names the scope imports
        text: The generated source text
    """

    scope_name: str
    item: ImplBlock
    handler_methods: tuple[str, ...]
    implementations: tuple[str, ...]
    imports: frozenset[str]
    text: str

    def __str__(self) -> str:
        return self.text


class ImplBlockProcessor:
    """
    Drives classification, argument mapping and emission over an impl block.

    Args:
        context: Optional dispatch context type. When given, the target type
            is also bound to it through the lifecycle trait. Accepts a Path
            or ``::`` separated text.
        unit: Compilation unit issuing scope identifiers. Defaults to the
            process-wide unit for the configured scope prefix.
        config: Framework names to target
    """

    def __init__(
        self,
        context: Path | str | None = None,
        *,
        unit: CompilationUnit | None = None,
        config: FrameworkConfig | None = None,
    ) -> None:
        self._config = config or DEFAULT_CONFIG
        self._context = Path.parse(context) if isinstance(context, str) else context
        self._unit = unit if unit is not None else get_default_unit(self._config.scope_prefix)
        self._emitter = HandlerEmitter(self._config)
        self._state = ProcessorState.VALIDATING

    @property
    def state(self) -> ProcessorState:
        return self._state

    @property
    def unit(self) -> CompilationUnit:
        return self._unit

    def process(self, item: Any) -> GeneratedUnit:
        """
        Generate the handler implementations for an impl block.

        Args:
            item: The declaration the handler macro is attached to

        Returns:
            The generated unit

        Raises:
            InvalidTargetError: If item is not a plain impl block
            DirectiveSyntaxError: If a directive is malformed
            UnsupportedParameterPatternError: If a handler parameter destructures
            IgnoredParameterError: If a handler parameter has no binding
        """
        self._state = ProcessorState.VALIDATING
        block = self._validate(item)

        self._state = ProcessorState.EMITTING
        members: list[ImplMember] = []
        emissions: list[HandlerEmission] = []
        handler_methods: list[str] = []

        for member in block.items:
            if not isinstance(member, AnnotatedMethod):
                members.append(member)
                continue

            directive, remaining = classify(
                member.attrs,
                method_name=member.name,
                strict=self._config.reject_duplicate_directives,
            )
            if directive is None:
                members.append(member)
                continue

            bindings = map_arguments(
                member.inputs,
                directive.message,
                method_name=member.name,
                context_name=self._config.context_param,
            )
            emissions.append(
                self._emitter.emit(
                    block.self_ty,
                    member.name,
                    directive,
                    bindings,
                    receiver=member.has_receiver,
                )
            )
            handler_methods.append(member.name)
            members.append(member.model_copy(update={"attrs": remaining}))

        scope_name = self._unit.scope_name(block.self_ty, handler_methods)
        if self._context is not None:
            emissions.insert(0, self._emitter.emit_lifecycle(block.self_ty, self._context))

        text = self._emitter.render_scope(scope_name, emissions)
        imports: set[str] = set()
        implementations: list[str] = []
        for emission in emissions:
            imports.update(emission.imports)
            implementations.extend(emission.implementations)

        logger.debug(
            "Generated %s with %d handler(s) for %s",
            scope_name,
            len(handler_methods),
            block.self_ty.render(),
            extra={
                "scope": scope_name,
                "target_type": block.self_ty.render(),
                "handlers": handler_methods,
                "context": self._context.render() if self._context else None,
            },
        )

        return GeneratedUnit(
            scope_name=scope_name,
            item=block.model_copy(update={"items": tuple(members)}),
            handler_methods=tuple(handler_methods),
            implementations=tuple(implementations),
            imports=frozenset(imports),
            text=text,
        )

    def _validate(self, item: Any) -> ImplBlock:
        if isinstance(item, ImplBlock) and not item.is_trait_impl:
            return item
        raise InvalidTargetError(_describe(item))


def _describe(item: Any) -> str:
    if isinstance(item, ImplBlock):
        return f"trait implementation `{item.render()}`"
    if isinstance(item, NamedItem):
        return f"{item.kind} `{item.name}`"
    return type(item).__name__


def build_handler(
    item: Any,
    context: Path | str | None = None,
    *,
    unit: CompilationUnit | None = None,
    config: FrameworkConfig | None = None,
) -> GeneratedUnit:
    """
    Process one impl block with a one-off processor.

    See ImplBlockProcessor for the arguments.
    """
    return ImplBlockProcessor(context, unit=unit, config=config).process(item)


__all__ = [
    "GeneratedUnit",
    "ImplBlockProcessor",
    "ProcessorState",
    "build_handler",
]
