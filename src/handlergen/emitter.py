"""
Rendering of trait implementations for handler methods.

The emitter never looks at a method's return type. A ``#[handler(..)]``
method that does not return a result simply produces code the compiler
rejects later.

Framework traits and the response type are always written as paths through
the framework crate, so they cannot clash with user types of the same name.

Example:
    >>> emitter = HandlerEmitter()
    >>> emission = emitter.emit(
    ...     target_type,
    ...     "start",
    ...     SimpleDirective(Path.parse("Ping")),
    ...     [ArgumentBinding.context(), ArgumentBinding.message()],
    ... )
    >>> print(emission.text)
    impl actix::Handler<Ping> for Server {
        fn handle(&mut self, msg: Ping, ctx: &mut Self::Context) -> actix::Response<Self, Ping> {
            Self::reply(self.start(ctx, msg))
        }
    }
"""

import logging
import textwrap
from collections.abc import Sequence
from dataclasses import dataclass

from handlergen.arguments import ArgumentBinding
from handlergen.config import DEFAULT_CONFIG, FrameworkConfig
from handlergen.directives import (
    HandlerDirective,
    ResultDirective,
    SimpleDirective,
    StreamDirective,
)
from handlergen.syntax import Path, Type

logger = logging.getLogger(__name__)

INDENT = "    "


@dataclass(frozen=True)
class HandlerEmission:
    """
    Code emitted for one handler method or for the lifecycle binding.

    Attributes:
        implementations: Rendered trait implementations, in output order
        imports: Framework names the scope must import for the
            implementations to resolve
    """

    implementations: tuple[str, ...]
    imports: frozenset[str]

    @property
    def text(self) -> str:
        return "\n\n".join(self.implementations)


class HandlerEmitter:
    """
    Renders trait implementations for classified handler methods.

    Args:
        config: Names of the framework traits and helpers to target
    """

    def __init__(self, config: FrameworkConfig | None = None) -> None:
        self._config = config or DEFAULT_CONFIG

    @property
    def config(self) -> FrameworkConfig:
        return self._config

    def emit(
        self,
        target_type: Type,
        method_name: str,
        directive: HandlerDirective,
        bindings: Sequence[ArgumentBinding],
        *,
        receiver: bool = True,
    ) -> HandlerEmission:
        """
        Emit the implementations for one handler method.

        Args:
            target_type: The type the impl block extends
            method_name: The handler method
            directive: The method's classified directive
            bindings: Argument bindings from map_arguments
            receiver: Whether the method takes self; associated functions
                are called through ``Self::``

        Returns:
            One implementation for simple and result handlers, two for
            stream handlers (marker first)
        """
        config = self._config
        call = self._call(method_name, bindings, receiver)
        ty = target_type.render()
        implementations: tuple[str, ...]

        if isinstance(directive, SimpleDirective):
            implementations = (
                self._handler_impl(ty, (directive.message,), [f"Self::{config.reply}({call})"]),
            )
        elif isinstance(directive, ResultDirective):
            implementations = (
                self._handler_impl(ty, (directive.message,), self._match_outcome(call)),
            )
        elif isinstance(directive, StreamDirective):
            trait_args = (directive.message, directive.error)
            marker = (
                f"impl {self._qualified(config.stream_trait)}<{_generic_args(trait_args)}> "
                f"for {ty} {{}}"
            )
            implementations = (
                marker,
                self._handler_impl(ty, trait_args, self._match_outcome(call)),
            )
        else:
            raise TypeError(f"Unknown handler directive: {directive!r}")

        logger.debug(
            "Emitted %d implementation(s) for %s::%s",
            len(implementations),
            ty,
            method_name,
            extra={
                "target_type": ty,
                "method": method_name,
                "directive": directive.name,
            },
        )
        return HandlerEmission(implementations, frozenset())

    def emit_lifecycle(self, target_type: Type, context: Path) -> HandlerEmission:
        """
        Emit the lifecycle trait implementation binding the dispatch context type.

        The framework context types are imported alongside it, since the
        context is usually written unqualified (``Context<Self>``).
        """
        config = self._config
        text = "\n".join(
            [
                f"impl {self._qualified(config.lifecycle_trait)} for {target_type.render()} {{",
                f"{INDENT}type Context = {context.render()};",
                "}",
            ]
        )
        return HandlerEmission((text,), frozenset(config.context_types))

    def render_scope(self, name: str, emissions: Sequence[HandlerEmission]) -> str:
        """
        Wrap emitted implementations in one anonymous constant scope.

        The scope declares the framework crate and imports the names the
        emissions ask for, sorted. No ``use`` line is written when there are
        none.
        """
        config = self._config
        imports: set[str] = set()
        implementations: list[str] = []
        for emission in emissions:
            imports.update(emission.imports)
            implementations.extend(emission.implementations)

        header = [f"extern crate {config.crate};"]
        if imports:
            header.append(f"use {config.crate}::{{{', '.join(sorted(imports))}}};")

        body = "\n".join(header)
        if implementations:
            body += "\n\n" + "\n\n".join(implementations)

        lines = []
        if config.allowed_lints:
            lines.append(f"#[allow({', '.join(config.allowed_lints)})]")
        lines.append(f"const {name}: () = {{")
        lines.append(textwrap.indent(body, INDENT))
        lines.append("};")
        return "\n".join(lines) + "\n"

    def _qualified(self, name: str) -> str:
        return f"{self._config.crate}::{name}"

    def _call(
        self,
        method_name: str,
        bindings: Sequence[ArgumentBinding],
        receiver: bool,
    ) -> str:
        config = self._config
        args = ", ".join(
            binding.render(config.message_param, config.context_param) for binding in bindings
        )
        target = "self." if receiver else "Self::"
        return f"{target}{method_name}({args})"

    def _match_outcome(self, call: str) -> list[str]:
        config = self._config
        return [
            f"match {call} {{",
            f"{INDENT}Ok(item) => Self::{config.reply}(item),",
            f"{INDENT}Err(err) => Self::{config.reply_error}(err),",
            "}",
        ]

    def _handler_impl(self, ty: str, trait_args: Sequence[Path], body: Sequence[str]) -> str:
        config = self._config
        message = trait_args[0].render()
        signature = (
            f"fn handle(&mut self, {config.message_param}: {message}, "
            f"{config.context_param}: &mut Self::Context) "
            f"-> {self._qualified(config.response_type)}<Self, {message}> {{"
        )
        lines = [
            f"impl {self._qualified(config.handler_trait)}<{_generic_args(trait_args)}> for {ty} {{",
            INDENT + signature,
            *(INDENT * 2 + line for line in body),
            INDENT + "}",
            "}",
        ]
        return "\n".join(lines)


def _generic_args(paths: Sequence[Path]) -> str:
    return ", ".join(path.render() for path in paths)


__all__ = [
    "HandlerEmission",
    "HandlerEmitter",
]
