"""
Configuration for the names generated code references.

The actor framework itself is never imported; generated code only has to
agree with it on the names of its traits, response type and reply helpers.
Everything that name-checks against the framework lives here so a different
framework version can be targeted without touching the emitter.
"""

from dataclasses import dataclass, fields

DEFAULT_ALLOWED_LINTS: tuple[str, ...] = (
    "non_upper_case_globals",
    "unused_attributes",
    "unused_qualifications",
    "unused_variables",
    "unused_imports",
)

DEFAULT_CONTEXT_TYPES: tuple[str, ...] = ("Context", "FramedContext")


@dataclass(frozen=True)
class FrameworkConfig:
    """Configuration for handler code generation.

    Attributes:
        crate: Name of the actor framework crate (default: "actix")
        handler_trait: Message handler trait (default: "Handler")
        stream_trait: Streaming input marker trait (default: "StreamHandler")
        lifecycle_trait: Trait binding the dispatch context type (default: "Actor")
        response_type: Return type of the dispatch function (default: "Response")
        reply: Associated function producing a successful reply (default: "reply")
        reply_error: Associated function producing a failed reply (default: "reply_error")
        context_param: Parameter name of the dispatch context (default: "ctx")
        message_param: Parameter name of the incoming message (default: "msg")
        scope_prefix: Prefix of generated scope identifiers (default: "_impl_handlers")
        context_types: Framework context types imported into the scope when
            the lifecycle trait is implemented, so the context type given
            by the caller resolves (default: Context, FramedContext)
        allowed_lints: Lints silenced on the generated scope
        reject_duplicate_directives: Raise instead of keeping the last directive
            when a method carries more than one (default: False)
    """

    crate: str = "actix"
    handler_trait: str = "Handler"
    stream_trait: str = "StreamHandler"
    lifecycle_trait: str = "Actor"
    response_type: str = "Response"
    reply: str = "reply"
    reply_error: str = "reply_error"
    context_param: str = "ctx"
    message_param: str = "msg"
    scope_prefix: str = "_impl_handlers"
    context_types: tuple[str, ...] = DEFAULT_CONTEXT_TYPES
    allowed_lints: tuple[str, ...] = DEFAULT_ALLOWED_LINTS
    reject_duplicate_directives: bool = False

    def __post_init__(self) -> None:
        for field in fields(self):
            value = getattr(self, field.name)
            if isinstance(value, str) and not value:
                raise ValueError(f"FrameworkConfig.{field.name} must not be empty")
        if self.context_param == self.message_param:
            raise ValueError("context_param and message_param must differ")


DEFAULT_CONFIG = FrameworkConfig()


__all__ = [
    "DEFAULT_ALLOWED_LINTS",
    "DEFAULT_CONFIG",
    "DEFAULT_CONTEXT_TYPES",
    "FrameworkConfig",
]
