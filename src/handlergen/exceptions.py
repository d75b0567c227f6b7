"""Library exceptions for the handlergen package."""


class HandlerGenError(Exception):
    """Base exception for handlergen library."""

    pass


class InvalidTargetError(HandlerGenError):
    """Raised when the handler macro is attached to anything but a plain impl block."""

    def __init__(self, target: str) -> None:
        self.target = target
        super().__init__(
            f"#[handler] can only be used with impl blocks, got {target}. "
            f"Attach it to a plain `impl Type {{ ... }}` block, not a trait implementation."
        )


class DirectiveSyntaxError(HandlerGenError):
    """
    Raised when a handler directive is malformed.

    This error occurs when:
    - #[simple(..)] or #[handler(..)] does not have exactly one argument
    - #[stream(..)] does not have exactly two arguments
    - An argument is neither a bare identifier nor a literal naming a type

    Attributes:
        directive: Name of the offending directive (simple, handler, stream)
        reason: Human readable description of the problem
    """

    def __init__(self, directive: str, reason: str) -> None:
        self.directive = directive
        self.reason = reason
        super().__init__(f"#[{directive}(..)] {reason}")


class UnsupportedParameterPatternError(HandlerGenError):
    """Raised when a handler method parameter uses a destructuring pattern."""

    def __init__(self, method_name: str, pattern: str) -> None:
        self.method_name = method_name
        self.pattern = pattern
        super().__init__(
            f"Unsupported argument `{pattern}` in handler method '{method_name}'. "
            f"Handler parameters must be bound to plain identifiers."
        )


class IgnoredParameterError(HandlerGenError):
    """Raised when a handler method parameter has no binding."""

    def __init__(self, method_name: str) -> None:
        self.method_name = method_name
        super().__init__(f"Ignored argument in handler method '{method_name}'")


__all__ = [
    "HandlerGenError",
    "InvalidTargetError",
    "DirectiveSyntaxError",
    "UnsupportedParameterPatternError",
    "IgnoredParameterError",
]
