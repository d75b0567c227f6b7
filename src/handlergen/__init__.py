"""
handlergen - Handler binding generator for actor-style message dispatch.

This library provides:
- Syntax tree models for annotated impl blocks, validated with Pydantic
- Classification of #[simple], #[handler] and #[stream] directives
- Mapping of method parameters onto incoming message fields
- Emission of Handler / StreamHandler / Actor trait implementations
- Deterministic, collision-free scope naming per compilation unit
"""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("handlergen")
except PackageNotFoundError:
    # Package not installed (running from source without install)
    __version__ = "0.0.0.dev0"

from handlergen.arguments import ArgumentBinding, BindingKind, map_arguments
from handlergen.config import DEFAULT_CONFIG, FrameworkConfig
from handlergen.directives import (
    HandlerDirective,
    ResultDirective,
    SimpleDirective,
    StreamDirective,
    classify,
)
from handlergen.emitter import HandlerEmission, HandlerEmitter
from handlergen.exceptions import (
    DirectiveSyntaxError,
    HandlerGenError,
    IgnoredParameterError,
    InvalidTargetError,
    UnsupportedParameterPatternError,
)
from handlergen.naming import CompilationUnit, clear_default_units, get_default_unit
from handlergen.processor import (
    GeneratedUnit,
    ImplBlockProcessor,
    ProcessorState,
    build_handler,
)
from handlergen.syntax import (
    AnnotatedMethod,
    Attribute,
    ImplBlock,
    Path,
    parse_item,
    parse_path,
    parse_type,
)

__all__ = [
    "__version__",
    # Syntax tree
    "AnnotatedMethod",
    "Attribute",
    "ImplBlock",
    "Path",
    "parse_item",
    "parse_path",
    "parse_type",
    # Directives
    "HandlerDirective",
    "ResultDirective",
    "SimpleDirective",
    "StreamDirective",
    "classify",
    # Arguments
    "ArgumentBinding",
    "BindingKind",
    "map_arguments",
    # Emission
    "HandlerEmission",
    "HandlerEmitter",
    # Processing
    "CompilationUnit",
    "GeneratedUnit",
    "ImplBlockProcessor",
    "ProcessorState",
    "build_handler",
    "clear_default_units",
    "get_default_unit",
    # Configuration
    "DEFAULT_CONFIG",
    "FrameworkConfig",
    # Exceptions
    "DirectiveSyntaxError",
    "HandlerGenError",
    "IgnoredParameterError",
    "InvalidTargetError",
    "UnsupportedParameterPatternError",
]
