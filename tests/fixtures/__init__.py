"""
Shared test fixtures for the handlergen library.

Usage:
    from tests.fixtures import (
        directive,
        impl_block,
        method,
        param,
        server_block,
    )
"""

from tests.fixtures.trees import (
    directive,
    doc,
    ignored,
    impl_block,
    literal,
    marker,
    method,
    param,
    pattern_param,
    server_block,
    word,
)

__all__ = [
    "directive",
    "doc",
    "ignored",
    "impl_block",
    "literal",
    "marker",
    "method",
    "param",
    "pattern_param",
    "server_block",
    "word",
]
