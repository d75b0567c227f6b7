"""
Shared pytest fixtures for the handlergen library tests.

This module provides:
- The running ``impl Server`` example (server)
- A compilation unit shared across invocations (compilation_unit)
- A processor bound to that unit (processor)
- Isolation of the process-wide compilation units between tests
"""

from __future__ import annotations

import pytest

from handlergen.naming import CompilationUnit, clear_default_units
from handlergen.processor import ImplBlockProcessor
from handlergen.syntax import ImplBlock
from tests.fixtures import server_block


@pytest.fixture(autouse=True)
def isolated_default_units():
    """Start every test with empty process-wide compilation units."""
    clear_default_units()
    yield
    clear_default_units()


@pytest.fixture
def server() -> ImplBlock:
    """The annotated ``impl Server`` block from tests.fixtures.trees."""
    return server_block()


@pytest.fixture
def compilation_unit() -> CompilationUnit:
    """A fresh compilation unit."""
    return CompilationUnit()


@pytest.fixture
def processor(compilation_unit: CompilationUnit) -> ImplBlockProcessor:
    """A processor issuing scope names from compilation_unit."""
    return ImplBlockProcessor(unit=compilation_unit)
