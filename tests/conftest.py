"""
Pytest configuration and shared fixtures for all nestype tests.

Drivers and registries are cheap, but a registry carries typedefs, so
fixtures that define types are function-scoped.
"""

import sys
import pytest
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))
from nestype.inference.driver import InferenceDriver
from nestype.shared.types import FixedDimType, SymbolicDimType, TypeVar, VarDimType, INT64, FLOAT64
from nestype.typesys.registry import TypeRegistry


# =============================================================================
# Session-scoped fixtures (shared across all tests)
# =============================================================================

@pytest.fixture(scope="session")
def session_driver():
    """
    Session-scoped driver with an empty registry.

    Safe to share: inference never writes to the registry.
    """
    return InferenceDriver()


# =============================================================================
# Function-scoped fixtures (default - one per test)
# =============================================================================

@pytest.fixture
def driver(session_driver):
    return session_driver


@pytest.fixture
def registry():
    """Fresh registry per test."""
    return TypeRegistry()


@pytest.fixture
def typedef_registry():
    """
    Registry with a few typedefs:

    - vec:    N * T        (abstract, dtype slot is a type variable)
    - grid:   N * M * float64 (abstract shape, concrete dtype)
    - ragged: var * int64  (concrete, any branch lengths)
    - pair:   2 * int64    (concrete)
    """
    reg = TypeRegistry()
    reg.typedef("vec", SymbolicDimType("N", TypeVar("T")))
    reg.typedef("grid", SymbolicDimType("N", SymbolicDimType("M", FLOAT64)))
    reg.typedef("ragged", VarDimType(INT64))
    reg.typedef("pair", FixedDimType(2, INT64))
    return reg


@pytest.fixture
def typedef_driver(typedef_registry):
    return InferenceDriver(typedef_registry)


@pytest.fixture(autouse=True)
def _plain_diagnostics(monkeypatch):
    """Error messages render without ANSI codes unless a test asks for them."""
    monkeypatch.setenv("NO_COLOR", "1")
