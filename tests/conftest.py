"""
Pytest configuration and shared fixtures for all xylo tests.

The compiler holds the Lark tables and is stateless between compilations,
so one instance is shared by the whole session. Runtimes are cheap and are
created per test so no configuration leaks between tests.
"""

import sys
import pytest
from typing import Optional
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))
from xylo.compiler.driver import XyloCompiler
from xylo.runtime.runtime import XyloRuntime
from xylo.utils.config import GenerationConfig


# =============================================================================
# Session-scoped fixtures (shared across all tests)
# =============================================================================

@pytest.fixture(scope="session")
def session_compiler():
    """
    Session-scoped compiler shared across ALL tests.

    The parser is built once with Lark's on-disk cache; compiling does not
    mutate the compiler.
    """
    return XyloCompiler()


# =============================================================================
# Class-scoped fixtures
# =============================================================================

@pytest.fixture(scope="class")
def class_compiler(session_compiler):
    return session_compiler


@pytest.fixture(scope="class")
def class_runtime():
    """Runtime shared by one test class; every execute still starts fresh."""
    return XyloRuntime(GenerationConfig(seed=0, width=32, height=32))


# =============================================================================
# Function-scoped fixtures
# =============================================================================

@pytest.fixture
def compiler(session_compiler):
    return session_compiler


@pytest.fixture
def runtime():
    """Fresh runtime per test, small canvas for speed."""
    return XyloRuntime(GenerationConfig(seed=0, width=32, height=32))


# =============================================================================
# Helper fixtures
# =============================================================================

@pytest.fixture(scope="session")
def compile_and_execute_factory(session_compiler):
    """
    Factory fixture that provides a compile_and_execute function bound to
    the session compiler.
    """
    def _compile_and_execute(
        source_code: str,
        seed=0,
        width: int = 32,
        height: int = 32,
        source_file: Optional[str] = None,
    ):
        from tests.test_utils import compile_and_execute
        return compile_and_execute(
            source_code, session_compiler, XyloRuntime(),
            seed=seed, width=width, height=height, source_file=source_file,
        )

    return _compile_and_execute


@pytest.fixture
def compile_and_execute(compile_and_execute_factory):
    return compile_and_execute_factory


# =============================================================================
# Markers
# =============================================================================

def pytest_configure(config):
    """Register custom markers for test organization."""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests"
    )
    config.addinivalue_line(
        "markers", "unit: marks tests as unit tests"
    )
