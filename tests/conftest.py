"""Pytest configuration and fixtures for valuelens tests."""

import tempfile
from pathlib import Path
from typing import Iterator

import pytest

from valuelens.config import Config
from valuelens.handlers import (
    BaseLanguageHandler,
    CppHandler,
    GoHandler,
    JavaHandler,
    JavaScriptHandler,
    PythonHandler,
)

HANDLER_CLASSES = [GoHandler, CppHandler, PythonHandler, JavaHandler, JavaScriptHandler]


@pytest.fixture
def temp_dir() -> Iterator[Path]:
    """Create a temporary directory for test files."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def sample_config(temp_dir: Path) -> Config:
    """Create a sample Config object for testing."""
    return Config(
        project_root=temp_dir,
        config_dict={
            "language": "python",
            "options": {"max_depth": 3, "max-array-length": 5},
            "python": {"max_string_length": 40},
        },
    )


@pytest.fixture
def pyproject_toml(temp_dir: Path) -> Path:
    """Create a sample pyproject.toml file."""
    config_path = temp_dir / "pyproject.toml"
    config_path.write_text(
        """[project]
name = "sample"

[tool.valuelens]
language = "java"

[tool.valuelens.options]
max_depth = 3

[tool.valuelens.java]
max_object_keys = 2
"""
    )
    return config_path


@pytest.fixture(params=HANDLER_CLASSES, ids=lambda cls: cls.variant.value)
def handler(request) -> BaseLanguageHandler:
    """Each built-in handler in turn."""
    return request.param()


@pytest.fixture
def go_handler() -> GoHandler:
    return GoHandler()


@pytest.fixture
def cpp_handler() -> CppHandler:
    return CppHandler()


@pytest.fixture
def python_handler() -> PythonHandler:
    return PythonHandler()


@pytest.fixture
def java_handler() -> JavaHandler:
    return JavaHandler()


@pytest.fixture
def js_handler() -> JavaScriptHandler:
    return JavaScriptHandler()
