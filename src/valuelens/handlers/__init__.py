"""
Language handlers for valuelens.

One handler per debug backend; the registry selects by language tag.

valuelens/src/valuelens/handlers/__init__.py
"""

from valuelens.handlers.base import BaseLanguageHandler, ImportanceRule, ValueCategory
from valuelens.handlers.cpp import CppHandler
from valuelens.handlers.go import GoHandler
from valuelens.handlers.java import JavaHandler
from valuelens.handlers.javascript import JavaScriptHandler
from valuelens.handlers.python import PythonHandler
from valuelens.handlers.registry import (
    HandlerRegistry,
    UnsupportedLanguageError,
    get_all_handlers,
    get_handler,
    handler_registry,
    register_handler,
    require_handler,
    resolve_language,
    resolve_options,
)

__all__ = [
    "BaseLanguageHandler",
    "ImportanceRule",
    "ValueCategory",
    "CppHandler",
    "GoHandler",
    "JavaHandler",
    "JavaScriptHandler",
    "PythonHandler",
    "HandlerRegistry",
    "UnsupportedLanguageError",
    "get_all_handlers",
    "get_handler",
    "handler_registry",
    "register_handler",
    "require_handler",
    "resolve_language",
    "resolve_options",
]
