"""Handler registry and discovery system.

Provides centralized registration and lookup of language handlers with
automatic loading from entry points and the built-in handler modules.

Responsibility: handler discovery, alias resolution and option merging.
Value interpretation belongs in the individual handler modules.

valuelens/src/valuelens/handlers/registry.py
"""

import importlib
import importlib.metadata
import logging
from typing import TYPE_CHECKING, Any, Dict, List, Mapping, Optional, Type, Union

from valuelens.handlers.base import BaseLanguageHandler
from valuelens.models import SimplificationOptions, Variant

if TYPE_CHECKING:
    from valuelens.config import Config

logger = logging.getLogger(__name__)

__all__ = [
    "HandlerRegistry",
    "UnsupportedLanguageError",
    "LANGUAGE_ALIASES",
    "handler_registry",
    "register_handler",
    "get_handler",
    "require_handler",
    "get_all_handlers",
    "resolve_language",
    "resolve_options",
]

ENTRY_POINT_GROUP = "valuelens.handlers"

BUILTIN_MODULES = [
    "valuelens.handlers.go",
    "valuelens.handlers.cpp",
    "valuelens.handlers.python",
    "valuelens.handlers.java",
    "valuelens.handlers.javascript",
]

# Debug adapter names and common spellings mapped to variant tags.
LANGUAGE_ALIASES: Dict[str, str] = {
    "golang": "go",
    "dlv": "go",
    "delve": "go",
    "c": "cpp",
    "c++": "cpp",
    "cxx": "cpp",
    "cppdbg": "cpp",
    "cppvsdbg": "cpp",
    "gdb": "cpp",
    "lldb": "cpp",
    "py": "python",
    "python3": "python",
    "debugpy": "python",
    "js": "javascript",
    "node": "javascript",
    "node2": "javascript",
    "pwa-node": "javascript",
    "chrome": "javascript",
    "pwa-chrome": "javascript",
    "msedge": "javascript",
    "typescript": "javascript",
    "ts": "javascript",
}

LanguageTag = Union[Variant, str]


class UnsupportedLanguageError(ValueError):
    """Raised when no handler is registered for a language tag."""

    def __init__(self, language: Any, available: List[str]):
        self.language = language
        self.available = available
        super().__init__(
            f"No handler registered for language '{language}'. "
            f"Available: {', '.join(available) or 'none'}"
        )


def resolve_language(language: Optional[LanguageTag]) -> Optional[str]:
    """Normalise a variant, tag or alias to a canonical tag string."""
    if language is None:
        return None
    if isinstance(language, Variant):
        return language.value
    tag = str(language).strip().lower()
    if not tag:
        return None
    return LANGUAGE_ALIASES.get(tag, tag)


class HandlerRegistry:
    """Registry for managing available language handlers."""

    def __init__(self):
        self._handlers: Dict[str, Type[BaseLanguageHandler]] = {}
        self._instances: Dict[str, BaseLanguageHandler] = {}
        self._loaded = False

    def register_handler(self, handler_class: Type[BaseLanguageHandler]) -> None:
        """Register a handler class under its variant tag."""
        if not isinstance(handler_class, type) or not issubclass(
            handler_class, BaseLanguageHandler
        ):
            raise ValueError(f"Handler {handler_class} must inherit from BaseLanguageHandler")

        tag = str(handler_class.variant)
        if tag in self._handlers and self._handlers[tag] is not handler_class:
            logger.warning(f"Overriding existing handler: {tag}")

        self._handlers[tag] = handler_class
        self._instances.pop(tag, None)
        logger.debug(f"Registered handler: {tag}")

    def get_handler(self, language: Optional[LanguageTag]) -> Optional[BaseLanguageHandler]:
        """Get the shared handler instance for a language, or None."""
        if not self._loaded:
            self._load_all_handlers()

        tag = resolve_language(language)
        if tag is None or tag not in self._handlers:
            return None

        if tag not in self._instances:
            self._instances[tag] = self._handlers[tag]()
        return self._instances[tag]

    def require_handler(self, language: Optional[LanguageTag]) -> BaseLanguageHandler:
        """Like ``get_handler`` but raises for unknown languages."""
        handler = self.get_handler(language)
        if handler is None:
            raise UnsupportedLanguageError(language, self.list_languages())
        return handler

    def get_all_handlers(self) -> Dict[str, Type[BaseLanguageHandler]]:
        """Get all registered handler classes."""
        if not self._loaded:
            self._load_all_handlers()
        return self._handlers.copy()

    def list_languages(self) -> List[str]:
        """List all registered variant tags."""
        if not self._loaded:
            self._load_all_handlers()
        return list(self._handlers.keys())

    def resolve_options(
        self,
        language: Optional[LanguageTag],
        overrides: Optional[Mapping[str, Any]] = None,
        config: Optional["Config"] = None,
    ) -> SimplificationOptions:
        """Merge variant defaults, project configuration and session overrides.

        Later layers win: handler defaults, then ``[tool.valuelens.options]``,
        then ``[tool.valuelens.<variant>]``, then ``overrides``.
        """
        handler = self.require_handler(language)
        options = handler.get_default_config()
        if config is not None:
            options = options.merged(config.options_for(handler.variant))
        return options.merged(overrides)

    def _load_all_handlers(self) -> None:
        """Load all handlers from built-ins and entry points."""
        if self._loaded:
            return

        # Built-ins first so third-party handlers can override a variant
        self._load_builtin_handlers()
        self._load_entry_point_handlers()

        self._loaded = True
        logger.debug(f"Loaded {len(self._handlers)} handlers")

    def _load_entry_point_handlers(self) -> None:
        """Load handlers from entry points."""
        try:
            entry_points = importlib.metadata.entry_points(group=ENTRY_POINT_GROUP)
        except Exception as e:
            logger.error(f"Failed to load entry point handlers: {e}")
            return

        for entry_point in entry_points:
            try:
                self.register_handler(entry_point.load())
            except Exception as e:
                logger.warning(f"Failed to load handler {entry_point.name}: {e}")

    def _load_builtin_handlers(self) -> None:
        """Load built-in handlers from modules."""
        for module_name in BUILTIN_MODULES:
            try:
                module = importlib.import_module(module_name)
            except ImportError as e:
                logger.warning(f"Could not import builtin handler module {module_name}: {e}")
                continue

            for attr_name in dir(module):
                attr = getattr(module, attr_name)
                if (
                    isinstance(attr, type)
                    and issubclass(attr, BaseLanguageHandler)
                    and attr is not BaseLanguageHandler
                    and attr.__module__ == module_name
                ):
                    self.register_handler(attr)


# Global registry instance
handler_registry = HandlerRegistry()


# Convenience functions
def register_handler(handler_class: Type[BaseLanguageHandler]) -> None:
    """Register a handler class with the global registry."""
    handler_registry.register_handler(handler_class)


def get_handler(language: Optional[LanguageTag]) -> Optional[BaseLanguageHandler]:
    """Get a handler by variant, tag or alias from the global registry."""
    return handler_registry.get_handler(language)


def require_handler(language: Optional[LanguageTag]) -> BaseLanguageHandler:
    """Get a handler from the global registry or raise ``UnsupportedLanguageError``."""
    return handler_registry.require_handler(language)


def get_all_handlers() -> Dict[str, Type[BaseLanguageHandler]]:
    """Get all handler classes from the global registry."""
    return handler_registry.get_all_handlers()


def resolve_options(
    language: Optional[LanguageTag],
    overrides: Optional[Mapping[str, Any]] = None,
    config: Optional["Config"] = None,
) -> SimplificationOptions:
    """Resolve simplification options through the global registry."""
    return handler_registry.resolve_options(language, overrides, config)
