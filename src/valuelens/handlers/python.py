"""
Python values as printed by debugpy (``repr`` output).

valuelens/src/valuelens/handlers/python.py
"""

import re
from typing import List, Optional

from valuelens.handlers.base import BaseLanguageHandler, ImportanceRule
from valuelens.inference import (
    DECIMAL,
    DIGITS,
    TypeRule,
    enclosed,
    exact,
    matches,
    name_contains,
    prefixed,
)
from valuelens.models import PatternSet, Variant
from valuelens.tokenizer import Delimiters, enclosed_body, find_top_level, strip_quotes

OBJECT_REPR_RE = re.compile(r"<([^>]+)>")
OBJECT_AT_RE = re.compile(r"\s+object at 0x[0-9a-fA-F]+")


class PythonHandler(BaseLanguageHandler):
    """Handler for Python (debugpy)."""

    variant = Variant.PYTHON
    patterns = PatternSet(
        application_names=(
            "request", "response", "data", "result", "user", "config", "app", "client",
            "server", "db", "model", "view", "form", "session", "context", "params",
            "args", "kwargs", "payload",
        ),
        system_names=(
            "__", "_internal", "sys", "os", "builtins", "traceback", "__dict__",
            "__class__", "__module__", "__name__", "__doc__", "_pytest", "_mock",
            "__pycache__", "site-packages",
        ),
        control_flow_names=(
            "error", "exception", "result", "success", "failure", "status", "valid",
            "invalid", "found", "exists", "enabled", "disabled",
        ),
        primitive_type_names=(
            "int", "float", "str", "bool", "bytes", "NoneType", "complex", "type", "object",
        ),
        complex_type_names=(
            "list", "dict", "tuple", "set", "frozenset", "class", "function", "method",
            "module", "generator",
        ),
    )

    any_type = "object"
    nil_literals = frozenset({"None"})
    delimiters = Delimiters(quote_chars=frozenset("\"'"), escapes=True)
    field_separators = (":",)
    struct_prefix_allowed = False
    array_prefix_allowed = False
    reference_markers = ("object at 0x",)
    long_name_threshold = 25

    literal_rules = (
        exact("None", result="NoneType"),
        exact("True", "False", result="bool"),
        prefixed("'", '"', result="str"),
        matches(DIGITS, result="int"),
        matches(DECIMAL, result="float"),
        enclosed("[", "]", result="list"),
        enclosed("{", "}", result="dict"),
        enclosed("(", ")", result="tuple"),
        TypeRule(lambda _n, v: v.startswith("<") and "object at" in v, "object", "object repr"),
        prefixed("<function", result="function"),
        prefixed("<method", result="method"),
        prefixed("<class", result="type"),
        prefixed("<module", result="module"),
    )

    name_rules = (
        TypeRule(lambda n, _v: "request" in n or n == "req", "HttpRequest", "request name"),
        TypeRule(lambda n, _v: "response" in n or n == "resp", "HttpResponse", "response name"),
        name_contains("model", result="Model"),
        name_contains("form", result="Form"),
        name_contains("user", result="User"),
        name_contains("session", result="Session"),
        name_contains("db", "database", result="Database"),
    )

    default_options = {
        "max_depth": 4,
        "max_string_length": 1500,
        "memory_limit": 60,
        "max_array_length": 30,
        "max_object_keys": 40,
        "truncate_threshold": 2500,
        "show_pointer_addresses": False,
    }

    def extract_function_name(self, raw_name: str) -> str:
        if not raw_name:
            return "unknown"
        cleaned = raw_name.strip()
        cleaned = re.sub(r"^<|>$", "", cleaned)
        if "." in cleaned:
            cleaned = ".".join(cleaned.split(".")[-3:])
        if len(cleaned) > 60:
            cleaned = cleaned[:57] + "..."
        return cleaned or "unknown"

    def format_display_value(self, raw_value: str, type_name: str = "") -> str:
        value = (raw_value or "").strip()
        if self.is_nil_value(value):
            return "None"
        if type_name == "str":
            return strip_quotes(value, self.delimiters.quote_chars)
        if self._is_object_repr(value):
            match = OBJECT_REPR_RE.search(value)
            if match:
                return f"<{match.group(1)}>"
        return raw_value

    def pointer_display(self, raw_value: str, type_name: str, show_address: bool) -> str:
        formatted = self.format_display_value(raw_value, type_name)
        if show_address:
            return formatted
        return OBJECT_AT_RE.sub(" object", formatted)

    def is_collection_type(self, value: str, type_name: str) -> bool:
        value = (value or "").strip()
        if type_name in ("list", "tuple", "set", "frozenset"):
            return True
        if value.startswith("[") and value.endswith("]"):
            return True
        if value.startswith("(") and value.endswith(")"):
            return True
        return "list" in value or "tuple" in value

    def is_structured_type(self, value: str, type_name: str) -> bool:
        value = (value or "").strip()
        if type_name in ("dict", "object", "class"):
            return True
        if value.startswith("{") and value.endswith("}"):
            return True
        if self._is_object_repr(value):
            return True
        return not self.is_primitive_type(value, type_name) and not self.is_collection_type(
            value, type_name
        )

    def variant_importance_rules(self) -> List[ImportanceRule]:
        return [
            ImportanceRule(
                lambda n, _l, _v: len(n) > 4 and n.startswith("__") and n.endswith("__"),
                -75,
                "dunder name",
            ),
            ImportanceRule(
                lambda n, _l, _v: n.startswith("_") and not n.startswith("__"),
                -25,
                "private name",
            ),
        ]

    def _array_body(self, raw_value: str) -> Optional[str]:
        value = (raw_value or "").strip()
        for opener in ("[", "("):
            body = enclosed_body(value, opener, self.delimiters)
            if body is not None:
                return body
        # Set literals share braces with dicts but carry no top-level colon.
        body = enclosed_body(value, "{", self.delimiters)
        if body is not None and body.strip() and find_top_level(body, ":", self.delimiters) < 0:
            return body
        return None

    def _is_pointer(self, raw_value: str, type_name: str) -> bool:
        return self._is_object_repr((raw_value or "").strip())

    def _is_expandable(self, raw_value: str, type_name: str) -> bool:
        value = (raw_value or "").strip()
        return (
            value.startswith(("{", "[", "("))
            or self._is_object_repr(value)
            or type_name in ("dict", "list", "tuple", "object", "class")
        )

    @staticmethod
    def _is_object_repr(value: str) -> bool:
        """Whole value is one ``<... object at 0x...>`` repr, not a container holding one."""
        return (
            value.startswith("<")
            and value.endswith(">")
            and OBJECT_AT_RE.search(value) is not None
        )
