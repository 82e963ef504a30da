"""
Go values as printed by Delve.

Delve output looks like ``main.User {Name: "Alice", Age: 30}``,
``[]int len: 3, cap: 3, [1,2,3]``, ``map[string]int ["a": 1, ]`` or
``*main.User {..}`` / ``(*main.User)(0xc0000140a0)`` for pointers.

valuelens/src/valuelens/handlers/go.py
"""

import re
from typing import List, Optional

from valuelens.handlers.base import ADDRESS_RE, BaseLanguageHandler, ImportanceRule
from valuelens.inference import (
    DECIMAL,
    DIGITS,
    TypeRule,
    enclosed,
    exact,
    matches,
    name_and_value,
    name_contains,
    name_is,
    prefixed,
)
from valuelens.models import PatternSet, TypeContext, Variant
from valuelens.tokenizer import Delimiters, enclosed_body, strip_quotes

LEN_HEADER_RE = re.compile(r"len:\s*(\d+)")
SLICE_PREFIX_RE = re.compile(r"^\[\d*\]")


class GoHandler(BaseLanguageHandler):
    """Handler for Go (Delve)."""

    variant = Variant.GO
    patterns = PatternSet(
        application_names=(
            "request", "response", "data", "result", "error", "config", "handler",
            "service", "manager", "client", "server", "user", "ctx", "context",
            "params", "body", "payload", "message",
        ),
        system_names=(
            "~", ".", "_internal", "_system", "_runtime", "_debug", "autotmp",
            "goroutine", "stack", "heap", "gc", "sync", "mutex", "lock", "once",
            "pool", "buffer", "cache",
        ),
        control_flow_names=(
            "err", "error", "ok", "found", "valid", "success", "fail", "result",
            "status", "state", "flag", "enabled", "disabled",
        ),
        primitive_type_names=(
            "string", "int", "int8", "int16", "int32", "int64", "uint", "uint8",
            "uint16", "uint32", "uint64", "float32", "float64", "bool", "byte",
            "rune", "time.Time", "time.Duration",
        ),
        complex_type_names=("struct", "interface{}", "map[", "[]", "chan ", "*"),
    )

    any_type = "interface{}"
    nil_literals = frozenset({"nil", "<nil>"})
    delimiters = Delimiters(quote_chars=frozenset('"'), escapes=True)
    field_separators = (":",)
    strip_key_quotes = True
    struct_prefix_allowed = True
    array_prefix_allowed = True
    reference_markers = ("0x",)
    unimportant_values = ("0",)
    long_name_threshold = 20

    literal_rules = (
        exact("nil", "<nil>", result="nil"),
        exact("true", "false", result="bool"),
        enclosed('"', '"', result="string"),
        matches(DECIMAL, result="float64"),
    )

    name_rules = (
        name_contains("time", "date", "timestamp", result="time.Time"),
        name_and_value("id", DIGITS, result="int64"),
        name_contains("count", "total", result="int"),
        name_contains("price", "amount", result="float64"),
        name_contains("flag", "enabled", result="bool"),
        TypeRule(lambda n, _v: "context" in n or n == "ctx", "context.Context", "context name"),
        TypeRule(lambda n, _v: "request" in n or n == "req", "http.Request", "request name"),
        TypeRule(lambda n, _v: "response" in n or n == "resp", "http.Response", "response name"),
    )

    shape_rules = (
        prefixed("*", result="*struct"),
        TypeRule(lambda _n, v: "{" in v and "}" in v, "struct", "value has braces"),
        enclosed("[", "]", result="slice"),
        TypeRule(lambda _n, v: "0x" in v, "pointer", "value has address"),
        prefixed("map[", result="map"),
        matches(DIGITS, result="int"),
    )

    default_options = {
        "max_depth": 6,
        "max_string_length": 1000,
        "memory_limit": 50,
        "max_array_length": 50,
        "max_object_keys": 50,
        "truncate_threshold": 2000,
        "show_pointer_addresses": True,
    }

    def extract_function_name(self, raw_name: str) -> str:
        """``github.com/acme/svc/pkg.(*Server).Handle`` -> ``pkg.(*Server).Handle``."""
        if not raw_name:
            return "unknown"
        name = raw_name.strip().split("/")[-1]
        if len(name) > 50:
            parts = name.split(".")
            if len(parts) > 2:
                return ".".join(parts[-2:])
            return name[:47] + "..."
        return name

    def format_display_value(self, raw_value: str, type_name: str = "") -> str:
        value = (raw_value or "").strip()
        if self.is_nil_value(value):
            return "nil"
        if type_name == "string":
            return strip_quotes(value, self.delimiters.quote_chars)
        return raw_value

    def is_collection_type(self, value: str, type_name: str) -> bool:
        type_name = type_name or ""
        value = (value or "").strip()
        if "[]" in type_name or "map[" in type_name or "slice" in type_name:
            return True
        if "len:" in value:
            return True
        return "[" in value and "]" in value[value.index("[") :]

    def is_structured_type(self, value: str, type_name: str) -> bool:
        type_name = type_name or ""
        value = (value or "").strip()
        if value.startswith("{") or "struct" in type_name:
            return True
        if type_name.startswith("map[") or value.startswith("map["):
            return True
        return not self.is_primitive_type(value, type_name) and not self.is_collection_type(
            value, type_name
        )

    def variant_importance_rules(self) -> List[ImportanceRule]:
        return [
            ImportanceRule(
                lambda _n, lower, _v: "autotmp" in lower or "~r" in lower or lower.startswith("."),
                -100,
                "compiler temporary",
            ),
        ]

    def element_type(self, container_type: str, element: str, index: int) -> str:
        container_type = (container_type or "").strip()
        if SLICE_PREFIX_RE.match(container_type):
            inner = SLICE_PREFIX_RE.sub("", container_type, count=1)
            if inner:
                return inner
        key = f"[{index}]"
        return self.infer_type(key, element, TypeContext(variable_name=key))

    def _struct_body(self, raw_value: str) -> Optional[str]:
        value = (raw_value or "").strip()
        if value.startswith("map["):
            return enclosed_body(value, "[", self.delimiters, allow_prefix=True)
        return super()._struct_body(value)

    def _declared_length(self, raw_value: str) -> Optional[int]:
        match = LEN_HEADER_RE.search(raw_value or "")
        return int(match.group(1)) if match else None

    def _is_pointer(self, raw_value: str, type_name: str) -> bool:
        value = (raw_value or "").strip()
        if (type_name or "").strip().startswith("*"):
            return True
        if self._is_quoted(value, self.delimiters.quote_chars):
            return False
        # Only an address ahead of the payload marks the value itself as a pointer.
        head = re.split(r"[{\[]", value, maxsplit=1)[0]
        return ADDRESS_RE.search(head) is not None

    def _is_expandable(self, raw_value: str, type_name: str) -> bool:
        type_name = type_name or ""
        value = (raw_value or "").strip()
        return (
            "{" in value
            or "[" in value
            or ("0x" in value and type_name.startswith("*"))
            or "struct" in type_name
            or "[]" in type_name
            or "map[" in type_name
        )
