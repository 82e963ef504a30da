"""
C and C++ values as printed by gdb, lldb and the cpptools adapters.

Aggregates come in as ``{name = "x", next = 0x0}``; STL containers as
``std::vector of length 3, capacity 4 = {1, 2, 3}``.

valuelens/src/valuelens/handlers/cpp.py
"""

import re
from typing import List, Optional

from valuelens.handlers.base import ADDRESS_RE, BaseLanguageHandler, ImportanceRule
from valuelens.inference import (
    DIGITS,
    enclosed,
    exact,
    matches,
    name_and_value,
    name_contains,
    value_contains,
)
from valuelens.models import PatternSet, Variant
from valuelens.tokenizer import Delimiters, enclosed_body, strip_quotes

STL_LENGTH_RE = re.compile(r"of length (\d+)")
TEMPLATE_RE = re.compile(r"<[^<>]*>")
PARAMS_RE = re.compile(r"\([^()]*\)")
QUALIFIER_SUFFIX_RE = re.compile(r"\s*(const|override|final)\s*$")

STRING_TYPES = ("std::string", "std::wstring", "std::u16string", "std::u32string")

STL_CONTAINERS = (
    "std::vector",
    "std::list",
    "std::map",
    "std::set",
    "std::string",
    "std::shared_ptr",
    "std::unique_ptr",
)


class CppHandler(BaseLanguageHandler):
    """Handler for C and C++ (gdb / lldb)."""

    variant = Variant.CPP
    patterns = PatternSet(
        application_names=(
            "user", "data", "result", "config", "request", "response", "handler",
            "processor", "manager", "controller", "service", "client", "server", "api",
            "model", "entity", "component", "application", "business", "domain",
            "core", "main",
        ),
        system_names=(
            "std::", "__", "_", "this", "vtbl", "vptr", "allocator", "iterator",
            "const_iterator", "reverse_iterator", "internal", "detail", "impl",
            "anonymous", "unnamed", "debug", "trace", "log", "temp", "tmp",
        ),
        control_flow_names=(
            "result", "status", "error", "success", "failure", "valid", "invalid",
            "found", "exists", "ready", "done", "complete", "enabled", "disabled",
            "active", "running", "stopped",
        ),
        primitive_type_names=(
            "bool", "char", "signed char", "unsigned char", "short", "unsigned short",
            "int", "unsigned int", "long", "unsigned long", "long long",
            "unsigned long long", "float", "double", "long double", "void", "wchar_t",
        ),
        complex_type_names=(
            "std::string", "std::wstring", "std::vector", "std::list", "std::deque",
            "std::set", "std::multiset", "std::map", "std::multimap",
            "std::unordered_set", "std::unordered_map", "std::array", "std::queue",
            "std::stack", "std::priority_queue", "std::shared_ptr", "std::unique_ptr",
            "std::weak_ptr",
        ),
    )

    any_type = "auto"
    nil_literals = frozenset({"nullptr", "NULL", "0x0", "(null)"})
    delimiters = Delimiters(quote_chars=frozenset("\"'"), escapes=True)
    field_separators = ("=", ":")
    struct_prefix_allowed = True
    array_prefix_allowed = False
    reference_markers = ("0x",)
    # A leading underscore marks an implementation name; elsewhere it is just snake_case.
    system_prefix_only = ("__", "_")
    system_checks_value = True
    long_name_threshold = 25

    literal_rules = (
        exact("nullptr", "NULL", result="nullptr_t"),
        exact("true", "false", result="bool"),
        matches(DIGITS, result="int"),
        matches(re.compile(r"^\d+u$", re.IGNORECASE), result="unsigned int"),
        matches(re.compile(r"^\d+l$", re.IGNORECASE), result="long"),
        matches(re.compile(r"^\d+ll$", re.IGNORECASE), result="long long"),
        matches(re.compile(r"^\d+\.\d+f?$", re.IGNORECASE), result="double"),
        enclosed('"', '"', result="std::string"),
        enclosed("'", "'", result="char"),
        value_contains("0x", result="pointer"),
        enclosed("{", "}", result="struct/class"),
        enclosed("[", "]", result="array"),
    ) + tuple(value_contains(container, result=container) for container in STL_CONTAINERS)

    name_rules = (
        name_contains("string", "text", "message", result="std::string"),
        name_contains("vector", "array", "list", result="std::vector"),
        name_contains("map", "dict", result="std::map"),
        name_contains("set", result="std::set"),
        name_contains("ptr", "pointer", result="pointer"),
        name_contains("count", "size", "length", result="size_t"),
        name_and_value("id", DIGITS, result="uint64_t"),
        name_contains("index", "pos", result="size_t"),
        name_contains("time", "timestamp", result="std::chrono::time_point"),
        name_contains("duration", result="std::chrono::duration"),
    )

    default_options = {
        "max_depth": 5,
        "max_string_length": 1000,
        "memory_limit": 60,
        "max_array_length": 20,
        "max_object_keys": 30,
        "truncate_threshold": 2000,
        "show_pointer_addresses": False,
    }

    def extract_function_name(self, raw_name: str) -> str:
        """``ns::detail::Widget<int>::draw(int) const`` -> ``detail::Widget::draw()``."""
        if not raw_name:
            return "unknown"
        cleaned = raw_name.strip()
        previous = None
        while previous != cleaned:
            previous = cleaned
            cleaned = TEMPLATE_RE.sub("", cleaned)
        cleaned = PARAMS_RE.sub("()", cleaned)
        cleaned = QUALIFIER_SUFFIX_RE.sub("", cleaned)
        if "::" in cleaned:
            cleaned = "::".join(cleaned.split("::")[-3:])
        if len(cleaned) > 60:
            cleaned = cleaned[:57] + "..."
        return cleaned or "unknown"

    def format_display_value(self, raw_value: str, type_name: str = "") -> str:
        value = (raw_value or "").strip()
        type_name = type_name or ""
        if self.is_nil_value(value):
            return "nullptr"
        if "string" in type_name:
            return strip_quotes(value, frozenset('"'))
        if type_name == "char":
            return strip_quotes(value, frozenset("'"))
        if "0x" in value and "*" in type_name and not value.startswith("*"):
            return f"*{value}"
        return raw_value

    def is_primitive_type(self, value: str, type_name: str) -> bool:
        if super().is_primitive_type(value, type_name):
            return True
        # Strings print as quoted literals and are truncated like any other scalar.
        normalized = self._normalize_type(type_name)
        is_string_type = normalized in STRING_TYPES or normalized.startswith("std::basic_string")
        return is_string_type and self._is_quoted((value or "").strip(), frozenset('"'))

    def is_collection_type(self, value: str, type_name: str) -> bool:
        type_name = type_name or ""
        value = (value or "").strip()
        collection_types = (
            "[]", "std::vector", "std::list", "std::deque", "std::array",
            "std::set", "std::multiset",
        )
        if any(marker in type_name for marker in collection_types):
            return True
        if value.startswith("[") and value.endswith("]"):
            return True
        return "vector" in value or "list" in value or "array" in value

    def is_structured_type(self, value: str, type_name: str) -> bool:
        type_name = type_name or ""
        value = (value or "").strip()
        structured_types = ("struct", "class", "std::map", "std::pair")
        if any(marker in type_name for marker in structured_types):
            return True
        if "{" in value and "}" in value:
            return True
        if "0x" in value:
            return True
        return not self.is_primitive_type(value, type_name) and not self.is_collection_type(
            value, type_name
        )

    def variant_importance_rules(self) -> List[ImportanceRule]:
        return [
            ImportanceRule(lambda n, _l, _v: n.startswith("_"), -75, "implementation prefix"),
            ImportanceRule(
                lambda _n, lower, _v: "vtbl" in lower or "vptr" in lower, -100, "vtable pointer"
            ),
            ImportanceRule(
                lambda _n, lower, _v: "anonymous" in lower or "unnamed" in lower,
                -50,
                "anonymous member",
            ),
            ImportanceRule(
                lambda _n, lower, _v: "manager" in lower or "handler" in lower, 20, "role keyword"
            ),
        ]

    def _array_body(self, raw_value: str) -> Optional[str]:
        value = (raw_value or "").strip()
        body = enclosed_body(value, "[", self.delimiters)
        if body is not None:
            return body
        return enclosed_body(value, "{", self.delimiters, allow_prefix=True)

    def _declared_length(self, raw_value: str) -> Optional[int]:
        match = STL_LENGTH_RE.search(raw_value or "")
        return int(match.group(1)) if match else None

    def _is_pointer(self, raw_value: str, type_name: str) -> bool:
        type_name = type_name or ""
        if "*" in type_name or "ptr" in type_name:
            return True
        value = (raw_value or "").strip()
        if self._is_quoted(value, self.delimiters.quote_chars):
            return False
        head = re.split(r"[{\[]", value, maxsplit=1)[0]
        return ADDRESS_RE.search(head) is not None

    def _is_expandable(self, raw_value: str, type_name: str) -> bool:
        type_name = type_name or ""
        value = (raw_value or "").strip()
        return (
            value.startswith(("{", "["))
            or "0x" in value
            or "std::" in type_name
            or "struct" in type_name
            or "class" in type_name
            or "*" in type_name
            or "[]" in type_name
        )

    def _normalize_type(self, type_name: str) -> str:
        cleaned = (type_name or "").strip()
        for qualifier in ("const ", "volatile "):
            cleaned = cleaned.replace(qualifier, "")
        cleaned = cleaned.rstrip("&").strip()
        return " ".join(cleaned.split())
