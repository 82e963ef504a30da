"""
JavaScript and TypeScript values as printed by the Node and Chrome adapters.

valuelens/src/valuelens/handlers/javascript.py
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
    value_contains,
)
from valuelens.models import PatternSet, Variant
from valuelens.tokenizer import Delimiters, strip_quotes

ARRAY_HEADER_RE = re.compile(r"Array\((\d+)\)")
FUNCTION_NAME_RE = re.compile(r"function\s*([^(]*)")

QUOTES = frozenset("\"'`")


class JavaScriptHandler(BaseLanguageHandler):
    """Handler for JavaScript and TypeScript."""

    variant = Variant.JAVASCRIPT
    patterns = PatternSet(
        application_names=(
            "req", "res", "request", "response", "data", "result", "user", "config",
            "app", "client", "api", "component", "state", "props", "context", "params",
            "query", "body", "payload", "session",
        ),
        system_names=(
            "__proto__", "constructor", "prototype", "global", "process", "window",
            "__dirname", "__filename", "module", "exports", "require", "console",
            "Buffer", "setTimeout", "setInterval", "clearTimeout", "clearInterval",
        ),
        control_flow_names=(
            "error", "err", "success", "failure", "result", "status", "code", "valid",
            "invalid", "found", "exists", "enabled", "disabled", "done",
        ),
        primitive_type_names=(
            "string", "number", "boolean", "undefined", "null", "symbol", "bigint",
        ),
        complex_type_names=(
            "object", "function", "array", "date", "regexp", "promise", "map", "set",
            "weakmap", "weakset", "arraybuffer",
        ),
    )

    any_type = "object"
    nil_literals = frozenset({"null", "undefined"})
    delimiters = Delimiters(quote_chars=QUOTES, escapes=True)
    field_separators = (":",)
    strip_key_quotes = True
    struct_prefix_allowed = True
    array_prefix_allowed = True
    long_name_threshold = 30

    literal_rules = (
        exact("undefined", result="undefined"),
        exact("null", result="null"),
        exact("true", "false", result="boolean"),
        matches(DIGITS, result="number"),
        matches(DECIMAL, result="number"),
        prefixed('"', "'", "`", result="string"),
        enclosed("[", "]", result="Array"),
        enclosed("{", "}", result="Object"),
        prefixed("function", result="Function"),
        prefixed("async function", result="AsyncFunction"),
        TypeRule(lambda _n, v: len(v) >= 2 and v.startswith("/") and v.rfind("/") > 0, "RegExp"),
        value_contains("Promise", result="Promise"),
        value_contains("Date", result="Date"),
    )

    name_rules = (
        TypeRule(lambda n, _v: "request" in n or n == "req", "Request", "request name"),
        TypeRule(lambda n, _v: "response" in n or n == "res", "Response", "response name"),
        name_contains("element", "node", result="HTMLElement"),
        name_contains("event", result="Event"),
        name_contains("promise", result="Promise"),
        name_contains("callback", "cb", result="Function"),
        name_contains("component", result="Component"),
        name_contains("state", result="State"),
        name_contains("props", result="Props"),
    )

    default_options = {
        "max_depth": 5,
        "max_string_length": 2000,
        "memory_limit": 40,
        "max_array_length": 25,
        "max_object_keys": 35,
        "truncate_threshold": 3000,
        "show_pointer_addresses": False,
    }

    def extract_function_name(self, raw_name: str) -> str:
        if not raw_name:
            return "unknown"
        cleaned = raw_name.strip().split("/")[-1]
        if "anonymous" in cleaned:
            return "anonymous"
        if "=>" in cleaned:
            return "arrow function"
        cleaned = re.sub(r"^function\s*", "", cleaned)
        cleaned = re.sub(r"\s*\{.*\}$", "", cleaned, flags=re.DOTALL)
        if len(cleaned) > 50:
            parts = cleaned.split(".")
            if len(parts) > 2:
                return ".".join(parts[-2:])
            return cleaned[:47] + "..."
        return cleaned or "unnamed"

    def format_display_value(self, raw_value: str, type_name: str = "") -> str:
        value = (raw_value or "").strip()
        if self.is_nil_value(value):
            return value
        if type_name == "string":
            return strip_quotes(value, QUOTES)
        if value.startswith("function"):
            match = FUNCTION_NAME_RE.match(value)
            name = match.group(1).strip() if match else ""
            return f"function {name}()" if name else "function()"
        return raw_value

    def is_primitive_type(self, value: str, type_name: str) -> bool:
        return self._normalize_type(type_name).lower() in self._primitive_names

    def is_collection_type(self, value: str, type_name: str) -> bool:
        value = (value or "").strip()
        if type_name in ("Array", "Set", "Map", "WeakSet", "WeakMap"):
            return True
        if value.startswith("[") and value.endswith("]"):
            return True
        return "Array" in value or "Set" in value or "Map" in value

    def is_structured_type(self, value: str, type_name: str) -> bool:
        value = (value or "").strip()
        if type_name in ("Object", "Function", "Promise", "Date"):
            return True
        if value.startswith("{") and value.endswith("}"):
            return True
        if "Object" in value or "function" in value:
            return True
        return not self.is_primitive_type(value, type_name) and not self.is_collection_type(
            value, type_name
        )

    def variant_importance_rules(self) -> List[ImportanceRule]:
        return [
            ImportanceRule(
                lambda n, _l, _v: n.startswith("__") or n in ("constructor", "prototype"),
                -75,
                "prototype internals",
            ),
            ImportanceRule(lambda _n, _l, v: "function" in v, 15, "function value"),
            ImportanceRule(
                lambda n, _l, _v: n.startswith("_") and not n.startswith("__"),
                -25,
                "private name",
            ),
            ImportanceRule(
                lambda _n, lower, _v: "handler" in lower or "callback" in lower,
                20,
                "handler role",
            ),
            ImportanceRule(
                lambda _n, lower, _v: "async" in lower or "promise" in lower, 20, "async role"
            ),
        ]

    def _declared_length(self, raw_value: str) -> Optional[int]:
        match = ARRAY_HEADER_RE.search(raw_value or "")
        return int(match.group(1)) if match else None

    def _is_expandable(self, raw_value: str, type_name: str) -> bool:
        value = (raw_value or "").strip()
        return (
            value.startswith(("{", "["))
            or any(marker in value for marker in ("Object", "Array", "function"))
            or type_name in ("Object", "Array", "Function", "Promise", "Date")
        )
