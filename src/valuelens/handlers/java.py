"""
Java values as printed by the JDWP-based adapters (``toString`` output).

valuelens/src/valuelens/handlers/java.py
"""

import re
from typing import List, Optional

from valuelens.handlers.base import BaseLanguageHandler, ImportanceRule
from valuelens.inference import (
    DIGITS,
    TypeRule,
    enclosed,
    exact,
    matches,
    name_and_value,
    name_contains,
)
from valuelens.models import PatternSet, Variant
from valuelens.tokenizer import Delimiters, strip_quotes

CLASS_PREFIX_RE = re.compile(r"^([^@]+)@")
# Identity hash form only (``com.acme.User@1b6d3586``), so e-mail-like strings are left alone.
IDENTITY_RE = re.compile(r"(?:^|\.)([\w$]+)@[0-9a-fA-F]+(?=$|\s|\()")
SIZE_RE = re.compile(r"\(size\s*=\s*(\d+)\)")


def _class_name(value: str) -> Optional[str]:
    match = CLASS_PREFIX_RE.match(value)
    return match.group(1) if match else None


class JavaHandler(BaseLanguageHandler):
    """Handler for Java."""

    variant = Variant.JAVA
    patterns = PatternSet(
        application_names=(
            "controller", "service", "repository", "entity", "dto", "model", "handler",
            "processor", "manager", "facade", "dao", "component", "request", "response",
            "data", "result", "user", "config", "client", "server", "api", "rest", "web",
            "business",
        ),
        system_names=(
            "java.", "javax.", "org.springframework.", "org.apache.", "com.sun.", "sun.",
            "jdk.", "oracle.", "this$", "val$", "arg$", "synthetic", "bridge", "class$",
            "method$", "field$", "enum$", "annotation$",
        ),
        control_flow_names=(
            "result", "success", "failure", "error", "exception", "status", "valid",
            "invalid", "found", "exists", "enabled", "disabled", "complete", "finished",
            "done", "ready", "active", "running",
        ),
        primitive_type_names=(
            "boolean", "byte", "char", "short", "int", "long", "float", "double", "void",
            "Boolean", "Byte", "Character", "Short", "Integer", "Long", "Float", "Double",
            "String",
        ),
        complex_type_names=(
            "Object", "List", "ArrayList", "LinkedList", "Vector", "Set", "HashSet",
            "TreeSet", "LinkedHashSet", "Map", "HashMap", "TreeMap", "LinkedHashMap",
            "ConcurrentHashMap", "Collection", "Iterator", "Iterable", "Optional", "Stream",
        ),
    )

    any_type = "Object"
    nil_literals = frozenset({"null"})
    delimiters = Delimiters(quote_chars=frozenset('"'), escapes=False)
    field_separators = ("=", ":")
    struct_prefix_allowed = True
    array_prefix_allowed = True
    reference_markers = ("@",)
    system_checks_value = True
    long_name_threshold = 30

    literal_rules = (
        exact("null", result="null"),
        exact("true", "false", result="boolean"),
        matches(DIGITS, result="int"),
        matches(r"^\d+L$", result="long"),
        matches(r"^\d+\.\d+f?$", result="double"),
        enclosed('"', '"', result="String"),
        enclosed("[", "]", result="Array"),
        TypeRule(lambda _n, v: "@" in v and " " in v, _class_name, "identity toString"),
    )

    name_rules = (
        name_contains("list", "array", result="List"),
        name_contains("map", "dict", result="Map"),
        name_contains("set", result="Set"),
        name_contains("string", "text", "message", result="String"),
        name_contains("count", "size", "length", result="int"),
        name_and_value("id", DIGITS, result="Long"),
        name_contains("price", "amount", "value", result="BigDecimal"),
        name_contains("date", "time", "timestamp", result="LocalDateTime"),
        name_contains("user", "person", result="User"),
        TypeRule(lambda n, _v: "request" in n or n == "req", "HttpServletRequest", "request name"),
        TypeRule(
            lambda n, _v: "response" in n or n == "resp", "HttpServletResponse", "response name"
        ),
        name_contains("service", result="Service"),
        name_contains("repository", "dao", result="Repository"),
        name_contains("controller", result="Controller"),
        name_contains("entity", "model", result="Entity"),
    )

    default_options = {
        "max_depth": 4,
        "max_string_length": 1200,
        "memory_limit": 40,
        "max_array_length": 20,
        "max_object_keys": 30,
        "truncate_threshold": 2000,
        "show_pointer_addresses": False,
    }

    def extract_function_name(self, raw_name: str) -> str:
        """``com.acme.web.UserController.show(Long)`` -> ``web.UserController.show()``."""
        if not raw_name:
            return "unknown"
        cleaned = re.sub(r"<[^>]*>", "", raw_name.strip())
        cleaned = re.sub(r"\([^)]*\)", "()", cleaned)
        if "." in cleaned:
            cleaned = ".".join(cleaned.split(".")[-3:])
        if len(cleaned) > 60:
            cleaned = cleaned[:57] + "..."
        return cleaned or "unknown"

    def format_display_value(self, raw_value: str, type_name: str = "") -> str:
        value = (raw_value or "").strip()
        if self.is_nil_value(value):
            return "null"
        if type_name == "String":
            return strip_quotes(value, self.delimiters.quote_chars)
        match = IDENTITY_RE.search(value)
        if match:
            return f"<{match.group(1)} object>"
        return raw_value

    def is_collection_type(self, value: str, type_name: str) -> bool:
        type_name = type_name or ""
        value = (value or "").strip()
        if any(marker in type_name for marker in ("[]", "List", "Set", "Collection", "Array")):
            return True
        if value.startswith("[") and value.endswith("]"):
            return True
        return any(marker in value for marker in ("ArrayList", "LinkedList", "HashSet"))

    def is_structured_type(self, value: str, type_name: str) -> bool:
        type_name = type_name or ""
        value = (value or "").strip()
        if "Object" in type_name or "Map" in type_name:
            return True
        if ("{" in value and "}" in value) or "@" in value:
            return True
        return not self.is_primitive_type(value, type_name) and not self.is_collection_type(
            value, type_name
        )

    def variant_importance_rules(self) -> List[ImportanceRule]:
        return [
            ImportanceRule(
                lambda n, _l, _v: n.startswith(("this$", "val$", "arg$")),
                -75,
                "synthetic capture",
            ),
            ImportanceRule(
                lambda n, _l, _v: "$" in n and not n.startswith("this$"), -25, "generated name"
            ),
            ImportanceRule(
                lambda _n, lower, _v: "service" in lower or "repository" in lower,
                20,
                "service role",
            ),
            ImportanceRule(
                lambda _n, lower, _v: "controller" in lower or "handler" in lower,
                20,
                "controller role",
            ),
        ]

    def _declared_length(self, raw_value: str) -> Optional[int]:
        match = SIZE_RE.search(raw_value or "")
        return int(match.group(1)) if match else None

    def _is_expandable(self, raw_value: str, type_name: str) -> bool:
        type_name = type_name or ""
        value = (raw_value or "").strip()
        return (
            value.startswith(("{", "["))
            or "@" in value
            or any(marker in type_name for marker in ("List", "Map", "Set", "Object", "[]"))
        )

    def _normalize_type(self, type_name: str) -> str:
        cleaned = (type_name or "").strip()
        if cleaned.startswith("java.lang."):
            cleaned = cleaned[len("java.lang.") :]
        return cleaned
