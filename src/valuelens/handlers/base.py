"""
Shared contract for per-language value handlers.

A handler holds everything that differs between debug backends: pattern
tables, nil spellings, quoting rules, the type inference cascade and the
importance weights. The algorithms themselves (cascade evaluation,
struct/array splitting, classification, scoring) live here and are driven
by the subclass tables.

Every public operation is total: any string input produces a value, never
an exception.

valuelens/src/valuelens/handlers/base.py
"""

import logging
import re
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, FrozenSet, List, Mapping, Optional, Sequence, Tuple

from valuelens.inference import TypeRule, first_match
from valuelens.models import (
    ParsedValue,
    PatternSet,
    SimplificationOptions,
    TypeContext,
    Variant,
)
from valuelens.tokenizer import (
    Delimiters,
    enclosed_body,
    split_key_value,
    split_top_level,
    strip_quotes,
)

logger = logging.getLogger(__name__)

__all__ = [
    "BaseLanguageHandler",
    "ImportanceRule",
    "ValueCategory",
    "ADDRESS_RE",
    "PLACEHOLDER_TYPES",
]

ADDRESS_RE = re.compile(r"0x[0-9a-fA-F]+")
BARE_ADDRESS_RE = re.compile(r"^\(?\*?[\w.\[\]*\s]*\)?\s*\(?0x[0-9a-fA-F]+\)?$")

PLACEHOLDER_TYPES: FrozenSet[str] = frozenset({"", "unknown", "<unknown>", "any", "?"})


class ValueCategory(Enum):
    """How the simplifier should treat one node."""

    NIL = "nil"
    POINTER = "pointer"
    PRIMITIVE = "primitive"
    STRUCTURED = "structured"
    COLLECTION = "collection"
    OPAQUE = "opaque"


@dataclass(frozen=True)
class ImportanceRule:
    """A ``(predicate, weight)`` pair; predicates get ``(name, name_lower, value)``."""

    predicate: Callable[[str, str, str], bool]
    weight: int
    description: str = ""


class BaseLanguageHandler(ABC):
    """Base class for language handlers.

    Subclasses set the class-level tables below and override the ``_``
    hooks where their runtime prints values differently.
    """

    variant: Variant
    patterns: PatternSet

    any_type: str = "object"
    nil_literals: FrozenSet[str] = frozenset()
    delimiters: Delimiters = Delimiters()
    field_separators: Tuple[str, ...] = (":",)
    strip_key_quotes: bool = False
    struct_prefix_allowed: bool = True
    array_prefix_allowed: bool = False

    # Value fragments marking an opaque object reference (not a meaningful value).
    reference_markers: Tuple[str, ...] = ()
    # Values that earn no "value present" importance.
    unimportant_values: Tuple[str, ...] = ()
    # System patterns that only count as a name prefix.
    system_prefix_only: Tuple[str, ...] = ()
    system_checks_value: bool = False
    long_name_threshold: int = 25

    literal_rules: Tuple[TypeRule, ...] = ()
    name_rules: Tuple[TypeRule, ...] = ()
    shape_rules: Tuple[TypeRule, ...] = ()

    default_options: Mapping[str, Any] = {}

    def __init__(self) -> None:
        self._importance_rules: Tuple[ImportanceRule, ...] = tuple(
            self.shared_importance_rules() + self.variant_importance_rules()
        )
        self._primitive_names = frozenset(self.patterns.primitive_type_names)
        logger.debug(f"Initialized {self.variant.value} handler")

    # ------------------------------------------------------------------
    # Type inference
    # ------------------------------------------------------------------

    def infer_type(self, name: str, raw_value: str, context: Optional[TypeContext] = None) -> str:
        """Infer a semantic type label for one variable.

        Cascade: literal forms, declared type from ``context``, name
        keywords, late value shapes, then ``context.parent_type`` or the
        variant's generic marker.
        """
        context = context or TypeContext(variable_name=name)
        value = (raw_value or "").strip()
        name_lower = (name or "").lower()

        label = first_match(self.literal_rules, name_lower, value)
        if label is not None:
            return label

        declared = context.declared_type
        if declared and not self.is_placeholder_type(declared):
            return declared

        label = first_match(self.name_rules, name_lower, value)
        if label is not None:
            return label

        label = first_match(self.shape_rules, name_lower, value)
        if label is not None:
            return label

        return context.parent_type or self.any_type

    def is_placeholder_type(self, type_name: Optional[str]) -> bool:
        """True for empty or generic type labels that carry no information."""
        if type_name is None:
            return True
        cleaned = type_name.strip()
        return cleaned.lower() in PLACEHOLDER_TYPES or cleaned == self.any_type

    # ------------------------------------------------------------------
    # Parsing
    # ------------------------------------------------------------------

    def parse_variable_value(self, raw_value: str, type_name: str = "") -> ParsedValue:
        """Interpret one raw value. Unparsable input echoes the raw text."""
        value = raw_value if isinstance(raw_value, str) else str(raw_value)
        type_name = type_name or ""

        is_nil = self.is_nil_value(value)
        if is_nil:
            return ParsedValue(
                display_value=self.format_display_value(value, type_name),
                actual_value=value,
                is_expandable=False,
                is_nil=True,
                is_pointer=False,
            )

        is_pointer = self._is_pointer(value, type_name)
        memory_address = self.memory_address(value) if is_pointer else None

        fields = self.parse_struct_fields(value)
        elements = self.parse_array_elements(value)

        array_length = None
        declared_length = self._declared_length(self._header(value))
        if declared_length is not None:
            array_length = declared_length
        elif self._array_body(value) is not None and self.is_collection_type(value, type_name):
            array_length = len(elements)

        object_key_count = len(fields) if self._struct_body(value) is not None else None

        has_content = bool(fields) or bool(elements) or memory_address is not None
        is_expandable = has_content and self._is_expandable(value, type_name)

        return ParsedValue(
            display_value=self.format_display_value(value, type_name),
            actual_value=value,
            is_expandable=is_expandable,
            is_nil=False,
            is_pointer=is_pointer,
            memory_address=memory_address,
            array_length=array_length,
            object_key_count=object_key_count,
        )

    def parse_struct_fields(self, raw_value: str) -> Dict[str, str]:
        """Split a brace-delimited aggregate into raw child strings (one level)."""
        body = self._struct_body(raw_value)
        if body is None:
            return {}

        fields: Dict[str, str] = {}
        for segment in split_top_level(body, self.delimiters):
            pair = split_key_value(segment, self.field_separators, self.delimiters)
            if pair is None:
                continue
            key, value = pair
            if self.strip_key_quotes:
                key = strip_quotes(key, self.delimiters.quote_chars)
            if key:
                fields[key] = value
        return fields

    def parse_array_elements(self, raw_value: str) -> List[str]:
        """Split a bracket-delimited sequence into raw element strings (one level)."""
        body = self._array_body(raw_value)
        if body is None:
            return []
        return split_top_level(body, self.delimiters)

    def is_nil_value(self, raw_value: str) -> bool:
        return (raw_value or "").strip() in self.nil_literals

    def memory_address(self, raw_value: str) -> Optional[str]:
        match = ADDRESS_RE.search(raw_value or "")
        return match.group(0) if match else None

    def extract_function_name(self, raw_name: str) -> str:
        """Readable frame name; subclasses strip their own decorations."""
        if not raw_name:
            return "unknown"
        return raw_name.strip()

    def format_display_value(self, raw_value: str, type_name: str = "") -> str:
        """Cosmetic cleanup for display. Applying it twice equals applying it once."""
        return raw_value

    # ------------------------------------------------------------------
    # Classification
    # ------------------------------------------------------------------

    def is_system_variable(self, name: str, value: str = "") -> bool:
        if self._matches_system_name(name):
            return True
        if self.system_checks_value and value:
            return any(pattern in value for pattern in self._substring_system_patterns())
        return False

    def is_application_relevant(self, name: str, value: str = "") -> bool:
        if self.is_system_variable(name, value):
            return False
        if self._matches_application_name((name or "").lower(), bidirectional=True):
            return True
        return self._has_meaningful_value(value)

    def is_control_flow_variable(self, name: str) -> bool:
        name_lower = (name or "").lower()
        return any(pattern in name_lower for pattern in self.patterns.control_flow_names)

    def is_primitive_type(self, value: str, type_name: str) -> bool:
        return self._normalize_type(type_name) in self._primitive_names

    @abstractmethod
    def is_collection_type(self, value: str, type_name: str) -> bool:
        """True when the value should render as an indexed sequence."""
        pass

    @abstractmethod
    def is_structured_type(self, value: str, type_name: str) -> bool:
        """True when the value should render as named fields."""
        pass

    def calculate_variable_importance(self, name: str, value: str = "") -> int:
        """Relative importance score; only the ordering between variables is meaningful."""
        name = name or ""
        value = value or ""
        name_lower = name.lower()
        return sum(
            rule.weight for rule in self._importance_rules if rule.predicate(name, name_lower, value)
        )

    def shared_importance_rules(self) -> List[ImportanceRule]:
        return [
            ImportanceRule(
                lambda _n, lower, _v: self._matches_application_name(lower), 100, "application name"
            ),
            ImportanceRule(
                lambda n, _l, _v: self.is_control_flow_variable(n), 75, "control-flow name"
            ),
            ImportanceRule(lambda n, _l, _v: self._matches_system_name(n), -50, "system name"),
            ImportanceRule(lambda _n, _l, v: self._value_present(v), 25, "value present"),
            ImportanceRule(
                lambda _n, _l, v: v.strip().startswith(("{", "[")), 10, "aggregate value"
            ),
            ImportanceRule(
                lambda n, _l, _v: len(n) > self.long_name_threshold, -10, "long name"
            ),
        ]

    def variant_importance_rules(self) -> List[ImportanceRule]:
        return []

    # ------------------------------------------------------------------
    # Configuration
    # ------------------------------------------------------------------

    def get_default_config(self) -> SimplificationOptions:
        """Fresh copy of this variant's simplification defaults."""
        return SimplificationOptions(
            preserve_business_fields=self.patterns.application_names,
            expand_known_types=self.patterns.complex_type_names,
            **self.default_options,
        )

    # ------------------------------------------------------------------
    # Simplifier hooks
    # ------------------------------------------------------------------

    def value_category(
        self,
        raw_value: str,
        type_name: str,
        options: Optional[SimplificationOptions] = None,
    ) -> ValueCategory:
        """Pick the rendering category: nil, pointer, primitive, structured, collection."""
        value = (raw_value or "").strip()
        if self.is_nil_value(value):
            return ValueCategory.NIL
        if self._is_pointer(value, type_name):
            return ValueCategory.POINTER

        known = options is not None and self._is_known_type(type_name, options)
        if self.is_primitive_type(value, type_name) and not (known and self._looks_aggregate(value)):
            return ValueCategory.PRIMITIVE

        if self.is_structured_type(value, type_name):
            return ValueCategory.STRUCTURED
        if self.is_collection_type(value, type_name):
            return ValueCategory.COLLECTION
        return ValueCategory.OPAQUE

    def extract_pointer_target(self, raw_value: str) -> Optional[str]:
        """Aggregate payload printed after a pointer, e.g. ``*main.User {...}``."""
        text = (raw_value or "").strip()
        body = enclosed_body(text, "{", self.delimiters, allow_prefix=True)
        if body is None:
            return None
        return text[len(text) - len(body) - 2 :]

    def pointer_display(self, raw_value: str, type_name: str, show_address: bool) -> str:
        formatted = self.format_display_value(raw_value, type_name)
        if show_address:
            return formatted
        stripped = ADDRESS_RE.sub("", formatted)
        stripped = re.sub(r"\(\s*\)", "", stripped).strip()
        # Nothing but sigils left, e.g. ``*0x7ffd`` -> ``*``.
        if not re.search(r"\w", stripped):
            return "<pointer>"
        return stripped

    def dereferenced_type(self, type_name: str) -> str:
        cleaned = (type_name or "").strip()
        return cleaned[1:] if cleaned.startswith("*") else cleaned

    def element_type(self, container_type: str, element: str, index: int) -> str:
        key = f"[{index}]"
        return self.infer_type(key, element, TypeContext(variable_name=key))

    def field_type(self, field_name: str, value: str) -> str:
        return self.infer_type(field_name, value, TypeContext(variable_name=field_name))

    # ------------------------------------------------------------------
    # Hooks for subclasses
    # ------------------------------------------------------------------

    def _struct_body(self, raw_value: str) -> Optional[str]:
        return enclosed_body(
            raw_value or "", "{", self.delimiters, allow_prefix=self.struct_prefix_allowed
        )

    def _array_body(self, raw_value: str) -> Optional[str]:
        return enclosed_body(
            raw_value or "", "[", self.delimiters, allow_prefix=self.array_prefix_allowed
        )

    def _header(self, raw_value: str) -> str:
        """Text ahead of the trailing aggregate body (type names, length headers)."""
        text = (raw_value or "").strip()
        for opener in ("[", "{"):
            body = enclosed_body(text, opener, self.delimiters, allow_prefix=True)
            if body is not None:
                return text[: len(text) - len(body) - 2]
        return text

    def _declared_length(self, raw_value: str) -> Optional[int]:
        return None

    def _is_pointer(self, raw_value: str, type_name: str) -> bool:
        return False

    def _is_expandable(self, raw_value: str, type_name: str) -> bool:
        value = (raw_value or "").strip()
        return value.startswith(("{", "["))

    def _normalize_type(self, type_name: str) -> str:
        return (type_name or "").strip()

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _substring_system_patterns(self) -> Sequence[str]:
        return [p for p in self.patterns.system_names if p not in self.system_prefix_only]

    def _matches_system_name(self, name: str) -> bool:
        if not name:
            return False
        if any(name.startswith(prefix) for prefix in self.system_prefix_only):
            return True
        return any(pattern in name for pattern in self._substring_system_patterns())

    def _matches_application_name(self, name_lower: str, bidirectional: bool = False) -> bool:
        if not name_lower:
            return False
        for keyword in self.patterns.application_names:
            if keyword in name_lower:
                return True
            if bidirectional and name_lower in keyword:
                return True
        return False

    def _is_reference(self, value: str) -> bool:
        stripped = value.strip()
        if BARE_ADDRESS_RE.match(stripped):
            return True
        return any(marker in stripped for marker in self.reference_markers)

    def _has_meaningful_value(self, value: str) -> bool:
        stripped = (value or "").strip()
        return len(stripped) > 1 and not self.is_nil_value(stripped) and not self._is_reference(stripped)

    def _value_present(self, value: str) -> bool:
        stripped = value.strip()
        if not stripped or self.is_nil_value(stripped) or stripped in self.unimportant_values:
            return False
        return not self._is_reference(stripped)

    def _looks_aggregate(self, value: str) -> bool:
        return self._struct_body(value) is not None or self._array_body(value) is not None

    def _is_known_type(self, type_name: str, options: SimplificationOptions) -> bool:
        type_name = type_name or ""
        return any(known and known in type_name for known in options.expand_known_types)

    @staticmethod
    def _is_quoted(value: str, quote_chars: FrozenSet[str]) -> bool:
        return len(value) >= 2 and value[0] in quote_chars and value[-1] == value[0]
