"""
Core value types for valuelens.

Plain dataclasses shared by the tokenizer, the language handlers and the
simplifier. Everything here is immutable or copied on merge so handlers
can be shared across threads and collection cycles.

valuelens/src/valuelens/models.py
"""

import dataclasses
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Tuple

logger = logging.getLogger(__name__)

__all__ = [
    "Variant",
    "PatternSet",
    "TypeContext",
    "ParsedValue",
    "SimplificationOptions",
    "ValueMetadata",
    "SimplifiedValue",
]


class Variant(Enum):
    """Source runtimes with a dedicated handler."""

    GO = "go"
    CPP = "cpp"
    PYTHON = "python"
    JAVA = "java"
    JAVASCRIPT = "javascript"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class PatternSet:
    """Per-variant name and type pattern tables."""

    application_names: Tuple[str, ...]
    system_names: Tuple[str, ...]
    control_flow_names: Tuple[str, ...]
    primitive_type_names: Tuple[str, ...]
    complex_type_names: Tuple[str, ...]


@dataclass(frozen=True)
class TypeContext:
    """Hints for a single type inference call."""

    variable_name: str = ""
    scope_name: Optional[str] = None
    parent_type: Optional[str] = None
    declared_type: Optional[str] = None


@dataclass(frozen=True)
class ParsedValue:
    """One variable's raw value after a handler has looked at it."""

    display_value: str
    actual_value: str
    is_expandable: bool
    is_nil: bool
    is_pointer: bool
    memory_address: Optional[str] = None
    array_length: Optional[int] = None
    object_key_count: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a dictionary for JSON output."""
        return {
            "displayValue": self.display_value,
            "actualValue": self.actual_value,
            "isExpandable": self.is_expandable,
            "isNil": self.is_nil,
            "isPointer": self.is_pointer,
            "memoryAddress": self.memory_address,
            "arrayLength": self.array_length,
            "objectKeyCount": self.object_key_count,
        }


_NUMERIC_BOUNDS = (
    "max_depth",
    "max_array_length",
    "max_string_length",
    "max_object_keys",
    "memory_limit",
    "truncate_threshold",
)


@dataclass
class SimplificationOptions:
    """Bounds applied while building a simplified value tree.

    Numeric bounds are clamped to at least 1; out-of-range values are
    never rejected.
    """

    max_depth: int = 4
    max_array_length: int = 10
    max_string_length: int = 200
    max_object_keys: int = 15
    show_pointer_addresses: bool = False
    preserve_business_fields: Tuple[str, ...] = ()
    expand_known_types: Tuple[str, ...] = ()
    memory_limit: int = 50
    truncate_threshold: int = 500

    def __post_init__(self):
        """Clamp numeric bounds and normalise the list fields."""
        for name in _NUMERIC_BOUNDS:
            value = getattr(self, name)
            try:
                value = int(value)
            except (TypeError, ValueError):
                logger.warning(f"Option '{name}' is not an integer ({value!r}); using 1")
                value = 1
            if value < 1:
                logger.debug(f"Clamping option '{name}' from {value} to 1")
                value = 1
            setattr(self, name, value)

        self.show_pointer_addresses = bool(self.show_pointer_addresses)
        self.preserve_business_fields = tuple(self.preserve_business_fields or ())
        self.expand_known_types = tuple(self.expand_known_types or ())

    def merged(self, overrides: Optional[Mapping[str, Any]] = None) -> "SimplificationOptions":
        """Return a copy with ``overrides`` applied; unknown keys are ignored."""
        if not overrides:
            return dataclasses.replace(self)

        known = {f.name for f in dataclasses.fields(self)}
        accepted = {}
        for key, value in overrides.items():
            if key not in known:
                logger.warning(f"Ignoring unknown simplification option: {key}")
                continue
            accepted[key] = value
        return dataclasses.replace(self, **accepted)

    def to_dict(self) -> Dict[str, Any]:
        """Convert options to a plain dictionary."""
        data = dataclasses.asdict(self)
        data["preserve_business_fields"] = list(self.preserve_business_fields)
        data["expand_known_types"] = list(self.expand_known_types)
        return data


@dataclass
class ValueMetadata:
    """Facts about a simplified node that survive truncation."""

    is_pointer: bool = False
    is_nil: bool = False
    memory_address: Optional[str] = None
    array_length: Optional[int] = None
    object_key_count: Optional[int] = None
    truncated_at: Optional[int] = None
    depth_limited: bool = False

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"isPointer": self.is_pointer, "isNil": self.is_nil}
        if self.memory_address is not None:
            data["memoryAddress"] = self.memory_address
        if self.array_length is not None:
            data["arrayLength"] = self.array_length
        if self.object_key_count is not None:
            data["objectKeyCount"] = self.object_key_count
        if self.truncated_at is not None:
            data["truncatedAt"] = self.truncated_at
        if self.depth_limited:
            data["depthLimited"] = True
        return data


@dataclass
class SimplifiedValue:
    """A node of the bounded tree built by the simplifier."""

    display_value: str
    original_type: str
    metadata: ValueMetadata = field(default_factory=ValueMetadata)
    children: Optional[Dict[str, "SimplifiedValue"]] = None
    is_expandable: bool = False
    has_more: bool = False

    def depth(self) -> int:
        """Number of levels in this tree; a leaf has depth 1."""
        if not self.children:
            return 1
        return 1 + max(child.depth() for child in self.children.values())

    def to_dict(self) -> Dict[str, Any]:
        """Convert the tree to nested dictionaries for JSON output."""
        data: Dict[str, Any] = {
            "displayValue": self.display_value,
            "originalType": self.original_type,
            "isExpandable": self.is_expandable,
            "hasMore": self.has_more,
            "metadata": self.metadata.to_dict(),
        }
        if self.children is not None:
            data["children"] = {key: child.to_dict() for key, child in self.children.items()}
        return data
