"""
Depth-bounded simplification of raw debugger values.

``ValueSimplifier`` turns one raw value into a ``SimplifiedValue`` tree.
Each node is classified by its handler (nil, pointer, primitive,
structured, collection) and aggregates are split one level at a time by
the handler's tokenizer-backed parsers, so recursion depth is bounded by
``max_depth`` no matter how deep the input nests.

Every bound that drops information leaves a visible trace: ``has_more``
and true counts for capped aggregates, ``truncated_at`` for cut strings,
``depth_limited`` and a marker for nodes at the depth limit.

valuelens/src/valuelens/simplifier.py
"""

import logging
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

from valuelens.handlers.base import BaseLanguageHandler, ValueCategory
from valuelens.handlers.registry import LanguageTag, require_handler
from valuelens.models import SimplificationOptions, SimplifiedValue, TypeContext, ValueMetadata
from valuelens.tokenizer import strip_quotes

logger = logging.getLogger(__name__)

__all__ = [
    "ValueSimplifier",
    "simplify_value",
    "MAX_DEPTH_MARKER",
    "MEMORY_LIMIT_MARKER",
]

MAX_DEPTH_MARKER = "[Max depth reached]"
MEMORY_LIMIT_MARKER = "[Memory limit reached]"
BYTES_PER_MB = 1024 * 1024
SUMMARY_KEYS = 3

OptionsLike = Union[SimplificationOptions, Mapping[str, Any], None]


class _Walk:
    """Per-call state: options and the remaining raw-text budget."""

    def __init__(self, options: SimplificationOptions):
        self.options = options
        self.remaining = options.memory_limit * BYTES_PER_MB

    @property
    def exhausted(self) -> bool:
        return self.remaining <= 0

    def consume(self, text: str) -> None:
        self.remaining -= len(text.encode("utf-8", errors="replace"))


class ValueSimplifier:
    """Builds bounded ``SimplifiedValue`` trees for one language handler."""

    def __init__(self, handler: BaseLanguageHandler, options: OptionsLike = None):
        self.handler = handler
        self.options = self._resolve(options, handler.get_default_config())

    def simplify_value(
        self,
        raw_value: str,
        type_name: str = "",
        name: str = "",
        options: OptionsLike = None,
    ) -> SimplifiedValue:
        """Simplify one variable's raw value.

        When ``type_name`` is empty or generic the root type is inferred
        from ``name`` and the value. ``options`` (an options object or a
        mapping of overrides) apply to this call only.
        """
        raw = raw_value if isinstance(raw_value, str) else str(raw_value)
        opts = self._resolve(options, self.options)

        if self.handler.is_placeholder_type(type_name):
            type_name = self.handler.infer_type(name, raw, TypeContext(variable_name=name))

        walk = _Walk(opts)
        walk.consume(raw)
        node = self._build(raw, type_name, 1, walk, ())
        logger.debug(
            f"Simplified {name or '<value>'} ({type_name}) to depth {node.depth()} "
            f"with {self.handler.variant} handler"
        )
        return node

    # ------------------------------------------------------------------
    # Node builders
    # ------------------------------------------------------------------

    def _build(
        self, raw: str, type_name: str, level: int, walk: _Walk, path: Tuple[str, ...]
    ) -> SimplifiedValue:
        try:
            category = self.handler.value_category(raw, type_name, walk.options)
            if category is ValueCategory.NIL:
                return SimplifiedValue(
                    display_value=self.handler.format_display_value(raw, type_name),
                    original_type=type_name,
                    metadata=ValueMetadata(is_nil=True),
                )
            if category is ValueCategory.POINTER:
                return self._pointer(raw, type_name, level, walk, path)
            if category is ValueCategory.PRIMITIVE:
                return self._leaf(raw, type_name, walk.options.max_string_length)
            if category is ValueCategory.STRUCTURED:
                return self._aggregate(raw, type_name, level, walk, path, prefer_fields=True)
            if category is ValueCategory.COLLECTION:
                return self._aggregate(raw, type_name, level, walk, path, prefer_fields=False)
            return self._leaf(raw, type_name, walk.options.truncate_threshold)
        except Exception as e:
            logger.debug(f"Falling back to opaque value for {type_name or 'untyped'} node: {e}")
            return self._leaf(raw, type_name, walk.options.truncate_threshold)

    def _pointer(
        self, raw: str, type_name: str, level: int, walk: _Walk, path: Tuple[str, ...]
    ) -> SimplifiedValue:
        address = self.handler.memory_address(raw)
        if address is not None and address in path:
            return SimplifiedValue(
                display_value=f"[Circular Reference to {address}]",
                original_type=type_name,
                metadata=ValueMetadata(is_pointer=True, memory_address=address),
            )

        payload = self.handler.extract_pointer_target(raw)
        if payload is not None:
            target_path = path + (address,) if address else path
            node = self._aggregate(
                payload,
                self.handler.dereferenced_type(type_name),
                level,
                walk,
                target_path,
                prefer_fields=True,
            )
            node.original_type = type_name
            node.metadata.is_pointer = True
            node.metadata.memory_address = address
            if address and walk.options.show_pointer_addresses:
                node.display_value = f"({address}) {node.display_value}"
            return node

        return SimplifiedValue(
            display_value=self.handler.pointer_display(
                raw, type_name, walk.options.show_pointer_addresses
            ),
            original_type=type_name,
            metadata=ValueMetadata(is_pointer=True, memory_address=address),
        )

    def _aggregate(
        self,
        raw: str,
        type_name: str,
        level: int,
        walk: _Walk,
        path: Tuple[str, ...],
        prefer_fields: bool,
    ) -> SimplifiedValue:
        fields: Dict[str, str] = {}
        elements: List[str] = []
        if prefer_fields:
            fields = self.handler.parse_struct_fields(raw)
            if not fields:
                elements = self.handler.parse_array_elements(raw)
        else:
            elements = self.handler.parse_array_elements(raw)
            if not elements:
                fields = self.handler.parse_struct_fields(raw)

        if fields:
            return self._structure(raw, type_name, fields, level, walk, path)
        if elements:
            return self._collection(raw, type_name, elements, level, walk, path)
        return self._leaf(raw, type_name, walk.options.truncate_threshold)

    def _structure(
        self,
        raw: str,
        type_name: str,
        fields: Dict[str, str],
        level: int,
        walk: _Walk,
        path: Tuple[str, ...],
    ) -> SimplifiedValue:
        opts = walk.options
        keys = list(fields)
        metadata = ValueMetadata(object_key_count=len(keys))
        summary = self._structure_summary(type_name, keys)

        if level >= opts.max_depth:
            return self._depth_limited(summary, type_name, metadata)

        preserved = {field.lower() for field in opts.preserve_business_fields}
        kept = keys[: opts.max_object_keys] + [
            key
            for key in keys[opts.max_object_keys :]
            if self._plain_key(key).lower() in preserved
        ]

        children: Dict[str, SimplifiedValue] = {}
        for key in kept:
            value = fields[key]
            children[key] = self._child(
                value, self.handler.field_type(self._plain_key(key), value), level, walk, path
            )

        return SimplifiedValue(
            display_value=summary,
            original_type=type_name,
            metadata=metadata,
            children=children,
            is_expandable=True,
            has_more=len(kept) < len(keys),
        )

    def _collection(
        self,
        raw: str,
        type_name: str,
        elements: List[str],
        level: int,
        walk: _Walk,
        path: Tuple[str, ...],
    ) -> SimplifiedValue:
        opts = walk.options
        parsed = self.handler.parse_variable_value(raw, type_name)
        count = parsed.array_length if parsed.array_length is not None else len(elements)
        count = max(count, len(elements))
        metadata = ValueMetadata(array_length=count)

        if level >= opts.max_depth:
            return self._depth_limited(f"Array[{count}]", type_name, metadata)

        shown = elements[: opts.max_array_length]
        children: Dict[str, SimplifiedValue] = {}
        for index, element in enumerate(shown):
            element_type = self.handler.element_type(type_name, element, index)
            children[f"[{index}]"] = self._child(element, element_type, level, walk, path)

        has_more = len(shown) < count
        display = f"Array[{count}]"
        if has_more:
            display += f" (showing first {len(shown)})"

        return SimplifiedValue(
            display_value=display,
            original_type=type_name,
            metadata=metadata,
            children=children,
            is_expandable=True,
            has_more=has_more,
        )

    def _child(
        self, raw: str, type_name: str, level: int, walk: _Walk, path: Tuple[str, ...]
    ) -> SimplifiedValue:
        if walk.exhausted:
            return SimplifiedValue(display_value=MEMORY_LIMIT_MARKER, original_type=type_name)
        walk.consume(raw)
        return self._build(raw, type_name, level + 1, walk, path)

    def _leaf(self, raw: str, type_name: str, limit: int) -> SimplifiedValue:
        display = self.handler.format_display_value(raw, type_name)
        metadata = ValueMetadata()
        if len(display) > limit:
            total = len(display)
            display = f"{display[:limit]}... [String truncated ({total} chars total)]"
            metadata.truncated_at = limit
        return SimplifiedValue(display_value=display, original_type=type_name, metadata=metadata)

    def _depth_limited(
        self, summary: str, type_name: str, metadata: ValueMetadata
    ) -> SimplifiedValue:
        metadata.depth_limited = True
        return SimplifiedValue(
            display_value=f"{summary} {MAX_DEPTH_MARKER}",
            original_type=type_name,
            metadata=metadata,
            is_expandable=False,
            has_more=True,
        )

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _structure_summary(self, type_name: str, keys: List[str]) -> str:
        shown = ", ".join(self._plain_key(key) for key in keys[:SUMMARY_KEYS])
        more = "..." if len(keys) > SUMMARY_KEYS else ""
        label = type_name or self.handler.any_type
        return f"{label} {{{shown}{more}}}"

    def _plain_key(self, key: str) -> str:
        return strip_quotes(key, self.handler.delimiters.quote_chars)

    @staticmethod
    def _resolve(options: OptionsLike, base: SimplificationOptions) -> SimplificationOptions:
        if options is None:
            return base
        if isinstance(options, SimplificationOptions):
            return options
        return base.merged(options)


def simplify_value(
    raw_value: str,
    language: LanguageTag,
    type_name: str = "",
    name: str = "",
    options: OptionsLike = None,
) -> SimplifiedValue:
    """Simplify a raw value with the registered handler for ``language``."""
    handler = require_handler(language)
    return ValueSimplifier(handler).simplify_value(raw_value, type_name, name, options)
