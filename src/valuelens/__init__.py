"""valuelens: normalize raw debugger values.

Language-aware parsing, type inference, classification and bounded
simplification of the value strings debug adapters print for Go, C/C++,
Python, Java and JavaScript.
"""

from valuelens.classifier import (
    VariableAssessment,
    assess_variable,
    rank_variables,
    signal_variables,
)
from valuelens.config import Config, load_config
from valuelens.detection import detect_language
from valuelens.handlers import (
    BaseLanguageHandler,
    UnsupportedLanguageError,
    get_handler,
    register_handler,
    require_handler,
    resolve_options,
)
from valuelens.models import (
    ParsedValue,
    PatternSet,
    SimplificationOptions,
    SimplifiedValue,
    TypeContext,
    ValueMetadata,
    Variant,
)
from valuelens.simplifier import ValueSimplifier, simplify_value

__version__ = "0.1.0"

__all__ = [
    # Configuration
    "Config",
    "load_config",
    # Model
    "ParsedValue",
    "PatternSet",
    "SimplificationOptions",
    "SimplifiedValue",
    "TypeContext",
    "ValueMetadata",
    "Variant",
    # Handlers
    "BaseLanguageHandler",
    "UnsupportedLanguageError",
    "get_handler",
    "register_handler",
    "require_handler",
    "resolve_options",
    "detect_language",
    # Simplification and ranking
    "ValueSimplifier",
    "simplify_value",
    "VariableAssessment",
    "assess_variable",
    "rank_variables",
    "signal_variables",
]
