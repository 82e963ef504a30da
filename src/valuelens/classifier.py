"""
Signal classification and ranking of variables.

Wraps a handler's predicates and importance score into one record per
variable so a caller can order a frame's locals by how likely they are to
matter. Scores are only comparable within one handler.

valuelens/src/valuelens/classifier.py
"""

import logging
from dataclasses import asdict, dataclass
from typing import Any, Dict, Iterable, List, Mapping, Tuple, Union

from valuelens.handlers.base import BaseLanguageHandler

logger = logging.getLogger(__name__)

__all__ = ["VariableAssessment", "assess_variable", "rank_variables", "signal_variables"]

Variables = Union[Mapping[str, str], Iterable[Tuple[str, str]]]


@dataclass(frozen=True)
class VariableAssessment:
    """Classification of one variable by a language handler."""

    name: str
    value: str
    inferred_type: str
    importance: int
    is_system: bool
    is_application_relevant: bool
    is_control_flow: bool

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def assess_variable(handler: BaseLanguageHandler, name: str, value: str) -> VariableAssessment:
    return VariableAssessment(
        name=name,
        value=value,
        inferred_type=handler.infer_type(name, value),
        importance=handler.calculate_variable_importance(name, value),
        is_system=handler.is_system_variable(name, value),
        is_application_relevant=handler.is_application_relevant(name, value),
        is_control_flow=handler.is_control_flow_variable(name),
    )


def _pairs(variables: Variables) -> List[Tuple[str, str]]:
    if isinstance(variables, Mapping):
        return list(variables.items())
    return list(variables)


def rank_variables(handler: BaseLanguageHandler, variables: Variables) -> List[VariableAssessment]:
    """Assess every variable and sort by descending importance.

    The sort is stable, so variables with equal scores keep their input
    order (the debugger's declaration order).
    """
    assessments = [assess_variable(handler, name, value) for name, value in _pairs(variables)]
    ranked = sorted(assessments, key=lambda a: a.importance, reverse=True)
    logger.debug(f"Ranked {len(ranked)} variables with {handler.variant} handler")
    return ranked


def signal_variables(
    handler: BaseLanguageHandler, variables: Variables, include_control_flow: bool = True
) -> List[VariableAssessment]:
    """Ranked variables that are application-relevant (or control flow, when asked)."""
    return [
        assessment
        for assessment in rank_variables(handler, variables)
        if assessment.is_application_relevant
        or (include_control_flow and assessment.is_control_flow and not assessment.is_system)
    ]
