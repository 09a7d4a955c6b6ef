"""Match chart keywords against Kubernetes-style label selectors.

Each keyword ``k`` is treated as the label ``k=k``, so ``matchLabels`` of
``{stable: stable}`` and the expression ``{key: stable, operator: Exists}``
both select charts tagged ``stable``.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping

import structlog

from .models.policy import LabelSelector, SelectorRequirement

logger = structlog.get_logger()

OPERATOR_IN = "In"
OPERATOR_NOT_IN = "NotIn"
OPERATOR_EXISTS = "Exists"
OPERATOR_DOES_NOT_EXIST = "DoesNotExist"

_SET_OPERATORS = {OPERATOR_IN, OPERATOR_NOT_IN}
_EXISTENCE_OPERATORS = {OPERATOR_EXISTS, OPERATOR_DOES_NOT_EXIST}


class InvalidSelectorError(ValueError):
    """Raised when a selector requirement cannot be evaluated."""


def keywords_to_labels(keywords: Iterable[str]) -> dict[str, str]:
    return {keyword: keyword for keyword in keywords}


def validate_requirement(requirement: SelectorRequirement) -> None:
    op = requirement.operator
    if op in _SET_OPERATORS:
        if not requirement.values:
            raise InvalidSelectorError(
                f"operator {op} on '{requirement.key}' requires at least one value"
            )
    elif op in _EXISTENCE_OPERATORS:
        if requirement.values:
            raise InvalidSelectorError(f"operator {op} on '{requirement.key}' takes no values")
    else:
        raise InvalidSelectorError(f"unknown operator {op!r} on '{requirement.key}'")


def requirement_matches(requirement: SelectorRequirement, labels: Mapping[str, str]) -> bool:
    present = requirement.key in labels
    if requirement.operator == OPERATOR_EXISTS:
        return present
    if requirement.operator == OPERATOR_DOES_NOT_EXIST:
        return not present
    if requirement.operator == OPERATOR_IN:
        return present and labels[requirement.key] in requirement.values
    # NotIn
    return not present or labels[requirement.key] not in requirement.values


def matches(selector: LabelSelector | None, keywords: Iterable[str]) -> bool:
    """Return True when ``keywords`` satisfy every requirement of ``selector``.

    A missing selector accepts everything, as does a selector without
    requirements. A malformed selector matches nothing.
    """
    if selector is None:
        return True

    requirements = selector.requirements()
    try:
        for requirement in requirements:
            validate_requirement(requirement)
    except InvalidSelectorError as exc:
        logger.warning("keywords.invalid_selector", error=str(exc))
        return False

    labels = keywords_to_labels(keywords)
    return all(requirement_matches(r, labels) for r in requirements)
