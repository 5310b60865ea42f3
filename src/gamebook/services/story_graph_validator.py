"""Static story graph validation utilities."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping, Sequence

from gamebook.domain import StoryGraph, Unit
from gamebook.presentation.markup import PlainDialect, REACTION_START, REACTION_STOP, parse

Severity = str

_PLAIN = PlainDialect()


@dataclass(frozen=True, slots=True)
class Issue:
    severity: Severity
    code: str
    message: str
    context: dict[str, str]


def format_issue(issue: Issue) -> str:
    context = " ".join(f"{key}={value}" for key, value in issue.context.items())
    suffix = f" ({context})" if context else ""
    return f"[{issue.severity}] {issue.code}: {issue.message}{suffix}"


def has_errors(issues: Sequence[Issue]) -> bool:
    return any(issue.severity == "ERROR" for issue in issues)


def validate_story_graph(graph: StoryGraph) -> list[Issue]:
    """Lint a loaded story for authoring mistakes the loader tolerates."""
    issues: list[Issue] = []
    for unit in graph.units_by_id.values():
        _validate_unit_text(unit, issues)
        _validate_reactions(unit, issues)
    _validate_reachability(graph.units_by_id, graph.first_unit.id, issues)
    return issues


def _validate_unit_text(unit: Unit, issues: list[Issue]) -> None:
    if not unit.action_text.strip():
        issues.append(
            Issue(
                severity="WARN",
                code="EMPTY_ACTION_TEXT",
                message="Unit has no action text.",
                context={"unit_id": unit.id},
            )
        )
    for index, paragraph in enumerate(unit.paragraphs()):
        if parse(paragraph, _PLAIN).unterminated:
            issues.append(
                Issue(
                    severity="WARN",
                    code="UNTERMINATED_MARKUP",
                    message="Markup span is never closed and will end with the paragraph.",
                    context={"unit_id": unit.id, "field_path": f"paragraphs[{index}]"},
                )
            )
    if not unit.reactions:
        issues.append(
            Issue(
                severity="INFO",
                code="DEAD_END_UNIT",
                message="Unit has no reactions and ends the story.",
                context={"unit_id": unit.id},
            )
        )


def _validate_reactions(unit: Unit, issues: list[Issue]) -> None:
    seen: dict[str, str] = {}
    for arrow in unit.reactions:
        if arrow.display_text in seen:
            issues.append(
                Issue(
                    severity="WARN",
                    code="DUPLICATE_REACTION_TEXT",
                    message="Reaction label repeats on the same unit; only the first can be chosen.",
                    context={
                        "unit_id": unit.id,
                        "reaction_id": arrow.id,
                        "shadowed_by": seen[arrow.display_text],
                    },
                )
            )
        else:
            seen[arrow.display_text] = arrow.id
        if REACTION_START in arrow.display_text or REACTION_STOP in arrow.display_text:
            issues.append(
                Issue(
                    severity="ERROR",
                    code="INVALID_REACTION_TEXT",
                    message="Reaction label must not contain reaction link markers.",
                    context={"unit_id": unit.id, "reaction_id": arrow.id},
                )
            )
        elif parse(arrow.display_text, _PLAIN).unterminated:
            issues.append(
                Issue(
                    severity="WARN",
                    code="UNTERMINATED_MARKUP",
                    message="Markup span in reaction label is never closed.",
                    context={"unit_id": unit.id, "reaction_id": arrow.id},
                )
            )


def _validate_reachability(
    units_by_id: Mapping[str, Unit],
    first_unit_id: str,
    issues: list[Issue],
) -> None:
    reachable: set[str] = set()
    stack: list[str] = [first_unit_id]
    while stack:
        unit_id = stack.pop()
        if unit_id in reachable:
            continue
        reachable.add(unit_id)
        for arrow in units_by_id[unit_id].reactions:
            if arrow.target_id in units_by_id:
                stack.append(arrow.target_id)
    for unit_id in sorted(set(units_by_id) - reachable):
        issues.append(
            Issue(
                severity="WARN",
                code="UNREACHABLE_UNIT",
                message="Unit is unreachable from the first unit.",
                context={"unit_id": unit_id},
            )
        )
