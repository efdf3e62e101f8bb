"""Rule-based validation of prompt specifications.

Each check is a small named rule object; the registries below are evaluated
in order and every matching rule is reported. Validation is a pure function
of the specification snapshot, cheap enough to run on every edit.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass

from .models import (
    Conflict,
    PromptSpecification,
    PromptValidationResult,
    RefinementIssue,
    SanityCheckResult,
    Severity,
    Suggestion,
    SuggestionType,
)

logger = logging.getLogger(__name__)

Predicate = Callable[[PromptSpecification], bool]
# (final prompt text in lower case, specification)
PromptPredicate = Callable[[str, PromptSpecification], bool]

MAX_ELEMENTS = 8
COMPLETENESS_FIELDS = (
    "subject",
    "scene",
    "lighting",
    "mood",
    "camera_angle",
    "quality",
    "style",
    "clothing",
    "pose",
)


@dataclass(frozen=True)
class ConflictRule:
    """Two fields whose values contradict each other."""

    name: str
    field1: str
    field2: str
    description: str
    severity: Severity
    applies: Predicate

    def check(self, spec: PromptSpecification) -> Conflict | None:
        if not self.applies(spec):
            return None
        return Conflict(
            field1=self.field1,
            field2=self.field2,
            description=self.description,
            severity=self.severity,
        )


@dataclass(frozen=True)
class SuggestionRule:
    """A hint offered when its predicate holds."""

    name: str
    field: str
    message: str
    type: SuggestionType
    action: str | None
    applies: Predicate

    def check(self, spec: PromptSpecification) -> Suggestion | None:
        if not self.applies(spec):
            return None
        return Suggestion(
            field=self.field,
            message=self.message,
            type=self.type,
            action=self.action,
        )


@dataclass(frozen=True)
class WarningRule:
    name: str
    message: str
    applies: Predicate


@dataclass(frozen=True)
class SanityRule:
    """A check of the final prompt text against the selections behind it.

    ``message`` may reference specification fields, e.g. ``{race}``.
    """

    name: str
    type: str
    severity: str
    message: str
    applies: PromptPredicate

    def check(self, prompt: str, spec: PromptSpecification) -> RefinementIssue | None:
        if not self.applies(prompt.lower(), spec):
            return None
        return RefinementIssue(
            type=self.type,
            severity=self.severity,
            message=self.message.format(**spec.model_dump()),
        )


CONFLICT_RULES: tuple[ConflictRule, ...] = (
    ConflictRule(
        name="hair-length",
        field1="hair",
        field2="hair",
        description="Cannot have both long and short hair",
        severity="error",
        applies=lambda s: bool(s.hair) and "long" in s.hair and "short" in s.hair,
    ),
    ConflictRule(
        name="dramatic-serene",
        field1="lighting",
        field2="mood",
        description=(
            "Dramatic lighting typically pairs better with powerful "
            "or mysterious moods"
        ),
        severity="warning",
        applies=lambda s: s.lighting == "dramatic" and s.mood == "serene",
    ),
    ConflictRule(
        name="night-golden-hour",
        field1="time_of_day",
        field2="lighting",
        description="Golden hour occurs at sunrise/sunset, not at night",
        severity="error",
        applies=lambda s: (
            s.time_of_day == "night"
            and s.lighting is not None
            and "golden hour" in s.lighting
        ),
    ),
    ConflictRule(
        name="linen-y2k",
        field1="materials",
        field2="style",
        description=(
            "Linen is more Old Money aesthetic, Y2K typically uses "
            "synthetic materials"
        ),
        severity="warning",
        applies=lambda s: "linen" in s.materials and s.style == "y2k",
    ),
)

MISSING_RULES: tuple[SuggestionRule, ...] = (
    SuggestionRule(
        name="missing-scene",
        field="scene",
        message="Adding a scene or background will improve prompt quality",
        type="missing",
        action="Add scene or background",
        applies=lambda s: not s.scene and not s.background,
    ),
    SuggestionRule(
        name="missing-lighting",
        field="lighting",
        message="Lighting is crucial for mood and quality",
        type="missing",
        action="Select lighting type",
        applies=lambda s: not s.lighting,
    ),
    SuggestionRule(
        name="missing-camera-angle",
        field="camera_angle",
        message="Camera angle helps define the shot style",
        type="missing",
        action="Select camera angle",
        applies=lambda s: not s.camera_angle and not s.composition,
    ),
    SuggestionRule(
        name="missing-quality",
        field="quality",
        message="Quality setting ensures consistent output",
        type="missing",
        action="Select quality level",
        applies=lambda s: not s.quality and not s.style,
    ),
)

WARNING_RULES: tuple[WarningRule, ...] = (
    WarningRule(
        name="too-many-elements",
        message="Too many elements may dilute the focus. Consider simplifying.",
        applies=lambda s: (
            len(s.materials) + len(s.accessories) + len(s.pose) > MAX_ELEMENTS
        ),
    ),
    WarningRule(
        name="no-model",
        message="Selecting a model will optimize the prompt format",
        applies=lambda s: s.model is None,
    ),
)

OPTIMIZATION_RULES: tuple[SuggestionRule, ...] = (
    SuggestionRule(
        name="close-up-depth-of-field",
        field="depth_of_field",
        message="Shallow depth of field works great for close-ups",
        type="optimization",
        action="Add depth of field",
        applies=lambda s: s.framing == "close-up" and not s.depth_of_field,
    ),
    SuggestionRule(
        name="beach-linen",
        field="materials",
        message="Linen works well for beach scenes",
        type="optimization",
        action="Add linen to materials",
        applies=lambda s: (
            s.scene is not None and "beach" in s.scene and "linen" not in s.materials
        ),
    ),
)

RACE_SYNONYMS: dict[str, tuple[str, ...]] = {
    "african american": ("black",),
}


def _mentions_race(prompt: str, race: str) -> bool:
    race = race.lower()
    return any(term in prompt for term in (race, *RACE_SYNONYMS.get(race, ())))


SANITY_RULES: tuple[SanityRule, ...] = (
    SanityRule(
        name="race-not-reflected",
        type="Missing",
        severity="Medium",
        message="Prompt should reflect {race} aesthetics as specified",
        applies=lambda p, s: (
            s.race is not None
            and s.skin_tone is not None
            and not _mentions_race(p, s.race)
        ),
    ),
    SanityRule(
        name="old-money-synthetic",
        type="aesthetic",
        severity="warning",
        message="Old Money aesthetic typically uses natural materials",
        applies=lambda p, s: s.style == "old-money" and "synthetic" in p,
    ),
)

# (message, predicate over the lower-cased prompt)
SANITY_SUGGESTIONS: tuple[tuple[str, Callable[[str], bool]], ...] = (
    (
        "Consider adding lighting details for better mood",
        lambda p: "light" not in p,
    ),
    (
        "Adding camera angle details can improve composition",
        lambda p: "shot" not in p and "angle" not in p,
    ),
)


def completeness(spec: PromptSpecification) -> int:
    """Percentage of the key fields that are filled in."""
    filled = sum(1 for name in COMPLETENESS_FIELDS if getattr(spec, name))
    return round(100 * filled / len(COMPLETENESS_FIELDS))


def validate_prompt(
    spec: PromptSpecification,
    *,
    conflict_rules: tuple[ConflictRule, ...] = CONFLICT_RULES,
    missing_rules: tuple[SuggestionRule, ...] = MISSING_RULES,
    warning_rules: tuple[WarningRule, ...] = WARNING_RULES,
) -> PromptValidationResult:
    """Validate a (partial) specification.

    Args:
        spec: The current specification snapshot.
        conflict_rules: Conflict checks to run, in order.
        missing_rules: Missing-element checks to run, in order.
        warning_rules: General warnings to run, in order.

    Returns:
        PromptValidationResult: Conflicts, suggestions, warnings and a
        completeness score. Valid unless a conflict has error severity.

    """
    conflicts = [c for c in (rule.check(spec) for rule in conflict_rules) if c]
    suggestions = [s for s in (rule.check(spec) for rule in missing_rules) if s]
    warnings = [rule.message for rule in warning_rules if rule.applies(spec)]

    is_valid = not any(c.severity == "error" for c in conflicts)
    if not is_valid:
        logger.debug(
            "Specification has blocking conflicts: %s",
            ", ".join(c.description for c in conflicts if c.severity == "error"),
        )

    return PromptValidationResult(
        is_valid=is_valid,
        conflicts=conflicts,
        suggestions=suggestions,
        completeness=completeness(spec),
        warnings=warnings,
    )


def optimization_suggestions(
    spec: PromptSpecification,
    rules: tuple[SuggestionRule, ...] = OPTIMIZATION_RULES,
) -> list[Suggestion]:
    """Optional improvements offered alongside the validation result."""
    return [s for s in (rule.check(spec) for rule in rules) if s]


def prompt_tips(
    spec: PromptSpecification,
    result: PromptValidationResult,
) -> list[str]:
    """Short to-do list for the user, derived from a validation result."""
    tips = [s.action for s in result.suggestions if s.action]
    if result.completeness < 70:
        tips.append("Add more details to improve prompt quality")
    if not spec.negative_prompts:
        tips.append("Consider adding negative prompts for better results")
    return tips


def sanity_check(
    prompt: str,
    spec: PromptSpecification,
    rules: tuple[SanityRule, ...] = SANITY_RULES,
) -> SanityCheckResult:
    """Check the final prompt text against the selections it came from.

    Runs after formatting and refinement, so it sees the words the model
    will actually receive.

    Args:
        prompt: The deliverable prompt.
        spec: The specification it was produced from.
        rules: Issue checks to run, in order.

    Returns:
        SanityCheckResult: Issues and suggestions. Passes unless an issue
        has error severity.

    """
    lowered = prompt.lower()
    issues = [i for i in (rule.check(prompt, spec) for rule in rules) if i]
    suggestions = [
        message for message, applies in SANITY_SUGGESTIONS if applies(lowered)
    ]
    return SanityCheckResult(
        passed=not any(i.severity == "error" for i in issues),
        issues=issues,
        suggestions=suggestions,
    )
