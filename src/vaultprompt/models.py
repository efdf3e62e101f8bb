"""Pydantic data models for Vault Prompt."""

from datetime import datetime
from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

Severity = Literal["error", "warning"]
SuggestionType = Literal["missing", "conflict", "optimization"]

_LIST_FIELDS = (
    "pose",
    "accessories",
    "materials",
    "colors",
    "environment",
    "constraints",
    "must_include",
    "negative_prompts",
    "exclude_elements",
)


class ModelId(str, Enum):
    """Generative backends a prompt can be formatted for."""

    MIDJOURNEY = "midjourney"
    STABLE_DIFFUSION = "stable-diffusion"
    DALLE = "dalle"


class _ClientRecord(BaseModel):
    """Accepts the camelCase keys sent by the web client as well as field names."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class MidjourneyParameters(_ClientRecord):
    """Flags appended to a Midjourney prompt."""

    aspect_ratio: str | None = None
    stylize: int | None = Field(default=None, ge=0, le=1000)
    version: str | None = None
    style: Literal["raw", "default", "stylize"] | None = None
    seed: int | None = Field(default=None, ge=0)
    chaos: int | None = Field(default=None, ge=0, le=100)
    quality: float | None = Field(default=None, gt=0)


class StableDiffusionParameters(_ClientRecord):
    """Sampler settings reported next to a Stable Diffusion prompt."""

    cfg_scale: float | None = Field(default=None, ge=1, le=30)
    steps: int | None = Field(default=None, ge=1, le=150)
    sampler: str | None = None
    seed: int | None = Field(default=None, ge=0)


class DalleParameters(_ClientRecord):
    """Request options for DALL·E."""

    style: Literal["vivid", "natural"] | None = None
    size: Literal["1024x1024", "1792x1024", "1024x1792"] | None = None
    quality: Literal["standard", "hd"] | None = None


class ModelParameters(_ClientRecord):
    """One optional parameter group per backend."""

    midjourney: MidjourneyParameters | None = None
    stable_diffusion: StableDiffusionParameters | None = None
    dalle: DalleParameters | None = None


class PromptSpecification(_ClientRecord):
    """Everything the user has chosen about one generation request.

    Every attribute is optional. Blank strings are normalised to ``None`` and
    list attributes to lists of non-blank strings, so "absent" always means
    ``None`` or ``[]``.
    """

    # Subject & identity
    subject: str | None = None
    identity: str | None = None
    age_range: str | None = None
    ethnicity: str | None = None
    output_format: Literal["image", "video"] | None = Field(
        default=None,
        alias="format",
    )
    race: str | None = None
    skin_tone: str | None = None
    hair_color: str | None = None
    eyebrow_effect: str | None = None

    # Pose & body language
    pose: list[str] = Field(default_factory=list)
    body_language: str | None = None
    gesture: str | None = None

    # Hair, makeup & accessories
    hair: str | None = None
    makeup: str | None = None
    accessories: list[str] = Field(default_factory=list)

    # Clothing & materials
    clothing: str | None = None
    materials: list[str] = Field(default_factory=list)
    fit: str | None = None
    colors: list[str] = Field(default_factory=list)

    # Scene & background
    scene: str | None = None
    background: str | None = None
    environment: list[str] = Field(default_factory=list)
    location: str | None = None

    # Lighting & mood
    lighting: str | None = None
    mood: str | None = None
    time_of_day: str | None = None
    color_temperature: str | None = None

    # Camera & composition
    camera_angle: str | None = None
    composition: str | None = None
    depth_of_field: str | None = None
    framing: str | None = None

    # Style & quality
    style: str | None = None
    quality: str | None = None
    film_stock: str | None = None
    post_processing: str | None = None

    # Constraints & exclusions
    constraints: list[str] = Field(default_factory=list)
    must_include: list[str] = Field(default_factory=list)
    aspect_ratio: str | None = None
    negative_prompts: list[str] = Field(default_factory=list)
    exclude_elements: list[str] = Field(default_factory=list)

    # Technical
    model: ModelId | None = None
    parameters: ModelParameters | None = None
    faceless_mode: bool = False
    user_input: str | None = None

    @field_validator("*", mode="before")
    @classmethod
    def blank_to_none(cls, value: Any) -> Any:
        """Strip strings and treat blank ones as unset."""
        if isinstance(value, str):
            return value.strip() or None
        return value

    @field_validator(*_LIST_FIELDS, mode="before")
    @classmethod
    def drop_blank_items(cls, value: Any) -> Any:
        """Treat ``None`` as an empty list and drop blank entries."""
        if value is None:
            return []
        if isinstance(value, list):
            return [
                item.strip() if isinstance(item, str) else item
                for item in value
                if not (isinstance(item, str) and not item.strip())
            ]
        return value


class AestheticChoice(BaseModel):
    """The aesthetic picked for a generation."""

    id: str
    is_premium: bool = False


class AdvancedOptions(BaseModel):
    """Which optional option groups are populated."""

    lighting: bool = False
    scene: bool = False
    camera_angle: bool = False
    negative_prompts: bool = False
    custom_parameters: bool = False

    @property
    def count(self) -> int:
        """Number of populated groups."""
        return sum(
            (
                self.lighting,
                self.scene,
                self.camera_angle,
                self.negative_prompts,
                self.custom_parameters,
            ),
        )


class GenerationSelections(BaseModel):
    """The reduced view of a specification that drives pricing."""

    aesthetic: AestheticChoice | None = None
    shot_type: str | None = None
    wardrobe: str | None = None
    model: ModelId | None = None
    advanced_options: AdvancedOptions = Field(default_factory=AdvancedOptions)
    total_generations: int = Field(default=0, ge=0)

    @classmethod
    def from_specification(
        cls,
        spec: PromptSpecification,
        total_generations: int,
        *,
        shot_type: str | None = None,
        wardrobe: str | None = None,
        premium_aesthetic: bool = False,
        model: ModelId | None = None,
    ) -> "GenerationSelections":
        """Project a specification onto the fields pricing looks at.

        Args:
            spec: The specification being submitted.
            total_generations: The user's lifetime generation count.
            shot_type: Identifier of the selected shot type, if any.
            wardrobe: Identifier of the selected wardrobe, if any.
            premium_aesthetic: Whether ``spec.style`` is a premium aesthetic.
            model: Target backend; defaults to ``spec.model``.

        Returns:
            GenerationSelections: The pricing input.

        """
        aesthetic = None
        if spec.style:
            aesthetic = AestheticChoice(id=spec.style, is_premium=premium_aesthetic)
        return cls(
            aesthetic=aesthetic,
            shot_type=shot_type,
            wardrobe=wardrobe,
            model=model or spec.model,
            advanced_options=AdvancedOptions(
                lighting=bool(spec.lighting),
                scene=bool(spec.scene),
                camera_angle=bool(spec.camera_angle),
                negative_prompts=bool(spec.negative_prompts),
                custom_parameters=spec.parameters is not None,
            ),
            total_generations=total_generations,
        )


class CreditCostBreakdown(BaseModel):
    """Price of one generation; ``total_cost`` is also the debited amount."""

    model_config = ConfigDict(frozen=True)

    base_cost: int
    feature_cost: int
    advanced_cost: int
    model_multiplier: float
    complexity_multiplier: float
    generation_multiplier: float
    total_cost: int = Field(ge=0, le=10)
    breakdown: list[str]


class Conflict(BaseModel):
    """Two fields that contradict each other."""

    model_config = ConfigDict(frozen=True)

    field1: str
    field2: str
    description: str
    severity: Severity


class Suggestion(BaseModel):
    """An actionable hint for one field."""

    model_config = ConfigDict(frozen=True)

    field: str
    message: str
    type: SuggestionType
    action: str | None = None


class PromptValidationResult(BaseModel):
    """Outcome of validating one specification snapshot."""

    model_config = ConfigDict(frozen=True)

    is_valid: bool
    conflicts: list[Conflict]
    suggestions: list[Suggestion]
    completeness: int = Field(ge=0, le=100)
    warnings: list[str]


class FormattedPrompt(BaseModel):
    """A specification rendered for one backend."""

    model_config = ConfigDict(frozen=True)

    positive: str
    negative: str | None = None
    parameters: str | None = None
    model: ModelId
    full_prompt: str


class RefinementIssue(BaseModel):
    """A problem found in a prompt, by the LLM or by the sanity check."""

    type: str = "general"
    severity: str = "warning"
    message: str


class SanityCheckResult(BaseModel):
    """Rule-based review of a final prompt text."""

    model_config = ConfigDict(frozen=True)

    passed: bool
    issues: list[RefinementIssue] = Field(default_factory=list)
    suggestions: list[str] = Field(default_factory=list)


class RefinedPrompt(BaseModel):
    """Structured answer of the refinement call."""

    refined_prompt: str
    negative_prompt: str | None = None
    hooks: list[str] = Field(default_factory=list)
    audio: str | None = None
    validation_issues: list[RefinementIssue] = Field(default_factory=list)


class RefinementConfig(BaseModel):
    """Configuration for the LLM refinement call."""

    model: str = "gemini-2.0-flash"
    temperature: float = 0.7
    retries: int = 2
    min_wait: int = 2
    max_wait: int = 10


class CreditBalance(BaseModel):
    """What the balance source knows about a user."""

    credits: int = Field(ge=0)
    is_unlimited: bool = False
    tier: str | None = None
    lifetime_generations: int = Field(default=0, ge=0)


class DebitResult(BaseModel):
    """Outcome of a debit request."""

    success: bool
    remaining: int | None = None  # None for unlimited accounts


class UsageRecord(BaseModel):
    """One tracked generation."""

    timestamp: datetime
    user_id: str
    is_unlimited: bool
    credit_cost: int
    model: ModelId
    aesthetic: str | None = None
    has_advanced_options: bool = False


class GenerationResult(BaseModel):
    """Everything produced by one completed generation."""

    prompt: str
    negative_prompt: str | None = None
    formatted: FormattedPrompt
    validation: PromptValidationResult
    cost: CreditCostBreakdown
    hooks: list[str]
    audio: str
    refined: bool = False
    validation_issues: list[RefinementIssue] = Field(default_factory=list)
    sanity_check: SanityCheckResult
    remaining_credits: int | None = None
