"""Render a prompt specification in each backend's prompt syntax."""

import logging
from collections.abc import Callable, Iterable

from .models import (
    DalleParameters,
    FormattedPrompt,
    MidjourneyParameters,
    ModelId,
    ModelParameters,
    PromptSpecification,
    StableDiffusionParameters,
)

logger = logging.getLogger(__name__)

Formatter = Callable[[PromptSpecification], FormattedPrompt]

DEFAULT_MODEL = ModelId.MIDJOURNEY

MIDJOURNEY_FACELESS = (
    "woman seen from behind, back of head, cropped face, focus on hands, "
    "motion blur, no direct gaze, no visible eyes, no face visible"
)
STABLE_DIFFUSION_FACELESS = "woman from behind, back of head, no face visible"
DALLE_FACELESS = "seen from behind, face not visible"

STABLE_DIFFUSION_QUALITY = "high quality, detailed, professional photography"
DALLE_QUALITY = "high quality, professional photography, detailed"

STANDARD_NEGATIVE_TERMS = (
    "blurry",
    "low quality",
    "distorted",
    "ugly",
    "bad anatomy",
)

MIDJOURNEY_DEFAULT_VERSION = "6.0"
# Midjourney stylize overrides per aesthetic
AESTHETIC_STYLIZE = {
    "old-money": 250,
    "clean-girl": 200,
    "dark-feminine": 300,
}


def _number(value: float) -> str:
    """Render 7.0 as ``7`` and 0.5 as ``0.5``."""
    if float(value).is_integer():
        return str(int(value))
    return str(value)


def _joined(values: Iterable[str], separator: str = ", ") -> str | None:
    return separator.join(values) or None


def _keywords(*parts: str | None) -> str:
    return ", ".join(part for part in parts if part)


def _suffixed(value: str | None, template: str) -> str | None:
    return template.format(value) if value else None


def _midjourney_parameters(spec: PromptSpecification) -> str:
    params = spec.parameters.midjourney if spec.parameters else None
    if params is None:
        flags = [f"--v {MIDJOURNEY_DEFAULT_VERSION}"]
        if spec.style == "old-money":
            flags.append("--stylize 250 --style raw")
        return " ".join(flags)

    flags = []
    if params.aspect_ratio:
        flags.append(f"--ar {params.aspect_ratio}")
    if params.stylize is not None:
        flags.append(f"--stylize {params.stylize}")
    if params.version:
        flags.append(f"--v {params.version}")
    if params.style:
        flags.append(f"--style {params.style}")
    if params.seed is not None:
        flags.append(f"--seed {params.seed}")
    if params.chaos is not None:
        flags.append(f"--chaos {params.chaos}")
    if params.quality is not None:
        flags.append(f"--quality {_number(params.quality)}")
    return " ".join(flags)


def format_for_midjourney(spec: PromptSpecification) -> FormattedPrompt:
    """Comma separated keyword list followed by ``--`` parameter flags."""
    show_face = not spec.faceless_mode
    positive = _keywords(
        spec.subject,
        spec.identity,
        _joined(spec.pose),
        spec.body_language,
        spec.gesture,
        spec.hair if show_face else None,
        spec.makeup if show_face else None,
        _joined(spec.accessories),
        spec.clothing,
        _joined(spec.materials),
        _suffixed(spec.fit, "{} fit"),
        _joined(spec.colors),
        spec.scene,
        spec.background,
        _joined(spec.environment),
        spec.location,
        spec.lighting,
        spec.mood,
        spec.time_of_day,
        _suffixed(spec.color_temperature, "{} tones"),
        spec.camera_angle,
        spec.composition,
        spec.depth_of_field,
        spec.framing,
        spec.quality,
        _suffixed(spec.film_stock, "shot on {}"),
        spec.post_processing,
        MIDJOURNEY_FACELESS if spec.faceless_mode else None,
    )
    parameters = _midjourney_parameters(spec)

    return FormattedPrompt(
        positive=positive,
        negative=_joined(spec.negative_prompts),
        parameters=parameters,
        model=ModelId.MIDJOURNEY,
        full_prompt=f"{positive} {parameters}".strip(),
    )


def _stable_diffusion_parameters(spec: PromptSpecification) -> str | None:
    params = spec.parameters.stable_diffusion if spec.parameters else None
    if params is None:
        return None

    pairs = []
    if params.cfg_scale is not None:
        pairs.append(f"CFG Scale: {_number(params.cfg_scale)}")
    if params.steps is not None:
        pairs.append(f"Steps: {params.steps}")
    if params.sampler:
        pairs.append(f"Sampler: {params.sampler}")
    if params.seed is not None:
        pairs.append(f"Seed: {params.seed}")
    return _joined(pairs)


def format_for_stable_diffusion(spec: PromptSpecification) -> FormattedPrompt:
    """Positive keyword block plus a separate negative block."""
    positive = _keywords(
        spec.subject,
        spec.identity,
        _joined(spec.pose),
        spec.clothing,
        _joined(spec.materials),
        spec.scene,
        spec.lighting,
        spec.mood,
        spec.camera_angle,
        spec.quality,
        STABLE_DIFFUSION_QUALITY,
        STABLE_DIFFUSION_FACELESS if spec.faceless_mode else None,
    )
    negative = ", ".join([*spec.negative_prompts, *STANDARD_NEGATIVE_TERMS])

    return FormattedPrompt(
        positive=positive,
        negative=negative,
        parameters=_stable_diffusion_parameters(spec),
        model=ModelId.STABLE_DIFFUSION,
        full_prompt=f"{positive}\n\nNegative: {negative}",
    )


def format_for_dalle(spec: PromptSpecification) -> FormattedPrompt:
    """A natural language sentence; DALL·E takes no inline parameters."""
    if spec.subject and spec.identity:
        subject = f"A {spec.identity} {spec.subject}"
    else:
        subject = spec.subject

    positive = _keywords(
        subject,
        _suffixed(spec.pose[0] if spec.pose else None, "in a {} pose"),
        _suffixed(spec.clothing, "wearing {}"),
        _suffixed(_joined(spec.materials, " and "), "made of {}"),
        _suffixed(spec.scene, "in a {}"),
        _suffixed(spec.lighting, "with {} lighting"),
        _suffixed(spec.mood, "conveying a {} mood"),
        DALLE_FACELESS if spec.faceless_mode else None,
        DALLE_QUALITY,
    )

    return FormattedPrompt(
        positive=positive,
        model=ModelId.DALLE,
        full_prompt=positive,
    )


FORMATTERS: dict[ModelId, Formatter] = {
    ModelId.MIDJOURNEY: format_for_midjourney,
    ModelId.STABLE_DIFFUSION: format_for_stable_diffusion,
    ModelId.DALLE: format_for_dalle,
}


def format_prompt(
    spec: PromptSpecification,
    model: ModelId | str | None = None,
) -> FormattedPrompt:
    """Format a specification for a backend.

    Args:
        spec: The specification to render.
        model: Target backend identifier. Unknown or missing identifiers
            fall back to Midjourney.

    Returns:
        FormattedPrompt: The rendered prompt.

    """
    try:
        formatter = FORMATTERS[ModelId(model)]
    except ValueError:
        logger.debug("Unknown model %r, formatting for %s", model, DEFAULT_MODEL.value)
        formatter = FORMATTERS[DEFAULT_MODEL]
    return formatter(spec)


def default_parameters(
    model: ModelId | str,
    aesthetic: str | None = None,
) -> ModelParameters:
    """Sensible parameter defaults for a backend, tuned per aesthetic."""
    if model == ModelId.STABLE_DIFFUSION:
        return ModelParameters(
            stable_diffusion=StableDiffusionParameters(
                cfg_scale=7,
                steps=30,
                sampler="DPM++ 2M Karras",
            ),
        )
    if model == ModelId.DALLE:
        return ModelParameters(
            dalle=DalleParameters(style="natural", size="1024x1024", quality="hd"),
        )

    return ModelParameters(
        midjourney=MidjourneyParameters(
            version=MIDJOURNEY_DEFAULT_VERSION,
            stylize=AESTHETIC_STYLIZE.get(aesthetic, 250),
            style="raw",
            aspect_ratio="4:5",
        ),
    )
