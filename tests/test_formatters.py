"""Tests for the per-model prompt formatters."""

import pytest

from vaultprompt.formatters import (
    DALLE_FACELESS,
    MIDJOURNEY_FACELESS,
    STABLE_DIFFUSION_FACELESS,
    default_parameters,
    format_prompt,
)
from vaultprompt.models import (
    MidjourneyParameters,
    ModelId,
    ModelParameters,
    PromptSpecification,
    StableDiffusionParameters,
)

STANDARD_NEGATIVE = "blurry, low quality, distorted, ugly, bad anatomy"


@pytest.fixture
def beach_spec() -> PromptSpecification:
    return PromptSpecification(
        subject="woman",
        scene="beach club",
        lighting="bright natural",
        clothing="linen dress",
        hair="long beach waves",
        makeup="glam makeup",
        faceless_mode=True,
    )


def test_faceless_midjourney_hides_hair_and_makeup(beach_spec) -> None:
    result = format_prompt(beach_spec, ModelId.MIDJOURNEY)

    assert MIDJOURNEY_FACELESS in result.full_prompt
    assert "long beach waves" not in result.full_prompt
    assert "glam makeup" not in result.full_prompt
    assert result.positive == (
        f"woman, linen dress, beach club, bright natural, {MIDJOURNEY_FACELESS}"
    )


def test_midjourney_shows_hair_and_makeup_when_not_faceless(beach_spec) -> None:
    spec = beach_spec.model_copy(update={"faceless_mode": False})
    result = format_prompt(spec, ModelId.MIDJOURNEY)

    assert result.positive == (
        "woman, long beach waves, glam makeup, linen dress, beach club, bright natural"
    )


def test_midjourney_field_order_and_decorations() -> None:
    spec = PromptSpecification(
        post_processing="color graded",
        film_stock="35mm",
        color_temperature="warm",
        fit="tailored",
        colors=["beige", "cream"],
        pose=["relaxed", "confident"],
        identity="entrepreneur",
        subject="woman",
        environment=["indoor"],
        location="Paris",
        framing="medium shot",
    )
    result = format_prompt(spec, ModelId.MIDJOURNEY)

    assert result.positive == (
        "woman, entrepreneur, relaxed, confident, tailored fit, beige, cream, "
        "indoor, Paris, warm tones, medium shot, shot on 35mm, color graded"
    )
    assert result.parameters == "--v 6.0"
    assert result.full_prompt == f"{result.positive} --v 6.0"
    assert result.model is ModelId.MIDJOURNEY


def test_midjourney_default_parameters_for_old_money() -> None:
    result = format_prompt(
        PromptSpecification(subject="woman", style="old-money"),
        ModelId.MIDJOURNEY,
    )
    assert result.parameters == "--v 6.0 --stylize 250 --style raw"


def test_midjourney_explicit_parameters() -> None:
    spec = PromptSpecification(
        subject="woman",
        style="old-money",
        parameters=ModelParameters(
            midjourney=MidjourneyParameters(
                quality=0.5,
                chaos=10,
                seed=42,
                style="raw",
                version="6.0",
                stylize=250,
                aspect_ratio="4:5",
            ),
        ),
    )
    result = format_prompt(spec, ModelId.MIDJOURNEY)

    assert result.parameters == (
        "--ar 4:5 --stylize 250 --v 6.0 --style raw --seed 42 --chaos 10 --quality 0.5"
    )
    assert result.full_prompt == f"woman {result.parameters}"


def test_midjourney_whole_number_quality() -> None:
    spec = PromptSpecification(
        parameters=ModelParameters(midjourney=MidjourneyParameters(quality=1)),
    )
    assert format_prompt(spec, ModelId.MIDJOURNEY).parameters == "--quality 1"


def test_midjourney_negative_terms() -> None:
    spec = PromptSpecification(subject="woman", negative_prompts=["text", "logos"])
    assert format_prompt(spec, ModelId.MIDJOURNEY).negative == "text, logos"
    assert format_prompt(PromptSpecification(), ModelId.MIDJOURNEY).negative is None


def test_empty_specification_has_no_stray_separators() -> None:
    midjourney = format_prompt(PromptSpecification(), ModelId.MIDJOURNEY)
    assert midjourney.positive == ""
    assert midjourney.full_prompt == "--v 6.0"

    spec = PromptSpecification(subject="woman", identity="", scene=" ")
    assert format_prompt(spec, ModelId.MIDJOURNEY).positive == "woman"


def test_stable_diffusion_blocks() -> None:
    spec = PromptSpecification(
        subject="woman",
        hair="sleek bun",
        materials=["silk", "cashmere"],
        scene="hotel lobby",
        negative_prompts=["text", "watermark"],
    )
    result = format_prompt(spec, ModelId.STABLE_DIFFUSION)

    assert result.positive == (
        "woman, silk, cashmere, hotel lobby, "
        "high quality, detailed, professional photography"
    )
    assert result.negative == f"text, watermark, {STANDARD_NEGATIVE}"
    assert result.full_prompt == (
        f"{result.positive}\n\nNegative: text, watermark, {STANDARD_NEGATIVE}"
    )
    assert result.parameters is None
    assert result.model is ModelId.STABLE_DIFFUSION


def test_stable_diffusion_always_has_standard_negatives() -> None:
    result = format_prompt(PromptSpecification(), ModelId.STABLE_DIFFUSION)
    assert result.negative == STANDARD_NEGATIVE
    assert result.positive == "high quality, detailed, professional photography"


def test_stable_diffusion_parameters_and_faceless() -> None:
    spec = PromptSpecification(
        subject="woman",
        faceless_mode=True,
        parameters=ModelParameters(
            stable_diffusion=StableDiffusionParameters(
                cfg_scale=7,
                steps=30,
                sampler="DPM++ 2M Karras",
                seed=1234,
            ),
        ),
    )
    result = format_prompt(spec, ModelId.STABLE_DIFFUSION)

    assert result.parameters == (
        "CFG Scale: 7, Steps: 30, Sampler: DPM++ 2M Karras, Seed: 1234"
    )
    assert result.positive.endswith(STABLE_DIFFUSION_FACELESS)


def test_dalle_sentence() -> None:
    spec = PromptSpecification(
        subject="woman",
        identity="entrepreneur",
        pose=["relaxed", "confident"],
        clothing="silk dress",
        materials=["silk", "linen"],
        scene="hotel lobby",
        lighting="golden hour",
        mood="serene",
        camera_angle="low angle",
    )
    result = format_prompt(spec, ModelId.DALLE)

    assert result.positive == (
        "A entrepreneur woman, in a relaxed pose, wearing silk dress, "
        "made of silk and linen, in a hotel lobby, with golden hour lighting, "
        "conveying a serene mood, high quality, professional photography, detailed"
    )
    assert result.full_prompt == result.positive
    assert result.parameters is None
    assert result.negative is None
    assert result.model is ModelId.DALLE


def test_dalle_subject_without_identity_and_faceless() -> None:
    spec = PromptSpecification(subject="woman", faceless_mode=True)
    result = format_prompt(spec, ModelId.DALLE)
    assert result.positive == (
        f"woman, {DALLE_FACELESS}, high quality, professional photography, detailed"
    )


def test_dalle_identity_without_subject_is_omitted() -> None:
    result = format_prompt(PromptSpecification(identity="artist"), ModelId.DALLE)
    assert result.positive == "high quality, professional photography, detailed"


@pytest.mark.parametrize("model", ["flux", None, "MIDJOURNEY"])
def test_unknown_model_falls_back_to_midjourney(model) -> None:
    result = format_prompt(PromptSpecification(subject="woman"), model)
    assert result.model is ModelId.MIDJOURNEY
    assert result.full_prompt == "woman --v 6.0"


def test_model_accepts_plain_strings() -> None:
    result = format_prompt(PromptSpecification(subject="woman"), "dalle")
    assert result.model is ModelId.DALLE


@pytest.mark.parametrize("model", list(ModelId))
def test_formatting_is_idempotent(beach_spec, model: ModelId) -> None:
    assert format_prompt(beach_spec, model) == format_prompt(beach_spec, model)


def test_default_parameters() -> None:
    midjourney = default_parameters(ModelId.MIDJOURNEY).midjourney
    assert midjourney.version == "6.0"
    assert midjourney.stylize == 250
    assert midjourney.style == "raw"
    assert midjourney.aspect_ratio == "4:5"

    clean_girl = default_parameters(ModelId.MIDJOURNEY, "clean-girl")
    assert clean_girl.midjourney.stylize == 200
    assert (
        default_parameters(ModelId.MIDJOURNEY, "dark-feminine").midjourney.stylize
        == 300
    )

    sd = default_parameters(ModelId.STABLE_DIFFUSION).stable_diffusion
    assert (sd.cfg_scale, sd.steps, sd.sampler) == (7, 30, "DPM++ 2M Karras")

    dalle = default_parameters(ModelId.DALLE).dalle
    assert (dalle.style, dalle.size, dalle.quality) == ("natural", "1024x1024", "hd")
