"""Tests for the credit cost calculator."""

import itertools

import pytest

from vaultprompt.models import (
    AdvancedOptions,
    AestheticChoice,
    GenerationSelections,
    ModelId,
)
from vaultprompt.pricing import (
    PRICING_TIERS,
    calculate_credit_cost,
    conversion_message,
    get_pricing_tier,
    has_enough_credits,
)

ADVANCED_FIELDS = (
    "lighting",
    "scene",
    "camera_angle",
    "negative_prompts",
    "custom_parameters",
)


def _advanced(n: int) -> AdvancedOptions:
    return AdvancedOptions(**{name: True for name in ADVANCED_FIELDS[:n]})


def test_first_generation_is_surcharged_and_capped() -> None:
    result = calculate_credit_cost(GenerationSelections(total_generations=0))
    assert result.base_cost == 10
    assert result.total_cost == 10
    assert result.breakdown == ["First prompt: 10 credits (special pricing)"]


def test_empty_selections_cost_base_only() -> None:
    result = calculate_credit_cost(GenerationSelections(total_generations=1))
    assert result.total_cost == 1
    assert result.feature_cost == 0
    assert result.advanced_cost == 0
    assert result.model_multiplier == 1.0
    assert result.complexity_multiplier == 1.0
    assert result.generation_multiplier == 1.0
    assert result.breakdown == ["Base generation: 1 credit"]


def test_baseline_model_has_no_multiplier_line() -> None:
    result = calculate_credit_cost(
        GenerationSelections(model=ModelId.STABLE_DIFFUSION, total_generations=1),
    )
    assert result.total_cost == 1
    assert result.breakdown == ["Base generation: 1 credit"]


def test_standard_aesthetic_with_complexity_bonus() -> None:
    result = calculate_credit_cost(
        GenerationSelections(
            aesthetic=AestheticChoice(id="clean-girl"),
            model=ModelId.STABLE_DIFFUSION,
            total_generations=1,
        ),
    )
    assert result.feature_cost == 1
    assert result.complexity_multiplier == pytest.approx(1.05)
    assert result.total_cost == 3
    assert result.breakdown == [
        "Base generation: 1 credit",
        "Aesthetic (Standard): +1 credits",
        "Complexity bonus: 5%",
    ]


def test_feature_costs() -> None:
    result = calculate_credit_cost(
        GenerationSelections(
            aesthetic=AestheticChoice(id="old-money", is_premium=True),
            shot_type="pov",
            wardrobe="streetwear",
            total_generations=1,
        ),
    )
    assert result.feature_cost == 4
    assert result.breakdown[1:4] == [
        "Aesthetic (Premium): +2 credits",
        "Shot type: +1 credit",
        "Wardrobe: +1 credit",
    ]
    assert result.breakdown[-1] == "Complexity bonus: 15%"


@pytest.mark.parametrize(
    ("count", "expected"),
    [(1, 1), (2, 2), (3, 3), (4, 5), (5, 7)],
)
def test_advanced_cost_is_convex(count: int, expected: int) -> None:
    result = calculate_credit_cost(
        GenerationSelections(advanced_options=_advanced(count), total_generations=1),
    )
    assert result.advanced_cost == expected
    assert f"Advanced options ({count}): +{expected} credits" in result.breakdown


def test_advanced_cost_strictly_increases() -> None:
    costs = [
        calculate_credit_cost(
            GenerationSelections(advanced_options=_advanced(n), total_generations=1),
        ).advanced_cost
        for n in range(6)
    ]
    assert costs[0] == 0
    assert all(a < b for a, b in itertools.pairwise(costs))


@pytest.mark.parametrize(
    ("model", "multiplier", "line"),
    [
        (ModelId.MIDJOURNEY, 2.0, "Midjourney model: 2x multiplier"),
        (ModelId.DALLE, 1.5, "DALL·E model: 1.5x multiplier"),
    ],
)
def test_model_multiplier(model: ModelId, multiplier: float, line: str) -> None:
    result = calculate_credit_cost(
        GenerationSelections(model=model, total_generations=1),
    )
    assert result.model_multiplier == multiplier
    assert line in result.breakdown
    assert result.total_cost == 2


@pytest.mark.parametrize(
    ("generations", "multiplier"),
    [(1, 1.0), (5, 1.0), (6, 1.5), (15, 1.5), (16, 2.0), (30, 2.0), (31, 2.5)],
)
def test_generation_tiers(generations: int, multiplier: float) -> None:
    result = calculate_credit_cost(
        GenerationSelections(total_generations=generations),
    )
    assert result.generation_multiplier == multiplier
    if multiplier == 1.0:
        assert result.breakdown == ["Base generation: 1 credit"]
    else:
        assert len(result.breakdown) == 2


def test_multipliers_stack_in_order() -> None:
    result = calculate_credit_cost(
        GenerationSelections(model=ModelId.DALLE, total_generations=10),
    )
    # 1 * 1.5 * 1.0 * 1.5 = 2.25
    assert result.total_cost == 3
    assert result.breakdown == [
        "Base generation: 1 credit",
        "DALL·E model: 1.5x multiplier",
        "Engaged user tier: 1.5x multiplier",
    ]


def test_total_is_capped() -> None:
    result = calculate_credit_cost(
        GenerationSelections(
            aesthetic=AestheticChoice(id="old-money", is_premium=True),
            model=ModelId.MIDJOURNEY,
            advanced_options=_advanced(2),
            total_generations=40,
        ),
    )
    assert result.total_cost == 10


def test_total_always_within_bounds() -> None:
    aesthetics = [
        None,
        AestheticChoice(id="y2k"),
        AestheticChoice(id="old-money", is_premium=True),
    ]
    models = [None, *ModelId]
    for aesthetic, shot, wardrobe, model, n, generations in itertools.product(
        aesthetics,
        [None, "pov"],
        [None, "athleisure"],
        models,
        range(6),
        [0, 1, 6, 16, 31],
    ):
        result = calculate_credit_cost(
            GenerationSelections(
                aesthetic=aesthetic,
                shot_type=shot,
                wardrobe=wardrobe,
                model=model,
                advanced_options=_advanced(n),
                total_generations=generations,
            ),
        )
        assert isinstance(result.total_cost, int)
        assert 1 <= result.total_cost <= 10


def test_negative_generation_count_raises() -> None:
    selections = GenerationSelections.model_construct(total_generations=-3)
    with pytest.raises(ValueError, match="total_generations"):
        calculate_credit_cost(selections)


def test_has_enough_credits() -> None:
    assert has_enough_credits(5, 5)
    assert not has_enough_credits(4, 5)
    assert has_enough_credits(0, 10, is_unlimited=True)


@pytest.mark.parametrize(
    ("credits", "cost", "generations", "expected"),
    [
        (0, 1, 0, "You're out of credits! Subscribe for unlimited access."),
        (3, 3, 0, "This will use your last 3 credits. Subscribe to continue!"),
        (8, 3, 0, "Only 5 credits left after this. Upgrade now!"),
        (
            12,
            3,
            15,
            "You're getting premium results! Subscribe for unlimited access.",
        ),
        (
            20,
            1,
            30,
            "You're a power user! Subscribe to save on every generation.",
        ),
        (50, 1, 0, None),
    ],
)
def test_conversion_message(
    credits: int,
    cost: int,
    generations: int,
    expected: str | None,
) -> None:
    assert conversion_message(credits, cost, generations) == expected


def test_pricing_tiers() -> None:
    assert [tier.id for tier in PRICING_TIERS] == [
        "viral-starter",
        "ceo-access",
        "empire-bundle",
    ]
    assert get_pricing_tier("ceo-access").credits == "unlimited"
    assert get_pricing_tier("empire-bundle").credits == 100
    assert get_pricing_tier("missing") is None
