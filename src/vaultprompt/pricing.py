"""Non-linear credit pricing.

Early generations are cheap; cost grows with premium features, with the
number of advanced option groups (convexly) and with the user's lifetime
generation count, up to a hard per-generation cap.
"""

import math
from typing import Literal

from pydantic import BaseModel, ConfigDict

from .models import CreditCostBreakdown, GenerationSelections, ModelId

FIRST_GENERATION_COST = 10
BASE_COST = 1
MAX_COST_PER_GENERATION = 10

MODEL_MULTIPLIERS: dict[ModelId, tuple[float, str]] = {
    ModelId.MIDJOURNEY: (2.0, "Midjourney model: 2x multiplier"),
    ModelId.DALLE: (1.5, "DALL·E model: 1.5x multiplier"),
}

# (minimum lifetime generations, multiplier, label), highest tier first
GENERATION_TIERS: tuple[tuple[int, float, str], ...] = (
    (31, 2.5, "Premium user tier: 2.5x multiplier"),
    (16, 2.0, "Advanced user tier: 2x multiplier"),
    (6, 1.5, "Engaged user tier: 1.5x multiplier"),
)


class PricingTier(BaseModel):
    """A purchasable credit pack or subscription."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    price: int
    price_display: str
    type: Literal["one-time", "subscription"]
    credits: int | Literal["unlimited"]
    features: tuple[str, ...]
    popular: bool = False


PRICING_TIERS: tuple[PricingTier, ...] = (
    PricingTier(
        id="viral-starter",
        name="Viral Starter",
        price=27,
        price_display="$27",
        type="one-time",
        credits=50,
        features=(
            "50 faceless prompt credits (no expiry)",
            "Access to 'The Vault' (10 pre-made viral aesthetics)",
            "Commercial rights included",
        ),
    ),
    PricingTier(
        id="ceo-access",
        name="CEO Access",
        price=47,
        price_display="$47/month",
        type="subscription",
        credits="unlimited",
        features=(
            "Unlimited generation",
            "Trend Watch: Weekly injected aesthetics",
            "Commercial License: Resell prompts as PDF packs",
            "Priority support",
        ),
        popular=True,
    ),
    PricingTier(
        id="empire-bundle",
        name="Empire Bundle",
        price=97,
        price_display="$97",
        type="one-time",
        credits=100,
        features=(
            "100 credits",
            "Prompt Pack Reseller Kit (Canva templates)",
            "Commercial License",
            "Lifetime access to The Vault",
        ),
    ),
)


def get_pricing_tier(tier_id: str) -> PricingTier | None:
    """Look up a pricing tier by id."""
    return next((tier for tier in PRICING_TIERS if tier.id == tier_id), None)


def calculate_credit_cost(selections: GenerationSelections) -> CreditCostBreakdown:
    """Calculate the credit cost of one generation.

    Args:
        selections: What the user picked, plus their lifetime generation count.

    Returns:
        CreditCostBreakdown: Every component of the price and the capped total,
        with one breakdown line per contributing factor in the order applied.

    Raises:
        ValueError: If the generation count is negative.

    """
    total_generations = selections.total_generations
    if total_generations < 0:
        msg = f"total_generations must be >= 0, got {total_generations}"
        raise ValueError(msg)

    breakdown: list[str] = []

    if total_generations == 0:
        base_cost = FIRST_GENERATION_COST
        breakdown.append(f"First prompt: {base_cost} credits (special pricing)")
    else:
        base_cost = BASE_COST
        breakdown.append(f"Base generation: {base_cost} credit")

    feature_cost = 0
    if selections.aesthetic is not None:
        aesthetic_cost = 2 if selections.aesthetic.is_premium else 1
        label = "Premium" if selections.aesthetic.is_premium else "Standard"
        feature_cost += aesthetic_cost
        breakdown.append(f"Aesthetic ({label}): +{aesthetic_cost} credits")
    if selections.shot_type:
        feature_cost += 1
        breakdown.append("Shot type: +1 credit")
    if selections.wardrobe:
        feature_cost += 1
        breakdown.append("Wardrobe: +1 credit")

    advanced_count = selections.advanced_options.count
    advanced_cost = 0
    if advanced_count > 0:
        advanced_cost = math.ceil(1.5**advanced_count - 1)
        breakdown.append(
            f"Advanced options ({advanced_count}): +{advanced_cost} credits",
        )

    model_multiplier = 1.0
    if selections.model in MODEL_MULTIPLIERS:
        model_multiplier, label = MODEL_MULTIPLIERS[selections.model]
        breakdown.append(label)

    total_features = (
        (selections.aesthetic is not None)
        + bool(selections.shot_type)
        + bool(selections.wardrobe)
        + advanced_count
    )
    complexity_multiplier = 1 + total_features * 0.05
    if complexity_multiplier > 1:
        breakdown.append(
            f"Complexity bonus: {(complexity_multiplier - 1) * 100:.0f}%",
        )

    generation_multiplier = 1.0
    for minimum, multiplier, label in GENERATION_TIERS:
        if total_generations >= minimum:
            generation_multiplier = multiplier
            breakdown.append(label)
            break

    subtotal = base_cost + feature_cost + advanced_cost
    raw_total = math.ceil(
        subtotal * model_multiplier * complexity_multiplier * generation_multiplier,
    )

    return CreditCostBreakdown(
        base_cost=base_cost,
        feature_cost=feature_cost,
        advanced_cost=advanced_cost,
        model_multiplier=model_multiplier,
        complexity_multiplier=complexity_multiplier,
        generation_multiplier=generation_multiplier,
        total_cost=min(raw_total, MAX_COST_PER_GENERATION),
        breakdown=breakdown,
    )


def has_enough_credits(
    current_credits: int,
    cost: int,
    *,
    is_unlimited: bool = False,
) -> bool:
    """Check whether a balance covers a cost."""
    if is_unlimited:
        return True
    return current_credits >= cost


def conversion_message(
    current_credits: int,
    cost: int,
    total_generations: int,
) -> str | None:
    """Upgrade nudge to show next to the price, if any."""
    if current_credits <= 0:
        return "You're out of credits! Subscribe for unlimited access."
    if current_credits <= cost:
        return (
            f"This will use your last {current_credits} credits. "
            "Subscribe to continue!"
        )

    remaining_after = current_credits - cost
    if remaining_after <= 5:
        return f"Only {remaining_after} credits left after this. Upgrade now!"
    if remaining_after <= 10 and total_generations >= 15:
        return "You're getting premium results! Subscribe for unlimited access."
    if total_generations >= 30 and current_credits <= 20:
        return "You're a power user! Subscribe to save on every generation."
    return None
