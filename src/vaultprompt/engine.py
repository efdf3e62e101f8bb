"""End-to-end generation: validate, price, format, refine, charge."""

import logging
from datetime import datetime, timezone

from .catalog import get_aesthetic, get_shot_type, get_wardrobe
from .credits import BalanceCache, CreditLedger
from .formatters import format_prompt
from .models import (
    CreditBalance,
    GenerationResult,
    GenerationSelections,
    ModelId,
    PromptSpecification,
    RefinementConfig,
    UsageRecord,
)
from .pricing import calculate_credit_cost, has_enough_credits
from .service import GeminiService
from .usage import UsageTracker
from .validator import sanity_check, validate_prompt

logger = logging.getLogger(__name__)

DEFAULT_HOOKS = (
    "POV: You finally stopped trading time for money...",
    "When you realize 9-5 wasn't the vibe...",
    "Plot twist: You built this in your spare time...",
)
DEFAULT_AUDIO = "Just a Girl - No Doubt"


class InvalidPromptError(ValueError):
    """The specification has blocking conflicts."""


class InsufficientCreditsError(RuntimeError):
    """The user's balance does not cover the generation cost."""

    def __init__(self, required: int, available: int) -> None:
        self.required = required
        self.available = available
        super().__init__(
            f"Generation costs {required} credits but only {available} available",
        )


class PromptEngine:
    """Runs one generation request against a ledger and an optional refiner.

    Cached balances are dropped whenever the ledger writes to an account.
    """

    def __init__(
        self,
        ledger: CreditLedger,
        tracker: UsageTracker | None = None,
        refiner: GeminiService | None = None,
        cache: BalanceCache | None = None,
        refinement_config: RefinementConfig | None = None,
    ) -> None:
        self.ledger = ledger
        self.tracker = tracker or UsageTracker()
        self.refiner = refiner
        self.cache = cache or BalanceCache(ledger.balance)
        ledger.add_listener(self.cache.invalidate)
        self.refinement_config = refinement_config

    def balance(self, user_id: str) -> CreditBalance:
        return self.cache.get(user_id)

    def generate(
        self,
        user_id: str,
        spec: PromptSpecification,
        model: ModelId | None = None,
        *,
        shot_type: str | None = None,
        wardrobe: str | None = None,
        premium_aesthetic: bool | None = None,
        require_valid: bool = True,
    ) -> GenerationResult:
        """Produce a prompt and charge the user for it.

        Args:
            user_id: The user generating.
            spec: The submitted specification.
            model: Target backend; defaults to ``spec.model``, then Midjourney.
            shot_type: Selected shot type id, priced as a feature.
            wardrobe: Selected wardrobe id, priced as a feature.
            premium_aesthetic: Whether the aesthetic is premium. Looked up in
                the catalog when not given.
            require_valid: Refuse specifications with error conflicts.

        Returns:
            GenerationResult: The deliverable prompt with its validation,
            the refiner's issues, a sanity check of the final text, the
            price and the remaining balance.

        Raises:
            InvalidPromptError: If ``require_valid`` and the spec has errors.
            InsufficientCreditsError: If the balance does not cover the cost.

        """
        model = ModelId(model or spec.model or ModelId.MIDJOURNEY)

        validation = validate_prompt(spec)
        if require_valid and not validation.is_valid:
            errors = [
                c.description for c in validation.conflicts if c.severity == "error"
            ]
            msg = "Prompt has conflicts: " + "; ".join(errors)
            raise InvalidPromptError(msg)

        if premium_aesthetic is None:
            aesthetic = get_aesthetic(spec.style) if spec.style else None
            premium_aesthetic = bool(aesthetic and aesthetic.is_premium)

        balance = self.balance(user_id)
        selections = GenerationSelections.from_specification(
            spec,
            balance.lifetime_generations,
            shot_type=shot_type,
            wardrobe=wardrobe,
            premium_aesthetic=premium_aesthetic,
            model=model,
        )
        cost = calculate_credit_cost(selections)

        if not has_enough_credits(
            balance.credits,
            cost.total_cost,
            is_unlimited=balance.is_unlimited,
        ):
            self.cache.invalidate(user_id)
            raise InsufficientCreditsError(cost.total_cost, balance.credits)

        formatted = format_prompt(spec, model)
        prompt = formatted.full_prompt
        negative = formatted.negative
        hooks = list(DEFAULT_HOOKS)
        audio = DEFAULT_AUDIO
        refined = False
        validation_issues = []

        if self.refiner is not None:
            try:
                answer = self.refiner.refine_prompt(
                    formatted,
                    spec,
                    context=self._context(spec, shot_type, wardrobe),
                    config=self.refinement_config,
                )
            except RuntimeError as e:
                logger.warning("Refinement failed, using local prompt: %s", e)
            else:
                prompt = answer.refined_prompt
                negative = answer.negative_prompt or negative
                hooks = answer.hooks or hooks
                audio = answer.audio or audio
                validation_issues = answer.validation_issues
                refined = True

        sanity = sanity_check(prompt, spec)
        if sanity.issues:
            logger.warning(
                "Sanity check found %d issue(s) in the prompt for %s",
                len(sanity.issues),
                user_id,
            )

        debit = self.ledger.debit(user_id, cost.total_cost)
        if not debit.success:
            self.cache.invalidate(user_id)
            raise InsufficientCreditsError(cost.total_cost, debit.remaining or 0)
        self.ledger.record_generation(user_id)

        self.tracker.track(
            UsageRecord(
                timestamp=datetime.now(timezone.utc),
                user_id=user_id,
                is_unlimited=balance.is_unlimited,
                credit_cost=cost.total_cost,
                model=model,
                aesthetic=spec.style,
                has_advanced_options=selections.advanced_options.count > 0,
            ),
        )
        logger.info(
            "Generated %s prompt for %s (%d credits, refined=%s)",
            model.value,
            user_id,
            cost.total_cost,
            refined,
        )

        return GenerationResult(
            prompt=prompt,
            negative_prompt=negative,
            formatted=formatted,
            validation=validation,
            cost=cost,
            hooks=hooks,
            audio=audio,
            refined=refined,
            validation_issues=validation_issues,
            sanity_check=sanity,
            remaining_credits=debit.remaining,
        )

    @staticmethod
    def _context(
        spec: PromptSpecification,
        shot_type: str | None,
        wardrobe: str | None,
    ) -> dict[str, str]:
        context = {}
        if spec.style:
            aesthetic = get_aesthetic(spec.style)
            context["Aesthetic"] = aesthetic.name if aesthetic else spec.style
        if shot_type:
            entry = get_shot_type(shot_type)
            context["Shot type"] = entry.name if entry else shot_type
        if wardrobe:
            entry = get_wardrobe(wardrobe)
            context["Wardrobe"] = entry.name if entry else wardrobe
        return context
