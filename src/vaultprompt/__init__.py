"""Credit pricing, validation and model formatting for viral luxury prompts."""

from .formatters import format_prompt
from .models import (
    CreditCostBreakdown,
    FormattedPrompt,
    GenerationSelections,
    ModelId,
    PromptSpecification,
    PromptValidationResult,
)
from .pricing import calculate_credit_cost
from .validator import optimization_suggestions, validate_prompt

__all__ = [
    "CreditCostBreakdown",
    "FormattedPrompt",
    "GenerationSelections",
    "ModelId",
    "PromptSpecification",
    "PromptValidationResult",
    "calculate_credit_cost",
    "format_prompt",
    "optimization_suggestions",
    "validate_prompt",
]
