"""Service for refining formatted prompts with the Google Gemini API."""

import logging

from google import genai
from google.genai import types
from tenacity import (
    Retrying,
    before_sleep_log,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from .models import (
    FormattedPrompt,
    PromptSpecification,
    RefinedPrompt,
    RefinementConfig,
)

logger = logging.getLogger(__name__)

SYSTEM_INSTRUCTION = (
    "You are a visual director for luxury lifestyle social media content.\n"
    "You receive a prompt skeleton for a generative image model and the "
    "structured selections it was built from.\n\n"
    "1. Keep every user selection; if two selections conflict, favour the "
    "shot type and imply the wardrobe through visible details.\n"
    "2. Rewrite the skeleton into a polished prompt in the syntax of the "
    "target model: comma separated phrases with trailing parameters for "
    "midjourney, keyword blocks for stable-diffusion, natural sentences "
    "for dalle.\n"
    "3. Write a comma separated negative prompt that keeps the user's "
    "exclusions and adds standard quality exclusions.\n"
    "4. Write three short captions (a polarizing statement, an aspirational "
    "POV, a gatekeeping tip) and suggest one audio track.\n"
    "5. List any issues you found in the selections."
)


def build_refinement_request(
    formatted: FormattedPrompt,
    spec: PromptSpecification,
    context: dict[str, str] | None = None,
) -> str:
    """Render the user message sent along with the system instruction."""
    lines = [f"Target model: {formatted.model.value}"]
    for key, value in (context or {}).items():
        lines.append(f"{key}: {value}")
    lines.append(
        "Selections: "
        + spec.model_dump_json(exclude_none=True, exclude_defaults=True),
    )
    lines.append(f"Skeleton: {formatted.full_prompt}")
    if spec.user_input:
        lines.append(f"User idea: {spec.user_input}")
    return "\n".join(lines)


class GeminiService:
    """Service to interact with Google Gemini API."""

    def __init__(self, api_key: str) -> None:
        """Initialize the service with an API key."""
        if not api_key:
            msg = (
                "API Key is missing. "
                "Set GEMINI_API_KEY env var or pass it as an argument."
            )
            raise ValueError(msg)
        self.client = genai.Client(api_key=api_key)

    def _refine_attempt(self, request: str, config: RefinementConfig) -> RefinedPrompt:
        response = self.client.models.generate_content(
            model=config.model,
            contents=[
                types.Content(
                    role="user",
                    parts=[types.Part.from_text(text=request)],
                ),
            ],
            config=types.GenerateContentConfig(
                system_instruction=SYSTEM_INSTRUCTION,
                response_mime_type="application/json",
                response_schema=RefinedPrompt,
                temperature=config.temperature,
            ),
        )

        if getattr(response, "parsed", None):
            return response.parsed
        return RefinedPrompt.model_validate_json(response.text)

    def refine_prompt(
        self,
        formatted: FormattedPrompt,
        spec: PromptSpecification,
        context: dict[str, str] | None = None,
        config: RefinementConfig | None = None,
    ) -> RefinedPrompt:
        """Ask the model to polish a locally formatted prompt.

        Args:
            formatted: The local rendering, used as the skeleton.
            spec: The specification it was rendered from.
            context: Extra labelled selections, e.g. the aesthetic name.
            config: Model and retry configuration.

        Returns:
            RefinedPrompt: The model's structured answer.

        Raises:
            RuntimeError: If every attempt fails.

        """
        if config is None:
            config = RefinementConfig()
        request = build_refinement_request(formatted, spec, context)

        retryer = Retrying(
            stop=stop_after_attempt(config.retries + 1),
            wait=wait_exponential(
                multiplier=2,
                min=config.min_wait,
                max=config.max_wait,
            ),
            retry=retry_if_exception_type(Exception),
            before_sleep=before_sleep_log(logger, logging.WARNING),
            reraise=True,
        )

        try:
            refined = retryer(self._refine_attempt, request, config)
        except Exception as e:
            msg = f"Failed to refine prompt: {e}"
            raise RuntimeError(msg) from e

        if not refined.refined_prompt.strip():
            msg = "Failed to refine prompt: empty refined prompt"
            raise RuntimeError(msg)
        return refined
