"""CLI Application for Vault Prompt."""

import logging
from pathlib import Path

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table

from .config import get_settings
from .credits import BalanceCache, CreditLedger
from .engine import InsufficientCreditsError, InvalidPromptError, PromptEngine
from .formatters import format_prompt
from .models import (
    GenerationSelections,
    ModelId,
    PromptSpecification,
    PromptValidationResult,
    Suggestion,
)
from .pricing import calculate_credit_cost, conversion_message
from .service import GeminiService
from .usage import UsageTracker
from .validator import optimization_suggestions, prompt_tips, validate_prompt

# Setup Typer and Console
app = typer.Typer(help="Vault Prompt CLI - Viral luxury prompts for AI image models")
console = Console()


@app.callback()
def main(
    log_level: str | None = typer.Option(
        None,
        "--log-level",
        help="Logging level (defaults to LOG_LEVEL or INFO)",
    ),
) -> None:
    """Configure logging for every command."""
    level = (log_level or get_settings().log_level).upper()
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), rich_tracebacks=True)],
        force=True,
    )


def _load_spec(spec_file: Path) -> PromptSpecification:
    """Read a specification JSON document or exit."""
    if not spec_file.exists():
        console.print(f"[bold red]Error:[/bold red] File {spec_file} not found.")
        raise typer.Exit(code=1)
    try:
        return PromptSpecification.model_validate_json(spec_file.read_text())
    except ValidationError as e:
        console.print(
            f"[bold red]Error:[/bold red] Invalid specification in {spec_file}:",
        )
        console.print(str(e), markup=False)
        raise typer.Exit(code=1) from e


def _get_service(api_key: str | None = None) -> GeminiService | None:
    """Get the Gemini service, or None to work offline."""
    if not api_key:
        api_key = get_settings().gemini_api_key
    if not api_key:
        console.print(
            "[yellow]Warning: GEMINI_API_KEY not found, "
            "using the locally formatted prompt.[/yellow]",
        )
        return None
    return GeminiService(api_key)


def _suggestion_table(title: str, suggestions: list[Suggestion]) -> Table:
    table = Table(title=title)
    table.add_column("Field")
    table.add_column("Message")
    table.add_column("Action")
    for s in suggestions:
        table.add_row(s.field, s.message, s.action or "")
    return table


def _print_validation(result: PromptValidationResult) -> None:
    status = "[green]Valid[/green]" if result.is_valid else "[red]Invalid[/red]"
    console.print(
        Panel(
            f"[bold]Status:[/bold] {status}\n"
            f"[bold]Completeness:[/bold] {result.completeness}%",
            title="Validation",
            border_style="green" if result.is_valid else "red",
        ),
    )

    if result.conflicts:
        table = Table(title="Conflicts")
        table.add_column("Severity")
        table.add_column("Fields")
        table.add_column("Description")
        for c in result.conflicts:
            color = "red" if c.severity == "error" else "yellow"
            table.add_row(
                f"[{color}]{c.severity}[/{color}]",
                f"{c.field1} / {c.field2}",
                c.description,
            )
        console.print(table)

    if result.suggestions:
        console.print(_suggestion_table("Suggestions", result.suggestions))

    for warning in result.warnings:
        console.print(f"[yellow]Warning: {warning}[/yellow]")


@app.command()
def validate(
    spec_file: Path = typer.Argument(..., help="Path to a specification JSON file"),
    strict: bool = typer.Option(
        False,
        "--strict",
        help="Exit with code 1 when the specification has errors",
    ),
) -> None:
    """Check a specification for conflicts and missing elements."""
    spec = _load_spec(spec_file)
    result = validate_prompt(spec)
    _print_validation(result)

    optimizations = optimization_suggestions(spec)
    if optimizations:
        console.print(_suggestion_table("Optimizations", optimizations))

    for tip in prompt_tips(spec, result):
        console.print(f"- {tip}")

    if strict and not result.is_valid:
        raise typer.Exit(code=1)


@app.command()
def cost(
    spec_file: Path = typer.Argument(..., help="Path to a specification JSON file"),
    generations: int = typer.Option(
        0,
        min=0,
        help="Lifetime generation count of the user",
    ),
    model: ModelId | None = typer.Option(None, help="Target model"),
    shot_type: str | None = typer.Option(None, help="Selected shot type id"),
    wardrobe: str | None = typer.Option(None, help="Selected wardrobe id"),
    premium: bool = typer.Option(False, help="The aesthetic is a premium one"),
    credits: int | None = typer.Option(
        None,
        min=0,
        help="Current balance, to show upgrade hints",
    ),
) -> None:
    """Show the credit cost of a generation."""
    spec = _load_spec(spec_file)
    selections = GenerationSelections.from_specification(
        spec,
        generations,
        shot_type=shot_type,
        wardrobe=wardrobe,
        premium_aesthetic=premium,
        model=model,
    )
    breakdown = calculate_credit_cost(selections)

    lines = "\n".join(f"- {line}" for line in breakdown.breakdown)
    console.print(
        Panel(
            f"{lines}\n\n[bold]Total:[/bold] {breakdown.total_cost} credits",
            title="Credit Cost",
            border_style="cyan",
        ),
    )

    if credits is not None:
        message = conversion_message(credits, breakdown.total_cost, generations)
        if message:
            console.print(f"[magenta]{message}[/magenta]")


@app.command("format")
def format_command(
    spec_file: Path = typer.Argument(..., help="Path to a specification JSON file"),
    model: ModelId = typer.Option(ModelId.MIDJOURNEY, help="Target model"),
) -> None:
    """Print the prompt formatted for a model."""
    spec = _load_spec(spec_file)
    formatted = format_prompt(spec, model)
    console.rule(f"[bold blue]{formatted.model.value}")
    console.print(formatted.full_prompt, markup=False, soft_wrap=True)
    if formatted.parameters and formatted.model is ModelId.STABLE_DIFFUSION:
        console.print(f"Parameters: {formatted.parameters}", markup=False)


@app.command()
def generate(
    spec_file: Path = typer.Argument(..., help="Path to a specification JSON file"),
    model: ModelId | None = typer.Option(
        None,
        help="Target model (defaults to the specification's model)",
    ),
    user: str = typer.Option("local", help="User id to charge"),
    credits: int | None = typer.Option(
        None,
        min=0,
        help="Starting balance (defaults to VAULT_STARTING_CREDITS)",
    ),
    generations: int = typer.Option(
        0,
        min=0,
        help="Lifetime generation count of the user",
    ),
    unlimited: bool = typer.Option(False, help="User has an unlimited plan"),
    shot_type: str | None = typer.Option(None, help="Selected shot type id"),
    wardrobe: str | None = typer.Option(None, help="Selected wardrobe id"),
    offline: bool = typer.Option(False, help="Skip the LLM refinement call"),
    api_key: str | None = typer.Option(
        None,
        envvar="GEMINI_API_KEY",
        help="Google Gemini API Key",
    ),
    output: Path | None = typer.Option(None, help="Write the result as JSON here"),
) -> None:
    """Price, format and (optionally) refine a prompt, then charge for it."""
    spec = _load_spec(spec_file)
    settings = get_settings()

    try:
        ledger = CreditLedger(starting_credits=settings.starting_credits)
        ledger.open_account(
            user,
            settings.starting_credits if credits is None else credits,
            lifetime_generations=generations,
            is_unlimited=unlimited,
        )
        engine = PromptEngine(
            ledger,
            tracker=UsageTracker(limit=settings.usage_history_limit),
            refiner=None if offline else _get_service(api_key),
            cache=BalanceCache(ledger.balance, ttl=settings.balance_cache_ttl),
            refinement_config=settings.refinement_config(),
        )

        result = engine.generate(
            user,
            spec,
            model,
            shot_type=shot_type,
            wardrobe=wardrobe,
        )
    except InvalidPromptError as e:
        console.print(f"[bold red]Invalid prompt:[/bold red] {e}")
        raise typer.Exit(code=1) from e
    except InsufficientCreditsError as e:
        console.print(f"[bold red]Insufficient credits:[/bold red] {e}")
        raise typer.Exit(code=1) from e
    except Exception as e:
        console.print(f"[bold red]Fatal Error:[/bold red] {e}")
        raise typer.Exit(code=1) from e

    remaining = (
        "unlimited" if result.remaining_credits is None else result.remaining_credits
    )
    console.print(
        Panel(
            f"[bold]Model:[/bold] {result.formatted.model.value}\n"
            f"[bold]Cost:[/bold] {result.cost.total_cost} credits\n"
            f"[bold]Remaining:[/bold] {remaining}\n"
            f"[bold]Refined:[/bold] {'yes' if result.refined else 'no'}",
            title="Generation Complete",
            border_style="green",
        ),
    )
    console.rule("[bold blue]Prompt")
    console.print(result.prompt, markup=False, soft_wrap=True)
    if result.negative_prompt:
        console.rule("[bold blue]Negative")
        console.print(result.negative_prompt, markup=False, soft_wrap=True)
    console.rule("[bold blue]Hooks")
    for hook in result.hooks:
        console.print(f"- {hook}", markup=False, soft_wrap=True)
    console.print(f"Audio: {result.audio}", markup=False, soft_wrap=True)

    issues = result.validation_issues + result.sanity_check.issues
    if issues or result.sanity_check.suggestions:
        console.rule("[bold yellow]Review")
        for issue in issues:
            console.print(
                f"[yellow]{issue.severity}[/yellow] {issue.type}: {issue.message}",
            )
        for suggestion in result.sanity_check.suggestions:
            console.print(f"- {suggestion}")

    if output is not None:
        output.parent.mkdir(parents=True, exist_ok=True)
        with output.open("w") as f:
            f.write(result.model_dump_json(indent=2))
        console.print(f"Result saved to: [underline]{output.absolute()}[/underline]")


if __name__ == "__main__":
    app()
