"""CLI interface using Typer + Rich."""

import openai
import typer
from rich.console import Console
from rich.panel import Panel
from rich.prompt import Prompt
from rich.table import Table

from dealroom.core.config import Settings
from dealroom.core.errors import NegotiationError
from dealroom.core.models import Speaker
from dealroom.core.observability import configure_logging
from dealroom.core.orchestrator import Orchestrator
from dealroom.core.registry import PersonaRegistry
from dealroom.core.summary import SummaryRecord

app = typer.Typer(help="Time-boxed negotiation practice")
console = Console()

SPEAKER_STYLES = {
    Speaker.USER: ("You", "cyan"),
    Speaker.COUNTERPART: ("Counterpart", "magenta"),
    Speaker.SYSTEM: ("System", "yellow"),
}


def _format_delta(delta) -> str:
    if delta is None:
        return "-"
    return f"{delta.total_seconds() / 60:.1f} min"


def _format_money(value) -> str:
    if value is None:
        return "-"
    if isinstance(value, (int, float)):
        return f"${value:,.0f}"
    return str(value)


def _summary_table(records: list[SummaryRecord]) -> Table:
    table = Table(title="Negotiation summaries")
    for column in (
        "Name",
        "Email",
        "Phase",
        "First offer",
        "By",
        "Counteroffer",
        "Agreement",
        "To counter",
        "To agreement",
    ):
        table.add_column(column)

    for r in records:
        table.add_row(
            r.name,
            r.email,
            r.phase.value,
            _format_money(r.first_offer),
            r.first_offer_by.value if r.first_offer_by else "-",
            _format_money(r.counter_offer),
            _format_money(r.agreement_terms) if r.agreement_reached else "no",
            _format_delta(r.time_to_counter),
            _format_delta(r.time_to_agreement),
        )
    return table


def _print_transcript(orchestrator: Orchestrator, session_key: str) -> None:
    for turn in orchestrator.get_transcript(session_key):
        label, color = SPEAKER_STYLES[turn.speaker]
        console.print(
            f"[dim]{turn.timestamp:%H:%M:%S}[/dim] [bold {color}]{label}:[/bold {color}] {turn.text}"
        )


@app.command()
def chat(
    name: str = typer.Option(..., help="Participant name"),
    email: str = typer.Option(..., help="Participant email (session key)"),
    code: str = typer.Option(..., help="Access code"),
    persona: str = typer.Option("seller", help="Counterpart persona ID"),
):
    """Negotiate with the counterpart persona."""
    settings = Settings.from_env()
    configure_logging(settings.log_level, settings.log_format)
    try:
        orchestrator = Orchestrator(settings=settings)
    except openai.OpenAIError as exc:
        console.print(Panel(str(exc), title="[bold red]OpenAI client unavailable[/bold red]", border_style="red"))
        raise typer.Exit(1)

    try:
        handle = orchestrator.start_session(name, email, code, persona_id=persona)
    except NegotiationError as exc:
        console.print(Panel(str(exc), title="[bold red]Could not start[/bold red]", border_style="red"))
        raise typer.Exit(1)

    minutes = orchestrator.store.get(handle.session_key).negotiation_window.total_seconds() / 60
    console.print(
        Panel(
            f"[bold green]Negotiation started[/bold green]\n"
            f"Participant: {name} | You have {minutes:.0f} minutes to reach a deal.",
            title="Welcome",
        )
    )
    console.print(
        "[dim]Type your message. '/summary' and '/transcript' show progress; "
        "Ctrl+C or 'exit' to quit.[/dim]\n"
    )

    while True:
        try:
            user_input = Prompt.ask("[bold cyan]You[/bold cyan]")
        except (KeyboardInterrupt, EOFError):
            console.print("\n[dim]Leaving...[/dim]")
            break

        command = user_input.strip().lower()
        if command in ("exit", "quit"):
            break
        if not command:
            continue
        if command == "/summary":
            console.print(_summary_table(orchestrator.get_summaries()))
            continue
        if command == "/transcript":
            _print_transcript(orchestrator, handle.session_key)
            continue

        try:
            with console.status("[bold yellow]Thinking...[/bold yellow]"):
                reply = orchestrator.submit_turn(handle.session_key, user_input)
        except NegotiationError as exc:
            console.print(f"[bold red]{exc}[/bold red]")
            continue

        console.print(
            Panel(reply, title="[bold magenta]Counterpart[/bold magenta]", border_style="magenta")
        )

    console.print(_summary_table(orchestrator.get_summaries()))


@app.command()
def personas():
    """List available counterpart personas."""
    registry = PersonaRegistry(Settings.from_env())
    for p in registry.list_personas():
        minutes = p.negotiation_window.total_seconds() / 60
        console.print(f"[bold]{p.persona_id}[/bold] | {p.name} | window: {minutes:.0f} min")
