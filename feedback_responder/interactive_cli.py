#!/usr/bin/env python3
"""Interactive CLI for trying out the feedback responder.

This allows users to:
1. Enter feedback (and optionally price and rating) in the terminal
2. See the detected sentiment and the reply the customer would get
3. Browse recently stored responses
"""
import asyncio
import sys
from typing import Optional

from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.prompt import Prompt
from rich.table import Table

from config import config
from database import ResponseStore
from reply_generator import GeminiReplyGenerator
from responder import FeedbackResponder
from schemas import FeedbackRequest, ResponsePayload
from sentiment_classifier import RobertaSentimentClassifier


console = Console()

SENTIMENT_STYLES = {"Positive": "green", "Negative": "red", "Neutral": "yellow"}


def parse_optional_number(value: str) -> Optional[float]:
    """Parse a prompt answer, empty meaning 'not given'."""
    value = value.strip()
    return float(value) if value else None


class InteractiveResponderCLI:
    """Interactive front end for FeedbackResponder."""

    def __init__(self, responder: FeedbackResponder, store: Optional[ResponseStore] = None):
        self.responder = responder
        self.store = store

    def display_result(self, payload: ResponsePayload):
        """Display the payload in a table and the reply in a panel."""
        style = SENTIMENT_STYLES.get(payload.sentiment, "white")

        table = Table(
            title="📊 Feedback Analysis",
            box=box.ROUNDED,
            show_header=True,
            header_style="bold magenta"
        )
        table.add_column("Attribute", style="cyan", width=20)
        table.add_column("Value")

        table.add_row("Sentiment", f"[{style}]{payload.sentiment}[/{style}]")
        table.add_row("Confidence", f"{payload.confidence:g}%")
        table.add_row("Rating", "★" * payload.rating)
        table.add_row("Reply Source", "template (offline)" if payload.offline else "Gemini")
        if payload.key_insights:
            table.add_row("Key Insights", "\n".join(f"• {i}" for i in payload.key_insights))
        if payload.keywords:
            table.add_row("Keywords", ", ".join(payload.keywords))

        console.print(table)
        console.print(Panel(
            payload.customer_response,
            title="💬 Reply to customer",
            border_style=style,
            padding=(1, 2)
        ))

    async def display_history(self):
        """Show the most recent stored responses."""
        if self.store is None:
            console.print("[yellow]⚠️  Response history is disabled[/yellow]")
            return

        table = Table(title="🗂  Recent Responses", box=box.SIMPLE_HEAVY)
        table.add_column("ID", style="dim")
        table.add_column("Sentiment")
        table.add_column("Feedback", overflow="fold")
        table.add_column("Offline")

        for response in await self.store.recent(10):
            style = SENTIMENT_STYLES.get(response.sentiment, "white")
            table.add_row(
                str(response.id),
                f"[{style}]{response.sentiment}[/{style}]",
                response.feedback[:80],
                "yes" if response.offline else "no"
            )
        console.print(table)

    def display_welcome(self):
        """Display welcome message."""
        mode = "[green]Gemini[/green]" if self.responder.generation_enabled else "[yellow]templates only[/yellow]"
        welcome = f"""
[bold cyan]Customer Feedback Responder[/bold cyan]
[dim]Interactive CLI Mode[/dim]

Replies: {mode}
Type [bold]history[/bold] to see stored responses, [bold]quit[/bold] to exit.
        """
        console.print(Panel(welcome, border_style="bold blue", box=box.DOUBLE, padding=(1, 2)))

    async def run_interactive(self):
        """Run the interactive CLI loop."""
        self.display_welcome()

        while True:
            console.print()
            feedback_text = Prompt.ask("Your feedback")

            if feedback_text.lower() in ['quit', 'exit', 'q']:
                console.print("\n[cyan]Goodbye![/cyan]\n")
                break

            if feedback_text.lower() == 'history':
                await self.display_history()
                continue

            if not feedback_text.strip():
                console.print("[red]⚠️  Feedback cannot be empty[/red]")
                continue

            try:
                request = FeedbackRequest(
                    feedback=feedback_text,
                    price=parse_optional_number(Prompt.ask("Price [dim](optional)[/dim]", default="")),
                    rating=parse_optional_number(Prompt.ask("Rating 0-5 [dim](optional)[/dim]", default=""))
                )
            except ValueError as e:
                console.print(f"[red]⚠️  Invalid input: {e}[/red]")
                continue

            with console.status("[bold]Processing your feedback...[/bold]"):
                payload = await self.responder.respond(request)

            self.display_result(payload)

            if self.store is not None:
                try:
                    record = await self.store.save(request, payload)
                    console.print(f"\n[dim]💾 Saved to database with ID: {record.id}[/dim]")
                except Exception as e:
                    console.print(f"\n[yellow]⚠️  Could not save to database: {e}[/yellow]")


async def main():
    """Main entry point."""
    store = ResponseStore(config.DATABASE_URL) if config.STORE_RESPONSES else None
    if store is not None:
        console.print("[cyan]Initializing database...[/cyan]")
        await store.init()

    classifier = RobertaSentimentClassifier(config)
    with console.status("[cyan]Loading sentiment model...[/cyan]"):
        await asyncio.to_thread(classifier.load)

    responder = FeedbackResponder(config, classifier, GeminiReplyGenerator(config))
    cli = InteractiveResponderCLI(responder, store)

    try:
        await cli.run_interactive()
    except KeyboardInterrupt:
        console.print("\n\n[cyan] Goodbye![/cyan]\n")
        sys.exit(0)
    finally:
        if store is not None:
            await store.close()


if __name__ == "__main__":
    asyncio.run(main())
