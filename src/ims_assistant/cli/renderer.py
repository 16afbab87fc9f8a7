"""Rich output rendering for the CLI."""

import logging
from typing import Any, Dict, List, Optional

from rich.console import Console
from rich.markdown import Markdown
from rich.panel import Panel
from rich.table import Table

from ..models.checkpoint_models import Checkpoint, ThreadState
from ..models.message_models import ChatMessage, MessageRole

logger = logging.getLogger(__name__)


class OutputRenderer:
    """
    Rich output renderer for CLI.

    Handles assistant replies, transcripts, history tables and errors.
    """

    def __init__(self, console: Optional[Console] = None):
        """
        Initialize output renderer.

        Args:
            console: Rich console (creates new if not provided)
        """
        self.console = console or Console()

    def render_reply(self, content: str) -> None:
        """Render an assistant reply as markdown."""
        if content:
            self.console.print(Markdown(content))
        else:
            self.console.print("[dim](no reply)[/dim]")

    def render_messages(self, messages: List[ChatMessage]) -> None:
        if not messages:
            self.console.print("[dim]No messages in this thread.[/dim]")
            return

        for message in messages:
            is_user = message.role == MessageRole.USER
            self.console.print(
                Panel(
                    Markdown(message.content),
                    title="You" if is_user else "Assistant",
                    subtitle=message.timestamp.strftime("%Y-%m-%d %H:%M:%S"),
                    border_style="cyan" if is_user else "green",
                )
            )

    def render_history(self, thread_id: str, checkpoints: List[Checkpoint]) -> None:
        """
        Render a thread's checkpoints as a table, newest first.

        Args:
            thread_id: Conversation thread
            checkpoints: Checkpoints, newest first
        """
        if not checkpoints:
            self.console.print(f"[dim]No checkpoints for thread {thread_id}.[/dim]")
            return

        table = Table(title=f"History of {thread_id}")
        table.add_column("Step", justify="right")
        table.add_column("Checkpoint")
        table.add_column("Created")
        table.add_column("Messages", justify="right")
        table.add_column("Round trips", justify="right")
        table.add_column("Limit hit")

        for checkpoint in checkpoints:
            metadata = checkpoint.metadata
            table.add_row(
                str(metadata.get("step", "")),
                checkpoint.checkpoint_id,
                checkpoint.created_at.strftime("%Y-%m-%d %H:%M:%S"),
                str(len(checkpoint.messages)),
                str(metadata.get("round_trips", "")),
                "yes" if metadata.get("limit_reached") else "",
            )

        self.console.print(table)

    def render_state(self, state: ThreadState) -> None:
        self.console.print_json(state.model_dump_json())

    def render_tools(self, tools: List[Dict[str, Any]]) -> None:
        table = Table(title="Available tools")
        table.add_column("Name", style="bold")
        table.add_column("Category")
        table.add_column("Arguments")
        table.add_column("Description")

        for tool in tools:
            properties = tool["parameters"].get("properties", {})
            required = set(tool["parameters"].get("required", []))
            arguments = ", ".join(
                f"{name}{'' if name in required else '?'}" for name in properties
            )
            table.add_row(tool["name"], tool.get("category", ""), arguments, tool["description"])

        self.console.print(table)

    def render_error(self, error: Exception) -> None:
        """
        Render error message.

        Args:
            error: Exception to render
        """
        self.console.print(f"[bold red]Error:[/bold red] {error}")
