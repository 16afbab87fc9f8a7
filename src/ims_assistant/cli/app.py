"""Command-line interface for the inventory assistant."""

import asyncio
import logging
import sys
from typing import Awaitable, Callable, Optional

import click
from rich.console import Console

from .renderer import OutputRenderer
from ..errors import IMSAssistantError
from ..main import create_orchestrator
from ..services.agent_service import AgentOrchestrator

logger = logging.getLogger(__name__)

EXIT_COMMANDS = {"exit", "quit", ":q"}


def configure_logging(verbose: bool) -> None:
    """
    Configure logging for CLI use.

    Args:
        verbose: DEBUG output instead of warnings only
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    # Suppress noisy HTTP client loggers
    for name in ("httpx", "httpcore", "openai"):
        logging.getLogger(name).setLevel(logging.INFO if verbose else logging.WARNING)


def _run(
    ctx: click.Context,
    action: Callable[[AgentOrchestrator, OutputRenderer], Awaitable[None]],
) -> None:
    """Build an orchestrator, run one async action, and always close it."""
    factory = ctx.obj["factory"]
    renderer: OutputRenderer = ctx.obj["renderer"]
    verbose: bool = ctx.obj["verbose"]

    async def runner() -> None:
        orchestrator = factory(seed_file=ctx.obj["seed_file"])
        try:
            await action(orchestrator, renderer)
        finally:
            await orchestrator.close()

    try:
        asyncio.run(runner())
    except KeyboardInterrupt:
        pass
    except IMSAssistantError as e:
        if verbose:
            logger.exception("Command failed")
        renderer.render_error(e)
        sys.exit(1)


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose logging")
@click.option(
    "--seed-file",
    type=click.Path(exists=True, dir_okay=False),
    help="JSON inventory document to load instead of the sample data",
)
@click.pass_context
def main(ctx: click.Context, verbose: bool, seed_file: Optional[str]) -> None:
    """
    IMS Assistant - chat with your inventory and sales data.

    One-shot question:
        ims-assistant chat shop-1 "Which products are low on stock?"

    Interactive session:
        ims-assistant chat shop-1
    """
    configure_logging(verbose)

    ctx.ensure_object(dict)
    ctx.obj.setdefault("factory", create_orchestrator)
    ctx.obj.setdefault("renderer", OutputRenderer(Console()))
    ctx.obj["verbose"] = verbose
    ctx.obj["seed_file"] = seed_file


@main.command()
@click.argument("thread_id")
@click.argument("message", required=False)
@click.option("--timeout", type=float, help="Seconds allowed for one turn")
@click.pass_context
def chat(ctx: click.Context, thread_id: str, message: Optional[str], timeout: Optional[float]) -> None:
    """Send MESSAGE to THREAD_ID, or start an interactive session."""

    async def action(orchestrator: AgentOrchestrator, renderer: OutputRenderer) -> None:
        if message is not None:
            response = await orchestrator.chat(thread_id, message, timeout=timeout)
            renderer.render_reply(response.content)
            return

        renderer.console.print(f"[dim]Thread {thread_id}. Type 'exit' to quit.[/dim]")
        while True:
            try:
                text = click.prompt("You", prompt_suffix="> ")
            except (click.Abort, EOFError):
                break
            if text.strip().lower() in EXIT_COMMANDS:
                break
            if not text.strip():
                continue

            try:
                response = await orchestrator.chat(thread_id, text, timeout=timeout)
            except IMSAssistantError as e:
                # One failed turn leaves the thread untouched; keep the session
                renderer.render_error(e)
                continue
            renderer.render_reply(response.content)

    _run(ctx, action)


@main.command()
@click.argument("thread_id")
@click.pass_context
def messages(ctx: click.Context, thread_id: str) -> None:
    """Show the conversation of THREAD_ID."""

    async def action(orchestrator: AgentOrchestrator, renderer: OutputRenderer) -> None:
        renderer.render_messages(await orchestrator.get_chat_messages(thread_id))

    _run(ctx, action)


@main.command()
@click.argument("thread_id")
@click.option("--limit", type=click.IntRange(min=1), help="Show only the newest N checkpoints")
@click.pass_context
def history(ctx: click.Context, thread_id: str, limit: Optional[int]) -> None:
    """List checkpoints of THREAD_ID, newest first."""

    async def action(orchestrator: AgentOrchestrator, renderer: OutputRenderer) -> None:
        renderer.render_history(thread_id, await orchestrator.get_history(thread_id, limit=limit))

    _run(ctx, action)


@main.command()
@click.argument("thread_id")
@click.pass_context
def state(ctx: click.Context, thread_id: str) -> None:
    """Print the current state of THREAD_ID as JSON."""

    async def action(orchestrator: AgentOrchestrator, renderer: OutputRenderer) -> None:
        renderer.render_state(await orchestrator.get_state(thread_id))

    _run(ctx, action)


@main.command()
@click.pass_context
def tools(ctx: click.Context) -> None:
    """List the tools the assistant can use."""

    async def action(orchestrator: AgentOrchestrator, renderer: OutputRenderer) -> None:
        renderer.render_tools(orchestrator.list_tools())

    _run(ctx, action)


if __name__ == "__main__":
    main()
