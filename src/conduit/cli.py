"""Command-line interface for Conduit."""

from __future__ import annotations

import asyncio
import logging
import mimetypes
import sys
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Awaitable, Callable, Optional, TypeVar

import click
from prompt_toolkit import PromptSession
from prompt_toolkit.formatted_text import HTML
from prompt_toolkit.history import FileHistory
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from conduit.api.client import OpenWebUIClient
from conduit.api.endpoints import normalize_base_url
from conduit.chat import ChatSession, ImageAttachment, pick_default_model
from conduit.config import ConduitConfig, load_config, save_config
from conduit.errors import ConduitError

console = Console()

T = TypeVar("T")

HISTORY_PATH = Path.home() / ".conduit" / "history"


@dataclass
class CliState:
    config: ConduitConfig
    config_path: Optional[Path]
    verbose: bool = False

    def save(self) -> None:
        self.config_path = save_config(self.config, self.config_path)


def _run(state: CliState, action: Callable[[OpenWebUIClient], Awaitable[T]]) -> T:
    """Run *action* against a fresh client; ConduitError exits with status 1."""

    async def runner() -> T:
        async with OpenWebUIClient(state.config.server, state.config.auth) as client:
            return await action(client)

    try:
        return asyncio.run(runner())
    except ConduitError as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        if state.verbose:
            console.print_exception()
        sys.exit(1)


def _read_image(path: str, mime: Optional[str]) -> ImageAttachment:
    p = Path(path)
    mime_type = mime or mimetypes.guess_type(p.name)[0] or "application/octet-stream"
    return ImageAttachment(filename=p.name, mime_type=mime_type, data=p.read_bytes())


def _print_delta(delta: str) -> None:
    console.print(delta, end="", highlight=False, markup=False)


@click.group()
@click.option("--config", "-c", "config_path", default=None,
              help="Path to conduit.yaml (auto-detected from CWD or ~/.conduit/)")
@click.option("--verbose", "-v", is_flag=True, help="Verbose logging")
@click.pass_context
def main(ctx: click.Context, config_path: Optional[str], verbose: bool) -> None:
    """Conduit - terminal client for Open WebUI servers."""
    logging.basicConfig(level=logging.DEBUG if verbose else logging.WARNING)
    try:
        config, resolved = load_config(config_path)
    except FileNotFoundError as e:
        raise click.ClickException(str(e)) from e
    ctx.obj = CliState(config=config, config_path=resolved, verbose=verbose)


# ---------------------------------------------------------------------------
# Settings
# ---------------------------------------------------------------------------

@main.command("set-server")
@click.argument("url")
@click.option("--api-key", default=None, help="Static API key (used when not signed in)")
@click.pass_obj
def set_server(state: CliState, url: str, api_key: Optional[str]) -> None:
    """Point Conduit at an Open WebUI server."""
    try:
        normalized = normalize_base_url(url)
    except ConduitError as e:
        raise click.ClickException(str(e)) from e
    state.config.server.base_url = url.strip()
    if api_key is not None:
        state.config.server.api_key = api_key
    state.save()
    console.print(f"[green]Server set to {normalized}[/green]")


@main.command()
@click.pass_obj
def status(state: CliState) -> None:
    """Show the current server, session and model."""
    server = state.config.server
    auth = state.config.auth
    try:
        normalized = str(normalize_base_url(server.base_url))
    except ConduitError as e:
        normalized = f"[red]{escape(str(e))}[/red]"
    console.print(f"Server: {escape(server.base_url)} [dim]({normalized})[/dim]")
    if auth.is_signed_in:
        console.print(f"Signed in as: {auth.email or '(unknown)'}")
    elif server.api_key:
        console.print("Auth: API key")
    else:
        console.print("[yellow]Not signed in[/yellow]")
    console.print(f"Model: {server.selected_model or '[dim](none)[/dim]'}")
    if state.config_path:
        console.print(f"[dim]Config: {state.config_path}[/dim]")


@main.command()
@click.argument("email")
@click.password_option(confirmation_prompt=False)
@click.pass_obj
def signin(state: CliState, email: str, password: str) -> None:
    """Sign in and store the session token."""
    token = _run(state, lambda client: client.sign_in(email, password))
    state.config.auth.token = token
    state.config.auth.email = email
    state.save()
    console.print("[green]Signed in successfully[/green]")


@main.command()
@click.pass_obj
def signout(state: CliState) -> None:
    """Forget the stored session token."""
    state.config.auth.sign_out()
    state.save()
    console.print("[dim]Signed out[/dim]")


@main.command()
@click.argument("model")
@click.pass_obj
def use(state: CliState, model: str) -> None:
    """Select the model used for chat."""
    state.config.server.selected_model = model
    state.save()
    console.print(f"[green]Model: {model}[/green]")


# ---------------------------------------------------------------------------
# Listings
# ---------------------------------------------------------------------------

@main.command()
@click.pass_obj
def models(state: CliState) -> None:
    """List models available on the server."""
    ids = _run(state, lambda client: client.fetch_models())
    selected = state.config.server.selected_model
    table = Table(title="Models")
    table.add_column("", width=1)
    table.add_column("Model")
    for model_id in ids:
        table.add_row("*" if model_id == selected else "", escape(model_id))
    console.print(table)
    if not selected and ids:
        state.config.server.selected_model = pick_default_model(ids, selected)
        state.save()
        console.print(f"[dim]Selected model: {state.config.server.selected_model}[/dim]")


def _listing_table(title: str, columns: list[str], rows: list[list[Any]]) -> Table:
    table = Table(title=title)
    for col in columns:
        table.add_column(col)
    for row in rows:
        table.add_row(*[escape(str(v)) if v is not None else "" for v in row])
    return table


@main.command()
@click.pass_obj
def notes(state: CliState) -> None:
    """List notes."""
    items = _run(state, lambda client: client.fetch_notes())
    console.print(_listing_table(
        "Notes", ["ID", "Title", "Content"],
        [[n.id, n.title or "Untitled", (n.content or "")[:80]] for n in items],
    ))


@main.command()
@click.pass_obj
def memories(state: CliState) -> None:
    """List memories."""
    items = _run(state, lambda client: client.fetch_memories())
    console.print(_listing_table(
        "Memories", ["ID", "Content"],
        [[m.id, m.content or ""] for m in items],
    ))


@main.command()
@click.pass_obj
def tools(state: CliState) -> None:
    """List tools (or functions on older servers)."""
    items = _run(state, lambda client: client.fetch_tools())
    console.print(_listing_table(
        "Tools", ["ID", "Name", "Description"],
        [[t.id, t.name or t.id, t.description or ""] for t in items],
    ))


@main.command()
@click.argument("path", type=click.Path(exists=True, dir_okay=False))
@click.option("--mime", default=None, help="MIME type (guessed from the file name if omitted)")
@click.pass_obj
def upload(state: CliState, path: str, mime: Optional[str]) -> None:
    """Upload a file attachment."""
    image = _read_image(path, mime)
    uploaded = _run(
        state,
        lambda client: client.upload_attachment(image.filename, image.mime_type, image.data),
    )
    console.print(f"[green]Uploaded {uploaded.filename or image.filename}[/green] id={uploaded.id}")
    if uploaded.url:
        console.print(f"[dim]{uploaded.url}[/dim]")


# ---------------------------------------------------------------------------
# Chat
# ---------------------------------------------------------------------------

async def _chat_repl(session: ChatSession, image: Optional[ImageAttachment]) -> None:
    HISTORY_PATH.parent.mkdir(parents=True, exist_ok=True)
    prompt = PromptSession(history=FileHistory(str(HISTORY_PATH)))
    console.print(f"[dim]Chatting with {session.model}. /clear resets, /quit exits.[/dim]")
    while True:
        try:
            user_input = (await prompt.prompt_async(HTML("<ansigreen><b>❯ </b></ansigreen>"))).strip()
        except (EOFError, KeyboardInterrupt):
            console.print("\n[dim]Goodbye![/dim]")
            return
        if not user_input:
            continue
        if user_input in ("/quit", "/exit"):
            console.print("[dim]Goodbye![/dim]")
            return
        if user_input == "/clear":
            session.clear()
            console.print("[dim]Conversation cleared[/dim]")
            continue
        try:
            start = time.monotonic()
            await session.send(user_input, image, on_delta=_print_delta)
            console.print(f"\n[dim]({time.monotonic() - start:.1f}s)[/dim]\n")
        except ConduitError as e:
            console.print(f"\n[red]Error: {escape(str(e))}[/red]")
        image = None


@main.command()
@click.argument("message", required=False)
@click.option("--model", "-m", default=None, help="Model id (defaults to the selected model)")
@click.option("--image", "-i", "image_path", default=None,
              type=click.Path(exists=True, dir_okay=False), help="Attach an image")
@click.pass_obj
def chat(state: CliState, message: Optional[str], model: Optional[str],
         image_path: Optional[str]) -> None:
    """Chat with a model; starts a REPL when MESSAGE is omitted."""
    model_id = model or state.config.server.selected_model
    if not model_id:
        raise click.ClickException("Pick a model first: conduit models / conduit use MODEL")
    image = _read_image(image_path, None) if image_path else None

    async def action(client: OpenWebUIClient) -> None:
        session = ChatSession(client, model_id)
        if message is None:
            await _chat_repl(session, image)
            return
        await session.send(message, image, on_delta=_print_delta)
        console.print()

    try:
        _run(state, action)
    except ValueError as e:
        raise click.ClickException(str(e)) from e


if __name__ == "__main__":
    main()
