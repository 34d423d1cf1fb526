import asyncio
import json
import logging
from typing import Optional

import typer
from rich.console import Console
from rich.live import Live
from rich.prompt import Prompt
from rich.spinner import Spinner
from rich.table import Table
from typing_extensions import Annotated

from renoma.client.renoma import Renoma
from renoma.domains.messages import Character
from renoma.plugins.errors import PluginError
from renoma.services.events import parse_frame

# --- Basic Logging Configuration ---
logging.basicConfig(level=logging.WARNING, format="%(levelname)s:%(name)s:%(message)s")
# --- End Logging Configuration ---

app = typer.Typer()
console = Console()


@app.callback()
def main(
    verbose: Annotated[
        bool, typer.Option("--verbose", "-v", help="Enable info logging.")
    ] = False,
):
    """Renoma plugin host."""
    if verbose:
        logging.getLogger().setLevel(logging.INFO)


def _load_client(config: str) -> Renoma:
    try:
        return Renoma(config_path=config)
    except FileNotFoundError:
        console.print(
            f"[bold red]Error:[/bold red] Configuration file not found at '{config}'"
        )
        raise typer.Exit(code=1)
    except ValueError as e:
        console.print(f"[bold red]Error loading configuration:[/bold red] {e}")
        raise typer.Exit(code=1)


async def _list_plugins(client: Renoma) -> None:
    await client.start()
    try:
        table = Table(title="Plugins")
        table.add_column("Name", style="bold")
        table.add_column("Version")
        table.add_column("Enabled")
        table.add_column("Tools")
        table.add_column("Description", style="dim")
        for manifest in client.list_plugins():
            table.add_row(
                manifest.name,
                manifest.version,
                "yes" if manifest.enabled else "no",
                ", ".join(t.name for t in manifest.tools),
                manifest.description,
            )
        console.print(table)
    finally:
        await client.shutdown()


@app.command()
def plugins(
    config: Annotated[
        str, typer.Option(help="Path to the configuration JSON file.")
    ] = "config.json",
):
    """List the plugins found in the plugin directory."""
    client = _load_client(config)
    asyncio.run(_list_plugins(client))


async def _call_tool(client: Renoma, name: str, arguments: dict) -> None:
    await client.start()
    try:
        result = await client.call_tool(name, arguments)
        console.print_json(json.dumps(result))
    except PluginError as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(code=1)
    finally:
        await client.shutdown()


@app.command("call-tool")
def call_tool(
    name: Annotated[str, typer.Argument(help="Name of the tool to call.")],
    args: Annotated[
        str, typer.Option("--args", help="Tool arguments as a JSON object.")
    ] = "{}",
    config: Annotated[
        str, typer.Option(help="Path to the configuration JSON file.")
    ] = "config.json",
):
    """Call a plugin tool directly and print its result."""
    try:
        arguments = json.loads(args)
    except json.JSONDecodeError as e:
        console.print(f"[bold red]Invalid --args JSON:[/bold red] {e}")
        raise typer.Exit(code=1)
    client = _load_client(config)
    asyncio.run(_call_tool(client, name, arguments))


async def stream_chat_response(client: Renoma, chat_id, message: str) -> None:
    """Helper function to stream and display one completion."""
    full_response = ""
    with Live(console=console, refresh_per_second=10, transient=True) as live:
        live.update(Spinner("dots", "Thinking..."))
        async for frame in client.process(chat_id, message):
            kind, payload = parse_frame(frame)
            if kind == "text":
                full_response += payload
                live.update(full_response)
            elif kind == "tool_calls":
                for call in payload:
                    live.console.print(
                        f"[dim]-> {call['function']['name']}({call['function']['arguments']})[/dim]"
                    )
            elif kind == "tool_result":
                if "error" in payload:
                    live.console.print(f"[yellow]<- {payload['error']}[/yellow]")
                else:
                    live.console.print(f"[dim]<- {payload['result']}[/dim]")
                full_response = ""
            elif kind == "error":
                live.console.print(f"[bold red]Error:[/bold red] {payload}")

    if full_response:
        console.print(f"[bright_blue]Character:[/bright_blue] {full_response}")


async def _chat_session(client: Renoma, character: Character) -> None:
    loaded = await client.start()
    console.print(f"[green]Loaded plugins:[/green] {', '.join(loaded) or 'none'}")
    chat = await client.create_chat(character)
    if character.first_message:
        console.print(
            f"[bright_blue]{character.name}:[/bright_blue] {character.first_message}"
        )
    try:
        while True:
            user_message = await asyncio.to_thread(
                Prompt.ask, "[bold green]You[/bold green]"
            )
            if user_message.lower() in ["exit", "quit"]:
                console.print("[yellow]Exiting chat session.[/yellow]")
                break
            if not user_message.strip():
                continue
            try:
                await stream_chat_response(client, chat.id, user_message)
            except Exception as loop_error:
                console.print(
                    f"[bold red]An error occurred in the chat loop:[/bold red] {loop_error}"
                )
    finally:
        await client.shutdown()


@app.command()
def chat(
    config: Annotated[
        str, typer.Option(help="Path to the configuration JSON file.")
    ] = "config.json",
    name: Annotated[str, typer.Option(help="Character name.")] = "Assistant",
    description: Annotated[
        Optional[str], typer.Option(help="Character description.")
    ] = None,
    scenario: Annotated[Optional[str], typer.Option(help="Chat scenario.")] = None,
):
    """
    Start an interactive chat session with a character.
    Type 'exit' or 'quit' to end the session.
    """
    client = _load_client(config)
    character = Character(
        name=name, description=description or "", scenario=scenario or ""
    )
    console.print("[dim]Type 'exit' or 'quit' to end.[/dim]")
    try:
        asyncio.run(_chat_session(client, character))
    except KeyboardInterrupt:
        console.print("\n[yellow]Exiting chat session (KeyboardInterrupt).[/yellow]")


if __name__ == "__main__":
    app()
