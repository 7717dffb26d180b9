"""CLI commands for inspecting persisted agent memory."""

import asyncio
import json
from pathlib import Path
from typing import Optional

import typer

from agentmem.config.loader import load_config
from agentmem.errors import PersistenceError
from agentmem.logging import bind_agent, setup_logging
from agentmem.memory.persistence import PersistenceLayer
from agentmem.vector.qdrant import QdrantIndex

app = typer.Typer(
    name="agentmem",
    help="Inspect agent conversational memory",
    no_args_is_help=True,
)


def _persistence(agent: str, bots_dir: Path | None) -> PersistenceLayer:
    root = bots_dir or Path(load_config().memory.bots_dir)
    return PersistenceLayer(root, agent)


@app.command()
def show(
    agent: str = typer.Argument(..., help="Agent name"),
    bots_dir: Optional[Path] = typer.Option(None, "--bots-dir", help="Directory holding per-agent state"),
) -> None:
    """Print the saved dialogue window and memory text of an agent."""
    try:
        with bind_agent(agent):
            snapshot = _persistence(agent, bots_dir).load()
    except PersistenceError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)
    if snapshot is None:
        typer.echo(f"No memory file found for {agent}.")
        raise typer.Exit(1)

    typer.echo(f"Memory: {snapshot.memory_text or '(empty)'}")
    typer.echo(f"Turns: {len(snapshot.turns)}")
    for t in snapshot.turns:
        typer.echo(f"  [{t.role}] {t.content}")


@app.command()
def histories(
    agent: str = typer.Argument(..., help="Agent name"),
    bots_dir: Optional[Path] = typer.Option(None, "--bots-dir", help="Directory holding per-agent state"),
) -> None:
    """List audit logs of evicted turns, newest first."""
    files = _persistence(agent, bots_dir).list_audit_files()
    if not files:
        typer.echo(f"No histories found for {agent}.")
        return
    for path in files:
        try:
            count = len(json.loads(path.read_text(encoding="utf-8")))
        except (OSError, ValueError, TypeError):
            typer.echo(f"{path.name}: unreadable")
            continue
        typer.echo(f"{path.name}: {count} turns")


@app.command("init-index")
def init_index(
    vector_size: Optional[int] = typer.Option(None, "--vector-size", help="Embedding dimension (defaults to config)"),
) -> None:
    """Create the vector collection used for long-term memory."""
    setup_logging(json_output=False)
    config = load_config()
    index = QdrantIndex.from_config(config.vector)
    ok = asyncio.run(index.ensure_collection(vector_size or config.vector.vector_size))
    if not ok:
        typer.echo(f"Failed to create collection {index.collection}", err=True)
        raise typer.Exit(1)
    typer.echo(f"Collection {index.collection} is ready")


if __name__ == "__main__":
    app()
