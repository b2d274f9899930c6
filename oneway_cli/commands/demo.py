"""
Demo command: drive the reference To-Do feature and print its trace
"""

import asyncio
import json
from typing import List, Optional, Tuple

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from oneway.core import Cancel
from oneway.examples.todo import Add, Delete, ReserveToDo, ToDoFeature, ToDoState
from oneway.logging_config import setup_logging
from oneway.runtime.container import OneWay
from oneway.trace import TraceEvent

console = Console()

DEFAULT_ITEMS = ["Buy milk", "Walk the dog"]


async def run_demo(
    items: List[str],
    delete: Optional[int] = None,
    reserve: Optional[float] = None,
    cancel: bool = False,
) -> Tuple[ToDoState, List[TraceEvent]]:
    """
    Run one scripted session against a fresh container.

    Each send gets its own delivery tick, so every dispatch is traced and
    committed separately.
    """
    oneway = OneWay(ToDoFeature, ToDoState(), context="demo")
    events: List[TraceEvent] = []
    oneway.tracer.events.subscribe(lambda event: events.append(event), replay=False)

    for text in items:
        oneway.send(Add(text), trace=True)
        await asyncio.sleep(0)

    if delete is not None:
        oneway.send(Delete(delete), trace=True)
        await asyncio.sleep(0)

    if reserve is not None:
        action = ReserveToDo(reserve)
        oneway.send(action, trace=True)
        if cancel:
            oneway.send(Cancel(action))
        await asyncio.sleep(reserve + 0.05)

    await asyncio.sleep(0)
    state = oneway.state
    oneway.close()
    return state, events


def demo_command(
    items: Optional[List[str]] = typer.Option(None, "--add", "-a", help="To-do to add (repeatable)"),
    delete: Optional[int] = typer.Option(None, "--delete", "-d", help="Index to delete after adding"),
    reserve: Optional[float] = typer.Option(None, "--reserve", "-r", help="Reserve a to-do after SECONDS"),
    cancel: bool = typer.Option(False, "--cancel", help="Cancel the reservation right away"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """
    Run the To-Do feature through a container with tracing enabled.

    Examples:
        oneway demo
        oneway demo --add "Call mom" --delete 0
        oneway demo --reserve 0.5
        oneway demo --reserve 0.5 --cancel --json
    """
    setup_logging(level="WARNING", fmt="text")

    state, events = asyncio.run(run_demo(items or DEFAULT_ITEMS, delete, reserve, cancel))

    if json_output:
        output = {
            "todos": list(state.todos),
            "traces": [
                {
                    "action": repr(event.action),
                    "changes": [
                        {"name": c.name, "old": repr(c.old), "new": repr(c.new)}
                        for c in event.changes
                    ],
                }
                for event in events
            ],
        }
        print(json.dumps(output, indent=2))
        raise typer.Exit(0)

    for event in events:
        console.print(escape(event.render()))

    table = Table(title="To-Dos")
    table.add_column("#", style="cyan", justify="right")
    table.add_column("To-Do", style="green")
    for idx, text in enumerate(state.todos):
        table.add_row(str(idx), text)
    console.print(table)
