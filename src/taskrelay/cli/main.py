import asyncio
import json
import typing as t
from pathlib import Path
from typing import Annotated

import httpx
import structlog
import typer
from pydantic import ValidationError
from rich import print
from rich.console import Console
from rich.markup import escape
from rich.progress import BarColumn, Progress, SpinnerColumn, TextColumn
from rich.table import Table

from taskrelay.cli.callbacks import load_file_callback, log_level_callback
from taskrelay.client import TaskClient
from taskrelay.config import ClientSettings
from taskrelay.context import ExecutionContext
from taskrelay.exceptions import TaskRelayError
from taskrelay.headers import create_default_api_headers
from taskrelay.progress import ProgressUpdate
from taskrelay.tools import DebugStats, create_tool_fn
from taskrelay.utils.files import read_instructions_file
from taskrelay.utils.logging import setup_logging

app = typer.Typer(no_args_is_help=True)

ApiTokenOption = Annotated[
    str | None,
    typer.Option(
        "--api-token",
        help="Task API token, defaults to $BROWSER_AI_API_TOKEN",
        rich_help_panel="Connection",
    ),
]
BaseUrlOption = Annotated[
    str | None,
    typer.Option(
        "--base-url",
        help="Task API base URL, defaults to $BROWSER_AI_BASE_URL or https://browser.ai",
        rich_help_panel="Connection",
    ),
]
LogLevelOption = Annotated[
    str,
    typer.Option(
        "--log-level",
        help="Log level",
        rich_help_panel="Logging",
        callback=log_level_callback,
    ),
]
JsonLogsOption = Annotated[
    bool,
    typer.Option(
        "--json-logs",
        help="Render logs as JSON",
        rich_help_panel="Logging",
    ),
]


def load_settings(**overrides: t.Any) -> ClientSettings:
    try:
        return ClientSettings.from_env(**overrides)
    except ValueError as error:
        print(f"[red]{escape(str(error))}[/red]")
        raise typer.Exit(code=1)


def print_debug_stats(debug_stats: DebugStats):
    table = Table("Tool", "Calls", title="Tool calls")
    for name, count in debug_stats.tool_calls.items():
        table.add_row(name, str(count))
    console = Console()
    console.print(table)


def run_with_progress(
    coro_fn: t.Callable[[ExecutionContext], t.Awaitable[t.Any]],
) -> t.Any:
    """Run a task coroutine while rendering its progress updates as a progress bar

    Args:
        coro_fn (Callable[[ExecutionContext], Awaitable[Any]]): Coroutine factory receiving the execution context

    Returns:
        Any: The coroutine result
    """
    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        transient=True,
    ) as progress:
        progress_task = progress.add_task("Waiting for task", total=100)

        def report(update: ProgressUpdate) -> None:
            progress.update(
                progress_task,
                completed=float(update["progress"]),
                total=float(update["total"]),
                description=update["message"],
            )

        context = ExecutionContext(
            log=structlog.get_logger("taskrelay.cli"),
            report_progress=report,
        )
        return asyncio.run(coro_fn(context))


@app.command(name="submit")
def submit_instructions(
    execution_id: Annotated[str, typer.Argument(help="The session execution ID")],
    instructions_file: Annotated[
        Path,
        typer.Option(
            "-i",
            "--instructions-file",
            help="JSON array or JSONL file of instructions",
            callback=load_file_callback,
        ),
    ],
    project: Annotated[
        str | None,
        typer.Option(
            "-p",
            "--project",
            help="Project name, defaults to $BROWSER_AI_PROJECT",
        ),
    ] = None,
    api_token: ApiTokenOption = None,
    base_url: BaseUrlOption = None,
    debug_stats_flag: Annotated[
        bool,
        typer.Option(
            "--debug-stats",
            help="Print tool call counters after the run",
        ),
    ] = False,
    log_level: LogLevelOption = "WARNING",
    json_logs: JsonLogsOption = False,
):
    """Send instructions to a session and wait for the task result"""
    setup_logging(level=log_level, json_logs=json_logs)
    settings = load_settings(api_token=api_token, base_url=base_url, project_name=project)
    try:
        instructions = read_instructions_file(instructions_file)
    except ValueError as error:
        print(f"[red]{escape(str(error))}[/red]")
        raise typer.Exit(code=1)
    client = TaskClient.from_settings(settings)
    headers_fn = create_default_api_headers(settings.api_token)
    debug_stats = DebugStats()
    tool = create_tool_fn(debug_stats)

    async def send(params: dict, context: ExecutionContext) -> dict:
        return await client.send_session_instructions(
            params["execution_id"],
            params["instructions"],
            headers_fn,
            context,
            params["project_name"],
        )

    send_tool = tool("send_session_instructions", send)
    params = {
        "execution_id": execution_id,
        "instructions": instructions,
        "project_name": settings.project_name,
    }
    try:
        envelope = run_with_progress(lambda context: send_tool(params, context))
    except (TaskRelayError, json.JSONDecodeError, ValidationError) as error:
        print(f"[red]{escape(str(error))}[/red]")
        raise typer.Exit(code=1)
    finally:
        if debug_stats_flag:
            print_debug_stats(debug_stats)
    for item in envelope["content"]:
        typer.echo(item["text"])


@app.command(name="poll")
def poll_task(
    task_id: Annotated[str, typer.Argument(help="The task ID to poll")],
    api_token: ApiTokenOption = None,
    base_url: BaseUrlOption = None,
    log_level: LogLevelOption = "WARNING",
    json_logs: JsonLogsOption = False,
):
    """Poll an existing task until it reaches a terminal status"""
    setup_logging(level=log_level, json_logs=json_logs)
    settings = load_settings(api_token=api_token, base_url=base_url)
    client = TaskClient.from_settings(settings)
    headers_fn = create_default_api_headers(settings.api_token)
    try:
        result = run_with_progress(
            lambda context: client.poll_task_result(task_id, headers_fn, context)
        )
    except (TaskRelayError, httpx.HTTPError, json.JSONDecodeError, ValidationError) as error:
        print(f"[red]{escape(str(error))}[/red]")
        raise typer.Exit(code=1)
    typer.echo(json.dumps({"executionId": task_id, "result": result}, indent=2))
