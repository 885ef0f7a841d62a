from pathlib import Path

import typer

from taskrelay.cli.enums import LogLevel


def load_file_callback(ctx: typer.Context, value: Path):
    if ctx.resilient_parsing:
        return
    if not value.exists():
        raise typer.BadParameter(
            message=f"file at path: '{value.as_posix()}' does not exist",
        )
    return value


def log_level_callback(ctx: typer.Context, value: str):
    if ctx.resilient_parsing:
        return
    if value.upper() not in LogLevel.__members__.values():
        raise typer.BadParameter(
            message=f"'{value}' is not a valid log level, supported levels are: {', '.join(LogLevel.__members__.values())}",
            param_hint="--log-level",
        )
    return value.upper()
