"""CLI command for running a scheduled job once.

Usage:
    montelog run-job refresh_post_cache
    montelog run-job clear_visitor_gates
"""

from __future__ import annotations

import asyncio

import typer

from montelog.config import settings
from montelog.context import app_context

app = typer.Typer(help="Run a scheduled job immediately")


@app.callback(invoke_without_command=True)
def run_job(
    name: str = typer.Argument(..., help="Job name, e.g. refresh_post_cache"),
) -> None:
    """Run one registered job outside its schedule."""
    succeeded = asyncio.run(_run_job(name))
    if succeeded:
        typer.echo(f"Job {name} completed")
    else:
        typer.echo(f"Job {name} failed", err=True)
        raise typer.Exit(code=1)


async def _run_job(name: str) -> bool:
    async with app_context(settings) as context:
        try:
            return await context.scheduler.run_now(name)
        except KeyError:
            known = ", ".join(job.name for job in context.scheduler.list_jobs())
            typer.echo(f"Unknown job {name!r}. Known jobs: {known}", err=True)
            return False
