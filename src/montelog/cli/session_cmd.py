"""CLI command for issuing an author session.

Prints a session id for the admin account that can be set as the session
cookie, e.g. when testing authoring endpoints with curl. Sessions live in
the cache, so this needs the shared Redis backend the server uses.

Usage:
    montelog issue-session admin@example.com
"""

from __future__ import annotations

import asyncio

import typer

from montelog.cache import is_memory_backend
from montelog.config import settings
from montelog.context import app_context
from montelog.errors import MontelogError

app = typer.Typer(help="Issue a login session for the admin account")


@app.callback(invoke_without_command=True)
def issue_session(
    email: str = typer.Argument(..., help="Admin email address"),
) -> None:
    """Create a session and print its id."""
    if is_memory_backend(settings):
        typer.echo(
            f"Cannot issue a session with cache backend {settings.cache_backend!r}: "
            "it would be discarded when this command exits. "
            "Set CACHE_BACKEND=redis and REDIS_URL to the server's Redis.",
            err=True,
        )
        raise typer.Exit(code=1)

    try:
        session_id = asyncio.run(_issue_session(email))
    except MontelogError as e:
        typer.echo(f"Could not issue session: {e}", err=True)
        raise typer.Exit(code=1) from e

    typer.echo(f"{settings.session_cookie_name}={session_id}")
    typer.echo(f"Expires in {settings.session_ttl} seconds")


async def _issue_session(email: str) -> str:
    async with app_context(settings) as context:
        session_id, _ = await context.auth.login(email)
        return session_id
