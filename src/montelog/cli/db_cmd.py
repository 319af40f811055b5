"""CLI command for creating the database schema.

Usage:
    montelog init-db
"""

from __future__ import annotations

import asyncio

import typer

from montelog.config import settings
from montelog.persistence import Database

app = typer.Typer(help="Create Monte-Log database tables")


@app.callback(invoke_without_command=True)
def init_db() -> None:
    """Create all tables that do not exist yet."""
    asyncio.run(_init_db())
    typer.echo("Database tables created")


async def _init_db() -> None:
    database = Database.from_settings(settings)
    try:
        await database.create_all()
    finally:
        await database.close()
