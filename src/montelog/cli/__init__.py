"""CLI commands for Monte-Log.

Provides command-line interface using Typer:
- montelog serve: Run the API server
- montelog init-db: Create database tables
- montelog run-job: Run a scheduled job once
- montelog issue-session: Issue an admin login session

Usage:
    montelog --help
    montelog serve --port 3000
    montelog run-job refresh_post_cache
"""

import typer

from montelog.cli.db_cmd import app as db_app
from montelog.cli.job_cmd import app as job_app
from montelog.cli.serve import app as serve_app
from montelog.cli.session_cmd import app as session_app

app = typer.Typer(
    name="montelog",
    help="Monte-Log: personal blog backend",
    no_args_is_help=True,
)

app.add_typer(serve_app, name="serve")
app.add_typer(db_app, name="init-db")
app.add_typer(job_app, name="run-job")
app.add_typer(session_app, name="issue-session")


@app.callback()
def callback() -> None:
    """Monte-Log: personal blog backend."""
    pass


def main() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
