"""Command-line interface for formproof."""

from datetime import timedelta
from typing import Annotated

import typer
from rich.console import Console
from rich.table import Table

from formproof.auth.tokens import TokenService
from formproof.forms import known_forms
from formproof.ledger.service import LedgerService
from formproof.logging_config import configure_logging, get_logger
from formproof.referral.service import ReferralService
from formproof.storage.db import get_database
from formproof.verification.evidence import has_google_forms_evidence

# Configure logging
configure_logging()
logger = get_logger(__name__)

# Create Typer app
app = typer.Typer(
    name="formproof",
    help="formproof - proof-of-completion verification and points ledger",
    no_args_is_help=True,
)

# Rich console for pretty output
console = Console()


@app.command("init-db")
def init_database() -> None:
    """Initialize the database and create tables."""
    console.print("[bold blue]Initializing database...[/bold blue]")
    get_database().create_tables()
    console.print("[bold green]✓[/bold green] Database initialized successfully")


@app.command("drop-db")
def drop_database(
    yes: Annotated[bool, typer.Option("--yes", "-y", help="Skip confirmation")] = False,
) -> None:
    """Drop all tables."""
    if not yes and not typer.confirm("Drop all tables?"):
        raise typer.Abort()
    get_database().drop_tables()
    console.print("[bold yellow]✓[/bold yellow] Tables dropped")


@app.command("forms")
def list_forms() -> None:
    """List the forms that can be verified."""
    table = Table(title="Forms")
    table.add_column("Form ID", style="cyan")
    table.add_column("Points", justify="right")

    for form_id, points in known_forms().items():
        table.add_row(form_id, str(points))

    console.print(table)


@app.command("record-visit")
def record_visit(
    code: Annotated[str, typer.Argument(help="Referral code")],
) -> None:
    """Record a visit of a referral link."""
    visit_count = ReferralService(get_database()).record_visit(code)
    console.print(f"[bold green]✓[/bold green] {code}: {visit_count} visit(s)")


@app.command("show-user")
def show_user(
    uid: Annotated[str, typer.Argument(help="User identity")],
) -> None:
    """Show points, completions and proofs of a user."""
    summary = LedgerService(get_database()).get_summary(uid)

    console.print(f"[bold]{summary.uid}[/bold]  points: [bold]{summary.points}[/bold]  ref code: {summary.ref_code}")

    if not summary.proofs:
        console.print("[yellow]No proofs submitted[/yellow]")
        return

    table = Table(title="Proofs")
    table.add_column("Form", style="cyan")
    table.add_column("Status")
    table.add_column("Completed")
    table.add_column("Submitted At")
    table.add_column("URL", overflow="fold")

    for form_id, proof in sorted(summary.proofs.items()):
        table.add_row(
            form_id,
            proof.status,
            "yes" if summary.completions.get(form_id) else "no",
            proof.submitted_at.strftime("%Y-%m-%d %H:%M") if proof.submitted_at else "-",
            proof.url,
        )

    console.print(table)


@app.command("classify")
def classify(
    text: Annotated[str, typer.Argument(help="Recognized text to test")],
) -> None:
    """Test text against the Google Forms evidence heuristics."""
    if has_google_forms_evidence(text):
        console.print("[bold green]verified[/bold green]")
    else:
        console.print("[bold red]rejected[/bold red]")


@app.command("issue-token")
def issue_token(
    uid: Annotated[str, typer.Argument(help="User identity")],
    email: Annotated[str, typer.Option("--email", "-e", help="Email claim")] = "",
    hours: Annotated[int, typer.Option("--hours", help="Validity in hours")] = 2,
) -> None:
    """Issue a bearer token for local testing."""
    token = TokenService().create_access_token(uid, email=email, expires_delta=timedelta(hours=hours))
    typer.echo(token)


if __name__ == "__main__":
    app()
