"""CivicHub CLI -- operator tooling for users, review queues and moderation rules."""

import logging
from functools import wraps

import click
from rich.console import Console
from rich.table import Table

from civichub import __version__
from civichub.auth.models import Role, User
from civichub.config import get_settings
from civichub.errors import CivicHubError, NotFound
from civichub.platform import Platform
from civichub.store import JsonFileStore

console = Console()


def _platform() -> Platform:
    return click.get_current_context().find_object(Platform)


def _reviewer(platform: Platform, email: str) -> User:
    user = platform.users.get_user_by_email(email)
    if user is None:
        raise NotFound(f"No user with email '{email}'")
    return user


def _reports_errors(fn):
    """Print CivicHub errors in red and exit non-zero instead of a traceback."""

    @wraps(fn)
    def wrapper(*args, **kwargs):
        try:
            return fn(*args, **kwargs)
        except CivicHubError as exc:
            console.print(f"[red]Error:[/] {exc.message}")
            raise SystemExit(1) from exc

    return wrapper


@click.group()
@click.version_option(version=__version__)
@click.option(
    "--data-dir",
    envvar="CIVICHUB_DATA_DIR",
    default=None,
    type=click.Path(file_okay=False),
    help="Directory holding the JSON store (default: ~/.civichub)",
)
@click.pass_context
def main(ctx: click.Context, data_dir):
    """CivicHub -- community platform administration."""
    settings = get_settings()
    logging.basicConfig(level=settings.log_level, format="%(levelname)s %(name)s: %(message)s")
    ctx.obj = Platform.build(JsonFileStore(data_dir or settings.data_dir), settings)


# ── Users ────────────────────────────────────────────────────────────


@main.group()
def users():
    """Manage platform users and sessions."""


@users.command(name="add")
@click.argument("email")
@click.option("--name", default="", help="Display name")
@click.option("--role", default="volunteer", type=click.Choice([r.value for r in Role]))
@_reports_errors
def add_user(email: str, name: str, role: str):
    """Create a user."""
    user = _platform().users.create_user(email, name=name, role=Role(role))
    console.print(f"[green]Created[/] {user.email} ({user.role.value}) id={user.id}")


@users.command(name="list")
def list_users():
    """List all users."""
    all_users = _platform().users.list_users()
    if not all_users:
        console.print("[yellow]No users.[/]")
        return

    table = Table(title=f"Users ({len(all_users)})")
    table.add_column("ID", style="dim")
    table.add_column("Email", style="cyan")
    table.add_column("Name")
    table.add_column("Role", style="green")
    for u in all_users:
        table.add_row(u.id, u.email, u.name, u.role.value)
    console.print(table)


@users.command(name="role")
@click.argument("email")
@click.argument("role", type=click.Choice([r.value for r in Role]))
@_reports_errors
def set_role(email: str, role: str):
    """Change a user's role."""
    platform = _platform()
    user = platform.users.set_role(_reviewer(platform, email).id, Role(role))
    console.print(f"[green]{user.email}[/] is now {user.role.value}")


@users.command(name="token")
@click.argument("email")
@_reports_errors
def issue_token(email: str):
    """Issue a bearer session token for a user."""
    platform = _platform()
    session = platform.users.create_session(_reviewer(platform, email).id)
    console.print(f"Token: [bold]{session.token}[/]")
    console.print(f"[dim]Expires {session.expires_at}[/]")


# ── Submissions ──────────────────────────────────────────────────────


@main.group()
def submissions():
    """Review resource submissions."""


@submissions.command(name="list")
@click.option("--status", default="pending", help="pending, approved, rejected or all")
@_reports_errors
def list_submissions(status: str):
    """List submissions, newest first."""
    items = _platform().workflow.list_submissions(None if status == "all" else status)
    if not items:
        console.print("[yellow]No submissions.[/]")
        return

    table = Table(title=f"Submissions ({len(items)})")
    table.add_column("ID", style="dim")
    table.add_column("Name", style="cyan")
    table.add_column("Category")
    table.add_column("Status", style="green")
    table.add_column("Created")
    for s in items:
        table.add_row(s.id, s.draft.name, s.draft.category, s.status.value, s.created_at[:19])
    console.print(table)


@submissions.command(name="approve")
@click.argument("submission_id")
@click.option("--reviewer", required=True, help="Email of the approving admin")
@click.option("--featured", is_flag=True, help="Feature the published resource")
@click.option("--notes", default=None, help="Admin notes")
@_reports_errors
def approve_submission(submission_id: str, reviewer: str, featured: bool, notes):
    """Approve a submission and publish it."""
    platform = _platform()
    result = platform.workflow.approve(
        submission_id,
        _reviewer(platform, reviewer),
        featured=featured,
        admin_notes=notes,
    )
    console.print(f"[green]Approved[/] -> resource {result.resource_id}")


@submissions.command(name="reject")
@click.argument("submission_id")
@click.option("--reviewer", required=True, help="Email of the rejecting admin")
@click.option("--reason", default=None, help="Reason shown to the submitter")
@_reports_errors
def reject_submission(submission_id: str, reviewer: str, reason):
    """Reject a submission."""
    platform = _platform()
    platform.workflow.reject(submission_id, _reviewer(platform, reviewer), reason=reason)
    console.print(f"[yellow]Rejected[/] {submission_id}")


# ── Moderation ───────────────────────────────────────────────────────


@main.group()
def flags():
    """Inspect content flags."""


@flags.command(name="list")
@click.option("--status", default=None, help="Only flags with this status")
@_reports_errors
def list_flags(status):
    """List content flags, newest first."""
    items = _platform().flags.list_flags(status)
    if not items:
        console.print("[yellow]No flags.[/]")
        return

    table = Table(title=f"Content Flags ({len(items)})")
    table.add_column("ID", style="dim")
    table.add_column("Target", style="cyan")
    table.add_column("Priority")
    table.add_column("Status", style="green")
    table.add_column("Reason")
    for f in items:
        table.add_row(f.id, str(f.target), f.priority.value, f.status.value, f.reason[:60])
    console.print(table)


@main.command()
@click.option("--limit", default=50, show_default=True, help="Maximum entries to show")
def history(limit: int):
    """Show the most recent moderation actions."""
    actions = _platform().action_log.list_recent(limit)
    if not actions:
        console.print("[yellow]No moderation actions recorded.[/]")
        return

    table = Table(title="Moderation History")
    table.add_column("When", style="dim")
    table.add_column("Target", style="cyan")
    table.add_column("Action", style="green")
    table.add_column("By")
    table.add_column("Reason")
    for a in actions:
        actor = f"{a.admin_name} (auto)" if a.automated else a.admin_name
        table.add_row(a.created_at[:19], str(a.target), a.action.value, actor, a.reason or "")
    console.print(table)


@main.group()
def rules():
    """Manage automated moderation rules."""


@rules.command(name="list")
def list_rules():
    """List rules by priority."""
    items = _platform().rules.list_rules()
    if not items:
        console.print("[yellow]No rules defined.[/]")
        return

    table = Table(title=f"Moderation Rules ({len(items)})")
    table.add_column("ID", style="dim")
    table.add_column("Name", style="cyan")
    table.add_column("Type")
    table.add_column("Pattern")
    table.add_column("Action")
    table.add_column("Priority", justify="right")
    table.add_column("Enabled")
    for r in items:
        table.add_row(
            r.id,
            r.name,
            r.type.value,
            r.pattern,
            r.action.value,
            str(r.priority),
            "[green]yes[/]" if r.enabled else "[dim]no[/]",
        )
    console.print(table)


@rules.command(name="import")
@click.argument("path", type=click.Path(exists=True, dir_okay=False))
@_reports_errors
def import_rules(path: str):
    """Import rules from a YAML file."""
    created = _platform().rules.load_rules(path)
    console.print(f"[green]Imported {len(created)} rule(s)[/] from {path}")


if __name__ == "__main__":
    main()
