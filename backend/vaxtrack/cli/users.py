"""Account administration commands."""

from __future__ import annotations

import click
from flask.cli import with_appcontext
from sqlalchemy import select

from vaxtrack.core.extensions import db
from vaxtrack.models.user import Role, User


@click.group("users")
def users_cli() -> None:
    """Manage user accounts."""


@users_cli.command("create-admin")
@click.argument("email")
@click.option("--full-name", default=None, help="Display name for the account.")
@click.password_option(help="Password; prompted when omitted.")
@with_appcontext
def create_admin_command(email: str, full_name: str | None, password: str) -> None:
    """Create an administrator, or promote an existing account to admin."""
    normalized = email.strip().lower()
    user = db.session.execute(select(User).filter_by(email=normalized)).scalar_one_or_none()
    try:
        if user is None:
            user = User(email=normalized, full_name=full_name)
            user.password = password
            db.session.add(user)
        user.role = Role.ADMIN.value
        db.session.commit()
    except ValueError as exc:
        db.session.rollback()
        raise click.BadParameter(str(exc)) from exc
    click.echo(f"Admin ready: {user.email} (id={user.id})")
