"""Flask CLI commands for account administration."""

from __future__ import annotations

import logging

import click
from flask.cli import with_appcontext
from marshmallow import ValidationError

from blogapi.core.security import default_hasher
from blogapi.models.user import User, UserRole, UserStatus, normalize_email
from blogapi.schemas.auth import validate_password_strength
from blogapi.uow import SQLAlchemyUnitOfWork

LOGGER = logging.getLogger(__name__)


@click.group("users")
def users_cli() -> None:
    """User administration commands."""


@users_cli.command("create-admin")
@click.option("--email", required=True, help="Administrator email address.")
@click.option(
    "--password",
    required=True,
    prompt=True,
    hide_input=True,
    confirmation_prompt=True,
    help="Administrator password (prompted when omitted).",
)
@click.option("--first-name", default="Admin", show_default=True)
@click.option("--last-name", default="", show_default=True)
@click.option(
    "--promote",
    is_flag=True,
    help="Promote and activate the account if the email is already registered.",
)
@with_appcontext
def create_admin(
    email: str, password: str, first_name: str, last_name: str, promote: bool
) -> None:
    """Create an active administrator account."""
    try:
        validate_password_strength(password)
    except ValidationError as exc:
        raise click.BadParameter("; ".join(exc.messages), param_hint="--password") from exc

    email = normalize_email(email)
    with SQLAlchemyUnitOfWork() as uow:
        user = uow.users.find_by_email(email)
        if user is not None:
            if not promote:
                raise click.ClickException(
                    f"{email} is already registered; pass --promote to make it an admin."
                )
            uow.users.update_role(user.id, UserRole.ADMIN)
            uow.users.update_status(user.id, UserStatus.ACTIVE)
            action = "promoted"
        else:
            user = User(
                email=email,
                password_hash=default_hasher.hash(password),
                first_name=first_name,
                last_name=last_name,
                role=UserRole.ADMIN,
                status=UserStatus.ACTIVE,
            )
            uow.users.add(user)
            action = "created"
        user_id = user.id

    LOGGER.info("cli.admin_%s", action, extra={"user_id": str(user_id)})
    click.echo(f"Admin {action}: {email} ({user_id})")
