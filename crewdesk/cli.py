"""CLI for CrewDesk: bootstrap the first accounts and keys."""

from __future__ import annotations

import argparse
import asyncio
import getpass
import sys

# Operator running the CLI; acts with SuperAdmin rights but owns no account row
CLI_OPERATOR_ID = 0


def _read_password(given: str, prompt: str) -> str:
    password = given
    if not password:
        password = getpass.getpass(f"{prompt}: ")
        confirm = getpass.getpass("Confirm password: ")
        if password != confirm:
            print("Passwords do not match")
            sys.exit(1)

    from crewdesk.services.auth import MIN_PASSWORD_LENGTH

    if len(password) < MIN_PASSWORD_LENGTH:
        print(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")
        sys.exit(1)
    return password


async def cmd_create_superadmin(args):
    """Create a SuperAdmin account with the given username."""
    from crewdesk.db import crud
    from crewdesk.db.engine import async_session_factory, create_tables
    from crewdesk.dependencies import get_credential_engine
    from crewdesk.models import User
    from crewdesk.models.enums import Role

    await create_tables()
    password = _read_password(args.password, "SuperAdmin password")
    engine = get_credential_engine()

    async with async_session_factory() as db:
        if await crud.username_taken(db, args.username):
            print(f"Username already taken: {args.username}")
            sys.exit(1)
        seafarer_id = args.seafarer_id or f"SUPERADMIN:{args.username}"
        if await crud.seafarer_id_in_use(db, seafarer_id):
            print(f"Seafarer id already in use: {seafarer_id}")
            sys.exit(1)

        password_hash, password_enc = engine.seal(password)
        user = User(
            seafarer_id=seafarer_id,
            full_name=args.full_name or args.username,
            role_id=int(Role.SUPERADMIN),
            status="Onboard",
        )
        user.set_credentials(args.username, password_hash, password_enc)
        db.add(user)
        await db.commit()
        await db.refresh(user)

    print(f"SuperAdmin created: {user.username} (id={user.id})")


async def cmd_create_company(args):
    """Create a new company with its admin account."""
    from crewdesk.db.engine import async_session_factory, create_tables
    from crewdesk.dependencies import get_credential_engine
    from crewdesk.models.enums import Role
    from crewdesk.services.company_bootstrap import create_company
    from crewdesk.services.principal import Principal

    await create_tables()
    password = _read_password(args.password, "Admin password")
    operator = Principal(user_id=CLI_OPERATOR_ID, role=Role.SUPERADMIN)

    async with async_session_factory() as db:
        company, admin = await create_company(
            db, operator,
            {"company_name": args.name, "email": args.email or None, "code": args.code or None},
            args.username, password, get_credential_engine(),
        )

    print(f"Company created: {company.company_name} (id={company.id})")
    print(f"Admin user: {admin.username} (id={admin.id})")


def cmd_generate_key(args):
    """Print a fresh base64 key for PASSWORD_ENC_KEY."""
    from crewdesk.services.encryption import generate_key

    print(generate_key())


def main():
    parser = argparse.ArgumentParser(description="CrewDesk CLI")
    subparsers = parser.add_subparsers(dest="command")

    # create-superadmin
    sa = subparsers.add_parser("create-superadmin", help="Create a SuperAdmin account")
    sa.add_argument("--username", required=True, help="Login username")
    sa.add_argument("--password", default="", help="Password (prompted if not given)")
    sa.add_argument("--full-name", default="", help="Display name")
    sa.add_argument("--seafarer-id", default="", help="Seafarer id (defaults to SUPERADMIN:<username>)")

    # create-company
    cc = subparsers.add_parser("create-company", help="Create a new company")
    cc.add_argument("--name", required=True, help="Company name")
    cc.add_argument("--username", required=True, help="Admin login username")
    cc.add_argument("--password", default="", help="Admin password (prompted if not given)")
    cc.add_argument("--email", default="", help="Company e-mail")
    cc.add_argument("--code", default="", help="Company code")

    # generate-key
    subparsers.add_parser("generate-key", help="Generate a PASSWORD_ENC_KEY value")

    args = parser.parse_args()
    if not args.command:
        parser.print_help()
        sys.exit(1)

    if args.command == "create-superadmin":
        asyncio.run(cmd_create_superadmin(args))
    elif args.command == "create-company":
        asyncio.run(cmd_create_company(args))
    elif args.command == "generate-key":
        cmd_generate_key(args)


if __name__ == "__main__":
    main()
