"""Command-line interface for the user management mock backend."""

from __future__ import annotations
import argparse
import asyncio
import logging
import os
import sys
from typing import Sequence

try:
    import httpx
except ImportError as exc:  # pragma: no cover - exercised in environments missing deps
    raise SystemExit(
        "The 'httpx' package is required. Run `pip install -e .` to install dependencies."
    ) from exc

from usermgmt.client import RemoteUserDirectory
from usermgmt.config import resolve_service_url, seed_as_yaml
from usermgmt.errors import DirectoryError
from usermgmt.models import AccessLevel

logger = logging.getLogger("usermgmt.main")

_ACCESS_LEVEL_CHOICES = [level.value for level in AccessLevel]


def _parse_args(argv: Sequence[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="User management mock backend")
    subparsers = parser.add_subparsers(dest="command")

    parser.set_defaults(command="serve")

    serve_parser = subparsers.add_parser("serve", help="Start the HTTP user management service")
    serve_parser.add_argument("--host", default="127.0.0.1", help="Bind address for the API")
    serve_parser.add_argument(
        "--port",
        type=int,
        default=8000,
        help="Port for the HTTP API (default: 8000)",
    )
    serve_parser.add_argument(
        "--seed",
        default=None,
        help="YAML file with the initial users (default: built-in fixture)",
    )
    serve_parser.add_argument(
        "--enable-test-routes",
        action="store_true",
        default=None,
        help="Expose the mark-active endpoint used by automated tests",
    )

    users_parser = subparsers.add_parser("users", help="Manage users on a running service")
    users_parser.add_argument(
        "--service-url",
        default=None,
        help="Base URL of a running service (default: $USERMGMT_SERVICE_URL or http://127.0.0.1:8000)",
    )
    actions = users_parser.add_subparsers(dest="action", required=True)

    list_parser = actions.add_parser("list", help="List all users")
    list_parser.add_argument(
        "--yaml",
        action="store_true",
        help="Print the listing in the seed file format",
    )

    invite_parser = actions.add_parser("invite", help="Invite one or more users")
    invite_parser.add_argument("emails", nargs="+", help="Email addresses to invite")
    invite_parser.add_argument(
        "--access-level",
        required=True,
        choices=_ACCESS_LEVEL_CHOICES,
        help="Access level granted to every invited user",
    )

    for name, help_text in (
        ("resend", "Resend the invitation email to a user"),
        ("revoke", "Revoke access for a user"),
        ("activate", "Mark an invited user as active (test routes only)"),
    ):
        action_parser = actions.add_parser(name, help=help_text)
        action_parser.add_argument("email", help="Email address of the user")

    args_list = list(argv) if argv is not None else sys.argv[1:]
    known_commands = {"serve", "users"}

    if not args_list:
        args_list = ["serve"]
    else:
        first = args_list[0]
        if first in ("-h", "--help"):
            return parser.parse_args(args_list)
        if first not in known_commands:
            if any(flag in args_list for flag in ("-h", "--help")):
                return parser.parse_args(args_list)
            args_list = ["serve", *args_list]

    return parser.parse_args(args_list)


def _serve(
    *,
    host: str,
    port: int,
    seed: str | None,
    enable_test_routes: bool | None,
) -> None:
    from usermgmt.config import resolve_seed_path
    from usermgmt.service import build_directory, create_app
    import uvicorn
    import yaml

    seed_path = resolve_seed_path(seed or os.getenv("USERMGMT_SEED_PATH"))
    if seed_path is not None and not seed_path.is_file():
        raise SystemExit(f"Seed file {seed_path} does not exist.")

    try:
        directory = build_directory(seed_path)
    except (ValueError, yaml.YAMLError, DirectoryError) as exc:
        raise SystemExit(f"Seed file {seed_path} is invalid: {exc}") from exc

    logger.info("Starting user management API on http://%s:%s with %d user(s)", host, port, len(directory))

    app = create_app(directory=directory, include_test_routes=enable_test_routes)
    uvicorn.run(app, host=host, port=port, log_level="info")


def _print_users(users: list, *, as_yaml: bool) -> None:
    if as_yaml:
        print(seed_as_yaml(users), end="")
        return

    if not users:
        print("No users are currently registered.")
        return

    print(f"{len(users)} user(s) found:")
    print(f"{'Email':<32}  {'Access':<10}  State")
    print("-" * 56)
    for user in users:
        print(f"{user.email:<32}  {user.access_level.value:<10}  {user.state.value}")


async def _run_users_command(args: argparse.Namespace, service_url: str) -> None:
    async with RemoteUserDirectory(service_url) as directory:
        if args.action == "list":
            result = await directory.list_users()
            _print_users(list(result["users"]), as_yaml=args.yaml)  # type: ignore[arg-type]
        elif args.action == "invite":
            await directory.invite_users(args.emails, args.access_level)
            print(f"Invited {len(args.emails)} user(s) with {args.access_level} access.")
        elif args.action == "resend":
            await directory.resend_invite(args.email)
            print(f"Invitation resent to {args.email}.")
        elif args.action == "revoke":
            await directory.revoke_access(args.email)
            print(f"Access revoked for {args.email}.")
        elif args.action == "activate":
            await directory.mark_as_active(args.email)
            print(f"{args.email} is now active.")


def _users(args: argparse.Namespace) -> int:
    service_url = args.service_url or resolve_service_url(os.getenv("USERMGMT_SERVICE_URL"))
    try:
        asyncio.run(_run_users_command(args, service_url))
    except DirectoryError as exc:
        print(f"Error ({exc.code}): {exc.message}")
        return 1
    except httpx.HTTPError as exc:
        print(f"Failed to contact user management service at {service_url}: {exc}")
        return 1
    return 0


def main(argv: Sequence[str] | None = None) -> None:
    """Entry point for CLI usage."""

    logging.basicConfig(level=logging.INFO, format="%(asctime)s [%(levelname)s] %(message)s")

    args = _parse_args(argv)

    if args.command == "serve":
        _serve(
            host=args.host,
            port=args.port,
            seed=args.seed,
            enable_test_routes=args.enable_test_routes,
        )
    elif args.command == "users":
        status = _users(args)
        if status:
            raise SystemExit(status)


if __name__ == "__main__":
    main()
