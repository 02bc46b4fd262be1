"""Main entry point for running the Pennyworth service."""

import argparse
import asyncio
from collections.abc import Sequence

from pennyworth.api.customers.create_handler import new_create_handler
from pennyworth.api.health.check_handler import new_check_handler
from pennyworth.api.server import Server
from pennyworth.core.config import get_settings
from pennyworth.core.environment import Environment, create_default_environment
from pennyworth.infrastructure.database.customer_repository import (
    SqlCustomerRepository,
)
from pennyworth.infrastructure.database.migrations import run_migrations


def build_parser() -> argparse.ArgumentParser:
    """Build the command line parser."""
    parser = argparse.ArgumentParser(
        prog="pennyworth", description="Pennyworth customer service"
    )
    subparsers = parser.add_subparsers(dest="command")
    subparsers.add_parser("server", help="run migrations and serve HTTP (default)")
    subparsers.add_parser("migrate", help="upgrade the database schema and exit")
    return parser


def build_server(environment: Environment) -> Server:
    """Create the server with every handler registered."""
    if environment.database is None:
        msg = "the server requires a database"
        raise ValueError(msg)

    repository = SqlCustomerRepository(environment.database, environment.logger)
    hash_rounds = environment.settings.security_config.password_hash_rounds

    server = Server(environment)
    server.register_handlers(
        new_check_handler(),
        new_create_handler(repository, hash_rounds),
    )
    return server


def serve(environment: Environment) -> None:
    """Migrate the schema outside development, then serve until stopped."""
    settings = environment.settings
    if settings.environment != "development":
        run_migrations(settings, environment.logger)

    build_server(environment).start()


def main(argv: Sequence[str] | None = None) -> None:
    """Main entry point for the Pennyworth application."""
    args = build_parser().parse_args(argv)
    environment = create_default_environment(get_settings())

    try:
        if args.command == "migrate":
            run_migrations(environment.settings, environment.logger)
        else:
            serve(environment)
    finally:
        asyncio.run(environment.close())


if __name__ == "__main__":
    main()
