"""Main module entrypoint for local runtime execution.

This module validates startup configuration, configures logging and runs the
selected command: the FastAPI service, slot bootstrap or schema migration.
"""

import argparse
import logging
from pathlib import Path

import uvicorn
from alembic import command
from alembic.config import Config

from trading_ledger.bootstrap import bootstrap_create_application, bootstrap_seed_store
from trading_ledger.config import config_load_settings

ALEMBIC_INI_PATH = Path(__file__).resolve().parent.parent / "alembic.ini"


def main(argv: list[str] | None = None) -> None:
    """Run selected runtime command with validated startup configuration.

    Args:
        argv: Optional argument list; defaults to process arguments.

    Returns:
        None: This function does not return a runtime value.

    Raises:
        SettingsLoadError: Raised when configuration validation fails.
    """

    argument_parser = argparse.ArgumentParser(description="Trading Ledger runtime entrypoint")
    argument_parser.add_argument(
        "command",
        nargs="?",
        default="api",
        choices=("api", "bootstrap", "migrate"),
        help="Runtime command: `api` starts server, `bootstrap` seeds the ledger slot, "
        "`migrate` upgrades the database schema to head",
        type=str,
    )
    argument_parser.add_argument(
        "--force",
        action="store_true",
        help="Overwrite an already seeded slot for `bootstrap`",
    )
    parsed_arguments = argument_parser.parse_args(argv)

    settings = config_load_settings()
    logging.basicConfig(
        level=getattr(logging, settings.log_level),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    if parsed_arguments.command == "migrate":
        command.upgrade(Config(str(ALEMBIC_INI_PATH)), "head")
        return

    if parsed_arguments.command == "bootstrap":
        bootstrap_seed_store(settings=settings, force=parsed_arguments.force)
        return

    application = bootstrap_create_application(settings=settings)
    uvicorn.run(
        application,
        host=settings.application_host,
        port=settings.application_port,
    )


if __name__ == "__main__":
    main()
