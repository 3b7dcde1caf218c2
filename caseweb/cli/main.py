#!/usr/bin/env python3
"""caseweb CLI - run the gateway and inspect how case files are discovered."""

import argparse
import asyncio
import json
import sys
from pathlib import Path

from caseweb.exceptions import CaseNotFoundError, StorageError
from caseweb.repositories import CaseRepository
from caseweb.services.dicomweb import CaseDicomWebService, CaseIdentity
from caseweb.services.storage import create_storage_backend
from caseweb.settings import settings
from caseweb.utils.db_manager import db_manager
from caseweb.utils.logger import logger

SETTINGS_TEMPLATE = """# caseweb configuration file

# Server settings
host = "127.0.0.1"
port = 8000
debug = false

# Case store
database_driver = "postgresql"
database_host = "localhost"
database_name = "postgres"

# Object storage ("supabase" or "local")
storage_backend = "supabase"
supabase_url = "http://localhost:54321"
storage_bucket = "cbct-scans"
# storage_root = "./storage"   # used when storage_backend = "local"

# Secrets are better passed as environment variables:
# CASEWEB_SUPABASE_KEY=...
# CASEWEB_DATABASE_PASSWORD=...
"""


def init_project(path: str) -> None:
    """Write a starter ``settings.toml`` into ``path``."""
    project_path = Path(path).resolve()
    project_path.mkdir(parents=True, exist_ok=True)

    settings_file = project_path / "settings.toml"
    if settings_file.exists():
        logger.warning(f"Settings file already exists: {settings_file}")
        return

    settings_file.write_text(SETTINGS_TEMPLATE)
    logger.info(f"Created settings file: {settings_file}")


def run_server(host: str | None = None, port: int | None = None) -> None:
    """Run the gateway with uvicorn."""
    import uvicorn

    host = host or settings.host
    port = port or settings.port

    logger.info(f"Starting caseweb at http://{host}:{port}")

    uvicorn.run(
        "caseweb.api.app:app",
        host=host,
        port=port,
        reload=settings.debug,
        log_level="info" if settings.debug else "warning",
    )


async def discover_case(case_id: str) -> dict[str, object]:
    """Run file discovery for one case against the configured backends."""
    try:
        async with (
            create_storage_backend(settings) as storage,
            db_manager.get_async_session_context() as session,
        ):
            service = CaseDicomWebService(CaseRepository(session), storage)
            discovery = await service.discover(case_id)
    finally:
        await db_manager.close()

    identity = CaseIdentity.for_case(case_id)
    return {
        "case_id": case_id,
        "study_uid": identity.study_uid,
        "series_uid": identity.series_uid,
        "base_directory": discovery.base_directory,
        "source": discovery.source.value,
        "instances": [
            {
                "ordinal": file.ordinal,
                "sop_instance_uid": identity.instance_uid(file.ordinal),
                "name": file.name,
                "path": file.path,
            }
            for file in discovery.files
        ],
    }


def main() -> None:
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        prog="caseweb", description="caseweb - read-only DICOMweb gateway over case files"
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    init_parser = subparsers.add_parser("init", help="Write a starter settings.toml")
    init_parser.add_argument(
        "path",
        nargs="?",
        default=".",
        help="Directory for the settings file (default: current directory)",
    )

    run_parser = subparsers.add_parser("run", help="Run the gateway server")
    run_parser.add_argument("--host", type=str, default=None, help="Host to bind to")
    run_parser.add_argument("--port", type=int, default=None, help="Port to bind to")

    discover_parser = subparsers.add_parser(
        "discover", help="Print the instances the gateway would serve for a case"
    )
    discover_parser.add_argument("case_id", help="Case identifier")

    args = parser.parse_args()

    if args.command == "init":
        init_project(args.path)
    elif args.command == "run":
        run_server(args.host, args.port)
    elif args.command == "discover":
        try:
            result = asyncio.run(discover_case(args.case_id))
        except (CaseNotFoundError, StorageError) as e:
            logger.error(str(e))
            sys.exit(1)
        print(json.dumps(result, indent=2))
    else:
        parser.print_help()


if __name__ == "__main__":
    main()
