#!/usr/bin/env python3
"""
AFC Contests Unified CLI
Consolidated entry point for contest operations
"""

import asyncio
import json
import logging
import os
import sys
from uuid import UUID

from afc.core.auth import create_access_token
from afc.core.config import settings
from afc.core.errors import ContestPlatformError
from afc.db.session import AsyncSessionLocal, async_engine
from afc.models.enums import UserRole
from afc.repos.contest_repo import get_contest_by_id
from afc.repos.user_repo import create_user, get_user_by_username
from afc.services.finalization import finalize_contest, get_finalization_result
from afc.services.status import get_contest_status
from afc.services.sweep import sweep_ended_contests

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


class ContestCLI:
    """Contest operations run directly against the database"""

    async def finalize(self, contest_id: UUID) -> bool:
        """Finalize one contest now"""
        async with AsyncSessionLocal() as session:
            try:
                result = await finalize_contest(session, contest_id, actor="cli")
            except ContestPlatformError as e:
                logger.error(f"❌ Could not finalize contest {contest_id}: {e.message}")
                return False
        print(json.dumps(result, indent=2))
        return True

    async def sweep(self) -> bool:
        """Finalize every ended contest"""
        outcomes = await sweep_ended_contests(AsyncSessionLocal)
        for outcome in outcomes:
            marker = "✅" if outcome["finalized"] else "❌"
            print(f"{marker} {outcome['contest_title']} ({outcome['contest_id']}): {outcome['message']}")
        if not outcomes:
            print("ℹ️ No ended contests awaiting finalization")
        return all(outcome["finalized"] for outcome in outcomes)

    async def status(self, contest_id: UUID) -> bool:
        """Show a contest's derived status and winners"""
        async with AsyncSessionLocal() as session:
            contest = await get_contest_by_id(session, contest_id)
            if contest is None:
                logger.error(f"❌ Contest {contest_id} not found")
                return False
            print(f"{contest.title}: {get_contest_status(contest).value}")
            result = await get_finalization_result(session, contest_id)
        for winner in result["winners"]:
            print(
                f"  #{winner['placement']} entry {winner['entry_id']} - "
                f"{winner['reactions_count']} reactions, {winner['prize_amount']} points"
            )
        return True

    async def create_admin(self, username: str) -> bool:
        """Create (or promote) an admin user and print an access token"""
        async with AsyncSessionLocal() as session:
            user = await get_user_by_username(session, username)
            if user is None:
                user = await create_user(session, username, role=UserRole.ADMIN.value)
                logger.info(f"✅ Created admin user {username}")
            elif user.role != UserRole.ADMIN.value:
                user.role = UserRole.ADMIN.value
                await session.commit()
                logger.info(f"✅ Promoted {username} to admin")
            else:
                logger.info(f"ℹ️ {username} is already an admin")
            user_id = user.id
        print(f"Admin ID: {user_id}")
        print(f"Access token: {create_access_token({'sub': str(user_id)})}")
        return True

    async def close(self):
        await async_engine.dispose()


def print_help():
    """Print help information"""
    print("""
AFC Contests Unified CLI

Usage:
  python cli.py <command> [options]

Commands:
  contest finalize <id>  Finalize an ended contest
  contest sweep          Finalize every ended contest
  contest status <id>    Show contest status and winners
  admin create <name>    Create an admin user and print a token

  app start              Start FastAPI application
  app dev                Start FastAPI in development mode

  db migrate             Run database migrations
  db downgrade           Downgrade database by one revision

  worker                 Start Celery worker
  beat                   Start Celery beat scheduler

  help                   Show this help message

Examples:
  python cli.py contest sweep
  python cli.py app start
  python cli.py db migrate
""")


def _parse_contest_id(value: str):
    try:
        return UUID(value)
    except ValueError:
        print(f"Invalid contest ID: {value}")
        return None


async def run_admin_command(args) -> bool:
    if len(args) < 2 or args[0].lower() != "create":
        print("Usage: python cli.py admin create <username>")
        return False

    cli = ContestCLI()
    try:
        return await cli.create_admin(args[1])
    finally:
        await cli.close()


async def run_contest_command(args) -> bool:
    if not args:
        print("Contest subcommand required. Use: finalize, sweep, status")
        return False

    subcommand = args[0].lower()
    cli = ContestCLI()
    try:
        if subcommand == "sweep":
            return await cli.sweep()
        if subcommand in ("finalize", "status"):
            if len(args) < 2:
                print(f"Usage: python cli.py contest {subcommand} <contest_id>")
                return False
            contest_id = _parse_contest_id(args[1])
            if contest_id is None:
                return False
            if subcommand == "finalize":
                return await cli.finalize(contest_id)
            return await cli.status(contest_id)
        print(f"Unknown contest subcommand: {subcommand}")
        return False
    finally:
        await cli.close()


def main() -> bool:
    """Main CLI function"""
    if len(sys.argv) < 2:
        print_help()
        return False

    command = sys.argv[1].lower()

    if command == "contest":
        return asyncio.run(run_contest_command(sys.argv[2:]))

    elif command == "admin":
        return asyncio.run(run_admin_command(sys.argv[2:]))

    elif command == "app":
        if len(sys.argv) < 3:
            print("App subcommand required. Use: start, dev")
            return False

        subcommand = sys.argv[2].lower()

        if subcommand == "start":
            logger.info("🚀 Starting FastAPI application...")
            return os.system("uvicorn afc.main:app --host 0.0.0.0 --port 8000") == 0
        elif subcommand == "dev":
            logger.info("🚀 Starting FastAPI in development mode...")
            return os.system("uvicorn afc.main:app --host 0.0.0.0 --port 8000 --reload") == 0
        else:
            print(f"Unknown app subcommand: {subcommand}")
            return False

    elif command == "db":
        if len(sys.argv) < 3:
            print("Database subcommand required. Use: migrate, downgrade")
            return False

        subcommand = sys.argv[2].lower()

        if subcommand in ("migrate", "upgrade"):
            logger.info("🔄 Running database migrations...")
            return os.system("alembic upgrade head") == 0
        elif subcommand == "downgrade":
            logger.info("⬇️ Downgrading database...")
            return os.system("alembic downgrade -1") == 0
        else:
            print(f"Unknown database subcommand: {subcommand}")
            return False

    elif command == "worker":
        logger.info(f"👷 Starting Celery worker ({settings.app_env})...")
        return os.system("celery -A afc.celery_app worker -Q default,finalization --loglevel=info") == 0

    elif command == "beat":
        logger.info(f"⏰ Starting Celery beat (sweep every {settings.sweep_interval_minutes} minutes)...")
        return os.system("celery -A afc.tasks.scheduler beat --loglevel=info") == 0

    elif command == "help":
        print_help()
        return True

    else:
        print(f"Unknown command: {command}")
        print_help()
        return False


if __name__ == "__main__":
    sys.exit(0 if main() else 1)
