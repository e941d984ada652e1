#!/usr/bin/env python
"""
Generate demo/seed data for development.
"""

import argparse
import asyncio
import sys
from datetime import UTC, datetime


# Add src to path for imports
sys.path.insert(0, "src")

from onboarding.core.auth import create_access_token
from onboarding.core.database import async_session_factory
from onboarding.modules.audit.models import ActionType
from onboarding.modules.audit.services import AuditContext, AuditService
from onboarding.modules.users.models import User, UserRole
from onboarding.modules.users.repos import UserRepository


DEFAULT_USERS = [
    {"email": "pm@example.com", "name": "Demo PM", "role": UserRole.PM},
    {"email": "instructor@example.com", "name": "Demo Instructor", "role": UserRole.INSTRUCTOR},
]


async def seed_default() -> None:
    """Create a PM and an instructor, and print a token for the PM."""
    async with async_session_factory() as session:
        repo = UserRepository(session)

        for data in DEFAULT_USERS:
            existing = await repo.get_by_email(data["email"])
            if existing:
                print(f"User already exists: {existing.email}")
                continue

            user = await repo.create(User(**data, is_active=True))
            print(f"Created user: {user.email} ({user.role.value}, id={user.id})")

        await session.commit()

        pm = await repo.get_by_email("pm@example.com")
        if pm:
            print(f"PM access token: {create_access_token(pm.id, pm.role.value)}")


async def seed_demo() -> None:
    """Create default users plus an audit history to browse."""
    await seed_default()

    async with async_session_factory() as session:
        repo = UserRepository(session)
        pm = await repo.get_by_email("pm@example.com")
        instructor = await repo.get_by_email("instructor@example.com")
        if pm is None or instructor is None:
            print("Default users missing; run the default scenario first")
            sys.exit(1)

        audit = AuditService(session, AuditContext(actor=pm, ip_address="127.0.0.1"))

        await audit.log_action(
            ActionType.CREATE,
            "Track",
            1,
            description="Created track",
            new_value={"name": "Frontend"},
        )
        await audit.log_action(
            ActionType.UPDATE,
            "Track",
            1,
            description="Renamed track",
            old_value={"name": "Frontend"},
            new_value={"name": "Frontend Advanced"},
        )
        await audit.log_action(
            ActionType.ASSIGN,
            "Instructor",
            instructor.id,
            description="Assigned instructor to track",
            new_value={"track_id": 1},
        )
        await audit.log_action(
            ActionType.EXPORT,
            "Instructor",
            description="Exported instructor list",
            metadata={"exported_at": datetime.now(UTC)},
        )

        # Actions from non-PM users are recorded without an actor
        system = AuditService(session, AuditContext(actor=instructor))
        await system.log_action(
            ActionType.LOGIN,
            "User",
            instructor.id,
            description="Instructor signed in",
        )

        await session.commit()
        print("Created 5 audit log entries")


async def main(scenario: str) -> None:
    """Run the seeding based on scenario."""
    if scenario == "default":
        await seed_default()
    elif scenario == "demo":
        await seed_demo()
    else:
        print(f"Unknown scenario: {scenario}")
        print("Available scenarios: default, demo")
        sys.exit(1)


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Seed database with demo data")
    parser.add_argument(
        "--scenario",
        "-s",
        default="default",
        help="Seed scenario to run (default, demo)",
    )
    args = parser.parse_args()

    asyncio.run(main(args.scenario))
