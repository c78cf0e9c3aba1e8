#!/usr/bin/env python
"""
Load a small demo data set into an empty database.

Usage:
    python scripts/seed_data.py

Three accounts and a spread of issues covering every status, priority
and severity, so listing, filtering, counts and export all have rows to
work with. Does nothing if any user already exists.
"""

import asyncio
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from sqlalchemy import func, select

from app.core.security import hash_password
from app.database import async_session_maker, init_db
from app.models.issue import (
    RESOLVED_STATUSES,
    Issue,
    IssuePriority as P,
    IssueSeverity as S,
    IssueStatus as St,
)
from app.models.user import User

# (name, email, password)
DEMO_USERS = [
    ("Alice Admin", "alice@example.com", "AlicePass123!"),
    ("Bob Builder", "bob@example.com", "BobPass123!"),
    ("Carol Coder", "carol@example.com", "CarolPass123!"),
]

# (title, description, status, priority, severity, reporter index, assignee index)
DEMO_ISSUES = [
    (
        "Login fails with special characters in password",
        "Passwords containing `<` or `>` make the login endpoint return a 500 error.",
        St.OPEN, P.HIGH, S.MAJOR, 0, 1,
    ),
    (
        "Issue list is slow for large result sets",
        "Listing issues takes more than 5 seconds once there are thousands of rows.",
        St.IN_PROGRESS, P.MEDIUM, S.MAJOR, 1, 1,
    ),
    (
        "Registration accepts emails without a domain",
        "`someone@` was accepted as a valid address.",
        St.RESOLVED, P.LOW, S.MINOR, 2, None,
    ),
    (
        "Export misaligns rows with commas in the title",
        'CSV columns shift when a title contains a comma, e.g. "a, b".',
        St.OPEN, P.CRITICAL, S.CRITICAL, 0, 2,
    ),
    (
        "Status filter ignores 'In Progress'",
        None,
        St.OPEN, P.LOW, S.MINOR, 1, None,
    ),
    (
        "Missing index on issues.assigned_to",
        "The my-issues view scans the whole table.",
        St.CLOSED, P.MEDIUM, S.MINOR, 2, 0,
    ),
]


async def seed_database() -> None:
    await init_db()

    async with async_session_maker() as session:
        existing = await session.scalar(select(func.count()).select_from(User))
        if existing:
            print(f"Found {existing} users, leaving the database untouched.")
            return

        users = [
            User(name=name, email=email, password_hash=hash_password(password))
            for name, email, password in DEMO_USERS
        ]
        session.add_all(users)
        await session.flush()

        for title, description, status, priority, severity, reporter, assignee in DEMO_ISSUES:
            session.add(
                Issue(
                    title=title,
                    description=description,
                    status=status,
                    priority=priority,
                    severity=severity,
                    created_by=users[reporter].id,
                    assigned_to=users[assignee].id if assignee is not None else None,
                    resolved_at=func.now() if status in RESOLVED_STATUSES else None,
                )
            )

        await session.commit()

    print(f"Seeded {len(DEMO_USERS)} users and {len(DEMO_ISSUES)} issues.")
    print("Log in with:")
    for _, email, password in DEMO_USERS:
        print(f"  {email} / {password}")


if __name__ == "__main__":
    asyncio.run(seed_database())
