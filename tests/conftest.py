"""
Shared fixtures.

The app is pointed at an in-memory SQLite database before anything from
jobboard is imported; the engine is built at import time.
"""
import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["JWT_SECRET_KEY"] = "test-secret"
os.environ["INVALID_RANGE_POLICY"] = "fallback"

from datetime import datetime

import pytest
from sqlalchemy import (
    Boolean, Column, DateTime, Integer, MetaData, String, Table, Text
)

from jobboard.db.postgres import engine


metadata = MetaData()

users = Table(
    "users", metadata,
    Column("id", Integer, primary_key=True),
    Column("email", String(255)),
    Column("role", String(20)),
    Column("is_active", Boolean, default=True),
    Column("created_at", DateTime),
)

companies = Table(
    "companies", metadata,
    Column("id", Integer, primary_key=True),
    Column("name", String(255)),
)

jobs = Table(
    "jobs", metadata,
    Column("id", Integer, primary_key=True),
    Column("title", String(255)),
    Column("status", String(20)),
    Column("created_by_id", Integer),
    Column("view_count", Integer, default=0),
    Column("application_count", Integer, default=0),
    Column("created_at", DateTime),
)

job_applications = Table(
    "job_applications", metadata,
    Column("id", Integer, primary_key=True),
    Column("job_id", Integer),
    Column("user_id", Integer),
    Column("status", String(20)),
    Column("applied_at", DateTime),
    Column("reviewed_at", DateTime, nullable=True),
)

job_views = Table(
    "job_views", metadata,
    Column("id", Integer, primary_key=True),
    Column("job_id", Integer),
    Column("viewed_at", DateTime),
)

activity_logs = Table(
    "activity_logs", metadata,
    Column("id", Integer, primary_key=True),
    Column("user_id", Integer),
    Column("action", Text),
    Column("timestamp", DateTime),
    Column("metadata", Text, nullable=True),
)


class Seeder:
    """Inserts rows through typed tables so timestamps match the query binds."""

    def _insert(self, table, **values):
        with engine.begin() as conn:
            result = conn.execute(table.insert().values(**values))
            return result.inserted_primary_key[0]

    def user(self, role, email=None, created_at=None, is_active=True):
        return self._insert(
            users, email=email or f"{role}@example.com", role=role,
            is_active=is_active, created_at=created_at or datetime(2024, 1, 1)
        )

    def company(self, name="Acme"):
        return self._insert(companies, name=name)

    def job(self, owner_id, created_at, title="Engineer", status="active", view_count=0, application_count=0):
        return self._insert(
            jobs, title=title, status=status, created_by_id=owner_id,
            view_count=view_count, application_count=application_count, created_at=created_at
        )

    def application(self, job_id, user_id, applied_at, status="pending", reviewed_at=None):
        return self._insert(
            job_applications, job_id=job_id, user_id=user_id, status=status,
            applied_at=applied_at, reviewed_at=reviewed_at
        )

    def view(self, job_id, viewed_at):
        return self._insert(job_views, job_id=job_id, viewed_at=viewed_at)

    def activity(self, user_id, action, timestamp):
        return self._insert(activity_logs, user_id=user_id, action=action, timestamp=timestamp)


@pytest.fixture
def seed():
    metadata.create_all(engine)
    yield Seeder()
    metadata.drop_all(engine)
