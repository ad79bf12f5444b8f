"""
HTTP tests for /api/reports and /api/analytics.
"""
import threading
from datetime import datetime, timedelta

import pytest
from fastapi.testclient import TestClient
from pydantic import ValidationError

from jobboard.core import auth
from jobboard.core.auth import create_access_token, get_current_user
from jobboard.core.config import Settings, get_settings
from jobboard.main import app
from jobboard.schemas.schemas import DateRange
from jobboard.services.report_service import ReportService, get_report_service
from stubs import NOW, StubQueries


class RecordingService(ReportService):
    """ReportService over stub queries that remembers the range it was asked for."""

    def __init__(self):
        super().__init__(queries=StubQueries(), clock=lambda: NOW)
        self.ranges = []

    def build_job_seeker_report(self, user_id, date_range=DateRange.last_30_days, now=None):
        self.ranges.append(date_range)
        return super().build_job_seeker_report(user_id, date_range, now)

    def build_employer_report(self, user_id, date_range=DateRange.last_30_days, now=None):
        self.ranges.append(date_range)
        return super().build_employer_report(user_id, date_range, now)


class FailingService(ReportService):

    def __init__(self):
        super().__init__(queries=StubQueries(), clock=lambda: NOW)

    def build_job_seeker_report(self, user_id, date_range=DateRange.last_30_days, now=None):
        raise RuntimeError("connection refused for db user secret_admin")

    def employer_analytics(self, user_id, now=None):
        raise RuntimeError("connection refused for db user secret_admin")


def as_role(role, user_id=1):
    app.dependency_overrides[get_current_user] = lambda: {
        "user_id": user_id, "email": f"{role}@example.com", "role": role
    }


@pytest.fixture
def client():
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def service():
    recording = RecordingService()
    app.dependency_overrides[get_report_service] = lambda: recording
    return recording


class TestReports:

    def test_job_seeker_report(self, client, service):
        as_role("job_seeker")
        response = client.get("/api/reports/job-seeker", params={"range": "7d"})

        assert response.status_code == 200
        body = response.json()
        assert body["role"] == "job_seeker"
        assert body["range"] == "7d"
        assert "percentageChange" in body["comparison"]
        assert "jobsPosted" not in body["comparison"]["current"]
        assert body["predictiveAnalytics"]["nextMonthProjection"] == 0
        assert service.ranges == [DateRange.last_7_days]

    def test_employer_report(self, client, service):
        as_role("employer")
        response = client.get("/api/reports/employer", params={"range": "1y"})

        assert response.status_code == 200
        body = response.json()
        assert body["role"] == "employer"
        assert body["comparison"]["current"]["jobsPosted"] == 0
        assert body["detailedMetrics"]["topPerformingJobs"] == []

    def test_default_range(self, client, service):
        as_role("job_seeker")
        assert client.get("/api/reports/job-seeker").status_code == 200
        assert service.ranges == [DateRange.last_30_days]

    def test_unknown_range_falls_back(self, client, service):
        as_role("job_seeker")
        response = client.get("/api/reports/job-seeker", params={"range": "2w"})

        assert response.status_code == 200
        assert response.json()["range"] == "30d"

    def test_fallback_uses_configured_default(self, client, service):
        app.dependency_overrides[get_settings] = lambda: Settings(default_range="90d")
        as_role("job_seeker")
        response = client.get("/api/reports/job-seeker", params={"range": "2w"})

        assert response.status_code == 200
        assert response.json()["range"] == "90d"
        assert service.ranges == [DateRange.last_90_days]

    def test_unknown_default_range_fails_at_load(self):
        with pytest.raises(ValidationError):
            Settings(default_range="2w")

    def test_unknown_range_rejected_when_configured(self, client, service):
        app.dependency_overrides[get_settings] = lambda: Settings(invalid_range_policy="reject")
        as_role("employer")
        response = client.get("/api/reports/employer", params={"range": "2w"})

        assert response.status_code == 400
        assert "2w" in response.json()["detail"]
        assert service.ranges == []

    def test_wrong_role_is_forbidden(self, client, service):
        as_role("job_seeker")
        response = client.get("/api/reports/employer")

        assert response.status_code == 403
        assert response.json()["detail"] == "Unauthorized - employers only"
        assert service.ranges == []

    def test_admin_cannot_read_job_seeker_report(self, client, service):
        as_role("admin")
        response = client.get("/api/reports/job-seeker")
        assert response.status_code == 403
        assert response.json()["detail"] == "Unauthorized - job seekers only"

    def test_failure_is_generic_500(self, client):
        app.dependency_overrides[get_report_service] = FailingService
        as_role("job_seeker")
        response = client.get("/api/reports/job-seeker")

        assert response.status_code == 500
        assert response.json()["detail"] == "Failed to fetch reports data"
        assert "secret_admin" not in response.text

    def test_missing_token(self, client):
        assert client.get("/api/reports/employer").status_code == 401

    def test_non_numeric_subject(self, client):
        token = create_access_token({"sub": "alice"})
        response = client.get("/api/reports/job-seeker", headers={"Authorization": f"Bearer {token}"})

        assert response.status_code == 401
        assert response.json()["detail"] == "Invalid or expired token"

    def test_invalid_token(self, client):
        response = client.get("/api/reports/job-seeker", headers={"Authorization": "Bearer not-a-jwt"})
        assert response.status_code == 401


class TestAnalytics:

    def test_platform_is_admin_only(self, client, service):
        as_role("employer")
        response = client.get("/api/analytics/platform")
        assert response.status_code == 403
        assert response.json()["detail"] == "Admins only"

    def test_platform(self, client, service):
        as_role("admin")
        response = client.get("/api/analytics/platform")

        assert response.status_code == 200
        body = response.json()
        assert body["totalUsers"] == 12
        assert body["userGrowth"][0]["jobSeekers"] == 3

    def test_employer_dashboard(self, client, service):
        as_role("employer")
        response = client.get("/api/analytics/employer")

        assert response.status_code == 200
        body = response.json()
        assert body["conversionRate"] == 0
        assert body["topJobs"] == []

    def test_failure_is_generic_500(self, client):
        app.dependency_overrides[get_report_service] = FailingService
        as_role("employer")
        response = client.get("/api/analytics/employer")

        assert response.status_code == 500
        assert response.json()["detail"] == "Failed to fetch analytics data"


class TestEndToEnd:
    """Real token, real queries, seeded SQLite database."""

    def test_job_seeker_report_from_database(self, client, seed):
        now = datetime.utcnow()
        seeker = seed.user("job_seeker", email="seeker@example.com")
        employer = seed.user("employer", email="boss@example.com")
        job = seed.job(employer, created_at=now - timedelta(days=40))

        seed.application(job, seeker, now - timedelta(days=2), status="accepted")
        seed.application(job, seeker, now - timedelta(days=3), status="pending")
        seed.application(job, seeker, now - timedelta(days=10), status="pending")

        token = create_access_token({"sub": str(seeker)})
        response = client.get(
            "/api/reports/job-seeker",
            params={"range": "7d"},
            headers={"Authorization": f"Bearer {token}"}
        )

        assert response.status_code == 200
        body = response.json()
        assert body["comparison"]["current"]["applications"] == 2
        assert body["comparison"]["previous"]["applications"] == 1
        assert body["comparison"]["percentageChange"]["applications"] == 100.0
        assert body["comparison"]["current"]["successRate"] == 50.0
        assert {s["name"] for s in body["categoryBreakdown"]} == {"Accepted", "Pending"}

    def test_user_lookup_runs_in_threadpool(self, client, seed, monkeypatch):
        threads = []
        real_session = auth.get_db_session

        def recording_session():
            threads.append(threading.current_thread().name)
            return real_session()

        monkeypatch.setattr(auth, "get_db_session", recording_session)
        user_id = seed.user("job_seeker")
        token = create_access_token({"sub": str(user_id)})

        response = client.get("/api/analytics/job-seeker", headers={"Authorization": f"Bearer {token}"})

        assert response.status_code == 200
        assert len(threads) == 1
        assert threads[0].startswith("AnyIO worker thread")

    def test_deactivated_account(self, client, seed):
        user_id = seed.user("employer", is_active=False)
        token = create_access_token({"sub": str(user_id)})

        response = client.get("/api/reports/employer", headers={"Authorization": f"Bearer {token}"})

        assert response.status_code == 403
        assert response.json()["detail"] == "Account deactivated"


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "healthy", "database": "connected"}
