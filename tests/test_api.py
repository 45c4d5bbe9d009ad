"""API endpoint tests."""

from decimal import Decimal

import pytest
from httpx import ASGITransport, AsyncClient

from paylevel import __version__
from paylevel.api.app import create_app
from paylevel.models import StateSnapshot

pytestmark = pytest.mark.asyncio


class TestHealthEndpoints:
    """Test health check endpoints."""

    async def test_health_check(self, client: AsyncClient):
        """Health endpoint should return 200."""
        response = await client.get("/health")
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["database"] == "healthy"
        assert data["state_key"] == "test"
        assert data["stored_schema_version"] == 2
        assert data["version"] == __version__

    async def test_health_reports_outdated_snapshot(self, store, session_factory):
        async with session_factory() as session:
            async with session.begin():
                session.add(
                    StateSnapshot(
                        state_key="test",
                        payload={"logs": [], "settings": {"hourlyRate": 55}},
                        schema_version=1,
                    )
                )
        transport = ASGITransport(app=create_app(store=store))
        async with AsyncClient(transport=transport, base_url="http://test") as ac:
            data = (await ac.get("/health")).json()
        assert data["status"] == "degraded"
        assert data["stored_schema_version"] == 1

    async def test_readiness_check(self, client: AsyncClient):
        response = await client.get("/ready")
        assert response.status_code == 200
        assert response.json() == {"status": "ready", "state_key": "test"}

    async def test_not_ready_without_store(self):
        transport = ASGITransport(app=create_app())
        async with AsyncClient(transport=transport, base_url="http://test") as ac:
            response = await ac.get("/ready")
        assert response.status_code == 503

    async def test_liveness_check(self, client: AsyncClient):
        response = await client.get("/live")
        assert response.status_code == 200
        assert response.json()["status"] == "alive"


class TestStateEndpoints:
    """Whole-state import/export and settings."""

    async def test_get_state(self, client: AsyncClient):
        response = await client.get("/api/v1/state")
        assert response.status_code == 200
        data = response.json()
        assert data["schemaVersion"] == 2
        assert [j["id"] for j in data["jobs"]] == ["job-swim", "job-cafe"]

    async def test_import_legacy_backup(self, client: AsyncClient):
        response = await client.put(
            "/api/v1/state",
            json={
                "logs": [{"id": "a", "date": "2024-06-15", "duration": 2}],
                "settings": {"hourlyRate": 55},
            },
        )
        assert response.status_code == 200, response.text
        data = response.json()
        assert len(data["jobs"]) == 1
        assert data["jobs"][0]["hourlyRate"] == 55.0

    async def test_import_requires_settings(self, client: AsyncClient):
        response = await client.put("/api/v1/state", json={"logs": []})
        assert response.status_code == 400
        assert response.json()["code"] == "INVALID_IMPORT"

    async def test_backup_marks_timestamp(self, client: AsyncClient):
        before = (await client.get("/api/v1/settings")).json()
        assert before["backup_overdue"] is True

        response = await client.get("/api/v1/backup")
        assert response.status_code == 200
        assert response.json()["settings"]["lastBackupTimestamp"] is not None

        after = (await client.get("/api/v1/settings")).json()
        assert after["backup_overdue"] is False

    async def test_patch_settings(self, client: AsyncClient):
        response = await client.patch(
            "/api/v1/settings", json={"currency": "AUD", "pay_frequency": "monthly"}
        )
        assert response.status_code == 200
        data = response.json()
        assert data["currency"] == "AUD"
        assert data["pay_frequency"] == "monthly"
        assert Decimal(data["tax_rate"]) == Decimal("10")

    async def test_invalid_tax_rate(self, client: AsyncClient):
        response = await client.patch("/api/v1/settings", json={"tax_rate": "150"})
        assert response.status_code == 422


class TestLogEndpoints:
    """Shift logging."""

    async def test_create_log_from_times(self, client: AsyncClient):
        response = await client.post(
            "/api/v1/logs",
            json={
                "job_id": "job-swim",
                "date": "2024-06-16",
                "start_time": "22:00",
                "end_time": "01:30",
            },
        )
        assert response.status_code == 201, response.text
        data = response.json()
        assert Decimal(data["duration"]) == Decimal("3.5")

        logs = (await client.get("/api/v1/logs")).json()
        assert logs[0]["id"] == data["id"]
        assert len(logs) == 5

    async def test_zero_duration_rejected(self, client: AsyncClient):
        response = await client.post(
            "/api/v1/logs",
            json={"job_id": "job-swim", "date": "2024-06-16", "duration": "0"},
        )
        assert response.status_code == 422
        assert response.json()["code"] == "INVALID_DURATION"

    async def test_delete_log(self, client: AsyncClient):
        response = await client.delete("/api/v1/logs/tue")
        assert response.status_code == 204
        ids = [log["id"] for log in (await client.get("/api/v1/logs")).json()]
        assert "tue" not in ids


class TestJobEndpoints:
    """Job management and promotion."""

    async def test_create_job(self, client: AsyncClient):
        response = await client.post("/api/v1/jobs")
        assert response.status_code == 201
        assert response.json()["name"] == "Job 3"

    async def test_patch_job(self, client: AsyncClient):
        response = await client.patch(
            "/api/v1/jobs/job-swim", json={"hourly_rate": "65", "name": "Pool"}
        )
        assert response.status_code == 200
        data = response.json()
        assert data["name"] == "Pool"
        assert Decimal(data["hourly_rate"]) == Decimal("65")

    async def test_unknown_job(self, client: AsyncClient):
        response = await client.patch("/api/v1/jobs/nope", json={"name": "x"})
        assert response.status_code == 404
        assert response.json()["code"] == "JOB_NOT_FOUND"

    async def test_delete_job_then_last_job(self, client: AsyncClient):
        assert (await client.delete("/api/v1/jobs/job-cafe")).status_code == 204
        response = await client.delete("/api/v1/jobs/job-swim")
        assert response.status_code == 409
        assert response.json()["code"] == "LAST_JOB"

    async def test_progress_and_promote(self, client: AsyncClient):
        response = await client.get("/api/v1/jobs/job-swim/progress")
        assert response.status_code == 200
        data = response.json()
        assert Decimal(data["percent"]) == Decimal("10")
        assert data["eligible"] is False

        response = await client.post("/api/v1/jobs/job-swim/promote")
        assert response.status_code == 200
        assert Decimal(response.json()["hourly_rate"]) == Decimal("80")

    async def test_rate_card(self, client: AsyncClient):
        response = await client.post(
            "/api/v1/jobs/job-swim/rate-card",
            json={"role": "Supervisor", "level": "Level 5", "age": "18yrs"},
        )
        assert response.status_code == 200
        assert response.json()["name"] == "Supervisor - Level 5"

        response = await client.post(
            "/api/v1/jobs/job-swim/rate-card",
            json={"role": "Supervisor", "level": "Level 1", "age": "18yrs"},
        )
        assert response.status_code == 404
        assert response.json()["code"] == "RATE_CARD_NOT_FOUND"


class TestStatsEndpoints:
    """Aggregation views."""

    async def test_totals(self, client: AsyncClient):
        response = await client.get(
            "/api/v1/stats/totals",
            params={"start": "2024-06-10", "end": "2024-06-16", "job_id": "job-swim"},
        )
        assert response.status_code == 200
        data = response.json()
        assert Decimal(data["total_hours"]) == Decimal("10")
        assert Decimal(data["total_earnings"]) == Decimal("650")

    async def test_buckets(self, client: AsyncClient):
        response = await client.get(
            "/api/v1/stats/buckets",
            params={"mode": "history", "reference_date": "2024-06-15"},
        )
        assert response.status_code == 200
        items = response.json()["items"]
        assert [b["label"] for b in items] == ["Jan", "Feb", "Mar", "Apr", "May", "Jun"]

    async def test_buckets_for_one_job(self, client: AsyncClient):
        params = {"mode": "recent", "reference_date": "2024-06-15"}
        everything = (await client.get("/api/v1/stats/buckets", params=params)).json()
        cafe = (
            await client.get("/api/v1/stats/buckets", params={**params, "job_id": "job-cafe"})
        ).json()
        assert sum(Decimal(b["hours"]) for b in everything["items"]) == Decimal("17")
        hours = {b["key"]: Decimal(b["hours"]) for b in cafe["items"]}
        assert len(hours) == 7
        assert hours["2024-06-14"] == Decimal("4")
        assert sum(hours.values()) == Decimal("4")

    async def test_summary_for_one_job(self, client: AsyncClient):
        response = await client.get(
            "/api/v1/stats/summary",
            params={"reference_date": "2024-06-15", "job_id": "job-cafe"},
        )
        assert response.status_code == 200
        data = response.json()
        assert Decimal(data["monthly"]["hours"]) == Decimal("4")
        assert Decimal(data["monthly"]["earnings"]) == Decimal("200")
        assert Decimal(data["monthly"]["net"]) == Decimal("180")

    async def test_summary(self, client: AsyncClient):
        response = await client.get(
            "/api/v1/stats/summary", params={"reference_date": "2024-06-15"}
        )
        assert response.status_code == 200
        data = response.json()
        assert data["primary"] == "biweekly"
        assert Decimal(data["monthly"]["earnings"]) == Decimal("850")
        assert Decimal(data["monthly"]["net"]) == Decimal("765")
        assert Decimal(data["biweekly"]["trend"]) == Decimal("17")

    async def test_wrapup(self, client: AsyncClient):
        response = await client.get("/api/v1/stats/wrapup", params={"year": 2024})
        assert response.status_code == 200
        assert response.json()["top_job"]["name"] == "State Swim"

        response = await client.get("/api/v1/stats/wrapup", params={"year": 2019})
        assert response.status_code == 404


class TestCalendarEndpoints:
    """Range selection totals."""

    async def test_reversed_clicks(self, client: AsyncClient):
        response = await client.get(
            "/api/v1/calendar/range",
            params={"first": "2024-06-15", "second": "2024-06-11"},
        )
        assert response.status_code == 200
        data = response.json()
        assert data["start"] == "2024-06-11"
        assert data["end"] == "2024-06-15"
        assert Decimal(data["total_hours"]) == Decimal("17")


class TestPayslipEndpoints:
    """Reconciliation and remediation."""

    async def test_reconcile_and_remediate(self, client: AsyncClient):
        payslip = {
            "job_id": "job-swim",
            "end_date": "2024-06-15",
            "weekday_hours": "8",
            "weekend_hours": "5",
            "allowance": "20",
        }
        response = await client.post("/api/v1/payslip/reconcile", json=payslip)
        assert response.status_code == 200, response.text
        data = response.json()
        assert data["is_reconciled"] is False
        assert Decimal(data["app_gross"]) == Decimal("650")
        assert Decimal(data["slip_gross"]) == Decimal("850")
        (remediation,) = data["remediations"]
        assert remediation["kind"] == "backfill"

        response = await client.post(
            "/api/v1/payslip/remediate",
            json={
                "job_id": "job-swim",
                "end_date": "2024-06-14",
                "hour_type": remediation["hour_type"],
                "hours": remediation["hours"],
            },
        )
        assert response.status_code == 201
        assert response.json()["notes"] == "Payslip Backfill (weekday)"

        response = await client.post("/api/v1/payslip/reconcile", json=payslip)
        assert response.json()["is_reconciled"] is True

    @pytest.mark.parametrize("hours", ["0", "0.05", "-0.1"])
    async def test_remediate_within_tolerance_rejected(self, client: AsyncClient, hours):
        before = (await client.get("/api/v1/logs")).json()
        response = await client.post(
            "/api/v1/payslip/remediate",
            json={
                "job_id": "job-swim",
                "end_date": "2024-06-14",
                "hour_type": "weekday",
                "hours": hours,
            },
        )
        assert response.status_code == 422
        assert response.json()["code"] == "INVALID_REMEDIATION"
        assert (await client.get("/api/v1/logs")).json() == before

    async def test_remediate_on_other_day_type_rejected(self, client: AsyncClient):
        response = await client.post(
            "/api/v1/payslip/remediate",
            json={
                "job_id": "job-swim",
                "end_date": "2024-06-15",
                "hour_type": "weekday",
                "hours": "3",
            },
        )
        assert response.status_code == 422
        assert response.json()["code"] == "INVALID_REMEDIATION"
        assert "weekend day" in response.json()["detail"]

    async def test_reconcile_unknown_job(self, client: AsyncClient):
        response = await client.post(
            "/api/v1/payslip/reconcile",
            json={"job_id": "nope", "end_date": "2024-06-15"},
        )
        assert response.status_code == 404


class TestExportEndpoints:
    """CSV export."""

    async def test_export_csv(self, client: AsyncClient):
        response = await client.get("/api/v1/export/csv")
        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/csv")
        lines = response.text.split("\n")
        assert lines[0].startswith("Date,Job Name")
        assert len(lines) == 5


class TestTemplateEndpoints:
    """Shift templates."""

    async def test_list_templates(self, client: AsyncClient):
        response = await client.get("/api/v1/templates")
        assert response.status_code == 200
        (template,) = response.json()
        assert template["id"] == "tpl-morning"
        assert template["job_id"] == "job-swim"

    async def test_create_and_delete_template(self, client: AsyncClient):
        response = await client.post(
            "/api/v1/templates",
            json={
                "name": "Close",
                "job_id": "job-cafe",
                "start_time": "22:00",
                "end_time": "01:00",
            },
        )
        assert response.status_code == 201, response.text
        template_id = response.json()["id"]
        assert len((await client.get("/api/v1/templates")).json()) == 2

        response = await client.delete(f"/api/v1/templates/{template_id}")
        assert response.status_code == 204
        assert len((await client.get("/api/v1/templates")).json()) == 1

    @pytest.mark.parametrize("end_time", ["06:00", "25:00"])
    async def test_invalid_template_times(self, client: AsyncClient, end_time):
        response = await client.post(
            "/api/v1/templates",
            json={"name": "Bad", "start_time": "06:00", "end_time": end_time},
        )
        assert response.status_code == 422
        assert response.json()["code"] == "INVALID_DURATION"

    async def test_draft(self, client: AsyncClient):
        response = await client.get(
            "/api/v1/templates/tpl-morning/draft", params={"day": "2024-06-11"}
        )
        assert response.status_code == 200
        data = response.json()
        assert data["date"] == "2024-06-11"
        assert data["start_time"] == "06:00"
        assert Decimal(data["duration"]) == Decimal("2.5")
        assert data["notes"] == "squad"
        assert len((await client.get("/api/v1/logs")).json()) == 4

    async def test_apply(self, client: AsyncClient):
        response = await client.post(
            "/api/v1/templates/tpl-morning/apply", json={"date": "2024-06-11"}
        )
        assert response.status_code == 201, response.text
        log = response.json()
        assert log["job_id"] == "job-swim"
        assert Decimal(log["duration"]) == Decimal("2.5")

        logs = (await client.get("/api/v1/logs")).json()
        assert logs[0]["id"] == log["id"]

    async def test_unknown_template(self, client: AsyncClient):
        response = await client.post(
            "/api/v1/templates/nope/apply", json={"date": "2024-06-11"}
        )
        assert response.status_code == 404
        assert response.json()["code"] == "TEMPLATE_NOT_FOUND"
