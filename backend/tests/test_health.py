from datetime import datetime, timedelta

import pytest

from pilgrimpath.models.health import HealthAlert, HealthData
from pilgrimpath.services import health as health_service

T0 = datetime(2026, 3, 1, 8, 0, 0)

READING = {
    "sector": "A",
    "metrics": {
        "total_people": 5000,
        "health_complaints": 12,
        "disease_outbreaks": [{"disease": "cholera", "cases": 2, "severity": "high"}],
        "infection_rate": 1.5,
        "sanitation_score": 72,
        "water_quality": "fair",
        "public_health_score": 68,
    },
    "alerts": [{"type": "water", "severity": "medium", "message": "Chlorine levels low"}],
    "ai_predictions": {"next_outbreak_risk": 35, "recommended_actions": ["Chlorinate tanks"]},
}


@pytest.fixture
def add_reading(db):
    async def _add(sector, score, created_at, alerts=()):
        record = HealthData(
            sector=sector,
            date=created_at,
            public_health_score=score,
            infection_rate=1.0,
            sanitation_score=80,
            created_at=created_at,
            alerts=[
                HealthAlert(type="hygiene", severity="low", message=message,
                            timestamp=created_at, is_resolved=resolved)
                for message, resolved in alerts
            ],
        )
        db.add(record)
        await db.commit()
        return record
    return _add


async def test_create_health_data(client, admin_headers):
    response = await client.post("/api/health", json=READING, headers=admin_headers)

    assert response.status_code == 201
    body = response.json()
    assert body["sector"] == "A"
    assert body["metrics"]["public_health_score"] == 68
    assert body["metrics"]["disease_outbreaks"][0]["disease"] == "cholera"
    assert body["alerts"][0]["message"] == "Chlorine levels low"
    assert body["alerts"][0]["is_resolved"] is False
    assert body["ai_predictions"]["next_outbreak_risk"] == 35


async def test_create_requires_admin(client, pilgrim_headers):
    response = await client.post("/api/health", json=READING, headers=pilgrim_headers)
    assert response.status_code == 403


async def test_create_rejects_out_of_range_score(client, admin_headers):
    body = {**READING, "metrics": {**READING["metrics"], "sanitation_score": 120}}
    response = await client.post("/api/health", json=body, headers=admin_headers)
    assert response.status_code == 400
    assert response.json()["errors"][0]["field"] == "metrics.sanitation_score"


async def test_create_rejects_empty_sector(client, admin_headers):
    response = await client.post("/api/health", json={**READING, "sector": ""}, headers=admin_headers)
    assert response.status_code == 400


async def test_dashboard(db, add_reading):
    await add_reading("A", 60, T0, alerts=[("Drain blocked", False), ("Bins full", True)])
    await add_reading("A", 80, T0 + timedelta(hours=1))
    await add_reading("B", 50, T0 + timedelta(hours=2), alerts=[("Toilets closed", False)])

    result = await health_service.dashboard(db)

    assert result.latest.sector == "B"
    sectors = {row.sector: row for row in result.sector_data}
    assert sectors["A"].avg_score == pytest.approx(70.0)
    assert sectors["A"].latest_score == 80
    assert (sectors["A"].total_alerts, sectors["A"].active_alerts) == (2, 1)
    assert (sectors["B"].total_alerts, sectors["B"].active_alerts) == (1, 1)


async def test_dashboard_for_one_sector(db, add_reading):
    await add_reading("A", 60, T0)
    await add_reading("B", 50, T0 + timedelta(hours=2))

    result = await health_service.dashboard(db, sector="A")

    assert result.latest.sector == "A"
    assert [row.sector for row in result.sector_data] == ["A"]


async def test_dashboard_empty(db):
    result = await health_service.dashboard(db)
    assert result.latest is None
    assert result.sector_data == []


async def test_trends(db, add_reading):
    await add_reading("A", 40, T0 - timedelta(days=10))
    await add_reading("A", 60, T0 - timedelta(days=2))
    await add_reading("B", 70, T0 - timedelta(days=1))
    await add_reading("A", 65, T0)

    points = await health_service.trends(db, days=7, now=T0 + timedelta(hours=1))
    assert [p.public_health_score for p in points] == [60, 70, 65]

    only_a = await health_service.trends(db, days=7, sector="A", now=T0 + timedelta(hours=1))
    assert [p.public_health_score for p in only_a] == [60, 65]


async def test_active_alerts_endpoint(client, add_reading, pilgrim_headers):
    await add_reading("A", 60, T0, alerts=[("Drain blocked", False), ("Bins full", True)])
    await add_reading("B", 50, T0 + timedelta(hours=2), alerts=[("Toilets closed", False)])

    response = await client.get("/api/health/alerts", headers=pilgrim_headers)

    alerts = response.json()
    assert [(a["sector"], a["alert"]["message"]) for a in alerts] == [
        ("B", "Toilets closed"),
        ("A", "Drain blocked"),
    ]


async def test_dashboard_requires_admin(client, pilgrim_headers, admin_headers):
    assert (await client.get("/api/health/dashboard", headers=pilgrim_headers)).status_code == 403
    assert (await client.get("/api/health/dashboard", headers=admin_headers)).status_code == 200
