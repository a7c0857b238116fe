from __future__ import annotations

import uuid
from datetime import date
from decimal import Decimal

from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from tests.factories import (
    add_cost,
    add_document,
    add_profile,
    add_project,
    add_service,
    add_task,
    add_time_entry,
)


def test_project_financial_overview_endpoint(db_session: Session, client: TestClient) -> None:
    project = add_project(db_session, budget_total=Decimal("10000"))
    add_cost(db_session, project, Decimal("2000"))
    add_document(db_session, project, (Decimal("5000"), None))
    consultant = add_profile(db_session, billable_rate=Decimal("100"))
    add_time_entry(db_session, project, consultant, minutes=120)

    response = client.get(f"/api/v1/projects/{project.id}/financial-overview")

    assert response.status_code == 200
    payload = response.json()
    assert payload["costs"] == "2000.00"
    assert payload["billable_value"] == "200.00"
    assert payload["total"] == "2200.00"
    assert payload["progress"] == "22.00"
    assert payload["spend_ratio"] == "0.22"
    assert payload["is_over_budget"] is False


def test_batch_overview_and_margins(db_session: Session, client: TestClient) -> None:
    first = add_project(db_session, title="First")
    second = add_project(db_session, title="Second")

    overview = client.get("/api/v1/projects/financial-overview", params={"project_id": [str(first.id)]})
    margins = client.get("/api/v1/projects/margins")

    assert overview.status_code == 200
    assert [item["project_id"] for item in overview.json()["items"]] == [str(first.id)]
    assert margins.status_code == 200
    assert {item["project_id"] for item in margins.json()["items"]} == {str(first.id), str(second.id)}


def test_margin_endpoint_reports_tier(db_session: Session, client: TestClient) -> None:
    project = add_project(db_session)
    add_document(db_session, project, (Decimal("200"), None))
    consultant = add_profile(db_session, billable_rate=Decimal("100"), internal_rate=Decimal("50"))
    add_time_entry(db_session, project, consultant, minutes=60)

    response = client.get(f"/api/v1/projects/{project.id}/margin")

    assert response.status_code == 200
    assert response.json()["revenue"] == "200.00"
    assert response.json()["margin_percentage"] == "25.00"
    assert response.json()["status"] == "good"


def test_unknown_project_is_404(client: TestClient) -> None:
    response = client.get(f"/api/v1/projects/{uuid.uuid4()}/margin")

    assert response.status_code == 404
    assert response.json()["code"] == "RECORD_NOT_FOUND"


def test_task_variance_endpoint_returns_null_without_estimate(db_session: Session, client: TestClient) -> None:
    project = add_project(db_session)
    task = add_task(db_session, project)

    response = client.get(f"/api/v1/tasks/{task.id}/variance")

    assert response.status_code == 200
    assert response.json() == {"variance": None}


def test_task_variance_endpoint_serializes_rates(db_session: Session, client: TestClient) -> None:
    project = add_project(db_session)
    person = add_profile(db_session, billable_rate=Decimal("80"))
    task = add_task(db_session, project, estimated_hours=Decimal("10"), estimated_rate=Decimal("80"))
    add_time_entry(db_session, project, person, task=task, minutes=240)

    variance = client.get(f"/api/v1/tasks/{task.id}/variance").json()["variance"]

    assert variance["actual_rates"] == ["80.00"]
    assert variance["value_variance_percent"] == "-60.00"
    assert variance["status"] == "under_budget"


def test_project_variance_lists(db_session: Session, client: TestClient) -> None:
    project = add_project(db_session)
    service = add_service(db_session, name="Research")
    add_task(db_session, project, service=service, estimated_hours=Decimal("2"), estimated_rate=Decimal("90"))

    variances = client.get(f"/api/v1/projects/{project.id}/task-variances")
    breakdown = client.get(f"/api/v1/projects/{project.id}/service-breakdown")

    assert len(variances.json()["items"]) == 1
    [row] = breakdown.json()["items"]
    assert row["service_module_name"] == "Research"
    assert row["total_planned_value"] == "180.00"
    assert row["variance_status"] == "under"


def test_service_profitability_report(db_session: Session, client: TestClient) -> None:
    add_service(db_session, name="Photography")

    response = client.get("/api/v1/reports/service-profitability")

    assert response.status_code == 200
    [row] = response.json()["items"]
    assert row["service_name"] == "Photography"
    assert row["margin_percent"] == "0.00"


def test_profile_workload_endpoint(db_session: Session, client: TestClient) -> None:
    project = add_project(db_session)
    person = add_profile(db_session)
    add_task(db_session, project, assignee=person, estimated_hours=Decimal("70"), due_date=date(2026, 3, 10))

    response = client.get(
        f"/api/v1/profiles/{person.id}/workload", params={"start": "2026-03-02", "end": "2026-03-15"}
    )

    assert response.status_code == 200
    payload = response.json()
    assert payload["window_days"] == 14
    assert payload["capacity_hours"] == "80.00"
    assert payload["utilization_percentage"] == "87.50"


def test_workload_window_defaults_to_one_week(db_session: Session, client: TestClient) -> None:
    person = add_profile(db_session)

    response = client.get("/api/v1/workload", params={"profile_id": [str(person.id)]})

    assert response.status_code == 200
    [item] = response.json()["items"]
    assert item["window_days"] == 7
    assert item["window_start"] == date.today().isoformat()


def test_reversed_window_is_422(db_session: Session, client: TestClient) -> None:
    person = add_profile(db_session)

    response = client.get(
        f"/api/v1/profiles/{person.id}/workload", params={"start": "2026-03-10", "end": "2026-03-01"}
    )

    assert response.status_code == 422
    assert response.json()["code"] == "INVALID_INPUT"


def test_assignment_feasibility_endpoint(db_session: Session, client: TestClient) -> None:
    current = add_project(db_session)
    candidate = add_project(db_session, title="Candidate")
    person = add_profile(db_session)
    add_task(db_session, current, assignee=person, estimated_hours=Decimal("100"), due_date=date(2026, 3, 10))

    response = client.get(
        f"/api/v1/profiles/{person.id}/assignment-feasibility",
        params={
            "project_id": str(candidate.id),
            "threshold_percent": "120",
            "start": "2026-03-02",
            "end": "2026-03-15",
        },
    )

    assert response.status_code == 200
    payload = response.json()
    assert payload["can_assign"] is False
    assert payload["projected_utilization"] == "125.00"


def test_negative_threshold_is_422(db_session: Session, client: TestClient) -> None:
    project = add_project(db_session)
    person = add_profile(db_session)

    response = client.get(
        f"/api/v1/profiles/{person.id}/assignment-feasibility",
        params={"project_id": str(project.id), "threshold_percent": "-5"},
    )

    assert response.status_code == 422
    assert response.json()["code"] == "INVALID_INPUT"
