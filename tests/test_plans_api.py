"""
HTTP tests for the plan routes, run against the app with an in-memory database.
"""

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy import update

from degreeplan.core.security import create_access_token
from degreeplan.main import app
from degreeplan.models.models import Plan
from degreeplan.models.plan_enums import PlanStatus
from tests.conftest import CORE_COURSES, STUDENT_ID


def _plan_body(**overrides):
    body = {"studentId": STUDENT_ID, "planName": "My Degree Plan", "courses": list(CORE_COURSES)}
    body.update(overrides)
    return body


async def _create(client, **overrides) -> int:
    response = await client.post("/plans", json=_plan_body(**overrides))
    assert response.status_code == 201, response.text
    return response.json()["data"]["planId"]


@pytest.mark.asyncio
async def test_create_plan(client):
    response = await client.post("/plans", json=_plan_body())
    assert response.status_code == 201
    payload = response.json()
    assert payload["success"] is True
    assert payload["error"] is None
    assert payload["data"]["planId"] > 0


@pytest.mark.asyncio
async def test_create_plan_ignores_empty_course_slots(client):
    slots = list(CORE_COURSES) + [None, "", None, None]
    plan_id = await _create(client, courses=slots)

    response = await client.get(f"/plans/{plan_id}")
    codes = {course["courseCode"] for course in response.json()["data"]["courses"]}
    assert codes == set(CORE_COURSES)


@pytest.mark.asyncio
async def test_create_plan_rejected_by_schema(client):
    response = await client.post("/plans", json={"planName": "My Degree Plan"})
    assert response.status_code == 400
    error = response.json()["error"]
    assert error["code"] == "VALIDATION_ERROR"
    assert "studentId" in error["message"]


@pytest.mark.asyncio
async def test_create_plan_with_non_object_body(client):
    response = await client.post("/plans", json=["not", "a", "plan"])
    assert response.status_code in (400, 422)


@pytest.mark.asyncio
async def test_create_plan_rule_violation(client):
    response = await client.post("/plans", json=_plan_body(planName="My Plan", courses=["CS101", "CS102"]))
    assert response.status_code == 400
    payload = response.json()
    assert payload["success"] is False
    assert payload["error"]["code"] == "CONSTRAINT_VIOLATION"
    assert payload["error"]["message"] == "Less than 32 credits selected."
    assert payload["error"]["details"] == {"violation": "INSUFFICIENT_CREDITS"}


@pytest.mark.asyncio
async def test_create_plan_for_unknown_user(client):
    response = await client.post("/plans", json=_plan_body(studentId=999))
    assert response.status_code == 400
    assert response.json()["error"]["details"] == {"violation": "UNKNOWN_USER"}


@pytest.mark.asyncio
async def test_get_plan(client):
    plan_id = await _create(client)

    response = await client.get(f"/plans/{plan_id}")
    assert response.status_code == 200
    data = response.json()["data"]
    assert data["planId"] == plan_id
    assert data["studentId"] == STUDENT_ID
    assert data["planName"] == "My Degree Plan"
    assert data["status"] == PlanStatus.AWAITING_REVIEW
    assert len(data["courses"]) == 8
    assert {"courseId", "courseCode", "title", "credits", "restriction"} <= set(data["courses"][0])


@pytest.mark.asyncio
async def test_get_missing_plan(client):
    response = await client.get("/plans/4242")
    assert response.status_code == 404
    assert response.json()["error"]["code"] == "NOT_FOUND"


@pytest.mark.asyncio
async def test_patch_plan_name(client):
    plan_id = await _create(client)

    response = await client.patch(f"/plans/{plan_id}", json={"planName": "Renamed plan"})
    assert response.status_code == 200
    assert response.json()["data"] == {"planId": plan_id, "updatedRows": 1}

    response = await client.get(f"/plans/{plan_id}")
    assert response.json()["data"]["planName"] == "Renamed plan"


@pytest.mark.asyncio
async def test_patch_with_empty_course_list_changes_nothing(client):
    plan_id = await _create(client)

    response = await client.patch(f"/plans/{plan_id}", json={"courses": []})
    assert response.status_code == 200
    assert response.json()["data"]["updatedRows"] == 0

    response = await client.get(f"/plans/{plan_id}")
    assert len(response.json()["data"]["courses"]) == 8


@pytest.mark.asyncio
async def test_patch_courses_resets_accepted_plan(client, db):
    plan_id = await _create(client)
    await db.execute(update(Plan).where(Plan.plan_id == plan_id).values(status=int(PlanStatus.ACCEPTED)))
    await db.commit()

    response = await client.patch(f"/plans/{plan_id}", json={"courses": list(CORE_COURSES)})
    assert response.status_code == 200
    assert response.json()["data"]["updatedRows"] == 18

    response = await client.get(f"/plans/{plan_id}")
    assert response.json()["data"]["status"] == PlanStatus.AWAITING_REVIEW

    response = await client.get(f"/plans/{plan_id}/activity")
    activities = response.json()["data"]["activities"]
    assert len(activities) == 1
    assert activities[0]["status"] == PlanStatus.AWAITING_REVIEW
    assert activities[0]["userId"] == STUDENT_ID


@pytest.mark.asyncio
async def test_patch_rejected_by_schema(client):
    plan_id = await _create(client)
    response = await client.patch(f"/plans/{plan_id}", json={"planName": "abc"})
    assert response.status_code == 400
    assert response.json()["error"]["code"] == "VALIDATION_ERROR"


@pytest.mark.asyncio
async def test_patch_rule_violation(client):
    plan_id = await _create(client)
    response = await client.patch(f"/plans/{plan_id}", json={"courses": ["CS101", "CS101"]})
    assert response.status_code == 400
    assert response.json()["error"]["details"] == {"violation": "DUPLICATE_COURSE"}


@pytest.mark.asyncio
async def test_patch_missing_plan(client):
    response = await client.patch("/plans/4242", json={"planName": "Renamed plan"})
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_delete_plan(client):
    plan_id = await _create(client)

    response = await client.delete(f"/plans/{plan_id}")
    assert response.status_code == 200
    assert response.json()["data"] == {"deleted": 1}

    assert (await client.get(f"/plans/{plan_id}")).status_code == 404
    assert (await client.delete(f"/plans/{plan_id}")).status_code == 404


@pytest.mark.asyncio
async def test_list_plans_by_status(client):
    plan_id = await _create(client)

    response = await client.get("/plans", params={"status": int(PlanStatus.AWAITING_REVIEW)})
    assert response.status_code == 200
    plans = response.json()["data"]
    assert [p["planId"] for p in plans] == [plan_id]
    assert plans[0]["firstName"] == "Ada"

    response = await client.get("/plans", params={"status": int(PlanStatus.ACCEPTED)})
    assert response.json()["data"] == []

    response = await client.get("/plans", params={"sort": "created", "ascending": "true"})
    assert [p["planId"] for p in response.json()["data"]] == [plan_id]


@pytest.mark.asyncio
async def test_list_plans_rejects_unknown_status(client):
    response = await client.get("/plans", params={"status": 9})
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_list_student_plans(client):
    plan_id = await _create(client)
    response = await client.get(f"/users/{STUDENT_ID}/plans")
    assert response.status_code == 200
    assert [p["planId"] for p in response.json()["data"]] == [plan_id]


@pytest.mark.asyncio
async def test_activity_of_missing_plan(client):
    response = await client.get("/plans/4242/activity")
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_search_courses(client):
    response = await client.get("/courses", params={"q": "cs20", "limit": 3})
    assert response.status_code == 200
    assert [c["courseCode"] for c in response.json()["data"]] == ["CS201", "CS202", "CS203"]


@pytest.mark.asyncio
async def test_requests_need_a_valid_token(db, client):
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as anonymous:
        response = await anonymous.get("/plans")
        assert response.status_code == 401
        assert response.headers["WWW-Authenticate"] == "Bearer"
        payload = response.json()
        assert payload["success"] is False
        assert payload["error"]["code"] == "UNAUTHORIZED"

        bad = {"Authorization": "Bearer not-a-token"}
        response = await anonymous.get("/plans", headers=bad)
        assert response.status_code == 401
        assert response.json()["error"]["code"] == "UNAUTHORIZED"

        for subject in ("999", str(10**20), "abc"):
            token = {"Authorization": f"Bearer {create_access_token({'sub': subject})}"}
            response = await anonymous.get("/plans", headers=token)
            assert response.status_code == 401
            assert response.json()["error"]["code"] == "UNAUTHORIZED"


@pytest.mark.asyncio
async def test_oversized_student_id_is_rejected_by_schema(client):
    response = await client.post("/plans", json=_plan_body(studentId=10**20, planName="My big plan", courses=["CS101"]))
    assert response.status_code == 400
    assert response.json()["error"]["code"] == "VALIDATION_ERROR"


@pytest.mark.asyncio
@pytest.mark.parametrize("method,path", [
    ("GET", f"/plans/{10**20}"),
    ("DELETE", f"/plans/{10**20}"),
    ("GET", f"/plans/{10**20}/activity"),
    ("GET", f"/users/{10**20}/plans"),
    ("GET", "/plans/0"),
])
async def test_out_of_range_path_ids_are_rejected(client, method, path):
    response = await client.request(method, path)
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_patch_with_out_of_range_plan_id(client):
    response = await client.patch(f"/plans/{10**20}", json={"planName": "Renamed plan"})
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_create_plan_returns_the_stored_id(client):
    plan_id = await _create(client)
    response = await client.get(f"/plans/{plan_id}")
    assert response.json()["data"]["planId"] == plan_id


@pytest.mark.asyncio
async def test_health(client):
    response = await client.get("/health")
    assert response.status_code == 200
    assert response.json()["data"]["database"] == "healthy"

    response = await client.get("/health/live")
    assert response.json()["data"] == {"alive": True}
