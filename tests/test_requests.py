import re
from datetime import datetime, timezone

import pytest

from app.core.config import settings


def new_request(request_type_id, **overrides):
    payload = {
        "title": "Laptop will not boot",
        "description": "Black screen after the update",
        "priority": "High",
        "request_type_id": request_type_id,
    }
    payload.update(overrides)
    return payload


async def create(client, actor, request_type_id, **overrides):
    res = await client.post("/api/requests", json=new_request(request_type_id, **overrides), headers=actor.headers)
    assert res.status_code == 201, res.text
    return res.json()


# ------------------------------------------------------------------
# CREATE
# ------------------------------------------------------------------
@pytest.mark.asyncio
async def test_create_request_gets_default_status_and_number(client, actors, master_data):
    first = await create(client, actors.requestor, master_data.request_type.id)
    second = await create(client, actors.requestor, master_data.request_type.id)

    assert first["status_id"] == master_data.statuses["OPEN"].id
    assert first["requester_id"] == str(actors.requestor.id)
    assert first["assigned_to_user_id"] is None

    year = datetime.now(timezone.utc).year
    assert first["request_no"] == f"REQ-{year}-001"
    assert second["request_no"] == f"REQ-{year}-002"
    assert re.fullmatch(r"REQ-\d{4}-\d{3,}", second["request_no"])


@pytest.mark.asyncio
async def test_create_request_uses_lowest_sequence_status(client, actors, master_data):
    res = await client.post(
        "/api/statuses",
        json={"name": "Triage", "system_name": "triage", "sequence": 1},
        headers=actors.admin.headers,
    )
    assert res.status_code == 201

    created = await create(client, actors.requestor, master_data.request_type.id)
    assert created["status_id"] == res.json()["id"]


@pytest.mark.asyncio
@pytest.mark.parametrize("overrides,field", [
    ({"title": ""}, "title"),
    ({"title": "   "}, "title"),
    ({"title": "x" * 251}, "title"),
    ({"description": ""}, "description"),
    ({"description": "x" * 5001}, "description"),
    ({"priority": "Urgent"}, "priority"),
    ({"request_type_id": 9999}, "request_type_id"),
])
async def test_create_request_validation(client, actors, master_data, overrides, field):
    payload = new_request(master_data.request_type.id)
    payload.update(overrides)
    res = await client.post(
        "/api/requests",
        json=payload,
        headers=actors.requestor.headers,
    )
    assert res.status_code == 422
    assert res.json()["error"] == "ValidationFailed"
    assert res.json()["field"] == field


@pytest.mark.asyncio
async def test_create_request_accepts_boundary_lengths(client, actors, master_data):
    created = await create(
        client, actors.requestor, master_data.request_type.id,
        title="x" * 250, description="y" * 5000, priority="Low",
    )
    assert len(created["title"]) == 250


@pytest.mark.asyncio
async def test_create_request_and_reply_store_trimmed_text(client, actors, master_data):
    created = await create(
        client, actors.requestor, master_data.request_type.id,
        title="  Laptop will not boot  ", description="\n Black screen \n",
    )
    assert created["title"] == "Laptop will not boot"
    assert created["description"] == "Black screen"

    res = await client.post(
        f"/api/requests/{created['id']}/replies", json={"body": "  Any update?  "}, headers=actors.requestor.headers
    )
    assert res.status_code == 201
    assert res.json()["body"] == "Any update?"


@pytest.mark.asyncio
async def test_create_request_without_statuses(client, actors, db_session):
    from app.models.request_type import RequestType

    request_type = RequestType(name="Orphan")
    db_session.add(request_type)
    await db_session.commit()

    res = await client.post("/api/requests", json=new_request(request_type.id), headers=actors.requestor.headers)
    assert res.status_code == 500
    assert res.json()["error"] == "DefaultStatusMissing"


@pytest.mark.asyncio
async def test_requests_require_session(client):
    assert (await client.get("/api/requests")).status_code == 401


# ------------------------------------------------------------------
# LIST (scoped by role)
# ------------------------------------------------------------------
@pytest.mark.asyncio
async def test_list_scopes(client, actors, master_data):
    rt = master_data.request_type.id
    mine = await create(client, actors.requestor, rt, title="Mine")
    theirs = await create(client, actors.requestor2, rt, title="Theirs")
    await create(client, actors.requestor2, rt, title="Unassigned")

    res = await client.post(
        f"/api/requests/{theirs['id']}/assign",
        json={"technician_id": str(actors.technician.id)},
        headers=actors.hod.headers,
    )
    assert res.status_code == 200

    async def titles(actor):
        res = await client.get("/api/requests", headers=actor.headers)
        assert res.status_code == 200
        return {item["title"] for item in res.json()}

    assert await titles(actors.requestor) == {"Mine"}
    assert await titles(actors.requestor2) == {"Theirs", "Unassigned"}
    assert await titles(actors.technician) == {"Theirs"}
    assert await titles(actors.technician2) == set()
    assert await titles(actors.admin) == {"Mine", "Theirs", "Unassigned"}
    assert await titles(actors.hod) == {"Mine", "Theirs", "Unassigned"}

    listing = (await client.get("/api/requests", headers=actors.requestor.headers)).json()
    assert listing[0]["id"] == mine["id"]
    assert listing[0]["status"]["system_name"] == "OPEN"
    assert listing[0]["request_type"]["department"]["name"] == "Information Technology"


@pytest.mark.asyncio
async def test_list_is_newest_first(client, actors, master_data, insert_request):
    status = master_data.statuses["OPEN"]
    await insert_request(actors.requestor, master_data.request_type, status, datetime(2024, 1, 1), title="old")
    await insert_request(actors.requestor, master_data.request_type, status, datetime(2024, 6, 1), title="new")

    res = await client.get("/api/requests", headers=actors.requestor.headers)
    assert [item["title"] for item in res.json()] == ["new", "old"]


# ------------------------------------------------------------------
# DETAIL
# ------------------------------------------------------------------
@pytest.mark.asyncio
async def test_detail_is_readable_by_direct_link(client, actors, master_data):
    created = await create(client, actors.requestor, master_data.request_type.id)

    res = await client.get(f"/api/requests/{created['id']}", headers=actors.requestor2.headers)
    assert res.status_code == 200

    detail = res.json()
    assert detail["request_no"] == created["request_no"]
    assert detail["requester"]["name"] == "Rita Requestor"
    assert detail["assignee"] is None
    assert detail["status"]["name"] == "Open"
    assert detail["replies"] == []


@pytest.mark.asyncio
async def test_detail_can_be_restricted_to_list_scope(client, actors, master_data, monkeypatch):
    created = await create(client, actors.requestor, master_data.request_type.id)
    monkeypatch.setattr(settings, "RESTRICT_REQUEST_DETAIL", True)

    hidden = await client.get(f"/api/requests/{created['id']}", headers=actors.requestor2.headers)
    missing = await client.get(
        "/api/requests/00000000-0000-0000-0000-000000000000", headers=actors.requestor2.headers
    )
    assert hidden.status_code == missing.status_code == 404
    assert hidden.json() == missing.json()

    assert (await client.get(f"/api/requests/{created['id']}", headers=actors.requestor.headers)).status_code == 200
    assert (await client.get(f"/api/requests/{created['id']}", headers=actors.admin.headers)).status_code == 200


@pytest.mark.asyncio
async def test_detail_not_found(client, actors, master_data):
    res = await client.get("/api/requests/00000000-0000-0000-0000-000000000000", headers=actors.admin.headers)
    assert res.status_code == 404
    assert res.json()["error"] == "NotFound"


# ------------------------------------------------------------------
# REPLIES
# ------------------------------------------------------------------
@pytest.mark.asyncio
@pytest.mark.parametrize("body", ["", "   ", "x" * 5001])
async def test_reply_body_validation(client, actors, master_data, body):
    created = await create(client, actors.requestor, master_data.request_type.id)
    res = await client.post(
        f"/api/requests/{created['id']}/replies", json={"body": body}, headers=actors.requestor.headers
    )
    assert res.status_code == 422
    assert res.json()["field"] == "body"


@pytest.mark.asyncio
async def test_reply_snapshots_current_status(client, actors, master_data):
    created = await create(client, actors.requestor, master_data.request_type.id)
    in_progress = master_data.statuses["IN_PROGRESS"]

    res = await client.post(
        f"/api/requests/{created['id']}/replies", json={"body": "x" * 5000}, headers=actors.requestor.headers
    )
    assert res.status_code == 201
    assert res.json()["status_id"] == master_data.statuses["OPEN"].id
    assert res.json()["user_name"] == "Rita Requestor"

    moved = await client.post(
        f"/api/requests/{created['id']}/status",
        json={"status_id": in_progress.id},
        headers=actors.admin.headers,
    )
    assert moved.status_code == 200

    res = await client.post(
        f"/api/requests/{created['id']}/replies", json={"body": "Any update?"}, headers=actors.requestor.headers
    )
    assert res.json()["status_id"] == in_progress.id

    detail = (await client.get(f"/api/requests/{created['id']}", headers=actors.requestor.headers)).json()
    assert len(detail["replies"]) == 3
    assert detail["replies"][-1]["body"] == "Any update?"
    assert detail["replies"][-1]["status_name"] == "In Progress"
    # Replying never moves the request
    assert detail["status"]["id"] == in_progress.id


@pytest.mark.asyncio
async def test_reply_to_missing_request(client, actors, master_data):
    res = await client.post(
        "/api/requests/00000000-0000-0000-0000-000000000000/replies",
        json={"body": "hello"},
        headers=actors.requestor.headers,
    )
    assert res.status_code == 404


# ------------------------------------------------------------------
# ASSIGNMENT
# ------------------------------------------------------------------
@pytest.mark.asyncio
async def test_assign_twice_keeps_assignee_and_logs_each_call(client, actors, master_data):
    created = await create(client, actors.requestor, master_data.request_type.id)
    url = f"/api/requests/{created['id']}/assign"
    payload = {"technician_id": str(actors.technician.id), "description": "Please check the BIOS"}

    first = await client.post(url, json=payload, headers=actors.hod.headers)
    second = await client.post(url, json=payload, headers=actors.admin.headers)
    assert first.status_code == second.status_code == 200
    assert first.json()["assigned_to_user_id"] == second.json()["assigned_to_user_id"] == str(actors.technician.id)
    assert second.json()["assigned_by_user_id"] == str(actors.admin.id)

    detail = (await client.get(f"/api/requests/{created['id']}", headers=actors.admin.headers)).json()
    assert detail["assignee"]["name"] == "Tom Tech"
    assert detail["assigned_description"] == "Please check the BIOS"

    system_replies = [r for r in detail["replies"] if r["is_system"]]
    assert len(system_replies) == 2
    assert all(r["body"].startswith("Assigned request to Tom Tech") for r in system_replies)
    assert all(r["status_id"] == master_data.statuses["OPEN"].id for r in system_replies)


@pytest.mark.asyncio
@pytest.mark.parametrize("who", ["requestor", "technician"])
async def test_assign_requires_admin_or_hod(client, actors, master_data, who):
    created = await create(client, actors.requestor, master_data.request_type.id)
    res = await client.post(
        f"/api/requests/{created['id']}/assign",
        json={"technician_id": str(actors.technician.id)},
        headers=getattr(actors, who).headers,
    )
    assert res.status_code == 403
    assert res.json()["error"] == "Unauthorized"

    detail = (await client.get(f"/api/requests/{created['id']}", headers=actors.admin.headers)).json()
    assert detail["assignee"] is None
    assert detail["replies"] == []


@pytest.mark.asyncio
async def test_assign_missing_request_or_technician(client, actors, master_data):
    created = await create(client, actors.requestor, master_data.request_type.id)

    res = await client.post(
        f"/api/requests/{created['id']}/assign",
        json={"technician_id": "00000000-0000-0000-0000-000000000000"},
        headers=actors.admin.headers,
    )
    assert res.status_code == 404

    res = await client.post(
        "/api/requests/00000000-0000-0000-0000-000000000000/assign",
        json={"technician_id": str(actors.technician.id)},
        headers=actors.admin.headers,
    )
    assert res.status_code == 404


# ------------------------------------------------------------------
# DEPARTMENT TECHNICIANS
# ------------------------------------------------------------------
@pytest.mark.asyncio
async def test_department_technicians(client, actors, master_data):
    dept_id = master_data.department.id
    for person in (actors.technician, actors.technician2, actors.technician):
        res = await client.post(
            "/api/department-persons",
            json={"department_id": dept_id, "user_id": str(person.id), "from_date": "2024-01-01T00:00:00"},
            headers=actors.admin.headers,
        )
        assert res.status_code == 201

    res = await client.get(f"/api/departments/{dept_id}/technicians", headers=actors.hod.headers)
    assert res.status_code == 200
    assert [u["name"] for u in res.json()] == ["Tia Tech", "Tom Tech"]

    res = await client.get("/api/departments/9999/technicians", headers=actors.hod.headers)
    assert res.status_code == 404
