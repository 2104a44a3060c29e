import pytest


@pytest.mark.asyncio
async def test_any_user_reads_master_data(client, actors, master_data):
    res = await client.get("/api/statuses", headers=actors.requestor.headers)
    assert res.status_code == 200
    assert [s["system_name"] for s in res.json()] == ["OPEN", "IN_PROGRESS", "PENDING_APPROVAL", "RESOLVED", "CLOSED"]

    res = await client.get("/api/service-types", headers=actors.technician.headers)
    assert [t["name"] for t in res.json()] == ["Hardware", "Software"]

    res = await client.get("/api/departments", headers=actors.requestor.headers)
    assert [d["name"] for d in res.json()] == ["Information Technology"]

    assert (await client.get("/api/departments")).status_code == 401


@pytest.mark.asyncio
@pytest.mark.parametrize("who", ["requestor", "technician", "hod"])
async def test_only_admin_writes_master_data(client, actors, master_data, who):
    headers = getattr(actors, who).headers
    assert (await client.post("/api/departments", json={"name": "Facilities"}, headers=headers)).status_code == 403
    assert (await client.post("/api/service-types", json={"name": "Network"}, headers=headers)).status_code == 403
    assert (await client.delete(f"/api/statuses/{master_data.statuses['OPEN'].id}", headers=headers)).status_code == 403


@pytest.mark.asyncio
async def test_department_crud(client, actors, master_data):
    headers = actors.admin.headers

    res = await client.post("/api/departments", json={"name": "Facilities", "cc_email": "fac@example.com"}, headers=headers)
    assert res.status_code == 201
    dept_id = res.json()["id"]

    dup = await client.post("/api/departments", json={"name": "facilities"}, headers=headers)
    assert dup.status_code == 422
    assert dup.json()["field"] == "name"

    res = await client.put(f"/api/departments/{dept_id}", json={"name": "Facilities & Estates"}, headers=headers)
    assert res.status_code == 200
    assert res.json()["name"] == "Facilities & Estates"

    assert (await client.delete(f"/api/departments/{dept_id}", headers=headers)).status_code == 204
    assert (await client.get(f"/api/departments/{dept_id}", headers=headers)).status_code == 404


@pytest.mark.asyncio
async def test_delete_referenced_rows_fails(client, actors, master_data):
    headers = actors.admin.headers

    res = await client.delete(f"/api/departments/{master_data.department.id}", headers=headers)
    assert res.status_code == 422
    assert res.json()["error"] == "ValidationFailed"

    await client.post(
        "/api/requests",
        json={"title": "t", "description": "d", "priority": "Low", "request_type_id": master_data.request_type.id},
        headers=actors.requestor.headers,
    )
    assert (await client.delete(f"/api/statuses/{master_data.statuses['OPEN'].id}", headers=headers)).status_code == 422
    assert (await client.delete(f"/api/request-types/{master_data.request_type.id}", headers=headers)).status_code == 422

    # Unused rows can go
    assert (await client.delete(f"/api/statuses/{master_data.statuses['CLOSED'].id}", headers=headers)).status_code == 204
    assert (await client.delete(f"/api/request-types/{master_data.general_type.id}", headers=headers)).status_code == 204


@pytest.mark.asyncio
async def test_request_types(client, actors, master_data):
    headers = actors.admin.headers

    res = await client.post(
        "/api/request-types",
        json={"name": "Bad", "department_id": 9999},
        headers=headers,
    )
    assert res.status_code == 422
    assert res.json()["field"] == "department_id"

    res = await client.post(
        "/api/request-types",
        json={"name": "Odd priority", "default_priority": "Urgent"},
        headers=headers,
    )
    assert res.json()["field"] == "default_priority"

    res = await client.get(
        "/api/request-types", params={"service_type_id": master_data.service_type.id}, headers=actors.requestor.headers
    )
    assert res.status_code == 200
    assert [(t["name"], t["department_name"], t["service_type_name"]) for t in res.json()] == [
        ("Laptop Repair", "Information Technology", "Hardware")
    ]

    res = await client.get("/api/request-types", headers=actors.requestor.headers)
    assert len(res.json()) == 2


@pytest.mark.asyncio
async def test_status_system_name_is_unique_and_upper_cased(client, actors, master_data):
    headers = actors.admin.headers

    res = await client.post("/api/statuses", json={"name": "On Hold", "system_name": "on_hold", "sequence": 25}, headers=headers)
    assert res.status_code == 201
    assert res.json()["system_name"] == "ON_HOLD"

    res = await client.post("/api/statuses", json={"name": "Hold again", "system_name": "ON_HOLD"}, headers=headers)
    assert res.status_code == 422
    assert res.json()["field"] == "system_name"


@pytest.mark.asyncio
async def test_personnel_mappings(client, actors, master_data):
    headers = actors.admin.headers

    res = await client.post(
        "/api/department-persons",
        json={
            "department_id": master_data.department.id,
            "user_id": str(actors.hod.id),
            "from_date": "2024-01-01T00:00:00",
            "is_hod": True,
        },
        headers=headers,
    )
    assert res.status_code == 201

    res = await client.post(
        "/api/department-persons",
        json={
            "department_id": master_data.department.id,
            "user_id": str(actors.technician.id),
            "from_date": "2024-02-01T00:00:00",
            "to_date": "2024-01-01T00:00:00",
        },
        headers=headers,
    )
    assert res.status_code == 422
    assert res.json()["field"] == "to_date"

    res = await client.get(
        "/api/department-persons", params={"department_id": master_data.department.id}, headers=headers
    )
    assert [(p["user_name"], p["is_hod"]) for p in res.json()] == [("Hana Hod", True)]

    res = await client.post(
        "/api/type-persons",
        json={"request_type_id": master_data.request_type.id, "user_id": str(actors.technician.id)},
        headers=headers,
    )
    assert res.status_code == 201
    mapping_id = res.json()["id"]

    res = await client.get(
        "/api/type-persons", params={"request_type_id": master_data.request_type.id}, headers=headers
    )
    assert [(m["request_type_name"], m["user_name"]) for m in res.json()] == [("Laptop Repair", "Tom Tech")]

    assert (await client.delete(f"/api/type-persons/{mapping_id}", headers=headers)).status_code == 204
    assert (await client.delete(f"/api/type-persons/{mapping_id}", headers=headers)).status_code == 404
