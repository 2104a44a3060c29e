import pytest


@pytest.mark.asyncio
async def test_list_users_admin_only(client, actors):
    res = await client.get("/api/users", headers=actors.admin.headers)
    assert res.status_code == 200

    roles = {u["email"]: u["role"] for u in res.json()}
    assert roles["admin@example.com"] == "admin"
    assert roles["tech@example.com"] == "technician"
    assert [u["name"] for u in res.json()] == sorted(u["name"] for u in res.json())

    res = await client.get("/api/users", headers=actors.hod.headers)
    assert res.status_code == 403


@pytest.mark.asyncio
async def test_admin_creates_user_with_role(client, actors):
    payload = {"name": "Nina New", "email": "nina@example.com", "password": "pw123456", "role": "technician"}
    res = await client.post("/api/users", json=payload, headers=actors.admin.headers)
    assert res.status_code == 201
    assert res.json()["role"] == "technician"

    res = await client.post("/api/users", json=payload, headers=actors.admin.headers)
    assert res.status_code == 409

    res = await client.post("/api/users", json={**payload, "email": "x@example.com"}, headers=actors.requestor.headers)
    assert res.status_code == 403


@pytest.mark.asyncio
async def test_set_role_changes_permissions(client, actors):
    assert (await client.get("/api/analytics/stats", headers=actors.requestor.headers)).status_code == 403

    res = await client.put(
        f"/api/users/{actors.requestor.id}/role", json={"role": "hod"}, headers=actors.admin.headers
    )
    assert res.status_code == 200
    assert res.json() == {"role": "hod"}

    # Same token, role is resolved per request
    assert (await client.get("/api/analytics/stats", headers=actors.requestor.headers)).status_code == 200


@pytest.mark.asyncio
async def test_set_role_validation(client, actors):
    res = await client.put(
        f"/api/users/{actors.requestor.id}/role", json={"role": "superuser"}, headers=actors.admin.headers
    )
    assert res.status_code == 422

    res = await client.put(
        "/api/users/00000000-0000-0000-0000-000000000000/role", json={"role": "hod"}, headers=actors.admin.headers
    )
    assert res.status_code == 404


@pytest.mark.asyncio
async def test_unknown_stored_role_reads_as_requestor(client, actors, db_session):
    from sqlmodel import select
    from app.models.user import RoleAssignment

    assignment = (
        await db_session.execute(select(RoleAssignment).where(RoleAssignment.user_id == actors.hod.id))
    ).scalar_one()
    assignment.role = "overlord"
    db_session.add(assignment)
    await db_session.commit()

    me = await client.get("/api/auth/me", headers=actors.hod.headers)
    assert me.json()["role"] == "requestor"
    assert (await client.get("/api/analytics/stats", headers=actors.hod.headers)).status_code == 403
