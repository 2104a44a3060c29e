import os
import tempfile
from datetime import datetime
from types import SimpleNamespace

import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlmodel import select

# ------------------------------------------------------------------
# FORCE TESTING MODE
# This must be done BEFORE importing app.main so that settings and
# the engine are built against the throwaway SQLite database.
# ------------------------------------------------------------------
TEST_DB_PATH = os.path.join(tempfile.mkdtemp(prefix="service_desk_tests_"), "test.db")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{TEST_DB_PATH}"
os.environ["SECRET_KEY"] = "test-secret-key-not-for-production"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["LOGIN_RATE_LIMIT"] = "1000/minute"
os.environ["RESTRICT_REQUEST_DETAIL"] = "false"
os.environ["ENV"] = "dev"
os.environ.pop("REDIS_URL", None)

from app.main import app  # noqa: E402
from app.core.database import AsyncSessionLocal, drop_db, init_db  # noqa: E402
from app.core.security import create_access_token  # noqa: E402
from app.core.seeding_logic import seed_departments, seed_service_types, seed_statuses  # noqa: E402
from app.models.department import Department  # noqa: E402
from app.models.enums import UserRole  # noqa: E402
from app.models.request_type import RequestType  # noqa: E402
from app.models.service_request import ServiceRequest  # noqa: E402
from app.models.service_type import ServiceType  # noqa: E402
from app.models.status import RequestStatus  # noqa: E402
from app.services.auth_service import create_user  # noqa: E402

PASSWORD = "Secret123!"


def auth_headers(user) -> dict:
    token, _ = create_access_token(user.id, user.email)
    return {"Authorization": f"Bearer {token}"}


# ------------------------------------------------------------------
# DATABASE
# ------------------------------------------------------------------
@pytest_asyncio.fixture
async def database():
    """Fresh tables for every test that touches the database."""
    await drop_db()
    await init_db()
    yield
    await drop_db()


@pytest_asyncio.fixture
async def db_session(database):
    async with AsyncSessionLocal() as session:
        yield session


@pytest_asyncio.fixture
async def client(database):
    # ASGITransport skips startup events; tables come from the database fixture
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://testserver") as ac:
        yield ac


# ------------------------------------------------------------------
# MASTER DATA
# ------------------------------------------------------------------
@pytest_asyncio.fixture
async def master_data(db_session):
    await seed_statuses(db_session)
    await seed_service_types(db_session)
    await seed_departments(db_session)
    await db_session.commit()

    statuses = {
        s.system_name: s
        for s in (await db_session.execute(select(RequestStatus))).scalars().all()
    }
    department = (await db_session.execute(select(Department))).scalars().first()
    hardware = (
        await db_session.execute(select(ServiceType).where(ServiceType.name == "Hardware"))
    ).scalar_one()

    request_type = RequestType(
        name="Laptop Repair",
        sequence=1,
        service_type_id=hardware.id,
        department_id=department.id,
        default_priority="Medium",
    )
    general_type = RequestType(name="General Enquiry", sequence=2)
    db_session.add(request_type)
    db_session.add(general_type)
    await db_session.commit()

    return SimpleNamespace(
        statuses=statuses,
        department=department,
        service_type=hardware,
        request_type=request_type,
        general_type=general_type,
    )


# ------------------------------------------------------------------
# USERS
# ------------------------------------------------------------------
@pytest_asyncio.fixture
async def actors(db_session):
    """One user per role (two requestors, two technicians) with bearer headers."""

    async def make(name: str, email: str, role: UserRole):
        user = await create_user(db_session, name, email, PASSWORD, role=role)
        return SimpleNamespace(
            id=user.id,
            name=user.name,
            email=user.email,
            role=role,
            headers=auth_headers(user),
        )

    return SimpleNamespace(
        admin=await make("Ada Admin", "admin@example.com", UserRole.Admin),
        hod=await make("Hana Hod", "hod@example.com", UserRole.HOD),
        technician=await make("Tom Tech", "tech@example.com", UserRole.Technician),
        technician2=await make("Tia Tech", "tech2@example.com", UserRole.Technician),
        requestor=await make("Rita Requestor", "rita@example.com", UserRole.Requestor),
        requestor2=await make("Ravi Requestor", "ravi@example.com", UserRole.Requestor),
    )


# ------------------------------------------------------------------
# REQUEST ROWS WITH CONTROLLED TIMESTAMPS
# ------------------------------------------------------------------
@pytest_asyncio.fixture
async def insert_request(db_session):
    counter = {"n": 0}

    async def insert(
        requester,
        request_type,
        status,
        created_at: datetime,
        status_at: datetime = None,
        assignee=None,
        title: str = "Printer jam",
    ) -> ServiceRequest:
        counter["n"] += 1
        request = ServiceRequest(
            request_no=f"TST-{created_at.year}-{counter['n']:03d}",
            request_datetime=created_at,
            title=title,
            description="Paper stuck in tray 2",
            priority="Medium",
            request_type_id=request_type.id,
            status_id=status.id,
            requester_id=requester.id,
            assigned_to_user_id=assignee.id if assignee else None,
            status_at=status_at,
        )
        db_session.add(request)
        await db_session.commit()
        return request

    return insert
