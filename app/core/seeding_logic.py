from sqlmodel import select
from loguru import logger
from app.models.department import Department
from app.models.service_type import ServiceType
from app.models.status import RequestStatus
from app.models.enums import UserRole
from app.services.auth_service import get_user_by_email, create_user
from app.core.database import AsyncSessionLocal
from app.core.config import settings

# ----------------------------------------------------------------
# 1. DEFINE STATIC DATA
# ----------------------------------------------------------------

STATUSES_DATA = [
    {"name": "Open", "system_name": "OPEN", "sequence": 10, "css_class": "badge-info",
     "is_open": True, "is_terminal": False, "is_allowed_for_technician": False},
    {"name": "In Progress", "system_name": "IN_PROGRESS", "sequence": 20, "css_class": "badge-primary",
     "is_open": True, "is_terminal": False, "is_allowed_for_technician": True},
    {"name": "Pending Approval", "system_name": "PENDING_APPROVAL", "sequence": 30, "css_class": "badge-warning",
     "is_open": True, "is_terminal": False, "is_allowed_for_technician": True},
    {"name": "Resolved", "system_name": "RESOLVED", "sequence": 40, "css_class": "badge-success",
     "is_open": False, "is_terminal": True, "is_allowed_for_technician": True},
    {"name": "Closed", "system_name": "CLOSED", "sequence": 50, "css_class": "badge-secondary",
     "is_open": False, "is_terminal": True, "is_allowed_for_technician": False},
]

SERVICE_TYPES_DATA = [
    {"name": "Hardware", "sequence": 1},
    {"name": "Software", "sequence": 2},
]

DEPARTMENTS_DATA = [
    {"name": "Information Technology", "description": "IT support and infrastructure"},
]


# ----------------------------------------------------------------
# 2. SEEDING FUNCTIONS
# ----------------------------------------------------------------

async def seed_all():
    """Master function to run all seeding logic."""
    async with AsyncSessionLocal() as session:
        try:
            if settings.SEED_MASTER_DATA:
                await seed_statuses(session)
                await seed_service_types(session)
                await seed_departments(session)
                await session.commit()

            await seed_admin_user(session)
            logger.success("✨ Seeding Complete.")
        except Exception as e:
            logger.error(f"❌ Seeding Failed: {e}")
            await session.rollback()


async def seed_statuses(session):
    for s in STATUSES_DATA:
        stmt = select(RequestStatus).where(RequestStatus.system_name == s["system_name"])
        result = await session.execute(stmt)
        if not result.scalar_one_or_none():
            logger.info(f"🌱 Creating Status: {s['name']}")
            session.add(RequestStatus(**s))
    await session.flush()


async def seed_service_types(session):
    for t in SERVICE_TYPES_DATA:
        stmt = select(ServiceType).where(ServiceType.name == t["name"])
        result = await session.execute(stmt)
        if not result.scalar_one_or_none():
            logger.info(f"🌱 Creating Service Type: {t['name']}")
            session.add(ServiceType(**t))
    await session.flush()


async def seed_departments(session):
    for d in DEPARTMENTS_DATA:
        stmt = select(Department).where(Department.name == d["name"])
        result = await session.execute(stmt)
        if not result.scalar_one_or_none():
            logger.info(f"🌱 Creating Department: {d['name']}")
            session.add(Department(**d))
    await session.flush()


async def seed_admin_user(session):
    if settings.SUPER_ADMIN_EMAIL and settings.SUPER_ADMIN_PASSWORD:
        existing = await get_user_by_email(session, settings.SUPER_ADMIN_EMAIL)
        if not existing:
            await create_user(
                session=session,
                name=settings.SUPER_ADMIN_NAME or "Super Admin",
                email=settings.SUPER_ADMIN_EMAIL,
                password=settings.SUPER_ADMIN_PASSWORD,
                role=UserRole.Admin,
            )
            logger.success("👤 Super Admin Created.")
