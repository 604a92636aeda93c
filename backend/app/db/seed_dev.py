"""Dev seeding helper - creates a demo school to click around in."""

import asyncio
import logging
import uuid
from datetime import date

from sqlalchemy import select

from backend.app.config import get_settings
from backend.app.db.engine import AdminClient, create_admin_client
from backend.app.db.models import (
    ClassMembership,
    GuardianStudent,
    Org,
    SchoolClass,
    Student,
    User,
)
from backend.app.models.common import Role

logger = logging.getLogger(__name__)

# Fixed IDs so dev tokens can be minted against them
DEV_ORG_ID = uuid.UUID("00000000-0000-0000-0000-000000000001")
DEV_PRINCIPAL_ID = uuid.UUID("00000000-0000-0000-0000-000000000002")
DEV_TEACHER_ID = uuid.UUID("00000000-0000-0000-0000-000000000003")
DEV_GUARDIAN_ID = uuid.UUID("00000000-0000-0000-0000-000000000004")
DEV_CLASS_ID = uuid.UUID("00000000-0000-0000-0000-000000000010")


async def seed_dev_school(client: AdminClient) -> bool:
    """Seed a dev org with a principal, a teacher, a guardian, a class and two students.

    This function is idempotent - safe to run multiple times.

    Args:
        client: Privileged database client

    Returns:
        True if rows were created, False if the dev org already existed
    """
    async with client.session() as session:
        org = await session.scalar(select(Org).where(Org.id == DEV_ORG_ID))
        if org is not None:
            logger.info("Dev org already exists: %s", org.name)
            return False

        logger.info("Creating dev org with id %s", DEV_ORG_ID)
        session.add(Org(id=DEV_ORG_ID, name="Dev School", slug="dev-school"))
        await session.flush()

        session.add_all(
            [
                User(
                    id=DEV_PRINCIPAL_ID,
                    org_id=DEV_ORG_ID,
                    email="principal@example.com",
                    first_name="Pat",
                    last_name="Principal",
                    role=Role.principal.value,
                ),
                User(
                    id=DEV_TEACHER_ID,
                    org_id=DEV_ORG_ID,
                    email="teacher@example.com",
                    first_name="Terry",
                    last_name="Teacher",
                    role=Role.teacher.value,
                ),
                User(
                    id=DEV_GUARDIAN_ID,
                    org_id=DEV_ORG_ID,
                    email="guardian@example.com",
                    first_name="Gale",
                    last_name="Guardian",
                    role=Role.guardian.value,
                ),
                SchoolClass(id=DEV_CLASS_ID, org_id=DEV_ORG_ID, name="Sunflowers", code="SUN"),
            ]
        )
        await session.flush()

        first = Student(
            org_id=DEV_ORG_ID,
            class_id=DEV_CLASS_ID,
            first_name="Ada",
            last_name="Guardian",
            dob=date(2020, 3, 14),
        )
        second = Student(
            org_id=DEV_ORG_ID,
            class_id=DEV_CLASS_ID,
            first_name="Linus",
            last_name="Student",
            dob=date(2020, 8, 1),
        )
        session.add_all([first, second])
        await session.flush()

        session.add_all(
            [
                ClassMembership(
                    org_id=DEV_ORG_ID,
                    class_id=DEV_CLASS_ID,
                    user_id=DEV_TEACHER_ID,
                    membership_role=Role.teacher.value,
                ),
                GuardianStudent(guardian_id=DEV_GUARDIAN_ID, student_id=first.id, relation="parent"),
            ]
        )
        await session.commit()

    logger.info("Dev seeding complete")
    return True


async def main() -> None:
    client = create_admin_client(get_settings())
    if client is None:
        raise SystemExit("DATABASE_URL must be set to seed the dev database")
    try:
        await seed_dev_school(client)
    finally:
        await client.dispose()


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    asyncio.run(main())
