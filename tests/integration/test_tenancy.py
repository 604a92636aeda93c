"""Tests for tenancy enforcement across organizations."""

import pytest
from httpx import AsyncClient


def auth(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


@pytest.mark.asyncio
async def test_attendance_isolated_between_orgs(
    client: AsyncClient, school, token_factory
) -> None:
    """Test records saved in one org are invisible to another."""
    teacher_a = token_factory(school.teacher_a, roles=["teacher"], org_id=school.org_a)
    teacher_b = token_factory(school.teacher_b, roles=["teacher"], org_id=school.org_b)

    await client.post(
        "/api/attendance",
        json={"student_id": str(school.student_linked), "date": "2024-09-02"},
        headers=auth(teacher_a),
    )
    await client.post(
        "/api/attendance",
        json={"student_id": str(school.student_b), "date": "2024-09-02"},
        headers=auth(teacher_b),
    )

    seen_a = (await client.get("/api/attendance", headers=auth(teacher_a))).json()
    seen_b = (await client.get("/api/attendance", headers=auth(teacher_b))).json()

    assert [r["student_id"] for r in seen_a["attendance"]] == [str(school.student_linked)]
    assert [r["student_id"] for r in seen_b["attendance"]] == [str(school.student_b)]


@pytest.mark.asyncio
async def test_cannot_delete_other_orgs_record(client: AsyncClient, school, token_factory) -> None:
    teacher_a = token_factory(school.teacher_a, roles=["teacher"], org_id=school.org_a)
    teacher_b = token_factory(school.teacher_b, roles=["teacher"], org_id=school.org_b)

    created = await client.post(
        "/api/attendance",
        json={"student_id": str(school.student_b), "date": "2024-09-02"},
        headers=auth(teacher_b),
    )
    record_id = created.json()["attendance"]["id"]

    response = await client.delete(
        "/api/attendance", params={"id": record_id}, headers=auth(teacher_a)
    )

    assert response.status_code == 404


@pytest.mark.asyncio
async def test_org_less_admin_updates_any_record(
    client: AsyncClient, school, token_factory
) -> None:
    """Test the org-optional update route is unscoped for admins without an org."""
    teacher_b = token_factory(school.teacher_b, roles=["teacher"], org_id=school.org_b)
    created = await client.post(
        "/api/attendance",
        json={"student_id": str(school.student_b), "date": "2024-09-02"},
        headers=auth(teacher_b),
    )

    admin = token_factory(school.admin, roles=["admin"])
    response = await client.put(
        "/api/attendance",
        json={"id": created.json()["attendance"]["id"], "status": "absent"},
        headers=auth(admin),
    )

    assert response.status_code == 200
    assert response.json()["attendance"]["status"] == "absent"


@pytest.mark.asyncio
async def test_announcements_isolated_between_orgs(
    client: AsyncClient, school, token_factory
) -> None:
    principal_a = token_factory(school.principal_a, roles=["principal"], org_id=school.org_a)
    teacher_b = token_factory(school.teacher_b, roles=["teacher"], org_id=school.org_b)

    await client.post("/api/announcements", json={"title": "Alpha only"}, headers=auth(principal_a))

    response = await client.get("/api/announcements", headers=auth(teacher_b))

    assert response.json()["announcements"] == []
