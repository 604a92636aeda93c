"""Integration tests for teacher and organization endpoints."""

import uuid

import pytest
from httpx import AsyncClient


def auth(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


@pytest.mark.asyncio
async def test_parent_cannot_view_teacher(client: AsyncClient, school, token_factory) -> None:
    """Test a parent is forbidden even before the id is looked at."""
    token = token_factory(uuid.uuid4(), roles=["parent"], org_id=school.org_a)

    response = await client.get("/api/teachers/123", headers=auth(token))

    assert response.status_code == 403
    assert response.json() == {"error": "Access denied. Valid role required."}


@pytest.mark.asyncio
async def test_principal_views_teacher_details(client: AsyncClient, school, token_factory) -> None:
    token = token_factory(school.principal_a, roles=["principal"], org_id=school.org_a)

    response = await client.get(f"/api/teachers/{school.teacher_a}", headers=auth(token))

    assert response.status_code == 200
    data = response.json()
    assert data["teacher"]["id"] == str(school.teacher_a)
    assert data["total_classes"] == 1
    assert data["classes"][0]["name"] == "Owls"
    assert data["classes"][0]["student_count"] == 2
    assert data["total_students"] == 2


@pytest.mark.asyncio
async def test_teacher_id_must_be_uuid(client: AsyncClient, school, token_factory) -> None:
    token = token_factory(school.principal_a, roles=["principal"], org_id=school.org_a)

    response = await client.get("/api/teachers/123", headers=auth(token))

    assert response.status_code == 400
    assert response.json() == {"error": "Invalid teacher ID"}


@pytest.mark.asyncio
async def test_teacher_in_other_org_not_found(client: AsyncClient, school, token_factory) -> None:
    token = token_factory(school.principal_a, roles=["principal"], org_id=school.org_a)

    response = await client.get(f"/api/teachers/{school.teacher_b}", headers=auth(token))

    assert response.status_code == 404
    assert response.json() == {"error": "Teacher not found"}


@pytest.mark.asyncio
async def test_non_teacher_user_rejected(client: AsyncClient, school, token_factory) -> None:
    token = token_factory(school.principal_a, roles=["principal"], org_id=school.org_a)

    response = await client.get(f"/api/teachers/{school.guardian_a}", headers=auth(token))

    assert response.status_code == 400
    assert response.json() == {"error": "User is not a teacher"}


@pytest.mark.asyncio
async def test_admin_without_org_reaches_org_details(
    client: AsyncClient, school, token_factory
) -> None:
    """Test org routes do not require the admin to belong to an org."""
    token = token_factory(school.admin, roles=["admin"])

    response = await client.get("/api/orgs/42", headers=auth(token))

    # The handler ran: the id check is its own
    assert response.status_code == 400
    assert response.json() == {"error": "Invalid organization ID"}


@pytest.mark.asyncio
async def test_org_details_with_metrics(client: AsyncClient, school, token_factory) -> None:
    token = token_factory(school.admin, roles=["admin"])

    response = await client.get(f"/api/orgs/{school.org_a}", headers=auth(token))

    assert response.status_code == 200
    org = response.json()["org"]
    assert org["name"] == "Alpha School"
    assert org["metrics"] == {
        "students": 2,
        "teachers": 1,
        "parents": 1,
        "principals": 1,
        "totalUsers": 5,
    }


@pytest.mark.asyncio
async def test_org_details_not_found(client: AsyncClient, school, token_factory) -> None:
    token = token_factory(school.admin, roles=["admin"])

    response = await client.get(f"/api/orgs/{uuid.uuid4()}", headers=auth(token))

    assert response.status_code == 404
    assert response.json() == {"error": "Organization not found"}


@pytest.mark.asyncio
async def test_principal_cannot_list_orgs(client: AsyncClient, school, token_factory) -> None:
    token = token_factory(school.principal_a, roles=["principal"], org_id=school.org_a)

    response = await client.get("/api/orgs", headers=auth(token))

    assert response.status_code == 403


@pytest.mark.asyncio
async def test_list_orgs_paging_and_ids(client: AsyncClient, school, token_factory) -> None:
    token = token_factory(school.admin, roles=["admin"])

    all_orgs = await client.get("/api/orgs", headers=auth(token))
    assert all_orgs.status_code == 200
    assert all_orgs.json()["total"] == 2

    page = await client.get("/api/orgs", params={"pageSize": 1, "page": 2}, headers=auth(token))
    assert len(page.json()["orgs"]) == 1
    assert page.json()["page"] == 2

    filtered = await client.get(
        "/api/orgs", params={"ids": f"{school.org_b}, not-a-uuid,"}, headers=auth(token)
    )
    assert [org["id"] for org in filtered.json()["orgs"]] == [str(school.org_b)]


@pytest.mark.asyncio
async def test_list_orgs_rejects_oversized_page(client: AsyncClient, school, token_factory) -> None:
    token = token_factory(school.admin, roles=["admin"])

    response = await client.get("/api/orgs", params={"pageSize": 500}, headers=auth(token))

    assert response.status_code == 400
    assert response.json()["details"][0]["field"] == "pageSize"


@pytest.mark.asyncio
async def test_admin_creates_org(client: AsyncClient, school, token_factory) -> None:
    token = token_factory(school.admin, roles=["admin"])

    response = await client.post(
        "/api/orgs",
        json={"name": " Gamma School ", "slug": "gamma", "email": "office@gammaschool.org"},
        headers=auth(token),
    )

    assert response.status_code == 201
    org = response.json()["org"]
    assert org["name"] == "Gamma School"
    assert org["timezone"] == "UTC"
    assert org["is_active"] is True

    listed = await client.get("/api/orgs", headers=auth(token))
    assert listed.json()["total"] == 3


@pytest.mark.asyncio
async def test_create_org_validation(client: AsyncClient, school, token_factory) -> None:
    token = token_factory(school.admin, roles=["admin"])

    bad_slug = await client.post(
        "/api/orgs", json={"name": "Gamma", "slug": "Gamma School"}, headers=auth(token)
    )
    taken = await client.post(
        "/api/orgs", json={"name": "Alpha 2", "slug": "alpha"}, headers=auth(token)
    )
    bad_email = await client.post(
        "/api/orgs", json={"name": "Gamma", "slug": "gamma", "email": "nope"}, headers=auth(token)
    )

    assert bad_slug.status_code == 400
    assert bad_slug.json()["error"] == (
        "slug: Slug must contain only lowercase letters, numbers, and hyphens"
    )
    assert taken.status_code == 400
    assert taken.json() == {"error": "Slug already in use"}
    assert bad_email.status_code == 400
    assert bad_email.json()["details"][0]["field"] == "email"


@pytest.mark.asyncio
async def test_principal_cannot_create_org(client: AsyncClient, school, token_factory) -> None:
    token = token_factory(school.principal_a, roles=["principal"], org_id=school.org_a)

    response = await client.post(
        "/api/orgs", json={"name": "Gamma", "slug": "gamma"}, headers=auth(token)
    )

    assert response.status_code == 403


@pytest.mark.asyncio
async def test_update_org_changes_present_fields(
    client: AsyncClient, school, token_factory
) -> None:
    token = token_factory(school.admin, roles=["admin"])

    response = await client.put(
        "/api/orgs",
        json={"id": str(school.org_a), "timezone": "Europe/Oslo", "phone": "+47 555 0100"},
        headers=auth(token),
    )

    assert response.status_code == 200
    org = response.json()["org"]
    assert org["timezone"] == "Europe/Oslo"
    assert org["phone"] == "+47 555 0100"
    assert org["name"] == "Alpha School"
    assert org["slug"] == "alpha"


@pytest.mark.asyncio
async def test_update_org_slug_conflict(client: AsyncClient, school, token_factory) -> None:
    token = token_factory(school.admin, roles=["admin"])

    own = await client.put(
        "/api/orgs", json={"id": str(school.org_a), "slug": "alpha"}, headers=auth(token)
    )
    taken = await client.put(
        "/api/orgs", json={"id": str(school.org_a), "slug": "beta"}, headers=auth(token)
    )

    assert own.status_code == 200
    assert taken.status_code == 400
    assert taken.json() == {"error": "Slug already in use"}


@pytest.mark.asyncio
async def test_delete_org_is_soft(client: AsyncClient, school, token_factory) -> None:
    token = token_factory(school.admin, roles=["admin"])

    deleted = await client.delete(
        "/api/orgs", params={"id": str(school.org_b)}, headers=auth(token)
    )
    assert deleted.status_code == 200
    assert deleted.json() == {"success": True}

    details = await client.get(f"/api/orgs/{school.org_b}", headers=auth(token))
    assert details.status_code == 404

    listed = await client.get("/api/orgs", headers=auth(token))
    assert [org["id"] for org in listed.json()["orgs"]] == [str(school.org_a)]

    again = await client.delete(
        "/api/orgs", params={"id": str(school.org_b)}, headers=auth(token)
    )
    assert again.status_code == 404
    assert again.json() == {"error": "Organization not found"}


@pytest.mark.asyncio
async def test_list_orgs_ignores_non_canonical_ids(
    client: AsyncClient, school, token_factory
) -> None:
    token = token_factory(school.admin, roles=["admin"])

    response = await client.get(
        "/api/orgs",
        params={"ids": f"{{{school.org_a}}},{school.org_a.hex},{school.org_b}"},
        headers=auth(token),
    )

    assert [org["id"] for org in response.json()["orgs"]] == [str(school.org_b)]
