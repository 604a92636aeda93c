"""Unit tests for identity resolution."""

import uuid
from typing import Any

import pytest
from starlette.requests import Request

from backend.app.api.auth import IdentityResolver, extract_token, roles_from_metadata
from backend.app.api.errors import BackendUnavailable, Unauthenticated
from backend.app.config import Settings
from backend.app.db.inmemory import InMemoryUserDirectory
from backend.app.db.repositories import UserRecord
from backend.app.models.common import Role


def make_request(headers: dict[str, str] | None = None) -> Request:
    """Build a bare GET request with the given headers."""
    scope: dict[str, Any] = {
        "type": "http",
        "method": "GET",
        "path": "/",
        "query_string": b"",
        "headers": [(k.lower().encode(), v.encode()) for k, v in (headers or {}).items()],
    }
    return Request(scope)


def bearer(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


@pytest.mark.asyncio
async def test_resolve_valid_token(settings: Settings, token_factory) -> None:
    """Test a valid token yields user, org and roles from metadata."""
    user_id = uuid.uuid4()
    org_id = uuid.uuid4()
    resolver = IdentityResolver(settings)

    ctx = await resolver.resolve(
        make_request(bearer(token_factory(user_id, roles=["teacher", "guardian"], org_id=org_id)))
    )

    assert ctx.user_id == user_id
    assert ctx.org_id == org_id
    assert ctx.roles == frozenset({Role.teacher, Role.guardian})
    assert ctx.email == f"{user_id}@example.com"


@pytest.mark.asyncio
async def test_resolve_missing_credentials(settings: Settings) -> None:
    """Test a request without header or cookie is unauthenticated."""
    with pytest.raises(Unauthenticated):
        await IdentityResolver(settings).resolve(make_request())


@pytest.mark.asyncio
async def test_resolve_non_bearer_scheme(settings: Settings) -> None:
    """Test a Basic auth header is rejected."""
    with pytest.raises(Unauthenticated):
        await IdentityResolver(settings).resolve(make_request({"Authorization": "Basic abc"}))


@pytest.mark.asyncio
async def test_resolve_bad_signature(settings: Settings, token_factory) -> None:
    """Test a token signed with another secret is rejected."""
    token = token_factory(uuid.uuid4(), roles=["admin"], secret="x" * 40)

    with pytest.raises(Unauthenticated):
        await IdentityResolver(settings).resolve(make_request(bearer(token)))


@pytest.mark.asyncio
async def test_resolve_expired_token(settings: Settings, token_factory) -> None:
    """Test an expired token is rejected."""
    token = token_factory(uuid.uuid4(), roles=["admin"], expires_in=-60)

    with pytest.raises(Unauthenticated):
        await IdentityResolver(settings).resolve(make_request(bearer(token)))


@pytest.mark.asyncio
async def test_resolve_wrong_audience(settings: Settings, token_factory) -> None:
    """Test a token for another audience is rejected."""
    token = token_factory(uuid.uuid4(), roles=["admin"], audience="anon")

    with pytest.raises(Unauthenticated):
        await IdentityResolver(settings).resolve(make_request(bearer(token)))


@pytest.mark.asyncio
async def test_resolve_non_uuid_subject(settings: Settings, token_factory) -> None:
    """Test a subject that is not a UUID is rejected."""
    token = token_factory("service-account", roles=["admin"])

    with pytest.raises(Unauthenticated):
        await IdentityResolver(settings).resolve(make_request(bearer(token)))


@pytest.mark.asyncio
async def test_resolve_without_secret_is_config_error(token_factory) -> None:
    """Test a missing JWT secret surfaces as a backend error, not a 401."""
    resolver = IdentityResolver(Settings(supabase_jwt_secret="", database_url=None))

    with pytest.raises(BackendUnavailable):
        await resolver.resolve(make_request(bearer(token_factory(uuid.uuid4()))))


@pytest.mark.asyncio
async def test_resolve_reads_session_cookie(settings: Settings, token_factory) -> None:
    """Test the session cookie is used when no Authorization header is sent."""
    user_id = uuid.uuid4()
    token = token_factory(user_id, roles=["principal"], org_id=uuid.uuid4())

    ctx = await IdentityResolver(settings).resolve(
        make_request({"Cookie": f"{settings.auth_cookie_name}={token}"})
    )

    assert ctx.user_id == user_id


@pytest.mark.asyncio
async def test_org_falls_back_to_alternate_metadata_keys(settings: Settings, token_factory) -> None:
    """Test organization_id and orgId are honored when org_id is absent."""
    org_id = uuid.uuid4()
    resolver = IdentityResolver(settings)

    for key in ("organization_id", "orgId"):
        token = token_factory(uuid.uuid4(), roles=["teacher"], metadata={key: str(org_id)})
        ctx = await resolver.resolve(make_request(bearer(token)))
        assert ctx.org_id == org_id


@pytest.mark.asyncio
async def test_org_falls_back_to_user_directory(settings: Settings, token_factory) -> None:
    """Test the profile row supplies the org when the token has none."""
    user_id = uuid.uuid4()
    org_id = uuid.uuid4()
    directory = InMemoryUserDirectory([UserRecord(user_id=user_id, org_id=org_id, role="teacher")])

    ctx = await IdentityResolver(settings, directory).resolve(
        make_request(bearer(token_factory(user_id, roles=["teacher"])))
    )

    assert ctx.org_id == org_id
    assert directory.lookups == 1


@pytest.mark.asyncio
async def test_directory_not_consulted_when_token_has_org(settings: Settings, token_factory) -> None:
    """Test the directory lookup is skipped when metadata carries the org."""
    directory = InMemoryUserDirectory()
    token = token_factory(uuid.uuid4(), roles=["teacher"], org_id=uuid.uuid4())

    await IdentityResolver(settings, directory).resolve(make_request(bearer(token)))

    assert directory.lookups == 0


@pytest.mark.asyncio
async def test_unknown_user_has_no_org(settings: Settings, token_factory) -> None:
    """Test an admin with no profile row resolves with org_id None."""
    ctx = await IdentityResolver(settings, InMemoryUserDirectory()).resolve(
        make_request(bearer(token_factory(uuid.uuid4(), roles=["admin"])))
    )

    assert ctx.org_id is None
    assert ctx.roles == frozenset({Role.admin})


def test_roles_drop_unknown_values() -> None:
    """Test strings outside the role vocabulary are ignored."""
    roles, _ = roles_from_metadata({"roles": ["teacher", "superuser", "Admin"]})

    assert roles == frozenset({Role.teacher})


def test_roles_fall_back_to_single_role() -> None:
    """Test activeRole/role are used when the roles list is empty."""
    assert roles_from_metadata({"roles": [], "role": "principal"}) == (
        frozenset({Role.principal}),
        Role.principal,
    )
    assert roles_from_metadata({"activeRole": "guardian"})[0] == frozenset({Role.guardian})


def test_active_role_must_be_assigned() -> None:
    """Test activeRole is honored only when it is one of the assigned roles."""
    roles, active = roles_from_metadata({"roles": ["teacher", "principal"], "activeRole": "teacher"})
    assert active == Role.teacher

    roles, active = roles_from_metadata({"roles": ["teacher"], "activeRole": "admin"})
    assert roles == frozenset({Role.teacher})
    assert active == Role.teacher


def test_extract_token_prefers_header() -> None:
    """Test the header wins over the cookie."""
    request = make_request({"Authorization": "Bearer from-header", "Cookie": "sb-access-token=c"})

    assert extract_token(request, "sb-access-token") == "from-header"


@pytest.mark.asyncio
async def test_roles_fall_back_to_profile_role(settings: Settings, token_factory) -> None:
    """Test the profile role is used when the token metadata names no roles."""
    user_id = uuid.uuid4()
    org_id = uuid.uuid4()
    directory = InMemoryUserDirectory(
        [UserRecord(user_id=user_id, org_id=org_id, role="principal", email="pia@example.com")]
    )

    ctx = await IdentityResolver(settings, directory).resolve(
        make_request(bearer(token_factory(user_id, org_id=org_id)))
    )

    assert ctx.roles == frozenset({Role.principal})
    assert ctx.active_role == Role.principal
    assert ctx.org_id == org_id
    assert directory.lookups == 1


@pytest.mark.asyncio
async def test_token_roles_win_over_profile_role(settings: Settings, token_factory) -> None:
    """Test metadata roles are kept when the profile is consulted only for the org."""
    user_id = uuid.uuid4()
    directory = InMemoryUserDirectory(
        [UserRecord(user_id=user_id, org_id=uuid.uuid4(), role="guardian")]
    )

    ctx = await IdentityResolver(settings, directory).resolve(
        make_request(bearer(token_factory(user_id, roles=["teacher"])))
    )

    assert ctx.roles == frozenset({Role.teacher})
