import pytest
from jose import jwt
from sqlalchemy import select

from core.exceptions import DuplicateEmail, Forbidden, InvalidCredentials, InvalidToken
from models.users import User
import services.auth_service as auth_service_module
from utils.hashing import verify_password


TEST_PASSWORD = "pw12345678"


async def test_register_returns_user_and_tokens(registered_user, auth_config):
    user = registered_user["user"]

    assert user.email == "alice@example.com"
    assert user.full_name == "Alice Example"
    assert user.role == "customer"

    payload = jwt.decode(registered_user["access_token"], auth_config.access_secret, algorithms=[auth_config.algorithm])
    assert payload["sub"] == user.id


async def test_register_stores_hash_not_password(registered_user, session):
    result = await session.execute(select(User).where(User.email == "alice@example.com"))
    model = result.scalars().one()

    assert model.hashed_password != TEST_PASSWORD
    assert model.hashed_password.startswith("$2b$")


async def test_register_duplicate_email(auth_service, registered_user, session):
    with pytest.raises(DuplicateEmail):
        await auth_service.register("Alice@Example.com ", "another-pass-1", "Someone Else")

    users = (await session.execute(select(User).where(User.email == "alice@example.com"))).scalars().all()
    assert len(users) == 1
    assert users[0].full_name == "Alice Example"


async def test_register_rejects_unknown_role(auth_service):
    with pytest.raises(ValueError):
        await auth_service.register("bob@example.com", TEST_PASSWORD, "Bob", role="superuser")


async def test_login_success(auth_service, registered_user, auth_config):
    result = await auth_service.login("alice@example.com", TEST_PASSWORD)

    payload = jwt.decode(result["access_token"], auth_config.access_secret, algorithms=[auth_config.algorithm])
    assert payload["sub"] == registered_user["user"].id
    assert result["refresh_token"] != registered_user["refresh_token"]


async def test_login_failures_are_indistinguishable(auth_service, registered_user):
    with pytest.raises(InvalidCredentials) as wrong_password:
        await auth_service.login("alice@example.com", "wrong-password-1")

    with pytest.raises(InvalidCredentials) as unknown_email:
        await auth_service.login("nobody@example.com", TEST_PASSWORD)

    assert wrong_password.value.detail == unknown_email.value.detail
    assert wrong_password.value.status_code == unknown_email.value.status_code


async def test_authenticate_user(auth_service, registered_user):
    assert (await auth_service.authenticate_user("alice@example.com", TEST_PASSWORD)).id == registered_user["user"].id
    assert await auth_service.authenticate_user("alice@example.com", "nope-nope-1") is None
    assert await auth_service.authenticate_user("ghost@example.com", TEST_PASSWORD) is None


async def test_issue_tokens_for_user(auth_service, token_store, registered_user):
    result = await auth_service.issue_tokens_for_user(registered_user["user"].id)

    assert result["user"].id == registered_user["user"].id
    assert await token_store.find_active_by_token(result["refresh_token"]) is not None

    with pytest.raises(InvalidCredentials):
        await auth_service.issue_tokens_for_user("missing-user")


async def test_get_user_by_id(auth_service, registered_user):
    assert (await auth_service.get_user_by_id(registered_user["user"].id)).email == "alice@example.com"

    with pytest.raises(InvalidToken):
        await auth_service.get_user_by_id("missing-user")


async def test_require_role_reads_the_store(auth_service, session, registered_user, admin_user):
    assert (await auth_service.require_role(admin_user["user"].id, "admin")).email == "admin@example.com"

    with pytest.raises(Forbidden):
        await auth_service.require_role(registered_user["user"].id, "admin")

    # Demoted after the token was issued: the token's role claim no longer counts
    model = await session.get(User, admin_user["user"].id)
    model.role = "customer"
    await session.commit()

    with pytest.raises(Forbidden):
        await auth_service.require_role(admin_user["user"].id, "admin")


async def test_full_session_lifecycle(auth_service, token_service):
    registered = await auth_service.register("alice@example.com", TEST_PASSWORD, "Alice")
    assert registered["user"].email == "alice@example.com"

    with pytest.raises(InvalidCredentials):
        await auth_service.login("alice@example.com", "wrong-password-1")

    rotated = await token_service.rotate(registered["refresh_token"])
    with pytest.raises(InvalidToken):
        await token_service.rotate(registered["refresh_token"])

    await token_service.revoke_all(registered["user"].id)
    with pytest.raises(InvalidToken):
        await token_service.rotate(rotated["refresh_token"])


async def test_unknown_email_still_checks_a_password(monkeypatch, auth_service, registered_user):
    """A login for a missing account runs bcrypt like one with a wrong password."""
    calls = []

    def counting_verify(password, hashed_password, context):
        calls.append(hashed_password)
        return verify_password(password, hashed_password, context)

    monkeypatch.setattr(auth_service_module, "verify_password", counting_verify)

    assert await auth_service.authenticate_user("ghost@example.com", TEST_PASSWORD) is None
    assert len(calls) == 1
    assert calls[0].startswith("$2b$04$")
