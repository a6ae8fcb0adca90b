import asyncio
import uuid

import pytest

from tasklist.config import MIN_BCRYPT_ROUNDS
from tasklist.errors import (
    EmailAlreadyExistsError,
    InvalidCredentialsError,
    UserNotFoundError,
)
from tasklist.services import AccountService, PasswordHasher


@pytest.mark.asyncio
async def test_register_then_login_yields_verifiable_token(account_service, token_service):
    user = await account_service.register("alice", "a@x.com", "secret1")

    token = await account_service.login("a@x.com", "secret1")
    claims = token_service.verify(token)

    assert claims.user_id == user.id
    assert claims.username == "alice"


@pytest.mark.asyncio
async def test_register_stores_hash_not_password(account_service, user_db_handler):
    await account_service.register("alice", "a@x.com", "secret1")

    stored = await user_db_handler.get_user_by_email("a@x.com")

    assert stored.password_hash != "secret1"
    assert stored.password_hash.startswith("$2")
    assert "password_hash" not in stored.to_dict()


@pytest.mark.asyncio
async def test_duplicate_email_conflicts_regardless_of_other_fields(account_service):
    await account_service.register("alice", "a@x.com", "secret1")

    with pytest.raises(EmailAlreadyExistsError):
        await account_service.register("someone else", "a@x.com", "different-pw")


@pytest.mark.asyncio
async def test_concurrent_duplicate_registration_admits_one(account_service):
    results = await asyncio.gather(
        account_service.register("first", "race@x.com", "secret1"),
        account_service.register("second", "race@x.com", "secret2"),
        return_exceptions=True,
    )

    failures = [r for r in results if isinstance(r, Exception)]
    assert len(failures) == 1
    assert isinstance(failures[0], EmailAlreadyExistsError)


@pytest.mark.asyncio
async def test_wrong_password_and_unknown_email_look_the_same(account_service):
    await account_service.register("alice", "a@x.com", "secret1")

    with pytest.raises(InvalidCredentialsError) as wrong_password:
        await account_service.login("a@x.com", "wrong")
    with pytest.raises(InvalidCredentialsError) as unknown_email:
        await account_service.login("nobody@x.com", "secret1")

    assert wrong_password.value.to_dict() == unknown_email.value.to_dict()


@pytest.mark.asyncio
async def test_update_profile_rehashes_password(account_service):
    user = await account_service.register("alice", "a@x.com", "secret1")

    await account_service.update_profile(
        user.id, {"username": "alicia", "password": "new-secret"}
    )

    profile = await account_service.get_profile(user.id)
    assert profile.username == "alicia"
    assert profile.email == "a@x.com"
    with pytest.raises(InvalidCredentialsError):
        await account_service.login("a@x.com", "secret1")
    assert await account_service.login("a@x.com", "new-secret")


@pytest.mark.asyncio
async def test_update_profile_to_taken_email_conflicts(account_service):
    await account_service.register("alice", "a@x.com", "secret1")
    bob = await account_service.register("bob", "b@x.com", "secret1")

    with pytest.raises(EmailAlreadyExistsError):
        await account_service.update_profile(bob.id, {"email": "a@x.com"})


@pytest.mark.asyncio
async def test_empty_profile_update_is_noop(account_service):
    user = await account_service.register("alice", "a@x.com", "secret1")

    await account_service.update_profile(user.id, {})

    assert (await account_service.get_profile(user.id)).username == "alice"


@pytest.mark.asyncio
async def test_profile_of_unknown_user(account_service):
    with pytest.raises(UserNotFoundError):
        await account_service.get_profile(uuid.uuid4())
    with pytest.raises(UserNotFoundError):
        await account_service.update_profile(uuid.uuid4(), {"username": "ghost"})


@pytest.mark.asyncio
async def test_login_upgrades_hash_cost(account_service, user_db_handler, token_service):
    await account_service.register("alice", "a@x.com", "secret1")
    stronger = AccountService(
        user_db_handler, PasswordHasher(rounds=MIN_BCRYPT_ROUNDS + 1), token_service
    )

    await stronger.login("a@x.com", "secret1")

    stored = await user_db_handler.get_user_by_email("a@x.com")
    assert not stronger.password_hasher.needs_rehash(stored.password_hash)
    assert await stronger.login("a@x.com", "secret1")
