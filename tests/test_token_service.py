import uuid
from datetime import timedelta

import pytest
from jose import jwt

from tasklist.services import TokenService

from .conftest import TEST_SECRET_KEY


BASE64URL_ALPHABET = "ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789-_"


def _tamper(token: str, index: int) -> str:
    """Swap one character for its nearest base64url neighbour."""
    char = token[index]
    if char in BASE64URL_ALPHABET:
        replacement = BASE64URL_ALPHABET[BASE64URL_ALPHABET.index(char) ^ 1]
    else:
        replacement = "A"
    return token[:index] + replacement + token[index + 1 :]


def test_issue_then_verify_returns_embedded_identity(token_service: TokenService):
    user_id = uuid.uuid4()
    token = token_service.issue(user_id, "alice")

    claims = token_service.verify(token)

    assert claims is not None
    assert claims.user_id == user_id
    assert claims.username == "alice"
    assert claims.expires_at > claims.issued_at


def test_secret_is_not_in_token(token_service: TokenService):
    token = token_service.issue(uuid.uuid4(), "alice")

    assert TEST_SECRET_KEY not in token
    assert TEST_SECRET_KEY not in str(jwt.get_unverified_claims(token))


def test_tampered_payload_fails(token_service: TokenService):
    token = token_service.issue(uuid.uuid4(), "alice")
    payload_start = token.index(".") + 1

    for offset in (0, 5, 10):
        assert token_service.verify(_tamper(token, payload_start + offset)) is None


def test_tampered_signature_fails(token_service: TokenService):
    token = token_service.issue(uuid.uuid4(), "alice")
    signature_start = token.rindex(".") + 1

    assert token_service.verify(_tamper(token, signature_start + 3)) is None
    assert token_service.verify(_tamper(token, len(token) - 1)) is None


def test_any_single_character_change_fails(token_service: TokenService):
    token = token_service.issue(uuid.uuid4(), "alice")

    for index in range(len(token)):
        tampered = _tamper(token, index)
        assert token_service.verify(tampered) is None, f"change at {index} accepted"


def test_non_canonical_last_segment_character_fails(token_service: TokenService):
    token = token_service.issue(uuid.uuid4(), "alice")
    header, payload, signature = token.split(".")

    for segment_end in (len(header) - 1, len(header) + len(payload), len(token) - 1):
        assert token_service.verify(_tamper(token, segment_end)) is None


def test_token_from_other_secret_fails(token_service: TokenService):
    other = TokenService(secret_key="another-secret-key-with-32-characters!")
    token = other.issue(uuid.uuid4(), "alice")

    assert token_service.verify(token) is None


def test_expired_token_fails(token_service: TokenService):
    token = token_service.issue(
        uuid.uuid4(), "alice", expires_delta=timedelta(seconds=-10)
    )

    assert token_service.verify(token) is None


@pytest.mark.parametrize("token", ["", "abc", "a.b.c", "....", "Bearer xyz"])
def test_malformed_token_fails(token_service: TokenService, token):
    assert token_service.verify(token) is None


def test_signed_token_without_identity_claims_fails(token_service: TokenService):
    no_username = jwt.encode({"sub": str(uuid.uuid4())}, TEST_SECRET_KEY, "HS256")
    bad_subject = jwt.encode({"sub": "42", "username": "bob"}, TEST_SECRET_KEY, "HS256")

    assert token_service.verify(no_username) is None
    assert token_service.verify(bad_subject) is None


def test_token_signed_with_other_algorithm_fails(token_service: TokenService):
    header = jwt.get_unverified_header(token_service.issue(uuid.uuid4(), "alice"))
    assert header["alg"] == "HS256"

    hs512_token = jwt.encode(
        {"sub": str(uuid.uuid4()), "username": "eve"}, TEST_SECRET_KEY, "HS512"
    )
    assert token_service.verify(hs512_token) is None


def test_constructor_validation():
    with pytest.raises(ValueError):
        TokenService(secret_key="")
    with pytest.raises(ValueError):
        TokenService(secret_key=TEST_SECRET_KEY, algorithm="RS256")
