"""
The authentication gate in isolation: a bare app with only a token service
on its state, and no database at all.
"""

import uuid

import pytest
from fastapi import Depends, FastAPI, Request
from fastapi.testclient import TestClient

from main import service_error_handler
from tasklist.dependencies import get_current_identity
from tasklist.errors import ServiceError
from tasklist.services import TokenClaims, TokenService


@pytest.fixture
def gate_client(token_service: TokenService) -> TestClient:
    app = FastAPI()
    app.state.token_service = token_service
    app.add_exception_handler(ServiceError, service_error_handler)

    @app.get("/whoami")
    async def whoami(request: Request, identity: TokenClaims = Depends(get_current_identity)):
        return {
            "state_user_id": str(request.state.user_id),
            "claims_user_id": str(identity.user_id),
            "username": identity.username,
        }

    return TestClient(app)


def test_valid_token_attaches_verified_user_id(gate_client, token_service):
    user_id = uuid.uuid4()
    token = token_service.issue(user_id, "alice")

    response = gate_client.get("/whoami", headers={"Authorization": f"Bearer {token}"})

    assert response.status_code == 200
    assert response.json() == {
        "state_user_id": str(user_id),
        "claims_user_id": str(user_id),
        "username": "alice",
    }


def test_missing_header_is_missing_token(gate_client):
    response = gate_client.get("/whoami")

    assert response.status_code == 401
    assert response.json()["code"] == "MissingToken"
    assert response.headers["WWW-Authenticate"] == "Bearer"


@pytest.mark.parametrize("scheme", ["Basic", "Token"])
def test_token_under_other_scheme_is_invalid_token(gate_client, token_service, scheme):
    token = token_service.issue(uuid.uuid4(), "alice")

    response = gate_client.get("/whoami", headers={"Authorization": f"{scheme} {token}"})

    assert response.status_code == 401
    assert response.json()["code"] == "InvalidToken"
    assert response.headers["WWW-Authenticate"] == "Bearer"


@pytest.mark.parametrize("header", ["Bearer", "Token"])
def test_scheme_without_token_is_missing_token(gate_client, header):
    response = gate_client.get("/whoami", headers={"Authorization": header})

    assert response.status_code == 401
    assert response.json()["code"] == "MissingToken"


def test_garbage_token_is_invalid_token(gate_client):
    response = gate_client.get("/whoami", headers={"Authorization": "Bearer not.a.jwt"})

    assert response.status_code == 401
    assert response.json() == {"detail": "Invalid JWT Token", "code": "InvalidToken"}


def test_token_signed_elsewhere_is_invalid_token(gate_client):
    forged = TokenService(secret_key="attacker-controlled-secret-key-123456").issue(
        uuid.uuid4(), "mallory"
    )

    response = gate_client.get("/whoami", headers={"Authorization": f"Bearer {forged}"})

    assert response.status_code == 401
    assert response.json()["code"] == "InvalidToken"


def test_gate_is_repeatable(gate_client, token_service):
    headers = {"Authorization": f"Bearer {token_service.issue(uuid.uuid4(), 'alice')}"}

    first = gate_client.get("/whoami", headers=headers)
    second = gate_client.get("/whoami", headers=headers)

    assert first.status_code == second.status_code == 200
    assert first.json() == second.json()
