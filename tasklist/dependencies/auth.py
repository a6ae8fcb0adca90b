"""
Authentication dependencies for FastAPI route protection.

`get_current_identity` is the gate in front of every protected route. It
reads only the Authorization header and the token service; it never
touches the database.
"""

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from fastapi.security.utils import get_authorization_scheme_param

from tasklist.dependencies.services import get_token_service
from tasklist.errors import InvalidTokenError, MissingTokenError
from tasklist.services.token_service import TokenClaims, TokenService

# auto_error is off so a missing header maps to our own MissingToken error
security = HTTPBearer(auto_error=False)


async def get_current_identity(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
    token_service: TokenService = Depends(get_token_service),
) -> TokenClaims:
    """
    Verify the bearer token and attach the verified user id to the request.
    """
    if credentials is None or not credentials.credentials:
        # a token sent under any other scheme is an invalid token, not a missing one
        _, token = get_authorization_scheme_param(request.headers.get("Authorization"))
        if token.strip():
            raise InvalidTokenError()
        raise MissingTokenError()

    claims = token_service.verify(credentials.credentials)
    if claims is None:
        raise InvalidTokenError()

    request.state.user_id = claims.user_id
    return claims
