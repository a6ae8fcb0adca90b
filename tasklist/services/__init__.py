from tasklist.services.account_service import AccountService
from tasklist.services.password_hasher import PasswordHasher
from tasklist.services.token_service import TokenClaims, TokenService

__all__ = [
    "AccountService",
    "PasswordHasher",
    "TokenClaims",
    "TokenService",
]
