# Authentication API routes for user registration and login

from fastapi import APIRouter, Depends, status

from tasklist.dependencies import get_account_service
from tasklist.errors import InternalError, ServiceError
from tasklist.schemas import MessageResponse, Token, UserLogin, UserRegister
from tasklist.services import AccountService
from tasklist.utils.logger import setup_logger

logger = setup_logger("api.auth")

router = APIRouter(tags=["Authentication"])


@router.post(
    "/register", response_model=MessageResponse, status_code=status.HTTP_201_CREATED
)
async def register_user(
    user_data: UserRegister,
    account_service: AccountService = Depends(get_account_service),
):
    """Register a new user. Log in afterwards to obtain a token."""
    try:
        await account_service.register(
            username=user_data.username,
            email=user_data.email,
            password=user_data.password,
        )
    except ServiceError:
        raise
    except Exception as e:
        logger.error(f"Error during registration: {e}", exc_info=True)
        raise InternalError("Internal server error during registration") from e

    return MessageResponse(message="User registered successfully")


@router.post("/login", response_model=Token)
async def login_user(
    user_data: UserLogin,
    account_service: AccountService = Depends(get_account_service),
):
    """Authenticate with email and password and return a session token."""
    try:
        token = await account_service.login(user_data.email, user_data.password)
    except ServiceError:
        raise
    except Exception as e:
        logger.error(f"Login error: {e}", exc_info=True)
        raise InternalError("Internal server error during login") from e

    return Token(token=token)
