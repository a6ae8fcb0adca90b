"""
Profile API routes for the authenticated user.

The user is always the one named by the verified token; no route accepts a
user id from the client.
"""

from fastapi import APIRouter, Depends

from tasklist.dependencies import get_account_service, get_current_identity
from tasklist.errors import InternalError, ServiceError
from tasklist.schemas import MessageResponse, ProfileInfo, ProfileUpdate
from tasklist.services import AccountService, TokenClaims
from tasklist.utils.logger import setup_logger

logger = setup_logger("api.profile")

router = APIRouter(prefix="/profile", tags=["Profile"])


@router.get("", response_model=ProfileInfo)
async def get_profile(
    identity: TokenClaims = Depends(get_current_identity),
    account_service: AccountService = Depends(get_account_service),
):
    """Return the username and email of the current user."""
    try:
        user = await account_service.get_profile(identity.user_id)
    except ServiceError:
        raise
    except Exception as e:
        logger.error(f"Profile retrieval error: {e}", exc_info=True)
        raise InternalError("Internal server error during profile retrieval") from e

    return ProfileInfo.model_validate(user)


@router.put("", response_model=MessageResponse)
async def update_profile(
    profile_data: ProfileUpdate,
    identity: TokenClaims = Depends(get_current_identity),
    account_service: AccountService = Depends(get_account_service),
):
    """Update any of username, email and password."""
    try:
        await account_service.update_profile(
            identity.user_id, profile_data.model_dump(exclude_none=True)
        )
    except ServiceError:
        raise
    except Exception as e:
        logger.error(f"Profile update error: {e}", exc_info=True)
        raise InternalError("Internal server error during profile update") from e

    return MessageResponse(message="Profile Updated")
