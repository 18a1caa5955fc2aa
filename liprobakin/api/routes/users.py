"""User profile route handlers."""

import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from liprobakin.database.db import get_db_session
from liprobakin.services import user_service
from liprobakin.api.auth_dependencies import get_current_user
from liprobakin.models.schemas import UserResponse, FanProfileRequest

logger = logging.getLogger(__name__)
router = APIRouter()


@router.put("/api/users/me/fan-profile", response_model=UserResponse)
async def set_fan_profile(
    payload: FanProfileRequest,
    current_user: dict = Depends(get_current_user),
    session: AsyncSession = Depends(get_db_session),
):
    """
    Complete profile setup as a fan with a favourite team and athlete.
    Requires authentication.
    """
    try:
        user = await user_service.update_fan_profile(
            session, current_user["id"], payload.favorite_team_id, payload.favorite_athlete_id
        )
        return UserResponse(**{k: v for k, v in user.items() if k in UserResponse.model_fields})
    except HTTPException:
        raise
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except Exception as e:
        logger.error(f"Error saving fan profile for user {current_user['id']}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Error saving profile")
