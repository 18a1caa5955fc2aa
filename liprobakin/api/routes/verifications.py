"""Verification submission route handlers."""

import asyncio
import logging

from fastapi import APIRouter, Depends, File, Form, HTTPException, Request, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from liprobakin.api.routes import limiter
from liprobakin.database.db import get_db_session
from liprobakin.services import image_service, s3_service, verification_service
from liprobakin.api.auth_dependencies import get_current_user
from liprobakin.models.schemas import VerificationRequestResponse

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("/api/verifications", response_model=VerificationRequestResponse)
@limiter.limit("5/minute")
async def submit_verification(
    request: Request,
    role: str = Form(...),
    team_id: int = Form(...),
    person_id: int = Form(...),
    file: UploadFile = File(...),
    current_user: dict = Depends(get_current_user),
    session: AsyncSession = Depends(get_db_session),
):
    """
    Claim a player, coach or staff identity on a team.

    Accepts a JPEG, PNG, WebP or HEIC photo of an ID document up to 5MB.
    The image is uploaded to S3 and a pending request is queued for admin review.
    """
    try:
        file_bytes = await file.read()
        is_valid, error_msg = image_service.validate_id_image(file_bytes, file.content_type)
        if not is_valid:
            raise HTTPException(status_code=400, detail=error_msg)

        loop = asyncio.get_event_loop()
        image_url = await loop.run_in_executor(
            None,
            s3_service.upload_verification_image,
            current_user["id"],
            file_bytes,
            file.content_type,
            image_service.extension_for(file.content_type),
        )

        try:
            return await verification_service.submit_verification(
                session, current_user["id"], role, team_id, person_id, image_url
            )
        except Exception:
            await loop.run_in_executor(None, s3_service.delete_file_by_url, image_url)
            raise
    except HTTPException:
        raise
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except Exception as e:
        logger.error(f"Error submitting verification for user {current_user['id']}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Error submitting verification")
