"""
Verification workflow: users claim a roster/staff identity, admins approve or reject.

A request moves from pending to approved or rejected exactly once. Review
applies the request, user and roster writes in a single transaction.
"""

import logging
from typing import Dict, List, Optional

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from liprobakin.database.models import (
    CoachStaff,
    RosterPlayer,
    Team,
    User,
    VerificationRequest,
    VerificationStatus,
)
from liprobakin.services import audit_service
from liprobakin.services.permission_service import has_permission
from liprobakin.utils.constants import CLAIMABLE_ROLES, VERIFICATION_DECISIONS
from liprobakin.utils.datetime_utils import utcnow, isoformat_or_none

logger = logging.getLogger(__name__)

REVIEW_PERMISSION = "can_manage_players"


def _request_to_dict(request: VerificationRequest) -> Dict:
    return {
        "id": request.id,
        "user_id": request.user_id,
        "user_first_name": request.user_first_name,
        "user_last_name": request.user_last_name,
        "user_phone": request.user_phone,
        "role": request.role,
        "team_id": request.team_id,
        "team_name": request.team_name,
        "selected_person_id": request.selected_person_id,
        "selected_person_name": request.selected_person_name,
        "id_image_url": request.id_image_url,
        "status": request.status,
        "submitted_at": isoformat_or_none(request.submitted_at),
        "reviewed_at": isoformat_or_none(request.reviewed_at),
        "reviewed_by": request.reviewed_by,
        "notes": request.notes,
    }


def _person_model(role: str):
    """Players are claimed from the roster; coaches and staff from the coach/staff list."""
    return RosterPlayer if role == "player" else CoachStaff


async def submit_verification(
    session: AsyncSession,
    user_id: int,
    role: str,
    team_id: int,
    person_id: int,
    id_image_url: str,
) -> Dict:
    """
    Record a user's claim to a team identity and open a pending request.

    The user's first/last name are copied onto the request but never changed.

    Args:
        session: Database session
        user_id: Claiming user
        role: "player", "coach" or "staff"
        team_id: Claimed team
        person_id: Claimed roster (or coach/staff) entry
        id_image_url: Stored ID image

    Returns:
        The pending request dictionary

    Raises:
        ValueError: If the role is invalid or the user already has a pending/approved claim
        LookupError: If the user, team or person doesn't exist
    """
    if role not in CLAIMABLE_ROLES:
        raise ValueError(f"role must be one of: {', '.join(CLAIMABLE_ROLES)}")

    user = await session.get(User, user_id)
    if user is None:
        raise LookupError("User not found")
    if user.verification_status in (VerificationStatus.PENDING.value, VerificationStatus.APPROVED.value):
        raise ValueError(f"Verification is already {user.verification_status}")

    team = await session.get(Team, team_id)
    if team is None:
        raise LookupError("Team not found")

    model = _person_model(role)
    result = await session.execute(
        select(model).where(model.id == person_id, model.team_id == team_id)
    )
    person = result.scalar_one_or_none()
    if person is None:
        raise LookupError(f"Selected {role} not found on {team.name}")

    now = utcnow()
    user.role = role
    user.team_id = team.id
    user.team_name = team.name
    user.verification_status = VerificationStatus.PENDING.value
    user.verification_image_url = id_image_url
    user.verification_submitted_at = now

    request = VerificationRequest(
        user_id=user.id,
        user_first_name=user.first_name,
        user_last_name=user.last_name,
        user_phone=user.phone_number,
        role=role,
        team_id=team.id,
        team_name=team.name,
        selected_person_id=person.id,
        selected_person_name=person.name,
        id_image_url=id_image_url,
        status=VerificationStatus.PENDING.value,
        submitted_at=now,
    )
    session.add(request)
    await session.commit()
    await session.refresh(request)
    logger.info(f"Verification request {request.id} submitted by user {user_id} for {person.name}")
    return _request_to_dict(request)


async def list_pending_requests(session: AsyncSession) -> List[Dict]:
    """Pending requests, oldest submission first."""
    result = await session.execute(
        select(VerificationRequest)
        .where(VerificationRequest.status == VerificationStatus.PENDING.value)
        .order_by(VerificationRequest.submitted_at, VerificationRequest.id)
    )
    return [_request_to_dict(r) for r in result.scalars().all()]


async def get_request(session: AsyncSession, request_id: int) -> Optional[Dict]:
    request = await session.get(VerificationRequest, request_id)
    return _request_to_dict(request) if request else None


async def review_request(
    session: AsyncSession,
    request_id: int,
    decision: str,
    reviewer: Dict,
    notes: Optional[str] = None,
) -> Dict:
    """
    Approve or reject a pending verification request.

    Writes, committed together:
      1. the request's status and review stamp;
      2. the user's verification status and review stamp, plus the roster
         link on approval (cleared on rejection). first_name/last_name are
         not touched;
      3. on approval with a claimed team and person, the person's
         linked_user_* fields. The person's own name is not touched.

    Args:
        session: Database session
        request_id: Request to review
        decision: "approved" or "rejected"
        reviewer: Acting admin dict
        notes: Optional reviewer notes

    Returns:
        The reviewed request dictionary

    Raises:
        ValueError: If the decision is invalid or the request was already reviewed
        PermissionError: If the reviewer is not an active admin allowed to manage players
        LookupError: If the request, its user, or the claimed person doesn't exist
    """
    if decision not in VERIFICATION_DECISIONS:
        raise ValueError(f"decision must be one of: {', '.join(VERIFICATION_DECISIONS)}")
    if not reviewer.get("is_active", False) or not has_permission(reviewer, REVIEW_PERMISSION):
        raise PermissionError("Not authorized to review verification requests")

    reviewed_by = reviewer.get("email") or str(reviewer.get("user_id"))
    now = utcnow()
    approved = decision == VerificationStatus.APPROVED.value

    try:
        # Compare-and-set on status so two reviewers can't both transition the request
        result = await session.execute(
            update(VerificationRequest)
            .where(
                VerificationRequest.id == request_id,
                VerificationRequest.status == VerificationStatus.PENDING.value,
            )
            .values(status=decision, reviewed_at=now, reviewed_by=reviewed_by, notes=notes)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            existing = await session.get(VerificationRequest, request_id, populate_existing=True)
            if existing is None:
                raise LookupError("Verification request not found")
            raise ValueError(f"Verification request has already been {existing.status}")

        request = await session.get(VerificationRequest, request_id, populate_existing=True)

        user = await session.get(User, request.user_id)
        if user is None:
            raise LookupError("User for verification request not found")
        user.verification_status = decision
        user.verification_reviewed_at = now
        user.verification_reviewed_by = reviewed_by
        user.verification_notes = notes
        user.linked_player_id = request.selected_person_id if approved else None
        user.linked_player_name = request.selected_person_name if approved else None

        if approved and request.team_id and request.selected_person_id:
            model = _person_model(request.role)
            person = await session.get(model, request.selected_person_id)
            if person is None or person.team_id != request.team_id:
                raise LookupError("Claimed roster entry no longer exists")
            person.linked_user_id = request.user_id
            person.linked_user_name = f"{request.user_first_name} {request.user_last_name}"
            person.linked_at = now

        await session.commit()
    except Exception:
        await session.rollback()
        raise

    await session.refresh(request)
    logger.info(f"Verification request {request_id} {decision} by {reviewed_by}")
    reviewed = _request_to_dict(request)

    await audit_service.log_audit_action(
        session,
        f"verification_{decision}",
        reviewer.get("user_id"),
        reviewer.get("email"),
        "verification",
        request_id,
        f"{request.user_first_name} {request.user_last_name}",
        {
            "team_id": request.team_id,
            "selected_person_id": request.selected_person_id,
            "selected_person_name": request.selected_person_name,
        },
    )
    return reviewed
