"""
Audit log service.

Entries are append-only. Writing one is best-effort: a failure is logged and
never interrupts the action being audited.
"""

import logging
from typing import Any, Dict, List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from liprobakin.database.models import AuditLog
from liprobakin.utils.datetime_utils import isoformat_or_none

logger = logging.getLogger(__name__)

TARGET_TYPES = (
    "team",
    "player",
    "coach",
    "game",
    "news",
    "referee",
    "venue",
    "partner",
    "committee",
    "admin",
    "verification",
)

ACTION_PHRASES = {
    "team_created": "created team",
    "team_updated": "updated team",
    "team_deleted": "deleted team",
    "team_records_synced": "recalculated team records",
    "player_added": "added player",
    "player_updated": "updated player",
    "player_deleted": "deleted player",
    "coach_added": "added coach",
    "coach_deleted": "deleted coach",
    "game_created": "scheduled game",
    "game_updated": "updated game",
    "game_deleted": "deleted game",
    "game_stats_updated": "updated game stats",
    "game_completed": "recorded final score",
    "news_created": "published news",
    "news_updated": "updated news",
    "news_deleted": "deleted news",
    "admin_user_created": "created admin user",
    "admin_roles_updated": "updated admin roles",
    "admin_user_deactivated": "deactivated admin user",
    "admin_user_reactivated": "reactivated admin user",
    "admin_user_deleted": "deleted admin user",
    "admin_password_changed": "changed admin password",
    "verification_approved": "approved verification",
    "verification_rejected": "rejected verification",
}


async def log_audit_action(
    session: AsyncSession,
    action: str,
    user_id: Optional[int],
    user_email: Optional[str],
    target_type: str,
    target_id: Optional[Any] = None,
    target_name: Optional[str] = None,
    details: Optional[Dict[str, Any]] = None,
) -> bool:
    """
    Append an audit entry and commit it.

    Args:
        session: Database session
        action: Action tag, e.g. "admin_user_created"
        user_id: Acting user's ID
        user_email: Acting user's email
        target_type: Kind of record acted on
        target_id: Optional ID of the record
        target_name: Optional display name of the record
        details: Optional free-form detail map

    Returns:
        True if the entry was written, False if writing failed or the target type is unknown
    """
    if target_type not in TARGET_TYPES:
        logger.warning(f"Audit action {action} skipped: unknown target type {target_type!r}")
        return False

    try:
        session.add(
            AuditLog(
                action=action,
                user_id=user_id,
                user_email=user_email,
                target_type=target_type,
                target_id=str(target_id) if target_id is not None else None,
                target_name=target_name,
                details=details or {},
            )
        )
        await session.commit()
        logger.info(f"Audit: {user_email or user_id} {action} {target_type} {target_id}")
        return True
    except Exception as e:
        logger.error(f"Failed to log audit action {action} by {user_id}: {e}", exc_info=True)
        try:
            await session.rollback()
        except Exception:
            logger.debug("Rollback after failed audit write also failed", exc_info=True)
        return False


def _audit_to_dict(entry: AuditLog) -> Dict:
    return {
        "id": entry.id,
        "action": entry.action,
        "user_id": entry.user_id,
        "user_email": entry.user_email,
        "target_type": entry.target_type,
        "target_id": entry.target_id,
        "target_name": entry.target_name,
        "details": entry.details or {},
        "timestamp": isoformat_or_none(entry.timestamp),
        "display_text": format_audit_log_display(entry),
    }


async def list_audit_logs(
    session: AsyncSession,
    limit: int = 100,
    action: Optional[str] = None,
    target_type: Optional[str] = None,
) -> List[Dict]:
    """Most recent audit entries first, optionally filtered by action or target type."""
    query = select(AuditLog)
    if action:
        query = query.where(AuditLog.action == action)
    if target_type:
        query = query.where(AuditLog.target_type == target_type)
    query = query.order_by(AuditLog.timestamp.desc(), AuditLog.id.desc()).limit(limit)

    result = await session.execute(query)
    return [_audit_to_dict(entry) for entry in result.scalars().all()]


def format_audit_log_display(entry: Any) -> str:
    """
    Human-readable summary, e.g. 'created admin user "jane@league.cd"'.

    Accepts an AuditLog or a dict with the same keys.
    """
    get = entry.get if isinstance(entry, dict) else lambda key: getattr(entry, key, None)
    action = get("action") or ""
    phrase = ACTION_PHRASES.get(action, action)
    target = get("target_name") or f"{get('target_type')} #{get('target_id')}"
    return f'{phrase} "{target}"'
