"""
Admin role -> permission table and the merge used whenever roles are saved.
"""

from typing import Dict, Iterable

ADMIN_ROLES = (
    "master",
    "league_manager",
    "news_editor",
    "game_scheduler",
    "team_manager",
    "referee_manager",
    "venue_manager",
    "partner_manager",
)

PERMISSION_NAMES = (
    "can_manage_news",
    "can_manage_games",
    "can_manage_teams",
    "can_manage_players",
    "can_manage_referees",
    "can_manage_venues",
    "can_manage_partners",
    "can_manage_committee",
    "can_manage_admins",
)


def _grants(*names: str) -> Dict[str, bool]:
    return {name: name in names for name in PERMISSION_NAMES}


ROLE_PERMISSIONS: Dict[str, Dict[str, bool]] = {
    "master": _grants(*PERMISSION_NAMES),
    "league_manager": _grants(*(p for p in PERMISSION_NAMES if p != "can_manage_admins")),
    "news_editor": _grants("can_manage_news"),
    "game_scheduler": _grants("can_manage_games"),
    "team_manager": _grants("can_manage_teams", "can_manage_players"),
    "referee_manager": _grants("can_manage_referees"),
    "venue_manager": _grants("can_manage_venues"),
    "partner_manager": _grants("can_manage_partners", "can_manage_committee"),
}


def merge_permissions(roles: Iterable[str]) -> Dict[str, bool]:
    """
    Combine a set of role tags into a single permission map.

    A capability is granted if any held role grants it. Unknown roles are
    ignored. The result does not depend on role order or repetition.

    Args:
        roles: Role tags, e.g. ["news_editor", "game_scheduler"]

    Returns:
        Dict with every name in PERMISSION_NAMES mapped to a bool
    """
    merged = {name: False for name in PERMISSION_NAMES}
    for role in roles or ():
        role_perms = ROLE_PERMISSIONS.get(role)
        if not role_perms:
            continue
        for name, granted in role_perms.items():
            if granted:
                merged[name] = True
    return merged


def has_permission(admin: Dict, permission: str) -> bool:
    """Check a capability on an admin dict, re-deriving permissions from roles if missing."""
    if permission not in PERMISSION_NAMES:
        raise ValueError(f"Unknown permission: {permission}")
    permissions = admin.get("permissions") or merge_permissions(admin.get("roles") or [])
    return bool(permissions.get(permission, False))


def is_master(admin: Dict) -> bool:
    """True if the admin holds the master role."""
    return "master" in (admin.get("roles") or [])


def validate_roles(roles: Iterable[str]) -> list:
    """
    Validate role tags submitted for persistence.

    Raises:
        ValueError: If no roles are given or a role is unknown
    """
    roles = list(dict.fromkeys(roles or []))
    if not roles:
        raise ValueError("At least one role is required")
    unknown = [r for r in roles if r not in ROLE_PERMISSIONS]
    if unknown:
        raise ValueError(f"Unknown admin role(s): {', '.join(unknown)}")
    return roles
