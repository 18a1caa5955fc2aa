"""
Constants shared by the league rules and the admin back office.
"""

# Divisions
GENDER_MEN = "men"
GENDER_WOMEN = "women"
GENDERS = (GENDER_MEN, GENDER_WOMEN)

# Standings table points (FIBA convention)
POINTS_PER_WIN = 2
POINTS_PER_LOSS = 1

# Verification workflow
VERIFICATION_PENDING = "pending"
VERIFICATION_APPROVED = "approved"
VERIFICATION_REJECTED = "rejected"
VERIFICATION_DECISIONS = (VERIFICATION_APPROVED, VERIFICATION_REJECTED)

# Roles a user may claim during profile setup
CLAIMABLE_ROLES = ("player", "coach", "staff")
FAN_ROLE = "fan"

# Admin credential rules
MIN_PASSWORD_LENGTH = 6

# Number of games shown on a player's game log
GAME_LOG_LIMIT = 5
