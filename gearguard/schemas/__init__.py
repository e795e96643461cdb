# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""Vocabularies shared by the HTTP schemas and the service layer."""
from typing import Dict, Optional, Tuple

USER_ROLES = ("ADMIN", "MANAGER", "TECHNICIAN", "USER")
TEAM_ROLES = ("LEAD", "MEMBER")

EQUIPMENT_CATEGORIES = (
    "MACHINERY", "VEHICLE", "IT_EQUIPMENT", "ELECTRICAL", "HVAC", "PLUMBING", "OTHER",
)
EQUIPMENT_STATUSES = ("OPERATIONAL", "UNDER_MAINTENANCE", "SCRAPPED", "DECOMMISSIONED")

REQUEST_TYPES = ("CORRECTIVE", "PREVENTIVE")
REQUEST_PRIORITIES = ("LOW", "MEDIUM", "HIGH", "CRITICAL")
REQUEST_STATUSES = ("NEW", "IN_PROGRESS", "REPAIRED", "SCRAP")
TERMINAL_STATUSES = ("REPAIRED", "SCRAP")

# Only consulted when strict transitions are enabled.
ALLOWED_TRANSITIONS: Dict[str, set] = {
    "NEW":         {"IN_PROGRESS", "SCRAP"},
    "IN_PROGRESS": {"REPAIRED", "SCRAP"},
    "REPAIRED":    set(),
    "SCRAP":       set(),
}

# A scrapped asset can only be decommissioned further.
EQUIPMENT_STATUS_LOCKS: Dict[str, set] = {
    "SCRAPPED": {"SCRAPPED", "DECOMMISSIONED"},
}


def normalise_choice(value: Optional[str], allowed: Tuple[str, ...], field: str) -> Optional[str]:
    if value is None:
        return None
    value = value.upper().strip()
    if value not in allowed:
        raise ValueError(f"{field} must be one of {allowed}")
    return value
