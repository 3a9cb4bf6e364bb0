"""Service type catalog and the default technician roster."""

import logging
from typing import Optional

from fieldservice.schemas.booking_schema import DEFAULT_SERVICE_TYPE

logger = logging.getLogger(__name__)

SERVICE_TYPES: list[str] = [
    DEFAULT_SERVICE_TYPE,
    "AC Installation",
    "AC Uninstallation",
    "Gas Filling",
    "Water Leakage",
    "No Cooling / Low Cooling",
    "AMC (Annual Maintenance)",
]

SERVICE_ALIASES: dict[str, str] = {
    "repair": "AC Repair", "not working": "AC Repair", "noise": "AC Repair",
    "install": "AC Installation", "installation": "AC Installation", "fitting": "AC Installation",
    "uninstall": "AC Uninstallation", "remove": "AC Uninstallation", "shifting": "AC Uninstallation",
    "gas": "Gas Filling", "refill": "Gas Filling", "gas charging": "Gas Filling",
    "leak": "Water Leakage", "dripping": "Water Leakage", "water": "Water Leakage",
    "no cooling": "No Cooling / Low Cooling", "low cooling": "No Cooling / Low Cooling",
    "not cooling": "No Cooling / Low Cooling",
    "amc": "AMC (Annual Maintenance)", "annual": "AMC (Annual Maintenance)",
    "maintenance": "AMC (Annual Maintenance)", "service contract": "AMC (Annual Maintenance)",
}

SEED_TECHNICIANS: list[dict] = [
    {"name": "Rahul Kumar", "phone": "9871000001", "skills": ["Split AC", "Installation"]},
    {"name": "Akash Singh", "phone": "9871000002", "skills": ["Window AC", "Gas Charging"]},
]


def match_service_type(query: str) -> Optional[str]:
    """Resolve free text to a catalog service type. Returns None if no match.

    Catalog names win over aliases, and longer names and aliases are
    tried first so "ac uninstallation" is not read as "installation".
    """
    normalized = query.lower().strip()
    if not normalized:
        return None
    for service_type in sorted(SERVICE_TYPES, key=len, reverse=True):
        if service_type.lower() in normalized:
            return service_type
    for alias in sorted(SERVICE_ALIASES, key=len, reverse=True):
        if alias in normalized:
            return SERVICE_ALIASES[alias]
    logger.debug("No service type matched for %r", query)
    return None
