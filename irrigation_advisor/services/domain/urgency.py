"""
Domain service: irrigation urgency and re-check scheduling.
"""
from datetime import datetime, timedelta, timezone
from typing import Optional

from irrigation_advisor.domain.models import Urgency

# (minimum L/m², urgency), checked from the top; boundaries go to the higher tier
URGENCY_LADDER = (
    (15.0, Urgency.CRITICAL),
    (10.0, Urgency.HIGH),
    (5.0, Urgency.MEDIUM),
)

RECHECK_HOURS = {
    Urgency.CRITICAL: 6,
    Urgency.HIGH: 12,
    Urgency.MEDIUM: 24,
    Urgency.LOW: 36,
}


def classify_urgency(water_per_area_l: float) -> Urgency:
    for threshold, urgency in URGENCY_LADDER:
        if water_per_area_l >= threshold:
            return urgency
    return Urgency.LOW


def recheck_interval(urgency: Urgency) -> timedelta:
    return timedelta(hours=RECHECK_HOURS[urgency])


def next_check_at(urgency: Urgency, now: Optional[datetime] = None) -> datetime:
    """
    When the field should be assessed again.

    Args:
        urgency: Urgency of the current recommendation
        now: Reference time; current UTC time when omitted

    Returns:
        now plus the re-check interval for the urgency
    """
    now = now or datetime.now(timezone.utc)
    return now + recheck_interval(urgency)
