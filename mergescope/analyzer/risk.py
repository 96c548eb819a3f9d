from mergescope.errors import ComputationError
from mergescope.models.types import RiskLevel

_RISK_SCORES = {
    RiskLevel.LOW: 1,
    RiskLevel.MEDIUM: 2,
    RiskLevel.HIGH: 3,
}

# Hotspot counts above this are high risk for the whole merge
_HOTSPOT_HIGH_THRESHOLD = 5


def assess_risk_level(overlap_count: int) -> RiskLevel:
    """Per-file risk from the number of overlapping branch pairs."""
    if overlap_count <= 0:
        return RiskLevel.LOW
    if overlap_count <= 2:
        return RiskLevel.MEDIUM
    return RiskLevel.HIGH


def risk_to_number(level: RiskLevel) -> int:
    try:
        return _RISK_SCORES[level]
    except KeyError:
        raise ComputationError(f"Unknown risk level {level!r}") from None


def overall_hotspot_risk(hotspot_count: int) -> RiskLevel:
    """
    Merge-wide risk from the number of hotspot files.

    Deliberately a different scale from assess_risk_level:
    0 → low, 1-5 → medium, 6+ → high.
    """
    if hotspot_count > _HOTSPOT_HIGH_THRESHOLD:
        return RiskLevel.HIGH
    if hotspot_count > 0:
        return RiskLevel.MEDIUM
    return RiskLevel.LOW
