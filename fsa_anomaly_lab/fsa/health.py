"""Scalar node health derived from anomaly history."""

MAX_HEALTH = 100
MIN_HEALTH = 0
HEALTH_PENALTY = 2  # Per tick with at least one anomaly


def next_health(current: int, anomaly_count: int, penalty: int = HEALTH_PENALTY) -> int:
    # No regeneration on quiet ticks
    if anomaly_count <= 0:
        return current
    # Decrements only, whatever the configured penalty
    return max(MIN_HEALTH, min(current, current - penalty))
