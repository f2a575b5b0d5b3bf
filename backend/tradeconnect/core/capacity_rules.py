"""Capacity Rules - seat arithmetic, overbooking, alerts, and config validation.

Invariants:
    - available = max(0, total - confirmed - blocked), never negative
    - utilization = confirmed / total * 100 (0 when total is 0)
    - Overbooking limit = floor(total * pct / 100), only when enabled and pct > 0
    - At most one utilization warning per evaluation (highest threshold wins)
    - evaluate_request is PURE: returns a result dict, never raises

Design Decisions:
    - CapacityFigures is a frozen dataclass computed once per request; the
      service gathers the counts (IO) and this module does the math
    - Validation result shape is the API contract: isValid, available,
      availableSpots, blockedSpots, errors[], warnings[]
"""

import math
from dataclasses import dataclass
from datetime import datetime, timedelta

from tradeconnect.core import messages
from tradeconnect.core.domain_types import AlertSeverity


DEFAULT_ALERT_THRESHOLDS: dict[str, int] = {"low": 80, "medium": 90, "high": 95}
MIN_LOCK_TIMEOUT_MINUTES = 5
MAX_LOCK_TIMEOUT_MINUTES = 60
MAX_OVERBOOKING_PERCENTAGE = 50


@dataclass(frozen=True)
class CapacityFigures:
    total: int
    confirmed: int
    blocked: int
    overbooking_enabled: bool = False
    overbooking_percentage: int = 0

    @property
    def available(self) -> int:
        return max(0, self.total - self.confirmed - self.blocked)

    @property
    def utilization(self) -> float:
        if self.total <= 0:
            return 0.0
        return self.confirmed / self.total * 100

    @property
    def overbooking_limit(self) -> int:
        if not self.overbooking_enabled or self.overbooking_percentage <= 0:
            return 0
        return math.floor(self.total * self.overbooking_percentage / 100)

    @property
    def available_with_overbooking(self) -> int:
        return max(
            0,
            self.total + self.overbooking_limit - self.confirmed - self.blocked,
        )

    @property
    def is_full(self) -> bool:
        return self.available == 0

    @property
    def overbooking_in_use(self) -> int:
        """Seats taken beyond total capacity."""
        return max(0, self.confirmed + self.blocked - self.total)

    @property
    def overbooking_current_percentage(self) -> float:
        if self.total <= 0:
            return 0.0
        return round(self.overbooking_in_use / self.total * 100, 2)


def utilization_warning(
    utilization: float, thresholds: dict[str, int] | None,
) -> dict | None:
    """Highest crossed threshold as a warning dict, or None."""
    t = thresholds or DEFAULT_ALERT_THRESHOLDS
    if utilization >= t.get("high", DEFAULT_ALERT_THRESHOLDS["high"]):
        return _warning("HIGH_UTILIZATION", messages.HIGH_UTILIZATION, AlertSeverity.HIGH)
    if utilization >= t.get("medium", DEFAULT_ALERT_THRESHOLDS["medium"]):
        return _warning("MEDIUM_UTILIZATION", messages.MEDIUM_UTILIZATION, AlertSeverity.MEDIUM)
    if utilization >= t.get("low", DEFAULT_ALERT_THRESHOLDS["low"]):
        return _warning("LOW_UTILIZATION", messages.LOW_UTILIZATION, AlertSeverity.LOW)
    return None


def evaluate_request(
    figures: CapacityFigures,
    quantity: int,
    thresholds: dict[str, int] | None = None,
) -> dict:
    """Decide whether `quantity` seats fit. Pure, no IO."""
    warnings = []
    alert = utilization_warning(figures.utilization, thresholds)
    if alert:
        warnings.append(alert)

    if figures.available >= quantity:
        return _result(True, figures.available, figures.blocked, [], warnings)

    if figures.overbooking_limit > 0:
        with_overbooking = figures.available_with_overbooking
        if with_overbooking >= quantity:
            warnings.append(_warning(
                "OVERBOOKING_ACTIVE",
                messages.OVERBOOKING_ACTIVE.format(
                    percentage=figures.overbooking_percentage,
                ),
                AlertSeverity.MEDIUM,
            ))
            return _result(True, with_overbooking, figures.blocked, [], warnings)

    error = {
        "code": "INSUFFICIENT_CAPACITY",
        "message": messages.INSUFFICIENT_CAPACITY.format(
            available=figures.available, requested=quantity,
        ),
    }
    return _result(False, figures.available, figures.blocked, [error], warnings)


def not_configured_result() -> dict:
    return _result(False, 0, 0, [{
        "code": "CAPACITY_NOT_CONFIGURED",
        "message": messages.CAPACITY_NOT_CONFIGURED,
    }], [])


def validate_capacity_config(
    total_capacity: int | None,
    overbooking_percentage: int | None,
    lock_timeout_minutes: int | None,
) -> list[dict]:
    """Field-level errors for a capacity configuration. Empty list = valid.

    None means "not provided" (partial update) and is skipped, except
    total_capacity which the caller passes as the effective value.
    """
    errors = []
    if total_capacity is not None and total_capacity <= 0:
        errors.append({
            "field": "totalCapacity",
            "message": messages.INVALID_TOTAL_CAPACITY,
            "type": "INVALID_CAPACITY",
        })
    if overbooking_percentage is not None and not (
        0 <= overbooking_percentage <= MAX_OVERBOOKING_PERCENTAGE
    ):
        errors.append({
            "field": "overbookingPercentage",
            "message": messages.INVALID_OVERBOOKING,
            "type": "INVALID_OVERBOOKING",
        })
    if lock_timeout_minutes is not None and not (
        MIN_LOCK_TIMEOUT_MINUTES <= lock_timeout_minutes <= MAX_LOCK_TIMEOUT_MINUTES
    ):
        errors.append({
            "field": "lockTimeoutMinutes",
            "message": messages.INVALID_LOCK_TIMEOUT,
            "type": "INVALID_TIMEOUT",
        })
    return errors


def lock_expiry(now: datetime, timeout_minutes: int) -> datetime:
    return now + timedelta(minutes=timeout_minutes)


def build_recommendations(
    figures: CapacityFigures, waitlist_active: int, waitlist_enabled: bool,
) -> list[str]:
    """Operator hints for the capacity report."""
    recommendations = []
    if figures.utilization >= DEFAULT_ALERT_THRESHOLDS["high"]:
        recommendations.append(
            "Considere aumentar la capacidad o habilitar overbooking",
        )
    if waitlist_active > 0 and figures.available > 0:
        recommendations.append(
            "Hay cupos disponibles y usuarios en lista de espera: "
            "notifique a los siguientes en la lista",
        )
    if figures.is_full and not waitlist_enabled:
        recommendations.append(
            "El evento está lleno: habilite la lista de espera",
        )
    if figures.total > 0 and figures.utilization < 20:
        recommendations.append(
            "Baja utilización: considere reforzar la promoción del evento",
        )
    return recommendations


def _warning(code: str, message: str, severity: AlertSeverity) -> dict:
    return {"code": code, "message": message, "severity": severity.value}


def _result(
    ok: bool, spots: int, blocked: int, errors: list[dict], warnings: list[dict],
) -> dict:
    return {
        "isValid": ok,
        "available": ok,
        "availableSpots": spots,
        "blockedSpots": blocked,
        "errors": errors,
        "warnings": warnings,
    }
