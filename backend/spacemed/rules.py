"""Classification bands and alerting rules for the monitored readings."""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Dict, List, Optional

from .schemas import Alert, AlertType, MetricKind, Severity, Snapshot

# Physiological and cabin bands. These are fixed on purpose and not read from
# the environment.
BODY_TEMP_FEVER = 38.5
BODY_TEMP_HYPOTHERMIA = 35.0
BODY_TEMP_NORMAL_MIN = 36.1
BODY_TEMP_NORMAL_MAX = 37.2
MOBILITY_CRITICAL = 30.0
MOBILITY_WARNING = 50.0
CABIN_TEMP_MIN = 18.0
CABIN_TEMP_MAX = 25.0
HUMIDITY_MIN = 30.0
HUMIDITY_MAX = 70.0


def classify_body_temperature(value: float) -> Severity:
    if value >= BODY_TEMP_FEVER or value <= BODY_TEMP_HYPOTHERMIA:
        return Severity.CRITICAL
    if value < BODY_TEMP_NORMAL_MIN or value > BODY_TEMP_NORMAL_MAX:
        return Severity.WARNING
    return Severity.NORMAL


def classify_joint_mobility(value: float) -> Severity:
    if value < MOBILITY_CRITICAL:
        return Severity.CRITICAL
    if value < MOBILITY_WARNING:
        return Severity.WARNING
    return Severity.NORMAL


def classify_cabin_temperature(value: float) -> Severity:
    if value < CABIN_TEMP_MIN or value > CABIN_TEMP_MAX:
        return Severity.WARNING
    return Severity.NORMAL


def classify_humidity(value: float) -> Severity:
    if value < HUMIDITY_MIN or value > HUMIDITY_MAX:
        return Severity.WARNING
    return Severity.NORMAL


# Order matters: it is the order alerts are reported in.
CLASSIFIERS = {
    MetricKind.BODY_TEMPERATURE: classify_body_temperature,
    MetricKind.JOINT_MOBILITY: classify_joint_mobility,
    MetricKind.CABIN_TEMPERATURE: classify_cabin_temperature,
    MetricKind.HUMIDITY: classify_humidity,
}


def classify_snapshot(snapshot: Snapshot) -> Dict[MetricKind, Severity]:
    """Return the severity of every present, classifiable reading.

    Missing readings are skipped rather than treated as zero, and the flex
    sensor has no band so it never appears in the result.
    """
    severities: Dict[MetricKind, Severity] = {}
    for metric, classify in CLASSIFIERS.items():
        value = snapshot.value_of(metric)
        if value is None:
            continue
        severities[metric] = classify(value)
    return severities


def evaluate_alerts(snapshot: Snapshot, timestamp: Optional[datetime] = None) -> List[Alert]:
    """Build the full alert list for ``snapshot``.

    The result replaces whatever alerts were active before; nothing is carried
    over between calls.
    """
    timestamp = timestamp or datetime.now(timezone.utc)
    alerts: List[Alert] = []
    for metric, severity in classify_snapshot(snapshot).items():
        if severity is Severity.NORMAL:
            continue
        value = snapshot.value_of(metric)
        alert_type, title, message = _describe(metric, severity, value)
        alerts.append(
            Alert(
                type=alert_type,
                metric=metric,
                title=title,
                message=message,
                severity=severity,
                timestamp=timestamp,
            )
        )
    return alerts


def _describe(metric: MetricKind, severity: Severity, value: float) -> tuple[AlertType, str, str]:
    if metric is MetricKind.BODY_TEMPERATURE:
        reading = f"Body temperature: {value:.1f}°C"
        if severity is Severity.CRITICAL and value >= BODY_TEMP_FEVER:
            return (
                AlertType.CRITICAL_FEVER,
                "Severe fever",
                f"{reading} - requires immediate intervention",
            )
        if severity is Severity.CRITICAL:
            return (
                AlertType.CRITICAL_HYPOTHERMIA,
                "Severe hypothermia",
                f"{reading} - requires immediate intervention",
            )
        return (
            AlertType.ABNORMAL_BODY_TEMPERATURE,
            "Abnormal body temperature",
            f"{reading} - outside the normal range",
        )

    if metric is MetricKind.JOINT_MOBILITY:
        reading = f"Joint mobility: {value:.0f}%"
        if severity is Severity.CRITICAL:
            return (
                AlertType.REDUCED_JOINT_MOBILITY,
                "Severely reduced joint mobility",
                f"{reading} - may indicate joint problems",
            )
        return (
            AlertType.REDUCED_JOINT_MOBILITY,
            "Reduced joint mobility",
            f"{reading} - continuous monitoring required",
        )

    if metric is MetricKind.CABIN_TEMPERATURE:
        return (
            AlertType.SUBOPTIMAL_CABIN_TEMPERATURE,
            "Cabin temperature not optimal",
            f"Temperature: {value:.1f}°C - outside the optimal range",
        )

    return (
        AlertType.SUBOPTIMAL_CABIN_HUMIDITY,
        "Cabin humidity not optimal",
        f"Humidity: {value:.0f}% - outside the optimal range",
    )
