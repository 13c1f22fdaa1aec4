"""Turn monitor state into display-ready rows for the dashboard page."""
from __future__ import annotations

from typing import Optional

from .config import display_config
from .rules import BODY_TEMP_FEVER, CLASSIFIERS
from .schemas import (
    Alert,
    AlertRow,
    ConnectivityStatus,
    DashboardView,
    InfoMessage,
    InfoTopic,
    MetricKind,
    MetricStatus,
    Severity,
    Snapshot,
)
from .store import MonitorState

NO_ALERTS_MESSAGE = "No medical alerts at the moment"

LABELS = {
    MetricKind.BODY_TEMPERATURE: "Body temperature",
    MetricKind.JOINT_MOBILITY: "Joint mobility",
    MetricKind.CABIN_TEMPERATURE: "Cabin temperature",
    MetricKind.HUMIDITY: "Humidity",
    MetricKind.FLEX_SENSOR_RAW: "Flex sensor",
}

_STATUS_TEXT = {
    MetricKind.JOINT_MOBILITY: {
        Severity.CRITICAL: "Severely reduced flexibility",
        Severity.WARNING: "Reduced flexibility",
        Severity.NORMAL: "Normal",
    },
    MetricKind.CABIN_TEMPERATURE: {
        Severity.WARNING: "Temperature not optimal",
        Severity.NORMAL: "Optimal",
    },
    MetricKind.HUMIDITY: {
        Severity.WARNING: "Humidity not optimal",
        Severity.NORMAL: "Optimal",
    },
}

INFO_MESSAGES = {
    InfoTopic.SYSTEM: (
        "Space health monitoring system - version 1.0\n"
        "Built to monitor the vital signs of astronauts"
    ),
    InfoTopic.SETTINGS: "The settings page is under development",
    InfoTopic.GROUND_CONTROL: "Contacting the ground control center...",
}


def format_value(metric: MetricKind, value: Optional[float]) -> str:
    if value is None:
        return "--"
    if metric in (MetricKind.BODY_TEMPERATURE, MetricKind.CABIN_TEMPERATURE):
        return f"{value:.1f}°C"
    if metric in (MetricKind.JOINT_MOBILITY, MetricKind.HUMIDITY):
        return f"{value:.0f}%"
    return f"{value:.0f}"


def status_class(severity: Optional[Severity]) -> str:
    if severity is None:
        return "status"
    return f"status status-{severity.value}"


def metric_status(metric: MetricKind, snapshot: Snapshot) -> MetricStatus:
    value = snapshot.value_of(metric)
    classify = CLASSIFIERS.get(metric)
    if value is None or classify is None:
        return MetricStatus(
            metric=metric,
            label=LABELS[metric],
            value=value,
            display=format_value(metric, value),
            status="No data" if value is None else "Raw reading",
            css_class=status_class(None),
        )

    severity = classify(value)
    css_class = status_class(severity)
    if metric is MetricKind.BODY_TEMPERATURE:
        status = _body_temperature_status(severity, value)
        if severity is Severity.CRITICAL:
            css_class += " pulse-critical"
    else:
        status = _STATUS_TEXT[metric][severity]

    return MetricStatus(
        metric=metric,
        label=LABELS[metric],
        value=value,
        display=format_value(metric, value),
        severity=severity,
        status=status,
        css_class=css_class,
    )


def _body_temperature_status(severity: Severity, value: float) -> str:
    if severity is Severity.CRITICAL:
        if value >= BODY_TEMP_FEVER:
            return "Severe fever - critical alert"
        return "Hypothermia - critical alert"
    if severity is Severity.WARNING:
        return "Abnormal temperature"
    return "Normal"


def connectivity_status(connected: bool) -> ConnectivityStatus:
    if connected:
        return ConnectivityStatus(connected=True, status="Connected", css_class="status-normal")
    return ConnectivityStatus(connected=False, status="Disconnected", css_class="status-error")


def alert_row(alert: Alert) -> AlertRow:
    return AlertRow(
        type=alert.type,
        metric=alert.metric,
        title=alert.title,
        message=alert.message,
        time=alert.timestamp.astimezone().strftime(display_config.time_format),
        severity=alert.severity,
        css_class="alert-item pulse-critical" if alert.severity is Severity.CRITICAL else "alert-item",
    )


def render_dashboard(state: MonitorState, simulation_running: bool) -> DashboardView:
    alerts = [alert_row(alert) for alert in state.alerts]
    return DashboardView(
        clock=state.clock,
        connectivity=connectivity_status(state.connected),
        metrics=[metric_status(metric, state.snapshot) for metric in MetricKind],
        alerts=alerts,
        empty_alerts_message=None if alerts else NO_ALERTS_MESSAGE,
        simulation_running=simulation_running,
        cycles=state.cycles,
        updated_at=state.updated_at,
    )


def info_message(topic: InfoTopic) -> InfoMessage:
    return InfoMessage(topic=topic, message=INFO_MESSAGES[topic])
