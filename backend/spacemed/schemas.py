"""Pydantic schemas shared between the controller, the views and the API."""
from __future__ import annotations

from datetime import datetime
from enum import Enum
from functools import total_ordering
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

_SEVERITY_ORDER = ("normal", "warning", "critical")


@total_ordering
class Severity(Enum):
    NORMAL = "normal"
    WARNING = "warning"
    CRITICAL = "critical"

    @property
    def rank(self) -> int:
        return _SEVERITY_ORDER.index(self.value)

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, Severity):
            return NotImplemented
        return self.rank < other.rank


class MetricKind(str, Enum):
    """The five monitored readings, in evaluation order."""

    BODY_TEMPERATURE = "body_temperature"
    JOINT_MOBILITY = "joint_mobility"
    CABIN_TEMPERATURE = "cabin_temperature"
    HUMIDITY = "humidity"
    FLEX_SENSOR_RAW = "flex_sensor_raw"


class AlertType(str, Enum):
    CRITICAL_FEVER = "CRITICAL_FEVER"
    CRITICAL_HYPOTHERMIA = "CRITICAL_HYPOTHERMIA"
    ABNORMAL_BODY_TEMPERATURE = "ABNORMAL_BODY_TEMPERATURE"
    REDUCED_JOINT_MOBILITY = "REDUCED_JOINT_MOBILITY"
    SUBOPTIMAL_CABIN_TEMPERATURE = "SUBOPTIMAL_CABIN_TEMPERATURE"
    SUBOPTIMAL_CABIN_HUMIDITY = "SUBOPTIMAL_CABIN_HUMIDITY"


class InfoTopic(str, Enum):
    SYSTEM = "system"
    SETTINGS = "settings"
    GROUND_CONTROL = "ground-control"


class Snapshot(BaseModel):
    """Latest reading of every metric; any of them may be missing."""

    model_config = ConfigDict(extra="forbid")

    body_temperature: Optional[float] = Field(None, description="Body temperature in Celsius")
    joint_mobility: Optional[float] = Field(None, description="Joint mobility percentage")
    cabin_temperature: Optional[float] = Field(None, description="Cabin temperature in Celsius")
    humidity: Optional[float] = Field(None, description="Cabin relative humidity percentage")
    flex_sensor_raw: Optional[float] = Field(None, description="Raw ADC reading of the flex sensor")

    def value_of(self, metric: MetricKind) -> Optional[float]:
        return getattr(self, metric.value)

    def merged(self, update: Snapshot) -> Snapshot:
        """Return a copy where fields explicitly set on ``update`` win."""
        return self.model_copy(update=update.model_dump(exclude_unset=True))


class Alert(BaseModel):
    type: AlertType
    metric: MetricKind
    title: str
    message: str
    severity: Severity
    timestamp: datetime


class MetricStatus(BaseModel):
    metric: MetricKind
    label: str
    value: Optional[float] = None
    display: str = Field(..., description="Formatted value, '--' when missing")
    severity: Optional[Severity] = Field(None, description="Unset for unclassified readings")
    status: str
    css_class: str


class ConnectivityStatus(BaseModel):
    connected: bool
    status: str
    css_class: str


class AlertRow(BaseModel):
    type: AlertType
    metric: MetricKind
    title: str
    message: str
    time: str
    severity: Severity
    css_class: str


class DashboardView(BaseModel):
    clock: str
    connectivity: ConnectivityStatus
    metrics: List[MetricStatus]
    alerts: List[AlertRow]
    empty_alerts_message: Optional[str] = None
    simulation_running: bool
    cycles: int
    updated_at: Optional[datetime] = None


class InfoMessage(BaseModel):
    topic: InfoTopic
    message: str
