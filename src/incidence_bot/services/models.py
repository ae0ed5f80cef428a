"""
Incidence Bot Data Models.

Pydantic models for the corona-zahlen.org district response and
dataclasses for per-tick results.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class MessageKind(str, Enum):
    """Kind of chat message sent per tick."""

    STATUS = "status"
    ALERT = "alert"


class ApiModel(BaseModel):
    """Base for API payload models.

    A JSON null decodes like an absent field, leaving the field at its
    zero value.
    """

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    @model_validator(mode="before")
    @classmethod
    def _null_as_default(cls, data: Any) -> Any:
        if data is None:
            return {}
        if isinstance(data, dict):
            return {k: v for k, v in data.items() if v is not None}
        return data


class DistrictDelta(ApiModel):
    """Day-over-day changes for a district."""

    cases: int = 0
    deaths: int = 0
    recovered: int = 0


class DistrictRecord(ApiModel):
    """One district entry of the district endpoint."""

    ags: str = ""
    name: str = ""
    county: str = ""
    population: int = 0
    cases: int = 0
    deaths: int = 0
    cases_per_week: int = Field(0, alias="casesPerWeek")
    deaths_per_week: int = Field(0, alias="deathsPerWeek")
    recovered: int = 0
    week_incidence: float = Field(0.0, alias="weekIncidence")
    cases_per_100k: float = Field(0.0, alias="casesPer100k")
    delta: DistrictDelta = Field(default_factory=DistrictDelta)

    @property
    def display_name(self) -> str:
        """District name with its county type, e.g. "LK Miltenberg"."""
        return self.county or self.name or self.ags


class ResponseMeta(ApiModel):
    """Metadata block of an API response."""

    source: Optional[str] = None
    contact: Optional[str] = None
    info: Optional[str] = None
    last_update: Optional[str] = Field(None, alias="lastUpdate")
    last_checked_for_update: Optional[str] = Field(None, alias="lastCheckedForUpdate")


class DistrictResponse(ApiModel):
    """Full response of the district endpoint."""

    data: Dict[str, DistrictRecord] = Field(default_factory=dict)
    meta: ResponseMeta = Field(default_factory=ResponseMeta)

    @field_validator("data", mode="before")
    @classmethod
    def _null_records(cls, value: Any) -> Any:
        if isinstance(value, dict):
            return {k: {} if v is None else v for k, v in value.items()}
        return value

    def get_district(self, key: str) -> Optional[DistrictRecord]:
        """Return the record for a district key, if present."""
        return self.data.get(key)


@dataclass
class IncidenceReport:
    """Evaluated incidence for one tick."""

    district_key: str
    date: str
    incidence: int
    threshold: int
    alert: bool
    raw_incidence: float = 0.0
    district_name: str = ""
    key_found: bool = True

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "district_key": self.district_key,
            "district_name": self.district_name,
            "date": self.date,
            "incidence": self.incidence,
            "raw_incidence": self.raw_incidence,
            "threshold": self.threshold,
            "alert": self.alert,
            "key_found": self.key_found,
        }


@dataclass
class NotificationResult:
    """Result of a message delivery attempt."""

    success: bool
    channel: str  # "discord", "mock"
    kind: MessageKind = MessageKind.STATUS
    message: Optional[str] = None
    error: Optional[str] = None
    timestamp: datetime = field(default_factory=datetime.now)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "success": self.success,
            "channel": self.channel,
            "kind": self.kind.value,
            "message": self.message,
            "error": self.error,
            "timestamp": self.timestamp.isoformat(),
        }
