from datetime import datetime
from typing import Optional

from pydantic import Field

from quotecraft.schemas.pricing import Money, Snapshot


class DistanceMeasure(Snapshot):
    miles: Money = Field(ge=0)
    meters: Optional[int] = None
    text: str = ""


class DurationMeasure(Snapshot):
    minutes: int = Field(ge=0)
    seconds: Optional[int] = None
    text: str = ""


class DistanceResult(Snapshot):
    distance: DistanceMeasure
    duration: DurationMeasure
    origin: str
    destination: str
    mode: str
    estimated: bool = False
    note: Optional[str] = None
    timestamp: datetime


class DistanceCacheStats(Snapshot):
    size: int
    max_age: int
    api_configured: bool
