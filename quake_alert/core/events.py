"""Seismic event data models and parsing - Pure functions.

This module parses decoded P2P earthquake feed frames into typed event
records. Three categories are understood:

- 551: JMA earthquake information (QuakeEvent)
- 552: JMA tsunami forecast (TsunamiEvent)
- 556: Earthquake Early Warning (EEWEvent)

All functions are pure with no side effects.
"""

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Any

from quake_alert.core.intensity import Intensity


# Event category codes used by the feed
QUAKE_CODE = 551
TSUNAMI_CODE = 552
EEW_CODE = 556

# Feed timestamps are Japan Standard Time
JST = timezone(timedelta(hours=9), name="JST")

_TIME_FORMATS = ("%Y/%m/%d %H:%M:%S.%f", "%Y/%m/%d %H:%M:%S", "%Y/%m/%d %H:%M")


class DomesticTsunami(str, Enum):
    """Domestic tsunami risk attached to an earthquake report."""
    NONE = "None"
    UNKNOWN = "Unknown"
    CHECKING = "Checking"
    NON_EFFECTIVE = "NonEffective"
    WATCH = "Watch"
    WARNING = "Warning"


class TsunamiGrade(str, Enum):
    """Severity of a tsunami forecast area."""
    MAJOR_WARNING = "MajorWarning"
    WARNING = "Warning"
    WATCH = "Watch"
    UNKNOWN = "Unknown"


@dataclass(frozen=True)
class Hypocenter:
    """Earthquake source.

    Attributes:
        name: Region name, None if not reported
        magnitude: Magnitude, -1 if unknown, None if not reported
        depth_km: Depth in kilometers, -1 if unknown, None if not reported
        latitude: Latitude (optional)
        longitude: Longitude (optional)
    """
    name: str | None = None
    magnitude: float | None = None
    depth_km: int | None = None
    latitude: float | None = None
    longitude: float | None = None


@dataclass(frozen=True)
class ObservationPoint:
    """A place where shaking was observed."""
    addr: str
    scale: int
    is_area: bool = False
    pref: str = ""


@dataclass(frozen=True)
class QuakeEvent:
    """JMA earthquake information (code 551).

    Attributes:
        id: Feed message ID
        time: When the information was issued
        occurred_at: When the earthquake occurred
        max_scale: Maximum observed intensity
        hypocenter: Earthquake source (optional)
        domestic_tsunami: Domestic tsunami risk (optional)
        points: Observation points, in feed order
    """
    id: str
    time: datetime | None
    occurred_at: datetime | None
    max_scale: int = Intensity.UNKNOWN
    hypocenter: Hypocenter | None = None
    domestic_tsunami: DomesticTsunami | None = None
    points: tuple[ObservationPoint, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class TsunamiArea:
    """A tsunami forecast area."""
    name: str
    grade: TsunamiGrade = TsunamiGrade.UNKNOWN
    immediate: bool = False


@dataclass(frozen=True)
class TsunamiEvent:
    """JMA tsunami forecast (code 552)."""
    id: str
    time: datetime | None
    cancelled: bool = False
    areas: tuple[TsunamiArea, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class EEWOrigin:
    """Origin earthquake of an early warning."""
    origin_time: datetime | None = None
    hypocenter: Hypocenter | None = None


@dataclass(frozen=True)
class EEWArea:
    """An area with predicted shaking.

    Attributes:
        name: Area name
        scale_from: Lower bound of predicted intensity (optional)
        scale_to: Upper bound of predicted intensity (optional)
        arrival_time: Predicted arrival of the main shaking (optional)
        pref: Prefecture name
    """
    name: str
    scale_from: int | None = None
    scale_to: int | None = None
    arrival_time: datetime | None = None
    pref: str = ""


@dataclass(frozen=True)
class EEWEvent:
    """Earthquake Early Warning (code 556).

    Attributes:
        id: Feed message ID
        time: When the warning was issued
        serial: Issue serial number (increases with each update)
        event_id: Identifier shared by all updates of one warning
        cancelled: Whether the warning was cancelled
        test: Whether this is a training/test warning
        earthquake: Origin earthquake (optional)
        areas: Areas with predicted shaking, in feed order
    """
    id: str
    time: datetime | None
    serial: str = ""
    event_id: str = ""
    cancelled: bool = False
    test: bool = False
    earthquake: EEWOrigin | None = None
    areas: tuple[EEWArea, ...] = field(default_factory=tuple)

    @property
    def max_predicted_intensity(self) -> int:
        """Highest upper-bound intensity over all areas (0 if none)."""
        return max([0, *(area.scale_to or 0 for area in self.areas)])


def parse_time(value: Any) -> datetime | None:
    """Parse a feed timestamp (JST) into an aware datetime.

    Pure function.

    Args:
        value: Timestamp string such as "2024/01/01 16:10:09.123"

    Returns:
        Timezone-aware datetime, or None if the value cannot be parsed
    """
    if not isinstance(value, str) or not value:
        return None

    for fmt in _TIME_FORMATS:
        try:
            return datetime.strptime(value.strip(), fmt).replace(tzinfo=JST)
        except ValueError:
            continue

    return None


def _optional_float(value: Any) -> float | None:
    if value is None:
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _optional_int(value: Any) -> int | None:
    if value is None:
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _scale(value: Any) -> int:
    """Intensity ordinal, or the unknown sentinel when absent or not a number."""
    scale = _optional_int(value)
    return int(Intensity.UNKNOWN) if scale is None else scale


def parse_hypocenter(data: dict[str, Any] | None) -> Hypocenter | None:
    """Parse a hypocenter object.

    Pure function. An empty name is treated as absent.
    """
    if not data:
        return None

    return Hypocenter(
        name=data.get("name") or None,
        magnitude=_optional_float(data.get("magnitude")),
        depth_km=_optional_int(data.get("depth")),
        latitude=_optional_float(data.get("latitude")),
        longitude=_optional_float(data.get("longitude")),
    )


def _parse_domestic_tsunami(value: Any) -> DomesticTsunami | None:
    if not value:
        return None
    try:
        return DomesticTsunami(value)
    except ValueError:
        return DomesticTsunami.UNKNOWN


def _parse_grade(value: Any) -> TsunamiGrade:
    try:
        return TsunamiGrade(value)
    except ValueError:
        return TsunamiGrade.UNKNOWN


def parse_quake(data: dict[str, Any]) -> QuakeEvent:
    """Parse a code 551 frame into a QuakeEvent.

    Pure function.

    Args:
        data: Decoded JSON frame

    Returns:
        QuakeEvent
    """
    earthquake = data.get("earthquake") or {}

    points = tuple(
        ObservationPoint(
            addr=p.get("addr", ""),
            scale=_scale(p.get("scale")),
            is_area=bool(p.get("isArea", False)),
            pref=p.get("pref", ""),
        )
        for p in data.get("points") or []
    )

    return QuakeEvent(
        id=str(data.get("id", "")),
        time=parse_time(data.get("time")),
        occurred_at=parse_time(earthquake.get("time")),
        max_scale=_scale(earthquake.get("maxScale")),
        hypocenter=parse_hypocenter(earthquake.get("hypocenter")),
        domestic_tsunami=_parse_domestic_tsunami(earthquake.get("domesticTsunami")),
        points=points,
    )


def parse_tsunami(data: dict[str, Any]) -> TsunamiEvent:
    """Parse a code 552 frame into a TsunamiEvent.

    Pure function.
    """
    areas = tuple(
        TsunamiArea(
            name=a.get("name", ""),
            grade=_parse_grade(a.get("grade")),
            immediate=bool(a.get("immediate", False)),
        )
        for a in data.get("areas") or []
    )

    return TsunamiEvent(
        id=str(data.get("id", "")),
        time=parse_time(data.get("time")),
        cancelled=bool(data.get("cancelled", False)),
        areas=areas,
    )


def parse_eew(data: dict[str, Any]) -> EEWEvent:
    """Parse a code 556 frame into an EEWEvent.

    Pure function.
    """
    issue = data.get("issue") or {}

    earthquake = None
    if data.get("earthquake"):
        eq = data["earthquake"]
        earthquake = EEWOrigin(
            origin_time=parse_time(eq.get("originTime")),
            hypocenter=parse_hypocenter(eq.get("hypocenter")),
        )

    areas = tuple(
        EEWArea(
            name=a.get("name", ""),
            scale_from=_optional_int(a.get("scaleFrom")),
            scale_to=_optional_int(a.get("scaleTo")),
            arrival_time=parse_time(a.get("arrivalTime")),
            pref=a.get("pref", ""),
        )
        for a in data.get("areas") or []
    )

    return EEWEvent(
        id=str(data.get("id", "")),
        time=parse_time(data.get("time")),
        serial=str(issue.get("serial", "")),
        event_id=str(issue.get("eventId", "")),
        cancelled=bool(data.get("cancelled", False)),
        test=bool(data.get("test", False)),
        earthquake=earthquake,
        areas=areas,
    )
