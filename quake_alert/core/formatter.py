"""Message formatting - Pure functions.

This module turns typed seismic event records into Slack notification
documents (Block Kit). All functions are pure with no side effects.

Every builder emits blocks in the same order:
header, alert line, divider, key facts, divider, detail, divider, footer.
Sections with nothing to show are left out; the order of the rest is fixed.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any

from quake_alert.core.events import (
    JST,
    DomesticTsunami,
    EEWArea,
    EEWEvent,
    Hypocenter,
    ObservationPoint,
    QuakeEvent,
    TsunamiEvent,
    TsunamiGrade,
)
from quake_alert.core.intensity import Intensity, color_for, to_label


# Locations listed per intensity group before truncating
MAX_POINTS_PER_GROUP = 10

# Predicted-impact areas listed in an early warning before truncating
MAX_EEW_AREAS = 15

SOURCE_CREDIT = "P2P Earthquake Information"

QUAKE_IMAGE = "rotating_light.png"
TSUNAMI_IMAGE = "ocean.png"

DOMESTIC_TSUNAMI_TEXT = {
    DomesticTsunami.NONE: "None",
    DomesticTsunami.UNKNOWN: "Unknown",
    DomesticTsunami.CHECKING: "Under investigation",
    DomesticTsunami.NON_EFFECTIVE: "Slight sea-level change (no damage expected)",
    DomesticTsunami.WATCH: "Tsunami Advisory",
    DomesticTsunami.WARNING: "Tsunami Warning",
}

TSUNAMI_GRADE_TEXT = {
    TsunamiGrade.MAJOR_WARNING: "Major Tsunami Warning",
    TsunamiGrade.WARNING: "Tsunami Warning",
    TsunamiGrade.WATCH: "Tsunami Advisory",
    TsunamiGrade.UNKNOWN: "Unknown",
}


@dataclass(frozen=True)
class Notification:
    """A finished notification document.

    Attributes:
        text: Flat fallback summary (shown in push notifications)
        blocks: Ordered Block Kit fragments
        color: Severity color for the message, None for no color
    """
    text: str
    blocks: list[dict[str, Any]] = field(default_factory=list)
    color: str | None = None


class EEWVariant(Enum):
    """Presentation variant of an early warning.

    Exactly one applies: cancelled beats training, which beats warning.
    """
    CANCELLED = "cancelled"
    TRAINING = "training"
    WARNING = "warning"
    DETECTION = "detection"


EEW_TITLES = {
    EEWVariant.CANCELLED: "Earthquake Early Warning (Cancelled)",
    EEWVariant.TRAINING: "Earthquake Early Warning (Training)",
    EEWVariant.WARNING: "Earthquake Early Warning (Warning)",
    EEWVariant.DETECTION: "Earthquake Early Warning",
}

EEW_IMAGES = {
    EEWVariant.CANCELLED: "no.png",
    EEWVariant.TRAINING: "mega.png",
    EEWVariant.WARNING: "warning.png",
    EEWVariant.DETECTION: "mega.png",
}

EEW_ALERT_TEXT = {
    EEWVariant.CANCELLED: "The earthquake early warning has been cancelled",
    EEWVariant.TRAINING: "*This is a training message*",
    EEWVariant.WARNING: "<!here> *Be alert for strong shaking*",
    EEWVariant.DETECTION: "<!here> An earthquake early warning has been received",
}


def image_url(base_url: str, filename: str) -> str:
    """Build the URL of an accessory image.

    Pure function.
    """
    return f"{base_url.rstrip('/')}/{filename}"


def format_datetime(value: datetime | None) -> str:
    """Format a timestamp as Japan time, e.g. "2024-01-01 16:10 JST".

    Pure function.
    """
    if value is None:
        return "Unknown"
    return value.astimezone(JST).strftime("%Y-%m-%d %H:%M JST")


def format_clock(value: datetime) -> str:
    """Format the time-of-day part of a timestamp in Japan time."""
    return value.astimezone(JST).strftime("%H:%M:%S")


def _header_block(title: str, base_url: str, filename: str) -> dict[str, Any]:
    return {
        "type": "section",
        "text": {
            "type": "mrkdwn",
            "text": f"*{title}*",
        },
        "accessory": {
            "type": "image",
            "image_url": image_url(base_url, filename),
            "alt_text": title,
        },
    }


def _text_block(text: str) -> dict[str, Any]:
    return {
        "type": "section",
        "text": {
            "type": "mrkdwn",
            "text": text,
        },
    }


def _fields_block(fields: list[str]) -> dict[str, Any]:
    return {
        "type": "section",
        "fields": [{"type": "mrkdwn", "text": text} for text in fields],
    }


def _divider() -> dict[str, Any]:
    return {"type": "divider"}


def _context_block(text: str) -> dict[str, Any]:
    return {
        "type": "context",
        "elements": [
            {
                "type": "mrkdwn",
                "text": text,
            },
        ],
    }


def format_hypocenter_fields(
    hypocenter: Hypocenter | None,
    show_unknown: bool,
) -> list[str]:
    """Format the hypocenter as key-fact fields.

    Pure function. Absent fields are left out. Fields carrying the
    "unknown" sentinel are shown as "Unknown" when show_unknown is set,
    and left out otherwise.

    Args:
        hypocenter: Earthquake source, or None
        show_unknown: Whether to render sentinel magnitude/depth

    Returns:
        List of mrkdwn field texts
    """
    if hypocenter is None:
        return []

    fields = []

    if hypocenter.name:
        fields.append(f"*Epicenter*\n{hypocenter.name}")

    magnitude = hypocenter.magnitude
    if magnitude is not None:
        if magnitude >= 0:
            fields.append(f"*Magnitude*\nM{magnitude:.1f}")
        elif show_unknown:
            fields.append("*Magnitude*\nUnknown")

    depth = hypocenter.depth_km
    if depth is not None:
        if depth >= 0:
            fields.append(f"*Depth*\nAbout {depth} km")
        elif show_unknown:
            fields.append("*Depth*\nUnknown")

    return fields


def group_observation_points(
    points: tuple[ObservationPoint, ...] | list[ObservationPoint],
) -> list[tuple[int, list[str]]]:
    """Group observation points by exact intensity.

    Pure function.

    Args:
        points: Observation points in feed order

    Returns:
        (intensity, locations) pairs, highest intensity first. Locations
        keep their original order.
    """
    grouped: dict[int, list[str]] = {}
    for point in points:
        grouped.setdefault(point.scale, []).append(point.addr)

    return sorted(grouped.items(), key=lambda item: item[0], reverse=True)


def format_observation_points(
    points: tuple[ObservationPoint, ...] | list[ObservationPoint],
    max_display: int = MAX_POINTS_PER_GROUP,
) -> str:
    """Format observation points as one line per intensity group.

    Pure function. Groups longer than max_display are truncated with a
    "+N more" suffix.
    """
    lines = []
    for intensity, locations in group_observation_points(points):
        shown = ", ".join(locations[:max_display])
        line = f"*{to_label(intensity)}*: {shown}"
        if len(locations) > max_display:
            line += f" +{len(locations) - max_display} more"
        lines.append(line)

    return "\n".join(lines)


def format_quake_message(quake: QuakeEvent, image_base_url: str) -> Notification:
    """Format JMA earthquake information as a notification.

    Pure function.

    Args:
        quake: Earthquake information to format
        image_base_url: Base URL of accessory images

    Returns:
        Notification document
    """
    max_label = to_label(quake.max_scale)
    hypocenter = quake.hypocenter

    blocks: list[dict[str, Any]] = [
        _header_block("Earthquake Information", image_base_url, QUAKE_IMAGE),
        _text_block("<!here> An earthquake has occurred"),
        _divider(),
        _text_block(f"*Maximum Intensity*\n{max_label}"),
    ]

    facts = [f"*Time of Occurrence*\n{format_datetime(quake.occurred_at)}"]
    facts.extend(format_hypocenter_fields(hypocenter, show_unknown=True))

    if quake.domestic_tsunami is not None:
        tsunami_text = DOMESTIC_TSUNAMI_TEXT.get(
            quake.domestic_tsunami, quake.domestic_tsunami.value
        )
        facts.append(f"*Tsunami*\n{tsunami_text}")

    blocks.append(_fields_block(facts))

    if quake.points:
        blocks.append(_divider())
        blocks.append(_text_block(
            f"*Observed Intensity*\n{format_observation_points(quake.points)}"
        ))

    blocks.append(_divider())
    blocks.append(_context_block(
        f"Issued: {format_datetime(quake.time)} | Source: {SOURCE_CREDIT}"
    ))

    text = f"Earthquake Information: {max_label}"
    if hypocenter is not None and hypocenter.name:
        text += f" - {hypocenter.name}"

    return Notification(
        text=text,
        blocks=blocks,
        color=color_for(quake.max_scale),
    )


def format_tsunami_message(tsunami: TsunamiEvent, image_base_url: str) -> Notification:
    """Format a JMA tsunami forecast as a notification.

    Pure function. A cancelled forecast keeps all regular blocks and gains
    a cancellation notice after the first divider.
    """
    blocks: list[dict[str, Any]] = [
        _header_block("Tsunami Information", image_base_url, TSUNAMI_IMAGE),
        _text_block("<!here> Tsunami information has been issued"),
        _divider(),
    ]

    if tsunami.cancelled:
        blocks.append(_text_block("*This tsunami information has been cancelled*"))

    if tsunami.areas:
        lines = []
        for area in tsunami.areas:
            grade = TSUNAMI_GRADE_TEXT.get(area.grade, area.grade.value)
            immediate = " :warning: *Evacuate immediately*" if area.immediate else ""
            lines.append(f"*{area.name}*: {grade}{immediate}")

        blocks.append(_text_block("*Tsunami Forecast Areas*\n" + "\n".join(lines)))

    blocks.append(_divider())
    blocks.append(_context_block(
        f"Issued: {format_datetime(tsunami.time)} | Source: {SOURCE_CREDIT}"
    ))

    text = "Tsunami Information"
    if tsunami.cancelled:
        text += " (Cancelled)"

    return Notification(text=text, blocks=blocks)


def classify_eew(eew: EEWEvent) -> EEWVariant:
    """Select the presentation variant of an early warning.

    Pure function.
    """
    if eew.cancelled:
        return EEWVariant.CANCELLED
    if eew.test:
        return EEWVariant.TRAINING
    if eew.max_predicted_intensity >= Intensity.FIVE_UPPER:
        return EEWVariant.WARNING
    return EEWVariant.DETECTION


def format_intensity_range(area: EEWArea) -> str:
    """Format the predicted intensity range of an area.

    Pure function. A range whose bounds coincide shows a single value.
    """
    if area.scale_from is None:
        return "Predicted intensity unknown"

    text = to_label(area.scale_from)
    if area.scale_to is not None and area.scale_to != area.scale_from:
        text += f" ~ {to_label(area.scale_to)}"
    return text


def format_eew_areas(
    areas: tuple[EEWArea, ...] | list[EEWArea],
    max_display: int = MAX_EEW_AREAS,
) -> str:
    """Format predicted-impact areas, one per line.

    Pure function. Lists at most max_display areas and appends a
    "+N more" remainder when truncated.
    """
    lines = []
    for area in areas[:max_display]:
        arrival = f" ({format_clock(area.arrival_time)})" if area.arrival_time else ""
        lines.append(f"*{area.name}*: {format_intensity_range(area)}{arrival}")

    text = "\n".join(lines)
    if len(areas) > max_display:
        text += f"\n+{len(areas) - max_display} more"
    return text


def format_eew_message(eew: EEWEvent, image_base_url: str) -> Notification:
    """Format an Earthquake Early Warning as a notification.

    Pure function.

    Args:
        eew: Early warning to format
        image_base_url: Base URL of accessory images

    Returns:
        Notification document
    """
    variant = classify_eew(eew)
    title = EEW_TITLES[variant]
    max_predicted = eew.max_predicted_intensity

    blocks: list[dict[str, Any]] = [
        _header_block(title, image_base_url, EEW_IMAGES[variant]),
        _text_block(EEW_ALERT_TEXT[variant]),
        _divider(),
    ]

    facts = []
    hypocenter = None
    if eew.earthquake is not None:
        hypocenter = eew.earthquake.hypocenter
        if eew.earthquake.origin_time is not None:
            facts.append(f"*Time of Occurrence*\n{format_datetime(eew.earthquake.origin_time)}")
        facts.extend(format_hypocenter_fields(hypocenter, show_unknown=False))

    if max_predicted > 0:
        facts.append(f"*Max Predicted Intensity*\n{to_label(max_predicted)}")

    if facts:
        blocks.append(_fields_block(facts))

    # Area predictions are meaningless once cancelled
    if eew.areas and variant is not EEWVariant.CANCELLED:
        blocks.append(_divider())
        blocks.append(_text_block(f"*Predicted Intensity*\n{format_eew_areas(eew.areas)}"))

    issue = "Training" if eew.test else f"Issue #{eew.serial}"
    blocks.append(_divider())
    blocks.append(_context_block(f"{issue} | Issued: {format_datetime(eew.time)}"))

    text = title
    if hypocenter is not None and hypocenter.name:
        text += f" - {hypocenter.name}"

    color = None if variant is EEWVariant.CANCELLED else color_for(max_predicted)

    return Notification(text=text, blocks=blocks, color=color)
