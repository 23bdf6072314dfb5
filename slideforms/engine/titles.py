"""Placeholder title and header/footer zone parsing."""

import logging
from typing import Any, Mapping

from pydantic import ValidationError as PydanticValidationError

from slideforms.engine.models import PlaceholderTitle, Zone, ZonePosition, ZoneSpec
from slideforms.interfaces.document import FieldType
from slideforms.interfaces.errors import ValidationError

logger = logging.getLogger(__name__)

STRIPS = ("header", "footer")

_FIELD_TYPES = {field_type.value: field_type for field_type in FieldType}
_ZONE_KEYWORDS = (
    ("left", ZonePosition.LEFT),
    ("center", ZonePosition.CENTER),
    ("right", ZonePosition.RIGHT),
)


def parse_title(raw: str) -> PlaceholderTitle:
    """Decode a ``type.group.name`` placeholder title.

    Raises:
        ValidationError: If the title does not have exactly three non-empty
            tokens or names an unknown field type.
    """
    tokens = [token.strip() for token in (raw or "").split(".")]
    if len(tokens) != 3 or not all(tokens):
        raise ValidationError(
            f"Invalid placeholder title '{raw}'. Expected 'type.group.name'."
        )

    type_token, group, name = tokens
    field_type = _FIELD_TYPES.get(type_token)
    if field_type is None:
        raise ValidationError(
            f"Unknown field type '{type_token}' in title '{raw}'. "
            f"Valid types: {', '.join(_FIELD_TYPES)}"
        )
    return PlaceholderTitle(field_type=field_type, group=group, name=name)


def classify_zone(name: str) -> ZonePosition:
    """Classify a zone by the first alignment keyword its name contains."""
    lowered = name.lower()
    for keyword, position in _ZONE_KEYWORDS:
        if keyword in lowered:
            return position
    return ZonePosition.UNCLASSIFIED


def qualify_zone_name(strip: str, name: str) -> str:
    """Prefix a zone name with its strip unless it already carries it."""
    if name.startswith(f"{strip}."):
        return name
    return f"{strip}.{name}"


def sort_zones(zones: list[Zone]) -> list[Zone]:
    """Order zones LEFT, CENTER, RIGHT, then unclassified, keeping input order on ties."""
    return sorted(zones, key=lambda zone: zone.position)


def build_zones(strip: str, specs: Mapping[str, ZoneSpec | Mapping[str, Any]] | None) -> list[Zone]:
    """Parse, classify and order the zones of one strip.

    Zones are ordered LEFT, CENTER, RIGHT, then unclassified ones; zones of
    equal position keep their input order.

    Raises:
        ValidationError: If the strip is unknown or a zone spec is malformed.
    """
    if strip not in STRIPS:
        raise ValidationError(f"Unknown strip '{strip}'. Valid options: 'header', 'footer'")
    if not specs:
        return []
    if not isinstance(specs, Mapping):
        raise ValidationError(f"The {strip} spec must map zone names to zone specs.")

    zones = []
    for raw_name, raw_spec in specs.items():
        name = qualify_zone_name(strip, str(raw_name).strip())
        try:
            spec = raw_spec if isinstance(raw_spec, ZoneSpec) else ZoneSpec.model_validate(raw_spec or {})
        except PydanticValidationError as e:
            raise ValidationError(f"Invalid zone spec for '{name}': {e}") from e
        zones.append(Zone(name=name, spec=spec, position=classify_zone(name)))

    ordered = sort_zones(zones)
    logger.debug(f"{strip} zones ordered: {[zone.name for zone in ordered]}")
    return ordered
