"""Wheel settings service -- aspect catalog, orb policy and point inclusion.

The settings object is owned by the control layer: constructed once,
mutated between resolve passes and handed to the resolver and projector
on every call.
"""
from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, Field, ValidationError, model_validator

from natalwheel.schemas.wheel import AspectDefinition, PointClass

logger = logging.getLogger(__name__)


class InvalidConfiguration(ValueError):
    """A settings edit was rejected; the previous value is kept."""


# label, angle, base orb, color (RGBA), width, enabled
DEFAULT_ASPECTS: tuple[tuple[str, float, float, str, float, bool], ...] = (
    # Major
    ("Conjunction", 0.0, 6.0, "#E6E6E6BE", 2.2, True),
    ("Opposition", 180.0, 5.0, "#E6BE5AAF", 2.0, True),
    ("Trine", 120.0, 5.0, "#8CEBA0A0", 1.9, True),
    ("Square", 90.0, 5.0, "#FF7878B4", 1.9, True),
    ("Sextile", 60.0, 4.0, "#78C8FFAA", 1.8, True),
    # Minor
    ("Semisextile", 30.0, 2.2, "#B4B4B478", 1.3, False),
    ("Semisquare", 45.0, 2.2, "#D2A06E82", 1.3, False),
    ("Sesquiquadrate", 135.0, 2.2, "#FFA06496", 1.3, False),
    ("Quintile", 72.0, 1.8, "#C8A0FF8C", 1.2, False),
    ("Biquintile", 144.0, 1.8, "#BE96F591", 1.2, False),
    ("Quincunx", 150.0, 2.5, "#C8C88C96", 1.5, True),
)


def default_aspect_definitions() -> list[AspectDefinition]:
    return [
        AspectDefinition(
            label=label, angle=angle, base_orb=orb, color=color, width=width, enabled=enabled
        )
        for label, angle, orb, color, width, enabled in DEFAULT_ASPECTS
    ]


class OrbPolicy(BaseModel):
    """Orb multipliers per body class, scaled by ``global_``."""

    global_: float = Field(default=1.00, ge=0.5, le=2.5, alias="global")
    luminaries: float = Field(default=1.60, ge=0.5, le=2.5)
    personal: float = Field(default=1.25, ge=0.5, le=2.5)
    social: float = Field(default=1.10, ge=0.5, le=2.5)
    outer: float = Field(default=0.95, ge=0.5, le=1.5)
    points: float = Field(default=0.90, ge=0.5, le=1.5)

    model_config = {"validate_assignment": True, "populate_by_name": True, "extra": "forbid"}

    def class_multiplier(self, class_tag: PointClass | str | None) -> float:
        """Multiplier for a body class; unrecognized classes get 1.0."""
        try:
            tag = PointClass(class_tag)
        except ValueError:
            return 1.0
        return {
            PointClass.LUMINARY: self.luminaries,
            PointClass.PERSONAL: self.personal,
            PointClass.SOCIAL: self.social,
            PointClass.OUTER: self.outer,
            PointClass.SENSITIVE_POINT: self.points,
        }[tag]

    def weight(self, class_tag: PointClass | str | None) -> float:
        return self.global_ * self.class_multiplier(class_tag)


class PointInclusion(BaseModel):
    """Which sensitive points join the aspectable set."""

    asc: bool = True
    mc: bool = True
    node: bool = True
    chiron: bool = True
    lilith: bool = True

    model_config = {"validate_assignment": True, "extra": "forbid"}


class AspectCatalog(BaseModel):
    """Ordered aspect definitions; order decides ties in matching."""

    definitions: list[AspectDefinition] = Field(default_factory=default_aspect_definitions)

    model_config = {"validate_assignment": True}

    @model_validator(mode="after")
    def _unique_labels(self) -> AspectCatalog:
        seen: set[str] = set()
        for definition in self.definitions:
            if definition.label in seen:
                raise ValueError(f"Duplicate aspect label '{definition.label}'")
            seen.add(definition.label)
        return self

    def list_definitions(self) -> list[AspectDefinition]:
        return list(self.definitions)

    def enabled_definitions(self) -> list[AspectDefinition]:
        return [d for d in self.definitions if d.enabled]

    def get(self, label: str) -> AspectDefinition:
        for definition in self.definitions:
            if definition.label == label:
                return definition
        raise KeyError(f"Unknown aspect '{label}'")

    def set_enabled(self, label: str, enabled: bool) -> None:
        self.get(label).enabled = bool(enabled)

    def update_angle_orb(self, label: str, angle: float, orb: float) -> None:
        """Edit angle and base orb together; both are validated before either changes."""
        definition = self.get(label)
        candidate = _validated(
            AspectDefinition, {**definition.model_dump(), "angle": angle, "base_orb": orb}
        )
        definition.angle = candidate.angle
        definition.base_orb = candidate.base_orb

    def update_render(self, label: str, color: str | None = None, width: float | None = None) -> None:
        definition = self.get(label)
        update: dict[str, Any] = {}
        if color is not None:
            update["color"] = color
        if width is not None:
            update["width"] = width
        candidate = _validated(AspectDefinition, {**definition.model_dump(), **update})
        definition.color = candidate.color
        definition.width = candidate.width

    def reset_to_defaults(self) -> None:
        self.definitions = default_aspect_definitions()


class WheelSettings(BaseModel):
    aspects: AspectCatalog = Field(default_factory=AspectCatalog)
    orbs: OrbPolicy = Field(default_factory=OrbPolicy)
    points: PointInclusion = Field(default_factory=PointInclusion)

    def set_orb(self, name: str, value: float) -> None:
        field = "global_" if name == "global" else name
        if field not in OrbPolicy.model_fields:
            raise KeyError(f"Unknown orb multiplier '{name}'")
        try:
            setattr(self.orbs, field, value)
        except ValidationError as exc:
            raise InvalidConfiguration(
                f"Invalid orb multiplier {name}={value!r}: {_first_error(exc)}"
            ) from exc

    def set_point(self, name: str, included: bool) -> None:
        if name not in PointInclusion.model_fields:
            raise KeyError(f"Unknown point '{name}'")
        setattr(self.points, name, bool(included))

    def reset(self) -> None:
        """Restore the default catalog, orb multipliers and point inclusion."""
        self.aspects.reset_to_defaults()
        self.orbs = OrbPolicy()
        self.points = PointInclusion()
        logger.info("Wheel settings reset to defaults")


def _first_error(exc: ValidationError) -> str:
    errors = exc.errors()
    return errors[0]["msg"] if errors else str(exc)


def _validated(model: type[BaseModel], data: dict[str, Any]) -> Any:
    try:
        return model.model_validate(data)
    except ValidationError as exc:
        raise InvalidConfiguration(_first_error(exc)) from exc


def load_wheel_settings(overrides: Mapping[str, Any] | None = None) -> WheelSettings:
    """Build wheel settings from defaults merged with nested overrides.

    Overrides look like ``{"orbs": {"outer": 1.2}, "points": {"mc": False},
    "aspects": {"Quintile": {"enabled": True}}}``. Unknown groups and
    aspect labels are ignored with a warning; unknown fields inside a group
    raise InvalidConfiguration.
    """
    merged = WheelSettings().model_dump(by_alias=True)
    for group, fields in (overrides or {}).items():
        if not isinstance(fields, Mapping):
            logger.warning("Ignoring wheel settings group '%s': expected a mapping", group)
            continue
        if group == "aspects":
            by_label = {d["label"]: d for d in merged["aspects"]["definitions"]}
            for label, edits in fields.items():
                if label not in by_label or not isinstance(edits, Mapping):
                    logger.warning("Ignoring override for unknown aspect '%s'", label)
                    continue
                by_label[label].update(edits)
        elif group == "orbs":
            # accept the attribute spelling set_orb uses
            merged[group].update({"global" if k == "global_" else k: v for k, v in fields.items()})
        elif group == "points":
            merged[group].update(fields)
        else:
            logger.warning("Ignoring unknown wheel settings group '%s'", group)

    return _validated(WheelSettings, merged)


def wheel_settings_schema() -> dict[str, Any]:
    """Return the full JSON Schema for WheelSettings with defaults."""
    return WheelSettings.model_json_schema()
