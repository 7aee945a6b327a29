"""Configuration schemas for list virtualization, caching and the terminal UI."""

from __future__ import annotations

import math
import os
from collections.abc import Mapping
from datetime import timedelta
from typing import Any, ClassVar, Self, TypedDict

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    NonNegativeInt,
    PositiveFloat,
    ValidationError,
    field_validator,
)

from .errors import InvalidConfigurationError


class _ViewportOverrides(TypedDict, total=False):
    """Typed override map for :class:`ViewportConfig` initialisation."""

    item_size: float
    container_size: float
    overscan: int


class _FrozenConfig(BaseModel):
    """Frozen settings model whose validation failures surface as configuration errors."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    config_label: ClassVar[str] = "configuration"

    @classmethod
    def create(cls, **values: Any) -> Self:
        """Build a configuration, translating validation failures to configuration errors."""
        try:
            return cls(**values)
        except ValidationError as exc:
            raise InvalidConfigurationError(
                _format_validation_error(exc, cls.config_label)
            ) from exc

    def with_updates(self, **changes: Any) -> Self:
        """Return a validated copy of this configuration with *changes* applied."""
        return type(self).create(**{**self.model_dump(), **changes})


class ViewportConfig(_FrozenConfig):
    """Layout parameters for a virtualized list viewport.

    ``item_size`` is the uniform extent of a single item and ``container_size`` the
    extent of the visible viewport, both in the same unit as the scroll offset
    (pixels for a browser host, lines for a terminal). ``overscan`` is the number of
    extra items materialized beyond each visible edge.
    """

    config_label: ClassVar[str] = "viewport configuration"

    item_size: PositiveFloat = Field(default=40.0, description="Uniform size of a single item")
    container_size: PositiveFloat = Field(
        default=400.0, description="Visible extent of the scroll viewport"
    )
    overscan: NonNegativeInt = Field(
        default=3, description="Extra items rendered beyond each visible edge"
    )

    @field_validator("item_size", "container_size")
    @classmethod
    def _ensure_finite(cls, value: float) -> float:
        """Reject infinite sizes which would produce degenerate ranges."""
        if not math.isfinite(value):
            raise ValueError("size must be a finite number")
        return value

    @classmethod
    def from_environment(cls, *, env: Mapping[str, str] | None = None) -> ViewportConfig:
        """Construct a configuration from environment variables.

        Recognised variables:
            - ``VIEWPORT_ITEM_SIZE`` overrides the item size (float)
            - ``VIEWPORT_CONTAINER_SIZE`` overrides the container size (float)
            - ``VIEWPORT_OVERSCAN`` overrides the overscan margin (integer)
        """
        source = dict(os.environ if env is None else env)
        updates: _ViewportOverrides = {}

        float_overrides: dict[str, tuple[str, str]] = {
            "VIEWPORT_ITEM_SIZE": (
                "item_size",
                "VIEWPORT_ITEM_SIZE must be a floating point value",
            ),
            "VIEWPORT_CONTAINER_SIZE": (
                "container_size",
                "VIEWPORT_CONTAINER_SIZE must be a floating point value",
            ),
        }
        for env_key, (field, error_message) in float_overrides.items():
            raw = source.get(env_key)
            if raw is None:
                continue
            try:
                updates[field] = float(raw)
            except ValueError as exc:
                raise InvalidConfigurationError(error_message) from exc

        raw_overscan = source.get("VIEWPORT_OVERSCAN")
        if raw_overscan is not None:
            try:
                updates["overscan"] = int(raw_overscan)
            except ValueError as exc:
                raise InvalidConfigurationError("VIEWPORT_OVERSCAN must be an integer") from exc

        return cls.create(**updates)


class CacheConfig(_FrozenConfig):
    """Configuration for the fetch cache backend."""

    config_label: ClassVar[str] = "cache configuration"

    ttl: timedelta = Field(default=timedelta(minutes=5), description="TTL for cached entries")
    namespace: str = Field(default="virtual_list", description="Cache namespace prefix")
    cleanup_interval: timedelta = Field(
        default=timedelta(minutes=1),
        description="Minimum time between automatic purges of expired entries",
    )

    @field_validator("ttl", "cleanup_interval")
    @classmethod
    def _ensure_positive(cls, value: timedelta) -> timedelta:
        """Reject zero or negative durations."""
        if value <= timedelta(0):
            raise ValueError("duration must be positive")
        return value

    @classmethod
    def from_environment(cls, *, env: Mapping[str, str] | None = None) -> CacheConfig:
        """Construct a cache configuration from environment variables.

        Recognised variables:
            - ``CACHE_TTL_SECONDS`` overrides the entry TTL (positive float seconds)
            - ``CACHE_NAMESPACE`` overrides the key namespace
        """
        source = dict(os.environ if env is None else env)
        updates: dict[str, object] = {}
        raw_ttl = source.get("CACHE_TTL_SECONDS")
        if raw_ttl is not None:
            try:
                updates["ttl"] = timedelta(seconds=float(raw_ttl))
            except (ValueError, OverflowError) as exc:
                raise InvalidConfigurationError(
                    "CACHE_TTL_SECONDS must be a finite floating point value"
                ) from exc
        namespace = source.get("CACHE_NAMESPACE")
        if namespace is not None:
            updates["namespace"] = namespace
        return cls.create(**updates)


class UiConfig(_FrozenConfig):
    """Settings for the interactive terminal demo."""

    config_label: ClassVar[str] = "UI configuration"

    refresh_per_second: PositiveFloat = Field(
        default=10.0, description="Redraw frequency of the live display"
    )


def _format_validation_error(exc: ValidationError, label: str) -> str:
    """Collapse a pydantic validation error into a single readable line."""
    parts: list[str] = []
    for error in exc.errors():
        location = ".".join(str(item) for item in error.get("loc", ())) or "value"
        parts.append(f"{location}: {error.get('msg', 'invalid value')}")
    return f"invalid {label}: " + ", ".join(parts)
