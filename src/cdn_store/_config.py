"""Configuration model: immutable data containers describing named drivers."""

from __future__ import annotations

import dataclasses
from typing import Final

# Deployment environments of the content delivery API.
ENVIRONMENTS: Final[dict[str, str]] = {
    "prod": "https://content-api.cloud.unity3d.com",
    "stage": "https://content-api-stg.cloud.unity3d.com",
}

API_KEY_ENV: Final = "CDN_STORE_API_KEY"


@dataclasses.dataclass(frozen=True)
class DriverConfig:
    """Describes a driver instance.

    :param type: Registered driver name (e.g. ``"cdn"``).
    :param options: Driver-specific parameters passed to its factory.
    """

    type: str
    options: dict[str, object] = dataclasses.field(default_factory=dict)


@dataclasses.dataclass(frozen=True)
class RegistryConfig:
    """Top-level configuration container.

    :param drivers: Mapping of instance names to their driver configs.
    """

    drivers: dict[str, DriverConfig] = dataclasses.field(default_factory=dict)

    def validate(self) -> None:
        """Validate that every driver config names a type.

        :raises ValueError: If a driver config has an empty type.
        """
        for name, cfg in self.drivers.items():
            if not cfg.type:
                raise ValueError(f"Driver '{name}' has no type")

    @classmethod
    def from_dict(cls, data: dict[str, object]) -> RegistryConfig:
        """Construct from a plain dict (e.g. parsed TOML/JSON).

        :param data: Dict with a ``drivers`` key.
        """
        raw_drivers = data.get("drivers", {})
        if not isinstance(raw_drivers, dict):
            msg = "Expected 'drivers' to be a dict"
            raise TypeError(msg)

        drivers: dict[str, DriverConfig] = {}
        for name, cfg in raw_drivers.items():
            if not isinstance(cfg, dict):
                msg = f"Driver config for '{name}' must be a dict"
                raise TypeError(msg)
            drivers[str(name)] = DriverConfig(
                type=str(cfg["type"]),
                options=dict(cfg.get("options", {})),
            )

        return cls(drivers=drivers)
