"""Registry of named driver factories and driver lifecycle management."""

from __future__ import annotations

from typing import TYPE_CHECKING

from cdn_store._config import RegistryConfig
from cdn_store._errors import InvalidConfiguration

if TYPE_CHECKING:
    from types import TracebackType

    from cdn_store._driver import StorageDriver
    from cdn_store._types import DriverFactory, Parameters

# Global driver factory registry: maps driver names to constructor functions.
_DRIVER_FACTORIES: dict[str, DriverFactory] = {}


def register_driver(name: str, factory: DriverFactory, *, replace: bool = False) -> None:
    """Register a constructor for a driver name.

    :param name: The driver name (e.g. ``"cdn"``).
    :param factory: Callable taking a parameters mapping and returning a driver.
    :param replace: Allow overriding an existing registration.
    :raises ValueError: If the name is empty, the factory is not callable, or
        the name is taken and ``replace`` is ``False``.
    """
    if not name or not name.strip():
        raise ValueError("driver name must be a non-empty string")
    if not callable(factory):
        raise ValueError(f"factory for driver '{name}' is not callable")
    if name in _DRIVER_FACTORIES and not replace:
        raise ValueError(f"driver '{name}' is already registered")
    _DRIVER_FACTORIES[name] = factory


def registered_drivers() -> list[str]:
    """Return the sorted names of all registered drivers."""
    _register_builtin_drivers()
    return sorted(_DRIVER_FACTORIES)


def _register_builtin_drivers() -> None:
    """Register the built-in drivers."""
    from cdn_store.drivers._cdn import ContentDeliveryDriver

    if ContentDeliveryDriver.driver_name not in _DRIVER_FACTORIES:
        register_driver(ContentDeliveryDriver.driver_name, ContentDeliveryDriver.from_parameters)


def create_driver(name: str, parameters: Parameters | None = None) -> StorageDriver:
    """Construct a driver by its registered name.

    :raises InvalidConfiguration: If the name is unknown or the parameters are rejected.
    """
    _register_builtin_drivers()
    if name not in _DRIVER_FACTORIES:
        raise InvalidConfiguration(
            f"Unknown driver '{name}'. Registered drivers: {sorted(_DRIVER_FACTORIES)}",
            driver=name,
        )
    factory = _DRIVER_FACTORIES[name]
    try:
        return factory(dict(parameters or {}))
    except TypeError as exc:
        raise InvalidConfiguration(f"Invalid parameters for driver '{name}': {exc}", driver=name) from exc


class Registry:
    """Lazily instantiates and caches named drivers.

    :param config: Optional configuration. Validates immediately.
    :raises ValueError: If config is invalid.
    """

    def __init__(self, config: RegistryConfig | None = None) -> None:
        self._config = config or RegistryConfig()
        self._config.validate()
        self._drivers: dict[str, StorageDriver] = {}

    def __repr__(self) -> str:
        drivers = sorted(self._config.drivers.keys())
        return f"Registry(drivers={drivers!r})"

    def get_driver(self, name: str) -> StorageDriver:
        """Get a driver by its configured instance name.

        :raises KeyError: If no driver with this name is configured.
        :raises InvalidConfiguration: If the driver cannot be constructed.
        """
        if name not in self._config.drivers:
            available = sorted(self._config.drivers.keys())
            raise KeyError(f"Unknown driver instance '{name}'. Available: {available}")
        if name not in self._drivers:
            cfg = self._config.drivers[name]
            self._drivers[name] = create_driver(cfg.type, cfg.options)
        return self._drivers[name]

    def close(self) -> None:
        """Close all instantiated drivers."""
        for driver in self._drivers.values():
            driver.close()
        self._drivers.clear()

    def __enter__(self) -> Registry:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self.close()
