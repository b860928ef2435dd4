"""pyheizung - Async Python client for an Arduino heating gateway."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("pyheizung")
except PackageNotFoundError:
    __version__ = "0+local"
from pyheizung._protocol import KeyValue
from pyheizung.client import HeizungClient
from pyheizung.config import HeizungConfig
from pyheizung.coordinator import HeatingCoordinator
from pyheizung.exceptions import (
    HeizungConfigError,
    HeizungConnectionError,
    HeizungError,
    HeizungSocketError,
    HeizungTransportError,
)
from pyheizung.models import (
    Distributor,
    Heater,
    HeaterName,
    HeatingMode,
    HeatingSystem,
    PumpState,
    Room,
    SystemInfo,
    TemperatureSensor,
    convert_to_heating_system,
)

__all__ = [
    "__version__",
    "Distributor",
    "HeatingCoordinator",
    "Heater",
    "HeaterName",
    "HeatingMode",
    "HeatingSystem",
    "HeizungClient",
    "HeizungConfig",
    "HeizungConfigError",
    "HeizungConnectionError",
    "HeizungError",
    "HeizungSocketError",
    "HeizungTransportError",
    "KeyValue",
    "PumpState",
    "Room",
    "SystemInfo",
    "TemperatureSensor",
    "convert_to_heating_system",
]
