"""Data models for mapped gateway status."""

from pyheizung.models._base import HeizungBaseModel, HeizungEnum, is_unset, parse_float
from pyheizung.models.heating import (
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
    "Distributor",
    "Heater",
    "HeaterName",
    "HeatingMode",
    "HeatingSystem",
    "HeizungBaseModel",
    "HeizungEnum",
    "PumpState",
    "Room",
    "SystemInfo",
    "TemperatureSensor",
    "convert_to_heating_system",
    "is_unset",
    "parse_float",
]
