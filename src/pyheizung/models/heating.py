"""Heating system record mapped from a flat gateway status.

Rooms and heaters are addressed by the names the gateway firmware uses
as key suffixes, e.g. room ``Bad`` reports ``Bad`` (calibrated
temperature) and ``tcBad`` (raw thermocouple reading); heater ``Bad``
reports ``aktBad``, ``tgtBad``, ``rchBad``, ``mtnBad`` and ``mtnpBad``.
"""

from __future__ import annotations

import math
from collections.abc import Mapping
from enum import StrEnum

from pydantic import Field

from pyheizung.models._base import HeizungBaseModel, HeizungEnum, is_unset, parse_float

__all__ = [
    "Distributor",
    "Heater",
    "HeaterName",
    "HeatingMode",
    "HeatingSystem",
    "PumpState",
    "Room",
    "SystemInfo",
    "TemperatureSensor",
    "convert_to_heating_system",
]


class Room(StrEnum):
    ARBEITEN = "Arbeiten"
    BAD = "Bad"
    DIELE = "Diele"
    TREPPE = "Treppe"
    WGARTEN = "WGarten"
    WOHNEN = "Wohnen"


class HeaterName(StrEnum):
    ARBEITEN = "Arbeiten"
    BAD = "Bad"
    DIELE = "Diele"
    TREPPE = "Treppe"
    ESSEN = "Essen"
    KUECHE = "Kueche"
    WOHNEN_L = "WohnenL"
    WOHNEN_R = "WohnenR"


class HeatingMode(HeizungEnum):
    """Whether a heater's valve has reached its target level."""

    UNKNOWN = -1
    COOLING = 0
    REACHED = 1
    HEATING = 2


class TemperatureSensor(HeizungBaseModel):
    temperature: float
    """Calibrated temperature in °C."""
    temperature_raw: float
    """Uncalibrated sensor reading."""

    @classmethod
    def from_status(cls, status: Mapping[str, str | None], name: str) -> TemperatureSensor:
        return cls(
            temperature=parse_float(status.get(name)),
            temperature_raw=parse_float(status.get(f"tc{name}")),
        )


class Heater(HeizungBaseModel):
    is_maintenance: bool
    """``True`` when the gateway does not report a maintenance flag."""
    maintenance_level: float
    """Valve position used during maintenance, percent."""
    level: float
    """Current valve position, percent."""
    level_reached: float
    """Raw :class:`HeatingMode` code."""
    target_level: float
    """Requested valve position, percent."""

    @property
    def heating_mode(self) -> HeatingMode:
        if math.isnan(self.level_reached) or not self.level_reached.is_integer():
            return HeatingMode.UNKNOWN
        return HeatingMode(int(self.level_reached))

    @classmethod
    def from_status(cls, status: Mapping[str, str | None], name: str) -> Heater:
        return cls(
            is_maintenance=is_unset(status.get(f"mtn{name}")),
            maintenance_level=parse_float(status.get(f"mtnp{name}")),
            level=parse_float(status.get(f"akt{name}")),
            level_reached=parse_float(status.get(f"rch{name}")),
            target_level=parse_float(status.get(f"tgt{name}")),
        )


class PumpState(HeizungBaseModel):
    state: bool


class Distributor(HeizungBaseModel):
    """Manifold: circulation pump, flow/return sensors and the mixer valve."""

    pump: PumpState
    vorlauf: TemperatureSensor
    """Flow temperature."""
    ruecklauf: TemperatureSensor
    """Return temperature."""
    mixer: Heater


class SystemInfo(HeizungBaseModel):
    version: str | None = None
    uptime: str | None = None
    threads: float = math.nan


class HeatingSystem(HeizungBaseModel):
    rooms: dict[Room, TemperatureSensor] = Field(default_factory=dict)
    heaters: dict[HeaterName, Heater] = Field(default_factory=dict)
    distributor: Distributor
    system: SystemInfo

    @classmethod
    def from_status(cls, status: Mapping[str, str | None]) -> HeatingSystem:
        """Map a flat gateway status onto the heating system record.

        Missing keys never raise: numbers become ``NaN`` and presence
        flags read as unset.
        """
        return cls(
            rooms={room: TemperatureSensor.from_status(status, room.value) for room in Room},
            heaters={heater: Heater.from_status(status, heater.value) for heater in HeaterName},
            distributor=Distributor(
                pump=PumpState(state=is_unset(status.get("sswsPumpe"))),
                vorlauf=TemperatureSensor.from_status(status, "Vorlauf"),
                ruecklauf=TemperatureSensor.from_status(status, "Ruecklauf"),
                mixer=Heater.from_status(status, "Mixer"),
            ),
            system=SystemInfo(
                version=status.get("version"),
                uptime=status.get("uptime"),
                threads=parse_float(status.get("cntThreads")),
            ),
        )


def convert_to_heating_system(status: Mapping[str, str | None]) -> HeatingSystem:
    return HeatingSystem.from_status(status)
