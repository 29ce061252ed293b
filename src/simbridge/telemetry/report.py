"""Decoded aircraft-state snapshot."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class TelemetryReport:
    """One decoded snapshot of the user aircraft.

    Zero latitude/longitude is a valid value: the simulator reports it
    until the aircraft has a position fix.
    """

    title: str
    altitude: float  # feet, indicated
    latitude: float  # degrees
    longitude: float  # degrees
    heading: float  # degrees true
    airspeed: float  # knots indicated
    airspeed_true: float  # knots
    vertical_speed: float  # ft/min
    flaps: float  # degrees
    trim: float  # percent
    rudder_trim: float  # percent
