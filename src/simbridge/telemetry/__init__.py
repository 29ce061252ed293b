"""Simulator telemetry: record schemas through to position forwarding."""

from __future__ import annotations

from simbridge.telemetry.decoder import RecordDecoder
from simbridge.telemetry.dispatch import DispatchLoop, LoopState, Subscription
from simbridge.telemetry.forwarder import ForwardPolicy, TelemetryForwarder
from simbridge.telemetry.registry import AircraftRegistry
from simbridge.telemetry.report import TelemetryReport
from simbridge.telemetry.schema import REPORT_SCHEMA, FieldSpec, RecordSchema, SchemaRegistry
from simbridge.telemetry.synthetic import SyntheticFeed

__all__ = [
    "REPORT_SCHEMA",
    "AircraftRegistry",
    "DispatchLoop",
    "FieldSpec",
    "ForwardPolicy",
    "LoopState",
    "RecordDecoder",
    "RecordSchema",
    "SchemaRegistry",
    "Subscription",
    "SyntheticFeed",
    "TelemetryForwarder",
    "TelemetryReport",
]
