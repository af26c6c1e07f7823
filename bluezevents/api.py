"""Stable public API for consuming bluezevents.

This module is the supported integration surface for bus reactors and other
tooling. Avoid importing from `bluezevents.core` directly unless intentionally
depending on non-stable internals.
"""

from __future__ import annotations

from bluezevents.core.capture_loader import Capture, load_capture, packaged_captures, resolve_capture
from bluezevents.core.classifier import (
    PROPERTY_RULES,
    BusMessage,
    PropertyRule,
    classify,
    classify_all,
    decode_message,
)
from bluezevents.core.errors import (
    BluezEventsError,
    CaptureLoadError,
    CaptureValidationError,
    MessageDecodeError,
)
from bluezevents.core.model import (
    RSSI,
    AdapterId,
    BluetoothEvent,
    CharacteristicId,
    Connected,
    DeviceId,
    Discovering,
    NoneEvent,
    Powered,
    ServicesResolved,
    Value,
)
from bluezevents.core.variant import PropertyValue

__all__ = [
    "BluezEventsError",
    "CaptureLoadError",
    "CaptureValidationError",
    "MessageDecodeError",
    "AdapterId",
    "DeviceId",
    "CharacteristicId",
    "BluetoothEvent",
    "Powered",
    "Discovering",
    "Connected",
    "ServicesResolved",
    "Value",
    "RSSI",
    "NoneEvent",
    "PropertyValue",
    "BusMessage",
    "PropertyRule",
    "PROPERTY_RULES",
    "classify",
    "classify_all",
    "decode_message",
    "Capture",
    "load_capture",
    "packaged_captures",
    "resolve_capture",
]
