"""Classification of BlueZ PropertiesChanged notifications into events."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Iterator, Mapping, Sequence
from dataclasses import dataclass
from typing import Any, Protocol

from bluezevents.core.errors import MessageDecodeError
from bluezevents.core.model import (
    RSSI,
    BluetoothEvent,
    Connected,
    Discovering,
    NoneEvent,
    Powered,
    ServicesResolved,
    Value,
)
from bluezevents.core.variant import PropertyValue

PROPERTIES_CHANGED_SIGNATURE_PREFIX = "sa{sv}"
LOGGER = logging.getLogger(__name__)


class BusMessage(Protocol):
    """The parts of a received bus message the classifier reads.

    `dbus_fast.Message` satisfies this protocol. A `signature` string
    attribute is optional; when present it must start with `sa{sv}`.
    """

    path: str | None
    body: Sequence[Any]


@dataclass(frozen=True)
class PropertyRule:
    name: str
    signature: str
    extract: Callable[[PropertyValue], Any]
    event: type[BluetoothEvent]

    def build(self, object_path: str, value: Any) -> BluetoothEvent:
        return self.event(self.event.id_type(object_path), value)


# Iteration order is the match priority.
PROPERTY_RULES: tuple[PropertyRule, ...] = (
    PropertyRule("Powered", "b", PropertyValue.as_bool, Powered),
    PropertyRule("Discovering", "b", PropertyValue.as_bool, Discovering),
    PropertyRule("Connected", "b", PropertyValue.as_bool, Connected),
    PropertyRule("ServicesResolved", "b", PropertyValue.as_bool, ServicesResolved),
    PropertyRule("Value", "ay", PropertyValue.as_bytes, Value),
    PropertyRule("RSSI", "n", PropertyValue.as_int16, RSSI),
)


def decode_message(message: BusMessage) -> tuple[str, dict[str, PropertyValue]]:
    object_path = getattr(message, "path", None)
    if not isinstance(object_path, str) or not object_path:
        raise MessageDecodeError("Message has no object path")

    signature = getattr(message, "signature", None)
    if isinstance(signature, str) and not signature.startswith(PROPERTIES_CHANGED_SIGNATURE_PREFIX):
        raise MessageDecodeError(
            f"Message signature '{signature}' does not start with '{PROPERTIES_CHANGED_SIGNATURE_PREFIX}'"
        )

    body = getattr(message, "body", None)
    if not isinstance(body, Sequence) or isinstance(body, (str, bytes)) or len(body) < 2:
        raise MessageDecodeError("Message body must hold an interface name and a property mapping")

    interface, changed = body[0], body[1]
    if not isinstance(interface, str):
        raise MessageDecodeError(f"Expected interface name string, got {type(interface).__name__}")
    if not isinstance(changed, Mapping):
        raise MessageDecodeError(f"Expected property mapping, got {type(changed).__name__}")

    properties: dict[str, PropertyValue] = {}
    for name, raw in changed.items():
        if not isinstance(name, str):
            raise MessageDecodeError(f"Property name must be a string, got {type(name).__name__}")
        value = PropertyValue.wrap(raw)
        if value is None:
            raise MessageDecodeError(f"Property '{name}' is not a variant value")
        properties[name] = value
    return object_path, properties


def classify(message: BusMessage) -> BluetoothEvent | None:
    """Classify one PropertiesChanged notification.

    Returns `None` when the message cannot be decoded, and `NoneEvent()` when
    it decodes but carries no recognized, correctly-typed property.
    """
    try:
        object_path, properties = decode_message(message)
    except MessageDecodeError as exc:
        LOGGER.debug("Dropping undecodable message: %s", exc)
        return None

    for rule in PROPERTY_RULES:
        value = properties.get(rule.name)
        if value is None:
            continue
        extracted = rule.extract(value)
        if extracted is None:
            LOGGER.debug(
                "Skipping %s on %s: expected '%s', got '%s'",
                rule.name,
                object_path,
                rule.signature,
                value.signature,
            )
            continue
        return rule.build(object_path, extracted)

    return NoneEvent()


def classify_all(
    messages: Iterable[BusMessage],
    *,
    include_none: bool = False,
) -> Iterator[BluetoothEvent]:
    for message in messages:
        event = classify(message)
        if event is None:
            continue
        if isinstance(event, NoneEvent) and not include_none:
            continue
        yield event
