"""Identifier and event models produced by the classifier."""

from __future__ import annotations

from dataclasses import dataclass, fields
from typing import ClassVar


@dataclass(frozen=True)
class AdapterId:
    object_path: str


@dataclass(frozen=True)
class DeviceId:
    object_path: str


@dataclass(frozen=True)
class CharacteristicId:
    object_path: str


@dataclass(frozen=True)
class BluetoothEvent:
    """Base of the closed set of events the classifier can produce."""

    id_field: ClassVar[str | None] = None
    id_type: ClassVar[type | None] = None

    def __post_init__(self) -> None:
        if self.id_field is None:
            return
        ident = getattr(self, self.id_field)
        if type(ident) is not self.id_type:
            raise TypeError(
                f"{type(self).__name__}.{self.id_field} must be {self.id_type.__name__}, "
                f"got {type(ident).__name__}"
            )

    @property
    def object_path(self) -> str | None:
        if self.id_field is None:
            return None
        return getattr(self, self.id_field).object_path

    def payload(self) -> dict[str, object]:
        return {f.name: getattr(self, f.name) for f in fields(self) if f.name != self.id_field}


@dataclass(frozen=True)
class Powered(BluetoothEvent):
    id_field: ClassVar[str | None] = "adapter"
    id_type: ClassVar[type | None] = AdapterId

    adapter: AdapterId
    powered: bool


@dataclass(frozen=True)
class Discovering(BluetoothEvent):
    id_field: ClassVar[str | None] = "adapter"
    id_type: ClassVar[type | None] = AdapterId

    adapter: AdapterId
    discovering: bool


@dataclass(frozen=True)
class Connected(BluetoothEvent):
    id_field: ClassVar[str | None] = "device"
    id_type: ClassVar[type | None] = DeviceId

    device: DeviceId
    connected: bool


@dataclass(frozen=True)
class ServicesResolved(BluetoothEvent):
    id_field: ClassVar[str | None] = "device"
    id_type: ClassVar[type | None] = DeviceId

    device: DeviceId
    services_resolved: bool


@dataclass(frozen=True)
class Value(BluetoothEvent):
    id_field: ClassVar[str | None] = "characteristic"
    id_type: ClassVar[type | None] = CharacteristicId

    characteristic: CharacteristicId
    value: bytes


@dataclass(frozen=True)
class RSSI(BluetoothEvent):
    id_field: ClassVar[str | None] = "device"
    id_type: ClassVar[type | None] = DeviceId

    device: DeviceId
    rssi: int


@dataclass(frozen=True)
class NoneEvent(BluetoothEvent):
    """A well-formed notification that carried no recognized property."""
