from __future__ import annotations

from pathlib import Path

import pytest

from bluezevents.core import capture_loader
from bluezevents.core.capture_loader import load_capture, packaged_captures, resolve_capture
from bluezevents.core.classifier import classify
from bluezevents.core.errors import CaptureLoadError, CaptureValidationError
from bluezevents.core.model import AdapterId, Connected, DeviceId, Powered, Value


def _write_capture(path: Path, content: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    return path


def test_load_packaged_capture() -> None:
    captures = packaged_captures()
    assert "hci0_session" in captures
    capture = captures["hci0_session"]
    assert len(capture.messages) == 8

    first = capture.messages[0]
    assert first.path == "/org/bluez/hci0"
    assert first.member == "PropertiesChanged"
    assert first.signature == "sa{sv}as"
    assert isinstance(classify(first), Powered)


def test_packaged_capture_co_occurring_properties_pick_connected() -> None:
    capture = resolve_capture("hci0_session")
    event = classify(capture.messages[3])
    assert event == Connected(device=DeviceId("/org/bluez/hci0/dev_AA_BB_CC_DD_EE_FF"), connected=True)


def test_hex_and_list_byte_values(tmp_path: Path) -> None:
    path = _write_capture(
        tmp_path / "bytes.yaml",
        """
name: bytes
messages:
  - path: /org/bluez/hci0/dev_AA/char0001
    interface: org.bluez.GattCharacteristic1
    changed:
      Value: {type: ay, value: "01 02"}
  - path: /org/bluez/hci0/dev_AA/char0001
    interface: org.bluez.GattCharacteristic1
    changed:
      Value: {type: ay, value: [1, 2]}
""",
    )
    capture = load_capture(path)
    events = [classify(m) for m in capture.messages]
    assert all(isinstance(e, Value) and e.value == b"\x01\x02" for e in events)


def test_yaml_words_are_not_booleans(tmp_path: Path) -> None:
    path = _write_capture(
        tmp_path / "words.yaml",
        """
name: words
messages:
  - path: /org/bluez/hci0
    interface: org.bluez.Adapter1
    changed:
      Powered: {type: b, value: yes}
""",
    )
    with pytest.raises(CaptureValidationError):
        load_capture(path)


def test_duplicate_keys_rejected(tmp_path: Path) -> None:
    path = _write_capture(
        tmp_path / "dup.yaml",
        """
name: dup
messages:
  - path: /org/bluez/hci0
    interface: org.bluez.Adapter1
    changed:
      Powered: {type: b, value: true}
      Powered: {type: b, value: false}
""",
    )
    with pytest.raises(CaptureValidationError):
        load_capture(path)


def test_schema_violation_rejected(tmp_path: Path) -> None:
    path = _write_capture(
        tmp_path / "schema.yaml",
        """
name: schema
messages:
  - path: org/bluez/hci0
    interface: org.bluez.Adapter1
    changed: {}
""",
    )
    with pytest.raises(CaptureValidationError):
        load_capture(path)


def test_out_of_range_integer_rejected(tmp_path: Path) -> None:
    path = _write_capture(
        tmp_path / "range.yaml",
        """
name: range
messages:
  - path: /org/bluez/hci0/dev_AA
    interface: org.bluez.Device1
    changed:
      RSSI: {type: n, value: -40000}
""",
    )
    with pytest.raises(CaptureValidationError):
        load_capture(path)


def test_unknown_capture_name() -> None:
    with pytest.raises(CaptureLoadError):
        resolve_capture("no_such_capture")


def test_missing_capture_file(tmp_path: Path) -> None:
    with pytest.raises(CaptureLoadError):
        resolve_capture(str(tmp_path / "missing.yaml"))


def test_boolean_words_follow_declared_type(tmp_path: Path) -> None:
    path = _write_capture(
        tmp_path / "bools.yaml",
        """
name: bools
messages:
  - path: /org/bluez/hci0
    interface: org.bluez.Adapter1
    changed:
      Powered: {type: b, value: false}
""",
    )
    event = classify(load_capture(path).messages[0])
    assert event == Powered(adapter=AdapterId("/org/bluez/hci0"), powered=False)


def test_packaged_captures_reject_duplicate_names(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    content = """
name: twin
messages: []
"""
    first = _write_capture(tmp_path / "a.yaml", content)
    second = _write_capture(tmp_path / "b.yaml", content)
    monkeypatch.setattr(capture_loader, "_iter_packaged_capture_paths", lambda: [second, first])

    with pytest.raises(CaptureValidationError, match="twin"):
        packaged_captures()


def test_directory_is_not_a_capture_file(tmp_path: Path) -> None:
    with pytest.raises(CaptureLoadError, match="is not a file"):
        resolve_capture(str(tmp_path))
