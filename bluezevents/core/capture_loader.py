"""Loading and validation of YAML captures of BlueZ property notifications."""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass
from importlib import resources
from importlib.resources.abc import Traversable
from pathlib import Path
from typing import Any

import yaml
from dbus_fast import Message, Variant
from jsonschema import ValidationError, validators

from bluezevents.core.errors import CaptureLoadError, CaptureValidationError
from bluezevents.core.variant import INTEGER_RANGES

PROPERTIES_INTERFACE = "org.freedesktop.DBus.Properties"
PROPERTIES_CHANGED = "PropertiesChanged"
PROPERTIES_CHANGED_SIGNATURE = "sa{sv}as"

_HEX_RE = re.compile(r"^[0-9a-f]*$")
_CAPTURE_SUFFIXES = (".yml", ".yaml")
# YAML 1.2 core schema spellings; yes/no/on/off stay strings.
_BOOL_WORDS = {"true": True, "false": False}
LOGGER = logging.getLogger(__name__)


class UniqueKeyLoader(yaml.SafeLoader):
    """YAML loader that rejects duplicate mapping keys."""


UniqueKeyLoader.yaml_implicit_resolvers = {
    key: list(value) for key, value in yaml.SafeLoader.yaml_implicit_resolvers.items()
}

# Booleans are coerced from the declared D-Bus type, not from YAML's yes/no/on/off.
for first_char, mappings in list(UniqueKeyLoader.yaml_implicit_resolvers.items()):
    UniqueKeyLoader.yaml_implicit_resolvers[first_char] = [
        (tag, regexp)
        for tag, regexp in mappings
        if tag != "tag:yaml.org,2002:bool"
    ]


def _construct_mapping(loader: UniqueKeyLoader, node: yaml.Node, deep: bool = False) -> dict[str, Any]:
    mapping: dict[str, Any] = {}
    for key_node, value_node in node.value:
        key = loader.construct_object(key_node, deep=deep)
        if key in mapping:
            raise CaptureValidationError(f"Duplicate key '{key}' in YAML document")
        mapping[key] = loader.construct_object(value_node, deep=deep)
    return mapping


UniqueKeyLoader.add_constructor(
    yaml.resolver.BaseResolver.DEFAULT_MAPPING_TAG,
    _construct_mapping,
)


@dataclass(frozen=True)
class Capture:
    name: str
    description: str
    messages: tuple[Message, ...]


def _load_schema_validator() -> Any:
    schema_text = resources.files("bluezevents.schemas").joinpath("capture.schema.json").read_text(
        encoding="utf-8"
    )
    schema = json.loads(schema_text)
    validator_cls = validators.validator_for(schema)
    validator_cls.check_schema(schema)
    return validator_cls(schema)


def _read_yaml(path: Path | Traversable) -> dict[str, Any]:
    try:
        content = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise CaptureLoadError(f"Could not read capture file {path}: {exc}") from exc

    try:
        loaded = yaml.load(content, Loader=UniqueKeyLoader)
    except yaml.YAMLError as exc:
        raise CaptureValidationError(f"Invalid YAML in {path}: {exc}") from exc

    if not isinstance(loaded, dict):
        raise CaptureValidationError(f"Capture file {path} must contain a mapping at root")
    return loaded


def _coerce_int(value: Any, signature: str, *, context: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise CaptureValidationError(f"{context} must be an integer")
    low, high = INTEGER_RANGES[signature]
    if not low <= value <= high:
        raise CaptureValidationError(
            f"{context} value {value} is out of range for type '{signature}' ({low}..{high})"
        )
    return value


def _coerce_bytes(value: Any, *, context: str) -> bytes:
    if isinstance(value, str):
        normalized = value.strip().lower().replace(" ", "")
        if len(normalized) % 2 != 0:
            raise CaptureValidationError(f"{context} must have even-length hex")
        if not _HEX_RE.match(normalized):
            raise CaptureValidationError(f"{context} must contain only [0-9a-f]")
        return bytes.fromhex(normalized)
    if isinstance(value, list):
        return bytes(_coerce_int(b, "y", context=context) for b in value)
    raise CaptureValidationError(f"{context} must be a hex string or a list of byte values")


def _coerce_value(signature: str, value: Any, *, context: str) -> Any:
    if signature == "b":
        if isinstance(value, str) and value in _BOOL_WORDS:
            return _BOOL_WORDS[value]
        raise CaptureValidationError(f"{context} must be true or false, got {value!r}")
    if signature in INTEGER_RANGES:
        return _coerce_int(value, signature, context=context)
    if signature == "d":
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise CaptureValidationError(f"{context} must be a number")
        return float(value)
    if signature in {"s", "o"}:
        if not isinstance(value, str):
            raise CaptureValidationError(f"{context} must be a string")
        return value
    if signature == "ay":
        return _coerce_bytes(value, context=context)
    if signature == "as":
        if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
            raise CaptureValidationError(f"{context} must be a list of strings")
        return list(value)
    raise CaptureValidationError(f"{context} has unsupported type '{signature}'")


def _build_message(entry: dict[str, Any], *, context: str) -> Message:
    changed: dict[str, Variant] = {}
    for prop_name, prop_spec in entry["changed"].items():
        prop_context = f"{context}.changed.{prop_name}"
        value = _coerce_value(prop_spec["type"], prop_spec["value"], context=prop_context)
        try:
            changed[prop_name] = Variant(prop_spec["type"], value)
        except (TypeError, ValueError) as exc:
            raise CaptureValidationError(f"{prop_context} is not a valid variant: {exc}") from exc

    try:
        return Message.new_signal(
            entry["path"],
            PROPERTIES_INTERFACE,
            PROPERTIES_CHANGED,
            PROPERTIES_CHANGED_SIGNATURE,
            [entry["interface"], changed, list(entry.get("invalidated", []))],
        )
    except (TypeError, ValueError) as exc:
        raise CaptureValidationError(f"{context} is not a valid bus message: {exc}") from exc


def _build_capture(doc: dict[str, Any], source: Path | Traversable) -> Capture:
    validator = _load_schema_validator()
    try:
        validator.validate(doc)
    except ValidationError as exc:
        path = ".".join(str(p) for p in exc.path)
        where = f" ({path})" if path else ""
        raise CaptureValidationError(f"Schema validation failed for {source}{where}: {exc.message}") from exc

    messages = tuple(
        _build_message(entry, context=f"{doc['name']}.messages.{index}")
        for index, entry in enumerate(doc["messages"])
    )
    LOGGER.debug("Loaded capture '%s' with %d messages from %s", doc["name"], len(messages), source)
    return Capture(name=doc["name"], description=doc.get("description", ""), messages=messages)


def load_capture(path: Path | Traversable) -> Capture:
    return _build_capture(_read_yaml(path), path)


def _iter_packaged_capture_paths() -> list[Traversable]:
    capture_root = resources.files("bluezevents.captures")
    return [item for item in capture_root.iterdir() if item.name.endswith(_CAPTURE_SUFFIXES)]


def packaged_captures() -> dict[str, Capture]:
    captures: dict[str, Capture] = {}
    for path in sorted(_iter_packaged_capture_paths(), key=lambda p: p.name):
        capture = load_capture(path)
        if capture.name in captures:
            raise CaptureValidationError(
                f"Packaged capture {path.name} reuses the name '{capture.name}'"
            )
        captures[capture.name] = capture
    return captures


def resolve_capture(name_or_path: str) -> Capture:
    path = Path(name_or_path)
    if path.suffix in _CAPTURE_SUFFIXES or path.exists():
        if not path.exists():
            raise CaptureLoadError(f"Capture file {path} does not exist")
        if not path.is_file():
            raise CaptureLoadError(f"Capture path {path} is not a file")
        return load_capture(path)

    captures = packaged_captures()
    capture = captures.get(name_or_path)
    if capture is None:
        available = ", ".join(sorted(captures)) or "<none>"
        raise CaptureLoadError(f"Unknown capture '{name_or_path}'. Available: {available}")
    return capture
