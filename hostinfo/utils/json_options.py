"""
================================================================================
JSON OPTIONS - Shared JSON Serialization Settings
================================================================================

Defines the JSON wire format used by every JSON response of the application.

Wire Format:
    - Dataclass field names are rendered in camelCase (process_id -> processId)
    - Mapping keys are rendered in camelCase (PATH -> path)
    - Enum values are written as their member name ("X64"), never a number
    - datetime values are ISO-8601 strings
    - timedelta values are seconds (float)

Public API:
    get_default_options() - Shared read-only options, built once per process
    configure(options)    - Apply the same settings to caller-owned options
    CamelCaseJSONProvider - Flask JSON provider using configured options

Usage:
    from hostinfo.utils.json_options import get_default_options

    text = get_default_options().dumps(snapshot)

Last Modified: October 2026
================================================================================
"""

import dataclasses
import json
import threading
import typing
from datetime import date, datetime, timedelta
from enum import Enum

from flask.json.provider import DefaultJSONProvider


class ReadOnlyOptionsError(RuntimeError):
    """Raised when a read-only JsonSerializerOptions instance is modified."""


def camel_case(name: str) -> str:
    """
    Convert an identifier to camelCase.

    Leading upper-case runs are lowered the way acronyms are expected to read:
        process_id  -> processId
        PATH        -> path
        HTTPServer  -> httpServer
        osVersion   -> osVersion
    """
    if not name:
        return name

    parts = [p for p in name.split('_') if p]
    if not parts:
        return name

    head = _lower_leading(parts[0])
    tail = ''.join(p[0].upper() + p[1:] for p in parts[1:])
    return head + tail


def _lower_leading(word: str) -> str:
    if not word[0].isupper():
        return word
    chars = list(word)
    for i in range(len(chars)):
        if i == 1 and not chars[i].isupper():
            break
        # Keep the first letter of the next word upper-case: HTTPServer -> httpServer
        if i > 0 and i + 1 < len(chars) and not chars[i + 1].isupper():
            break
        chars[i] = chars[i].lower()
    return ''.join(chars)


class JsonStringEnumConverter:
    """Writes Enum members by name and reads names back into members."""

    def can_convert(self, value_type) -> bool:
        return isinstance(value_type, type) and issubclass(value_type, Enum)

    def write(self, value: Enum) -> str:
        return value.name

    def read(self, raw, enum_type):
        if isinstance(raw, enum_type):
            return raw
        try:
            return enum_type[raw]
        except KeyError:
            # Accept case-insensitive names from lenient clients
            for member in enum_type:
                if member.name.lower() == str(raw).lower():
                    return member
            raise ValueError(f"{raw!r} is not a valid {enum_type.__name__}")


class JsonSerializerOptions:
    """
    Settings controlling how objects are converted to and from JSON.

    Instances are mutable until make_read_only() is called; after that any
    attempt to change a setting raises ReadOnlyOptionsError.
    """

    def __init__(self):
        self.property_naming_policy = None
        self.dictionary_key_policy = None
        self.converters = []
        self.indent = None
        self._read_only = False

    def __setattr__(self, name, value):
        if getattr(self, '_read_only', False):
            raise ReadOnlyOptionsError(f"Cannot set '{name}' on read-only JSON options")
        super().__setattr__(name, value)

    @property
    def is_read_only(self) -> bool:
        return self._read_only

    def make_read_only(self):
        self.converters = tuple(self.converters)
        self._read_only = True
        return self

    def add_converter(self, converter):
        if self._read_only:
            raise ReadOnlyOptionsError("Cannot add a converter to read-only JSON options")
        self.converters.append(converter)

    # ------------------------------------------------------------------
    # Encoding
    # ------------------------------------------------------------------

    def _property_name(self, name):
        return self.property_naming_policy(name) if self.property_naming_policy else name

    def _key_name(self, key):
        if isinstance(key, Enum):
            key = self._convert_enum(key)
        key = str(key)
        return self.dictionary_key_policy(key) if self.dictionary_key_policy else key

    def _converter_for(self, value_type):
        for converter in self.converters:
            if converter.can_convert(value_type):
                return converter
        return None

    def _convert_enum(self, value):
        converter = self._converter_for(type(value))
        if converter is not None:
            return converter.write(value)
        return value.value

    def to_jsonable(self, obj):
        """Convert obj into plain JSON-compatible Python values."""
        if obj is None or isinstance(obj, (bool, int, float, str)) and not isinstance(obj, Enum):
            return obj
        if isinstance(obj, Enum):
            return self._convert_enum(obj)
        if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
            return {
                self._property_name(f.name): self.to_jsonable(getattr(obj, f.name))
                for f in dataclasses.fields(obj)
            }
        if isinstance(obj, dict):
            return {self._key_name(k): self.to_jsonable(v) for k, v in obj.items()}
        if isinstance(obj, (list, tuple, set, frozenset)):
            return [self.to_jsonable(v) for v in obj]
        if isinstance(obj, (datetime, date)):
            return obj.isoformat()
        if isinstance(obj, timedelta):
            return obj.total_seconds()
        raise TypeError(f"Object of type {type(obj).__name__} is not JSON serializable")

    def dumps(self, obj, **kwargs) -> str:
        kwargs.setdefault('indent', self.indent)
        return json.dumps(self.to_jsonable(obj), **kwargs)

    # ------------------------------------------------------------------
    # Decoding
    # ------------------------------------------------------------------

    def from_jsonable(self, data, target_type=None):
        """
        Convert decoded JSON data into target_type.

        Args:
            data: Value produced by json.loads
            target_type: Optional dataclass, Enum, datetime or timedelta type

        Returns:
            Converted value, or data unchanged when no target type is given
        """
        if target_type is None or data is None:
            return data

        origin = typing.get_origin(target_type)
        if origin is typing.Union:
            args = [a for a in typing.get_args(target_type) if a is not type(None)]
            return self.from_jsonable(data, args[0]) if len(args) == 1 else data
        if origin in (list, tuple):
            args = typing.get_args(target_type)
            item_type = args[0] if args else None
            items = [self.from_jsonable(v, item_type) for v in data]
            return tuple(items) if origin is tuple else items
        if origin is dict:
            args = typing.get_args(target_type)
            value_type = args[1] if len(args) == 2 else None
            return {k: self.from_jsonable(v, value_type) for k, v in data.items()}

        converter = self._converter_for(target_type)
        if converter is not None:
            return converter.read(data, target_type)
        if dataclasses.is_dataclass(target_type):
            return self._read_dataclass(data, target_type)
        if target_type is datetime:
            return datetime.fromisoformat(data)
        if target_type is timedelta:
            return timedelta(seconds=data)
        return data

    def _read_dataclass(self, data, cls):
        if not isinstance(data, dict):
            raise TypeError(f"Expected a JSON object for {cls.__name__}, got {type(data).__name__}")
        hints = typing.get_type_hints(cls)
        values = {}
        for f in dataclasses.fields(cls):
            if not f.init:
                continue
            json_name = self._property_name(f.name)
            if json_name in data:
                raw = data[json_name]
            elif f.name in data:
                raw = data[f.name]
            else:
                continue
            values[f.name] = self.from_jsonable(raw, hints.get(f.name))
        return cls(**values)

    def loads(self, text, target_type=None):
        return self.from_jsonable(json.loads(text), target_type)


def configure(options: JsonSerializerOptions) -> JsonSerializerOptions:
    """
    Apply the application JSON settings to a caller-supplied options object.

    Args:
        options: Options instance to configure in place

    Returns:
        The same options instance
    """
    options.property_naming_policy = camel_case
    options.dictionary_key_policy = camel_case
    if not any(isinstance(c, JsonStringEnumConverter) for c in options.converters):
        options.add_converter(JsonStringEnumConverter())
    return options


_default_options = None
_default_lock = threading.Lock()


def get_default_options() -> JsonSerializerOptions:
    """Return the shared read-only options, building them on first use."""
    global _default_options
    if _default_options is None:
        with _default_lock:
            if _default_options is None:
                _default_options = configure(JsonSerializerOptions()).make_read_only()
    return _default_options


class CamelCaseJSONProvider(DefaultJSONProvider):
    """
    Flask JSON provider emitting the application wire format.

    Only responses (jsonify) are converted. dumps()/loads() stay stock because
    the cookie session serializer goes through them and its keys must survive
    a round trip unchanged.
    """

    sort_keys = False

    def __init__(self, app):
        super().__init__(app)
        self.options = configure(JsonSerializerOptions())

    def response(self, *args, **kwargs):
        obj = self._prepare_response_obj(args, kwargs)
        return super().response(self.options.to_jsonable(obj))
