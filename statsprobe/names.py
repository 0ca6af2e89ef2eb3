"""
Management Object Names

An object name is a domain plus an unordered set of key properties:

    jboss.datagrid-infinispan:type=Cache,name="sessions(repl_sync)",manager="clustered",component=Statistics

A name becomes a pattern when its domain contains ``*``/``?``, when a
property value contains an unescaped ``*``/``?``, or when the property
list ends with ``,*`` (extra keys are then allowed on the match).

Values are kept in their written form, quotes included, and patterns
compare against that written form.
"""

import re
from typing import Dict, Iterable, Optional, Tuple

from .errors import MalformedObjectName

_KEY_FORBIDDEN = set(',=:*?"\n')
_UNQUOTED_VALUE_FORBIDDEN = set(',=:"\n')


def quote(value: str, escape_wildcards: bool = True) -> str:
    """
    Quote a property value.

    Args:
        value: Raw value
        escape_wildcards: Escape ``*`` and ``?`` so they match literally

    Returns:
        Quoted value like ``"sessions(repl_sync)"``
    """
    escaped = value.replace("\\", "\\\\").replace('"', '\\"').replace("\n", "\\n")
    if escape_wildcards:
        escaped = escaped.replace("*", "\\*").replace("?", "\\?")
    return f'"{escaped}"'


def _has_wildcard(text: str) -> bool:
    i = 0
    while i < len(text):
        c = text[i]
        if c == "\\":
            i += 2
            continue
        if c in "*?":
            return True
        i += 1
    return False


def _wildcard_regex(text: str) -> "re.Pattern":
    parts = []
    i = 0
    while i < len(text):
        c = text[i]
        if c == "\\" and i + 1 < len(text):
            parts.append(re.escape(text[i:i + 2]))
            i += 2
            continue
        if c == "*":
            parts.append(".*")
        elif c == "?":
            parts.append(".")
        else:
            parts.append(re.escape(c))
        i += 1
    return re.compile("".join(parts), re.DOTALL)


def _parse_properties(text: str, name: str) -> Tuple[Dict[str, str], bool]:
    properties: Dict[str, str] = {}
    list_pattern = False
    i = 0
    n = len(text)

    while i < n:
        if text[i] == "*" and (i + 1 == n or text[i + 1] == ","):
            if list_pattern:
                raise MalformedObjectName(f"Repeated property list wildcard in {name!r}")
            list_pattern = True
            i += 2
            continue

        eq = text.find("=", i)
        if eq == -1:
            raise MalformedObjectName(f"Missing '=' in key property of {name!r}")
        key = text[i:eq]
        if not key or _KEY_FORBIDDEN.intersection(key):
            raise MalformedObjectName(f"Invalid key {key!r} in {name!r}")
        i = eq + 1

        if i < n and text[i] == '"':
            j = i + 1
            while j < n:
                if text[j] == "\\":
                    j += 2
                    continue
                if text[j] == '"':
                    break
                j += 1
            if j >= n:
                raise MalformedObjectName(f"Unterminated quoted value in {name!r}")
            value = text[i:j + 1]
            i = j + 1
        else:
            j = text.find(",", i)
            if j == -1:
                j = n
            value = text[i:j]
            if not value or _UNQUOTED_VALUE_FORBIDDEN.intersection(value):
                raise MalformedObjectName(f"Invalid value {value!r} for key {key!r} in {name!r}")
            i = j

        if key in properties:
            raise MalformedObjectName(f"Duplicate key {key!r} in {name!r}")
        properties[key] = value

        if i < n:
            if text[i] != ",":
                raise MalformedObjectName(f"Expected ',' after value of {key!r} in {name!r}")
            i += 1
            if i == n:
                raise MalformedObjectName(f"Trailing ',' in {name!r}")

    return properties, list_pattern


class ObjectName:
    """
    Immutable management object name or name pattern.

    Usage:
        template = ObjectName('jboss.datagrid-infinispan:type=Cache,name="work(*)",*')
        template.matches(ObjectName('jboss.datagrid-infinispan:type=Cache,name="work(repl_sync)",manager="x"'))
    """

    __slots__ = ("_text", "_domain", "_properties", "_list_pattern", "_canonical")

    def __init__(self, name: str):
        if not isinstance(name, str):
            raise TypeError(f"Object name must be a string, got {type(name).__name__}")
        domain, sep, rest = name.partition(":")
        if not sep:
            raise MalformedObjectName(f"Missing domain separator in {name!r}")
        if "\n" in domain:
            raise MalformedObjectName(f"Invalid domain in {name!r}")
        if not rest:
            raise MalformedObjectName(f"No key properties in {name!r}")

        properties, list_pattern = _parse_properties(rest, name)

        self._text = name
        self._domain = domain
        self._properties = properties
        self._list_pattern = list_pattern

        canonical = ",".join(f"{k}={properties[k]}" for k in sorted(properties))
        if list_pattern:
            canonical = f"{canonical},*" if canonical else "*"
        self._canonical = f"{domain}:{canonical}"

    @classmethod
    def from_parts(
        cls,
        domain: str,
        properties: Iterable[Tuple[str, str]],
        property_list_pattern: bool = False
    ) -> "ObjectName":
        """Build a name from a domain and already-quoted property values."""
        segments = [f"{k}={v}" for k, v in properties]
        if property_list_pattern:
            segments.append("*")
        return cls(f"{domain}:{','.join(segments)}")

    @property
    def domain(self) -> str:
        return self._domain

    @property
    def properties(self) -> Dict[str, str]:
        return dict(self._properties)

    def get(self, key: str) -> Optional[str]:
        return self._properties.get(key)

    @property
    def canonical_name(self) -> str:
        return self._canonical

    @property
    def is_property_list_pattern(self) -> bool:
        return self._list_pattern

    @property
    def is_domain_pattern(self) -> bool:
        return _has_wildcard(self._domain)

    @property
    def is_property_value_pattern(self) -> bool:
        return any(_has_wildcard(v) for v in self._properties.values())

    @property
    def is_pattern(self) -> bool:
        return self._list_pattern or self.is_domain_pattern or self.is_property_value_pattern

    def matches(self, other: "ObjectName") -> bool:
        """
        Check whether a concrete name is selected by this name.

        A non-pattern name only matches itself. Patterns are never
        selected by other patterns.
        """
        if other.is_pattern:
            return False

        if self.is_domain_pattern:
            if not _wildcard_regex(self._domain).fullmatch(other._domain):
                return False
        elif self._domain != other._domain:
            return False

        if not self._list_pattern and set(self._properties) != set(other._properties):
            return False

        for key, value in self._properties.items():
            actual = other._properties.get(key)
            if actual is None:
                return False
            if _has_wildcard(value):
                if not _wildcard_regex(value).fullmatch(actual):
                    return False
            elif value != actual:
                return False

        return True

    def __eq__(self, other):
        if not isinstance(other, ObjectName):
            return NotImplemented
        return self._canonical == other._canonical

    def __hash__(self):
        return hash(self._canonical)

    def __str__(self):
        return self._text

    def __repr__(self):
        return f"ObjectName({self._text!r})"


def as_object_name(name) -> ObjectName:
    """Accept either an ObjectName or its string form."""
    if isinstance(name, ObjectName):
        return name
    return ObjectName(name)
