"""
Management Connections

The connection contract statistics accessors consume, plus an
in-process implementation of it.

A ConnectionSource is any zero-argument callable returning a
ManagementConnection. Accessors call it once per operation and never
keep the handle, so reconnection policy belongs to the source.
"""

import pickle
import threading
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Protocol, Sequence, Set, Tuple

from .errors import (
    AttributeNotFound,
    AttributeNotReadable,
    InstanceNotFound,
    ManagementError,
    NotSerializableResult,
    OperationFailed,
    OperationNotFound,
)
from .names import ObjectName, as_object_name


@dataclass(frozen=True)
class AttributeInfo:
    """Metadata of one attribute of a management object."""
    name: str
    type: str = "object"
    readable: bool = True
    writable: bool = False
    description: str = ""


@dataclass(frozen=True)
class MBeanInfo:
    """Introspection result for a management object."""
    class_name: str
    attributes: Tuple[AttributeInfo, ...] = ()
    operations: Tuple[str, ...] = ()
    description: str = ""


class ManagementConnection(Protocol):
    """Operations a management endpoint must support."""

    def query_names(self, pattern: ObjectName) -> Set[ObjectName]:
        ...

    def get_mbean_info(self, name: ObjectName) -> MBeanInfo:
        ...

    def get_attributes(self, name: ObjectName, attributes: Sequence[str]) -> List[Tuple[str, Any]]:
        ...

    def get_attribute(self, name: ObjectName, attribute: str) -> Any:
        ...

    def invoke(self, name: ObjectName, operation: str, params: Sequence[Any] = (), signature: Sequence[str] = ()) -> Any:
        ...


ConnectionSource = Callable[[], ManagementConnection]


# =============================================================================
# In-process implementation
# =============================================================================

@dataclass
class ManagedObject:
    """
    A locally registered management object.

    Attribute values may be plain values or zero-argument callables that
    are evaluated on every read. Operations are callables taking the
    invocation parameters.
    """
    attributes: Dict[str, Any] = field(default_factory=dict)
    operations: Dict[str, Callable[..., Any]] = field(default_factory=dict)
    unreadable: Set[str] = field(default_factory=set)
    class_name: str = "statsprobe.ManagedObject"
    description: str = ""

    def info(self) -> MBeanInfo:
        attributes = tuple(
            AttributeInfo(
                name=name,
                type="callable" if callable(value) else type(value).__name__,
                readable=name not in self.unreadable,
            )
            for name, value in self.attributes.items()
        )
        return MBeanInfo(
            class_name=self.class_name,
            attributes=attributes,
            operations=tuple(self.operations),
            description=self.description,
        )

    def read(self, attribute: str) -> Any:
        if attribute not in self.attributes:
            raise AttributeNotFound(f"No attribute {attribute!r}")
        if attribute in self.unreadable:
            raise AttributeNotReadable(f"Attribute {attribute!r} is not readable")
        value = self.attributes[attribute]
        if callable(value):
            try:
                return value()
            except ManagementError:
                raise
            except Exception as e:
                raise OperationFailed(f"Getter for {attribute!r} failed: {e}") from e
        return value


class LocalManagementServer:
    """
    In-process management server.

    With marshal_results=True, operation results are pickled the way a
    remote transport would marshal them, and unpicklable results raise
    NotSerializableResult after the operation has run.
    """

    def __init__(self, marshal_results: bool = False):
        self.marshal_results = marshal_results
        self._objects: Dict[ObjectName, ManagedObject] = {}
        self._lock = threading.Lock()

    def register(self, name, obj: ManagedObject) -> ObjectName:
        """Register an object under a concrete name."""
        name = as_object_name(name)
        if name.is_pattern:
            raise ValueError(f"Cannot register under a pattern: {name}")
        with self._lock:
            if name in self._objects:
                raise ValueError(f"Already registered: {name}")
            self._objects[name] = obj
        return name

    def unregister(self, name):
        name = as_object_name(name)
        with self._lock:
            if self._objects.pop(name, None) is None:
                raise InstanceNotFound(str(name))

    def is_registered(self, name) -> bool:
        with self._lock:
            return as_object_name(name) in self._objects

    def _lookup(self, name) -> ManagedObject:
        name = as_object_name(name)
        with self._lock:
            obj = self._objects.get(name)
        if obj is None:
            raise InstanceNotFound(str(name))
        return obj

    def query_names(self, pattern) -> Set[ObjectName]:
        pattern = as_object_name(pattern)
        with self._lock:
            names = list(self._objects)
        return {name for name in names if pattern.matches(name)}

    def get_mbean_info(self, name) -> MBeanInfo:
        return self._lookup(name).info()

    def get_attributes(self, name, attributes: Sequence[str]) -> List[Tuple[str, Any]]:
        obj = self._lookup(name)
        values = []
        for attribute in attributes:
            # Unreadable or missing attributes are left out, as in a bulk fetch
            try:
                values.append((attribute, obj.read(attribute)))
            except (AttributeNotFound, AttributeNotReadable):
                continue
        return values

    def get_attribute(self, name, attribute: str) -> Any:
        return self._lookup(name).read(attribute)

    def invoke(self, name, operation: str, params: Sequence[Any] = (), signature: Sequence[str] = ()) -> Any:
        obj = self._lookup(name)
        handler = obj.operations.get(operation)
        if handler is None:
            raise OperationNotFound(f"No operation {operation!r} on {name}")
        if len(params) != len(signature):
            raise ValueError("params and signature must have the same length")
        try:
            result = handler(*params)
        except ManagementError:
            raise
        except Exception as e:
            raise OperationFailed(f"Operation {operation!r} on {name} failed: {e}") from e

        if self.marshal_results:
            try:
                pickle.dumps(result)
            except (pickle.PicklingError, TypeError, AttributeError) as e:
                raise NotSerializableResult(
                    f"Result of {operation!r} is not serializable: {type(result).__name__}"
                ) from e
        return result

    def names(self) -> List[ObjectName]:
        with self._lock:
            return list(self._objects)


# =============================================================================
# Process-wide server
# =============================================================================

_platform_server: Optional[LocalManagementServer] = None
_platform_server_lock = threading.Lock()


def get_platform_server() -> LocalManagementServer:
    """
    Get the process-wide management server.

    The current process statistics object is registered on first use.
    """
    global _platform_server

    with _platform_server_lock:
        if _platform_server is None:
            from .process import register_process_statistics

            server = LocalManagementServer()
            register_process_statistics(server)
            _platform_server = server
        return _platform_server


def local_connection_source(server: Optional[LocalManagementServer] = None) -> ConnectionSource:
    """Return a ConnectionSource for an in-process server."""
    if server is not None:
        return lambda: server
    return get_platform_server


def reset_platform_server():
    """Drop the process-wide server."""
    global _platform_server

    with _platform_server_lock:
        _platform_server = None
