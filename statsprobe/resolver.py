"""
Name Resolution

Turns a name template into the concrete object name it denotes on a
connection, and remembers the answer.
"""

from typing import Optional

from .errors import ResolutionNotFound
from .names import ObjectName, as_object_name


class NameResolver:
    """
    One-shot memoizing resolver for a single template.

    The resolved name is written without a lock. Two threads that both
    find it unset will both query and both store the same name, since
    resolving a template against the same endpoint is idempotent; the
    cost is one redundant query, never an inconsistent value.

    Once set, the resolved name is never invalidated: a restarted or
    unregistered object is not detected.
    """

    def __init__(self, template):
        self.template: ObjectName = as_object_name(template)
        self._resolved: Optional[ObjectName] = None
        self.queries = 0

    @property
    def resolved(self) -> Optional[ObjectName]:
        return self._resolved

    def resolve(self, connection) -> ObjectName:
        """
        Resolve the template on a connection.

        If several objects match, the first one the connection returns
        is used.

        Raises:
            ResolutionNotFound: If nothing matches
            OSError: If the connection fails
        """
        resolved = self._resolved
        if resolved is not None:
            return resolved

        self.queries += 1
        names = connection.query_names(self.template)
        if not names:
            raise ResolutionNotFound(self.template)

        resolved = next(iter(names))
        self._resolved = resolved
        return resolved
