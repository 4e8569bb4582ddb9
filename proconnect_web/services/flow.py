"""Primitives shared by the login and contact-reveal state machines."""

from contextlib import asynccontextmanager
from typing import AsyncIterator, Set


class InvalidTransition(Exception):
    """Raised when an operation is invoked from a step that does not allow it."""

    def __init__(self, operation: str, step: str):
        super().__init__(f"'{operation}' is not allowed in step '{step}'")
        self.operation = operation
        self.step = step


class OperationInFlight(Exception):
    """Raised when an operation is re-entered before its previous call finished."""

    def __init__(self, operation: str):
        super().__init__(f"'{operation}' is already in progress")
        self.operation = operation


class InFlightGuard:
    """One boolean flag per operation name.

    Operations that hit the same backend endpoint (submit and resend) share a
    name so they also block each other. The guard lives on a flow object, and
    the web routes build a new flow per request, so it only rejects re-entry
    within one request. Duplicate form submissions are stopped in the browser
    by ``hx-sync="this:drop"`` and ``hx-disabled-elt``.
    """

    def __init__(self) -> None:
        self._pending: Set[str] = set()

    @property
    def busy(self) -> bool:
        return bool(self._pending)

    @asynccontextmanager
    async def hold(self, operation: str) -> AsyncIterator[None]:
        if operation in self._pending:
            raise OperationInFlight(operation)
        self._pending.add(operation)
        try:
            yield
        finally:
            self._pending.discard(operation)
