"""
Declarative binding between one value and a location in a storage area.

A ``Binding`` names a location (``name``) inside a storage area and holds
the ``value`` found there. With ``auto_sync`` enabled, assigning ``name``
reads the value and assigning ``value`` writes it back. Every operation
reports through notifications:

    read         value is ready (payload: the value)
    error        an operation failed (payload: the error)
    bytes-used   usage is known (payload: {"bytes": n})
    saved        value was written
    removed      name was removed
    clear        area was cleared
    value-changed  value was assigned (payload: the new value)

Example:
    >>> namespaces = create_namespaces()
    >>> binding = Binding(namespaces, name="settings.theme", default_value="light")
    >>> binding.on("read", lambda value: print("theme:", value))
    >>> await binding.read()
    theme: light
    >>> binding.value = "dark"
    >>> await binding.store()
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Coroutine, Iterator
from contextlib import contextmanager
from enum import Enum
from typing import Any

from .areas.base import AreaName, Query
from .areas.namespaces import StorageNamespaces
from .exceptions import StorageAreaError
from .gateway import Name, StorageGateway
from .logging_utils import BindingLoggerAdapter
from .outcome import OperationOutcome
from .paths import set_in, to_segments
from .wrapping import ValueWrapper

logger = logging.getLogger(__name__)

Listener = Callable[[Any], None]

EVENTS = ("read", "error", "bytes-used", "saved", "removed", "clear", "value-changed")


class SyncState(Enum):
    """What a binding is waiting on. Descriptive only; nothing is queued."""

    IDLE = "idle"
    READ_PENDING = "read_pending"
    WRITE_PENDING = "write_pending"


class SyncController:
    """Decides when name and value changes trigger reads and writes.

    - A truthy ``name`` assigned while ``auto_sync`` is on triggers a read.
    - A ``value`` assignment while ``auto_sync`` is on triggers a write,
      except inside ``suppress_writes()``, which a read holds while it
      assigns the value it loaded.
    """

    def __init__(self, auto_sync: bool = False) -> None:
        self.auto_sync = auto_sync
        self._suppressed = 0
        self._pending: dict[SyncState, int] = {
            SyncState.READ_PENDING: 0,
            SyncState.WRITE_PENDING: 0,
        }

    @property
    def state(self) -> SyncState:
        if self._pending[SyncState.READ_PENDING]:
            return SyncState.READ_PENDING
        if self._pending[SyncState.WRITE_PENDING]:
            return SyncState.WRITE_PENDING
        return SyncState.IDLE

    @property
    def writes_suppressed(self) -> bool:
        return self._suppressed > 0

    def should_read(self, name: Any) -> bool:
        """Whether assigning ``name`` should trigger a read."""
        return self.auto_sync and bool(name)

    def should_write(self) -> bool:
        """Whether a value assignment should trigger a write."""
        return self.auto_sync and not self.writes_suppressed

    @contextmanager
    def suppress_writes(self) -> Iterator[None]:
        self._suppressed += 1
        try:
            yield
        finally:
            self._suppressed -= 1

    @contextmanager
    def pending(self, state: SyncState) -> Iterator[None]:
        """Count an in-flight operation for ``state``."""
        self._pending[state] += 1
        try:
            yield
        finally:
            self._pending[state] -= 1


class Binding:
    """One value bound to a name inside a storage area."""

    def __init__(
        self,
        storage: StorageNamespaces | StorageGateway,
        name: Name = "",
        storage_area: str = "local",
        value: Any = None,
        auto_sync: bool = False,
        default_value: Any = None,
        wrap_as: str | None = None,
        wrapper: ValueWrapper | None = None,
    ) -> None:
        """Initialize the binding.

        With ``auto_sync`` and a non-empty ``name`` the initial read is
        scheduled right away, so such bindings must be created inside a
        running event loop.

        Args:
            storage: Storage namespaces, or a gateway over them
            name: Path string, list of keys, or mapping of keys to defaults
            storage_area: ``sync``, ``local`` or ``managed``
            value: Initial value (not written)
            auto_sync: Read on name change, write on value change
            default_value: Default for path-string reads
            wrap_as: Wrap strategy applied to read values
            wrapper: Wrap strategy registry (default strategies if omitted)

        Raises:
            StorageAreaError: If ``storage_area`` is unknown
            WrapConfigurationError: If ``wrap_as`` is not registered
        """
        if isinstance(storage, StorageGateway):
            self.gateway = storage
        else:
            self.gateway = StorageGateway(storage)
        self.wrapper = wrapper or ValueWrapper()
        self.controller = SyncController(auto_sync)
        self.default_value = default_value

        self._listeners: dict[str, list[Listener]] = {event: [] for event in EVENTS}
        self._tasks: set[asyncio.Task[Any]] = set()
        self._value = value
        self._name: Name = ""
        self._log = BindingLoggerAdapter(
            logger, {"storage_area": storage_area, "binding_name": ""}
        )

        self.storage_area = storage_area
        self.wrap_as = wrap_as
        self.name = name

    def __repr__(self) -> str:
        return (
            f"Binding(storage_area={self._storage_area!r}, name={self._name!r}, "
            f"auto_sync={self.auto_sync!r})"
        )

    # ------------------------------------------------------------------
    # Configuration
    # ------------------------------------------------------------------

    @property
    def storage_area(self) -> str:
        return self._storage_area

    @storage_area.setter
    def storage_area(self, area: str) -> None:
        try:
            self._storage_area = AreaName(area).value
        except ValueError:
            raise StorageAreaError(str(area)) from None
        self._log.extra["storage_area"] = self._storage_area

    @property
    def wrap_as(self) -> str | None:
        return self._wrap_as

    @wrap_as.setter
    def wrap_as(self, type_name: str | None) -> None:
        self.wrapper.validate(type_name)
        self._wrap_as = type_name

    @property
    def auto_sync(self) -> bool:
        return self.controller.auto_sync

    @auto_sync.setter
    def auto_sync(self, enabled: bool) -> None:
        self.controller.auto_sync = bool(enabled)

    @property
    def state(self) -> SyncState:
        return self.controller.state

    @property
    def name(self) -> Name:
        return self._name

    @name.setter
    def name(self, name: Name) -> None:
        self._name = name
        self._log.extra["binding_name"] = str(name)
        if self.controller.should_read(name):
            self._log.debug("Name changed, reading")
            self._schedule(self.read())

    @property
    def value(self) -> Any:
        return self._value

    @value.setter
    def value(self, value: Any) -> None:
        old = self._value
        if not isinstance(value, (dict, list)) and type(old) is type(value) and old == value:
            return
        self._assign_value(value)

    def set_path(self, path: str, value: Any) -> None:
        """Assign ``value`` at ``path`` inside the bound value.

        Nested mutation counts as a value change. A bound value that is not
        a mapping is replaced by one.
        """
        root = self._value if isinstance(self._value, dict) else {}
        set_in(root, to_segments(path), value)
        self._assign_value(root)

    def notify_value_changed(self) -> None:
        """Report an in-place mutation of the bound value."""
        self._assign_value(self._value)

    def _assign_value(self, value: Any) -> None:
        self._value = value
        self._emit("value-changed", value)
        if self.controller.should_write():
            self._log.debug("Value changed, storing")
            self._schedule(self.store())

    # ------------------------------------------------------------------
    # Notifications
    # ------------------------------------------------------------------

    def on(self, event: str, listener: Listener) -> Listener:
        """Register ``listener`` for ``event``; it receives the event payload."""
        self._check_event(event)
        self._listeners[event].append(listener)
        return listener

    def off(self, event: str, listener: Listener) -> None:
        """Unregister ``listener`` from ``event`` if registered."""
        self._check_event(event)
        if listener in self._listeners[event]:
            self._listeners[event].remove(listener)

    def _check_event(self, event: str) -> None:
        if event not in self._listeners:
            raise ValueError(f"Unknown event {event!r}; expected one of {', '.join(EVENTS)}")

    def _emit(self, event: str, payload: Any = None) -> None:
        for listener in list(self._listeners[event]):
            listener(payload)

    def _finish(
        self, outcome: OperationOutcome, event: str, payload: Any = None
    ) -> OperationOutcome:
        if outcome.ok:
            self._emit(event, payload)
        else:
            self._log.warning(f"Operation failed: {outcome.message}")
            self._emit("error", outcome.error)
        return outcome

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    async def read(self) -> OperationOutcome:
        """Read the bound value from storage.

        On success the (wrapped) value is assigned without triggering an
        auto-sync write, then ``read`` fires. On failure ``error`` fires and
        the value is left unchanged.
        """
        with self.controller.pending(SyncState.READ_PENDING):
            outcome = await self.gateway.read(self._storage_area, self._name, self.default_value)

        if not outcome.ok:
            return self._finish(outcome, "read")

        value = self.wrapper.wrap(outcome.value, self._wrap_as)
        with self.controller.suppress_writes():
            self._assign_value(value)
        return self._finish(OperationOutcome.success(value), "read", value)

    async def store(self) -> OperationOutcome:
        """Write the bound value to storage; fires ``saved`` or ``error``."""
        with self.controller.pending(SyncState.WRITE_PENDING):
            outcome = await self.gateway.write(self._storage_area, self._name, self._value)
        return self._finish(outcome, "saved")

    async def remove(self) -> OperationOutcome:
        """Remove the named key(s); fires ``removed`` or ``error``."""
        with self.controller.pending(SyncState.WRITE_PENDING):
            outcome = await self.gateway.remove(self._storage_area, self._name)
        return self._finish(outcome, "removed")

    async def clear(self) -> OperationOutcome:
        """Clear the whole storage area; fires ``clear`` or ``error``."""
        with self.controller.pending(SyncState.WRITE_PENDING):
            outcome = await self.gateway.clear(self._storage_area)
        return self._finish(outcome, "clear")

    async def get_bytes_in_use(self) -> OperationOutcome:
        """Measure the storage used by the name; fires ``bytes-used`` or ``error``.

        An empty name measures the whole area, a path string measures its
        top-level key.
        """
        outcome = await self.gateway.usage(self._storage_area, self._usage_query())
        return self._finish(outcome, "bytes-used", {"bytes": outcome.value})

    def _usage_query(self) -> Query:
        name = self._name
        if not name:
            return None
        if isinstance(name, str):
            segments = to_segments(name)
            return segments[0] if segments else None
        return name

    # ------------------------------------------------------------------
    # Scheduling
    # ------------------------------------------------------------------

    def _schedule(self, coro: Coroutine[Any, Any, OperationOutcome]) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            coro.close()
            raise RuntimeError(
                "auto_sync bindings must be used inside a running event loop"
            ) from None
        task = loop.create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def wait_pending(self) -> None:
        """Wait until every auto-sync operation scheduled so far has finished."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks))
