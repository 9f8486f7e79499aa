"""
Observable State Values

A small observer primitive used to publish agent and scenario state to
outside collaborators (CLI, reports, tests).

A StateValue holds a single value. Writers assign ``value``; listeners
registered with ``add_listener`` are called synchronously with the new
value whenever it changes, and coroutines may ``await wait_for(predicate)``
until the value satisfies a condition.

All access is expected to happen on the event loop that owns the agent or
scenario executor, so no locking is performed.
"""

import asyncio
from collections.abc import Callable
from typing import Generic, TypeVar

T = TypeVar("T")

Listener = Callable[[T], None]


class StateValue(Generic[T]):
    """Holds a value and notifies observers when it changes."""

    def __init__(self, initial: T):
        self._value = initial
        self._listeners: list[Listener] = []
        self._waiters: list[asyncio.Future] = []

    @property
    def value(self) -> T:
        return self._value

    @value.setter
    def value(self, new_value: T) -> None:
        if new_value == self._value:
            return
        self._value = new_value
        for listener in list(self._listeners):
            listener(new_value)
        waiters, self._waiters = self._waiters, []
        for waiter in waiters:
            if not waiter.done():
                waiter.set_result(None)

    def add_listener(self, listener: Listener) -> Callable[[], None]:
        """
        Register a change listener.

        Returns:
            A callable that removes the listener again.
        """
        self._listeners.append(listener)

        def remove() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return remove

    async def wait_for(self, predicate: Callable[[T], bool]) -> T:
        """Suspend until ``predicate(value)`` holds and return the value."""
        while not predicate(self._value):
            waiter = asyncio.get_running_loop().create_future()
            self._waiters.append(waiter)
            try:
                await waiter
            finally:
                if waiter in self._waiters:
                    self._waiters.remove(waiter)
        return self._value

    async def wait_for_change(self) -> T:
        """Suspend until the next change and return the new value."""
        waiter = asyncio.get_running_loop().create_future()
        self._waiters.append(waiter)
        try:
            await waiter
        finally:
            if waiter in self._waiters:
                self._waiters.remove(waiter)
        return self._value

    def __repr__(self) -> str:
        return f"StateValue({self._value!r})"
