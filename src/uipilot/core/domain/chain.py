"""
Interception Chain Composition

Folds an ordered interceptor list around a terminal operation into one
callable. The last registered interceptor is the outermost one: for
interceptors [A, B] around terminal T the entry order is B, A, T and the
exit order is T, A, B.
"""

from collections.abc import Awaitable, Callable, Sequence
from typing import TypeVar

from uipilot.core.interfaces.interceptors import Chain, Interceptor

InputT = TypeVar("InputT")
OutputT = TypeVar("OutputT")
InterceptorT = TypeVar("InterceptorT", bound=Interceptor)

Operation = Callable[[InputT], Awaitable[OutputT]]


def build_chain(
    interceptors: Sequence[Interceptor],
    terminal: Operation,
) -> Operation:
    """
    Compose ``interceptors`` around ``terminal``.

    Args:
        interceptors: Interceptors in registration order
        terminal: Innermost operation

    Returns:
        Coroutine function running the whole chain for one input.
    """
    operation = terminal
    for interceptor in interceptors:
        operation = _wrap(interceptor, operation)
    return operation


def _wrap(interceptor: Interceptor, inner: Operation) -> Operation:
    chain = Chain(inner)

    async def run(value):
        return await interceptor.intercept(value, chain)

    return run


def interceptors_of_type(
    interceptors: Sequence[Interceptor], kind: type[InterceptorT]
) -> list[InterceptorT]:
    """Select interceptors of one kind, keeping registration order."""
    return [interceptor for interceptor in interceptors if isinstance(interceptor, kind)]
