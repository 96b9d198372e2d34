"""
The "pollable" capability.

A resource is pollable if it can fetch its own next snapshot through a
transport, and that snapshot can say whether it is terminal. Both
``CreatePaymentResponse`` and ``Payment`` satisfy this structurally; there is
no base class to inherit from.
"""

from typing import TYPE_CHECKING, Protocol, TypeVar, runtime_checkable

if TYPE_CHECKING:
    from payflow.transport.base import PaymentsTransport

T_co = TypeVar("T_co", covariant=True)


@runtime_checkable
class IsInTerminalState(Protocol):
    def is_in_terminal_state(self) -> bool:
        ...


@runtime_checkable
class Pollable(Protocol[T_co]):
    async def poll_once(self, transport: "PaymentsTransport") -> T_co:
        """Fetch the next snapshot. May raise ``ResourceNotVisibleError``."""
        ...
