"""
Payment status state machine and the payment resource itself.

Transition model (directed, no cycles, stages may be skipped):

    authorization_required → authorizing → authorized → executed → settled

with ``failed`` reachable from any of the first three stages. A payment is
terminal once it is executed, settled or failed. ``authorized`` is not
terminal: settlement is asynchronous and can still fail.
"""

from datetime import datetime
from typing import TYPE_CHECKING, Annotated, Any, Literal, Optional, Union

from pydantic import Discriminator, Field, Tag

from payflow.engine.errors import ResourceNotVisibleError
from payflow.models.accounts import PaymentSource, SettlementRisk, User
from payflow.models.authorization_flow import AuthorizationFlow
from payflow.models.base import FlattenedStatusModel, WireModel
from payflow.models.enums import Currency, FailureStage, PaymentStatusKind
from payflow.models.providers import PaymentMethod

if TYPE_CHECKING:
    from payflow.transport.base import PaymentsTransport


TERMINAL_STATUSES = frozenset({
    PaymentStatusKind.EXECUTED,
    PaymentStatusKind.SETTLED,
    PaymentStatusKind.FAILED,
})

_FORWARD_ORDER = [
    PaymentStatusKind.AUTHORIZATION_REQUIRED,
    PaymentStatusKind.AUTHORIZING,
    PaymentStatusKind.AUTHORIZED,
    PaymentStatusKind.EXECUTED,
    PaymentStatusKind.SETTLED,
]

_FAILABLE = frozenset(PaymentStatusKind(stage.value) for stage in FailureStage)


def is_valid_transition(previous: PaymentStatusKind, current: PaymentStatusKind) -> bool:
    """
    Whether a payment may move from ``previous`` to ``current``.

    Staying put is always valid, and intermediate stages may be skipped.
    """
    previous = PaymentStatusKind(previous)
    current = PaymentStatusKind(current)

    if previous == current:
        return True
    if current == PaymentStatusKind.FAILED:
        return previous in _FAILABLE
    if previous == PaymentStatusKind.FAILED:
        return False
    return _FORWARD_ORDER.index(current) > _FORWARD_ORDER.index(previous)


class _StatusVariant(WireModel):
    @property
    def kind(self) -> PaymentStatusKind:
        return PaymentStatusKind(self.status)

    @property
    def is_terminal(self) -> bool:
        return self.kind in TERMINAL_STATUSES


class AuthorizationRequired(_StatusVariant):
    status: Literal["authorization_required"] = "authorization_required"


class Authorizing(_StatusVariant):
    status: Literal["authorizing"] = "authorizing"
    authorization_flow: AuthorizationFlow


class Authorized(_StatusVariant):
    status: Literal["authorized"] = "authorized"
    authorization_flow: Optional[AuthorizationFlow] = None


class Executed(_StatusVariant):
    status: Literal["executed"] = "executed"
    executed_at: datetime
    authorization_flow: Optional[AuthorizationFlow] = None
    settlement_risk: Optional[SettlementRisk] = None


class Settled(_StatusVariant):
    status: Literal["settled"] = "settled"
    payment_source: PaymentSource
    executed_at: datetime
    settled_at: datetime
    authorization_flow: Optional[AuthorizationFlow] = None
    settlement_risk: Optional[SettlementRisk] = None


class Failed(_StatusVariant):
    status: Literal["failed"] = "failed"
    failed_at: datetime
    failure_stage: FailureStage
    failure_reason: str
    authorization_flow: Optional[AuthorizationFlow] = None


PaymentStatus = Annotated[
    Union[AuthorizationRequired, Authorizing, Authorized, Executed, Settled, Failed],
    Field(discriminator="status"),
]


class ExistingUser(WireModel):
    id: str


class NewUser(WireModel):
    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None


def _user_request_tag(value: Any) -> str:
    # Untagged on the wire: an ``id`` means the user already exists.
    if isinstance(value, dict):
        return "existing_user" if "id" in value else "new_user"
    return "existing_user" if isinstance(value, ExistingUser) else "new_user"


CreatePaymentUserRequest = Annotated[
    Union[
        Annotated[ExistingUser, Tag("existing_user")],
        Annotated[NewUser, Tag("new_user")],
    ],
    Discriminator(_user_request_tag),
]


class CreatePaymentRequest(WireModel):
    amount_in_minor: int = Field(ge=0)
    currency: Currency
    payment_method: PaymentMethod
    user: CreatePaymentUserRequest
    metadata: Optional[dict[str, str]] = None


class CreatePaymentUserResponse(WireModel):
    id: str


async def _fetch_visible_payment(transport: "PaymentsTransport", payment_id: str) -> "Payment":
    payment = await transport.get_payment_by_id(payment_id)
    if payment is None:
        raise ResourceNotVisibleError(payment_id)
    return payment


class CreatePaymentResponse(WireModel):
    """Acknowledgment of a created payment; polls into the full ``Payment``."""

    id: str
    resource_token: str
    user: CreatePaymentUserResponse

    async def poll_once(self, transport: "PaymentsTransport") -> "Payment":
        return await _fetch_visible_payment(transport, self.id)


class Payment(FlattenedStatusModel):
    id: str
    amount_in_minor: int = Field(ge=0)
    currency: Currency
    user: User
    payment_method: PaymentMethod
    created_at: datetime
    metadata: Optional[dict[str, str]] = None
    status: PaymentStatus

    @property
    def authorization_flow(self) -> Optional[AuthorizationFlow]:
        return getattr(self.status, "authorization_flow", None)

    def is_in_terminal_state(self) -> bool:
        """A payment is terminal once it is executed, settled or failed."""
        return self.status.kind in TERMINAL_STATUSES

    async def poll_once(self, transport: "PaymentsTransport") -> "Payment":
        return await _fetch_visible_payment(transport, self.id)
