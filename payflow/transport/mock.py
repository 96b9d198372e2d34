"""
In-memory sandbox payments backend.

Simulates the behavior a real payments API shows to a polling client:
  - Configurable latency (default none)
  - A fresh payment 404s for the first fetch(es) after creation
  - Provider selection, form, redirect and wait steps, depending on what the
    caller declared it supports when starting the flow
  - Unknown provider ids and invalid form answers fail the payment
  - Once authorization completes, each fetch advances the payment one step
    (authorizing → authorized → executed)

``settle_payment`` and ``fail_payment`` drive the remaining transitions.
Every status change is checked against the payment transition table.
"""

import asyncio
import logging
import random
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional
from urllib.parse import parse_qs

from payflow.config import settings
from payflow.engine.errors import TransportError
from payflow.engine.form_validation import validate_form_inputs
from payflow.models.accounts import PaymentSource, SettlementRisk, SortCodeAccountNumber, User
from payflow.models.actions import (
    FlowStepAuthorizing,
    FlowStepFailed,
    PaymentReturnResource,
    StartAuthorizationFlowRequest,
    StartAuthorizationFlowResponse,
    SubmitFormActionRequest,
    SubmitFormActionResponse,
    SubmitProviderReturnParametersRequest,
    SubmitProviderReturnParametersResponse,
    SubmitProviderSelectionActionRequest,
    SubmitProviderSelectionActionResponse,
)
from payflow.models.authorization_flow import (
    AdditionalInputDisplayText,
    AdditionalInputRegex,
    AuthorizationFlow,
    AuthorizationFlowActions,
    AuthorizationFlowConfiguration,
    FormAction,
    ProviderSelectionAction,
    RedirectAction,
    RedirectProviderMetadata,
    TextInput,
    WaitAction,
)
from payflow.models.enums import AdditionalInputFormat, CountryCode, FailureStage, PaymentStatusKind
from payflow.models.payment import (
    Authorized,
    Authorizing,
    AuthorizationRequired,
    CreatePaymentRequest,
    CreatePaymentResponse,
    CreatePaymentUserResponse,
    ExistingUser,
    Executed,
    Failed,
    Payment,
    Settled,
    is_valid_transition,
)
from payflow.models.providers import PreselectedProvider, Provider, ProviderFilter
from payflow.transport.base import PaymentsTransport

logger = logging.getLogger("payflow.transport.mock")

MOCK_BANK_URI = "https://mock-bank.payflow.test/authorize"

DEFAULT_PROVIDERS = [
    Provider(id="ob-mock", display_name="Mock Bank", country_code=CountryCode.GB),
    Provider(id="ob-mock-form", display_name="Mock Bank (branch details)", country_code=CountryCode.GB),
    Provider(id="ob-mock-eu", display_name="Mock Bank Europe", country_code=CountryCode.DE),
]

# Providers that ask for additional inputs before redirecting.
PROVIDER_FORMS = {
    "ob-mock-form": [
        TextInput(
            id="psu-branch-name",
            mandatory=True,
            display_text=AdditionalInputDisplayText(key="psu-branch-name.display_text", default="Branch name"),
            format=AdditionalInputFormat.ALPHABETICAL,
            sensitive=False,
            min_length=1,
            max_length=35,
            regexes=[
                AdditionalInputRegex(
                    regex="^[A-Za-z ]+$",
                    message=AdditionalInputDisplayText(
                        key="psu-branch-name.regex", default="Letters and spaces only"
                    ),
                )
            ],
        )
    ],
}


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _new_id() -> str:
    return uuid.uuid4().hex[:12]


@dataclass
class _PaymentRecord:
    payment: Payment
    hidden_fetches: int
    configuration: Optional[AuthorizationFlowConfiguration] = None
    offered_provider_ids: tuple[str, ...] = ()
    provider: Optional[Provider] = None
    auto_advance: bool = False

    @property
    def kind(self) -> PaymentStatusKind:
        return self.payment.status.kind


class MockPaymentsBackend(PaymentsTransport):
    """Sandbox implementation of ``PaymentsTransport`` keeping payments in memory."""

    def __init__(
        self,
        providers: Optional[list[Provider]] = None,
        not_visible_fetches: Optional[int] = None,
        latency_ms: Optional[int] = None,
    ):
        self._providers = {p.id: p for p in (providers if providers is not None else DEFAULT_PROVIDERS)}
        self._not_visible_fetches = (
            not_visible_fetches if not_visible_fetches is not None else settings.mock_not_visible_polls
        )
        self._latency_ms = latency_ms if latency_ms is not None else settings.mock_latency_ms
        self._payments: dict[str, _PaymentRecord] = {}
        self.fetch_count = 0

    async def _simulate_latency(self) -> None:
        if self._latency_ms > 0:
            jitter = random.uniform(0.5, 1.5)
            await asyncio.sleep(self._latency_ms * jitter / 1000)

    def _record(self, payment_id: str) -> _PaymentRecord:
        record = self._payments.get(payment_id)
        if record is None:
            raise TransportError(f"Payment not found: {payment_id}", status_code=404)
        return record

    def _set_status(self, record: _PaymentRecord, status) -> None:
        if not is_valid_transition(record.kind, status.kind):
            raise TransportError(
                f"Payment {record.payment.id} cannot move from {record.kind.value} to {status.kind.value}",
                status_code=409,
            )
        if status.kind != record.kind:
            logger.info(
                "Payment %s: %s -> %s", record.payment.id, record.kind.value, status.kind.value
            )
        record.payment = record.payment.model_copy(update={"status": status})

    def _flow(self, record: _PaymentRecord, next_action=None) -> AuthorizationFlow:
        return AuthorizationFlow(
            actions=AuthorizationFlowActions(next=next_action) if next_action is not None else None,
            configuration=record.configuration,
        )

    def _fail(self, record: _PaymentRecord, reason: str) -> FlowStepFailed:
        stage = FailureStage(record.kind.value)
        self._set_status(
            record,
            Failed(
                failed_at=_utcnow(),
                failure_stage=stage,
                failure_reason=reason,
                authorization_flow=record.payment.authorization_flow,
            ),
        )
        return FlowStepFailed(failure_stage=stage, failure_reason=reason)

    def _require_next_action(self, record: _PaymentRecord, action_type: type) -> None:
        flow = record.payment.authorization_flow
        if record.kind != PaymentStatusKind.AUTHORIZING or not isinstance(flow.next_action, action_type):
            raise TransportError(
                f"Payment {record.payment.id} is not awaiting a {action_type.__name__}",
                status_code=409,
            )

    def _offered_providers(self, provider_filter: Optional[ProviderFilter]) -> list[Provider]:
        providers = list(self._providers.values())
        if provider_filter is None:
            return providers
        if provider_filter.countries:
            providers = [p for p in providers if p.country_code in provider_filter.countries]
        if provider_filter.provider_ids:
            providers = [p for p in providers if p.id in provider_filter.provider_ids]
        if provider_filter.excludes and provider_filter.excludes.provider_ids:
            providers = [p for p in providers if p.id not in provider_filter.excludes.provider_ids]
        return providers

    def _next_after_provider(self, record: _PaymentRecord):
        """Pick the step that follows a chosen provider, given what the caller supports."""
        config = record.configuration or AuthorizationFlowConfiguration()
        inputs = PROVIDER_FORMS.get(record.provider.id)
        if inputs and config.form is not None:
            return FormAction(inputs=inputs)
        return self._next_after_form(record)

    def _next_after_form(self, record: _PaymentRecord):
        config = record.configuration or AuthorizationFlowConfiguration()
        if config.redirect is not None:
            return RedirectAction(
                uri=f"{MOCK_BANK_URI}?payment_id={record.payment.id}",
                metadata=RedirectProviderMetadata(**record.provider.model_dump()),
            )
        record.auto_advance = True
        return WaitAction()

    def _advance(self, record: _PaymentRecord) -> None:
        flow = record.payment.authorization_flow
        if record.kind == PaymentStatusKind.AUTHORIZING:
            self._set_status(record, Authorized(authorization_flow=self._flow(record)))
        elif record.kind == PaymentStatusKind.AUTHORIZED:
            self._set_status(
                record,
                Executed(
                    executed_at=_utcnow(),
                    authorization_flow=flow,
                    settlement_risk=SettlementRisk(category="low_risk"),
                ),
            )
            record.auto_advance = False

    # --- PaymentsTransport -------------------------------------------------

    async def create_payment(self, request: CreatePaymentRequest) -> CreatePaymentResponse:
        await self._simulate_latency()

        if isinstance(request.user, ExistingUser):
            user = User(id=request.user.id)
        else:
            user = User(
                id=f"usr_{_new_id()}",
                name=request.user.name,
                email=request.user.email,
                phone=request.user.phone,
            )

        payment = Payment(
            id=str(uuid.uuid4()),
            amount_in_minor=request.amount_in_minor,
            currency=request.currency,
            user=user,
            payment_method=request.payment_method,
            created_at=_utcnow(),
            metadata=request.metadata,
            status=AuthorizationRequired(),
        )
        self._payments[payment.id] = _PaymentRecord(payment=payment, hidden_fetches=self._not_visible_fetches)
        logger.info(
            "Payment %s created (%s %d)", payment.id, payment.currency.value, payment.amount_in_minor
        )

        return CreatePaymentResponse(
            id=payment.id,
            resource_token=uuid.uuid4().hex,
            user=CreatePaymentUserResponse(id=user.id),
        )

    async def get_payment_by_id(self, payment_id: str) -> Optional[Payment]:
        await self._simulate_latency()
        self.fetch_count += 1

        record = self._payments.get(payment_id)
        if record is None:
            return None
        if record.hidden_fetches > 0:
            record.hidden_fetches -= 1
            return None
        if record.auto_advance:
            self._advance(record)
        return record.payment

    async def start_authorization_flow(
        self, payment_id: str, request: StartAuthorizationFlowRequest
    ) -> StartAuthorizationFlowResponse:
        await self._simulate_latency()
        record = self._record(payment_id)
        if record.kind != PaymentStatusKind.AUTHORIZATION_REQUIRED:
            raise TransportError(
                f"Authorization flow already started for payment {payment_id}", status_code=409
            )

        record.configuration = AuthorizationFlowConfiguration(
            provider_selection=request.provider_selection,
            redirect=request.redirect,
            form=request.form,
        )
        selection = record.payment.payment_method.provider_selection

        if isinstance(selection, PreselectedProvider):
            provider = self._providers.get(selection.provider_id)
            if provider is None:
                status = self._fail(record, "invalid_provider")
                return StartAuthorizationFlowResponse(status=status)
            record.provider = provider
            next_action = self._next_after_provider(record)
        else:
            if request.provider_selection is None:
                status = self._fail(record, "provider_selection_not_supported")
                return StartAuthorizationFlowResponse(status=status)
            providers = self._offered_providers(selection.filter)
            record.offered_provider_ids = tuple(p.id for p in providers)
            next_action = ProviderSelectionAction(providers=providers)

        flow = self._flow(record, next_action)
        self._set_status(record, Authorizing(authorization_flow=flow))
        return StartAuthorizationFlowResponse(authorization_flow=flow, status=FlowStepAuthorizing())

    async def submit_provider_selection(
        self, payment_id: str, request: SubmitProviderSelectionActionRequest
    ) -> SubmitProviderSelectionActionResponse:
        await self._simulate_latency()
        record = self._record(payment_id)
        self._require_next_action(record, ProviderSelectionAction)

        if request.provider_id not in record.offered_provider_ids:
            status = self._fail(record, "invalid_provider")
            return SubmitProviderSelectionActionResponse(status=status)

        record.provider = self._providers[request.provider_id]
        flow = self._flow(record, self._next_after_provider(record))
        self._set_status(record, Authorizing(authorization_flow=flow))
        return SubmitProviderSelectionActionResponse(authorization_flow=flow, status=FlowStepAuthorizing())

    async def submit_form(
        self, payment_id: str, request: SubmitFormActionRequest
    ) -> SubmitFormActionResponse:
        await self._simulate_latency()
        record = self._record(payment_id)
        self._require_next_action(record, FormAction)

        form = record.payment.authorization_flow.next_action
        result = validate_form_inputs(form.inputs, request.inputs)
        if not result.valid:
            status = self._fail(record, "invalid_form_inputs")
            return SubmitFormActionResponse(status=status)

        flow = self._flow(record, self._next_after_form(record))
        self._set_status(record, Authorizing(authorization_flow=flow))
        return SubmitFormActionResponse(authorization_flow=flow, status=FlowStepAuthorizing())

    async def submit_provider_return_parameters(
        self, request: SubmitProviderReturnParametersRequest
    ) -> SubmitProviderReturnParametersResponse:
        await self._simulate_latency()
        params = {**parse_qs(request.fragment.lstrip("#")), **parse_qs(request.query.lstrip("?"))}
        payment_ids = params.get("payment_id")
        if not payment_ids:
            raise TransportError("Return parameters carry no payment_id", status_code=400)

        record = self._record(payment_ids[0])
        self._require_next_action(record, RedirectAction)

        if "error" in params:
            self._fail(record, params["error"][0])
        else:
            record.auto_advance = True
            self._set_status(record, Authorizing(authorization_flow=self._flow(record, WaitAction())))

        return SubmitProviderReturnParametersResponse(
            resource=PaymentReturnResource(payment_id=record.payment.id)
        )

    # --- Sandbox controls --------------------------------------------------

    def settle_payment(self, payment_id: str, payment_source: Optional[PaymentSource] = None) -> Payment:
        """Move an executed payment to ``settled``."""
        record = self._record(payment_id)
        status = record.payment.status
        if record.kind != PaymentStatusKind.EXECUTED:
            raise TransportError(f"Payment {payment_id} is not executed", status_code=409)

        source = payment_source or PaymentSource(
            id=f"src_{_new_id()}",
            user_id=record.payment.user.id,
            account_identifiers=[SortCodeAccountNumber(sort_code="040668", account_number="00000871")],
            account_holder_name=record.payment.user.name,
        )
        self._set_status(
            record,
            Settled(
                payment_source=source,
                executed_at=status.executed_at,
                settled_at=_utcnow(),
                authorization_flow=status.authorization_flow,
                settlement_risk=status.settlement_risk,
            ),
        )
        return record.payment

    def fail_payment(self, payment_id: str, reason: str = "provider_rejected") -> Payment:
        """Fail a payment that has not executed yet."""
        record = self._record(payment_id)
        if record.kind.value not in {stage.value for stage in FailureStage}:
            raise TransportError(f"Payment {payment_id} can no longer fail", status_code=409)
        record.auto_advance = False
        self._fail(record, reason)
        return record.payment
