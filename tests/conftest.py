"""Shared test fixtures."""

from datetime import datetime, timezone

import httpx
import pytest
import pytest_asyncio

from payflow import PaymentsClient
from payflow.main import create_app
from payflow.models import (
    AdditionalInputType,
    AuthorizationFlow,
    AuthorizationFlowActions,
    AuthorizationFlowConfiguration,
    AuthorizationRequired,
    Authorized,
    Authorizing,
    BankTransfer,
    CountryCode,
    Currency,
    Executed,
    Failed,
    FailureStage,
    FormSupported,
    Iban,
    MerchantAccountBeneficiary,
    Payment,
    PaymentSource,
    ProviderSelectionSupported,
    RedirectAction,
    RedirectProviderMetadata,
    RedirectSupported,
    SettlementRisk,
    Settled,
    SortCodeAccountNumber,
    User,
    UserSelectedProvider,
    WaitAction,
)
from payflow.transport.http import HttpPaymentsTransport
from payflow.transport.mock import MockPaymentsBackend

CREATED_AT = datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)
EXECUTED_AT = datetime(2024, 1, 1, 12, 5, tzinfo=timezone.utc)
SETTLED_AT = datetime(2024, 1, 1, 13, 0, tzinfo=timezone.utc)

WAIT_FLOW = AuthorizationFlow(actions=AuthorizationFlowActions(next=WaitAction()))

ALL_STATUSES = {
    "authorization_required": AuthorizationRequired(),
    "authorizing": Authorizing(authorization_flow=WAIT_FLOW),
    "authorized": Authorized(),
    "executed": Executed(executed_at=EXECUTED_AT),
    "settled": Settled(
        payment_source=PaymentSource(id="src_1"),
        executed_at=EXECUTED_AT,
        settled_at=SETTLED_AT,
    ),
    "failed": Failed(
        failed_at=EXECUTED_AT,
        failure_stage=FailureStage.AUTHORIZING,
        failure_reason="authorization_failed",
    ),
}

# Every optional field populated, including a flow carrying its configuration.
FULL_FLOW = AuthorizationFlow(
    actions=AuthorizationFlowActions(
        next=RedirectAction(
            uri="https://bank.test/auth?payment_id=pay_1",
            metadata=RedirectProviderMetadata(id="ob-mock", display_name="Mock Bank", country_code=CountryCode.GB),
        )
    ),
    configuration=AuthorizationFlowConfiguration(
        provider_selection=ProviderSelectionSupported(),
        redirect=RedirectSupported(return_uri="https://merchant.test/return", direct_return_uri="https://merchant.test/direct"),
        form=FormSupported(input_types=[AdditionalInputType.TEXT, AdditionalInputType.SELECT]),
    ),
)
RISK = SettlementRisk(category="low_risk")

ALL_STATUSES_FULL = {
    "authorization_required": AuthorizationRequired(),
    "authorizing": Authorizing(authorization_flow=FULL_FLOW),
    "authorized": Authorized(authorization_flow=FULL_FLOW),
    "executed": Executed(executed_at=EXECUTED_AT, authorization_flow=FULL_FLOW, settlement_risk=RISK),
    "settled": Settled(
        payment_source=PaymentSource(
            id="src_1",
            user_id="u_1",
            account_identifiers=[
                SortCodeAccountNumber(sort_code="040668", account_number="00000871"),
                Iban(iban="GB33BUKB20201555555555"),
            ],
            account_holder_name="Jane Doe",
        ),
        executed_at=EXECUTED_AT,
        settled_at=SETTLED_AT,
        authorization_flow=FULL_FLOW,
        settlement_risk=RISK,
    ),
    "failed": Failed(
        failed_at=EXECUTED_AT,
        failure_stage=FailureStage.AUTHORIZED,
        failure_reason="provider_rejected",
        authorization_flow=FULL_FLOW,
    ),
}


def build_payment(status_name: str, payment_id: str = "pay_1", statuses=ALL_STATUSES, **fields) -> Payment:
    return Payment(
        id=payment_id,
        amount_in_minor=100,
        currency=Currency.GBP,
        user=User(id="u_1"),
        payment_method=BankTransfer(
            provider_selection=UserSelectedProvider(),
            beneficiary=MerchantAccountBeneficiary(merchant_account_id="ma_1"),
        ),
        created_at=CREATED_AT,
        status=statuses[status_name],
        **fields,
    )


class ScriptedTransport:
    """
    Answers payment fetches from a script, in order.

    Items are a Payment, ``None`` (404) or an exception to raise. The last
    item repeats forever once the script runs out.
    """

    def __init__(self, script):
        self._script = list(script)
        self.calls = 0

    async def get_payment_by_id(self, payment_id):
        item = self._script[min(self.calls, len(self._script) - 1)]
        self.calls += 1
        if isinstance(item, Exception):
            raise item
        return item


class FakeClock:
    """Monotonic clock that only moves when the driver sleeps."""

    def __init__(self):
        self.now = 0.0
        self.sleeps = []

    def __call__(self):
        return self.now

    async def sleep(self, seconds):
        self.sleeps.append(seconds)
        self.now += seconds


@pytest.fixture
def scripted_transport():
    return ScriptedTransport


@pytest.fixture
def fake_clock():
    return FakeClock()


@pytest.fixture
def backend():
    """Sandbox backend that hides new payments for one fetch, with no latency."""
    return MockPaymentsBackend(not_visible_fetches=1, latency_ms=0)


@pytest.fixture
def client(backend):
    return PaymentsClient(backend)


@pytest_asyncio.fixture
async def http_transport(backend):
    """HTTP transport talking to the sandbox app in-process."""
    app = create_app(backend)
    http_client = httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://sandbox")
    transport = HttpPaymentsTransport(client=http_client)
    yield transport
    await http_client.aclose()
