"""Tests for the payment status state machine and its wire shape."""

import pytest
from pydantic import ValidationError

from payflow.models import (
    Authorizing,
    Executed,
    Failed,
    FailureStage,
    Payment,
    PaymentStatusKind,
    Settled,
    WaitAction,
    is_valid_transition,
)

from conftest import ALL_STATUSES, ALL_STATUSES_FULL, build_payment

PAYMENT_JSON = {
    "id": "pay_1",
    "amount_in_minor": 100,
    "currency": "GBP",
    "user": {"id": "u_1"},
    "payment_method": {
        "type": "bank_transfer",
        "provider_selection": {"type": "user_selected"},
        "beneficiary": {"type": "merchant_account", "merchant_account_id": "ma_1"},
    },
    "created_at": "2024-01-01T12:00:00Z",
}


class TestDecoding:
    def test_authorization_required(self):
        payment = Payment.model_validate({**PAYMENT_JSON, "status": "authorization_required"})
        assert payment.status.kind == PaymentStatusKind.AUTHORIZATION_REQUIRED
        assert payment.authorization_flow is None

    def test_authorizing_with_flattened_flow(self):
        payment = Payment.model_validate({
            **PAYMENT_JSON,
            "status": "authorizing",
            "authorization_flow": {"actions": {"next": {"type": "wait"}}},
        })
        assert isinstance(payment.status, Authorizing)
        assert isinstance(payment.authorization_flow.next_action, WaitAction)

    def test_authorizing_requires_flow(self):
        with pytest.raises(ValidationError):
            Payment.model_validate({**PAYMENT_JSON, "status": "authorizing"})

    def test_authorized_without_flow(self):
        payment = Payment.model_validate({**PAYMENT_JSON, "status": "authorized"})
        assert payment.status.kind == PaymentStatusKind.AUTHORIZED
        assert payment.authorization_flow is None

    def test_executed(self):
        payment = Payment.model_validate({
            **PAYMENT_JSON,
            "status": "executed",
            "executed_at": "2024-01-01T12:05:00Z",
            "settlement_risk": {"category": "low_risk"},
        })
        assert isinstance(payment.status, Executed)
        assert payment.status.executed_at.minute == 5
        assert payment.status.settlement_risk.category == "low_risk"

    def test_settled(self):
        payment = Payment.model_validate({
            **PAYMENT_JSON,
            "status": "settled",
            "executed_at": "2024-01-01T12:05:00Z",
            "settled_at": "2024-01-01T13:00:00Z",
            "payment_source": {
                "id": "src_1",
                "account_identifiers": [{"type": "iban", "iban": "GB33BUKB20201555555555"}],
            },
        })
        assert isinstance(payment.status, Settled)
        assert payment.status.payment_source.account_identifiers[0].iban == "GB33BUKB20201555555555"

    def test_settled_requires_executed_at(self):
        with pytest.raises(ValidationError):
            Payment.model_validate({
                **PAYMENT_JSON,
                "status": "settled",
                "settled_at": "2024-01-01T13:00:00Z",
                "payment_source": {"id": "src_1"},
            })

    def test_failed(self):
        payment = Payment.model_validate({
            **PAYMENT_JSON,
            "status": "failed",
            "failed_at": "2024-01-01T12:05:00Z",
            "failure_stage": "authorizing",
            "failure_reason": "provider_rejected",
        })
        assert isinstance(payment.status, Failed)
        assert payment.status.failure_stage == FailureStage.AUTHORIZING

    def test_unknown_status_fails(self):
        with pytest.raises(ValidationError):
            Payment.model_validate({**PAYMENT_JSON, "status": "pending"})

    def test_missing_status_fails(self):
        with pytest.raises(ValidationError):
            Payment.model_validate(PAYMENT_JSON)

    def test_lowercase_currency_fails(self):
        with pytest.raises(ValidationError):
            Payment.model_validate({**PAYMENT_JSON, "currency": "gbp", "status": "authorized"})

    def test_payment_method_tag_is_required(self):
        method = {k: v for k, v in PAYMENT_JSON["payment_method"].items() if k != "type"}
        with pytest.raises(ValidationError):
            Payment.model_validate({**PAYMENT_JSON, "payment_method": method, "status": "authorized"})


class TestEncoding:
    def test_status_fields_are_flattened(self):
        data = build_payment("executed").model_dump(mode="json")
        assert data["status"] == "executed"
        assert "executed_at" in data
        assert data["currency"] == "GBP"

    def test_status_without_data_is_a_bare_tag(self):
        data = build_payment("authorization_required").model_dump(mode="json")
        assert data["status"] == "authorization_required"
        assert "authorization_flow" not in data

    @pytest.mark.parametrize("status_name", sorted(ALL_STATUSES))
    def test_round_trip(self, status_name):
        payment = build_payment(status_name)
        assert Payment.model_validate(payment.model_dump(mode="json")) == payment
        assert Payment.model_validate_json(payment.model_dump_json()) == payment

    @pytest.mark.parametrize("status_name", sorted(ALL_STATUSES_FULL))
    def test_round_trip_with_every_field_populated(self, status_name):
        payment = build_payment(status_name, statuses=ALL_STATUSES_FULL, metadata={"order": "42"})
        assert Payment.model_validate(payment.model_dump(mode="json")) == payment
        assert Payment.model_validate_json(payment.model_dump_json()) == payment

    def test_populated_status_fields_sit_beside_payment_fields(self):
        data = build_payment("settled", statuses=ALL_STATUSES_FULL, metadata={"order": "42"}).model_dump(mode="json")
        assert data["metadata"] == {"order": "42"}
        assert data["settlement_risk"] == {"category": "low_risk"}
        assert data["payment_source"]["user_id"] == "u_1"
        assert data["authorization_flow"]["configuration"]["redirect"]["return_uri"] == "https://merchant.test/return"
        assert data["authorization_flow"]["actions"]["next"]["metadata"]["type"] == "provider"

        decoded = Payment.model_validate(data)
        assert decoded.metadata == {"order": "42"}
        assert decoded.authorization_flow.configuration.form.input_types[1].value == "select"
        assert [i.type for i in decoded.status.payment_source.account_identifiers] == [
            "sort_code_account_number",
            "iban",
        ]

    def test_snapshots_are_immutable(self):
        payment = build_payment("authorized")
        with pytest.raises(ValidationError):
            payment.amount_in_minor = 200


class TestTerminalState:
    @pytest.mark.parametrize(
        "status_name, terminal",
        [
            ("authorization_required", False),
            ("authorizing", False),
            ("authorized", False),
            ("executed", True),
            ("settled", True),
            ("failed", True),
        ],
    )
    def test_is_in_terminal_state(self, status_name, terminal):
        assert build_payment(status_name).is_in_terminal_state() is terminal


class TestTransitions:
    def test_forward_steps(self):
        assert is_valid_transition(PaymentStatusKind.AUTHORIZATION_REQUIRED, PaymentStatusKind.AUTHORIZING)
        assert is_valid_transition(PaymentStatusKind.AUTHORIZING, PaymentStatusKind.AUTHORIZED)
        assert is_valid_transition(PaymentStatusKind.AUTHORIZED, PaymentStatusKind.EXECUTED)
        assert is_valid_transition(PaymentStatusKind.EXECUTED, PaymentStatusKind.SETTLED)

    def test_skipping_stages(self):
        assert is_valid_transition(PaymentStatusKind.AUTHORIZATION_REQUIRED, PaymentStatusKind.EXECUTED)
        assert is_valid_transition(PaymentStatusKind.AUTHORIZING, PaymentStatusKind.SETTLED)

    def test_staying_put(self):
        for kind in PaymentStatusKind:
            assert is_valid_transition(kind, kind)

    def test_failure_only_before_execution(self):
        assert is_valid_transition("authorization_required", "failed")
        assert is_valid_transition("authorizing", "failed")
        assert is_valid_transition("authorized", "failed")
        assert not is_valid_transition("executed", "failed")
        assert not is_valid_transition("settled", "failed")

    def test_no_going_back(self):
        assert not is_valid_transition(PaymentStatusKind.AUTHORIZED, PaymentStatusKind.AUTHORIZING)
        assert not is_valid_transition(PaymentStatusKind.SETTLED, PaymentStatusKind.EXECUTED)
        assert not is_valid_transition(PaymentStatusKind.FAILED, PaymentStatusKind.AUTHORIZING)
