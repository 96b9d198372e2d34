"""
Sandbox payment endpoints, backed by ``MockPaymentsBackend``.

POST /v3/payments                                   Create a payment.
GET  /v3/payments/{id}                              Fetch a payment (404 while not visible).
POST /v3/payments/{id}/authorization-flow           Start the authorization flow.
POST /v3/payments/{id}/authorization-flow/actions/provider-selection
                                                    Submit the chosen provider.
POST /v3/payments/{id}/authorization-flow/actions/form
                                                    Submit form answers.
POST /v3/payments-provider-return                   Resolve redirect return parameters.
POST /sandbox/payments/{id}/settle                  Settle an executed payment.
POST /sandbox/payments/{id}/fail                    Fail a payment before execution.
"""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Request
from pydantic import BaseModel

from payflow.models.actions import (
    StartAuthorizationFlowRequest,
    StartAuthorizationFlowResponse,
    SubmitFormActionRequest,
    SubmitFormActionResponse,
    SubmitProviderReturnParametersRequest,
    SubmitProviderReturnParametersResponse,
    SubmitProviderSelectionActionRequest,
    SubmitProviderSelectionActionResponse,
)
from payflow.models.payment import CreatePaymentRequest, CreatePaymentResponse, Payment
from payflow.transport.mock import MockPaymentsBackend

router = APIRouter(tags=["payments"])


class FailPaymentRequest(BaseModel):
    reason: Optional[str] = None


def get_backend(request: Request) -> MockPaymentsBackend:
    return request.app.state.backend


@router.post("/v3/payments", response_model=CreatePaymentResponse, status_code=201)
async def create_payment(
    body: CreatePaymentRequest,
    backend: MockPaymentsBackend = Depends(get_backend),
):
    return await backend.create_payment(body)


@router.get("/v3/payments/{payment_id}", response_model=Payment)
async def get_payment(payment_id: str, backend: MockPaymentsBackend = Depends(get_backend)):
    payment = await backend.get_payment_by_id(payment_id)
    if payment is None:
        raise HTTPException(status_code=404, detail=f"Payment not found: {payment_id}")
    return payment


@router.post("/v3/payments/{payment_id}/authorization-flow", response_model=StartAuthorizationFlowResponse)
async def start_authorization_flow(
    payment_id: str,
    body: StartAuthorizationFlowRequest,
    backend: MockPaymentsBackend = Depends(get_backend),
):
    return await backend.start_authorization_flow(payment_id, body)


@router.post(
    "/v3/payments/{payment_id}/authorization-flow/actions/provider-selection",
    response_model=SubmitProviderSelectionActionResponse,
)
async def submit_provider_selection(
    payment_id: str,
    body: SubmitProviderSelectionActionRequest,
    backend: MockPaymentsBackend = Depends(get_backend),
):
    return await backend.submit_provider_selection(payment_id, body)


@router.post(
    "/v3/payments/{payment_id}/authorization-flow/actions/form",
    response_model=SubmitFormActionResponse,
)
async def submit_form(
    payment_id: str,
    body: SubmitFormActionRequest,
    backend: MockPaymentsBackend = Depends(get_backend),
):
    return await backend.submit_form(payment_id, body)


@router.post("/v3/payments-provider-return", response_model=SubmitProviderReturnParametersResponse)
async def submit_provider_return_parameters(
    body: SubmitProviderReturnParametersRequest,
    backend: MockPaymentsBackend = Depends(get_backend),
):
    return await backend.submit_provider_return_parameters(body)


@router.post("/sandbox/payments/{payment_id}/settle", response_model=Payment)
async def settle_payment(payment_id: str, backend: MockPaymentsBackend = Depends(get_backend)):
    """Simulate funds arriving for an executed payment."""
    return backend.settle_payment(payment_id)


@router.post("/sandbox/payments/{payment_id}/fail", response_model=Payment)
async def fail_payment(
    payment_id: str,
    body: Optional[FailPaymentRequest] = None,
    backend: MockPaymentsBackend = Depends(get_backend),
):
    """Simulate the provider rejecting a payment that has not executed yet."""
    if body and body.reason:
        return backend.fail_payment(payment_id, body.reason)
    return backend.fail_payment(payment_id)
