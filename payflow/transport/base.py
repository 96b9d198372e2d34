"""
Abstract payments transport interface.

The lifecycle core never talks HTTP itself: it drives whatever implements
this interface. ``HttpPaymentsTransport`` talks to a real API, and
``MockPaymentsBackend`` is an in-memory sandbox with the same contract.
Authentication and token acquisition belong to the implementation.
"""

from abc import ABC, abstractmethod
from typing import Optional

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


class PaymentsTransport(ABC):
    """Abstract base class for payment API transports."""

    @abstractmethod
    async def create_payment(self, request: CreatePaymentRequest) -> CreatePaymentResponse:
        """
        Create a payment.

        Raises:
            TransportError: The request could not be delivered or was rejected.
            DecodingError: The response did not match the expected shape.
        """
        ...

    @abstractmethod
    async def get_payment_by_id(self, payment_id: str) -> Optional[Payment]:
        """Fetch the latest snapshot of a payment, or ``None`` on 404."""
        ...

    @abstractmethod
    async def start_authorization_flow(
        self, payment_id: str, request: StartAuthorizationFlowRequest
    ) -> StartAuthorizationFlowResponse:
        ...

    @abstractmethod
    async def submit_provider_selection(
        self, payment_id: str, request: SubmitProviderSelectionActionRequest
    ) -> SubmitProviderSelectionActionResponse:
        ...

    @abstractmethod
    async def submit_form(
        self, payment_id: str, request: SubmitFormActionRequest
    ) -> SubmitFormActionResponse:
        ...

    @abstractmethod
    async def submit_provider_return_parameters(
        self, request: SubmitProviderReturnParametersRequest
    ) -> SubmitProviderReturnParametersResponse:
        """Resolve the parameters a provider redirected back with to the resource that started it."""
        ...
