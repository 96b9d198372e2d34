"""
Payments client: the caller-facing entry point.

Wraps a transport with the lifecycle pieces around it:

  1. Create a payment and get back a pollable acknowledgment
  2. Start the authorization flow, declaring the steps the caller can render
  3. Advance the flow one step at a time (provider, form, redirect return)
  4. Poll the payment until it reaches a terminal state

Flow-step calls report only whether the step succeeded (``response.failed``
tells a rejected step apart); resume polling to see the payment move.
"""

import logging
from typing import Mapping, Optional, TypeVar

from payflow.config import Settings, settings as default_settings
from payflow.engine.errors import FormValidationError
from payflow.engine.form_validation import validate_form_inputs
from payflow.engine.pollable import Pollable
from payflow.engine.polling import PollingSession
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
from payflow.models.authorization_flow import FormAction
from payflow.models.payment import CreatePaymentRequest, CreatePaymentResponse, Payment
from payflow.transport.base import PaymentsTransport

logger = logging.getLogger("payflow.client")

T = TypeVar("T")


def _log_step(name: str, payment_id: str, response) -> None:
    if response.failed:
        logger.warning(
            "%s for payment %s failed at %s: %s",
            name,
            payment_id,
            response.status.failure_stage.value,
            response.status.failure_reason,
        )
    else:
        next_action = response.authorization_flow.next_action if response.authorization_flow else None
        logger.info(
            "%s for payment %s accepted; next action: %s",
            name,
            payment_id,
            next_action.type if next_action else "none",
        )


class PaymentsClient:
    def __init__(self, transport: PaymentsTransport, settings: Optional[Settings] = None):
        self.transport = transport
        self.settings = settings or default_settings

    async def create_payment(self, request: CreatePaymentRequest) -> CreatePaymentResponse:
        response = await self.transport.create_payment(request)
        logger.info(
            "Created payment %s (%s %d) for user %s",
            response.id,
            request.currency.value,
            request.amount_in_minor,
            response.user.id,
        )
        return response

    async def get_payment(self, payment_id: str) -> Optional[Payment]:
        return await self.transport.get_payment_by_id(payment_id)

    def polling_session(
        self,
        pollable: Pollable[T],
        interval: Optional[float] = None,
        max_wait: Optional[float] = None,
        **kwargs,
    ) -> PollingSession[T]:
        """Build a session for callers that want its audit trail or to cancel it."""
        return PollingSession(
            pollable,
            self.transport,
            interval=self.settings.poll_interval_seconds if interval is None else interval,
            max_wait=self.settings.poll_max_wait_seconds if max_wait is None else max_wait,
            **kwargs,
        )

    async def wait_for_payment(
        self,
        pollable: Pollable[T],
        interval: Optional[float] = None,
        max_wait: Optional[float] = None,
        **kwargs,
    ) -> T:
        """
        Poll ``pollable`` until it is terminal.

        Args:
            pollable: A ``CreatePaymentResponse`` or ``Payment``.
            interval: Seconds between fetches (defaults to configuration).
            max_wait: Overall budget in seconds (defaults to configuration).

        Raises:
            PollingTimeoutError: No terminal state within ``max_wait``.
            ResourceNotFoundError: The payment never became visible.
        """
        session = self.polling_session(pollable, interval=interval, max_wait=max_wait, **kwargs)
        payment = await session.run()
        logger.info(
            "Payment %s reached %s after %d attempts",
            session.resource_id,
            payment.status.kind.value,
            session.attempts,
        )
        return payment

    async def start_authorization_flow(
        self, payment_id: str, request: StartAuthorizationFlowRequest
    ) -> StartAuthorizationFlowResponse:
        response = await self.transport.start_authorization_flow(payment_id, request)
        _log_step("Start authorization flow", payment_id, response)
        return response

    async def submit_provider_selection(
        self, payment_id: str, provider_id: str
    ) -> SubmitProviderSelectionActionResponse:
        response = await self.transport.submit_provider_selection(
            payment_id, SubmitProviderSelectionActionRequest(provider_id=provider_id)
        )
        _log_step("Provider selection", payment_id, response)
        return response

    async def submit_form(
        self,
        payment_id: str,
        inputs: Mapping[str, str],
        form: Optional[FormAction] = None,
    ) -> SubmitFormActionResponse:
        """
        Submit form answers.

        When ``form`` (the action being answered) is given, the answers are
        checked client-side first and ``FormValidationError`` is raised
        without a round trip if they cannot pass.
        """
        if form is not None:
            result = validate_form_inputs(form.inputs, inputs)
            if not result.valid:
                raise FormValidationError(result.problems)

        response = await self.transport.submit_form(payment_id, SubmitFormActionRequest(inputs=dict(inputs)))
        _log_step("Form submission", payment_id, response)
        return response

    async def submit_provider_return_parameters(
        self, query: str, fragment: str
    ) -> SubmitProviderReturnParametersResponse:
        response = await self.transport.submit_provider_return_parameters(
            SubmitProviderReturnParametersRequest(query=query, fragment=fragment)
        )
        logger.info("Provider return resolved to %s %s", response.resource.type, response.resource.payment_id)
        return response
