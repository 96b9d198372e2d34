"""
HTTP transport for the payments API, built on httpx.

Maps the wire to the lifecycle error taxonomy:
  - 404 on a payment fetch → ``None`` (the caller decides if that is retriable)
  - Any other HTTP error status → ``TransportError`` (retriable for 429/5xx gateway errors)
  - Network failure → ``TransportError(retriable=True)``
  - Body that does not decode → ``DecodingError``
"""

import logging
from typing import Any, Optional, TypeVar
from urllib.parse import quote

import httpx
from pydantic import BaseModel, ValidationError

from payflow.config import settings
from payflow.engine.errors import RETRIABLE_STATUS_CODES, DecodingError, TransportError
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
from payflow.transport.base import PaymentsTransport

logger = logging.getLogger("payflow.transport.http")

M = TypeVar("M", bound=BaseModel)


def _segment(value: str) -> str:
    """Escape an id for use as a single path segment."""
    return quote(value, safe="")


def _decode(model: type[M], response: httpx.Response) -> M:
    try:
        return model.model_validate(response.json())
    except (ValidationError, ValueError) as e:
        raise DecodingError(f"Could not decode {model.__name__}: {e}") from e


class HttpPaymentsTransport(PaymentsTransport):
    """
    Payments API over HTTP.

    Token acquisition is out of scope: pass an already-issued bearer token,
    or a preconfigured ``httpx.AsyncClient`` that authenticates itself.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        access_token: Optional[str] = None,
        timeout: Optional[float] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        # Sent per request so a caller-supplied client is left untouched.
        self._auth_headers = {"Authorization": f"Bearer {access_token}"} if access_token else {}
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            base_url=base_url or settings.api_base_url,
            timeout=timeout if timeout is not None else settings.api_timeout_seconds,
        )

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> "HttpPaymentsTransport":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def _send(
        self,
        method: str,
        path: str,
        body: Optional[BaseModel] = None,
        allow_not_found: bool = False,
    ) -> Optional[httpx.Response]:
        try:
            response = await self._client.request(
                method,
                path,
                json=body.model_dump(mode="json") if body is not None else None,
                headers=self._auth_headers,
            )
        except httpx.RequestError as e:
            logger.warning("%s %s failed: %s", method, path, e)
            raise TransportError(f"{method} {path} failed: {e}", retriable=True) from e

        if allow_not_found and response.status_code == 404:
            logger.debug("%s %s returned 404", method, path)
            return None

        if response.is_error:
            raise TransportError(
                f"{method} {path} returned {response.status_code}: {response.text[:200]}",
                status_code=response.status_code,
                retriable=response.status_code in RETRIABLE_STATUS_CODES,
            )
        return response

    async def create_payment(self, request: CreatePaymentRequest) -> CreatePaymentResponse:
        response = await self._send("POST", "/v3/payments", request)
        return _decode(CreatePaymentResponse, response)

    async def get_payment_by_id(self, payment_id: str) -> Optional[Payment]:
        response = await self._send("GET", f"/v3/payments/{_segment(payment_id)}", allow_not_found=True)
        if response is None:
            return None
        return _decode(Payment, response)

    async def start_authorization_flow(
        self, payment_id: str, request: StartAuthorizationFlowRequest
    ) -> StartAuthorizationFlowResponse:
        response = await self._send("POST", f"/v3/payments/{_segment(payment_id)}/authorization-flow", request)
        return _decode(StartAuthorizationFlowResponse, response)

    async def submit_provider_selection(
        self, payment_id: str, request: SubmitProviderSelectionActionRequest
    ) -> SubmitProviderSelectionActionResponse:
        response = await self._send(
            "POST", f"/v3/payments/{_segment(payment_id)}/authorization-flow/actions/provider-selection", request
        )
        return _decode(SubmitProviderSelectionActionResponse, response)

    async def submit_form(
        self, payment_id: str, request: SubmitFormActionRequest
    ) -> SubmitFormActionResponse:
        response = await self._send(
            "POST", f"/v3/payments/{_segment(payment_id)}/authorization-flow/actions/form", request
        )
        return _decode(SubmitFormActionResponse, response)

    async def submit_provider_return_parameters(
        self, request: SubmitProviderReturnParametersRequest
    ) -> SubmitProviderReturnParametersResponse:
        response = await self._send("POST", "/v3/payments-provider-return", request)
        return _decode(SubmitProviderReturnParametersResponse, response)
