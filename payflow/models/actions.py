"""
Request/response contracts for advancing an authorization flow by one step.

Every response reports only whether the *step* succeeded. The payment's own
status is not part of it; callers resume polling the payment to observe the
transition the step caused.
"""

from typing import Annotated, Literal, Optional, Union

from pydantic import Field

from payflow.models.authorization_flow import (
    AuthorizationFlow,
    FormSupported,
    ProviderSelectionSupported,
    RedirectSupported,
)
from payflow.models.base import FlattenedStatusModel, WireModel, require_tag
from payflow.models.enums import FailureStage


class FlowStepAuthorizing(WireModel):
    """The step was accepted; keep polling."""

    status: Literal["authorizing"] = "authorizing"


class FlowStepFailed(WireModel):
    """The step was rejected and the payment failed with it."""

    status: Literal["failed"] = "failed"
    failure_stage: FailureStage
    failure_reason: str


AuthorizationFlowResponseStatus = Annotated[
    Union[FlowStepAuthorizing, FlowStepFailed],
    Field(discriminator="status"),
]


class _FlowStepResponse(FlattenedStatusModel):
    authorization_flow: Optional[AuthorizationFlow] = None
    status: AuthorizationFlowResponseStatus

    @property
    def failed(self) -> bool:
        return isinstance(self.status, FlowStepFailed)


class StartAuthorizationFlowRequest(WireModel):
    """Declares which kinds of step the caller is able to handle."""

    provider_selection: Optional[ProviderSelectionSupported] = None
    redirect: Optional[RedirectSupported] = None
    form: Optional[FormSupported] = None


class StartAuthorizationFlowResponse(_FlowStepResponse):
    pass


class SubmitProviderSelectionActionRequest(WireModel):
    provider_id: str


class SubmitProviderSelectionActionResponse(_FlowStepResponse):
    pass


class SubmitFormActionRequest(WireModel):
    inputs: dict[str, str]


class SubmitFormActionResponse(_FlowStepResponse):
    pass


class SubmitProviderReturnParametersRequest(WireModel):
    """Query and fragment captured from the provider's redirect back."""

    query: str
    fragment: str


class PaymentReturnResource(WireModel):
    type: Literal["payment"] = "payment"
    payment_id: str


# Payments are the only resource that redirects today.
SubmitProviderReturnParametersResponseResource = Annotated[
    PaymentReturnResource, require_tag("type")
]


class SubmitProviderReturnParametersResponse(WireModel):
    resource: SubmitProviderReturnParametersResponseResource
