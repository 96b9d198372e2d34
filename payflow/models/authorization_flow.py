"""
Authorization flow model.

A flow tells the caller what to do next (``actions.next``) and which kinds of
step it supports (``configuration``). The configuration is advisory only: it
lets a caller pre-render UI before any action is known, and never implies an
action by itself. Any optional part may be absent.
"""

from typing import Annotated, Literal, Optional, Union

from pydantic import Field

from payflow.models.base import WireModel, require_tag
from payflow.models.enums import AdditionalInputFormat, AdditionalInputType
from payflow.models.providers import Provider


class AdditionalInputDisplayText(WireModel):
    """Localizable text: a translation ``key`` and its ``default`` rendering."""

    key: str
    default: str


class AdditionalInputRegex(WireModel):
    regex: str
    message: AdditionalInputDisplayText


class AdditionalInputOption(WireModel):
    id: str
    display_text: AdditionalInputDisplayText


class AdditionalInputImageUri(WireModel):
    type: Literal["uri"] = "uri"
    uri: str


class AdditionalInputImageBase64(WireModel):
    type: Literal["base64"] = "base64"
    data: str
    media_type: str


AdditionalInputImage = Annotated[
    Union[AdditionalInputImageUri, AdditionalInputImageBase64],
    Field(discriminator="type"),
]


class TextInput(WireModel):
    type: Literal["text"] = "text"
    id: str
    mandatory: bool
    display_text: AdditionalInputDisplayText
    description: Optional[AdditionalInputDisplayText] = None
    format: AdditionalInputFormat
    sensitive: bool
    min_length: int
    max_length: int
    regexes: list[AdditionalInputRegex]


class SelectInput(WireModel):
    type: Literal["select"] = "select"
    id: str
    mandatory: bool
    display_text: AdditionalInputDisplayText
    description: Optional[AdditionalInputDisplayText] = None
    options: list[AdditionalInputOption]


class TextWithImageInput(WireModel):
    type: Literal["text_with_image"] = "text_with_image"
    id: str
    mandatory: bool
    display_text: AdditionalInputDisplayText
    description: Optional[AdditionalInputDisplayText] = None
    format: AdditionalInputFormat
    sensitive: bool
    min_length: int
    max_length: int
    regexes: list[AdditionalInputRegex]
    image: AdditionalInputImage


AdditionalInput = Annotated[
    Union[TextInput, SelectInput, TextWithImageInput],
    Field(discriminator="type"),
]


class RedirectProviderMetadata(Provider):
    """The provider the user is being redirected to."""

    type: Literal["provider"] = "provider"


RedirectActionMetadata = Annotated[RedirectProviderMetadata, require_tag("type")]


class ProviderSelectionAction(WireModel):
    """Render ``providers`` and submit the user's choice."""

    type: Literal["provider_selection"] = "provider_selection"
    providers: list[Provider]


class RedirectAction(WireModel):
    """Send the user's browser to ``uri``; feed back the return parameters later."""

    type: Literal["redirect"] = "redirect"
    uri: str
    metadata: Optional[RedirectActionMetadata] = None


class FormAction(WireModel):
    """Render ``inputs`` and submit the collected answers."""

    type: Literal["form"] = "form"
    inputs: list[AdditionalInput]


class WaitAction(WireModel):
    """Nothing to do but keep polling."""

    type: Literal["wait"] = "wait"


AuthorizationFlowNextAction = Annotated[
    Union[ProviderSelectionAction, RedirectAction, FormAction, WaitAction],
    Field(discriminator="type"),
]


class AuthorizationFlowActions(WireModel):
    next: AuthorizationFlowNextAction


class ProviderSelectionSupported(WireModel):
    pass


class RedirectSupported(WireModel):
    return_uri: str
    direct_return_uri: Optional[str] = None


class FormSupported(WireModel):
    input_types: list[AdditionalInputType]


class AuthorizationFlowConfiguration(WireModel):
    provider_selection: Optional[ProviderSelectionSupported] = None
    redirect: Optional[RedirectSupported] = None
    form: Optional[FormSupported] = None


class AuthorizationFlow(WireModel):
    actions: Optional[AuthorizationFlowActions] = None
    configuration: Optional[AuthorizationFlowConfiguration] = None

    @property
    def next_action(self) -> Optional[AuthorizationFlowNextAction]:
        """The action to present, or ``None`` when the flow carries none."""
        return self.actions.next if self.actions else None
