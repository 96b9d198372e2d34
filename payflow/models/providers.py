"""Providers (the payer's bank) and how a payment chooses one."""

from typing import Annotated, Literal, Optional, Union

from pydantic import Field

from payflow.models.accounts import AccountIdentifier, Beneficiary
from payflow.models.base import WireModel, require_tag
from payflow.models.enums import CountryCode, CustomerSegment, ReleaseChannel


class Provider(WireModel):
    """A bank the user can authorize the payment with."""

    id: str
    display_name: Optional[str] = None
    icon_uri: Optional[str] = None
    logo_uri: Optional[str] = None
    bg_color: Optional[str] = None
    country_code: Optional[CountryCode] = None


class ProviderFilterExcludes(WireModel):
    provider_ids: Optional[list[str]] = None


class ProviderFilter(WireModel):
    """Restricts which providers are offered when the user selects one."""

    countries: Optional[list[CountryCode]] = None
    release_channel: Optional[ReleaseChannel] = None
    customer_segments: Optional[list[CustomerSegment]] = None
    provider_ids: Optional[list[str]] = None
    excludes: Optional[ProviderFilterExcludes] = None


class Remitter(WireModel):
    account_holder_name: Optional[str] = None
    account_identifier: Optional[AccountIdentifier] = None


class UserSelectedProvider(WireModel):
    """The user picks their bank during the authorization flow."""

    type: Literal["user_selected"] = "user_selected"
    filter: Optional[ProviderFilter] = None
    preferred_scheme_ids: Optional[list[str]] = None


class PreselectedProvider(WireModel):
    """The merchant already knows the user's bank and payment scheme."""

    type: Literal["preselected"] = "preselected"
    provider_id: str
    scheme_id: str
    remitter: Optional[Remitter] = None


ProviderSelection = Annotated[
    Union[UserSelectedProvider, PreselectedProvider],
    Field(discriminator="type"),
]


class BankTransfer(WireModel):
    type: Literal["bank_transfer"] = "bank_transfer"
    provider_selection: ProviderSelection
    beneficiary: Beneficiary


# Only one payment method exists today; the tag is still mandatory on the wire.
PaymentMethod = Annotated[BankTransfer, require_tag("type")]
