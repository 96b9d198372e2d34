"""Bank account addressing, beneficiaries, users and settlement sources."""

from typing import Annotated, Literal, Optional, Union

from pydantic import Field

from payflow.models.base import WireModel


class SortCodeAccountNumber(WireModel):
    type: Literal["sort_code_account_number"] = "sort_code_account_number"
    sort_code: str
    account_number: str


class Iban(WireModel):
    type: Literal["iban"] = "iban"
    iban: str


class Bban(WireModel):
    type: Literal["bban"] = "bban"
    bban: str


class Nrb(WireModel):
    """Polish domestic account number."""

    type: Literal["nrb"] = "nrb"
    nrb: str


AccountIdentifier = Annotated[
    Union[SortCodeAccountNumber, Iban, Bban, Nrb],
    Field(discriminator="type"),
]


class MerchantAccountBeneficiary(WireModel):
    """Funds go to one of the merchant's own accounts."""

    type: Literal["merchant_account"] = "merchant_account"
    merchant_account_id: str
    account_holder_name: Optional[str] = None


class ExternalAccountBeneficiary(WireModel):
    """Funds go to an arbitrary account, identified with a payment reference."""

    type: Literal["external_account"] = "external_account"
    account_holder_name: str
    account_identifier: AccountIdentifier
    reference: str


Beneficiary = Annotated[
    Union[MerchantAccountBeneficiary, ExternalAccountBeneficiary],
    Field(discriminator="type"),
]


class PaymentSource(WireModel):
    """The account the funds of a settled payment actually came from."""

    id: str
    user_id: Optional[str] = None
    account_identifiers: list[AccountIdentifier] = Field(default_factory=list)
    account_holder_name: Optional[str] = None


class SettlementRisk(WireModel):
    category: str


class User(WireModel):
    id: str
    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
