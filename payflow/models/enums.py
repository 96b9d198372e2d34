"""Enumerations for the payment lifecycle domain model."""

from enum import Enum


class Currency(str, Enum):
    """Supported payment currencies (ISO 4217, uppercase on the wire)."""

    GBP = "GBP"
    EUR = "EUR"


class CountryCode(str, Enum):
    """Countries a provider can be offered in (ISO 3166-1 alpha-2)."""

    DE = "DE"
    ES = "ES"
    FR = "FR"
    GB = "GB"
    IE = "IE"
    IT = "IT"
    LT = "LT"
    NL = "NL"
    PL = "PL"
    PT = "PT"


class PaymentStatusKind(str, Enum):
    """Lifecycle stages a payment can occupy."""

    AUTHORIZATION_REQUIRED = "authorization_required"
    AUTHORIZING = "authorizing"
    AUTHORIZED = "authorized"
    EXECUTED = "executed"
    SETTLED = "settled"
    FAILED = "failed"


class FailureStage(str, Enum):
    """The status a payment was in when it failed."""

    AUTHORIZATION_REQUIRED = "authorization_required"
    AUTHORIZING = "authorizing"
    AUTHORIZED = "authorized"


class ReleaseChannel(str, Enum):
    GENERAL_AVAILABILITY = "general_availability"
    PUBLIC_BETA = "public_beta"
    PRIVATE_BETA = "private_beta"


class CustomerSegment(str, Enum):
    RETAIL = "retail"
    BUSINESS = "business"
    CORPORATE = "corporate"


class AdditionalInputFormat(str, Enum):
    """Hint for the keyboard/formatting to use when rendering a text input."""

    ACCOUNT_NUMBER = "account_number"
    ALPHABETICAL = "alphabetical"
    ALPHANUMERICAL = "alphanumerical"
    ANY = "any"
    EMAIL = "email"
    IBAN = "iban"
    NUMERICAL = "numerical"
    SORT_CODE = "sort_code"


class AdditionalInputType(str, Enum):
    """Form input kinds a caller declares it can render."""

    TEXT = "text"
    SELECT = "select"
    TEXT_WITH_IMAGE = "text_with_image"


class InputProblem(str, Enum):
    """Categorized reasons a form answer fails client-side validation."""

    MISSING_MANDATORY = "missing_mandatory"
    TOO_SHORT = "too_short"
    TOO_LONG = "too_long"
    REGEX_MISMATCH = "regex_mismatch"
    UNKNOWN_OPTION = "unknown_option"
    UNKNOWN_INPUT = "unknown_input"
