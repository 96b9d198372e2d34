from payflow.models.accounts import (
    AccountIdentifier,
    Bban,
    Beneficiary,
    ExternalAccountBeneficiary,
    Iban,
    MerchantAccountBeneficiary,
    Nrb,
    PaymentSource,
    SettlementRisk,
    SortCodeAccountNumber,
    User,
)
from payflow.models.actions import (
    AuthorizationFlowResponseStatus,
    FlowStepAuthorizing,
    FlowStepFailed,
    PaymentReturnResource,
    StartAuthorizationFlowRequest,
    StartAuthorizationFlowResponse,
    SubmitFormActionRequest,
    SubmitFormActionResponse,
    SubmitProviderReturnParametersRequest,
    SubmitProviderReturnParametersResponse,
    SubmitProviderSelectionActionRequest,
    SubmitProviderSelectionActionResponse,
)
from payflow.models.authorization_flow import (
    AdditionalInput,
    AdditionalInputDisplayText,
    AdditionalInputImageBase64,
    AdditionalInputImageUri,
    AdditionalInputOption,
    AdditionalInputRegex,
    AuthorizationFlow,
    AuthorizationFlowActions,
    AuthorizationFlowConfiguration,
    AuthorizationFlowNextAction,
    FormAction,
    FormSupported,
    ProviderSelectionAction,
    ProviderSelectionSupported,
    RedirectAction,
    RedirectProviderMetadata,
    RedirectSupported,
    SelectInput,
    TextInput,
    TextWithImageInput,
    WaitAction,
)
from payflow.models.enums import (
    AdditionalInputFormat,
    AdditionalInputType,
    CountryCode,
    Currency,
    CustomerSegment,
    FailureStage,
    InputProblem,
    PaymentStatusKind,
    ReleaseChannel,
)
from payflow.models.payment import (
    TERMINAL_STATUSES,
    Authorized,
    Authorizing,
    AuthorizationRequired,
    CreatePaymentRequest,
    CreatePaymentResponse,
    CreatePaymentUserRequest,
    CreatePaymentUserResponse,
    Executed,
    ExistingUser,
    Failed,
    NewUser,
    Payment,
    PaymentStatus,
    Settled,
    is_valid_transition,
)
from payflow.models.providers import (
    BankTransfer,
    PaymentMethod,
    PreselectedProvider,
    Provider,
    ProviderFilter,
    ProviderFilterExcludes,
    ProviderSelection,
    Remitter,
    UserSelectedProvider,
)

__all__ = [
    "AccountIdentifier",
    "AdditionalInput",
    "AdditionalInputDisplayText",
    "AdditionalInputFormat",
    "AdditionalInputImageBase64",
    "AdditionalInputImageUri",
    "AdditionalInputOption",
    "AdditionalInputRegex",
    "AdditionalInputType",
    "AuthorizationFlow",
    "AuthorizationFlowActions",
    "AuthorizationFlowConfiguration",
    "AuthorizationFlowNextAction",
    "AuthorizationFlowResponseStatus",
    "AuthorizationRequired",
    "Authorized",
    "Authorizing",
    "BankTransfer",
    "Bban",
    "Beneficiary",
    "CountryCode",
    "CreatePaymentRequest",
    "CreatePaymentResponse",
    "CreatePaymentUserRequest",
    "CreatePaymentUserResponse",
    "Currency",
    "CustomerSegment",
    "Executed",
    "ExistingUser",
    "ExternalAccountBeneficiary",
    "Failed",
    "FailureStage",
    "FlowStepAuthorizing",
    "FlowStepFailed",
    "FormAction",
    "FormSupported",
    "Iban",
    "InputProblem",
    "MerchantAccountBeneficiary",
    "NewUser",
    "Nrb",
    "Payment",
    "PaymentMethod",
    "PaymentReturnResource",
    "PaymentSource",
    "PaymentStatus",
    "PaymentStatusKind",
    "PreselectedProvider",
    "Provider",
    "ProviderFilter",
    "ProviderFilterExcludes",
    "ProviderSelection",
    "ProviderSelectionAction",
    "ProviderSelectionSupported",
    "RedirectAction",
    "RedirectProviderMetadata",
    "RedirectSupported",
    "ReleaseChannel",
    "Remitter",
    "SelectInput",
    "SettlementRisk",
    "Settled",
    "SortCodeAccountNumber",
    "StartAuthorizationFlowRequest",
    "StartAuthorizationFlowResponse",
    "SubmitFormActionRequest",
    "SubmitFormActionResponse",
    "SubmitProviderReturnParametersRequest",
    "SubmitProviderReturnParametersResponse",
    "SubmitProviderSelectionActionRequest",
    "SubmitProviderSelectionActionResponse",
    "TERMINAL_STATUSES",
    "TextInput",
    "TextWithImageInput",
    "User",
    "UserSelectedProvider",
    "WaitAction",
    "is_valid_transition",
]
