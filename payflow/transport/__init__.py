from payflow.transport.base import PaymentsTransport
from payflow.transport.http import HttpPaymentsTransport
from payflow.transport.mock import MockPaymentsBackend

__all__ = ["HttpPaymentsTransport", "MockPaymentsBackend", "PaymentsTransport"]
