"""Lifecycle model and polling driver for asynchronous bank-payment authorization."""

from payflow.client import PaymentsClient
from payflow.engine.polling import PollingSession, poll_until_terminal

__version__ = "0.1.0"

__all__ = ["PaymentsClient", "PollingSession", "poll_until_terminal"]
