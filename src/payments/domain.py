"""Payments bounded context: redirect payment handshake and refunds.

Drives an external redirect gateway (ready → redirect → approve) for an
order, records the settlement state on the Payment aggregate, and supports
partial refunds until the paid amount is exhausted.
"""

import structlog
from protean.domain import Domain

from shared.logging import configure_logging

configure_logging()

payments = Domain(name="payments")

logger = structlog.get_logger(__name__)
