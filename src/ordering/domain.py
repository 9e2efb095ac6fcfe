"""Ordering bounded context: checkout orchestration and order placement.

Turns a mutable cart selection (or a single direct-purchase item) into an
immutable Order: pricing, stock checks, shipping address resolution, the
checkout session state machine, and the in-process Order Service.
"""

import structlog
from protean.domain import Domain

from shared.logging import configure_logging

configure_logging()

ordering = Domain(name="ordering")

logger = structlog.get_logger(__name__)
