"""Fixtures for cross-domain tests.

An order is placed in the ordering domain and paid in the payments domain,
which reads the order back through its OrderingLookup adapter.
"""

import os

import pytest


@pytest.fixture(scope="session")
def _ordering_domain(request):
    """Initialize the ordering domain once per session."""
    os.environ["PROTEAN_ENV"] = request.config.option.env

    from ordering.domain import ordering

    ordering.init()
    return ordering


@pytest.fixture(scope="session")
def _payments_domain(request):
    """Initialize the payments domain once per session."""
    os.environ["PROTEAN_ENV"] = request.config.option.env

    from payments.domain import payments

    payments.init()
    return payments


def _reset(domain):
    for _, provider in domain.providers.items():
        provider._data_reset()
    domain.event_store.store._data_reset()


@pytest.fixture(autouse=True)
def _clean_state(_ordering_domain, _payments_domain):
    from ordering.collaborators import reset_collaborators
    from payments.gateway import reset_gateway
    from payments.payment.orders import reset_order_lookup

    yield

    for domain in (_ordering_domain, _payments_domain):
        with domain.domain_context():
            _reset(domain)
    reset_collaborators()
    reset_gateway()
    reset_order_lookup()
