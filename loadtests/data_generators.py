"""Faker-based data generators for Locust load test scenarios.

Each generator produces payloads that pass the API's Pydantic request
schemas and the Order aggregate's rules (delivery needs an address,
pickup needs a store, amounts are whole KRW).
"""

import random
import uuid

from faker import Faker

fake = Faker("ko_KR")

STORE_IDS = [30, 31, 32, 33]


def user_id() -> str:
    return f"user-lt-{uuid.uuid4().hex[:8]}"


def phone() -> str:
    """Mobile numbers accepted by the checkout form: 010-XXXX-XXXX."""
    return f"010-{random.randint(1000, 9999)}-{random.randint(1000, 9999)}"


def shipping_address() -> str:
    """Composed single-line address as the checkout stores it on the order."""
    zip_code = f"{random.randint(0, 99999):05d}"
    return f"{fake.name()} | {phone()} | ({zip_code}) {fake.street_address()}"


def order_item(store_id: int | None = None) -> dict:
    """Generate OrderItemSchema payload. Prices are multiples of 100 won."""
    has_option = random.random() < 0.4
    return {
        "product_id": random.randint(1, 5000),
        "quantity": random.randint(1, 3),
        "option_id": random.randint(1, 50) if has_option else None,
        "unit_price": random.randint(10, 1500) * 100,
        "option_surcharge": random.choice([500, 1000, 3000]) if has_option else 0,
        "store_id": store_id or random.choice(STORE_IDS),
    }


def delivery_order_data(num_items: int = 2) -> dict:
    """Generate a delivery CreateOrderRequest payload."""
    return {
        "user_id": user_id(),
        "fulfillment_type": "delivery",
        "shipping_address": shipping_address(),
        "memo": fake.sentence()[:200],
        "order_items": [order_item() for _ in range(num_items)],
    }


def pickup_order_data(num_items: int = 1) -> dict:
    """Generate a pickup CreateOrderRequest payload; every line is in one store."""
    store_id = random.choice(STORE_IDS)
    return {
        "user_id": user_id(),
        "fulfillment_type": "pickup",
        "pickup_store_id": store_id,
        "order_items": [order_item(store_id) for _ in range(num_items)],
    }


def pg_token() -> str:
    """Token the gateway appends to the success redirect."""
    return uuid.uuid4().hex[:20]


def partial_refund_amount(total_amount: int) -> int:
    """A refund between 10% and 50% of the total, rounded to 100 won."""
    share = random.uniform(0.1, 0.5)
    return max(100, int(total_amount * share) // 100 * 100)


def failure_message() -> str:
    return random.choice(["User closed the window", "Card declined", "Timeout on approval page"])
