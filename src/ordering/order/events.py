"""Domain events for the Order aggregate."""

from protean.fields import DateTime, Identifier, Integer, String, Text

from ordering.domain import ordering


@ordering.event(part_of="Order")
class OrderPlaced:
    """A checkout was converted into an immutable order."""

    __version__ = 1

    order_id = Identifier(required=True)
    user_id = Identifier(required=True)
    fulfillment_type = String(required=True)
    shipping_address = Text()
    pickup_store_id = Integer()
    items = Text(required=True)  # JSON: list of item dicts
    total_amount = Integer(required=True)
    placed_at = DateTime(required=True)
