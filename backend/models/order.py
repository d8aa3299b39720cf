from enum import Enum


class OrderState(str, Enum):
    PAID = "PAID"
    AWAITING_FULFILLMENT = "AWAITING_FULFILLMENT"
    SHIPPED = "SHIPPED"
    DELIVERED = "DELIVERED"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


# Not yet terminal; these are the orders the late-shipment scan looks at.
OPEN_ORDER_STATES = [
    OrderState.PAID.value,
    OrderState.AWAITING_FULFILLMENT.value,
    OrderState.SHIPPED.value,
]

COMPLETED_ORDER_STATES = [
    OrderState.DELIVERED.value,
    OrderState.COMPLETED.value,
]
