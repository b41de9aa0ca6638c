from .event_dispatcher import (
    EventDispatcher,
    EventDecodeError,
    UNKNOWN_REASON,
    coupon_notification,
    knock_out_notification,
    payment_notification,
)

__all__ = [
    "EventDispatcher",
    "EventDecodeError",
    "UNKNOWN_REASON",
    "coupon_notification",
    "knock_out_notification",
    "payment_notification",
]
