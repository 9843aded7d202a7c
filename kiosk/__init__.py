"""
kiosk — point-of-sale kiosk client.

    from kiosk import cart as K      # Cart snapshots, orders, stock checks
    from kiosk import channel as CH  # Reconnecting push channel
    from kiosk import session as S   # Payment session coordinator
    from kiosk import timer as T     # Delayed calls and the deadline timer
"""

from kiosk import timer
from kiosk import cart
from kiosk import catalog
from kiosk import channel
from kiosk import api
from kiosk import session
from kiosk import messages
from kiosk._types import (
    Lazy,
    PaymentStatus,
)
from kiosk.config import Settings, configure_logging
from kiosk.navigation import Route, Navigator
from kiosk.client import Kiosk

__version__ = "0.1.0"

__all__ = (
    "timer",
    "cart",
    "catalog",
    "channel",
    "api",
    "session",
    "messages",
    "Lazy",
    "PaymentStatus",
    "Settings",
    "configure_logging",
    "Route",
    "Navigator",
    "Kiosk",
)
