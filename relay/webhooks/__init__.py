"""
Webhook Processing

Signature verification, event decoding, normalization and fan-out.
"""

from .dispatcher import FanOutResult, Outcome, fan_out
from .events import HANDLED_EVENT_TYPES, StripeEvent, decode_event
from .normalizer import normalize
from .verification import authenticate, verify_signature

__all__ = [
    "HANDLED_EVENT_TYPES",
    "FanOutResult",
    "Outcome",
    "StripeEvent",
    "authenticate",
    "decode_event",
    "fan_out",
    "normalize",
    "verify_signature",
]
