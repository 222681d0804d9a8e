"""
Outbound Collaborators

Stripe customer lookup, Gmail alerts and Airtable records.
"""

from .airtable import AirtableRecorder
from .base import CustomerLookup, FailedPayment, Notifier, Recorder
from .gmail import GmailNotifier
from .stripe import StripeClient

__all__ = [
    "AirtableRecorder",
    "CustomerLookup",
    "FailedPayment",
    "GmailNotifier",
    "Notifier",
    "Recorder",
    "StripeClient",
]
