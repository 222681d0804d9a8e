"""Fan-out of a canonical record to the notifier and recorder.

Both collaborators run as concurrent tasks, each bounded by a timeout. A failure
or timeout in one never cancels the other; both outcomes are captured before
the caller decides what to log.
"""

import asyncio
import logging
from typing import Awaitable

from pydantic import BaseModel

from relay.providers.base import FailedPayment, Notifier, Recorder

logger = logging.getLogger(__name__)


class Outcome(BaseModel):
    ok: bool
    detail: str = ""  # message/record id on success, error text on failure


class FanOutResult(BaseModel):
    payment_id: str
    notifier: Outcome
    recorder: Outcome

    @property
    def ok(self) -> bool:
        return self.notifier.ok and self.recorder.ok


async def _guarded(label: str, payment_id: str, call: Awaitable[str], timeout: float) -> Outcome:
    try:
        detail = await asyncio.wait_for(call, timeout=timeout)
    except asyncio.TimeoutError:
        logger.error(f"{label} timed out after {timeout}s for {payment_id}")
        return Outcome(ok=False, detail=f"timed out after {timeout}s")
    except Exception as e:
        logger.error(f"{label} failed for {payment_id}: {e}")
        return Outcome(ok=False, detail=str(e))
    return Outcome(ok=True, detail=detail or "")


async def fan_out(
    payment: FailedPayment,
    notifier: Notifier,
    recorder: Recorder,
    timeout: float = 10.0,
) -> FanOutResult:
    """Send the alert and create the record for ``payment`` concurrently."""
    notified, recorded = await asyncio.gather(
        _guarded(f"Notifier ({notifier.name})", payment.payment_id, notifier.notify(payment), timeout),
        _guarded(f"Recorder ({recorder.name})", payment.payment_id, recorder.record(payment), timeout),
    )
    result = FanOutResult(payment_id=payment.payment_id, notifier=notified, recorder=recorded)

    if result.ok:
        logger.info(f"Processed failed payment {payment.payment_id} ({payment.display_amount})")
    return result
