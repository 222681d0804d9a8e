"""Gmail notifier - sends failed-payment alerts through the Gmail API."""

import base64
import html
import logging
from email.mime.text import MIMEText

import httpx

from relay.auth.google import GoogleOAuth, TokenData
from relay.config import Settings
from relay.errors import NotifierFailed, parse_google_error

from .base import FailedPayment, Notifier

logger = logging.getLogger(__name__)

GMAIL_API = "https://gmail.googleapis.com/gmail/v1"


def build_subject(payment: FailedPayment) -> str:
    return f"Payment failed: {payment.display_amount} ({payment.customer_email})"


def build_html_body(payment: FailedPayment) -> str:
    """Render the alert as a small HTML table."""
    rows = [
        ("Payment ID", payment.payment_id),
        ("Customer Email", payment.customer_email),
        ("Customer ID", payment.customer_id or "N/A"),
        ("Amount", payment.display_amount),
        ("Failure Reason", payment.failure_reason),
        ("Failure Date", payment.failure_date.strftime("%Y-%m-%d %H:%M:%S UTC")),
    ]
    cells = "\n".join(
        f'    <tr><td style="padding:4px 12px;font-weight:bold">{html.escape(label)}</td>'
        f'<td style="padding:4px 12px">{html.escape(value)}</td></tr>'
        for label, value in rows
    )
    return (
        "<html><body>\n"
        '  <h2 style="color:#c0392b">Payment Failed</h2>\n'
        "  <p>A customer payment has failed and needs attention.</p>\n"
        '  <table style="border-collapse:collapse">\n'
        f"{cells}\n"
        "  </table>\n"
        "</body></html>"
    )


def build_raw_message(sender: str, to: str, subject: str, html_body: str) -> str:
    """Build a base64url encoded raw MIME message for the Gmail API."""
    msg = MIMEText(html_body, "html", "utf-8")
    msg["from"] = sender
    msg["to"] = to
    msg["subject"] = subject

    return base64.urlsafe_b64encode(msg.as_bytes()).decode("utf-8")


class GmailNotifier(Notifier):
    """Sends alerts as the configured Gmail account. Caches the OAuth access token."""

    def __init__(
        self,
        settings: Settings,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.settings = settings
        self.timeout = timeout
        self._transport = transport
        self._oauth = GoogleOAuth(settings, transport=transport)
        self._cached_token: TokenData | None = None

    @property
    def name(self) -> str:
        return "gmail"

    async def _get_access_token(self) -> str:
        """Get a valid access token, refreshing if needed."""
        if self._cached_token is None or self._oauth.is_token_expired(self._cached_token):
            try:
                self._cached_token = await self._oauth.refresh_token(self.settings.google_refresh_token)
            except httpx.HTTPStatusError as e:
                raise NotifierFailed(
                    f"Google token refresh failed: {parse_google_error(e.response.text)}"
                ) from e
        return self._cached_token.access_token

    async def _post_send(self, client: httpx.AsyncClient, raw: str) -> httpx.Response:
        token = await self._get_access_token()
        return await client.post(
            f"{GMAIL_API}/users/me/messages/send",
            json={"raw": raw},
            headers={"Authorization": f"Bearer {token}"},
        )

    async def send(self, to: str, subject: str, html_body: str) -> str:
        if not self.settings.gmail_configured:
            raise NotifierFailed("Gmail credentials not configured")

        raw = build_raw_message(self.settings.gmail_sender, to, subject, html_body)

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await self._post_send(client, raw)
                if response.status_code == 401:
                    self._cached_token = None
                    response = await self._post_send(client, raw)
        except httpx.HTTPError as e:
            raise NotifierFailed(f"Gmail request failed: {e}") from e

        if not response.is_success:
            raise NotifierFailed(f"Gmail API error: {parse_google_error(response.text)}")

        message_id = response.json().get("id", "")
        logger.info(f"Alert email sent to {to}: {message_id}")
        return message_id

    async def notify(self, payment: FailedPayment) -> str:
        return await self.send(
            self.settings.alert_recipient,
            build_subject(payment),
            build_html_body(payment),
        )
