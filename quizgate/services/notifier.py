from __future__ import annotations

import html

import httpx
from loguru import logger

from quizgate.core.config import Settings
from quizgate.core.errors import NotConfigured, UpstreamUnavailable

SUBJECT = "Your NUC7 course access quiz"


def invitation_link(settings: Settings, email: str) -> str:
    return str(httpx.URL(settings.QUIZ_URL, params={"email": email}))


def render_invitation(link: str, threshold: int, size: int) -> str:
    return (
        "<p>Thanks for registering.</p>"
        f'<p>Pass the entry quiz to unlock the course: <a href="{html.escape(link)}">{html.escape(link)}</a></p>'
        f"<p>You need {threshold} correct answers out of {size}.</p>"
    )


class EmailNotifier:
    """Sends the quiz invitation through an HTTP email API (Resend-compatible)."""

    def __init__(self, settings: Settings, client: httpx.AsyncClient) -> None:
        self._settings = settings
        self._client = client

    async def send_invitation(self, email: str) -> None:
        if not self._settings.EMAIL_API_KEY:
            raise NotConfigured("Email delivery is not configured")

        link = invitation_link(self._settings, email)
        payload = {
            "from": self._settings.EMAIL_FROM,
            "to": [email],
            "subject": SUBJECT,
            "html": render_invitation(link, self._settings.PASS_THRESHOLD, self._settings.QUIZ_SIZE),
        }
        try:
            resp = await self._client.post(
                self._settings.EMAIL_API_URL,
                json=payload,
                headers={"Authorization": f"Bearer {self._settings.EMAIL_API_KEY}"},
            )
        except httpx.HTTPError as e:
            logger.warning("Email API request failed: {}", type(e).__name__)
            raise UpstreamUnavailable("Email service is unreachable") from None
        if resp.status_code >= 300:
            logger.warning("Email API answered {}", resp.status_code)
            raise UpstreamUnavailable(f"Email service returned status {resp.status_code}")
        logger.info("Invitation sent to {}", email)
