from __future__ import annotations

import base64
import binascii
import hmac
from dataclasses import dataclass
from typing import Optional

from quizgate.utils.hash import hmac_sha256_hex
from quizgate.utils.helpers import Clock, epoch_millis, utc_now

PASSED_MARKER = "passed"


@dataclass
class TokenClaims:
    identity: str
    issued_at: int
    verdict: str
    signed: bool


class TokenIssuer:
    """
    Issues the course access token after a passing quiz.

    Without a secret the token is base64("<identity>:<epoch ms>:passed"),
    which anyone can forge. With a secret an HMAC-SHA256 tag is appended
    before encoding and `inspect` rejects tokens whose tag does not match.
    """

    def __init__(self, secret: Optional[str] = None, clock: Clock = utc_now) -> None:
        self._secret = secret
        self._clock = clock

    @property
    def signed(self) -> bool:
        return bool(self._secret)

    def issue(self, identity: str, passed: bool = True) -> str:
        if not passed:
            raise ValueError("tokens are only issued for a passing verdict")
        payload = f"{identity}:{epoch_millis(self._clock)}:{PASSED_MARKER}"
        if self._secret:
            payload = f"{payload}:{hmac_sha256_hex(self._secret, payload)}"
        return base64.b64encode(payload.encode("utf-8")).decode("ascii")

    def inspect(self, token: str) -> Optional[TokenClaims]:
        """Decode a token; None when it is malformed or its signature is wrong."""
        try:
            text = base64.b64decode(token.encode("ascii"), validate=True).decode("utf-8")
        except (binascii.Error, UnicodeError, ValueError):
            return None

        tag = None
        if self._secret:
            text, sep, tag = text.rpartition(":")
            if not sep:
                return None
            expected = hmac_sha256_hex(self._secret, text)
            if not hmac.compare_digest(expected.encode("utf-8"), tag.encode("utf-8")):
                return None

        # identity may itself contain ':', so split from the right
        parts = text.rsplit(":", 2)
        if len(parts) != 3:
            return None
        identity, issued, verdict = parts
        if verdict != PASSED_MARKER or not issued.isdigit():
            return None
        return TokenClaims(identity=identity, issued_at=int(issued), verdict=verdict, signed=tag is not None)
