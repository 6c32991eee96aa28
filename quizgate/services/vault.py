from __future__ import annotations

import json
from typing import List

import httpx
from loguru import logger
from pydantic import TypeAdapter, ValidationError

from quizgate.core.config import Settings
from quizgate.core.errors import NotConfigured, UpstreamUnavailable
from quizgate.schemas import Question

_BANK_ADAPTER = TypeAdapter(List[Question])


class VaultClient:
    """
    Read-only access to the private content repository through the GitHub
    contents API. Nothing is cached: every call goes to the vault.
    """

    def __init__(self, settings: Settings, client: httpx.AsyncClient) -> None:
        self._settings = settings
        self._client = client

    def _resource_url(self, resource: str) -> str:
        if not self._settings.VAULT_TOKEN or not self._settings.VAULT_REPO:
            raise NotConfigured("Vault access is not configured")
        base = self._settings.VAULT_API_URL.rstrip("/")
        return f"{base}/repos/{self._settings.VAULT_REPO}/contents/{resource.lstrip('/')}"

    async def get(self, resource: str) -> bytes:
        url = self._resource_url(resource)
        headers = {
            "Authorization": f"token {self._settings.VAULT_TOKEN}",
            "Accept": "application/vnd.github.v3.raw",
        }
        try:
            resp = await self._client.get(url, headers=headers)
        except httpx.HTTPError as e:
            # str(e) can embed the request; keep only the exception type
            logger.warning("Vault request for {} failed: {}", resource, type(e).__name__)
            raise UpstreamUnavailable("Vault is unreachable") from None
        if resp.status_code != 200:
            logger.warning("Vault answered {} for {}", resp.status_code, resource)
            raise UpstreamUnavailable(f"Vault returned status {resp.status_code}")
        return resp.content

    async def question_bank(self) -> List[Question]:
        raw = await self.get(self._settings.VAULT_QUESTIONS_PATH)
        try:
            return _BANK_ADAPTER.validate_python(json.loads(raw))
        except (ValueError, ValidationError):
            logger.exception("Vault question bank is malformed")
            raise UpstreamUnavailable("Vault returned a malformed question bank") from None

    async def admin_hash(self) -> str:
        raw = await self.get(self._settings.VAULT_ADMIN_HASH_PATH)
        try:
            value = raw.decode("utf-8").strip()
        except UnicodeDecodeError:
            raise UpstreamUnavailable("Vault returned a malformed credential") from None
        if not value:
            raise UpstreamUnavailable("Vault returned an empty credential")
        return value
