from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Any

import httpx

from studio.domain.reminder_types import SendResult
from studio.metrics import timed_service


logger = logging.getLogger(__name__)

_NON_DIGITS = re.compile(r'\D')
DELIVERY_DISABLED_ERROR = 'WhatsApp delivery disabled'


@dataclass(frozen=True)
class WazzupConfig:
    api_key: str
    channel_id: str
    api_base: str = 'https://api.wazzup24.com'
    timeout_seconds: float = 10.0


def normalize_chat_id(address: str) -> str:
    return _NON_DIGITS.sub('', address or '')


def _response_body(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return response.text


class WazzupGateway:
    """Sends WhatsApp text messages through the Wazzup v3 message API."""

    def __init__(self, config: WazzupConfig, *, client: httpx.Client | None = None) -> None:
        self.config = config
        self._client = client

    def send(self, address: str, text: str) -> SendResult:
        if not self.config.api_key or not self.config.channel_id:
            logger.error('wazzup_credentials_missing')
            return SendResult(ok=False, error='Credentials missing')

        chat_id = normalize_chat_id(address)
        if not chat_id:
            return SendResult(ok=False, error='Invalid WhatsApp address')

        payload = {
            'channelId': self.config.channel_id,
            'chatType': 'whatsapp',
            'chatId': chat_id,
            'text': text,
        }
        headers = {'Authorization': f'Bearer {self.config.api_key}'}
        try:
            response = self._post('/v3/message', payload, headers)
        except httpx.HTTPError as exc:
            logger.warning('wazzup_send_transport_error chat_id=%s error=%s', chat_id, exc)
            return SendResult(ok=False, error=str(exc))

        body = _response_body(response)
        if response.status_code >= 300:
            logger.warning('wazzup_send_rejected chat_id=%s status_code=%s', chat_id, response.status_code)
            return SendResult(ok=False, error=body)
        return SendResult(ok=True, data=body)

    @timed_service('wazzup_send')
    def _post(self, path: str, payload: dict[str, Any], headers: dict[str, str]) -> httpx.Response:
        url = f"{self.config.api_base.rstrip('/')}{path}"
        if self._client is not None:
            return self._client.post(url, json=payload, headers=headers)
        with httpx.Client(timeout=self.config.timeout_seconds) as client:
            return client.post(url, json=payload, headers=headers)


class LogOnlyGateway:
    """Stand-in used when WhatsApp delivery is switched off.

    Nothing is delivered, so every send fails and lessons stay unmarked.
    """

    def send(self, address: str, text: str) -> SendResult:
        logger.info('whatsapp_delivery_disabled address=%s text=%s', address, text)
        return SendResult(ok=False, error=DELIVERY_DISABLED_ERROR)
