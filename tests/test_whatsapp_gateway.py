import json
import logging
from unittest.mock import patch

import httpx

from studio.communication.client_factory import build_messaging_gateway
from studio.communication.whatsapp import LogOnlyGateway, WazzupConfig, WazzupGateway, normalize_chat_id
from studio.config import Settings, settings


def _gateway(handler, **config):
    cfg = WazzupConfig(api_key=config.get('api_key', 'key-1'), channel_id=config.get('channel_id', 'chan-1'))
    client = httpx.Client(transport=httpx.MockTransport(handler))
    return WazzupGateway(cfg, client=client)


def test_send_posts_wazzup_payload():
    captured = {}

    def handler(request: httpx.Request) -> httpx.Response:
        captured['url'] = str(request.url)
        captured['auth'] = request.headers.get('authorization')
        captured['body'] = json.loads(request.content)
        return httpx.Response(201, json={'messageId': 'm-1'})

    result = _gateway(handler).send('+7 (900) 000-00-01', 'Hello Anna!')

    assert result.ok is True
    assert result.data == {'messageId': 'm-1'}
    assert captured['url'] == 'https://api.wazzup24.com/v3/message'
    assert captured['auth'] == 'Bearer key-1'
    assert captured['body'] == {
        'channelId': 'chan-1',
        'chatType': 'whatsapp',
        'chatId': '79000000001',
        'text': 'Hello Anna!',
    }


def test_rejected_send_returns_response_body_as_error():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(400, json={'error': 'INVALID_CHAT_ID'})

    result = _gateway(handler).send('79000000001', 'hi')

    assert result.ok is False
    assert result.error == {'error': 'INVALID_CHAT_ID'}


def test_non_json_error_body_is_kept_as_text():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(502, text='Bad Gateway')

    result = _gateway(handler).send('79000000001', 'hi')

    assert result.ok is False
    assert result.error == 'Bad Gateway'


def test_transport_error_is_a_failed_result():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectTimeout('timed out', request=request)

    result = _gateway(handler).send('79000000001', 'hi')

    assert result.ok is False
    assert 'timed out' in result.error


def test_missing_credentials_skip_network():
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(200, json={})

    result = _gateway(handler, api_key='').send('79000000001', 'hi')

    assert result.ok is False
    assert result.error == 'Credentials missing'
    assert calls == []


def test_address_without_digits_is_rejected():
    def handler(request: httpx.Request) -> httpx.Response:
        raise AssertionError('should not be called')

    result = _gateway(handler).send('whatsapp:none', 'hi')

    assert result.ok is False


def test_normalize_chat_id_strips_formatting():
    assert normalize_chat_id('+1 (555) 010-2030') == '15550102030'
    assert normalize_chat_id('') == ''


def test_factory_selects_gateway_from_settings():
    disabled = build_messaging_gateway(Settings(enable_whatsapp_reminders=False))
    assert isinstance(disabled, LogOnlyGateway)
    disabled_result = disabled.send('123', 'hi')
    assert disabled_result.ok is False
    assert disabled_result.error == 'WhatsApp delivery disabled'

    enabled = build_messaging_gateway(
        Settings(enable_whatsapp_reminders=True, wazzup_api_key='k', wazzup_channel_id='c', wazzup_timeout_seconds=3)
    )
    assert isinstance(enabled, WazzupGateway)
    assert enabled.config == WazzupConfig(api_key='k', channel_id='c', api_base='https://api.wazzup24.com', timeout_seconds=3)


def test_slow_send_is_logged_by_service_timer(caplog):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={})

    with patch.object(settings, 'metrics_slow_ms', 0), caplog.at_level(logging.INFO, logger='studio.metrics'):
        _gateway(handler).send('79000000001', 'hi')

    assert any('service_timer label=wazzup_send' in message for message in caplog.messages)
