from __future__ import annotations

import logging

from studio.communication.whatsapp import LogOnlyGateway, WazzupConfig, WazzupGateway
from studio.config import Settings
from studio.domain.reminder_types import MessagingGateway


logger = logging.getLogger(__name__)


def build_messaging_gateway(config: Settings) -> MessagingGateway:
    if not config.enable_whatsapp_reminders:
        logger.info("messaging_gateway_selected", extra={"gateway": "log_only"})
        return LogOnlyGateway()
    logger.info("messaging_gateway_selected", extra={"gateway": "wazzup", "api_base": config.wazzup_api_base})
    return WazzupGateway(
        WazzupConfig(
            api_key=config.wazzup_api_key,
            channel_id=config.wazzup_channel_id,
            api_base=config.wazzup_api_base,
            timeout_seconds=config.wazzup_timeout_seconds,
        )
    )
