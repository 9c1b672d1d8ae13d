from studio.communication.client_factory import build_messaging_gateway
from studio.communication.whatsapp import LogOnlyGateway, WazzupConfig, WazzupGateway

__all__ = ["LogOnlyGateway", "WazzupConfig", "WazzupGateway", "build_messaging_gateway"]
