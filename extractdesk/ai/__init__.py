from extractdesk.ai.client_base import BaseAiClient
from extractdesk.ai.factory import AiServices, AiServicesFactory

__all__ = ["AiServices", "AiServicesFactory", "BaseAiClient"]
