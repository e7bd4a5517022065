"""Remote account API gateways."""
from .base import Gateway, PhotoFile, SessionContext
from .http import HttpGateway
from .memory import MemoryGateway

__all__ = ["Gateway", "PhotoFile", "SessionContext", "HttpGateway", "MemoryGateway"]
