"""
Outbound integrations: mobile money providers.
"""

from .mobile_money import (
    MobileMoneyGateway, MobileMoneyProvider, ProviderResult, build_gateway, get_gateway_factory,
)

__all__ = [
    'MobileMoneyGateway', 'MobileMoneyProvider', 'ProviderResult',
    'build_gateway', 'get_gateway_factory',
]
