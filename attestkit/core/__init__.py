"""
Downstream services that consume the resolved configuration.
"""

from .tx_service import TxServiceClient, TxServiceError

__all__ = ["TxServiceClient", "TxServiceError"]
