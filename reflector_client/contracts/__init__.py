from .base import ContractFacade
from .dao import DAOClient, DAOConfig
from .oracle import OracleClient, OracleConfig, OracleVersion
from .subscriptions import CreateSubscription, SubscriptionsClient

__all__ = [
    "ContractFacade",
    "CreateSubscription",
    "DAOClient",
    "DAOConfig",
    "OracleClient",
    "OracleConfig",
    "OracleVersion",
    "SubscriptionsClient",
]
