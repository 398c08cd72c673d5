"""ORM models used by the application infrastructure."""

from .investment import InvestmentModel
from .pending_investment import PendingInvestmentModel
from .transaction import TransactionModel
from .user import UserModel
from .withdrawal_request import WithdrawalRequestModel

__all__ = [
    "InvestmentModel",
    "PendingInvestmentModel",
    "TransactionModel",
    "UserModel",
    "WithdrawalRequestModel",
]
