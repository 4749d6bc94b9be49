from .user import User
from .token import Token
from .transaction import Transaction

__all__ = ["User", "Token", "Transaction"]
