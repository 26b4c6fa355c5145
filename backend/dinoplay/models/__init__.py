from .auth import User, UserRole, SessionToken
from .daily_config import DailyConfig, CustomProduct
from .settlements import Settlement, SettlementProduct, Checklist

__all__ = [
    'User', 'UserRole', 'SessionToken',
    'DailyConfig', 'CustomProduct',
    'Settlement', 'SettlementProduct', 'Checklist',
]
