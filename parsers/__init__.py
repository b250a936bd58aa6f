"""
Пакет парсеров дашборда платёжной системы
"""

from .amount_extractor import Amount, AmountExtractor, ExtractionRule, calculate_total_volume
from .cookie_store import CookieStore
from .dashboard_parser import DashboardData, DashboardParser, TransactionSummary
from .exceptions import AuthenticationError, DeliveryError, ExtractionError, MonitorError

__all__ = [
    'Amount', 'AmountExtractor', 'ExtractionRule', 'calculate_total_volume',
    'CookieStore',
    'DashboardData', 'DashboardParser', 'TransactionSummary',
    'AuthenticationError', 'DeliveryError', 'ExtractionError', 'MonitorError',
]
