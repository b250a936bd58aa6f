"""
Ошибки мониторинга дашборда
"""


class MonitorError(Exception):
    """Базовая ошибка одного запуска мониторинга"""


class AuthenticationError(MonitorError):
    """Не удалось авторизоваться на дашборде"""


class ExtractionError(MonitorError):
    """Не удалось получить данные с дашборда"""


class DeliveryError(MonitorError):
    """Не удалось доставить сообщение в Telegram"""
