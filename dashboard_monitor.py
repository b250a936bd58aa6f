#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Мониторинг дашборда: один запуск = авторизация, сбор сумм, отправка в Telegram
Ответ запуска: {success, message?, error?, timestamp, data?} со статусом 200 или 500
"""

import json
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Callable, Dict, Optional, Tuple

import pytz

from config import MonitorConfig, load_config
from notifier import TelegramNotifier, format_error_message, format_summary_message
from parsers.dashboard_parser import DashboardParser, TransactionSummary
from parsers.exceptions import AuthenticationError, DeliveryError, ExtractionError, MonitorError


class FailureKind(str, Enum):
    AUTHENTICATION = "authentication"
    EXTRACTION = "extraction"
    DELIVERY = "delivery"
    CONFIGURATION = "configuration"
    UNEXPECTED = "unexpected"


FAILURE_KINDS = {
    AuthenticationError: FailureKind.AUTHENTICATION,
    ExtractionError: FailureKind.EXTRACTION,
    DeliveryError: FailureKind.DELIVERY,
}


@dataclass
class MonitorResult:
    success: bool
    timestamp: str
    message: Optional[str] = None
    error: Optional[str] = None
    failure: Optional[FailureKind] = None
    data: Optional[Dict[str, str]] = None

    @property
    def status_code(self) -> int:
        return 200 if self.success else 500

    def to_body(self) -> Dict:
        body = {'success': self.success}
        if self.message is not None:
            body['message'] = self.message
        if self.error is not None:
            body['error'] = self.error
        body['timestamp'] = self.timestamp
        if self.data is not None:
            body['data'] = self.data
        return body


def utc_timestamp(now: datetime) -> str:
    """ISO-8601 в UTC с миллисекундами: 2026-10-19T09:30:00.000Z"""
    return now.astimezone(timezone.utc).isoformat(timespec='milliseconds').replace('+00:00', 'Z')


def format_local_time(now: datetime, timezone_name: str) -> str:
    """Локальное время для сообщений: 19/10/2026, 03:00:00 pm"""
    local = now.astimezone(pytz.timezone(timezone_name))
    return local.strftime('%d/%m/%Y, %I:%M:%S %p').lower()


def setup_logging(debug: bool = False):
    logging.basicConfig(
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        level=logging.DEBUG if debug else logging.INFO
    )


class DashboardMonitor:
    def __init__(self, config: MonitorConfig = None, parser: DashboardParser = None,
                 notifier: TelegramNotifier = None, clock: Callable[[], datetime] = None):
        """
        Инициализация монитора

        Args:
            config: Настройки (по умолчанию из окружения)
            parser: Парсер дашборда, иначе создаётся новый на каждый запуск
            notifier: Отправитель в Telegram
            clock: Источник текущего времени (aware datetime)
        """
        self.config = config or load_config()
        self.parser = parser
        self.notifier = notifier or TelegramNotifier(self.config.telegram_bot_token, self.config.telegram_chat_id)
        self.clock = clock or (lambda: datetime.now(timezone.utc))
        self.logger = logging.getLogger(__name__)

    def _new_parser(self) -> DashboardParser:
        return DashboardParser(
            base_url=self.config.base_url,
            username=self.config.username,
            password=self.config.password,
            user_agent=self.config.user_agent,
            timeout=self.config.request_timeout,
            ceiling=self.config.amount_ceiling,
            large_amount_floor=self.config.large_amount_floor,
        )

    def _collect_summary(self) -> TransactionSummary:
        if self.parser is not None:
            return self.parser.get_summary()
        with self._new_parser() as parser:
            return parser.get_summary()

    def run(self) -> MonitorResult:
        """Один полный запуск мониторинга"""
        now = self.clock()
        local_time = format_local_time(now, self.config.timezone_name)
        self.logger.info(f"🚀 Запуск мониторинга дашборда ({local_time})")

        try:
            summary = self._collect_summary()
            message = format_summary_message(self.config.dashboard_title, summary, local_time)
            self.notifier.send_message(message)
        except MonitorError as e:
            kind = FAILURE_KINDS.get(type(e), FailureKind.UNEXPECTED)
            return self._fail(kind, str(e), now, local_time)
        except Exception as e:
            self.logger.exception("Непредвиденная ошибка мониторинга")
            return self._fail(FailureKind.UNEXPECTED, str(e), now, local_time)

        self.logger.info("✅ Мониторинг успешно завершён")
        return MonitorResult(
            success=True,
            message='Dashboard monitor executed successfully',
            timestamp=utc_timestamp(now),
            data={
                'payin': str(summary.payin),
                'payout': str(summary.payout),
                'totalVolume': summary.total_volume,
                'lastUpdated': local_time,
            },
        )

    def _fail(self, kind: FailureKind, error: str, now: datetime, local_time: str) -> MonitorResult:
        """Логирование ошибки и попытка сообщить о ней в тот же чат"""
        self.logger.error(f"❌ Ошибка ({kind.value}): {error}")

        try:
            self.notifier.send_message(format_error_message(error, local_time))
        except Exception as notify_error:
            self.logger.error(f"Не удалось отправить уведомление об ошибке: {str(notify_error)}")

        return MonitorResult(success=False, error=error, failure=kind, timestamp=utc_timestamp(now))


def _startup_failure(kind: FailureKind, error: Exception) -> Tuple[int, Dict]:
    """Ответ, когда до запуска мониторинга дело не дошло"""
    result = MonitorResult(success=False, error=str(error), failure=kind,
                           timestamp=utc_timestamp(datetime.now(timezone.utc)))
    return result.status_code, result.to_body()


def handler(trigger: str = None, config: MonitorConfig = None) -> Tuple[int, Dict]:
    """
    Точка входа для планировщика или serverless функции

    Returns:
        (HTTP статус, тело ответа)
    """
    logger = logging.getLogger(__name__)

    try:
        config = config or load_config()
    except RuntimeError as e:
        setup_logging()
        logger.error(f"❌ Ошибка конфигурации: {str(e)}")
        return _startup_failure(FailureKind.CONFIGURATION, e)

    setup_logging(config.debug_mode)
    logger.info(f"🔔 Запуск по триггеру: {trigger or 'manual'}")

    try:
        monitor = DashboardMonitor(config)
    except Exception as e:
        logger.exception("Не удалось создать монитор")
        return _startup_failure(FailureKind.UNEXPECTED, e)

    result = monitor.run()
    return result.status_code, result.to_body()


def application(environ, start_response):
    """WSGI приложение: каждый HTTP запрос запускает мониторинг один раз"""
    status_code, body = handler(trigger=f"http {environ.get('REQUEST_METHOD', 'GET')}")
    payload = json.dumps(body, ensure_ascii=False).encode('utf-8')
    status = '200 OK' if status_code == 200 else '500 Internal Server Error'
    start_response(status, [
        ('Content-Type', 'application/json; charset=utf-8'),
        ('Content-Length', str(len(payload))),
    ])
    return [payload]
