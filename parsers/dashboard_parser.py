#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Парсер дашборда платёжной системы
Авторизация через cookies и получение сумм payin / payout
"""

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Dict, Optional

import requests

from .amount_extractor import (
    DEFAULT_CEILING,
    DEFAULT_LARGE_AMOUNT_FLOOR,
    Amount,
    calculate_total_volume,
    payin_extractor,
    payout_extractor,
)
from .cookie_store import CookieStore
from .exceptions import AuthenticationError, ExtractionError


@dataclass
class DashboardData:
    """Сырые ответы дашборда за один запуск (None если запрос не удался)"""

    payin_text: Optional[str] = None
    payout_text: Optional[str] = None
    dashboard_html: Optional[str] = None

    @property
    def is_empty(self) -> bool:
        return self.payin_text is None and self.payout_text is None and self.dashboard_html is None


@dataclass
class TransactionSummary:
    payin: Amount
    payout: Amount

    @property
    def total_volume(self) -> str:
        return calculate_total_volume(self.payin, self.payout)


class DashboardParser:
    def __init__(self, base_url: str, username: str, password: str, user_agent: str,
                 timeout: int = 30, ceiling: Decimal = DEFAULT_CEILING,
                 large_amount_floor: Decimal = DEFAULT_LARGE_AMOUNT_FLOOR,
                 session: requests.Session = None):
        """
        Инициализация парсера дашборда

        Args:
            base_url: Адрес сайта без /ssadmin
            username: Логин администратора
            password: Пароль администратора
            user_agent: User-Agent для запросов
            timeout: Таймаут каждого запроса в секундах
            ceiling: Максимальная допустимая сумма
            large_amount_floor: Порог для поиска "крупной" суммы
            session: Готовая сессия requests (для тестов)
        """
        self.admin_url = f"{base_url.rstrip('/')}/ssadmin"
        self.login_url = f"{self.admin_url}/auth/login"
        self.dashboard_url = f"{self.admin_url}/dashboard"
        self.payin_url = f"{self.admin_url}/remote/getDashboardPayinSummary"
        self.payout_url = f"{self.admin_url}/remote/getDashboardPayoutSummary"

        self.username = username
        self.password = password
        self.user_agent = user_agent
        self.timeout = timeout

        self.payin_extractor = payin_extractor(ceiling, large_amount_floor)
        self.payout_extractor = payout_extractor(ceiling, large_amount_floor)

        self.logger = logging.getLogger(__name__)

        # Cookies ведём сами в CookieStore, у сессии берём только соединения и заголовки
        self.session = session or requests.Session()
        self.session.headers.update({
            'User-Agent': self.user_agent,
            'Accept-Language': 'en-US,en;q=0.5',
        })

    def close(self):
        self.session.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    def _page_headers(self, cookies: CookieStore, referer: str = None) -> Dict[str, str]:
        headers = {
            'Accept': 'text/html,application/xhtml+xml,application/xml;q=0.9,image/webp,*/*;q=0.8',
            'Cookie': cookies.header(),
        }
        if referer:
            headers['Referer'] = referer
        return headers

    def _ajax_headers(self, cookies: CookieStore) -> Dict[str, str]:
        return {
            'Accept': 'application/json, text/javascript, */*; q=0.01',
            'X-Requested-With': 'XMLHttpRequest',
            'Referer': self.dashboard_url,
            'Cookie': cookies.header(),
            'DNT': '1',
        }

    def login(self) -> CookieStore:
        """
        Полный цикл авторизации: главная -> страница входа -> отправка формы -> дашборд

        Returns:
            CookieStore с накопленными cookies (может быть пустым)

        Raises:
            AuthenticationError: форма входа вернула не 2xx/3xx или запрос не прошёл
        """
        self.logger.info("🔐 Начинаю авторизацию на дашборде")
        cookies = CookieStore()

        try:
            self.logger.info("🌐 Шаг 1: получение начальной сессии")
            response = self.session.get(self.admin_url, headers=self._page_headers(cookies), timeout=self.timeout)
            cookies.absorb(response)
            self.logger.info(f"🍪 Начальные cookies: {len(cookies)}")

            self.logger.info("🔐 Шаг 2: страница входа")
            response = self.session.get(self.login_url, headers=self._page_headers(cookies), timeout=self.timeout)
            cookies.absorb(response)
            self.logger.info(f"🍪 После страницы входа: {len(cookies)}")

            self.logger.info("🔐 Шаг 3: отправка логина и пароля")
            headers = self._page_headers(cookies, referer=self.login_url)
            headers['Content-Type'] = 'application/x-www-form-urlencoded'
            response = self.session.post(
                self.login_url,
                data={'username': self.username, 'password': self.password},
                headers=headers,
                timeout=self.timeout,
                allow_redirects=False,
            )
            cookies.absorb(response)
            self.logger.info(f"🔐 Статус входа: {response.status_code}, cookies: {len(cookies)}")

            if not 200 <= response.status_code < 400:
                raise AuthenticationError(f"Login failed with status {response.status_code}")

            self.logger.info("🏠 Шаг 4: открываю дашборд")
            response = self.session.get(
                self.dashboard_url,
                headers=self._page_headers(cookies, referer=self.login_url),
                timeout=self.timeout,
            )
            cookies.absorb(response)
            self.logger.info(f"🏠 Статус дашборда: {response.status_code}, итого cookies: {len(cookies)}")

        except requests.exceptions.Timeout as e:
            raise AuthenticationError(f"Login request timed out: {str(e)}") from e
        except requests.exceptions.RequestException as e:
            raise AuthenticationError(f"Login request failed: {str(e)}") from e

        if not cookies:
            self.logger.warning("⚠️ После авторизации нет ни одной cookie, продолжаю без них")

        return cookies

    def _fetch(self, name: str, method: str, url: str, headers: Dict[str, str]) -> Optional[str]:
        """Один запрос за данными, ошибка не прерывает остальные"""
        try:
            self.logger.info(f"📊 {name}: {method} {url}")
            response = self.session.request(method, url, headers=headers, timeout=self.timeout,
                                            data='' if method == 'POST' else None)
            # Статус не проверяем, ответ разбирается как есть
            self.logger.info(f"📥 {name}: статус {response.status_code}, размер {len(response.text)} символов")
            self.logger.debug(f"{name} ответ: {response.text}")
            return response.text
        except requests.exceptions.Timeout:
            self.logger.warning(f"⏰ {name}: таймаут запроса")
        except requests.exceptions.RequestException as e:
            self.logger.warning(f"❌ {name}: ошибка запроса: {str(e)}")
        return None

    def fetch_dashboard_data(self, cookies: CookieStore) -> DashboardData:
        """
        Получение сводок payin / payout и HTML дашборда

        Raises:
            ExtractionError: не удалось получить ни одного ответа
        """
        self.logger.info("📊 Получаю данные дашборда")
        ajax = self._ajax_headers(cookies)
        ajax['Content-Type'] = 'application/x-www-form-urlencoded'

        data = DashboardData(
            payin_text=self._fetch("Payin Summary API", "POST", self.payin_url, ajax),
            payout_text=self._fetch("Payout Summary API", "POST", self.payout_url, ajax),
            dashboard_html=self._fetch("Dashboard Page", "GET", self.dashboard_url, self._ajax_headers(cookies)),
        )

        if data.is_empty:
            raise ExtractionError("No dashboard data could be fetched")
        return data

    def extract_summary(self, data: DashboardData) -> TransactionSummary:
        """Извлечение сумм: сначала ответ API, затем текст страницы дашборда"""
        payin = self.payin_extractor.extract(data.payin_text)
        if not payin.is_available and data.dashboard_html:
            payin = self.payin_extractor.extract(
                data.dashboard_html, rules=[self.payin_extractor.rule('labelled_text')])

        payout = self.payout_extractor.extract(data.payout_text)
        if not payout.is_available and data.dashboard_html:
            payout = self.payout_extractor.extract(
                data.dashboard_html, rules=[self.payout_extractor.rule('labelled_text')])

        self.logger.info(f"💰 Итоговый payin: {payin}")
        self.logger.info(f"💸 Итоговый payout: {payout}")
        return TransactionSummary(payin=payin, payout=payout)

    def get_summary(self) -> TransactionSummary:
        """Авторизация, загрузка и разбор сводки за один проход"""
        cookies = self.login()
        self.logger.info("✅ Авторизация завершена")
        data = self.fetch_dashboard_data(cookies)
        return self.extract_summary(data)
