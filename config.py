#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Настройки мониторинга дашборда
Значения берутся из окружения (сначала подгружается локальный .env),
у каждой настройки есть значение по умолчанию
"""

import os
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation

from dotenv import load_dotenv

load_dotenv()

USER_AGENT = "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"

DEFAULT_BASE_URL = "https://pay.onestopfashionhub.in"
DEFAULT_TITLE = "One Stop Fashion Hub"
DEFAULT_TIMEZONE = "Asia/Kolkata"
DEFAULT_REQUEST_TIMEOUT = 30
DEFAULT_AMOUNT_CEILING = Decimal("100000000")
DEFAULT_LARGE_AMOUNT_FLOOR = Decimal("1000")
DEFAULT_CHECK_INTERVAL = 300  # 5 минут


def env_str(name: str, default: str, *aliases: str) -> str:
    for key in (name,) + aliases:
        value = os.getenv(key)
        if value not in (None, ""):
            return value
    return default


def env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value in (None, ""):
        return default
    try:
        return int(value)
    except ValueError as exc:
        raise RuntimeError(f"Environment variable {name} must be an integer") from exc


def env_decimal(name: str, default: Decimal) -> Decimal:
    value = os.getenv(name)
    if value in (None, ""):
        return default
    try:
        number = Decimal(value.replace(",", "").strip())
    except InvalidOperation as exc:
        raise RuntimeError(f"Environment variable {name} must be a number") from exc
    if not number.is_finite():
        raise RuntimeError(f"Environment variable {name} must be a finite number")
    return number


def env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


@dataclass
class MonitorConfig:
    telegram_bot_token: str = "your_bot_token_here"
    telegram_chat_id: str = "your_chat_id_here"
    username: str = "admin"
    password: str = ""
    base_url: str = DEFAULT_BASE_URL
    dashboard_title: str = DEFAULT_TITLE
    timezone_name: str = DEFAULT_TIMEZONE
    request_timeout: int = DEFAULT_REQUEST_TIMEOUT
    amount_ceiling: Decimal = DEFAULT_AMOUNT_CEILING
    large_amount_floor: Decimal = DEFAULT_LARGE_AMOUNT_FLOOR
    check_interval: int = DEFAULT_CHECK_INTERVAL
    user_agent: str = USER_AGENT
    debug_mode: bool = False


def load_config() -> MonitorConfig:
    """Собирает MonitorConfig из переменных окружения"""
    request_timeout = env_int("REQUEST_TIMEOUT", DEFAULT_REQUEST_TIMEOUT)
    if request_timeout <= 0:
        raise RuntimeError("REQUEST_TIMEOUT must be positive")

    amount_ceiling = env_decimal("AMOUNT_CEILING", DEFAULT_AMOUNT_CEILING)
    if amount_ceiling <= 0:
        raise RuntimeError("AMOUNT_CEILING must be positive")

    return MonitorConfig(
        telegram_bot_token=env_str("TELEGRAM_BOT_TOKEN", "your_bot_token_here"),
        telegram_chat_id=env_str("TELEGRAM_CHAT_ID", "your_chat_id_here"),
        username=env_str("DASHBOARD_USERNAME", "admin", "USERNAME"),
        password=env_str("DASHBOARD_PASSWORD", "", "PASSWORD"),
        base_url=env_str("DASHBOARD_BASE_URL", DEFAULT_BASE_URL),
        dashboard_title=env_str("DASHBOARD_TITLE", DEFAULT_TITLE),
        timezone_name=env_str("MONITOR_TIMEZONE", DEFAULT_TIMEZONE),
        request_timeout=request_timeout,
        amount_ceiling=amount_ceiling,
        large_amount_floor=env_decimal("LARGE_AMOUNT_FLOOR", DEFAULT_LARGE_AMOUNT_FLOOR),
        check_interval=env_int("CHECK_INTERVAL", DEFAULT_CHECK_INTERVAL),
        user_agent=env_str("USER_AGENT", USER_AGENT),
        debug_mode=env_bool("DEBUG_MODE", False),
    )
