#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Запуск мониторинга дашборда из командной строки
По умолчанию один запуск, с --loop повтор каждые CHECK_INTERVAL секунд
"""

import argparse
import json
import logging
import sys
import time

from config import load_config
from dashboard_monitor import DashboardMonitor, setup_logging


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Dashboard Monitor: payin / payout в Telegram")
    mode = parser.add_mutually_exclusive_group()
    mode.add_argument("--once", action="store_true", help="один запуск и выход (по умолчанию)")
    mode.add_argument("--loop", action="store_true", help="периодический запуск")
    parser.add_argument("--interval", type=int, default=None, help="интервал в секундах для --loop")
    return parser.parse_args(argv)


def run_loop(monitor: DashboardMonitor, interval: int):
    """Запуски один за другим, пауза interval секунд между ними"""
    logger = logging.getLogger(__name__)
    while True:
        logger.info("🔄 Запуск автоматической проверки...")
        result = monitor.run()
        if result.success:
            logger.info(f"✅ Проверка прошла, следующая через {interval} сек")
        else:
            logger.error(f"❌ Проверка не удалась: {result.error}")
        time.sleep(interval)


def main(argv=None) -> int:
    """Главная функция запуска"""
    args = parse_args(argv)

    try:
        config = load_config()
    except RuntimeError as e:
        print(f"❌ Ошибка конфигурации: {str(e)}")
        return 2

    setup_logging(config.debug_mode)
    monitor = DashboardMonitor(config)

    if not args.loop:
        result = monitor.run()
        print(json.dumps(result.to_body(), ensure_ascii=False, indent=2))
        return 0 if result.success else 1

    interval = args.interval if args.interval is not None else config.check_interval
    if interval <= 0:
        print("❌ Интервал должен быть положительным")
        return 2

    print("🚀 Запуск Dashboard Monitor")
    print("=" * 60)
    print(f"• Дашборд: {config.base_url}")
    print(f"• Интервал: {interval} секунд")
    print("=" * 60)

    try:
        run_loop(monitor, interval)
    except KeyboardInterrupt:
        print("\n🛑 Остановка мониторинга пользователем")
    return 0


if __name__ == "__main__":
    sys.exit(main())
