#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Отправка сводки дашборда в Telegram
"""

import asyncio
import logging

from telegram import Bot, Message
from telegram.constants import ParseMode
from telegram.error import TelegramError
from telegram.helpers import escape_markdown

from parsers.dashboard_parser import TransactionSummary
from parsers.exceptions import DeliveryError


def format_summary_message(title: str, summary: TransactionSummary, updated_at: str) -> str:
    """Текст сводки в формате Markdown"""
    return f"""🔔 *{escape_markdown(title)} Dashboard Update*

📊 *Today's Transaction Summary*
💰 Payin Amount: {summary.payin}
💸 Payout Amount: {summary.payout}
📈 Total Volume: {summary.total_volume}

🕒 Updated at: {updated_at}"""


def format_error_message(error: str, occurred_at: str) -> str:
    return f"❌ Dashboard Monitor Error: {escape_markdown(error)}\n🕒 Time: {occurred_at}"


class TelegramNotifier:
    def __init__(self, token: str, chat_id: str):
        """Инициализация отправителя сообщений в чат chat_id"""
        self.token = token
        self.chat_id = chat_id
        self.logger = logging.getLogger(__name__)

    async def _send(self, text: str, parse_mode: str) -> Message:
        bot = Bot(token=self.token)
        async with bot:
            return await bot.send_message(chat_id=self.chat_id, text=text, parse_mode=parse_mode)

    def send_message(self, text: str, parse_mode: str = ParseMode.MARKDOWN) -> Message:
        """
        Отправка одного сообщения, без повторных попыток

        Raises:
            DeliveryError: Telegram не принял сообщение
        """
        self.logger.info("📤 Отправка сообщения в Telegram")
        try:
            message = asyncio.run(self._send(text, parse_mode))
        except TelegramError as e:
            self.logger.error(f"❌ Ошибка отправки в Telegram: {str(e)}")
            raise DeliveryError(f"Telegram failed: {str(e)}") from e

        self.logger.info("✅ Сообщение отправлено в Telegram")
        return message
