#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Извлечение сумм (payin / payout) из HTML и JSON ответов дашборда
Правила перебираются по порядку, побеждает первая корректная сумма
"""

import logging
import re
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Iterator, List, Optional, Sequence, Union

from bs4 import BeautifulSoup

NOT_AVAILABLE = "N/A"
CURRENCY_PREFIX = "Rs"

DEFAULT_CEILING = Decimal("100000000")
DEFAULT_LARGE_AMOUNT_FLOOR = Decimal("1000")

PAYIN_LABEL = "Total Payin Amount"
PAYOUT_LABEL = "Total Payout Amount"

# "Rs" не должен быть хвостом слова (Hours 12)
CURRENCY = r"(?:(?<![A-Za-z])(?:Rs\.?|INR)|₹)"
NUMBER = r"(\d[\d,]*(?:\.\d+)?)"
CELL = r'<td class="text-center">\s*' + CURRENCY + r"\s*" + NUMBER + r"\s*</td>"

TWO_PLACES = Decimal("0.01")


def group_indian(digits: str) -> str:
    """Группировка разрядов по-индийски: 12345678 -> 1,23,45,678"""
    if len(digits) <= 3:
        return digits
    head, tail = digits[:-3], digits[-3:]
    groups = []
    while len(head) > 2:
        groups.insert(0, head[-2:])
        head = head[:-2]
    if head:
        groups.insert(0, head)
    return ",".join(groups + [tail])


def format_amount(value: Decimal) -> str:
    """Decimal -> 'Rs 1,500.00'"""
    rounded = value.quantize(TWO_PLACES, rounding=ROUND_HALF_UP)
    sign = "-" if rounded < 0 else ""
    integer, fraction = f"{abs(rounded):.2f}".split(".")
    return f"{CURRENCY_PREFIX} {sign}{group_indian(integer)}.{fraction}"


def parse_amount_value(raw: str, ceiling: Decimal = DEFAULT_CEILING) -> Optional[Decimal]:
    """
    Очистка сырой суммы и проверка на разумность

    Returns:
        Decimal если сумма положительная и не больше ceiling, иначе None
    """
    if not raw or not isinstance(raw, str):
        return None

    # Оставляем только цифры, запятые, точки и минус, затем убираем запятые
    cleaned = re.sub(r"[^\d,.-]", "", raw).replace(",", "")
    try:
        value = Decimal(cleaned)
    except InvalidOperation:
        return None

    if not value.is_finite() or value <= 0 or value > ceiling:
        return None
    return value


@dataclass(frozen=True)
class Amount:
    """Сумма в рупиях или 'N/A', если её не удалось получить"""

    value: Optional[Decimal] = None

    @property
    def is_available(self) -> bool:
        return self.value is not None

    def __str__(self) -> str:
        return format_amount(self.value) if self.value is not None else NOT_AVAILABLE


def extract_numeric_value(amount: Union[Amount, str, None]) -> Decimal:
    """Числовое значение суммы, 'N/A' и мусор дают 0"""
    if isinstance(amount, Amount):
        return amount.value if amount.value is not None else Decimal("0")
    if not amount or amount == NOT_AVAILABLE:
        return Decimal("0")

    text = re.sub(r"(?:Rs\.?|₹)\s*", "", amount).replace(",", "").strip()
    match = re.match(r"-?\d+(?:\.\d+)?", text)
    return Decimal(match.group(0)) if match else Decimal("0")


def calculate_total_volume(payin: Union[Amount, str, None], payout: Union[Amount, str, None]) -> str:
    """Общий оборот = payin + payout (отсутствующая сумма считается нулём)"""
    total = extract_numeric_value(payin) + extract_numeric_value(payout)
    return format_amount(total) if total > 0 else NOT_AVAILABLE


def html_to_text(html: str) -> str:
    """Видимый текст страницы без разметки"""
    soup = BeautifulSoup(html, "html.parser")
    return re.sub(r"\s+", " ", soup.get_text(" ")).strip()


@dataclass(frozen=True)
class ExtractionRule:
    """
    Одно правило поиска суммы

    Args:
        name: Имя правила для логов
        pattern: Регулярное выражение, сумма в первой группе
        first_only: Рассматривать только первое совпадение
        visible_text: Искать по тексту страницы без HTML разметки
        minimum: Сумма должна быть строго больше этого значения
    """

    name: str
    pattern: re.Pattern
    first_only: bool = False
    visible_text: bool = False
    minimum: Optional[Decimal] = None

    def candidates(self, text: str) -> Iterator[str]:
        for match in self.pattern.finditer(text):
            yield match.group(1)
            if self.first_only:
                return


def build_rules(label: str, key: str, large_amount_floor: Decimal = DEFAULT_LARGE_AMOUNT_FLOOR) -> List[ExtractionRule]:
    """
    Правила для одной суммы в порядке приоритета

    Args:
        label: Заголовок колонки в таблице ('Total Payin Amount')
        key: Короткое имя суммы для JSON ключей ('payin')
        large_amount_floor: Порог для правила 'large_amount'
    """
    label_re = r"\s+".join(re.escape(word) for word in label.split())
    json_key = r"(?:total[_ ]?)?" + re.escape(key) + r"(?:[_ ]?amount)?"

    return [
        ExtractionRule(
            name="labelled_cell",
            pattern=re.compile(label_re + r".*?" + CELL, re.IGNORECASE | re.DOTALL),
            first_only=True,
        ),
        ExtractionRule(
            name="json_field",
            pattern=re.compile(r'"' + json_key + r'"\s*:\s*"?\s*(?:' + CURRENCY + r"\s*)?" + NUMBER, re.IGNORECASE),
        ),
        ExtractionRule(
            name="first_cell",
            pattern=re.compile(CELL),
            first_only=True,
        ),
        ExtractionRule(
            name="labelled_text",
            pattern=re.compile(label_re + r"[\s:=|-]*" + CURRENCY + r"\s*" + NUMBER, re.IGNORECASE),
            visible_text=True,
        ),
        ExtractionRule(
            name="large_amount",
            pattern=re.compile(CURRENCY + r"\s*" + NUMBER),
            minimum=large_amount_floor,
        ),
        ExtractionRule(
            name="any_amount",
            pattern=re.compile(CURRENCY + r"\s*" + NUMBER),
        ),
    ]


class AmountExtractor:
    def __init__(self, label: str, key: str, ceiling: Decimal = DEFAULT_CEILING,
                 large_amount_floor: Decimal = DEFAULT_LARGE_AMOUNT_FLOOR,
                 rules: Sequence[ExtractionRule] = None):
        """Инициализация извлекателя одной суммы"""
        self.label = label
        self.key = key
        self.ceiling = ceiling
        self.rules = list(rules) if rules is not None else build_rules(label, key, large_amount_floor)
        self.logger = logging.getLogger(__name__)

    def rule(self, name: str) -> ExtractionRule:
        for rule in self.rules:
            if rule.name == name:
                return rule
        raise KeyError(name)

    def extract(self, text: Optional[str], rules: Sequence[ExtractionRule] = None) -> Amount:
        """
        Поиск суммы в тексте ответа

        Returns:
            Первая корректная сумма или Amount() ('N/A')
        """
        if not text or not isinstance(text, str):
            self.logger.info(f"❌ {self.key}: нет данных для анализа")
            return Amount()

        page_text = None
        for rule in rules if rules is not None else self.rules:
            if rule.visible_text:
                if page_text is None:
                    page_text = html_to_text(text)
                source = page_text
            else:
                source = text

            for raw in rule.candidates(source):
                value = parse_amount_value(raw, self.ceiling)
                if value is None:
                    self.logger.debug(f"{self.key}: '{raw}' отклонено правилом {rule.name}")
                    continue
                if rule.minimum is not None and value <= rule.minimum:
                    continue
                amount = Amount(value)
                self.logger.info(f"💰 {self.key}: найдено {amount} (правило {rule.name})")
                return amount

        self.logger.info(f"❌ {self.key}: сумма не найдена")
        return Amount()


def payin_extractor(ceiling: Decimal = DEFAULT_CEILING,
                    large_amount_floor: Decimal = DEFAULT_LARGE_AMOUNT_FLOOR) -> AmountExtractor:
    return AmountExtractor(PAYIN_LABEL, "payin", ceiling, large_amount_floor)


def payout_extractor(ceiling: Decimal = DEFAULT_CEILING,
                     large_amount_floor: Decimal = DEFAULT_LARGE_AMOUNT_FLOOR) -> AmountExtractor:
    return AmountExtractor(PAYOUT_LABEL, "payout", ceiling, large_amount_floor)
