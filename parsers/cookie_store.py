#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Хранилище cookies на время одного запуска
"""

from typing import Dict, Iterator, List, Optional

import requests


def set_cookie_lines(response: requests.Response) -> List[str]:
    """Строки Set-Cookie как их прислал сервер (requests склеивает их в одну через ', ')"""
    raw_headers = getattr(response.raw, "headers", None)
    if raw_headers is None or not hasattr(raw_headers, "getlist"):
        return []
    return raw_headers.getlist("Set-Cookie")


class CookieStore:
    def __init__(self, cookies: Dict[str, str] = None):
        """Инициализация хранилища (имя cookie -> значение)"""
        self._cookies: Dict[str, str] = {}
        for name, value in (cookies or {}).items():
            self.set(name, value)

    def set(self, name: str, value: str) -> bool:
        """
        Сохранение cookie. Пустые имя или значение игнорируются

        Returns:
            True если cookie сохранена
        """
        name = (name or "").strip()
        value = (value or "").strip()
        if not name or not value:
            return False
        self._cookies[name] = value
        return True

    def get(self, name: str) -> Optional[str]:
        return self._cookies.get(name)

    def absorb_set_cookie(self, header: str) -> bool:
        """Разбор одной строки Set-Cookie вида 'name=value; Path=/; HttpOnly'"""
        name_value = header.split(";", 1)[0]
        if "=" not in name_value:
            return False
        name, value = name_value.split("=", 1)
        return self.set(name, value)

    def absorb(self, response: requests.Response) -> int:
        """
        Забирает cookies из ответа сервера

        Returns:
            Количество сохранённых cookies
        """
        lines = set_cookie_lines(response)
        if lines:
            return sum(1 for line in lines if self.absorb_set_cookie(line))

        stored = 0
        for cookie in response.cookies:
            if self.set(cookie.name, cookie.value):
                stored += 1
        return stored

    def header(self) -> str:
        """Значение заголовка Cookie для следующего запроса"""
        return "; ".join(f"{name}={value}" for name, value in self._cookies.items())

    def as_dict(self) -> Dict[str, str]:
        return dict(self._cookies)

    def __len__(self) -> int:
        return len(self._cookies)

    def __contains__(self, name: object) -> bool:
        return name in self._cookies

    def __iter__(self) -> Iterator[str]:
        return iter(self._cookies)

    def __repr__(self) -> str:
        return f"CookieStore(names={sorted(self._cookies)})"
