from __future__ import annotations

import io
import sys
from pathlib import Path

import pytest
import requests
from requests.adapters import HTTPAdapter
from requests.cookies import cookiejar_from_dict
from urllib3 import HTTPHeaderDict, HTTPResponse


# Позволяет импортировать модули проекта без установки пакета
PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))


def make_response(status_code: int = 200, text: str = "", cookies: dict = None) -> requests.Response:
    response = requests.Response()
    response.status_code = status_code
    response._content = text.encode("utf-8")
    response.encoding = "utf-8"
    if cookies:
        response.cookies = cookiejar_from_dict(cookies)
    return response


def make_http_response(url: str, status_code: int = 200, set_cookies=(), text: str = "") -> requests.Response:
    """Ответ, собранный транспортом requests из сырых заголовков, как при реальном запросе"""
    headers = HTTPHeaderDict()
    headers.add("Content-Type", "text/html; charset=utf-8")
    for line in set_cookies:
        headers.add("Set-Cookie", line)
    raw = HTTPResponse(
        body=io.BytesIO(text.encode("utf-8")),
        headers=headers,
        status=status_code,
        reason="OK",
        preload_content=False,
    )
    request = requests.Request("GET", url).prepare()
    return HTTPAdapter().build_response(request, raw)


@pytest.fixture
def response_factory():
    return make_response
