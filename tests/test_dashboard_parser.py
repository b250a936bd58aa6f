"""Tests for the dashboard login flow and summary fetching (no network required)."""
from unittest.mock import Mock

import pytest
import requests

from conftest import make_http_response, make_response
from parsers.cookie_store import CookieStore
from parsers.dashboard_parser import DashboardData, DashboardParser
from parsers.exceptions import AuthenticationError, ExtractionError

BASE_URL = "https://pay.example.in"

PAYIN_HTML = """
<table><tr><th>Total Payin Amount</th></tr>
<tr><td class="text-center">Rs 1,000.00</td></tr></table>
"""

PAYOUT_HTML = """
<table><tr><th>Total Payout Amount</th></tr>
<tr><td class="text-center">Rs 500.00</td></tr></table>
"""


def make_session():
    session = Mock()
    session.headers = {}
    return session


def make_parser(session):
    return DashboardParser(
        base_url=BASE_URL,
        username="admin",
        password="secret",
        user_agent="test-agent",
        timeout=5,
        session=session,
    )


class TestLogin:
    """Tests for the four-step login sequence."""

    def test_cookies_accumulate_across_steps(self):
        session = make_session()
        session.get.side_effect = [
            make_response(cookies={"PHPSESSID": "abc"}),
            make_response(cookies={"csrf": "t1"}),
            make_response(cookies={"remember": "yes"}),
        ]
        session.post.return_value = make_response(302, cookies={"ci_session": "auth"})

        cookies = make_parser(session).login()

        assert cookies.as_dict() == {"PHPSESSID": "abc", "csrf": "t1", "ci_session": "auth", "remember": "yes"}

        first, second, third = session.get.call_args_list
        assert first.args[0] == f"{BASE_URL}/ssadmin"
        assert first.kwargs["headers"]["Cookie"] == ""
        assert second.args[0] == f"{BASE_URL}/ssadmin/auth/login"
        assert second.kwargs["headers"]["Cookie"] == "PHPSESSID=abc"
        assert third.args[0] == f"{BASE_URL}/ssadmin/dashboard"
        assert third.kwargs["headers"]["Cookie"] == "PHPSESSID=abc; csrf=t1; ci_session=auth"
        assert third.kwargs["timeout"] == 5

    def test_set_cookie_headers_reach_next_requests(self):
        session = make_session()
        session.get.side_effect = [
            make_http_response(f"{BASE_URL}/ssadmin", set_cookies=["PHPSESSID=abc; path=/; HttpOnly"]),
            make_http_response(f"{BASE_URL}/ssadmin/auth/login", set_cookies=["csrf_token=t1; path=/"]),
            make_http_response(f"{BASE_URL}/ssadmin/dashboard"),
        ]
        session.post.return_value = make_http_response(
            f"{BASE_URL}/ssadmin/auth/login",
            status_code=302,
            set_cookies=["PHPSESSID=authed; path=/; HttpOnly", "remember=; Max-Age=0"],
        )
        session.request.return_value = make_response(text=PAYIN_HTML)
        parser = make_parser(session)

        cookies = parser.login()
        parser.fetch_dashboard_data(cookies)

        assert cookies.as_dict() == {"PHPSESSID": "authed", "csrf_token": "t1"}
        assert session.post.call_args.kwargs["headers"]["Cookie"] == "PHPSESSID=abc; csrf_token=t1"
        assert session.get.call_args_list[2].kwargs["headers"]["Cookie"] == "PHPSESSID=authed; csrf_token=t1"
        for call in session.request.call_args_list:
            assert call.kwargs["headers"]["Cookie"] == "PHPSESSID=authed; csrf_token=t1"

    def test_credentials_are_form_encoded_without_redirects(self):
        session = make_session()
        session.get.return_value = make_response()
        session.post.return_value = make_response(200)

        make_parser(session).login()

        post = session.post.call_args
        assert post.args[0] == f"{BASE_URL}/ssadmin/auth/login"
        assert post.kwargs["data"] == {"username": "admin", "password": "secret"}
        assert post.kwargs["allow_redirects"] is False
        assert post.kwargs["headers"]["Referer"] == f"{BASE_URL}/ssadmin/auth/login"
        assert post.kwargs["headers"]["Content-Type"] == "application/x-www-form-urlencoded"

    @pytest.mark.parametrize("status", [401, 403, 500])
    def test_non_success_status_raises_with_code(self, status):
        session = make_session()
        session.get.return_value = make_response()
        session.post.return_value = make_response(status)

        with pytest.raises(AuthenticationError, match=str(status)):
            make_parser(session).login()

        # Дашборд после неудачного входа не запрашивается
        assert session.get.call_count == 2

    def test_transport_error_raises_authentication_error(self):
        session = make_session()
        session.get.side_effect = requests.exceptions.ConnectionError("connection refused")

        with pytest.raises(AuthenticationError, match="connection refused"):
            make_parser(session).login()

    def test_no_cookies_is_not_an_error(self):
        session = make_session()
        session.get.return_value = make_response()
        session.post.return_value = make_response(200)

        cookies = make_parser(session).login()

        assert len(cookies) == 0


class TestFetchAndExtract:
    """Tests for summary endpoint calls and amount extraction."""

    def test_summary_endpoints_called_with_cookie_header(self):
        session = make_session()
        session.request.side_effect = [
            make_response(text=PAYIN_HTML),
            make_response(text=PAYOUT_HTML),
            make_response(text="<html>dashboard</html>"),
        ]

        data = make_parser(session).fetch_dashboard_data(CookieStore({"ci_session": "auth"}))

        assert data.payin_text == PAYIN_HTML
        assert data.payout_text == PAYOUT_HTML
        payin_call, payout_call, page_call = session.request.call_args_list
        assert payin_call.args == ("POST", f"{BASE_URL}/ssadmin/remote/getDashboardPayinSummary")
        assert payin_call.kwargs["data"] == ""
        assert payin_call.kwargs["headers"]["Cookie"] == "ci_session=auth"
        assert payin_call.kwargs["headers"]["X-Requested-With"] == "XMLHttpRequest"
        assert payout_call.args == ("POST", f"{BASE_URL}/ssadmin/remote/getDashboardPayoutSummary")
        assert page_call.args == ("GET", f"{BASE_URL}/ssadmin/dashboard")
        assert page_call.kwargs["data"] is None

    def test_empty_cookies_proceed_and_give_not_available(self):
        session = make_session()
        login_page = "<html><form>Please login</form></html>"
        session.request.side_effect = [make_response(text=login_page) for _ in range(3)]
        parser = make_parser(session)

        data = parser.fetch_dashboard_data(CookieStore())
        summary = parser.extract_summary(data)

        for call in session.request.call_args_list:
            assert call.kwargs["headers"]["Cookie"] == ""
        assert str(summary.payin) == "N/A"
        assert str(summary.payout) == "N/A"
        assert summary.total_volume == "N/A"

    def test_one_failed_source_does_not_stop_the_others(self):
        session = make_session()
        session.request.side_effect = [
            requests.exceptions.Timeout("read timed out"),
            make_response(text=PAYOUT_HTML),
            make_response(text="<html></html>"),
        ]

        data = make_parser(session).fetch_dashboard_data(CookieStore())

        assert data.payin_text is None
        assert data.payout_text == PAYOUT_HTML
        assert session.request.call_count == 3

    def test_all_sources_failed_raises_extraction_error(self):
        session = make_session()
        session.request.side_effect = requests.exceptions.ConnectionError("offline")

        with pytest.raises(ExtractionError):
            make_parser(session).fetch_dashboard_data(CookieStore())

    def test_extract_summary_from_endpoints(self):
        parser = make_parser(make_session())
        summary = parser.extract_summary(DashboardData(payin_text=PAYIN_HTML, payout_text=PAYOUT_HTML))

        assert str(summary.payin) == "Rs 1,000.00"
        assert str(summary.payout) == "Rs 500.00"
        assert summary.total_volume == "Rs 1,500.00"

    def test_dashboard_page_is_fallback_source(self):
        parser = make_parser(make_session())
        page = """
        <div class="card"><h6>Total Payin Amount</h6><h3>₹ 4,500.00</h3></div>
        <div class="card"><h6>Pending Settlements</h6><h3>₹ 9,999.00</h3></div>
        """
        summary = parser.extract_summary(DashboardData(payin_text="{}", payout_text="{}", dashboard_html=page))

        assert str(summary.payin) == "Rs 4,500.00"
        assert str(summary.payout) == "N/A"

    def test_get_summary_end_to_end(self):
        session = make_session()
        session.get.return_value = make_response(cookies={"ci_session": "auth"})
        session.post.return_value = make_response(302)
        session.request.side_effect = [
            make_response(text=PAYIN_HTML),
            make_response(text=PAYOUT_HTML),
            make_response(text="<html></html>"),
        ]

        summary = make_parser(session).get_summary()

        assert summary.total_volume == "Rs 1,500.00"
        assert session.request.call_args.kwargs["headers"]["Cookie"] == "ci_session=auth"

    def test_context_manager_closes_session(self):
        session = make_session()
        with make_parser(session):
            pass
        session.close.assert_called_once()
