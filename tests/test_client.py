"""ProDirectoryClient tests with a mocked requests session."""

import json
from decimal import Decimal
from unittest.mock import MagicMock

import pytest
import requests

from pro_directory_api.client import ProDirectoryClient


def make_response(status_code, payload=None, text=None):
    response = requests.Response()
    response.status_code = status_code
    response.url = "http://testserver"
    if payload is not None:
        response._content = json.dumps(payload).encode("utf-8")
    else:
        response._content = (text or "").encode("utf-8")
    return response


@pytest.fixture
def session():
    return MagicMock(spec=requests.Session)


@pytest.fixture
def api(session):
    return ProDirectoryClient(base_url="http://pro.example/", api_key="secret", session=session)


class TestRequest:
    def test_sends_bearer_token(self, api, session):
        session.request.return_value = make_response(200, {"id": 1})

        data, error = api.get_account(1)

        assert data == {"id": 1}
        assert error is None
        kwargs = session.request.call_args.kwargs
        assert kwargs["method"] == "GET"
        assert kwargs["url"] == "http://pro.example/api/v1/accounts/1"
        assert kwargs["headers"] == {"Authorization": "Bearer secret"}

    def test_http_error_detail(self, api, session):
        session.request.return_value = make_response(409, {"detail": "already listed"})

        data, error = api.add_service(1, "Plumber")

        assert data is None
        assert error == {"status_code": 409, "message": "already listed"}

    def test_http_error_without_json(self, api, session):
        session.request.return_value = make_response(502, text="Bad Gateway")

        _, error = api.get_account(1)

        assert error == {"status_code": 502, "message": "Bad Gateway"}

    def test_network_error(self, api, session):
        session.request.side_effect = requests.ConnectionError("connection refused")

        data, error = api.get_fee_quote(1)

        assert data is None
        assert error["status_code"] is None
        assert "connection refused" in error["message"]


class TestOperations:
    def test_add_service_payload(self, api, session):
        session.request.return_value = make_response(200, {"applied": False, "warning": {"similar_to": ["Plumber"]}})

        data, error = api.add_service(3, "Plumbers", accept_similar=False)

        assert error is None
        assert data["applied"] is False
        assert session.request.call_args.kwargs["json"] == {"category": "Plumbers", "accept_similar": False}

    def test_remove_service_quotes_category(self, api, session):
        session.request.return_value = make_response(200, {"id": 3})

        api.remove_service(3, "Window & Door Installer")

        kwargs = session.request.call_args.kwargs
        assert kwargs["method"] == "DELETE"
        assert kwargs["url"].endswith("/accounts/3/services/Window%20%26%20Door%20Installer")

    def test_monthly_fee_is_decimal(self, api, session):
        session.request.return_value = make_response(200, {"id": 3, "monthly_fee": "34.77"})

        fee, error = api.get_monthly_fee(3)

        assert error is None
        assert fee == Decimal("34.77")

    def test_monthly_fee_error_passthrough(self, api, session):
        session.request.return_value = make_response(404, {"detail": "Account 3 not found"})

        fee, error = api.get_monthly_fee(3)

        assert fee is None
        assert error["status_code"] == 404

    def test_fee_override_sent_as_string(self, api, session):
        session.request.return_value = make_response(200, {"id": 3})

        api.set_fee_override(3, Decimal("19.99"))

        assert session.request.call_args.kwargs["json"] == {"fee_override": "19.99"}

    def test_list_accounts_defaults_to_empty_on_error(self, api, session):
        session.request.return_value = make_response(403, {"detail": "Insufficient permissions"})

        accounts, error = api.list_accounts()

        assert accounts == []
        assert error["status_code"] == 403

    def test_subcategories_params(self, api, session):
        session.request.return_value = make_response(200, ["Plumber"])

        leaves, error = api.get_subcategories("Build Home", "MEP (Mechanical, Electrical, Plumbing)")

        assert leaves == ["Plumber"]
        assert session.request.call_args.kwargs["params"] == {
            "main_section": "Build Home",
            "category": "MEP (Mechanical, Electrical, Plumbing)",
        }
