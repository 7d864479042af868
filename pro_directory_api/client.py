"""Pro Directory API client.

A thin wrapper over the v1 HTTP API for services that need account fees
or want to change a professional's service categories without talking
to the database, e.g. the billing worker:

* :meth:`ProDirectoryClient.get_account` - the stored account.
* :meth:`ProDirectoryClient.get_monthly_fee` - the authoritative fee to bill.
* :meth:`ProDirectoryClient.get_fee_breakdown` - itemized fee plus drift flag.
* :meth:`ProDirectoryClient.get_fee_quote` - price for a prospective selection.
* :meth:`ProDirectoryClient.add_service` / :meth:`ProDirectoryClient.remove_service`.

Every method returns ``(data, error)``: ``error`` is ``None`` on success
and otherwise a dict with ``status_code`` and ``message``.  Methods
never raise on HTTP or network failures.
"""

from __future__ import annotations

import logging
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, List, Optional, Tuple
from urllib.parse import quote

import requests

logger = logging.getLogger(__name__)

Error = Optional[Dict[str, Any]]


class ProDirectoryClient:
    """Client for the Pro Directory API (``/api/v1``)."""

    def __init__(
        self,
        *,
        base_url: str,
        api_key: Optional[str] = None,
        session: Optional[requests.Session] = None,
        timeout: float = 15,
    ) -> None:
        """Initialise the client.

        Args:
            base_url: Server root, e.g. ``http://localhost:8000``.
            api_key: Bearer token (admin or account token).
            session: Optional requests session to reuse.
            timeout: Per-request timeout in seconds.
        """
        self.base_url = base_url.rstrip("/") + "/api/v1"
        self.api_key = api_key
        self.session = session or requests.Session()
        self.timeout = timeout

    def _request(
        self, method: str, path: str, *, params: Dict[str, Any] | None = None,
        json_body: Any | None = None
    ) -> Tuple[Optional[Any], Error]:
        """Perform an HTTP request and return ``(data, error)``."""
        url = f"{self.base_url}{path}"
        headers: Dict[str, str] = {}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        try:
            logger.debug("Sending %s request to %s", method, url)
            response = self.session.request(
                method=method,
                url=url,
                params=params,
                json=json_body,
                headers=headers,
                timeout=self.timeout,
            )
            response.raise_for_status()
            if response.content:
                return response.json(), None
            return None, None
        except requests.HTTPError as exc:
            status = exc.response.status_code if exc.response is not None else None
            message = ""
            if exc.response is not None:
                try:
                    err_json = exc.response.json()
                    message = err_json.get("detail") or err_json.get("message") or str(err_json)
                except ValueError:
                    message = exc.response.text
            if not message:
                message = str(exc)
            logger.error("API request failed (%s): %s", status, message)
            return None, {"status_code": status, "message": str(message)}
        except requests.RequestException as exc:
            logger.error("API request failed: %s", exc)
            return None, {"status_code": None, "message": str(exc)}

    # ------------------------------------------------------------------
    # Accounts
    # ------------------------------------------------------------------
    def get_account(self, account_id: int) -> Tuple[Optional[Dict[str, Any]], Error]:
        return self._request("GET", f"/accounts/{account_id}")

    def list_accounts(self, limit: int = 50, offset: int = 0) -> Tuple[List[Dict[str, Any]], Error]:
        data, error = self._request("GET", "/accounts/", params={"limit": limit, "offset": offset})
        return data or [], error

    def add_service(
        self, account_id: int, category: str, *, accept_similar: bool = False
    ) -> Tuple[Optional[Dict[str, Any]], Error]:
        """Add a service category.

        A similar-category match is not an error: the result then has
        ``applied`` false and a ``warning``.
        """
        return self._request(
            "POST",
            f"/accounts/{account_id}/services",
            json_body={"category": category, "accept_similar": accept_similar},
        )

    def remove_service(self, account_id: int, category: str) -> Tuple[Optional[Dict[str, Any]], Error]:
        return self._request("DELETE", f"/accounts/{account_id}/services/{quote(category, safe='')}")

    def set_fee_override(
        self, account_id: int, fee_override: Optional[Decimal]
    ) -> Tuple[Optional[Dict[str, Any]], Error]:
        body = {"fee_override": None if fee_override is None else str(fee_override)}
        return self._request("PUT", f"/accounts/{account_id}/fee-override", json_body=body)

    # ------------------------------------------------------------------
    # Fees
    # ------------------------------------------------------------------
    def get_monthly_fee(self, account_id: int) -> Tuple[Optional[Decimal], Error]:
        """The stored fee of an account, which is what must be billed."""
        account, error = self.get_account(account_id)
        if error:
            return None, error
        fee = (account or {}).get("monthly_fee")
        if fee is None:
            return None, None
        try:
            return Decimal(str(fee)), None
        except InvalidOperation:
            logger.error("Account %s returned an invalid fee: %r", account_id, fee)
            return None, {"status_code": None, "message": f"Invalid fee value {fee!r}"}

    def get_fee_breakdown(self, account_id: int) -> Tuple[Optional[Dict[str, Any]], Error]:
        return self._request("GET", f"/accounts/{account_id}/fee")

    def get_fee_quote(self, additional_services: int) -> Tuple[Optional[Dict[str, Any]], Error]:
        return self._request("GET", "/fees/quote", params={"additional_services": additional_services})

    def reconcile_fees(self) -> Tuple[List[Dict[str, Any]], Error]:
        data, error = self._request("POST", "/accounts/reconcile-fees")
        return data or [], error

    # ------------------------------------------------------------------
    # Taxonomy
    # ------------------------------------------------------------------
    def get_subcategories(self, main_section: str, category: str) -> Tuple[List[str], Error]:
        data, error = self._request(
            "GET", "/taxonomy/subcategories", params={"main_section": main_section, "category": category}
        )
        return data or [], error
