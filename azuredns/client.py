"""HTTP client for the Azure DNS record-set REST API and the credentials it uses."""

from __future__ import annotations

import string
import threading
import time
from collections.abc import Callable, Iterator, Mapping
from typing import Any, Union
from urllib.parse import quote

import requests

from .convert import RecordType

MANAGEMENT_ENDPOINT = "https://management.azure.com"
AUTHORITY_HOST = "https://login.microsoftonline.com"
IMDS_ENDPOINT = "http://169.254.169.254/metadata/identity/oauth2/token"
API_VERSION = "2018-05-01"

_REFRESH_MARGIN = 300
_TIMEOUT = 30
_TENANT_CHARS = frozenset(string.ascii_letters + string.digits + "-.")


class AzureError(Exception):
    """An Azure endpoint answered with an error."""

    def __init__(self, message: str, status_code: int | None = None, code: str | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.code = code

    @classmethod
    def from_response(cls, response: requests.Response) -> AzureError:
        """Build an error from a failed HTTP response."""
        try:
            body = response.json()
        except ValueError:
            body = None
        code = message = None
        if isinstance(body, dict):
            error = body.get("error")
            if isinstance(error, dict):
                code, message = error.get("code"), error.get("message")
            elif isinstance(error, str):
                code, message = error, body.get("error_description")
        method = response.request.method if response.request is not None else ""
        text = f"{method} {response.url}: {response.status_code} {response.reason}"
        if code:
            text += f" ({code})"
        if message:
            text += f": {message}"
        return cls(text, response.status_code, code)


class _TokenCache:
    """Caches one access token and fetches a new one shortly before it expires."""

    def __init__(self) -> None:
        self._token: str | None = None
        self._expires_at = 0.0
        self._lock = threading.Lock()

    def get(self, fetch: Callable[[], requests.Response]) -> str:
        with self._lock:
            if self._token is None or time.time() >= self._expires_at - _REFRESH_MARGIN:
                response = fetch()
                if not response.ok:
                    raise AzureError.from_response(response)
                body = response.json()
                token = body.get("access_token")
                if not token:
                    raise AzureError("token response carries no access_token", response.status_code)
                if "expires_on" in body:
                    self._expires_at = float(body["expires_on"])
                else:
                    self._expires_at = time.time() + float(body.get("expires_in", 0))
                self._token = token
            return self._token


class ClientSecretCredential:
    """Authenticates a service principal with a client secret."""

    def __init__(
        self,
        tenant_id: str,
        client_id: str,
        client_secret: str,
        *,
        authority_host: str = AUTHORITY_HOST,
    ) -> None:
        if not tenant_id or not set(tenant_id) <= _TENANT_CHARS:
            raise ValueError(
                "invalid tenant ID: it must be non-empty and hold only "
                "alphanumeric characters, '-' and '.'"
            )
        self.tenant_id = tenant_id
        self.client_id = client_id
        self._client_secret = client_secret
        self._token_url = f"{authority_host.rstrip('/')}/{tenant_id}/oauth2/v2.0/token"
        self._cache = _TokenCache()

    def get_token(self, session: requests.Session) -> str:
        """Return a valid access token for the management endpoint."""
        return self._cache.get(lambda: self._request(session))

    def _request(self, session: requests.Session) -> requests.Response:
        return session.post(
            self._token_url,
            data={
                "grant_type": "client_credentials",
                "client_id": self.client_id,
                "client_secret": self._client_secret,
                "scope": MANAGEMENT_ENDPOINT + "/.default",
            },
            timeout=_TIMEOUT,
        )


class ManagedIdentityCredential:
    """Authenticates with the managed identity of the host, via the metadata service."""

    def __init__(self, client_id: str | None = None, *, endpoint: str = IMDS_ENDPOINT) -> None:
        self.client_id = client_id
        self.endpoint = endpoint
        self._cache = _TokenCache()

    def get_token(self, session: requests.Session) -> str:
        """Return a valid access token for the management endpoint."""
        return self._cache.get(lambda: self._request(session))

    def _request(self, session: requests.Session) -> requests.Response:
        params = {"api-version": "2018-02-01", "resource": MANAGEMENT_ENDPOINT}
        if self.client_id:
            params["client_id"] = self.client_id
        return session.get(
            self.endpoint, params=params, headers={"Metadata": "true"}, timeout=_TIMEOUT
        )


Credential = Union[ClientSecretCredential, ManagedIdentityCredential]


class RecordSetsClient:
    """Lists, writes and deletes record sets of Azure DNS zones."""

    def __init__(
        self,
        subscription_id: str,
        credential: Credential,
        *,
        session: requests.Session | None = None,
        endpoint: str = MANAGEMENT_ENDPOINT,
        api_version: str = API_VERSION,
    ) -> None:
        self.subscription_id = subscription_id
        self.credential = credential
        self.session = session if session is not None else requests.Session()
        self.endpoint = endpoint.rstrip("/")
        self.api_version = api_version

    def list_by_dns_zone(self, resource_group_name: str, zone_name: str) -> Iterator[dict[str, Any]]:
        """Yield every record set of the zone, following pagination links."""
        url: str | None = self._zone_url(resource_group_name, zone_name) + "/recordsets"
        params: dict[str, str] | None = {"api-version": self.api_version}
        while url:
            body = self._send("GET", url, params=params).json()
            yield from body.get("value") or []
            url, params = body.get("nextLink"), None

    def create_or_update(
        self,
        resource_group_name: str,
        zone_name: str,
        relative_record_set_name: str,
        record_type: RecordType | str,
        record_set: Mapping[str, Any],
        if_none_match: str | None = None,
    ) -> dict[str, Any]:
        """Write a record set; with if_none_match="*" an existing set is an error."""
        response = self._send(
            "PUT",
            self._record_set_url(resource_group_name, zone_name, relative_record_set_name, record_type),
            json=dict(record_set),
            headers={"If-None-Match": if_none_match} if if_none_match else {},
            ok=(200, 201),
        )
        return response.json() if response.content else {}

    def delete(
        self,
        resource_group_name: str,
        zone_name: str,
        relative_record_set_name: str,
        record_type: RecordType | str,
    ) -> None:
        """Delete a record set."""
        self._send(
            "DELETE",
            self._record_set_url(resource_group_name, zone_name, relative_record_set_name, record_type),
            ok=(200, 204),
        )

    def _zone_url(self, resource_group_name: str, zone_name: str) -> str:
        parts = {
            "subscription_id": self.subscription_id,
            "resource_group_name": resource_group_name,
            "zone_name": zone_name,
        }
        for label, value in parts.items():
            if not value:
                raise ValueError(f"parameter {label} cannot be empty")
        return (
            f"{self.endpoint}/subscriptions/{quote(self.subscription_id, safe='')}"
            f"/resourceGroups/{quote(resource_group_name, safe='')}"
            f"/providers/Microsoft.Network/dnsZones/{quote(zone_name, safe='')}"
        )

    def _record_set_url(
        self,
        resource_group_name: str,
        zone_name: str,
        relative_record_set_name: str,
        record_type: RecordType | str,
    ) -> str:
        if not relative_record_set_name:
            raise ValueError("parameter relative_record_set_name cannot be empty")
        zone_url = self._zone_url(resource_group_name, zone_name)
        return f"{zone_url}/{RecordType(record_type).value}/{quote(relative_record_set_name, safe='@')}"

    def _send(
        self,
        method: str,
        url: str,
        *,
        params: Mapping[str, str] | None = None,
        json: Any = None,
        headers: Mapping[str, str] | None = None,
        ok: tuple[int, ...] = (200,),
    ) -> requests.Response:
        if params is None and method != "GET":
            params = {"api-version": self.api_version}
        token = self.credential.get_token(self.session)
        all_headers = {"Authorization": f"Bearer {token}", **(headers or {})}
        response = self.session.request(
            method, url, params=params, json=json, headers=all_headers, timeout=_TIMEOUT
        )
        if response.status_code not in ok:
            raise AzureError.from_response(response)
        return response