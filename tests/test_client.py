import json
import time

import pytest
import requests
import responses

from azuredns.client import (
    AUTHORITY_HOST,
    IMDS_ENDPOINT,
    MANAGEMENT_ENDPOINT,
    AzureError,
    ClientSecretCredential,
    ManagedIdentityCredential,
    RecordSetsClient,
)
from azuredns.convert import RecordType

TENANT = "fake-tenant-id"
RESOURCE_GROUP = "fake-resource-group-name"
TOKEN_URL = f"{AUTHORITY_HOST}/{TENANT}/oauth2/v2.0/token"
ZONE_URL = (
    f"{MANAGEMENT_ENDPOINT}/subscriptions/fake-subscription-id"
    f"/resourceGroups/{RESOURCE_GROUP}/providers/Microsoft.Network/dnsZones/example.com"
)


@pytest.fixture
def mocked():
    with responses.RequestsMock(assert_all_requests_are_fired=False) as rsps:
        yield rsps


@pytest.fixture
def client():
    credential = ClientSecretCredential(TENANT, "fake-client-id", client_secret="secret")
    return RecordSetsClient("fake-subscription-id", credential)


def _add_token(mocked):
    mocked.add(responses.POST, TOKEN_URL, json={"access_token": "token", "expires_in": 3600})


def test_list_follows_next_link(client, mocked):
    _add_token(mocked)
    first = [{"name": "record-a"}, {"name": "record-aaaa"}]
    second = [{"name": "record-caa"}]
    mocked.add(
        responses.GET,
        ZONE_URL + "/recordsets",
        json={"value": first, "nextLink": ZONE_URL + "/recordsets?$skipToken=next"},
    )
    mocked.add(responses.GET, ZONE_URL + "/recordsets", json={"value": second})

    result = list(client.list_by_dns_zone(RESOURCE_GROUP, "example.com"))

    assert result == first + second
    api_calls = [call for call in mocked.calls if "/recordsets" in call.request.url]
    assert len(api_calls) == 2
    assert all(call.request.headers["Authorization"] == "Bearer token" for call in api_calls)


def test_token_is_cached_between_requests(client, mocked):
    _add_token(mocked)
    mocked.add(responses.GET, ZONE_URL + "/recordsets", json={"value": []})

    assert list(client.list_by_dns_zone(RESOURCE_GROUP, "example.com")) == []
    assert list(client.list_by_dns_zone(RESOURCE_GROUP, "example.com")) == []

    token_calls = [call for call in mocked.calls if call.request.url == TOKEN_URL]
    assert len(token_calls) == 1


def test_token_request_carries_client_credentials(mocked):
    _add_token(mocked)
    credential = ClientSecretCredential(TENANT, "fake-client-id", client_secret="secret")

    token = credential.get_token(requests.Session())

    assert token == "token"
    body = mocked.calls[0].request.body
    assert "grant_type=client_credentials" in body
    assert "client_id=fake-client-id" in body


def test_create_or_update_sends_if_none_match(client, mocked):
    _add_token(mocked)
    record_set = {"properties": {"TTL": 30, "ARecords": [{"ipv4Address": "127.0.0.1"}]}}
    mocked.add(responses.PUT, ZONE_URL + "/A/record-a", json={**record_set, "etag": "ETAG_A"})

    result = client.create_or_update(
        RESOURCE_GROUP, "example.com", "record-a", RecordType.A, record_set, "*"
    )

    assert result["etag"] == "ETAG_A"
    request = mocked.calls[-1].request
    assert request.headers["If-None-Match"] == "*"
    assert json.loads(request.body) == record_set


def test_create_or_update_without_if_none_match(client, mocked):
    _add_token(mocked)
    record_set = {"properties": {"TTL": 30, "NSRecords": [{"nsdname": "ns1.example.com"}]}}
    mocked.add(responses.PUT, ZONE_URL + "/NS/@", json=record_set)

    result = client.create_or_update(RESOURCE_GROUP, "example.com", "@", "NS", record_set, "")

    assert result == record_set
    request = mocked.calls[-1].request
    assert "If-None-Match" not in request.headers
    assert request.url.split("?")[0].endswith("/NS/@")


def test_delete(client, mocked):
    _add_token(mocked)
    mocked.add(responses.DELETE, ZONE_URL + "/TXT/record-txt", status=204)

    assert client.delete(RESOURCE_GROUP, "example.com", "record-txt", RecordType.TXT) is None
    assert mocked.calls[-1].request.method == "DELETE"


def test_error_response_raises(client, mocked):
    _add_token(mocked)
    mocked.add(
        responses.PUT,
        ZONE_URL + "/A/record-a",
        status=412,
        json={"error": {"code": "PreconditionFailed", "message": "The record set exists."}},
    )

    with pytest.raises(AzureError) as info:
        client.create_or_update(
            RESOURCE_GROUP, "example.com", "record-a", RecordType.A, {"properties": {}}, "*"
        )

    assert info.value.status_code == 412
    assert info.value.code == "PreconditionFailed"
    assert "The record set exists." in str(info.value)


def test_token_failure_raises(client, mocked):
    mocked.add(
        responses.POST,
        TOKEN_URL,
        status=401,
        json={"error": "invalid_client", "error_description": "bad credentials"},
    )

    with pytest.raises(AzureError) as info:
        list(client.list_by_dns_zone(RESOURCE_GROUP, "example.com"))

    assert info.value.code == "invalid_client"


def test_empty_resource_group_is_rejected(client):
    with pytest.raises(ValueError, match="resource_group_name"):
        client.delete("", "example.com", "record-a", RecordType.A)


def test_unknown_record_type_is_rejected(client):
    with pytest.raises(ValueError):
        client.delete(RESOURCE_GROUP, "example.com", "record-a", "ERR")


def test_invalid_tenant_is_rejected():
    with pytest.raises(ValueError, match="tenant"):
        ClientSecretCredential("not a tenant!", "fake-client-id", client_secret="secret")


def test_managed_identity_token(mocked):
    mocked.add(
        responses.GET,
        IMDS_ENDPOINT,
        json={"access_token": "token", "expires_on": str(int(time.time()) + 3600)},
    )
    credential = ManagedIdentityCredential()

    assert credential.get_token(requests.Session()) == "token"
    assert mocked.calls[0].request.headers["Metadata"] == "true"