import re

import pytest
import responses

from azuredns.cli import main
from azuredns.client import AUTHORITY_HOST, MANAGEMENT_ENDPOINT

TENANT = "fake-tenant-id"
ZONE_URL = (
    f"{MANAGEMENT_ENDPOINT}/subscriptions/fake-subscription-id"
    "/resourceGroups/fake-resource-group-name/providers/Microsoft.Network/dnsZones/example.com"
)
RECORD_SET_URL = re.compile(re.escape(ZONE_URL) + r"/(?!recordsets).+")


@pytest.fixture
def environment(monkeypatch):
    monkeypatch.setenv("AZURE_SUBSCRIPTION_ID", "fake-subscription-id")
    monkeypatch.setenv("AZURE_RESOURCE_GROUP_NAME", "fake-resource-group-name")
    monkeypatch.setenv("AZURE_TENANT_ID", TENANT)
    monkeypatch.setenv("AZURE_CLIENT_ID", "fake-client-id")
    monkeypatch.setenv("AZURE_CLIENT_SECRET", "secret")
    monkeypatch.setenv("AZURE_DNS_ZONE_FQDN", "example.com.")


@pytest.fixture
def mocked():
    with responses.RequestsMock(assert_all_requests_are_fired=False) as rsps:
        rsps.add(
            responses.POST,
            f"{AUTHORITY_HOST}/{TENANT}/oauth2/v2.0/token",
            json={"access_token": "token", "expires_in": 3600},
        )
        yield rsps


def test_full_walkthrough(environment, mocked, capsys):
    mocked.add(responses.GET, ZONE_URL + "/recordsets", json={"value": []})
    mocked.add(responses.PUT, RECORD_SET_URL, json={})
    mocked.add(responses.DELETE, RECORD_SET_URL, status=200)

    assert main([]) == 0

    out = capsys.readouterr().out
    assert out.count("Created: ") == 8
    assert out.count("Created: ") == out.count("Updated: ") == out.count("Deleted: ")
    assert "(4) Delete newly added records" in out
    puts = [call for call in mocked.calls if call.request.method == "PUT"]
    assert sum("If-None-Match" in call.request.headers for call in puts) == len(puts) // 2


def test_existing_records_are_listed(environment, mocked, capsys):
    mocked.add(
        responses.GET,
        ZONE_URL + "/recordsets",
        json={
            "value": [
                {
                    "name": "record-a",
                    "type": "Microsoft.Network/dnszones/A",
                    "properties": {"TTL": 30, "ARecords": [{"ipv4Address": "127.0.0.1"}]},
                }
            ]
        },
    )
    mocked.add(responses.PUT, RECORD_SET_URL, json={})
    mocked.add(responses.DELETE, RECORD_SET_URL, status=200)

    assert main(["--zone", "example.com."]) == 0

    exists = [line for line in capsys.readouterr().out.splitlines() if line.startswith("Exists: ")]
    assert len(exists) == 1
    assert "record-a" in exists[0]
    assert "127.0.0.1" in exists[0]


def test_listing_failure_stops(environment, mocked, capsys):
    mocked.add(
        responses.GET,
        ZONE_URL + "/recordsets",
        status=403,
        json={"error": {"code": "AuthorizationFailed", "message": "denied"}},
    )

    assert main([]) == 1

    out = capsys.readouterr().out
    assert "AuthorizationFailed" in out
    assert "(2) Create new records" not in out
    assert not [call for call in mocked.calls if call.request.method == "PUT"]