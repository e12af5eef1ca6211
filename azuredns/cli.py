"""Command that walks sample records through an Azure DNS zone.

Settings come from the environment: AZURE_SUBSCRIPTION_ID,
AZURE_RESOURCE_GROUP_NAME, AZURE_TENANT_ID, AZURE_CLIENT_ID,
AZURE_CLIENT_SECRET and AZURE_DNS_ZONE_FQDN. Leave the tenant, client ID
and client secret unset to authenticate with a managed identity.
"""

from __future__ import annotations

import argparse
import os
import sys
from collections.abc import Sequence
from datetime import timedelta
from ipaddress import ip_address

import requests

from .client import AzureError
from .provider import Provider
from .records import CAA, CNAME, MX, RR, SRV, TXT, Address, Record


def _sample_records(zone: str) -> list[Record]:
    return [
        Address(name="record-a", ttl=timedelta(seconds=30), ip=ip_address("127.0.0.1")),
        Address(name="record-aaaa", ttl=timedelta(seconds=31), ip=ip_address("::1")),
        CAA(name="record-caa", ttl=timedelta(seconds=32), flags=0, tag="issue", value="ca." + zone),
        CNAME(name="record-cname", ttl=timedelta(seconds=33), target="www." + zone),
        MX(name="record-mx", ttl=timedelta(seconds=34), preference=10, target="mail." + zone),
        SRV(
            service="service",
            transport="proto",
            name="record-srv",
            ttl=timedelta(seconds=38),
            priority=1,
            weight=10,
            port=5269,
            target="app." + zone,
        ),
        TXT(name="record-txt", ttl=timedelta(seconds=39), text="TEST VALUE"),
        RR(type="PTR", name="record-ptr", ttl=timedelta(seconds=36), data="hoge." + zone),
    ]


def main(argv: Sequence[str] | None = None) -> int:
    """List the zone, then create, update and delete the sample records."""
    parser = argparse.ArgumentParser(
        prog="azuredns", description="Exercise record management on an Azure DNS zone."
    )
    parser.add_argument(
        "--zone",
        default=os.environ.get("AZURE_DNS_ZONE_FQDN", ""),
        help="zone FQDN (default: $AZURE_DNS_ZONE_FQDN)",
    )
    args = parser.parse_args(argv)
    zone = args.zone

    provider = Provider(
        subscription_id=os.environ.get("AZURE_SUBSCRIPTION_ID", ""),
        resource_group_name=os.environ.get("AZURE_RESOURCE_GROUP_NAME", ""),
        tenant_id=os.environ.get("AZURE_TENANT_ID", ""),
        client_id=os.environ.get("AZURE_CLIENT_ID", ""),
        client_secret=os.environ.get("AZURE_CLIENT_SECRET", ""),
    )
    records = _sample_records(zone)
    steps = [
        ("(2) Create new records", provider.append_records, "Created"),
        ("(3) Update newly added records", provider.set_records, "Updated"),
        ("(4) Delete newly added records", provider.delete_records, "Deleted"),
    ]

    try:
        print("(1) List existing records")
        for record in provider.get_records(zone):
            print(f"Exists: {record}")
        for title, action, label in steps:
            print(title)
            for record in action(zone, records):
                print(f"{label}: {record}")
    except (AzureError, ValueError, requests.RequestException) as exc:
        print(exc)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())