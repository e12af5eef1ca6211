"""Record management for a zone hosted in Azure DNS."""

from __future__ import annotations

import threading
from collections.abc import Iterable
from dataclasses import dataclass, field

from .client import ClientSecretCredential, ManagedIdentityCredential, RecordSetsClient
from .convert import (
    ConversionError,
    convert_string_to_record_type,
    generate_record_set_name,
    record_sets_to_records,
    record_to_record_set,
)
from .records import Record


@dataclass
class Provider:
    """Gets, appends, sets and deletes records of an Azure DNS zone.

    When any of tenant_id, client_id or client_secret is given, a service
    principal with a client secret is used; otherwise the managed identity.
    """

    subscription_id: str = ""
    resource_group_name: str = ""
    tenant_id: str = ""
    client_id: str = ""
    client_secret: str = field(default="", repr=False)
    _client: RecordSetsClient | None = field(
        default=None, init=False, repr=False, compare=False
    )
    _lock: threading.Lock = field(
        default_factory=threading.Lock, init=False, repr=False, compare=False
    )

    def get_records(self, zone: str) -> list[Record]:
        """Return all records in the zone."""
        with self._lock:
            client = self._setup_client()
            record_sets = list(
                client.list_by_dns_zone(self.resource_group_name, zone.removesuffix("."))
            )
        try:
            return record_sets_to_records(record_sets)
        except ConversionError:
            return []

    def append_records(self, zone: str, records: Iterable[Record]) -> list[Record]:
        """Create the records; an existing record set of the same name and type is an error."""
        return [self._create_or_update(zone, record, "*") for record in records]

    def set_records(self, zone: str, records: Iterable[Record]) -> list[Record]:
        """Create the records or replace existing record sets of the same name and type."""
        return [self._create_or_update(zone, record, "") for record in records]

    def delete_records(self, zone: str, records: Iterable[Record]) -> list[Record]:
        """Delete the record sets matching each record's name and type, whatever its value."""
        return [self._delete(zone, record) for record in records]

    def _setup_client(self) -> RecordSetsClient:
        if self._client is None:
            if self.tenant_id or self.client_id or self.client_secret:
                credential: ClientSecretCredential | ManagedIdentityCredential = (
                    ClientSecretCredential(self.tenant_id, self.client_id, self.client_secret)
                )
            else:
                credential = ManagedIdentityCredential()
            self._client = RecordSetsClient(self.subscription_id, credential)
        return self._client

    def _create_or_update(self, zone: str, record: Record, if_none_match: str) -> Record:
        with self._lock:
            client = self._setup_client()
            rr = record.rr()
            record_type = convert_string_to_record_type(rr.type)
            record_set = record_to_record_set(record)
            client.create_or_update(
                self.resource_group_name,
                zone.removesuffix("."),
                generate_record_set_name(rr.name, zone),
                record_type,
                record_set,
                if_none_match,
            )
        return record

    def _delete(self, zone: str, record: Record) -> Record:
        with self._lock:
            client = self._setup_client()
            rr = record.rr()
            record_type = convert_string_to_record_type(rr.type)
            client.delete(
                self.resource_group_name,
                zone.removesuffix("."),
                generate_record_set_name(rr.name, zone),
                record_type,
            )
        return record