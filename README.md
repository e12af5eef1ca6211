# azuredns

Manage the records of an Azure DNS zone from Python 3.10 or later.

`azuredns` talks to the Azure Resource Manager DNS REST API over `requests`
and turns its record sets into plain, immutable record objects and back. It
handles A, AAAA, CAA, CNAME, MX, NS, SRV, TXT, PTR and SOA records.

## Installation

```
pip install azuredns
```

## Modules

* `azuredns.records` – the record types: `Address` (A or AAAA, chosen by the
  IP version), `CAA`, `CNAME`, `MX`, `NS`, `SRV`, `TXT`, and the generic `RR`
  (name, type, data, TTL) used for PTR and SOA. Every record has `rr()`,
  giving its `RR` form; `RR.parse()` turns an `RR` of a known type back into
  the specific record. `relative_name(fqdn, zone)` strips the zone from a
  name.
* `azuredns.convert` – conversions between records and Azure record sets.
* `azuredns.client` – the HTTP client (`RecordSetsClient`), the two
  credentials and `AzureError`.
* `azuredns.provider` – `Provider`, the high-level interface.
* `azuredns.cli` – the `azuredns-demo` command.

## Authentication

A `Provider` is configured with the subscription and resource group that hold
the zone. It authenticates in one of two ways:

* **Service principal with a client secret** – set `tenant_id`, `client_id`
  and `client_secret`. If any of the three is set, this method is used
  (`ClientSecretCredential`). The tenant ID must be non-empty and hold only
  letters, digits, `-` and `.`, or a `ValueError` is raised on the first call.
* **Managed identity** – leave all three empty, and the provider asks the
  instance metadata endpoint of the machine it runs on for a token
  (`ManagedIdentityCredential`).

Tokens are cached and fetched again shortly before they expire. The HTTP
client is created on the first call and reused afterwards; calls on one
provider are serialised by a lock.

## Usage

```python
from datetime import timedelta
from ipaddress import ip_address

from azuredns.provider import Provider
from azuredns.records import RR, TXT, Address

provider = Provider(
    subscription_id="00000000-0000-0000-0000-000000000000",
    resource_group_name="my-resource-group",
    tenant_id="11111111-1111-1111-1111-111111111111",
    client_id="22222222-2222-2222-2222-222222222222",
    client_secret="secret",
)
zone = "example.com."

# List every record in the zone
for record in provider.get_records(zone):
    print(record)

records = [
    Address(name="www", ttl=timedelta(seconds=30), ip=ip_address("192.0.2.10")),
    TXT(name="note", ttl=timedelta(seconds=60), text="hello"),
    RR(name="ptr-host", type="PTR", ttl=timedelta(seconds=60), data="host.example.com"),
]

# Create records; fails if a record set with the same name and type exists
provider.append_records(zone, records)

# Create or overwrite records
provider.set_records(zone, records)

# Delete the record sets matching each record's name and type
provider.delete_records(zone, records)
```

`Address` also accepts the IP as a string (`ip="192.0.2.10"`).

Record names may be given relative to the zone (`www`), as a fully qualified
name (`www.example.com.`), or as `@` (or empty) for the zone apex. An `SRV`
record is stored under `_service._transport.name`.

`append_records`, `set_records` and `delete_records` return the records they
were given, in order. A failure reported by Azure raises `AzureError` (with
`status_code` and `code`), and a record that cannot be expressed as an Azure
record set raises `ConversionError`; either stops the batch at that record.

Each write sends one record as a whole record set, so setting a record
replaces every value that the record set of that name and type held. Deleting
removes the whole record set, whatever values it holds.

`get_records` returns one record per value: a record set with three A values
gives three `Address` records. If the zone holds a record set of a type other
than the ten listed above, `get_records` returns an empty list.

### Lower-level helpers

`azuredns.convert` exposes the conversions the provider relies on:

* `generate_record_set_name(name, zone)` – the relative record set name Azure
  expects (`@` for the apex).
* `convert_string_to_record_type(type_name)` – maps `"A"`, `"MX"`, … to a
  `RecordType`, raising `ConversionError` for anything else.
* `record_sets_to_records(record_sets)` – converts record-set dictionaries,
  shaped like the REST API's JSON
  (`{"name": ..., "type": "Microsoft.Network/dnszones/A", "properties": {"TTL": 30, ...}}`),
  into records.
* `record_to_record_set(record)` – converts one record into a
  `{"properties": {...}}` dictionary ready to be sent.

`azuredns.client.RecordSetsClient(subscription_id, credential)` can also be
used on its own: `list_by_dns_zone` yields record-set dictionaries and follows
pagination links, `create_or_update` writes one (with `if_none_match="*"` an
existing set is an error), and `delete` removes one.

## Demo command

The `azuredns-demo` command runs a full round trip against a real zone: it
lists the existing records, then creates, updates and deletes a set of sample
records (A, AAAA, CAA, CNAME, MX, SRV, TXT and PTR), printing each step. On
an error it prints the message and exits with status 1.

It reads its settings from the environment:

| Variable                    | Meaning                                    |
|-----------------------------|--------------------------------------------|
| `AZURE_SUBSCRIPTION_ID`     | subscription that holds the zone           |
| `AZURE_RESOURCE_GROUP_NAME` | resource group that holds the zone         |
| `AZURE_TENANT_ID`           | tenant of the service principal (optional) |
| `AZURE_CLIENT_ID`           | application id (optional)                  |
| `AZURE_CLIENT_SECRET`       | client secret (optional)                   |
| `AZURE_DNS_ZONE_FQDN`       | the zone, e.g. `example.com.`              |

```
azuredns-demo
azuredns-demo --zone example.com.
```

`--zone` overrides `AZURE_DNS_ZONE_FQDN`. Leave the three optional variables
unset to authenticate with a managed identity.

## What it does not do

The package manages records inside an existing zone only. It does not create,
list or delete zones, does not use ETags for optimistic concurrency, and is
synchronous: there is no async interface.

## Running the tests

```
pip install "azuredns[test]"
pytest
```