# cfddns

A small dynamic DNS client for Cloudflare. It finds the machine's public IPv4
and IPv6 addresses and keeps an `A` and an `AAAA` record in a Cloudflare zone
pointing at them. It creates records that do not exist yet. It updates
existing records only when the address has changed.

## Installation

```sh
pip install .
```

## Configuration

Settings come from three places, each overriding the one before:

1. built-in defaults;
2. a `config.json` file in the working directory, if there is one;
3. environment variables.

| Key           | Meaning                                       | Default |
|---------------|-----------------------------------------------|---------|
| `domain`      | Full record name to keep up to date           | (empty) |
| `root_domain` | Name of the Cloudflare zone the record is in  | (empty) |
| `ipv4`        | Whether to manage the `A` record              | `true`  |
| `ipv6`        | Whether to manage the `AAAA` record           | `true`  |
| `token`       | Cloudflare API token with DNS edit permission | (empty) |

Environment variable names are matched against these keys without regard to
case. Other variables and other keys in the file are ignored. The boolean
settings accept `true`/`false`, `yes`/`no`, `on`/`off` and `1`/`0`.

The client runs only if `domain`, `root_domain` and `token` are all set. If one
is missing, it logs an error and exits. If the file cannot be read, is not
valid JSON, or holds a value of the wrong type, the command exits with status 1.

Example `config.json`:

```json
{
  "domain": "home.example.com",
  "root_domain": "example.com",
  "ipv4": true,
  "ipv6": false,
  "token": "token"
}
```

The same settings as environment variables:

```sh
export DOMAIN=home.example.com
export ROOT_DOMAIN=example.com
export IPV6=false
export TOKEN=token
```

The `LOG_LEVEL` environment variable sets the log level. It accepts `DEBUG`,
`INFO`, `WARNING` or `ERROR`, and defaults to `INFO`.

## Running

```sh
cfddns
```

At startup the client looks up the zone ID for `root_domain`. If it cannot find
the zone, it logs the error and exits. Otherwise it runs a loop. On each pass
it does the following:

1. It gets the current public address of each enabled family. It tries several
   lookup services in turn until one answers:
   - IPv4: ipify, ipinfo.io, icanhazip, checkip.amazonaws.com
   - IPv6: api64.ipify, ipv6.icanhazip, v6.ident.me
2. It creates or updates the matching DNS record with a TTL of 300 seconds.
3. It waits a random interval of 1 to 300 seconds.

A failed lookup or a failed update is logged, and the loop carries on.

To stop the client, send `SIGINT` (Ctrl+C) or `SIGTERM`. If a wait is in
progress, the client cuts it short, then exits cleanly.

## Using it from Python

```python
import asyncio

from cfddns.cloudflare import CloudflareClient
from cfddns.real_ip import get_ipv4


async def sync_once() -> None:
    async with CloudflareClient("token") as client:
        zone_id = await client.get_zone_id("example.com")
        ip = await get_ipv4()
        await client.update_or_create_record(zone_id, "home.example.com", "A", ip)


asyncio.run(sync_once())
```

The package has four modules:

- `cfddns.config` provides `load_config(path=None, environ=None)`, which returns
  a `Config` dataclass. `Config.is_complete()` reports whether the required
  keys are set. Invalid input raises `ConfigError`.
- `cfddns.cloudflare` provides `CloudflareClient`, which has the following
  methods:
  - `get_zone_id`
  - `get_dns_record`
  - `create_dns_record`
  - `update_dns_record`
  - `update_or_create_record`
  - `aclose`

  It also provides the `DnsRecord` dataclass. API and network failures raise
  `CloudflareError`. The client accepts an existing `httpx.AsyncClient`. It
  closes only the HTTP client that it created itself.
- `cfddns.real_ip` provides `get_ipv4` and `get_ipv6`, which return the public
  address as a string. Each takes an optional `httpx.AsyncClient`. They raise
  `IpLookupError` when every service fails. `get_ip_from_service(client, url)`
  queries a single service. It accepts a JSON `{"ip": ...}` answer or a
  plain-text address.
- `cfddns.main` provides the following:
  - `check_once`, which runs a single update pass;
  - `run(config, stop_event=None, ...)`, which runs the loop until the
    `asyncio.Event` is set;
  - `main`, which is the command entry point.

## Tests

```sh
pip install ".[test]"
pytest
```