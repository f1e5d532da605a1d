import asyncio
import json
import logging

import httpx
import pytest
import respx

from cfddns.cloudflare import CloudflareClient
from cfddns.config import Config
from cfddns.main import check_once, main, run

HOST = "api.cloudflare.com"
ZONES = "/client/v4/zones"
RECORDS = "/client/v4/zones/zone-1/dns_records"
NAME = "home.example.com"


def ok(result):
    return httpx.Response(200, json={"success": True, "errors": [], "messages": [], "result": result})


def complete_config(**overrides):
    values = {"domain": NAME, "root_domain": "example.com", "token": "token"}
    values.update(overrides)
    return Config(**values)


@pytest.mark.asyncio
async def test_check_once_stopped_before_start():
    stop = asyncio.Event()
    stop.set()
    with respx.mock(assert_all_called=False) as router:
        ip_route = router.get(host="api.ipify.org").mock(return_value=httpx.Response(200, text="192.0.2.1"))
        async with httpx.AsyncClient() as http, CloudflareClient("token") as cf:
            finished = await check_once(complete_config(), cf, http, "zone-1", stop)
    assert finished is False
    assert ip_route.call_count == 0


@pytest.mark.asyncio
async def test_check_once_creates_a_record():
    with respx.mock() as router:
        router.get(host="api.ipify.org").mock(return_value=httpx.Response(200, json={"ip": "192.0.2.10"}))
        router.get(host=HOST, path=RECORDS).mock(return_value=ok([]))
        post = router.post(host=HOST, path=RECORDS).mock(return_value=ok(
            {"id": "rec-1", "type": "A", "name": NAME, "content": "192.0.2.10", "ttl": 300}))
        async with httpx.AsyncClient() as http, CloudflareClient("token") as cf:
            finished = await check_once(complete_config(ipv6=False), cf, http, "zone-1", asyncio.Event())
    assert finished is True
    sent = json.loads(post.calls.last.request.content)
    assert (sent["type"], sent["content"]) == ("A", "192.0.2.10")


@pytest.mark.asyncio
async def test_check_once_continues_after_ipv4_failure():
    with respx.mock() as router:
        for host in ("api.ipify.org", "ipinfo.io", "icanhazip.com", "checkip.amazonaws.com"):
            router.get(host=host).mock(side_effect=httpx.ConnectError)
        router.get(host="api64.ipify.org").mock(return_value=httpx.Response(200, json={"ip": "2001:db8::3"}))
        lookup = router.get(host=HOST, path=RECORDS).mock(return_value=ok([]))
        post = router.post(host=HOST, path=RECORDS).mock(return_value=ok(
            {"id": "rec-2", "type": "AAAA", "name": NAME, "content": "2001:db8::3", "ttl": 300}))
        async with httpx.AsyncClient() as http, CloudflareClient("token") as cf:
            finished = await check_once(complete_config(), cf, http, "zone-1", asyncio.Event())
    assert finished is True
    assert lookup.calls.last.request.url.params["type"] == "AAAA"
    assert json.loads(post.calls.last.request.content)["type"] == "AAAA"


@pytest.mark.asyncio
async def test_run_incomplete_config_makes_no_requests():
    with respx.mock(assert_all_called=False) as router:
        zones = router.get(host=HOST, path=ZONES).mock(return_value=ok([]))
        result = await run(Config(domain=NAME), asyncio.Event())
    assert result is None
    assert zones.call_count == 0


@pytest.mark.asyncio
async def test_run_stops_when_zone_missing():
    with respx.mock(assert_all_called=False) as router:
        zones = router.get(host=HOST, path=ZONES).mock(return_value=ok([]))
        ip_route = router.get(host="api.ipify.org").mock(return_value=httpx.Response(200, text="192.0.2.1"))
        result = await run(complete_config(), asyncio.Event())
    assert result is None
    assert zones.call_count == 1
    assert ip_route.call_count == 0


@pytest.mark.asyncio
async def test_run_with_stop_already_set_skips_checks():
    stop = asyncio.Event()
    stop.set()
    with respx.mock(assert_all_called=False) as router:
        zones = router.get(host=HOST, path=ZONES).mock(return_value=ok([{"id": "zone-1", "name": "example.com"}]))
        ip_route = router.get(host="api.ipify.org").mock(return_value=httpx.Response(200, text="192.0.2.1"))
        result = await run(complete_config(), stop)
    assert result is None
    assert zones.call_count == 1
    assert ip_route.call_count == 0


@pytest.mark.asyncio
async def test_run_one_cycle_then_stop():
    stop = asyncio.Event()

    def lookup_record(request):
        stop.set()
        return ok([{"id": "rec-1", "type": "A", "name": NAME, "content": "198.51.100.4", "ttl": 300}])

    with respx.mock(assert_all_called=False) as router:
        router.get(host=HOST, path=ZONES).mock(return_value=ok([{"id": "zone-1", "name": "example.com"}]))
        router.get(host="api.ipify.org").mock(return_value=httpx.Response(200, json={"ip": "198.51.100.4"}))
        lookup = router.get(host=HOST, path=RECORDS).mock(side_effect=lookup_record)
        put = router.put(host=HOST, path=f"{RECORDS}/rec-1").mock(return_value=ok({}))
        result = await asyncio.wait_for(
            run(complete_config(ipv6=False), stop, wait_range=(300, 300)), timeout=10)
    assert result is None
    assert stop.is_set()
    assert lookup.call_count == 1
    assert put.call_count == 0


def test_main_with_missing_settings(tmp_path, monkeypatch, caplog):
    monkeypatch.chdir(tmp_path)
    for key in ("TOKEN", "DOMAIN", "ROOT_DOMAIN", "token", "domain", "root_domain"):
        monkeypatch.delenv(key, raising=False)
    caplog.set_level(logging.INFO, logger="cfddns.main")
    assert main([]) == 0
    assert "Missing required configuration" in caplog.text