import json

import httpx
import pytest

from app.cloud.heroku import HEROKU_ACCEPT, HerokuSpaceRulesetClient
from app.exceptions import RemoteFetchError, RemoteWriteError
from app.schemas.inbound_rule import Rule
from app.services.inbound_rule import InboundRuleSynchronizer
from app.services.locks import KeyedMutex

RULESET = {
    "id": "01234567-89ab-cdef-0123-456789abcdef",
    "space": {"id": "spc-1", "name": "my-space"},
    "rules": [
        {"action": "allow", "source": "0.0.0.0/0"},
        {"action": "deny", "source": "10.0.0.0/8"},
    ],
    "created_at": "2026-01-01T00:00:00Z",
    "created_by": "ops@example.com",
}


def _client(handler) -> HerokuSpaceRulesetClient:
    http = httpx.Client(
        base_url="https://api.heroku.com",
        headers={"Accept": HEROKU_ACCEPT, "Authorization": "Bearer key"},
        transport=httpx.MockTransport(handler),
    )
    return HerokuSpaceRulesetClient(client=http)


def test_fetch_current_ruleset():
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json=RULESET)

    ruleset = _client(handler).fetch_current_ruleset("my-space")

    assert seen[0].method == "GET"
    assert seen[0].url.path == "/spaces/my-space/inbound-ruleset"
    assert seen[0].headers["Accept"] == HEROKU_ACCEPT
    assert ruleset.space.name == "my-space"
    assert ruleset.rules == [
        Rule(action="allow", source="0.0.0.0/0"),
        Rule(action="deny", source="10.0.0.0/8"),
    ]


def test_replace_ruleset_sends_full_list_in_order():
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={**RULESET, "rules": json.loads(request.content)["rules"]})

    rules = [Rule(action="deny", source="10.0.0.0/8"), Rule(action="allow", source="8.8.8.8/32")]
    ruleset = _client(handler).replace_ruleset("my-space", rules)

    assert seen[0].method == "PUT"
    assert json.loads(seen[0].content) == {
        "rules": [
            {"action": "deny", "source": "10.0.0.0/8"},
            {"action": "allow", "source": "8.8.8.8/32"},
        ]
    }
    assert ruleset.rules == rules


def test_error_status_raises_http_error():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(404, json={"id": "not_found", "message": "Couldn't find that space."})

    with pytest.raises(httpx.HTTPStatusError):
        _client(handler).fetch_current_ruleset("missing")


def test_space_identifier_is_escaped():
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json=RULESET)

    _client(handler).fetch_current_ruleset("odd/name")
    assert seen[0].url.raw_path == b"/spaces/odd%2Fname/inbound-ruleset"


def test_non_json_body_is_a_fetch_error():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, text="<html>maintenance</html>")

    synchronizer = InboundRuleSynchronizer(_client(handler), locks=KeyedMutex())
    with pytest.raises(RemoteFetchError) as exc_info:
        synchronizer.lookup("my-space", "allow", "0.0.0.0/0")
    assert exc_info.value.space == "my-space"


def test_wrong_shape_body_is_a_fetch_error():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"rules": "nope"})

    synchronizer = InboundRuleSynchronizer(_client(handler), locks=KeyedMutex())
    with pytest.raises(RemoteFetchError):
        synchronizer.ensure("my-space", "allow", "8.8.8.8/32")


def test_non_json_replace_response_is_a_write_error():
    def handler(request: httpx.Request) -> httpx.Response:
        if request.method == "GET":
            return httpx.Response(200, json=RULESET)
        return httpx.Response(200, text="ok")

    synchronizer = InboundRuleSynchronizer(_client(handler), locks=KeyedMutex())
    with pytest.raises(RemoteWriteError) as exc_info:
        synchronizer.ensure("my-space", "allow", "8.8.8.8/32")
    assert (exc_info.value.action, exc_info.value.source) == ("allow", "8.8.8.8/32")
