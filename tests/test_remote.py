"""
Tests for the remote rule against a mocked transport.
"""

from urllib.parse import parse_qs

import httpx
import orjson
import pytest

from nexaform.validation import RemoteRule, Validator


def make_client(handler):
    return httpx.Client(transport=httpx.MockTransport(handler))


@pytest.fixture
def requests():
    return []


@pytest.fixture
def username_client(requests):
    """Endpoint that reports "taken" as unavailable."""
    def handler(request):
        requests.append(request)
        taken = request.url.params.get("Username") == "taken"
        return httpx.Response(409 if taken else 200)

    return make_client(handler)


class TestRemoteRequest:
    def test_get_sends_query_string(self, username_client, requests):
        validator = Validator()
        rule = RemoteRule("/api/username", params={"strict": "1"}, client=username_client)
        validator.set_rule("Username", rule)

        assert rule.test("alice")
        assert not rule.test("taken")

        request = requests[0]
        assert request.method == "GET"
        assert str(request.url).startswith("http://localhost/api/username?")
        assert request.url.params["strict"] == "1"
        assert request.url.params["Username"] == "alice"

    def test_post_sends_form_body(self, requests):
        def handler(request):
            requests.append(request)
            return httpx.Response(204)

        validator = Validator()
        rule = RemoteRule(
            "https://api.example.com/check",
            options={"type": "post"},
            client=make_client(handler),
        )
        validator.set_rule("Email", rule)

        assert rule.test("someone@example.com")

        request = requests[0]
        assert request.method == "POST"
        assert request.url.query == b""
        assert parse_qs(request.content.decode()) == {"Email": ["someone@example.com"]}

    def test_relative_url_uses_configured_base(self, config, username_client, requests):
        config.set("app.base_url", "https://forms.example.org/app/")
        validator = Validator(config=config)
        rule = RemoteRule("check", client=username_client)
        validator.set_rule("Username", rule)

        rule.test("alice")

        assert str(requests[0].url).startswith("https://forms.example.org/app/check")

    @pytest.mark.parametrize("status, expected", [(200, True), (299, True), (300, False), (404, False), (500, False)])
    def test_status_codes(self, status, expected):
        rule = RemoteRule("/check", client=make_client(lambda request: httpx.Response(status)))

        assert rule.test("value") is expected

    @pytest.mark.parametrize("status, expected", [(200, False), (404, True)])
    def test_reverse_mode(self, status, expected):
        rule = RemoteRule(
            "/check",
            remote_validator=RemoteRule.REVERSE,
            client=make_client(lambda request: httpx.Response(status)),
        )

        assert rule.is_reverse()
        assert rule.test("value") is expected

    def test_transport_error_propagates(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        rule = RemoteRule("/check", client=make_client(handler))

        with pytest.raises(httpx.ConnectError):
            rule.test("value")

    def test_empty_value_skips_request(self, requests):
        def handler(request):
            requests.append(request)
            return httpx.Response(500)

        rule = RemoteRule("/check", client=make_client(handler))

        assert rule.test("")
        assert requests == []

    def test_default_client_follows_redirects(self, monkeypatch, requests):
        def handler(request):
            requests.append(request)
            if request.url.path == "/check":
                return httpx.Response(302, headers={"Location": "/ok"})
            return httpx.Response(200)

        created = []
        client_class = httpx.Client

        def client_factory(**kwargs):
            created.append(kwargs)
            return client_class(transport=httpx.MockTransport(handler), **kwargs)

        monkeypatch.setattr(httpx, "Client", client_factory)

        assert RemoteRule("/check").test("alice")
        assert [request.url.path for request in requests] == ["/check", "/ok"]
        assert created == [{"follow_redirects": True, "timeout": None}]

    def test_without_url_is_invalid(self):
        rule = RemoteRule()

        assert not rule.is_valid()
        assert rule.test("anything")


class TestRemoteAttributes:
    def test_value_is_url_with_params(self):
        rule = RemoteRule("/check", params={"a": "1", "b": "two words"})

        assert rule.get_value() == "/check?a=1&b=two+words"

    def test_extra_attributes(self):
        rule = RemoteRule("/check", options={"type": "POST"})
        attributes = rule.get_attributes()

        assert orjson.loads(attributes["remote-options"]) == {"type": "POST"}
        assert attributes["remote-validator"] == "default"

    def test_no_options_attribute_without_options(self):
        assert "remote-options" not in RemoteRule("/check").get_attributes()
