"""Tests for request dependencies."""

from starlette.requests import Request

from montelog.api.deps import client_key


def make_request(headers: dict[str, str], client: tuple[str, int] | None = ("10.1.2.3", 4000)):
    scope = {
        "type": "http",
        "method": "GET",
        "path": "/",
        "headers": [(k.lower().encode(), v.encode()) for k, v in headers.items()],
        "client": client,
    }
    return Request(scope)


class TestClientKey:
    def test_peer_address_and_user_agent(self) -> None:
        request = make_request({"User-Agent": "Mozilla/5.0"})

        assert client_key(request) == "10.1.2.3-Mozilla/5.0"

    def test_first_forwarded_hop_wins(self) -> None:
        request = make_request(
            {"X-Forwarded-For": "198.51.100.9, 10.0.0.1", "User-Agent": "curl/8.0"}
        )

        assert client_key(request) == "198.51.100.9-curl/8.0"

    def test_missing_user_agent(self) -> None:
        assert client_key(make_request({})) == "10.1.2.3-unknown"

    def test_missing_peer(self) -> None:
        assert client_key(make_request({}, client=None)) == "unknown-unknown"
