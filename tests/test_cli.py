"""
Tests for the CLI client against a mock HTTP transport.
"""

import json

import httpx

from meditrade.cli.client import main


def recording_transport(responses: dict[tuple[str, str], httpx.Response], seen: list):
    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return responses[(request.method, request.url.path)]
    return httpx.MockTransport(handler)


class TestCli:

    def test_health(self, capsys):
        seen = []
        transport = recording_transport(
            {("GET", "/"): httpx.Response(200, json={"status": "ok"})}, seen
        )

        assert main(["health"], transport=transport) == 0
        assert json.loads(capsys.readouterr().out) == {"status": "ok"}

    def test_buy_sends_identity_and_body(self):
        seen = []
        transport = recording_transport(
            {("POST", "/trades/buy"): httpx.Response(201, json={"balance": "1"})}, seen
        )

        code = main(["--user", "7", "buy", "BTC", "0.5", "--price", "100"], transport=transport)

        assert code == 0
        request = seen[0]
        assert request.headers["X-User-Id"] == "7"
        assert json.loads(request.content) == {"symbol": "BTC", "amount": "0.5", "price": "100"}

    def test_leaderboard_table(self, capsys):
        body = {
            "data": [{"rank": 1, "name": "Alice", "total_value": "105000",
                      "profit_loss_percent": "5"}],
            "pagination": {"page": 1, "total_pages": 1, "total_traders": 1},
        }
        transport = recording_transport(
            {("GET", "/leaderboard"): httpx.Response(200, json=body)}, []
        )

        assert main(["leaderboard", "--limit", "5"], transport=transport) == 0
        out = capsys.readouterr().out
        assert "Alice" in out
        assert "Page 1/1 (1 traders)" in out

    def test_http_error_exit_code(self, capsys):
        transport = recording_transport(
            {("GET", "/accounts/me"): httpx.Response(
                401, json={"detail": {"kind": "Unauthorized", "message": "X-User-Id header required"}}
            )},
            [],
        )

        assert main(["me"], transport=transport) == 1
        assert "HTTP error: 401" in capsys.readouterr().err

    def test_stream_mock_quotes(self, capsys):
        assert main(["stream", "BTC", "--messages", "1", "--interval", "0"]) == 0
        assert json.loads(capsys.readouterr().out)["symbol"] == "BTC"
