"""CLI client for the MediTrade API and the local quote providers.

Usage:
  poetry run meditrade-cli health
  poetry run meditrade-cli register "Alice" alice@example.com
  poetry run meditrade-cli --user 1 buy BTC 0.5
  poetry run meditrade-cli --user 1 sell BTC 0.25 --price 45000
  poetry run meditrade-cli leaderboard --limit 5
  poetry run meditrade-cli stream BTC ETH --messages 5
"""
import argparse
import asyncio
import json
import sys

import httpx

from meditrade.providers import MockQuoteProvider


def print_json(data: object) -> None:
    print(json.dumps(data, indent=2, default=str))


def _show(r: httpx.Response) -> int:
    r.raise_for_status()
    if r.content:
        print_json(r.json())
    return 0


def cmd_health(client: httpx.Client, _: argparse.Namespace) -> int:
    return _show(client.get("/"))


def cmd_register(client: httpx.Client, args: argparse.Namespace) -> int:
    return _show(client.post("/accounts", json={"name": args.name, "email": args.email}))


def cmd_me(client: httpx.Client, _: argparse.Namespace) -> int:
    return _show(client.get("/accounts/me"))


def cmd_prices(client: httpx.Client, args: argparse.Namespace) -> int:
    if args.symbol:
        return _show(client.get(f"/prices/{args.symbol}"))
    return _show(client.get("/prices"))


def _trade(client: httpx.Client, args: argparse.Namespace, side: str) -> int:
    body: dict[str, str] = {"symbol": args.symbol, "amount": args.amount}
    if args.price is not None:
        body["price"] = args.price
    return _show(client.post(f"/trades/{side}", json=body))


def cmd_buy(client: httpx.Client, args: argparse.Namespace) -> int:
    return _trade(client, args, "buy")


def cmd_sell(client: httpx.Client, args: argparse.Namespace) -> int:
    return _trade(client, args, "sell")


def cmd_history(client: httpx.Client, args: argparse.Namespace) -> int:
    params = {"limit": args.limit} if args.limit else None
    r = client.get("/trades/history", params=params)
    r.raise_for_status()
    data = r.json()
    print(f"Found {data['count']} trades")
    print_json(data["data"])
    return 0


def cmd_wallet(client: httpx.Client, _: argparse.Namespace) -> int:
    return _show(client.get("/wallet"))


def cmd_deposit(client: httpx.Client, args: argparse.Namespace) -> int:
    return _show(client.post("/wallet/deposit", json={"amount": args.amount}))


def cmd_withdraw(client: httpx.Client, args: argparse.Namespace) -> int:
    return _show(client.post("/wallet/withdraw", json={"amount": args.amount}))


def cmd_achievements(client: httpx.Client, _: argparse.Namespace) -> int:
    r = client.get("/achievements")
    r.raise_for_status()
    stats = r.json()["stats"]
    print(f"Unlocked {stats['unlocked']}/{stats['total']} ({stats['percentage']}%)")
    return 0


def cmd_check(client: httpx.Client, _: argparse.Namespace) -> int:
    r = client.post("/achievements/check")
    r.raise_for_status()
    data = r.json()
    print(data["message"])
    for a in data["new_achievements"]:
        print(f"  {a['icon']} {a['name']} ({a['rarity']})")
    return 0


def cmd_leaderboard(client: httpx.Client, args: argparse.Namespace) -> int:
    r = client.get("/leaderboard", params={"page": args.page, "limit": args.limit})
    r.raise_for_status()
    data = r.json()
    for e in data["data"]:
        print(f"{e['rank']:>3}. {e['name']:<20} {e['total_value']:>20} {e['profit_loss_percent']}%")
    p = data["pagination"]
    print(f"Page {p['page']}/{p['total_pages']} ({p['total_traders']} traders)")
    return 0


def cmd_alerts(client: httpx.Client, _: argparse.Namespace) -> int:
    return _show(client.get("/alerts"))


def cmd_alert(client: httpx.Client, args: argparse.Namespace) -> int:
    body = {"symbol": args.symbol, "condition": args.condition, "target_price": args.target}
    return _show(client.post("/alerts", json=body))


def cmd_watchlist(client: httpx.Client, args: argparse.Namespace) -> int:
    if args.toggle:
        return _show(client.post("/watchlist/toggle", json={"symbol": args.toggle}))
    return _show(client.get("/watchlist"))


def cmd_stream(_client: httpx.Client | None, args: argparse.Namespace) -> int:
    """Stream quotes from a local mock provider (no server required)."""
    symbols = [s.upper() for s in args.symbols]
    count = 0

    async def run() -> None:
        nonlocal count
        async with MockQuoteProvider(poll_interval=args.interval) as provider:
            print(
                f"Streaming {symbols} (max_messages={args.messages or '∞'})",
                file=sys.stderr,
            )
            async for quote in provider.stream(symbols):
                count += 1
                print_json(quote.model_dump(mode="json"))
                if args.messages and count >= args.messages:
                    return

    try:
        asyncio.run(run())
    except KeyboardInterrupt:
        print(f"\nStopped by user ({count} messages)", file=sys.stderr)
        return 130
    return 0


HANDLERS = {
    "health": cmd_health,
    "register": cmd_register,
    "me": cmd_me,
    "prices": cmd_prices,
    "buy": cmd_buy,
    "sell": cmd_sell,
    "history": cmd_history,
    "wallet": cmd_wallet,
    "deposit": cmd_deposit,
    "withdraw": cmd_withdraw,
    "achievements": cmd_achievements,
    "check": cmd_check,
    "leaderboard": cmd_leaderboard,
    "alerts": cmd_alerts,
    "alert": cmd_alert,
    "watchlist": cmd_watchlist,
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="MediTrade API client.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument(
        "--base-url",
        default="http://localhost:8000",
        help="API base URL (default: http://localhost:8000)",
    )
    parser.add_argument("--user", type=int, default=None, help="Act as this user id (X-User-Id)")
    parser.add_argument(
        "--timeout",
        type=float,
        default=30.0,
        help="Request timeout in seconds (default: 30)",
    )
    sub = parser.add_subparsers(dest="command", required=True, help="Command")

    sub.add_parser("health", help="GET / health check")
    p = sub.add_parser("register", help="POST /accounts")
    p.add_argument("name")
    p.add_argument("email")
    sub.add_parser("me", help="GET /accounts/me")
    p = sub.add_parser("prices", help="GET /prices or /prices/{symbol}")
    p.add_argument("symbol", nargs="?", default=None)
    for side in ("buy", "sell"):
        p = sub.add_parser(side, help=f"POST /trades/{side}")
        p.add_argument("symbol", help="Ticker (e.g. BTC)")
        p.add_argument("amount", help="Quantity")
        p.add_argument("--price", default=None, help="Execution price (default: live quote)")
    p = sub.add_parser("history", help="GET /trades/history")
    p.add_argument("--limit", type=int, default=0, help="Max trades (0 = all)")
    sub.add_parser("wallet", help="GET /wallet")
    p = sub.add_parser("deposit", help="POST /wallet/deposit")
    p.add_argument("amount")
    p = sub.add_parser("withdraw", help="POST /wallet/withdraw")
    p.add_argument("amount")
    sub.add_parser("achievements", help="GET /achievements (summary)")
    sub.add_parser("check", help="POST /achievements/check")
    p = sub.add_parser("leaderboard", help="GET /leaderboard")
    p.add_argument("--page", type=int, default=1)
    p.add_argument("--limit", type=int, default=10)
    sub.add_parser("alerts", help="GET /alerts")
    p = sub.add_parser("alert", help="POST /alerts")
    p.add_argument("symbol")
    p.add_argument("condition", choices=["above", "below"])
    p.add_argument("target", help="Target price")
    p = sub.add_parser("watchlist", help="GET /watchlist")
    p.add_argument("--toggle", metavar="SYMBOL", default=None, help="Add or remove SYMBOL")
    p = sub.add_parser("stream", help="Stream mock quotes locally (no server required)")
    p.add_argument("symbols", nargs="+", help="Symbols to stream (e.g. BTC ETH)")
    p.add_argument("--messages", type=int, default=None, metavar="N",
                   help="Stop after N messages (default: no limit)")
    p.add_argument("--interval", type=float, default=1.0, metavar="SECS",
                   help="Poll interval (default: 1)")
    return parser


def main(
    argv: list[str] | None = None,
    transport: httpx.BaseTransport | None = None,
) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.command == "stream":
        return cmd_stream(None, args)

    headers = {"X-User-Id": str(args.user)} if args.user is not None else {}
    try:
        with httpx.Client(
            base_url=args.base_url.rstrip("/"),
            timeout=args.timeout,
            headers=headers,
            transport=transport,
        ) as client:
            return HANDLERS[args.command](client, args)
    except httpx.HTTPStatusError as e:
        print(f"HTTP error: {e.response.status_code}", file=sys.stderr)
        if e.response.content:
            try:
                print(e.response.json(), file=sys.stderr)
            except json.JSONDecodeError:
                print(e.response.text, file=sys.stderr)
        return 1
    except httpx.RequestError as e:
        print(f"Request error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
