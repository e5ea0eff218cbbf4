"""
Command-line client.

    python -m weathercraft.client login <player name>
    python -m weathercraft.client reports

The base URL comes from --base-url or WEATHERCRAFT_BASE_URL (read from .env).
"""

import argparse
import asyncio
import logging
import os
import sys

from dotenv import load_dotenv

from weathercraft.client.api_client import WeathercraftClient, WeathercraftClientError
from weathercraft.client.poller import VerificationPoller, VerificationTimeout


async def _login(client: WeathercraftClient, name: str) -> int:
    issued = client.init_verification(name)
    minutes = issued["expires_in_seconds"] // 60
    print(f"Hello {issued['display_name']}! Join the server and type:")
    print(f"    /verify {issued['code']}")
    print(f"The code expires in {minutes} minutes. Waiting for verification (Ctrl+C to abort)...")

    poller = VerificationPoller(client)
    poller.start(issued["external_id"])
    try:
        status = await poller.wait()
    except VerificationTimeout as e:
        print(f"Gave up: {e}")
        return 1
    finally:
        await poller.stop()
    print(f"Verified as {status.account['display_name'] if status.account else name}.")
    return 0


def _reports(client: WeathercraftClient) -> int:
    reports = client.list_reports()
    for r in reports:
        print(f"[{r['created_at']}] {r['city']}: {r['title']} ({r['type']}) by {r.get('author_name') or '?'}")
    if not reports:
        print("(No reports yet)")
    return 0


def main() -> None:
    load_dotenv()
    parser = argparse.ArgumentParser(prog="weathercraft.client")
    parser.add_argument(
        "--base-url",
        default=os.environ.get("WEATHERCRAFT_BASE_URL", "http://localhost:3000"),
    )
    parser.add_argument("-v", "--verbose", action="store_true")
    sub = parser.add_subparsers(dest="command", required=True)
    login = sub.add_parser("login", help="Link a Minecraft account")
    login.add_argument("name")
    sub.add_parser("reports", help="List weather reports")
    args = parser.parse_args()

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING)
    client = WeathercraftClient(args.base_url)
    try:
        if args.command == "login":
            code = asyncio.run(_login(client, args.name))
        else:
            code = _reports(client)
    except WeathercraftClientError as e:
        print(f"FAIL: {e.message}", file=sys.stderr)
        code = 1
    except KeyboardInterrupt:
        code = 130
    sys.exit(code)


if __name__ == "__main__":
    main()
