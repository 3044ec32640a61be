#!/usr/bin/env python3
"""Ask a running equity service for a single estimate.

Example:
    python -m equity_service --port 8765
    python scripts/equity_client.py --hole "As Ac" --board "Kd 7c 2h" --players 3
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from typing import Any, Dict, List

import websockets

LOGGER = logging.getLogger("equity_client")


class EquityClient:
    def __init__(self, url: str) -> None:
        self.url = url

    async def request(self, hole: List[str], board: List[str], players: int, simulations: int) -> Dict[str, Any]:
        async with websockets.connect(self.url) as ws:
            await ws.send(json.dumps({"type": "hello", "v": 1}))
            welcome = json.loads(await ws.recv())
            if welcome.get("type") != "welcome":
                raise RuntimeError(f"Handshake failed: {welcome}")
            LOGGER.info("Connected; server allows %s simulations per request", welcome.get("max_simulations"))

            await ws.send(
                json.dumps(
                    {
                        "type": "equity",
                        "v": 1,
                        "req_id": 1,
                        "hole": hole,
                        "board": board,
                        "players": players,
                        "simulations": simulations,
                    }
                )
            )
            while True:
                msg = json.loads(await ws.recv())
                msg_type = msg.get("type")
                if msg_type == "progress":
                    self._print_progress(msg["done"], msg["total"])
                elif msg_type == "result":
                    print()
                    return msg
                elif msg_type == "error":
                    raise RuntimeError(f"{msg.get('code')}: {msg.get('msg')}")

    @staticmethod
    def _print_progress(done: int, total: int) -> None:
        width = 40
        filled = width * done // total
        sys.stdout.write(f"\r[{'#' * filled}{'.' * (width - filled)}] {done}/{total}")
        sys.stdout.flush()


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Query the equity service")
    parser.add_argument("--url", default="ws://127.0.0.1:8765", help="Equity service URL.")
    parser.add_argument("--hole", required=True, help="Hero hole cards, e.g. 'As Ac'.")
    parser.add_argument("--board", default="", help="Known community cards.")
    parser.add_argument("--players", type=int, default=2, help="Players at the table, hero included.")
    parser.add_argument("--simulations", type=int, default=10_000, help="Number of simulated deals.")
    parser.add_argument("--log-level", default="INFO", help="Logging level (DEBUG, INFO, etc.).")
    return parser.parse_args()


def main() -> None:
    args = parse_args()
    logging.basicConfig(level=getattr(logging, args.log_level.upper(), logging.INFO), format="%(message)s")
    client = EquityClient(args.url)
    try:
        result = asyncio.run(client.request(args.hole.split(), args.board.split(), args.players, args.simulations))
    except (RuntimeError, OSError, websockets.ConnectionClosed) as exc:
        LOGGER.error("Request failed: %s", exc)
        raise SystemExit(1) from exc
    print(f"EQUITY: {result['equity'] * 100:.2f}%  (wins={result['wins']} ties={result['ties']} losses={result['losses']})")


if __name__ == "__main__":
    main()
