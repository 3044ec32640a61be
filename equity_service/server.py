from __future__ import annotations

import asyncio
import json
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import websockets

from engine.cards import Card, parse_cards
from simulation.equity import EquityResult, MonteCarloEquityEvaluator, validate_deal

LOGGER = logging.getLogger("equity_service")

PROTOCOL_VERSION = 1


class EquityServiceError(Exception):
    def __init__(self, code: str, msg: str) -> None:
        super().__init__(msg)
        self.code = code
        self.msg = msg


@dataclass
class ServiceConfig:
    max_simulations: int = 200_000
    default_simulations: int = 10_000
    workers: int = 1


@dataclass
class EquityRequest:
    req_id: Any
    hole: List[Card]
    players: int
    simulations: int
    board: List[Card] = field(default_factory=list)


async def _send_json(websocket: Any, payload: Dict[str, Any]) -> None:
    await websocket.send(json.dumps({"v": PROTOCOL_VERSION, **payload}))


async def _send_error(websocket: Any, code: str, msg: str) -> None:
    await _send_json(websocket, {"type": "error", "code": code, "msg": msg})


def _positive_int(message: Dict[str, Any], key: str, default: Optional[int] = None) -> int:
    value = message.get(key, default)
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        raise EquityServiceError("BAD_SCHEMA", f"{key} must be a positive integer")
    return value


def _card_list(message: Dict[str, Any], key: str) -> List[Card]:
    labels = message.get(key, [])
    if not isinstance(labels, list) or not all(isinstance(label, str) for label in labels):
        raise EquityServiceError("BAD_SCHEMA", f"{key} must be a list of card labels")
    try:
        return parse_cards(labels)
    except ValueError as exc:
        raise EquityServiceError("BAD_CARDS", str(exc)) from None


def parse_equity_request(message: Dict[str, Any], config: ServiceConfig) -> EquityRequest:
    """Validate an ``equity`` message; raises EquityServiceError with the protocol code."""
    if "hole" not in message:
        raise EquityServiceError("BAD_SCHEMA", "hole is required")
    players = _positive_int(message, "players", 2)
    simulations = _positive_int(message, "simulations", config.default_simulations)
    if simulations > config.max_simulations:
        raise EquityServiceError(
            "TOO_MANY_SIMULATIONS",
            f"At most {config.max_simulations} simulations per request",
        )
    hole = _card_list(message, "hole")
    board = _card_list(message, "board")
    try:
        validate_deal(players, hole, board)
    except ValueError as exc:
        raise EquityServiceError("BAD_CARDS", str(exc)) from None
    return EquityRequest(
        req_id=message.get("req_id"),
        hole=hole,
        players=players,
        simulations=simulations,
        board=board,
    )


async def run_equity(websocket: Any, request: EquityRequest, config: ServiceConfig) -> EquityResult:
    """Evaluate off the event loop, streaming a progress frame per whole percent."""
    loop = asyncio.get_running_loop()
    updates: asyncio.Queue = asyncio.Queue()
    last_percent = -1

    def on_progress(done: int, total: int) -> None:
        nonlocal last_percent
        percent = done * 100 // total
        if percent != last_percent:
            last_percent = percent
            loop.call_soon_threadsafe(updates.put_nowait, (done, total))

    evaluator = MonteCarloEquityEvaluator(num_simulations=request.simulations, workers=config.workers)

    def work() -> EquityResult:
        try:
            return evaluator.run(request.players, request.hole, request.board, on_progress)
        finally:
            loop.call_soon_threadsafe(updates.put_nowait, None)

    pending = loop.run_in_executor(None, work)
    while True:
        update = await updates.get()
        if update is None:
            break
        done, total = update
        await _send_json(websocket, {"type": "progress", "req_id": request.req_id, "done": done, "total": total})
    return await pending


async def _handle_equity(websocket: Any, message: Dict[str, Any], config: ServiceConfig) -> None:
    try:
        request = parse_equity_request(message, config)
    except EquityServiceError as exc:
        await _send_error(websocket, exc.code, exc.msg)
        return

    LOGGER.info(
        "Equity request %s: %s players, %s simulations",
        request.req_id,
        request.players,
        request.simulations,
    )
    try:
        result = await run_equity(websocket, request, config)
    except websockets.ConnectionClosed:
        raise
    except Exception as exc:  # noqa: BLE001
        LOGGER.exception("Equity request %s failed: %s", request.req_id, exc)
        await _send_error(websocket, "INTERNAL", "Equity evaluation failed")
        return

    await _send_json(
        websocket,
        {
            "type": "result",
            "req_id": request.req_id,
            "equity": result.equity,
            "wins": result.wins,
            "ties": result.ties,
            "losses": result.losses,
            "simulations": result.simulations,
        },
    )


async def handle_connection(websocket: Any, config: ServiceConfig) -> None:
    hello_raw = await websocket.recv()
    try:
        hello = json.loads(hello_raw)
    except json.JSONDecodeError:
        hello = None
    if not isinstance(hello, dict) or hello.get("type") != "hello":
        await _send_error(websocket, "BAD_HELLO", "Expected hello")
        return

    await _send_json(websocket, {"type": "welcome", "max_simulations": config.max_simulations})

    async for raw in websocket:
        try:
            message = json.loads(raw)
        except json.JSONDecodeError:
            await _send_error(websocket, "BAD_JSON", "Message is not valid JSON")
            continue
        if not isinstance(message, dict):
            await _send_error(websocket, "BAD_SCHEMA", "Message must be a JSON object")
            continue

        msg_type = message.get("type")
        if msg_type == "equity":
            await _handle_equity(websocket, message, config)
        else:
            await _send_error(websocket, "UNKNOWN_TYPE", f"Unsupported message type: {msg_type}")


async def run_server(host: str, port: int, config: ServiceConfig) -> None:
    async def _handler(websocket):
        try:
            await handle_connection(websocket, config)
        except websockets.ConnectionClosed:
            LOGGER.info("Client disconnected")

    async with websockets.serve(_handler, host, port):
        LOGGER.info("Equity service listening on %s:%s", host, port)
        await asyncio.Future()
