import argparse
import asyncio
import logging

from .server import ServiceConfig, run_server


def main() -> None:
    parser = argparse.ArgumentParser(description="Hold'em equity WebSocket service")
    parser.add_argument("--host", default="0.0.0.0")
    parser.add_argument("--port", type=int, default=8765)
    parser.add_argument("--max-simulations", type=int, default=200_000, help="Upper bound per equity request")
    parser.add_argument("--workers", type=int, default=1, help="Worker processes per equity request")
    parser.add_argument("--log-level", default="INFO", help="Logging level (DEBUG, INFO, etc.).")
    args = parser.parse_args()

    logging.basicConfig(level=getattr(logging, args.log_level.upper(), logging.INFO))
    config = ServiceConfig(max_simulations=args.max_simulations, workers=args.workers)
    asyncio.run(run_server(args.host, args.port, config))


if __name__ == "__main__":
    main()
