"""WebSocket front end for the Monte Carlo equity evaluator."""

from .server import EquityServiceError, ServiceConfig, handle_connection, run_server

__all__ = ["EquityServiceError", "ServiceConfig", "handle_connection", "run_server"]
