"""Helpers shared by services."""
from meditrade.services.utils.stream_handler import (handle_websocket_stream,
                                                     parse_symbols_param)

__all__ = ["handle_websocket_stream", "parse_symbols_param"]
