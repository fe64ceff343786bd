"""Support utilities used by the architect runtime."""

from .exchange_logs import ExchangeLogEntry, load_exchange_log, write_exchange_log

__all__ = ["ExchangeLogEntry", "load_exchange_log", "write_exchange_log"]
