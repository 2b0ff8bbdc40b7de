"""Metrics, rate limiting, routed queues and buffered logging for services."""

__version__ = "0.1.0"