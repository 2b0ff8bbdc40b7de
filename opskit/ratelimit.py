"""A token-bucket ratelimiter that can be shared between threads."""

from __future__ import annotations

import threading
import time
from dataclasses import dataclass
from datetime import timedelta
from typing import Union

_U64_MAX = (1 << 64) - 1
_NANOS_PER_SECOND = 1_000_000_000

Interval = Union[timedelta, int, float]


class RatelimitError(Exception):
    """Base class for invalid ratelimiter configurations."""


class AvailableTokensTooHigh(RatelimitError):
    def __init__(self) -> None:
        super().__init__("available tokens cannot be set higher than max tokens")


class MaxTokensTooLow(RatelimitError):
    def __init__(self) -> None:
        super().__init__("max tokens cannot be less than the refill amount")


class RefillAmountTooHigh(RatelimitError):
    def __init__(self) -> None:
        super().__init__("refill amount cannot exceed the max tokens")


class RefillIntervalTooLong(RatelimitError):
    def __init__(self) -> None:
        super().__init__("refill interval in nanoseconds exceeds maximum u64")


class TokenUnavailable(Exception):
    """Raised by `Ratelimiter.try_wait` when no token can be taken.

    `wait` is the number of seconds until the next refill is due.
    """

    def __init__(self, wait: float) -> None:
        super().__init__(f"no token available, next refill in {wait:.9f}s")
        self.wait = wait


def _to_nanos(interval: Interval) -> int:
    """Convert a timedelta or a number of seconds to whole nanoseconds."""
    if isinstance(interval, timedelta):
        nanos = (interval // timedelta(microseconds=1)) * 1000
    elif isinstance(interval, bool) or not isinstance(interval, (int, float)):
        raise TypeError("interval must be a timedelta or a number of seconds")
    elif isinstance(interval, int):
        nanos = interval * _NANOS_PER_SECOND
    else:
        nanos = round(interval * _NANOS_PER_SECOND)
    if nanos <= 0:
        raise ValueError("interval must be positive")
    return nanos


def _check_tokens(tokens: int) -> int:
    if isinstance(tokens, bool) or not isinstance(tokens, int):
        raise TypeError("token amounts must be integers")
    if not 0 <= tokens <= _U64_MAX:
        raise ValueError(f"token amount out of range: {tokens}")
    return tokens


@dataclass
class _Parameters:
    capacity: int
    refill_amount: int
    refill_interval: int  # nanoseconds


class Ratelimiter:
    """Adds a fixed number of tokens to a bucket after each interval.

    Construct one with `Ratelimiter.builder`. Durations reported by the
    ratelimiter are in seconds.
    """

    def __init__(self, available: int, parameters: _Parameters, refill_at: int) -> None:
        self._lock = threading.Lock()
        self._available = available
        self._parameters = parameters
        self._refill_at = refill_at

    @staticmethod
    def builder(amount: int, interval: Interval) -> Builder:
        """Start building a ratelimiter adding `amount` tokens per `interval`.

        `interval` is a timedelta or a number of seconds. Very short
        intervals are limited by clock resolution; prefer adding several
        tokens per interval for high rates.
        """
        return Builder(amount, interval)

    def rate(self) -> float:
        """Return the effective rate in tokens per second."""
        with self._lock:
            params = self._parameters
            return params.refill_amount * 1_000_000_000.0 / params.refill_interval

    def refill_interval(self) -> float:
        """Return the interval between refills in seconds."""
        with self._lock:
            return self._parameters.refill_interval / _NANOS_PER_SECOND

    def set_refill_interval(self, interval: Interval) -> None:
        """Change the interval between refills."""
        nanos = _to_nanos(interval)
        if nanos > _U64_MAX:
            raise RefillIntervalTooLong()
        with self._lock:
            self._parameters.refill_interval = nanos

    def refill_amount(self) -> int:
        """Return the number of tokens added on each refill."""
        with self._lock:
            return self._parameters.refill_amount

    def set_refill_amount(self, amount: int) -> None:
        """Change the number of tokens added on each refill."""
        _check_tokens(amount)
        with self._lock:
            if amount > self._parameters.capacity:
                raise RefillAmountTooHigh()
            self._parameters.refill_amount = amount

    def max_tokens(self) -> int:
        """Return the maximum number of tokens the bucket holds."""
        with self._lock:
            return self._parameters.capacity

    def set_max_tokens(self, amount: int) -> None:
        """Change the burst size; it may not be below the refill amount.

        If the new maximum exceeds the tokens currently available, the
        bucket is filled up to it.
        """
        _check_tokens(amount)
        with self._lock:
            if amount < self._parameters.refill_amount:
                raise MaxTokensTooLow()
            self._parameters.capacity = amount
            if amount > self._available:
                self._available = amount

    def available(self) -> int:
        """Return the number of tokens currently available."""
        return self._available

    def set_available(self, amount: int) -> None:
        """Set the number of available tokens, at most the maximum."""
        _check_tokens(amount)
        with self._lock:
            if amount > self._parameters.capacity:
                raise AvailableTokensTooHigh()
            self._available = amount

    def _refill(self, now: int) -> int | None:
        """Add tokens for elapsed intervals.

        Returns None on a refill, otherwise the nanoseconds until one is due.
        """
        if now < self._refill_at:
            return self._refill_at - now
        params = self._parameters
        intervals = (now - self._refill_at) // params.refill_interval + 1
        self._refill_at += intervals * params.refill_interval
        amount = intervals * params.refill_amount
        if self._available + amount >= params.capacity:
            self._available = params.capacity
        else:
            self._available += amount
        return None

    def try_wait(self) -> None:
        """Take one token without blocking.

        Raises `TokenUnavailable`, whose `wait` hints at when the next refill
        occurs, if no token is available.
        """
        with self._lock:
            now = time.monotonic_ns()
            pending = self._refill(now)
            if self._available == 0:
                if pending is None:
                    pending = self._refill_at - now
                raise TokenUnavailable(pending / _NANOS_PER_SECOND)
            self._available -= 1


class Builder:
    """Configures and constructs a `Ratelimiter`."""

    def __init__(self, amount: int, interval: Interval) -> None:
        self._refill_amount = _check_tokens(amount)
        self._refill_interval = _to_nanos(interval)
        self._initial_available = 0
        self._max_tokens = 1

    def max_tokens(self, tokens: int) -> Builder:
        """Set the burst size; defaults to one and may not be below the amount."""
        self._max_tokens = _check_tokens(tokens)
        return self

    def initial_available(self, tokens: int) -> Builder:
        """Set the tokens available at start; defaults to zero."""
        self._initial_available = _check_tokens(tokens)
        return self

    def build(self) -> Ratelimiter:
        """Construct the ratelimiter, validating the configuration."""
        if self._max_tokens < self._refill_amount:
            raise MaxTokensTooLow()
        if self._refill_interval > _U64_MAX:
            raise RefillIntervalTooLong()
        parameters = _Parameters(
            capacity=self._max_tokens,
            refill_amount=self._refill_amount,
            refill_interval=self._refill_interval,
        )
        refill_at = time.monotonic_ns() + self._refill_interval
        return Ratelimiter(self._initial_available, parameters, refill_at)