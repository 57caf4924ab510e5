from __future__ import annotations


class MockError(Exception):
    """Base class for every error raised by mockwright itself."""


class ConfigurationError(MockError, TypeError):
    """A setup is malformed and can never be satisfied as written."""


class MatcherError(ConfigurationError):
    """An argument matcher failed while evaluating a live call."""


class UnexpectedCallError(MockError, AssertionError):
    """A strict mock received a call no setup accepts."""


class NotSettledError(MockError, RuntimeError):
    """The result of a pending value was read before it was awaited."""
