from mockwright._behavior import Deferred
from mockwright._core import Mock
from mockwright._defaults import DefaultValue
from mockwright._dispatch import MockBehavior
from mockwright._errors import (
    ConfigurationError,
    MatcherError,
    MockError,
    NotSettledError,
    UnexpectedCallError,
)
from mockwright._matchers import It, Range
from mockwright._refs import Out, Ref

__all__ = [
    "ConfigurationError",
    "DefaultValue",
    "Deferred",
    "It",
    "MatcherError",
    "Mock",
    "MockBehavior",
    "MockError",
    "NotSettledError",
    "Out",
    "Range",
    "Ref",
    "UnexpectedCallError",
]
