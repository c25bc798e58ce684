"""Core primitives shared by every layer: results, exit codes, config."""

from .errors import ErrorCode
from .result import Err, Ok, Result, is_err, is_ok

__all__ = ["Err", "ErrorCode", "Ok", "Result", "is_err", "is_ok"]
