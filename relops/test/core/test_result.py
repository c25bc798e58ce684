"""Tests for relops.core.result module."""

import pytest

from relops.core.result import Err, Ok, Result, is_err, is_ok


class TestOk:
    def test_ok_is_ok(self) -> None:
        result = Ok(42)
        assert result.is_ok() is True
        assert result.is_err() is False

    def test_ok_unwrap(self) -> None:
        assert Ok(42).unwrap() == 42
        assert Ok(42).unwrap_or(0) == 42

    def test_ok_map(self) -> None:
        assert Ok(21).map(lambda x: x * 2) == Ok(42)


class TestErr:
    def test_err_is_err(self) -> None:
        result = Err("boom")
        assert result.is_err() is True
        assert result.is_ok() is False

    def test_err_unwrap_raises(self) -> None:
        with pytest.raises(ValueError, match="called unwrap on Err"):
            Err("boom").unwrap()

    def test_err_unwrap_or(self) -> None:
        assert Err("boom").unwrap_or(0) == 0

    def test_err_map_is_noop(self) -> None:
        assert Err("boom").map(lambda x: x * 2) == Err("boom")


def test_type_guards() -> None:
    ok: Result[int, str] = Ok(1)
    err: Result[int, str] = Err("no")
    assert is_ok(ok) and not is_err(ok)
    assert is_err(err) and not is_ok(err)


def test_pattern_matching() -> None:
    result: Result[int, str] = Ok(3)
    match result:
        case Ok(value):
            assert value == 3
        case Err(_):
            pytest.fail("expected Ok")
