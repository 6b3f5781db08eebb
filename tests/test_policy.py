import pytest

from models import StealthLimits


def test_defaults():
    limits = StealthLimits()
    assert limits.max_sweep_sol == 0.1
    assert limits.max_sweep_usdc == 10
    assert limits.max_request_sol == 0.05
    assert limits.max_request_usdc == 5


@pytest.mark.parametrize("asset, amount, allowed", [
    ("SOL", 0.1, True),
    ("sol", 0.05, True),
    ("SOL", 0.11, False),
    ("USDC", 10, True),
    ("USDC", 10.01, False),
    ("SOL", 0, False),
    ("BONK", 1, False),
])
def test_check_sweep(asset, amount, allowed):
    ok, reason = StealthLimits().check_sweep(asset, amount)
    assert ok is allowed
    assert (reason == "") is allowed


def test_check_request():
    limits = StealthLimits()
    assert limits.check_request("SOL", 0.05) == (True, "")
    ok, reason = limits.check_request("SOL", 0.06)
    assert not ok
    assert "exceeds limit of 0.05 SOL" in reason
    assert limits.check_request("USDC", 5)[0]
    assert not limits.check_request("USDC", 6)[0]


def test_dict_round_trip():
    limits = StealthLimits(max_sweep_sol=1, max_request_usdc=2.5)
    assert StealthLimits.from_dict(limits.to_dict()) == limits


def test_from_dict_fills_defaults():
    assert StealthLimits.from_dict({"max_sweep_usdc": 20}) == StealthLimits(max_sweep_usdc=20.0)


@pytest.mark.parametrize("data", [
    {"max_sweep_sol": -1},
    {"max_request_sol": "0.1"},
    {"max_request_usdc": True},
])
def test_from_dict_validation(data):
    with pytest.raises(ValueError):
        StealthLimits.from_dict(data)
