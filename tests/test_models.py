import pytest

from models import StealthAddress


def test_to_dict_drops_missing_label():
    addr = StealthAddress(index=0, address="4SRYSzvcu17jREe2yeNmYMeHSJwgdbKbZSxjb7WBZm9g", created_at=0)
    assert addr.to_dict() == {
        "index": 0,
        "address": "4SRYSzvcu17jREe2yeNmYMeHSJwgdbKbZSxjb7WBZm9g",
        "created_at": 0,
    }


def test_from_dict():
    data = {"index": 3, "address": "abc", "created_at": 1700000000000, "label": "Rent"}
    addr = StealthAddress.from_dict(data)
    assert addr == StealthAddress(3, "abc", 1700000000000, "Rent")
    assert addr.to_dict() == data


def test_from_dict_defaults_created_at():
    assert StealthAddress.from_dict({"index": 1, "address": "abc"}).created_at == 0


@pytest.mark.parametrize("index", [-1, "1", None])
def test_from_dict_rejects_bad_index(index):
    with pytest.raises(ValueError):
        StealthAddress.from_dict({"index": index, "address": "abc"})


def test_records_are_immutable():
    addr = StealthAddress(0, "abc", 0)
    with pytest.raises(AttributeError):
        addr.index = 1
