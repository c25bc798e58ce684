from __future__ import annotations

from relops.core.structured import as_obj_list, as_str_dict, get_int, get_list, get_str, get_table


def test_as_str_dict() -> None:
    assert as_str_dict({"a": 1}) == {"a": 1}
    assert as_str_dict({1: "a"}) is None
    assert as_str_dict(["a"]) is None


def test_getters() -> None:
    data: dict[str, object] = {
        "name": "relops",
        "id": 7,
        "flag": True,
        "table": {"k": "v"},
        "items": [1, 2],
    }
    assert get_str(data, "name") == "relops"
    assert get_str(data, "id") is None
    assert get_int(data, "id") == 7
    assert get_int(data, "flag") is None
    assert get_table(data, "table") == {"k": "v"}
    assert get_table(data, "items") is None
    assert get_list(data, "items") == [1, 2]
    assert as_obj_list("x") is None
