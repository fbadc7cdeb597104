from dataclasses import dataclass
from datetime import date
from enum import Enum

import pytest

from carryall.protocol import codec


class Color(Enum):
    RED = "red"


class Point:
    __slots__ = ("x", "y", "_hidden")

    def __init__(self, x, y):
        self.x = x
        self.y = y
        self._hidden = True


@dataclass
class Box:
    label: str
    sizes: list


def test_encode_is_compact_and_ascii_only():
    assert codec.encode({"a": [1, 2], "b": "é"}) == '{"a":[1,2],"b":"\\u00e9"}'
    assert codec.encode("\x7f") == '"\\u007f"'


def test_encode_round_trips_plain_values():
    value = {"n": None, "t": True, "f": 1.5, "list": [1, "two", [3]], "s": "päck"}
    assert codec.decode(codec.encode(value)) == value


def test_encode_flattens_leaf_and_structured_types():
    assert codec.decode(codec.encode(Color.RED)) == "red"
    assert codec.decode(codec.encode(date(2024, 3, 31))) == "2024-03-31"
    assert codec.decode(codec.encode(Point(1, 2))) == {"x": 1, "y": 2}
    assert codec.decode(codec.encode(Box("a", [1]))) == {"label": "a", "sizes": [1]}


def test_encode_rejects_unknown_values():
    with pytest.raises(TypeError):
        codec.encode(object())


def test_decode_raises_value_error_on_garbage():
    with pytest.raises(ValueError):
        codec.decode("{not json")


def test_public_attributes_skips_private_names_and_copies():
    box = Box("a", [1])
    state = codec.public_attributes(box)
    state["label"] = "changed"
    assert box.label == "a"
    assert codec.public_attributes(Point(1, 2)) == {"x": 1, "y": 2}


def test_has_attribute_state():
    assert codec.has_attribute_state(Point(1, 2))
    assert codec.has_attribute_state(Box("a", []))
    assert not codec.has_attribute_state("text")
    assert not codec.has_attribute_state([1])
    assert not codec.has_attribute_state({"a": 1})
    assert not codec.has_attribute_state(Box)


def test_force_object_rewrites_sequences_at_any_depth():
    assert codec.force_object([1, [2, 3]]) == {"0": 1, "1": {"0": 2, "1": 3}}
    assert codec.force_object({"a": (1,), 2: "b"}) == {"a": {"0": 1}, "2": "b"}
    assert codec.force_object(Box("x", [5])) == {"label": "x", "sizes": {"0": 5}}
    assert codec.force_object([]) == {}
    assert codec.force_object(7) == 7
