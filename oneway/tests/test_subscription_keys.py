"""
Tests for canonical action serialization and subscription keys.

Critical: equal actions share a key, any payload difference separates them.
"""

import enum
from dataclasses import dataclass

from oneway.core import Cancel, FeatureAction, canonical_json_str, canonicalize, subscription_key
from oneway.core.ids import stable_id
from oneway.examples.todo import Add, AddText, AddToDo, ReserveToDo
from oneway.tests.features import Increment, Watch


class Color(enum.Enum):
    RED = 1
    BLUE = 2


@dataclass(frozen=True)
class Paint:
    color: Color
    tags: frozenset = frozenset()


class Start(FeatureAction):
    pass


class Seek(FeatureAction):
    def __init__(self, position):
        self.position = position


def test_canonicalize_dict_key_order():
    """Dict key order must not affect canonical output."""
    assert canonicalize({"z": 1, "a": 2}) == canonicalize({"a": 2, "z": 1})
    assert canonical_json_str({"z": 1, "a": 2}) == '{"a":2,"z":1}'


def test_canonicalize_dataclass_and_enum():
    canon = canonicalize(Paint(Color.RED, frozenset({"b", "a"})))
    assert canon["color"]["name"] == "RED"
    assert canon["tags"] == ["a", "b"]
    assert canon["__type__"].endswith("Paint")


def test_equal_actions_share_key():
    assert subscription_key("F", ReserveToDo(3)) == subscription_key("F", ReserveToDo(3))
    assert subscription_key("F", Increment()) == subscription_key("F", Increment())


def test_payload_changes_key():
    """addTodo("a") and addTodo("b") must not collide."""
    assert subscription_key("F", Add("a")) != subscription_key("F", Add("b"))
    assert subscription_key("F", Watch("a", 0.1)) != subscription_key("F", Watch("a", 0.2))


def test_variant_changes_key():
    """Same payload under a different variant must not collide."""
    assert subscription_key("F", Add("x")) != subscription_key("F", AddText("x"))


def test_feature_namespaces_key():
    assert subscription_key("A", Add("x")) != subscription_key("B", Add("x"))
    assert subscription_key("A", Add("x")).startswith("A:Add:")


def test_nested_payload_is_part_of_key():
    assert subscription_key("F", AddToDo(AddText("a"))) != subscription_key("F", AddToDo(AddText("b")))


def test_int_and_str_payloads_differ():
    assert subscription_key("F", Watch("1")) != subscription_key("F", Watch(1))


def test_cancel_helper_wraps_target():
    assert Add.cancel(Add("x")) == Cancel(Add("x"))
    assert Cancel(Add("x")).target == Add("x")


def test_stable_id_deterministic():
    assert stable_id("a", "b") == stable_id("a", "b")
    assert stable_id("a", "b") != stable_id("ab")
    assert len(stable_id("x")) == 64


def test_numerically_equal_payloads_share_key():
    """ReserveToDo(1) == ReserveToDo(1.0), so their keys must match too."""
    assert ReserveToDo(1) == ReserveToDo(1.0)
    assert subscription_key("F", ReserveToDo(0)) == subscription_key("F", ReserveToDo(0.0))
    assert subscription_key("F", ReserveToDo(1)) == subscription_key("F", ReserveToDo(1.0))
    assert subscription_key("F", Watch("a", True)) == subscription_key("F", Watch("a", 1))
    assert subscription_key("F", ReserveToDo(0.5)) != subscription_key("F", ReserveToDo(1))
    assert canonicalize({1.0: 2.0}) == canonicalize({1: 2})


def test_plain_action_subclasses_have_stable_keys():
    """Non-dataclass variants are keyed by class and attributes, never by identity."""
    assert subscription_key("F", Start()) == subscription_key("F", Start())
    assert subscription_key("F", Start()).startswith("F:Start:")
    assert canonicalize(Start())["__type__"].endswith("Start")
    assert subscription_key("F", Seek(3)) == subscription_key("F", Seek(3.0))
    assert subscription_key("F", Seek(3)) != subscription_key("F", Seek(4))
    assert subscription_key("F", Start()) != subscription_key("F", Seek(3))
