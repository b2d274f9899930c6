"""
Tests for the global feature registry.

Sync tests run without an event loop, so their containers deliver on the
shared background context.
"""

import asyncio
import logging

import pytest

from oneway import registry
from oneway.core import Feature
from oneway.registry import GlobalOneWay, get_global_oneway
from oneway.runtime.container import OneWay
from oneway.examples.todo import Add, ToDoFeature, ToDoState, todo_reducer
from oneway.tests.helpers import take, wait_until


def test_first_registration_wins():
    assert registry.register_state(ToDoFeature, ToDoState(("first",))) is True
    assert registry.register_state(ToDoFeature, ToDoState(("second",))) is False
    assert registry.state(ToDoFeature) == ToDoState(("first",))
    assert len(get_global_oneway()) == 1


def test_unregistered_feature_is_a_logged_miss(caplog):
    with caplog.at_level(logging.WARNING):
        assert registry.lookup(ToDoFeature) is None
        assert registry.observe(ToDoFeature) is None
        assert registry.state(ToDoFeature) is None
        assert registry.send(ToDoFeature, Add("lost")) is False

    assert "The initial state for feature TodoFeature has not been registered" in caplog.text
    assert not get_global_oneway().is_registered(ToDoFeature)


def test_lookup_is_typed_by_feature_definition(caplog):
    registry.register_state(ToDoFeature, ToDoState())
    impostor = Feature(id=ToDoFeature.id, reducer=todo_reducer)

    assert isinstance(registry.lookup(ToDoFeature), OneWay)
    with caplog.at_level(logging.WARNING):
        assert registry.lookup(impostor) is None
    assert "different feature definition" in caplog.text

    # A plain id skips the definition check.
    assert registry.lookup(ToDoFeature.id) is registry.lookup(ToDoFeature)


def test_send_reaches_shared_container():
    registry.register_state(ToDoFeature, ToDoState())
    assert registry.send(ToDoFeature, Add("milk")) is True
    assert registry.send("TodoFeature", Add("eggs")) is True
    assert wait_until(lambda: registry.state(ToDoFeature) == ToDoState(("milk", "eggs")))


def test_register_state_passes_container_options():
    registry.register_state(ToDoFeature, ToDoState(), context="ToDoScreen")
    oneway = registry.lookup(ToDoFeature)
    assert oneway.tracer.context == "ToDoScreen"


def test_reset_clears_entries():
    registry.register_state(ToDoFeature, ToDoState())
    registry._reset()
    assert registry.lookup(ToDoFeature.id) is None
    assert registry.register_state(ToDoFeature, ToDoState(("again",))) is True
    assert registry.state(ToDoFeature) == ToDoState(("again",))


def test_global_registry_is_a_singleton():
    assert get_global_oneway() is get_global_oneway()
    assert isinstance(get_global_oneway(), GlobalOneWay)


def test_independent_registries_do_not_share_entries():
    local = GlobalOneWay()
    local.register_state(ToDoFeature, ToDoState(("local",)))
    assert registry.lookup(ToDoFeature.id) is None
    assert local.state(ToDoFeature) == ToDoState(("local",))
    local._reset()
    assert len(local) == 0


@pytest.mark.asyncio
async def test_observe_registered_feature():
    registry.register_state(ToDoFeature, ToDoState())
    stream = registry.observe(ToDoFeature)
    assert await take(stream, 1) == [ToDoState()]

    registry.send(ToDoFeature, Add("a"))
    await asyncio.sleep(0)
    registry.send(ToDoFeature, Add("b"))

    assert await take(stream, 2) == [ToDoState(("a",)), ToDoState(("a", "b"))]
    await stream.aclose()
    assert get_global_oneway().state_stream(ToDoFeature) is not None
