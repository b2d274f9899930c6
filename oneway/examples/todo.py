"""
Reference To-Do features.

ToDoFeature keeps a list of to-dos and has two timed effects:
ReserveToDo(seconds) adds "Reserved To-Do" after a delay, and
AddToDoPerSecond(seconds) keeps adding an entry every interval until
cancelled. AddToDoFeature is a stateless child feature whose actions a
parent forwards through OneWay.transform().
"""

import asyncio
from dataclasses import dataclass
from typing import Any, AsyncIterator, Optional, Tuple

from ..core import EffectHandler, Feature, FeatureAction, FeatureState, Reducer


# -- AddToDoFeature ---------------------------------------------------------

@dataclass(frozen=True)
class AddToDoState(FeatureState):
    pass


class AddToDoAction(FeatureAction):
    pass


@dataclass(frozen=True)
class AddText(AddToDoAction):
    text: str


AddToDoFeature = Feature(
    id="AddToDoFeature",
    reducer=Reducer(),
    state_type=AddToDoState,
    action_type=AddToDoAction,
)


# -- ToDoFeature ------------------------------------------------------------

@dataclass(frozen=True)
class ToDoState(FeatureState):
    todos: Tuple[str, ...] = ()


class ToDoAction(FeatureAction):
    pass


@dataclass(frozen=True)
class Add(ToDoAction):
    text: str


@dataclass(frozen=True)
class Delete(ToDoAction):
    index: int


@dataclass(frozen=True)
class AddToDo(ToDoAction):
    action: AddToDoAction


@dataclass(frozen=True)
class ReserveToDo(ToDoAction):
    seconds: float


@dataclass(frozen=True)
class AddToDoPerSecond(ToDoAction):
    seconds: float


todo_reducer = Reducer()


@todo_reducer.on(Add)
def _add(state: ToDoState, action: Add) -> ToDoState:
    return ToDoState(todos=state.todos + (action.text,))


@todo_reducer.on(Delete)
def _delete(state: ToDoState, action: Delete) -> ToDoState:
    if not 0 <= action.index < len(state.todos):
        return state
    todos = state.todos[:action.index] + state.todos[action.index + 1:]
    return ToDoState(todos=todos)


@todo_reducer.on(AddToDo)
def _add_todo(state: ToDoState, action: AddToDo) -> ToDoState:
    if isinstance(action.action, AddText):
        return ToDoState(todos=state.todos + (action.action.text,))
    return state


class ToDoEffects(EffectHandler):
    """Timed effects for ToDoFeature."""

    RESERVED_TEXT = "Reserved To-Do"

    def handle(self, action: Any, state: Any) -> Optional[AsyncIterator[Any]]:
        if isinstance(action, ReserveToDo):
            return self._reserve(action.seconds)
        if isinstance(action, AddToDoPerSecond):
            return self._every(action.seconds)
        return None

    async def _reserve(self, seconds: float) -> AsyncIterator[Any]:
        await asyncio.sleep(seconds)
        yield Add(self.RESERVED_TEXT)

    async def _every(self, seconds: float) -> AsyncIterator[Any]:
        while True:
            await asyncio.sleep(seconds)
            yield Add(f"Add To Do Per Seconds: {seconds}")


ToDoFeature = Feature(
    id="TodoFeature",
    reducer=todo_reducer,
    effects=[ToDoEffects()],
    state_type=ToDoState,
    action_type=ToDoAction,
)
