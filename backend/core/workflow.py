from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, FrozenSet, Iterable, List, Optional

from .exceptions import StateConflict


@dataclass(frozen=True)
class Transition:
    action: str
    sources: FrozenSet[str]
    target: str
    # A repeat of the action on an entity already in `target` is a no-op
    replayable: bool = True


@dataclass
class StateMachine:
    """
    Explicit (state, action) -> state table for one entity type.

    `resolve` is the only entry point the services use: it returns the
    transition to apply, None for an idempotent replay, and raises
    StateConflict for anything the table does not allow.
    """

    name: str
    transitions: Iterable[Transition]
    terminal: FrozenSet[str] = frozenset()
    _by_action: Dict[str, Transition] = field(init=False, repr=False)

    def __post_init__(self):
        self.transitions = tuple(self.transitions)
        self._by_action = {}
        for t in self.transitions:
            if t.action in self._by_action:
                raise ValueError(f"{self.name}: duplicate action {t.action}")
            if t.sources & self.terminal:
                raise ValueError(f"{self.name}: action {t.action} leaves a terminal state")
            self._by_action[t.action] = t

    def is_terminal(self, state: str) -> bool:
        return state in self.terminal

    def allowed_actions(self, state: str) -> List[str]:
        return [t.action for t in self.transitions if state in t.sources]

    def resolve(self, current: str, action: str) -> Optional[Transition]:
        transition = self._by_action.get(action)
        if transition is None:
            raise StateConflict(current, action, f"Unknown {self.name} action '{action}'.")
        if current in transition.sources:
            return transition
        if transition.replayable and current == transition.target:
            return None
        if self.is_terminal(current):
            raise StateConflict(current, action, f"{self.name.capitalize()} is {current} and can no longer change.")
        raise StateConflict(current, action)


def non_terminal(all_states: Iterable[str], terminal: Iterable[str]) -> FrozenSet[str]:
    return frozenset(all_states) - frozenset(terminal)
