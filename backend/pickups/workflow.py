from core.workflow import StateMachine, Transition, non_terminal

from .models import PickupStatus as S

TERMINAL = frozenset({S.COMPLETED, S.CANCELLED})

PICKUP_MACHINE = StateMachine(
    name="pickup",
    transitions=[
        # replaying schedule on a SCHEDULED pickup is a reschedule
        Transition("schedule", frozenset({S.REQUESTED}), S.SCHEDULED),
        Transition("start", frozenset({S.SCHEDULED}), S.IN_PROGRESS),
        Transition("complete", frozenset({S.IN_PROGRESS}), S.COMPLETED),
        Transition("cancel", non_terminal(S.values, TERMINAL), S.CANCELLED),
    ],
    terminal=TERMINAL,
)
