from core.workflow import StateMachine, Transition, non_terminal

from .models import PurchaseStatus as S

TERMINAL = frozenset({S.DELIVERED, S.CANCELLED})

PURCHASE_MACHINE = StateMachine(
    name="purchase",
    transitions=[
        Transition("start_treatment", frozenset({S.REQUESTED}), S.IN_TREATMENT),
        Transition("deliver", frozenset({S.IN_TREATMENT}), S.DELIVERED),
        Transition("cancel", non_terminal(S.values, TERMINAL), S.CANCELLED),
    ],
    terminal=TERMINAL,
)
