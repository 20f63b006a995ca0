from core.workflow import StateMachine, Transition, non_terminal

from .models import QuoteStatus as S

TERMINAL = frozenset({S.VALIDATED, S.CANCELLED, S.REJECTED, S.EXPIRED})

QUOTE_MACHINE = StateMachine(
    name="quote",
    transitions=[
        Transition("send", frozenset({S.SUBMITTED}), S.SENT),
        Transition("accept", frozenset({S.SENT}), S.ACCEPTED),
        Transition("reject", frozenset({S.SENT}), S.REJECTED),
        Transition("expire", frozenset({S.SENT}), S.EXPIRED),
        Transition("start_treatment", frozenset({S.ACCEPTED}), S.IN_TREATMENT),
        # a repeated validate would create a second shipment
        Transition("validate", frozenset({S.IN_TREATMENT}), S.VALIDATED, replayable=False),
        Transition("cancel", non_terminal(S.values, TERMINAL), S.CANCELLED),
    ],
    terminal=TERMINAL,
)
