# reeled/llm/cascade.py
"""
Retry/cascade state machine.

Pure: `next_state` maps (state, outcome) to the next state and never calls a
model or sleeps. The invoker drives it and does the side effects.

    Attempting(c, a) --SUCCESS--------------------------> Succeeded(c)
    Attempting(c, a) --RETRYABLE, attempts left---------> BackingOff(c, a+1, delay)
    Attempting(c, a) --RETRYABLE, none left-------------> ExhaustedModel(c)
    Attempting(c, a) --NON_RETRYABLE--------------------> ExhaustedModel(c)
    BackingOff(c, a, _) --------------------------------> Attempting(c, a)
    ExhaustedModel(c) --more candidates-----------------> Attempting(c+1, 0)
    ExhaustedModel(c) --no more candidates--------------> Failed
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Union

from reeled.llm.policy import FallbackPolicy


class Outcome(str, Enum):
    SUCCESS = "success"
    RETRYABLE = "retryable"
    NON_RETRYABLE = "non_retryable"


@dataclass(frozen=True)
class Attempting:
    candidate: int
    attempt: int


@dataclass(frozen=True)
class BackingOff:
    candidate: int
    attempt: int        # the attempt that runs once the delay is over
    delay: float


@dataclass(frozen=True)
class ExhaustedModel:
    candidate: int


@dataclass(frozen=True)
class Succeeded:
    candidate: int


@dataclass(frozen=True)
class Failed:
    pass


State = Union[Attempting, BackingOff, ExhaustedModel, Succeeded, Failed]

INITIAL_STATE: State = Attempting(candidate=0, attempt=0)


def is_terminal(state: State) -> bool:
    return isinstance(state, (Succeeded, Failed))


def next_state(state: State, policy: FallbackPolicy, outcome: Outcome | None = None) -> State:
    """
    Advance the machine by one step.

    `outcome` is required from Attempting and ignored elsewhere.
    """
    if isinstance(state, Attempting):
        if outcome is None:
            raise ValueError("an outcome is required to leave Attempting")
        if outcome is Outcome.SUCCESS:
            return Succeeded(state.candidate)
        if outcome is Outcome.NON_RETRYABLE:
            return ExhaustedModel(state.candidate)
        if state.attempt + 1 < policy.attempts_per_model:
            return BackingOff(
                candidate=state.candidate,
                attempt=state.attempt + 1,
                delay=policy.backoff_delay(state.attempt),
            )
        return ExhaustedModel(state.candidate)

    if isinstance(state, BackingOff):
        return Attempting(state.candidate, state.attempt)

    if isinstance(state, ExhaustedModel):
        if state.candidate + 1 < len(policy.candidates):
            return Attempting(state.candidate + 1, 0)
        return Failed()

    raise ValueError(f"{type(state).__name__} is terminal")
