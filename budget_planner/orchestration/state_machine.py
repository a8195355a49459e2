"""Mutation state machine for optimistic ledger updates.

Provides declarative state transitions for one in-flight mutation with
callbacks for side effects (logging, error capture).
"""

import enum
from typing import TYPE_CHECKING

import structlog
from statemachine import State, StateMachine
from statemachine.exceptions import TransitionNotAllowed

if TYPE_CHECKING:
    from budget_planner.orchestration.reconciler import PendingMutation

logger = structlog.get_logger()


class MutationState(str, enum.Enum):
    """Lifecycle of a speculative mutation."""

    SPECULATIVE = "speculative"
    COMMITTED = "committed"
    ROLLED_BACK = "rolled_back"


class MutationStateMachine(StateMachine):
    """State machine for a single optimistic mutation.

    States:
    - speculative: applied to the visible snapshot, durable write in flight
    - committed: durable write succeeded, snapshot is the new baseline (final)
    - rolled_back: durable write failed, visible snapshot reverted (final)

    Transitions:
    - commit: speculative -> committed
    - rollback: speculative -> rolled_back
    """

    speculative = State(initial=True, value=MutationState.SPECULATIVE)
    committed = State(final=True, value=MutationState.COMMITTED)
    rolled_back = State(final=True, value=MutationState.ROLLED_BACK)

    commit = speculative.to(committed)
    rollback = speculative.to(rolled_back)

    def __init__(self, mutation: "PendingMutation") -> None:
        """Initialize state machine for a mutation.

        Args:
            mutation: The pending mutation whose lifecycle this tracks
        """
        self.mutation = mutation
        super().__init__()

    def get_state_value(self) -> MutationState:
        """Get current state as MutationState enum."""
        return self.current_state.value

    def on_commit(self) -> None:
        """Called when the durable write succeeded."""
        logger.info(
            "mutation_committed",
            mutation_id=self.mutation.mutation_id,
            description=self.mutation.description,
        )

    def on_rollback(self, error: Exception | None = None) -> None:
        """Called when the durable write failed.

        Args:
            error: The failure that triggered the rollback
        """
        self.mutation.error = error
        logger.warning(
            "mutation_rolled_back",
            mutation_id=self.mutation.mutation_id,
            description=self.mutation.description,
            error=str(error) if error is not None else None,
            error_kind=getattr(error, "kind", None),
        )


__all__ = [
    "MutationState",
    "MutationStateMachine",
    "TransitionNotAllowed",
]
