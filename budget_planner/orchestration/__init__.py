"""Orchestration of ledger mutations against durable storage."""

from budget_planner.orchestration.planner import BudgetPlanner
from budget_planner.orchestration.reconciler import OptimisticReconciler, PendingMutation
from budget_planner.orchestration.state_machine import (
    MutationState,
    MutationStateMachine,
    TransitionNotAllowed,
)

__all__ = [
    "BudgetPlanner",
    "MutationState",
    "MutationStateMachine",
    "OptimisticReconciler",
    "PendingMutation",
    "TransitionNotAllowed",
]
