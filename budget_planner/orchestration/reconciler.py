"""Optimistic reconciliation of ledger mutations against a durable store.

A mutation is applied to the confirmed snapshot and published immediately as
the visible state. The durable write then runs on the event loop; on success
the speculative snapshot becomes the confirmed baseline, on failure the
visible state reverts to the confirmed baseline and the error is surfaced.

Mutations issued while another is in flight are computed against the same
confirmed baseline. The most recently issued mutation to commit wins: a commit
only advances the confirmed baseline when no later mutation has committed, and
once nothing is in flight the visible state equals the confirmed baseline.
"""

import asyncio
import uuid
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import Any

import structlog

from budget_planner.core.errors import BudgetError, PersistenceError
from budget_planner.core.logging import mutation_id_ctx
from budget_planner.ledger.models import Categories
from budget_planner.orchestration.state_machine import MutationState, MutationStateMachine

logger = structlog.get_logger()

Mutation = Callable[[Categories], Categories]
Write = Callable[[Categories], Awaitable[Any]]


@dataclass(eq=False)
class PendingMutation:
    """One speculative mutation and the snapshots needed to reconcile it."""

    mutation_id: str
    sequence: int
    description: str
    baseline: Categories
    speculative: Categories
    error: Exception | None = None
    result: Any = None
    machine: MutationStateMachine = field(init=False, repr=False)
    task: "asyncio.Task[None] | None" = field(default=None, repr=False)

    def __post_init__(self) -> None:
        self.machine = MutationStateMachine(self)

    @property
    def state(self) -> MutationState:
        return self.machine.get_state_value()

    @property
    def done(self) -> bool:
        return self.state != MutationState.SPECULATIVE

    async def wait(self) -> Categories:
        """Wait for the durable write and return the committed snapshot.

        Raises:
            PersistenceError: If the write failed for an I/O reason.
            BudgetError: If the store rejected the write (e.g. stale id).
        """
        if self.task is not None:
            await self.task
        if self.error is not None:
            raise self.error
        return self.speculative


class OptimisticReconciler:
    """Holds the visible and confirmed ledger snapshots.

    Usage:
        reconciler = OptimisticReconciler(categories)
        snapshot = await reconciler.apply(
            lambda current: create_category(current, "Food", 5000),
            lambda snapshot: store.create_category("Food", Decimal("5000")),
        )
    """

    def __init__(
        self,
        initial: Categories = (),
        on_rollback: Callable[[PendingMutation], None] | None = None,
    ) -> None:
        """Initialize with a confirmed snapshot.

        Args:
            initial: Snapshot known to match the durable store.
            on_rollback: Optional callback notified after each rollback.
        """
        self._confirmed: Categories = tuple(initial)
        self._visible: Categories = self._confirmed
        self._pending: dict[str, PendingMutation] = {}
        self._sequence = 0
        self._committed_sequence = 0
        self._on_rollback = on_rollback

    @property
    def visible(self) -> Categories:
        """Snapshot callers should display, including speculative changes."""
        return self._visible

    @property
    def confirmed(self) -> Categories:
        """Last snapshot known to be durable."""
        return self._confirmed

    @property
    def pending(self) -> list[PendingMutation]:
        """Mutations whose writes are still in flight, oldest first."""
        return sorted(self._pending.values(), key=lambda pending: pending.sequence)

    def reset(self, snapshot: Categories) -> None:
        """Replace both snapshots, e.g. after reloading from the store."""
        self._confirmed = tuple(snapshot)
        self._visible = self._confirmed

    def submit(
        self, mutation: Mutation, write: Write, *, description: str = ""
    ) -> PendingMutation:
        """Apply a mutation speculatively and schedule its durable write.

        Must be called with a running event loop. Errors raised by the
        mutation itself (validation, duplicates, unknown ids) propagate
        immediately and leave both snapshots untouched.

        Args:
            mutation: Pure transition from the confirmed snapshot.
            write: Coroutine factory performing the durable write; receives
                the speculative snapshot.
            description: Label used in logs.

        Returns:
            The PendingMutation tracking the write.
        """
        baseline = self._confirmed
        speculative = mutation(baseline)

        self._sequence += 1
        pending = PendingMutation(
            mutation_id=str(uuid.uuid4()),
            sequence=self._sequence,
            description=description,
            baseline=baseline,
            speculative=speculative,
        )
        self._visible = speculative
        self._pending[pending.mutation_id] = pending

        logger.debug(
            "mutation_applied",
            mutation_id=pending.mutation_id,
            description=description,
            in_flight=len(self._pending),
        )

        pending.task = asyncio.get_running_loop().create_task(
            self._reconcile(pending, write)
        )
        return pending

    async def apply(
        self, mutation: Mutation, write: Write, *, description: str = ""
    ) -> Categories:
        """Submit a mutation and wait for it to commit or roll back.

        Returns:
            The committed snapshot.

        Raises:
            PersistenceError: If the durable write failed.
            BudgetError: If the mutation or the store rejected the change.
        """
        pending = self.submit(mutation, write, description=description)
        return await pending.wait()

    async def _reconcile(self, pending: PendingMutation, write: Write) -> None:
        token = mutation_id_ctx.set(pending.mutation_id)
        try:
            pending.result = await write(pending.speculative)
        except BudgetError as exc:
            # PersistenceError and store-side domain errors surface unchanged
            self._rollback(pending, exc)
        except asyncio.CancelledError:
            self._rollback(pending, PersistenceError("Write was cancelled"))
            raise
        except Exception as exc:
            error = PersistenceError(f"Failed to save changes: {exc}")
            error.__cause__ = exc
            self._rollback(pending, error)
        else:
            self._commit(pending)
        finally:
            self._pending.pop(pending.mutation_id, None)
            if not self._pending:
                self._visible = self._confirmed
            mutation_id_ctx.reset(token)

    def _commit(self, pending: PendingMutation) -> None:
        # a stale commit must not replace a newer confirmed baseline
        if pending.sequence > self._committed_sequence:
            self._confirmed = pending.speculative
            self._committed_sequence = pending.sequence
        if pending.sequence == self._sequence:
            self._visible = pending.speculative
        pending.machine.commit()

    def _rollback(self, pending: PendingMutation, error: BudgetError) -> None:
        self._visible = self._confirmed
        pending.machine.rollback(error=error)
        if self._on_rollback is not None:
            self._on_rollback(pending)
