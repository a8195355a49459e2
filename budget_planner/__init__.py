"""Budget planner: statutory pay deductions and a self-consistent budget ledger."""

__version__ = "0.1.0"
