"""Orchestration chains wiring the reconciliation core to logging and output."""

from renamer.chains.reconcile_chain import ReconcileChain

__all__ = ["ReconcileChain"]
