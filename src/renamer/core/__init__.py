"""Reconciliation engine: listing parser, diff resolver, and operation planner."""
