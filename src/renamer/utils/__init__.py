"""Shared utilities for renamer."""
