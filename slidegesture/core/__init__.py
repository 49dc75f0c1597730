"""Shared types, event bus and pipeline."""
