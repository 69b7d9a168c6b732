"""Test suite for the formstate engine.

This package contains tests for:
- Listener pipeline (ordering, first-error-wins, skipping non-callables)
- Field table (record/array duality, mutators, definition checks)
- Value/error stores and engine configuration
- Event system (emission, serialization)
- Engine dispatch and integration scenarios (re-entrant mutators, submit)
"""
