# src/bramble/core/__init__.py
"""Core building blocks: Seed, Size, Range, Tree, shrink functions, config loading, logging.

Submodules are imported directly (``from bramble.core.range import Range``);
this package re-exports nothing, so contracts can depend on
core primitives without import cycles.
"""
