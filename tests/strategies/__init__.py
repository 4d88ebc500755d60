"""Shared Hypothesis strategies for bramble's tests."""
