"""Importable fixtures shared across test modules."""
