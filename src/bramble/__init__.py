"""
Bramble: property-based testing with integrated shrinking.

Generators produce lazy shrink trees from a splittable seed; properties run
a predicate over many generated cases and walk the failing case's tree to
find a locally minimal counterexample.
"""

__version__ = "0.3.0"
