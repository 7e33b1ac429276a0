"""Performance benchmarks for projgrad.

This package contains microbenchmarks for the optimizer's hot loop on dense
NMF subproblems and on keyed sparse parameters.
"""
