"""Rule engine — condition evaluation, target application, and the single-pass applier.

INVARIANT: ``apply_rules`` evaluates each rule exactly once, in list order.
Later rules observe mutations made by earlier ones; earlier rules are never
re-evaluated. It is not a fixed-point solver.
"""
