"""Static analysis of rules — cycles, contradictions, merges, inheritance.

INVARIANT: Nothing here mutates its input or raises on bad rules; problems
are returned as messages. The one exception is
:func:`~fieldrules.analysis.inheritance.resolve_rule_set_rules`, which raises
on a true inheritance cycle because it cannot produce a rule list.
"""
