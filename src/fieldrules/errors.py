"""Exceptions raised by fieldrules.

Validation paths report problems as data; only ruleset resolution raises.
"""

from __future__ import annotations


class InheritanceCycleError(ValueError):
    """A ruleset's ``extends`` chain leads back to a ruleset already visited.

    Attributes:
        chain: Ruleset names in visit order, ending with the repeated name.
    """

    def __init__(self, chain: list[str]) -> None:
        self.chain = list(chain)
        super().__init__(f"Circular inheritance detected in ruleset: {self.chain[-1]}")
