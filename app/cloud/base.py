"""
Narrow interface to the remote space ruleset service.

The synchronizer only ever needs two calls: read the whole ruleset and
replace the whole ruleset.  There is no append/remove endpoint on the remote
side, which is why every mutation is a read-modify-write.

Tests drive the synchronizer with an in-memory implementation of this class.
"""

from abc import ABC, abstractmethod

from app.schemas.inbound_rule import Rule, Ruleset


class SpaceRulesetAPI(ABC):
    """Remote operations on the inbound ruleset of a space."""

    @abstractmethod
    def fetch_current_ruleset(self, space_id: str) -> Ruleset:
        """
        Return the ruleset currently enforced for *space_id*.

        *space_id* may be the space name or its id; the returned
        ``Ruleset.space.name`` is always the canonical name.
        """

    @abstractmethod
    def replace_ruleset(self, space_id: str, rules: list[Rule]) -> Ruleset:
        """Replace the full ruleset of *space_id* with *rules*, in order."""
