"""
Abstract DAO (Data Access Object) for managed inbound rule records.

A record exists for every rule this service has created and not yet
deleted.  It is the service's provisioning state: a read that finds the rule
gone from the remote ruleset deletes the record.

Records are keyed by ``(space, rule_id)`` where ``rule_id`` is the rule's
identity string ``"<source> <action>"``.
"""

from abc import ABC, abstractmethod
from typing import Optional


class InboundRuleRepository(ABC):
    """Persistence interface for managed inbound rule records."""

    @abstractmethod
    def save(self, record: dict) -> None:
        """
        Persist a rule record.

        Parameters
        ----------
        record : dict
            Must contain ``space`` and ``rule_id`` string keys.  An existing
            record with the same keys is replaced.
        """

    @abstractmethod
    def get(self, space: str, rule_id: str) -> Optional[dict]:
        """Return the record, or ``None`` when it is not stored."""

    @abstractmethod
    def list_by_space(self, space: str) -> list[dict]:
        """Return every record stored for *space*."""

    @abstractmethod
    def delete(self, space: str, rule_id: str) -> bool:
        """
        Delete the record.

        Returns ``True`` if it existed and was removed, ``False`` otherwise.
        """
