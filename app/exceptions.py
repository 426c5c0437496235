"""
Error kinds raised by the inbound rule synchronizer.

Every error carries the space identifier and the rule it concerns so the
router can report them without re-deriving context.

  ValidationError    bad action or CIDR, raised before any remote call
  RemoteFetchError   reading the current ruleset failed
  RemoteWriteError   replacing the ruleset failed
  RuleNotFoundError  the managed rule is missing from the remote ruleset (drift)
"""

from typing import Optional


class InboundRuleError(Exception):
    """Base class for all inbound rule errors."""

    def __init__(
        self,
        message: str,
        space: str,
        action: Optional[str] = None,
        source: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.space = space
        self.action = action
        self.source = source


class ValidationError(InboundRuleError):
    pass


class RemoteFetchError(InboundRuleError):
    pass


class RemoteWriteError(InboundRuleError):
    pass


class RuleNotFoundError(InboundRuleError):
    pass
