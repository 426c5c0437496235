"""
Pydantic schemas for inbound rules.

`Rule` and `Ruleset` mirror the Heroku Platform API `inbound-ruleset`
payloads.  `RuleHandle` / `RuleView` are what the synchronizer hands back,
and the request/response models shape the HTTP surface.
"""

import ipaddress
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

# The remote creates every space with this rule and falls back to it when a
# ruleset would otherwise be empty.
DEFAULT_SOURCE = "0.0.0.0/0"


class RuleAction(str, Enum):
    ALLOW = "allow"
    DENY = "deny"


def rule_identity(source: str, action: str) -> str:
    """Stable identity string of a rule: ``"<source> <action>"``."""
    return f"{source} {action}"


def validate_network_cidr(v: str) -> str:
    """
    Accept only a network address in canonical CIDR form.

    ``8.8.8.0/24`` is valid, ``8.8.8.1/24`` (host bits set) and bare
    addresses are not.
    """
    try:
        network = ipaddress.ip_network(v, strict=True)
    except ValueError:
        raise ValueError(f"'{v}' is not a valid network CIDR block.")
    if str(network) != v:
        raise ValueError(f"'{v}' is not a valid network CIDR block.")
    return v


# ── Remote payloads ───────────────────────────────────────────────────────────

class Rule(BaseModel):
    """
    A single inbound rule.  Immutable; equal when action and source match.

    Sources are taken as the remote reports them; caller input is checked
    through `InboundRuleRequest` before it becomes a `Rule`.
    """

    model_config = ConfigDict(frozen=True)

    action: RuleAction
    source: str


class SpaceRef(BaseModel):
    id: Optional[str] = None
    name: str


class Ruleset(BaseModel):
    """Snapshot of the full ordered ruleset of a space."""

    id: Optional[str] = None
    space: SpaceRef
    rules: list[Rule]
    created_at: Optional[str] = None
    created_by: Optional[str] = None


DEFAULT_RULE = Rule(action=RuleAction.ALLOW, source=DEFAULT_SOURCE)


# ── Synchronizer results ──────────────────────────────────────────────────────

class RuleHandle(BaseModel):
    """Returned by a successful ensure."""

    id: str
    space: str
    action: RuleAction
    source: str


class RuleView(BaseModel):
    """Returned by a successful lookup.  ``space_name`` is the canonical name."""

    id: str
    space_name: str
    action: RuleAction
    source: str


# ── Request models ────────────────────────────────────────────────────────────

class InboundRuleRequest(BaseModel):
    """Request body for POST /spaces/{space}/inbound-rules."""

    action: RuleAction = Field(
        ...,
        examples=["allow"],
        description="Whether traffic from the source is allowed or denied.",
    )
    source: str = Field(
        ...,
        examples=["8.8.8.0/24"],
        description="Network CIDR block the rule applies to.",
    )

    @field_validator("source")
    @classmethod
    def validate_source(cls, v: str) -> str:
        return validate_network_cidr(v)


# ── Response models ───────────────────────────────────────────────────────────

class InboundRuleResponse(BaseModel):
    """A managed inbound rule as stored by this service."""

    id: str
    space: str
    space_name: str
    action: RuleAction
    source: str
    created_by: Optional[str] = None
    created_at: Optional[str] = None


class InboundRuleListResponse(BaseModel):
    """Returned by GET /spaces/{space}/inbound-rules."""

    count: int
    rules: list[InboundRuleResponse]
