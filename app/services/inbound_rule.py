"""
Inbound rule service layer.

`InboundRuleSynchronizer` keeps a single (action, source) rule present in, or
absent from, the remote ruleset of a space.  The remote only offers
fetch-all / replace-all, so every mutation is:

  1. lock the space
  2. fetch the current ruleset
  3. change the list locally
  4. push the whole list back
  5. unlock

Lookups do not lock.  The module-level functions below wrap the synchronizer
with the managed-rule record kept in the `InboundRuleRepository`.
"""

import logging
from datetime import datetime, timezone
from typing import Optional

import httpx
from botocore.exceptions import ClientError
from pydantic import ValidationError as PydanticValidationError

from app.cloud.base import SpaceRulesetAPI
from app.dao.base import InboundRuleRepository
from app.exceptions import (
    RemoteFetchError,
    RemoteWriteError,
    RuleNotFoundError,
    ValidationError,
)
from app.schemas.inbound_rule import (
    DEFAULT_RULE,
    InboundRuleRequest,
    InboundRuleResponse,
    Rule,
    RuleHandle,
    Ruleset,
    RuleView,
    rule_identity,
)
from app.services.locks import KeyedMutex, space_locks

logger = logging.getLogger(__name__)


class InboundRuleSynchronizer:
    """Read-modify-write of one rule against a space's remote ruleset."""

    def __init__(self, api: SpaceRulesetAPI, locks: Optional[KeyedMutex] = None) -> None:
        self._api = api
        self._locks = locks if locks is not None else space_locks

    # ── Internal helpers ──────────────────────────────────────────────────────

    @staticmethod
    def _validate(space_id: str, action: str, source: str) -> Rule:
        try:
            request = InboundRuleRequest(action=action, source=source)
        except PydanticValidationError as exc:
            errors = "; ".join(e["msg"] for e in exc.errors())
            raise ValidationError(
                f"Invalid inbound rule ({action} {source}) for space ({space_id}): {errors}",
                space=space_id,
                action=action,
                source=source,
            ) from exc
        return Rule(action=request.action, source=request.source)

    def _fetch(self, verb: str, space_id: str, rule: Rule) -> Ruleset:
        logger.debug("Retrieving current inbound ruleset for space (%s)", space_id)
        try:
            return self._api.fetch_current_ruleset(space_id)
        except (httpx.HTTPError, ValueError) as exc:
            raise RemoteFetchError(
                f"Error {verb} inbound rule ({rule.action.value} {rule.source}) "
                f"for space ({space_id}): {exc}",
                space=space_id,
                action=rule.action.value,
                source=rule.source,
            ) from exc

    def _replace(self, verb: str, space_id: str, rule: Rule, rules: list[Rule]) -> None:
        logger.debug("Updating current inbound ruleset for space (%s)", space_id)
        try:
            self._api.replace_ruleset(space_id, rules)
        except (httpx.HTTPError, ValueError) as exc:
            raise RemoteWriteError(
                f"Error {verb} inbound rule ({rule.action.value} {rule.source}) "
                f"for space ({space_id}): {exc}",
                space=space_id,
                action=rule.action.value,
                source=rule.source,
            ) from exc

    # ── Operations ────────────────────────────────────────────────────────────

    def ensure(self, space_id: str, action: str, source: str) -> RuleHandle:
        """Add the rule to the end of the ruleset unless it is already present."""
        rule = self._validate(space_id, action, source)
        handle = RuleHandle(
            id=rule_identity(rule.source, rule.action.value),
            space=space_id,
            action=rule.action,
            source=rule.source,
        )

        with self._locks.hold(space_id):
            ruleset = self._fetch("creating", space_id, rule)
            if rule in ruleset.rules:
                logger.debug("Rule (%s %s) already added, do nothing", action, source)
                return handle

            self._replace("creating", space_id, rule, [*ruleset.rules, rule])

        logger.info("Added inbound rule (%s %s) to space (%s)", action, source, space_id)
        return handle

    def lookup(self, space_id: str, action: str, source: str) -> RuleView:
        """
        Find the rule in the current ruleset.

        The first match in ruleset order wins.  Raises `RuleNotFoundError`
        when the rule has drifted away.
        """
        rule = self._validate(space_id, action, source)
        ruleset = self._fetch("reading", space_id, rule)

        for r in ruleset.rules:
            if r == rule:
                return RuleView(
                    id=rule_identity(r.source, r.action.value),
                    space_name=ruleset.space.name,
                    action=r.action,
                    source=r.source,
                )

        raise RuleNotFoundError(
            f"Error reading inbound rule for space ({space_id}): "
            f"Rule ({action} {source}) not found in current inbound ruleset",
            space=space_id,
            action=action,
            source=source,
        )

    def retract(self, space_id: str, action: str, source: str) -> None:
        """
        Remove the first matching rule from the ruleset.

        A space must always have at least one rule, so removing the last one
        resets the ruleset to the platform default (allow 0.0.0.0/0).
        """
        rule = self._validate(space_id, action, source)

        with self._locks.hold(space_id):
            ruleset = self._fetch("deleting", space_id, rule)
            rules = list(ruleset.rules)
            try:
                index = rules.index(rule)
            except ValueError:
                logger.debug("Rule (%s %s) already deleted, do nothing", action, source)
                return

            del rules[index]
            if not rules:
                logger.debug("Resetting ruleset to allow all inbound traffic (allow 0.0.0.0/0)")
                rules.append(DEFAULT_RULE)

            self._replace("deleting", space_id, rule, rules)

        logger.info("Removed inbound rule (%s %s) from space (%s)", action, source, space_id)


# ── Lifecycle functions used by the router ────────────────────────────────────

def create_inbound_rule(
    space: str,
    request: InboundRuleRequest,
    created_by: str,
    synchronizer: InboundRuleSynchronizer,
    repo: InboundRuleRepository,
) -> InboundRuleResponse:
    """
    Ensure the rule exists remotely, read it back and record it as managed.

    Parameters
    ----------
    space : str
        Space name or id as given by the caller.
    request : InboundRuleRequest
        Validated request body.
    created_by : str
        Authenticated username, stored in the record for auditing.
    """
    action = request.action.value
    logger.info(
        "User '%s' creating inbound rule (%s %s) in space '%s'.",
        created_by,
        action,
        request.source,
        space,
    )

    handle = synchronizer.ensure(space, action, request.source)
    view = synchronizer.lookup(space, action, request.source)

    record = {
        "space": space,
        "rule_id": handle.id,
        "space_name": view.space_name,
        "action": view.action.value,
        "source": view.source,
        "created_by": created_by,
        "created_at": datetime.now(timezone.utc).isoformat(),
    }
    repo.save(record)
    return _to_response(record)


def read_inbound_rule(
    space: str,
    action: str,
    source: str,
    synchronizer: InboundRuleSynchronizer,
    repo: InboundRuleRepository,
) -> InboundRuleResponse:
    """
    Refresh a managed rule from the remote ruleset.

    When the rule has drifted away its record is dropped before the
    `RuleNotFoundError` propagates.
    """
    rule_id = rule_identity(source, action)
    try:
        view = synchronizer.lookup(space, action, source)
    except RuleNotFoundError:
        logger.warning(
            "Inbound rule (%s %s) no longer present in space '%s'; dropping record.",
            action,
            source,
            space,
        )
        try:
            repo.delete(space, rule_id)
        except ClientError as exc:
            logger.error("Could not drop record '%s' for space '%s': %s", rule_id, space, exc)
        raise

    record = repo.get(space, rule_id) or {"space": space, "rule_id": rule_id}
    record.update(
        space_name=view.space_name,
        action=view.action.value,
        source=view.source,
    )
    return _to_response(record)


def delete_inbound_rule(
    space: str,
    action: str,
    source: str,
    synchronizer: InboundRuleSynchronizer,
    repo: InboundRuleRepository,
) -> None:
    """Remove the rule remotely and forget its record."""
    synchronizer.retract(space, action, source)
    repo.delete(space, rule_identity(source, action))


def list_managed_rules(space: str, repo: InboundRuleRepository) -> list[InboundRuleResponse]:
    """Return every rule this service manages in *space*."""
    return [_to_response(r) for r in repo.list_by_space(space)]


def _to_response(record: dict) -> InboundRuleResponse:
    return InboundRuleResponse(
        id=record["rule_id"],
        space=record["space"],
        space_name=record["space_name"],
        action=record["action"],
        source=record["source"],
        created_by=record.get("created_by"),
        created_at=record.get("created_at"),
    )
