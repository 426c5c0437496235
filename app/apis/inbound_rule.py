"""
Inbound rule router: all endpoints under /spaces/{space}/inbound-rules.

Every route requires a valid JWT.  ``space`` may be the space name or id.
Rules are immutable: changing a rule means deleting it and creating another.

Endpoints
─────────
  POST   /spaces/{space}/inbound-rules                    Add a rule
  GET    /spaces/{space}/inbound-rules                    List managed rules
  GET    /spaces/{space}/inbound-rules/{action}/{source}  Read a rule
  DELETE /spaces/{space}/inbound-rules/{action}/{source}  Remove a rule

``source`` is a CIDR and keeps its slash, e.g.
``/spaces/my-space/inbound-rules/allow/8.8.8.0/24``.
"""

import logging

from botocore.exceptions import ClientError
from fastapi import APIRouter, Depends, HTTPException, status

from app.dao.base import InboundRuleRepository
from app.dependencies.api import get_current_user
from app.dependencies.cloud import get_synchronizer
from app.dependencies.dao import get_rule_repository
from app.exceptions import InboundRuleError, RuleNotFoundError, ValidationError
from app.schemas.inbound_rule import (
    InboundRuleListResponse,
    InboundRuleRequest,
    InboundRuleResponse,
)
from app.services.inbound_rule import (
    InboundRuleSynchronizer,
    create_inbound_rule,
    delete_inbound_rule,
    list_managed_rules,
    read_inbound_rule,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/spaces/{space}/inbound-rules", tags=["Inbound Rules"])


def _http_error(exc: InboundRuleError) -> HTTPException:
    if isinstance(exc, ValidationError):
        code = status.HTTP_422_UNPROCESSABLE_ENTITY
    elif isinstance(exc, RuleNotFoundError):
        code = status.HTTP_404_NOT_FOUND
    else:
        code = status.HTTP_502_BAD_GATEWAY
        logger.error("Heroku API error: %s", exc)
    return HTTPException(status_code=code, detail=exc.message)


def _store_error(exc: ClientError) -> HTTPException:
    logger.error("Rule record store error: %s", exc)
    return HTTPException(
        status_code=status.HTTP_502_BAD_GATEWAY,
        detail=f"AWS error: {exc}",
    )


@router.post(
    "",
    response_model=InboundRuleResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Add an inbound rule to a space",
    description=(
        "Appends the rule to the space's inbound ruleset unless an identical rule "
        "is already present, and records it as managed by this service. Returns 409 "
        "when the rule is removed by another caller before it can be read back."
    ),
)
def create_rule(
    space: str,
    body: InboundRuleRequest,
    current_user: str = Depends(get_current_user),
    synchronizer: InboundRuleSynchronizer = Depends(get_synchronizer),
    repo: InboundRuleRepository = Depends(get_rule_repository),
) -> InboundRuleResponse:
    logger.info("POST /spaces/%s/inbound-rules called by '%s'", space, current_user)
    try:
        return create_inbound_rule(
            space=space,
            request=body,
            created_by=current_user,
            synchronizer=synchronizer,
            repo=repo,
        )
    except RuleNotFoundError as exc:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Inbound rule was removed from space '{space}' before it could be read back.",
        ) from exc
    except InboundRuleError as exc:
        raise _http_error(exc) from exc
    except ClientError as exc:
        raise _store_error(exc) from exc


@router.get(
    "",
    response_model=InboundRuleListResponse,
    summary="List managed inbound rules of a space",
)
def list_rules(
    space: str,
    current_user: str = Depends(get_current_user),
    repo: InboundRuleRepository = Depends(get_rule_repository),
) -> InboundRuleListResponse:
    logger.info("GET /spaces/%s/inbound-rules called by '%s'", space, current_user)
    try:
        rules = list_managed_rules(space=space, repo=repo)
    except ClientError as exc:
        raise _store_error(exc) from exc
    return InboundRuleListResponse(count=len(rules), rules=rules)


@router.get(
    "/{action}/{source:path}",
    response_model=InboundRuleResponse,
    summary="Read an inbound rule",
    description=(
        "Looks the rule up in the space's current inbound ruleset. Returns 404, and "
        "forgets the rule, when it is no longer present."
    ),
)
def get_rule(
    space: str,
    action: str,
    source: str,
    current_user: str = Depends(get_current_user),
    synchronizer: InboundRuleSynchronizer = Depends(get_synchronizer),
    repo: InboundRuleRepository = Depends(get_rule_repository),
) -> InboundRuleResponse:
    logger.info("GET /spaces/%s/inbound-rules/%s/%s called by '%s'", space, action, source, current_user)
    try:
        return read_inbound_rule(
            space=space, action=action, source=source, synchronizer=synchronizer, repo=repo
        )
    except InboundRuleError as exc:
        raise _http_error(exc) from exc
    except ClientError as exc:
        raise _store_error(exc) from exc


@router.delete(
    "/{action}/{source:path}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Remove an inbound rule",
    description=(
        "Removes the rule from the space's inbound ruleset. Removing the last rule "
        "resets the ruleset to allow 0.0.0.0/0. Deleting an absent rule succeeds."
    ),
)
def delete_rule(
    space: str,
    action: str,
    source: str,
    current_user: str = Depends(get_current_user),
    synchronizer: InboundRuleSynchronizer = Depends(get_synchronizer),
    repo: InboundRuleRepository = Depends(get_rule_repository),
) -> None:
    logger.info("DELETE /spaces/%s/inbound-rules/%s/%s called by '%s'", space, action, source, current_user)
    try:
        delete_inbound_rule(
            space=space, action=action, source=source, synchronizer=synchronizer, repo=repo
        )
    except InboundRuleError as exc:
        raise _http_error(exc) from exc
    except ClientError as exc:
        raise _store_error(exc) from exc
