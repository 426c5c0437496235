"""
FastAPI dependency for InboundRuleRepository injection.

Tests override `get_rule_repository` with an in-memory implementation:

    app.dependency_overrides[get_rule_repository] = lambda: InMemoryRepo()
"""

from app.dao.base import InboundRuleRepository
from app.dao.dynamodb import DynamoDBInboundRuleRepository

_repository = DynamoDBInboundRuleRepository()


def get_rule_repository() -> InboundRuleRepository:
    """Return the active InboundRuleRepository implementation."""
    return _repository
