import sys
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from app.main import app
from app.dependencies.api import get_current_user
from app.dependencies.cloud import get_synchronizer
from app.dependencies.dao import get_rule_repository
from app.schemas.inbound_rule import Rule
from app.services.inbound_rule import InboundRuleSynchronizer
from app.services.locks import KeyedMutex
from tests.fakes import FakeSpaceRulesetAPI, InMemoryRuleRepository


@pytest.fixture()
def remote():
    return FakeSpaceRulesetAPI(
        rules={"my-space": [Rule(action="allow", source="0.0.0.0/0")]}
    )


@pytest.fixture()
def synchronizer(remote):
    return InboundRuleSynchronizer(remote, locks=KeyedMutex())


@pytest.fixture()
def repo():
    return InMemoryRuleRepository()


@pytest.fixture()
def client(synchronizer, repo):
    app.dependency_overrides[get_current_user] = lambda: "test-user"
    app.dependency_overrides[get_synchronizer] = lambda: synchronizer
    app.dependency_overrides[get_rule_repository] = lambda: repo
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
