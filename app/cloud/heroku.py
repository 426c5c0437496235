"""
Heroku Platform API client for private space inbound rulesets.

Endpoints used
──────────────
  GET  /spaces/{space_id_or_name}/inbound-ruleset   current ruleset
  PUT  /spaces/{space_id_or_name}/inbound-ruleset   replace the whole ruleset

Transport failures and non-2xx responses surface as ``httpx.HTTPError``.
No retries are attempted here.
"""

import logging
from typing import Optional
from urllib.parse import quote

import httpx

from app.cloud.base import SpaceRulesetAPI
from app.config import settings
from app.schemas.inbound_rule import Rule, Ruleset

logger = logging.getLogger(__name__)

HEROKU_ACCEPT = "application/vnd.heroku+json; version=3"


def _http_client() -> httpx.Client:
    """Build an httpx client from application settings."""
    headers = {"Accept": HEROKU_ACCEPT}
    if settings.heroku_api_key:
        headers["Authorization"] = f"Bearer {settings.heroku_api_key}"
    return httpx.Client(
        base_url=settings.heroku_api_url,
        headers=headers,
        timeout=settings.heroku_timeout_seconds,
    )


class HerokuSpaceRulesetClient(SpaceRulesetAPI):
    """
    SpaceRulesetAPI backed by the Heroku Platform API.

    The httpx client is built lazily on first use so that importing this
    module does not require an API key.
    """

    def __init__(self, client: Optional[httpx.Client] = None) -> None:
        self._client = client

    def _get_client(self) -> httpx.Client:
        if self._client is None:
            self._client = _http_client()
        return self._client

    @staticmethod
    def _path(space_id: str) -> str:
        return f"/spaces/{quote(space_id, safe='')}/inbound-ruleset"

    def fetch_current_ruleset(self, space_id: str) -> Ruleset:
        logger.debug("GET inbound ruleset for space '%s'", space_id)
        response = self._get_client().get(self._path(space_id))
        response.raise_for_status()
        return Ruleset.model_validate(response.json())

    def replace_ruleset(self, space_id: str, rules: list[Rule]) -> Ruleset:
        payload = {"rules": [r.model_dump(mode="json") for r in rules]}
        logger.debug(
            "PUT inbound ruleset for space '%s' (%d rule(s))", space_id, len(rules)
        )
        response = self._get_client().put(self._path(space_id), json=payload)
        response.raise_for_status()
        return Ruleset.model_validate(response.json())
