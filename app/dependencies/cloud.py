"""
FastAPI dependency for the inbound rule synchronizer.

One synchronizer (and so one Heroku client and the process-wide space locks)
serves every request.  Override `get_synchronizer` to point routes at a fake
remote.
"""

from app.cloud.heroku import HerokuSpaceRulesetClient
from app.services.inbound_rule import InboundRuleSynchronizer

_synchronizer = InboundRuleSynchronizer(HerokuSpaceRulesetClient())


def get_synchronizer() -> InboundRuleSynchronizer:
    return _synchronizer
