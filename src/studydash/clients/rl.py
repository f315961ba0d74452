"""Client for the remote reinforcement-learning policy service."""

from __future__ import annotations

import logging

from studydash.clients.schemas import NextAction, validate_payload
from studydash.clients.transport import ApiTransport
from studydash.engine.adaptive import fallback_action
from studydash.engine.models import LearnerState, RLAction
from studydash.errors import AppError

logger = logging.getLogger(__name__)

NEXT_ACTION = "/api/rl/next-action"
UPDATE = "/api/rl/update"


class RLClient:
    """Policy lookups that never stall the learning loop.

    ``get_next_action`` falls back to the local heuristic on any failure, and
    ``update_model`` is best effort: failures are logged and dropped.
    """

    def __init__(self, transport: ApiTransport):
        self.transport = transport

    async def get_next_action(self, state: LearnerState) -> RLAction:
        try:
            data = await self.transport.post(NEXT_ACTION, state.to_dict())
            action = validate_payload(NextAction, data)
        except AppError as e:
            logger.warning("next-action lookup failed, using fallback policy: %s", e)
            return fallback_action(state)
        return RLAction(next_topic=action.next_topic, learning_style=action.learning_style)

    async def update_model(self, state: LearnerState, reward: float) -> None:
        try:
            await self.transport.post(UPDATE, {"state": state.to_dict(), "reward": reward})
        except AppError as e:
            logger.warning("RL model update dropped (reward=%s): %s", reward, e)
