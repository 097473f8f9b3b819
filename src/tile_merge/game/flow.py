from __future__ import annotations

import logging
from enum import Enum

from statemachine import State, StateMachine


logger = logging.getLogger(__name__)


class GameState(str, Enum):
    GENERATING_LEVEL = "generating_level"
    SPAWNING_BLOCKS = "spawning_blocks"
    WAITING_INPUT = "waiting_input"
    MOVING = "moving"
    WIN = "win"
    LOSE = "lose"


class GameFlow(StateMachine):
    """Guards the session's phase transitions.

    generating level -> spawning -> waiting for input <-> moving, with
    spawning ending in win or lose. The session does the work; the flow
    only decides which transitions are legal.
    """

    generating_level = State(GameState.GENERATING_LEVEL.value, value=GameState.GENERATING_LEVEL.value, initial=True)
    spawning_blocks = State(GameState.SPAWNING_BLOCKS.value, value=GameState.SPAWNING_BLOCKS.value)
    waiting_input = State(GameState.WAITING_INPUT.value, value=GameState.WAITING_INPUT.value)
    moving = State(GameState.MOVING.value, value=GameState.MOVING.value)
    win = State(GameState.WIN.value, value=GameState.WIN.value, final=True)
    lose = State(GameState.LOSE.value, value=GameState.LOSE.value, final=True)

    level_generated = generating_level.to(spawning_blocks)
    spawned = spawning_blocks.to(waiting_input)
    won = spawning_blocks.to(win)
    lost = spawning_blocks.to(lose)
    move_requested = waiting_input.to(moving)
    moves_settled = moving.to(spawning_blocks)

    @property
    def phase(self) -> GameState:
        return GameState(str(self.current_state.value))

    def after_transition(self, event: str, target: State) -> None:
        logger.debug("State changed to %s (%s)", target.value, event)
