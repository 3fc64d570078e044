"""Three-phase discrete-event engine.

The loop is generic: domain behaviour comes from a small table of hooks.

    A-phase  advance the clock to the earliest pending event
    B-phase  execute every event bound to that time
    C-phase  start any conditional activity (idle stations with a queue)

The horizon is checked before each A-phase, so the last batch of events
executed may lie at or beyond the horizon.
"""

import logging
from dataclasses import dataclass
from typing import Any, Callable

from rescuecamp.core.entities import EngineState
from rescuecamp.core.events import Event, SimContext

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EngineHooks:
    """Capabilities a model supplies to the engine.

    Attributes:
        initialize: Prime the model, e.g. schedule the first arrival.
        handle_event: Execute one B-event.
        try_c_events: Start conditional activities once per cycle.
        finalize: Aggregate results after the loop ends.
    """
    initialize: Callable[[], None]
    handle_event: Callable[[Event], None]
    try_c_events: Callable[[], None]
    finalize: Callable[[], Any]


def run_engine(context: SimContext, hooks: EngineHooks, horizon: float) -> Any:
    """Run the three-phase loop until the clock reaches the horizon.

    Args:
        context: Clock and event queue for this run.
        hooks: Model capabilities.
        horizon: Stop time. A horizon of 0 runs no phases at all.

    Returns:
        Whatever hooks.finalize returns.
    """
    clock, events = context.clock, context.events

    clock.reset()
    hooks.initialize()

    cycles = 0
    while clock.now() < horizon:
        next_time = events.peek_min_time()
        if next_time is None:
            logger.debug("Event queue empty, stopping")
            break

        clock.advance_to(next_time)
        logger.debug(f"A-phase: time is {clock.now():.3f}")

        while events.peek_min_time() == clock.now():
            hooks.handle_event(events.pop_min())

        hooks.try_c_events()
        cycles += 1

    logger.debug(f"Engine stopped at {clock.now():.3f} after {cycles} cycles")
    return hooks.finalize()


class Engine:
    """Single-use runner tracking the lifecycle of one engine run.

    Attributes:
        context: Clock and event queue for the run.
        hooks: Model capabilities.
        horizon: Stop time.
        state: NOT_STARTED, RUNNING or FINISHED.
    """

    def __init__(self, context: SimContext, hooks: EngineHooks, horizon: float) -> None:
        self.context = context
        self.hooks = hooks
        self.horizon = horizon
        self.state = EngineState.NOT_STARTED

    def run(self) -> Any:
        """Run the loop once.

        Raises:
            RuntimeError: If the engine has already been started.
        """
        if self.state is not EngineState.NOT_STARTED:
            raise RuntimeError(f"Engine cannot be run from state {self.state.value}")
        self.state = EngineState.RUNNING
        try:
            return run_engine(self.context, self.hooks, self.horizon)
        finally:
            self.state = EngineState.FINISHED
