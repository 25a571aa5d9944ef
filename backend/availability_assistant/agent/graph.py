from langgraph.graph import StateGraph, END
from typing import Any, Literal

from .state import AvailabilityState, create_initial_state
from .nodes import (
    normalize_booking,
    check_availability,
    check_wider_availability
)
from .time_normalizer import TimeNormalizer
from ..tools.availability import AvailabilityResolver
from ..utils.logger import logger


def after_normalize(state: AvailabilityState) -> Literal["check_availability", END]:
    if state.get("booking") is None:
        logger.info("Routing: normalize -> END (no booking)")
        return END

    logger.info("Routing: normalize -> check_availability")
    return "check_availability"


def after_primary_check(state: AvailabilityState) -> Literal["check_wider_availability", END]:
    if state.get("needs_wider_search"):
        logger.info("Routing: check_availability -> check_wider_availability")
        return "check_wider_availability"

    logger.info("Routing: check_availability -> END")
    return END


def create_availability_graph():
    workflow = StateGraph(AvailabilityState)

    workflow.add_node("normalize", normalize_booking)
    workflow.add_node("check_availability", check_availability)
    workflow.add_node("check_wider_availability", check_wider_availability)

    workflow.set_entry_point("normalize")

    workflow.add_conditional_edges(
        "normalize",
        after_normalize,
        {
            "check_availability": "check_availability",
            END: END
        }
    )

    workflow.add_conditional_edges(
        "check_availability",
        after_primary_check,
        {
            "check_wider_availability": "check_wider_availability",
            END: END
        }
    )

    workflow.add_edge("check_wider_availability", END)

    app = workflow.compile()
    logger.info("Compiled availability workflow")
    return app


availability_graph = create_availability_graph()


async def run_availability_check(
    payload: Any,
    normalizer: TimeNormalizer,
    resolver: AvailabilityResolver
) -> AvailabilityState:
    state = create_initial_state(payload)
    config = {"configurable": {"normalizer": normalizer, "resolver": resolver}}

    return await availability_graph.ainvoke(state, config=config)
