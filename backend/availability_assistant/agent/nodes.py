"""
LangGraph pipeline nodes.
Each node reads the state, calls one injected service, and returns the keys it changed.
Services are passed per run through config["configurable"].
"""

from typing import Any, Dict

from langchain_core.runnables import RunnableConfig

from .state import AvailabilityState
from .time_normalizer import NormalizationError, TimeNormalizer
from ..tools.availability import AvailabilityResolver
from ..utils.logger import logger


def _service(config: RunnableConfig, name: str) -> Any:
    configurable = (config or {}).get("configurable") or {}
    if name not in configurable:
        raise KeyError(f"Pipeline service '{name}' was not provided")
    return configurable[name]


async def normalize_booking(state: AvailabilityState, config: RunnableConfig) -> Dict[str, Any]:
    normalizer: TimeNormalizer = _service(config, "normalizer")

    try:
        booking = await normalizer.normalize(state["payload"])
    except NormalizationError as e:
        logger.error(f"Could not normalize booking: {e}")
        return {"booking": None, "normalization_error": str(e)}

    return {"booking": booking, "normalization_error": None}


async def check_availability(state: AvailabilityState, config: RunnableConfig) -> Dict[str, Any]:
    resolver: AvailabilityResolver = _service(config, "resolver")

    result = await resolver.check_availability(state["booking"])
    if result is None:
        return {"needs_wider_search": True}

    return {"result": result, "needs_wider_search": False}


async def check_wider_availability(state: AvailabilityState, config: RunnableConfig) -> Dict[str, Any]:
    resolver: AvailabilityResolver = _service(config, "resolver")

    result = await resolver.check_wider_availability(state["booking"])
    return {"result": result, "needs_wider_search": False}
