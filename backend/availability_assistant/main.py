"""
Availability Assistant - Main FastAPI Application
Receives booking webhooks, normalizes the requested time with an LLM and checks Cal.com availability.
"""

from fastapi import FastAPI, Depends, Request
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from typing import Any, List, Union
import json

import httpx
from langchain_google_genai import ChatGoogleGenerativeAI

from .agent.graph import run_availability_check
from .agent.time_normalizer import TimeNormalizer
from .models import Available, AvailabilityError, BookingRequest, Unavailable
from .tools.availability import AvailabilityResolver
from .tools.calcom import CalComClient
from .utils.config import settings
from .utils.logger import logger

MAX_BOOKINGS_PER_REQUEST = 3
WEBHOOK_PATH = f"/webhook/{settings.webhook_id}"

# Initialize FastAPI app
app = FastAPI(
    title="Availability Assistant",
    description="Booking webhook that checks stylist availability on Cal.com",
    version="1.0.0"
)


def get_normalizer(request: Request) -> TimeNormalizer:
    return request.app.state.normalizer


def get_resolver(request: Request) -> AvailabilityResolver:
    return request.app.state.resolver


def parse_booking_payload(body: Any) -> Union[BookingRequest, List[BookingRequest]]:
    """Accept one booking object or a list of up to three."""
    if isinstance(body, dict):
        return BookingRequest.model_validate(body)

    if isinstance(body, list):
        if not 1 <= len(body) <= MAX_BOOKINGS_PER_REQUEST:
            raise ValueError(f"Expected 1 to {MAX_BOOKINGS_PER_REQUEST} bookings, got {len(body)}")
        return [BookingRequest.model_validate(item) for item in body]

    raise ValueError(f"Expected a booking object or list, got {type(body).__name__}")


def _bad_request() -> JSONResponse:
    return JSONResponse(
        status_code=400,
        content={"status": "error", "message": "Could not process booking information"}
    )


@app.get("/")
async def root():
    """Service banner."""
    return {
        "status": "healthy",
        "service": "Availability Assistant",
        "version": "1.0.0"
    }

@app.get("/health")
async def health_check():
    """Health check."""
    return {"status": "healthy", "message": "Server is running"}

@app.post(WEBHOOK_PATH)
async def booking_webhook(
    request: Request,
    normalizer: TimeNormalizer = Depends(get_normalizer),
    resolver: AvailabilityResolver = Depends(get_resolver)
):
    """
    Check whether the requested appointment is free.

    Request body (single booking or a list of up to 3, only the first is checked):
        {
            "bookingtime": "next Tuesday at 2pm",
            "assigned_stylist": "angelina@creativenails.ca",
            "duration_of_services": "60 minutes"
        }

    Response body:
        {"status": "available" | "unavailable" | "error", "message": "..."}
    """
    try:
        try:
            body = await request.json()
        except json.JSONDecodeError as e:
            logger.error(f"Webhook body is not valid JSON: {e}")
            return _bad_request()

        logger.info(f"Webhook received: {body}")

        try:
            payload = parse_booking_payload(body)
        except (ValidationError, ValueError) as e:
            logger.error(f"Invalid booking payload: {e}")
            return _bad_request()

        final_state = await run_availability_check(payload, normalizer, resolver)

        if final_state.get("booking") is None:
            return _bad_request()

        result = final_state.get("result")
        if isinstance(result, Available):
            logger.info("Result: available")
        elif isinstance(result, Unavailable):
            logger.info("Result: unavailable")
        elif isinstance(result, AvailabilityError):
            logger.warning(f"Result: error - {result.message}")
        else:
            raise RuntimeError("Availability check finished without a result")

        return result.model_dump()

    except Exception as e:
        logger.exception("Error processing webhook")
        return JSONResponse(
            status_code=500,
            content={"status": "error", "message": f"Internal server error: {e}"}
        )

# Application Startup

@app.on_event("startup")
async def startup_event():
    """Build the shared LLM and HTTP clients."""
    logger.info("Starting Availability Assistant")
    logger.info(f"Environment: {settings.environment}")
    logger.info(f"Configuration loaded: gemini_key_set={bool(settings.gemini_api_key)}, cal_key_set={bool(settings.cal_api_key)}, port={settings.port}")

    llm = ChatGoogleGenerativeAI(
        model=settings.llm_model,
        google_api_key=settings.gemini_api_key,
        temperature=settings.llm_temperature
    )
    http_client = httpx.AsyncClient(timeout=httpx.Timeout(settings.http_timeout_seconds, connect=10.0))

    app.state.http_client = http_client
    app.state.normalizer = TimeNormalizer(llm)
    app.state.resolver = AvailabilityResolver(CalComClient(http_client))

    logger.info(f"Webhook available at: http://localhost:{settings.port}{WEBHOOK_PATH}")

@app.on_event("shutdown")
async def shutdown_event():
    """Cleanup on shutdown."""
    logger.info("Shutting down Availability Assistant")

    http_client = getattr(app.state, "http_client", None)
    if http_client is not None:
        await http_client.aclose()

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "availability_assistant.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.environment == "development",
        log_level="info"
    )
