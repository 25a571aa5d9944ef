from datetime import datetime
from typing import Any, Dict, List, Optional
import httpx
import pytz

from ..models import BusyInterval, Slot
from ..utils.config import settings
from ..utils.logger import logger
from .timezone import TimezoneManager


class SchedulingAPIError(Exception):
    """A Cal.com request failed or returned something that isn't JSON."""


def to_api_timestamp(dt: datetime) -> str:
    return dt.astimezone(pytz.UTC).isoformat().replace("+00:00", "Z")


class CalComClient:
    def __init__(
        self,
        http_client: httpx.AsyncClient,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        event_type_id: Optional[str] = None,
        credential_id: Optional[str] = None,
        external_id: Optional[str] = None,
        timezone: Optional[str] = None,
    ):
        self.http_client = http_client
        self.api_key = api_key or settings.cal_api_key
        self.base_url = (base_url or settings.cal_api_url).rstrip("/")
        self.event_type_id = event_type_id or settings.cal_event_type_id
        self.credential_id = credential_id or settings.cal_credential_id
        self.external_id = external_id or settings.cal_external_id
        self.timezone = timezone or settings.business_timezone
        logger.info(f"Initialized Cal.com client for event type {self.event_type_id}")

    async def _get(self, path: str, params: Dict[str, Any], headers: Dict[str, str]) -> Any:
        url = f"{self.base_url}{path}"
        try:
            response = await self.http_client.get(url, params=params, headers=headers)
            response.raise_for_status()
            return response.json()
        except httpx.TimeoutException as e:
            logger.error(f"Cal.com request to {path} timed out: {e}")
            raise SchedulingAPIError(f"request to {path} timed out") from e
        except httpx.HTTPStatusError as e:
            logger.error(f"Cal.com returned {e.response.status_code} for {path}: {e.response.text[:200]}")
            raise SchedulingAPIError(f"{path} returned HTTP {e.response.status_code}") from e
        except httpx.HTTPError as e:
            logger.error(f"Cal.com HTTP error on {path}: {e}")
            raise SchedulingAPIError(f"request to {path} failed: {e}") from e
        except ValueError as e:
            logger.error(f"Cal.com returned invalid JSON for {path}: {e}")
            raise SchedulingAPIError(f"{path} returned invalid JSON") from e

    async def get_slots(self, start: datetime, end: datetime, duration: int) -> List[Slot]:
        params = {
            "start": to_api_timestamp(start),
            "end": to_api_timestamp(end),
            "eventTypeId": self.event_type_id,
            "timeZone": self.timezone,
            "duration": duration,
        }
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "cal-api-version": settings.cal_api_version,
        }

        logger.info(f"Querying slots {params['start']} -> {params['end']} ({duration} min)")
        payload = await self._get("/slots", params, headers)

        slots = self.flatten_slots(payload)
        logger.info(f"Retrieved {len(slots)} slots from Cal.com")
        return slots

    async def get_busy_times(self, date_from: datetime, date_to: datetime) -> List[BusyInterval]:
        params = {
            "loggedInUsersTz": self.timezone,
            "calendarsToLoad[0][credentialId]": self.credential_id,
            "calendarsToLoad[0][externalId]": self.external_id,
            "dateFrom": to_api_timestamp(date_from),
            "dateTo": to_api_timestamp(date_to),
        }
        headers = {"Authorization": f"Bearer {self.api_key}"}

        logger.info(f"Querying busy times {params['dateFrom']} -> {params['dateTo']}")
        payload = await self._get("/calendars/busy-times", params, headers)

        busy = self.parse_busy_times(payload)
        logger.info(f"Retrieved {len(busy)} busy intervals from Cal.com")
        return busy

    def flatten_slots(self, payload: Any) -> List[Slot]:
        """Collapse Cal.com's {"data": {date: [slot, ...]}} shape into one list."""
        data = payload.get("data") if isinstance(payload, dict) else None
        if not isinstance(data, dict):
            return []

        slots = []
        for date_key, date_slots in data.items():
            if not isinstance(date_slots, list):
                continue

            for entry in date_slots:
                if not isinstance(entry, dict) or not entry.get("start"):
                    continue
                try:
                    slots.append(Slot(start=TimezoneManager.to_local(entry["start"], self.timezone)))
                except (ValueError, OverflowError) as e:
                    logger.warning(f"Skipping unparsable slot on {date_key}: {entry!r} ({e})")

        return slots

    def parse_busy_times(self, payload: Any) -> List[BusyInterval]:
        data = payload.get("data") if isinstance(payload, dict) else None
        if not isinstance(data, list):
            return []

        busy = []
        for entry in data:
            if not isinstance(entry, dict) or not entry.get("start") or not entry.get("end"):
                continue
            try:
                busy.append(BusyInterval(
                    start=TimezoneManager.to_local(entry["start"], self.timezone),
                    end=TimezoneManager.to_local(entry["end"], self.timezone),
                ))
            except (ValueError, OverflowError) as e:
                logger.warning(f"Skipping unparsable busy interval {entry!r} ({e})")

        return busy
