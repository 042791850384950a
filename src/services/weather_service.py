"""
Weather Service - forecasts and seating suggestions for booking dates.

This module talks to the OpenWeather REST API over httpx. Transport errors
are retried with tenacity; anything that still fails surfaces as a
WeatherServiceError so the caller can fall back to a default seating.
"""
import time
from datetime import date, datetime, time as dt_time
from typing import Any, Dict, Optional, Tuple

import httpx
from loguru import logger
from tenacity import (
    Retrying,
    RetryCallState,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from config import get_settings, get_weather_api_key
from error_handling.exceptions import WeatherServiceError
from error_handling.logging_config import log_api_call
from models.schemas import Location, SeatingPreference, WeatherForecast

SERVICE_NAME = "openweather"


def suggest_seating(condition: str, temperature: float, description: str) -> Tuple[SeatingPreference, str]:
    """
    Suggest indoor or outdoor seating for the given conditions.

    Rules, first match wins:
    - clear sky and 20-30 °C: outdoor
    - clouds and 18-28 °C: outdoor
    - rain, drizzle or thunderstorm: indoor
    - above 35 °C: indoor
    - below 15 °C: indoor
    - otherwise: no preference

    Args:
        condition: OpenWeather main condition (e.g. "Clear", "Rain")
        temperature: Temperature in °C
        description: Human readable description (e.g. "light rain")

    Returns:
        Tuple of (seating preference, speakable recommendation)
    """
    condition = condition.lower()

    if condition == "clear" and 20 <= temperature <= 30:
        return SeatingPreference.OUTDOOR, (
            f"Perfect weather for outdoor dining! It's {temperature:.1f}°C with clear skies. "
            "Would you like a table on our terrace?"
        )
    if condition == "clouds" and 18 <= temperature <= 28:
        return SeatingPreference.OUTDOOR, (
            f"Pleasant weather with {description}. Temperature is {temperature:.1f}°C, "
            "great for outdoor seating!"
        )
    if condition in ("rain", "drizzle", "thunderstorm"):
        return SeatingPreference.INDOOR, (
            f"Looks like {description}. I'd recommend our cozy indoor area where you'll be comfortable."
        )
    if temperature > 35:
        return SeatingPreference.INDOOR, (
            f"It's going to be quite hot at {temperature:.1f}°C. Indoor seating is more comfortable."
        )
    if temperature < 15:
        return SeatingPreference.INDOOR, (
            f"Temperature will be {temperature:.1f}°C, a bit chilly. Indoor seating would be perfect."
        )
    return SeatingPreference.NO_PREFERENCE, (
        f"Weather looks moderate with {description}. Indoor and outdoor seating are available. "
        "Any preference?"
    )


def _log_retry(retry_state: RetryCallState) -> None:
    error = retry_state.outcome.exception() if retry_state.outcome else None
    logger.warning(
        f"Weather request failed (attempt {retry_state.attempt_number}): {error}. Retrying..."
    )


class WeatherService:
    """
    OpenWeather client returning WeatherForecast models.

    Example:
        >>> with WeatherService() as weather:
        ...     forecast = weather.get_forecast(date(2026, 10, 20))
        ...     print(forecast.suggested_seating, forecast.recommendation)
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        default_location: Optional[Location] = None,
        client: Optional[httpx.Client] = None,
        max_attempts: int = 3,
        retry_wait: float = 1.0,
    ):
        """
        Initialize the weather service.

        Args:
            api_key: OpenWeather API key (default: OPENWEATHER_API_KEY setting)
            base_url: API base URL (default: WEATHER_BASE_URL setting)
            timeout: Request timeout in seconds
            default_location: Used when a lookup names no location
            client: Preconfigured httpx client, e.g. with a mock transport
            max_attempts: Attempts per request on transport errors
            retry_wait: Base delay in seconds for exponential backoff
        """
        settings = get_settings()
        self._api_key = api_key
        self.base_url = (base_url or settings.weather_base_url).rstrip("/")
        self.default_location = default_location or Location(
            city=settings.default_city,
            lat=settings.default_lat,
            lon=settings.default_lon,
        )
        self.client = client or httpx.Client(timeout=timeout or settings.weather_timeout)
        self._retrying = Retrying(
            stop=stop_after_attempt(max_attempts),
            wait=wait_exponential(multiplier=retry_wait, max=10),
            retry=retry_if_exception_type(httpx.TransportError),
            before_sleep=_log_retry,
            reraise=True,
        )

    @property
    def api_key(self) -> str:
        if self._api_key:
            return self._api_key
        try:
            return get_weather_api_key()
        except ValueError as e:
            raise WeatherServiceError(str(e)) from e

    def _params(self, location: Optional[Location]) -> Dict[str, Any]:
        location = location or self.default_location
        params: Dict[str, Any] = {"appid": self.api_key, "units": "metric"}
        if location.lat is not None and location.lon is not None:
            params.update(lat=location.lat, lon=location.lon)
        elif location.city:
            params["q"] = location.city
        else:
            params.update(lat=self.default_location.lat, lon=self.default_location.lon)
        return params

    def _send(self, endpoint: str, params: Dict[str, Any]) -> Dict[str, Any]:
        response = self.client.get(f"{self.base_url}/{endpoint}", params=params)
        response.raise_for_status()
        return response.json()

    def _request(self, endpoint: str, location: Optional[Location]) -> Dict[str, Any]:
        params = self._params(location)
        started = time.perf_counter()
        try:
            payload = self._retrying(self._send, endpoint, params)
        except httpx.HTTPStatusError as e:
            log_api_call(SERVICE_NAME, endpoint, False, time.perf_counter() - started,
                         {"status_code": e.response.status_code})
            raise WeatherServiceError(
                f"OpenWeather {endpoint} request failed with status {e.response.status_code}",
                status_code=e.response.status_code,
                original_error=e,
            ) from e
        except (httpx.HTTPError, ValueError) as e:
            log_api_call(SERVICE_NAME, endpoint, False, time.perf_counter() - started,
                         {"error": str(e)})
            raise WeatherServiceError(
                f"OpenWeather {endpoint} request failed: {e}",
                original_error=e,
            ) from e

        log_api_call(SERVICE_NAME, endpoint, True, time.perf_counter() - started)
        return payload

    def _build_forecast(
        self,
        entry: Dict[str, Any],
        location_name: Optional[str],
        is_closest: bool = False,
    ) -> WeatherForecast:
        try:
            main = entry["main"]
            weather = entry["weather"][0]
            condition = weather["main"]
            description = weather["description"]
            temperature = float(main["temp"])
            seating, message = suggest_seating(condition, temperature, description)
            return WeatherForecast(
                location=location_name,
                date=datetime.fromtimestamp(entry["dt"]),
                temperature=temperature,
                feels_like=main.get("feels_like"),
                condition=condition,
                description=description,
                humidity=main.get("humidity"),
                wind_speed=entry.get("wind", {}).get("speed"),
                recommendation=message,
                suggested_seating=seating,
                is_closest=is_closest,
            )
        except (KeyError, IndexError, TypeError, ValueError) as e:
            raise WeatherServiceError(f"Malformed weather entry: {e}", original_error=e) from e

    def get_forecast(self, target_date: date, location: Optional[Location] = None) -> WeatherForecast:
        """
        Forecast for a booking date.

        Uses the first 3-hour entry that falls on ``target_date``; if the
        5-day window has none, the entry closest to noon of that date is used
        and ``is_closest`` is set.

        Args:
            target_date: Booking date
            location: Where to look; defaults to the restaurant's location

        Returns:
            WeatherForecast with the seating suggestion

        Raises:
            WeatherServiceError: If the API key is missing or the request fails
        """
        payload = self._request("forecast", location)
        entries = payload.get("list") or []
        if not entries:
            raise WeatherServiceError("OpenWeather returned an empty forecast")

        try:
            stamped = [(datetime.fromtimestamp(e["dt"]), e) for e in entries]
        except (KeyError, TypeError, ValueError) as e:
            raise WeatherServiceError(f"Malformed forecast list: {e}", original_error=e) from e

        match = next((e for when, e in stamped if when.date() == target_date), None)
        if match is None:
            noon = datetime.combine(target_date, dt_time(12, 0))
            _, selected = min(stamped, key=lambda pair: abs((pair[0] - noon).total_seconds()))
            logger.info(f"No forecast entry on {target_date}; using closest to noon")
        else:
            selected = match

        location_name = (payload.get("city") or {}).get("name")
        return self._build_forecast(selected, location_name, is_closest=match is None)

    def get_current(self, location: Optional[Location] = None) -> WeatherForecast:
        """
        Current conditions.

        Raises:
            WeatherServiceError: If the API key is missing or the request fails
        """
        payload = self._request("weather", location)
        return self._build_forecast(payload, payload.get("name"))

    def close(self) -> None:
        self.client.close()

    def __enter__(self) -> "WeatherService":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()
