"""
Parsers for raw price and portfolio payloads.

Converts user-entered purchase data, stored entry documents and provider
responses into canonical data models with type conversion and validation.
"""

import math
import re
from datetime import date, datetime, timezone
from typing import Any, Optional, Union

import orjson

from stockview_app.errors import MalformedDataError, PriceFetchError

from .models import PortfolioEntry, PricePoint
from .validators import validate_price_point

# M/D/YYYY, MM/DD/YYYY, M/D/YY, MM/DD/YY
_SLASH_DATE = re.compile(r"^(\d{1,2})/(\d{1,2})/(\d{2,4})$")
_ISO_DATE = re.compile(r"^(\d{4})-(\d{2})-(\d{2})$")


def _expand_two_digit_year(year: int) -> int:
    # 00-49 -> 2000-2049, 50-99 -> 1950-1999
    if year < 100:
        return 2000 + year if year < 50 else 1900 + year
    return year


def parse_purchase_date(value: Union[str, date, datetime], today: Optional[date] = None) -> date:
    """
    Parse a purchase date.

    Accepts date/datetime objects, ISO `YYYY-MM-DD` and US-style `M/D/YYYY`
    or `M/D/YY` strings.

    Args:
        value: Raw date value
        today: When given, dates after today are rejected

    Returns:
        Parsed calendar date

    Raises:
        MalformedDataError: Unrecognized format, out-of-range parts, impossible
            or future date
    """
    if isinstance(value, datetime):
        parsed = value.date()
    elif isinstance(value, date):
        parsed = value
    elif isinstance(value, str):
        text = value.strip()
        slash = _SLASH_DATE.match(text)
        iso = _ISO_DATE.match(text)
        if slash:
            month, day, year = (int(part) for part in slash.groups())
            year = _expand_two_digit_year(year)
        elif iso:
            year, month, day = (int(part) for part in iso.groups())
        else:
            raise MalformedDataError(
                "Date must be in M/D/YYYY, MM/DD/YY or YYYY-MM-DD format",
                field="purchase_date",
                raw_value=value
            )

        if month < 1 or month > 12:
            raise MalformedDataError("Month must be between 1 and 12",
                                     field="purchase_date", raw_value=value)
        if day < 1 or day > 31:
            raise MalformedDataError("Day must be between 1 and 31",
                                     field="purchase_date", raw_value=value)
        try:
            parsed = date(year, month, day)
        except ValueError:
            raise MalformedDataError("Invalid date", field="purchase_date", raw_value=value)
    else:
        raise MalformedDataError(
            f"Unsupported date type: {type(value).__name__}",
            field="purchase_date",
            raw_value=value
        )

    if today is not None and parsed > today:
        raise MalformedDataError("Purchase date cannot be in the future",
                                 field="purchase_date", raw_value=value)

    return parsed


def _to_float(raw: dict[str, Any], key: str) -> float:
    if key not in raw or raw[key] is None:
        raise MalformedDataError(f"Missing field: {key}", field=key)
    try:
        return float(raw[key])
    except (TypeError, ValueError):
        raise MalformedDataError(f"Invalid number for {key}: {raw[key]!r}",
                                 field=key, raw_value=raw[key])


def parse_price_point(raw: dict[str, Any]) -> PricePoint:
    """
    Parse a raw candle dict with time/open/high/low/close keys.

    Raises:
        MalformedDataError: Missing or non-numeric fields
    """
    if "time" not in raw or raw["time"] is None:
        raise MalformedDataError("Missing field: time", field="time")
    try:
        timestamp = int(raw["time"])
    except (TypeError, ValueError):
        raise MalformedDataError(f"Invalid timestamp: {raw['time']!r}",
                                 field="time", raw_value=raw["time"])

    return PricePoint(
        time=timestamp,
        open=_to_float(raw, "open"),
        high=_to_float(raw, "high"),
        low=_to_float(raw, "low"),
        close=_to_float(raw, "close"),
    )


def parse_price_series(raws: list[dict[str, Any]]) -> list[PricePoint]:
    """
    Parse raw candles into an ascending series without duplicate timestamps.

    When two candles share a timestamp the first one encountered is kept.

    Raises:
        MalformedDataError: A candle with missing, non-numeric or inconsistent
            OHLC values
    """
    seen: set[int] = set()
    points = []
    for raw in raws:
        point = parse_price_point(raw)
        validate_price_point(point)
        if point.time in seen:
            continue
        seen.add(point.time)
        points.append(point)
    return sorted(points, key=lambda p: p.time)


def parse_portfolio_entry(raw: dict[str, Any], today: Optional[date] = None) -> PortfolioEntry:
    """
    Parse a raw portfolio entry document.

    Accepts camelCase (stored documents) and snake_case keys.

    Raises:
        MalformedDataError: Missing symbol, non-positive price, non-integer
            or non-positive quantity, or an invalid purchase date
    """
    symbol = str(raw.get("symbol") or "").strip().upper()
    if not symbol:
        raise MalformedDataError("Symbol is required", field="symbol", raw_value=raw.get("symbol"))

    raw_price = raw.get("purchasePrice", raw.get("purchase_price"))
    try:
        price = float(raw_price)
    except (TypeError, ValueError):
        price = math.nan
    if not math.isfinite(price) or price <= 0:
        raise MalformedDataError("Purchase price must be a positive number",
                                 field="purchase_price", raw_value=raw_price)

    raw_quantity = raw.get("quantity")
    if isinstance(raw_quantity, bool):
        quantity = None
    elif isinstance(raw_quantity, int):
        quantity = raw_quantity
    elif isinstance(raw_quantity, float) and raw_quantity.is_integer():
        quantity = int(raw_quantity)
    elif isinstance(raw_quantity, str) and raw_quantity.strip().isdigit():
        quantity = int(raw_quantity.strip())
    else:
        quantity = None
    if quantity is None or quantity <= 0:
        raise MalformedDataError("Quantity must be a positive whole number",
                                 field="quantity", raw_value=raw_quantity)

    purchase_date = parse_purchase_date(raw.get("purchaseDate", raw.get("purchase_date")), today=today)

    return PortfolioEntry(
        id=str(raw.get("id", "")),
        symbol=symbol,
        purchase_price=price,
        purchase_date=purchase_date,
        quantity=quantity,
        created_at=raw.get("createdAt", raw.get("created_at")),
        updated_at=raw.get("updatedAt", raw.get("updated_at")),
    )


def parse_alpha_vantage_payload(body: bytes, symbol: str, start: date, end: date) -> list[PricePoint]:
    """
    Parse an Alpha Vantage time series response.

    Only candles whose UTC timestamp falls within [start 00:00, end 23:59:59]
    are kept, sorted ascending.

    Raises:
        PriceFetchError: Invalid JSON, API error message or rate-limit note,
            no time series in the payload, or a malformed or inconsistent candle
    """
    try:
        payload = orjson.loads(body)
    except orjson.JSONDecodeError as e:
        raise PriceFetchError(f"Invalid JSON from price API: {e}", symbol=symbol,
                              provider="alpha_vantage")

    if not isinstance(payload, dict):
        raise PriceFetchError("Unexpected price API payload", symbol=symbol, provider="alpha_vantage")

    if "Error Message" in payload or "Note" in payload:
        raise PriceFetchError(
            str(payload.get("Error Message") or payload.get("Note")),
            symbol=symbol,
            provider="alpha_vantage"
        )

    series_key = next((key for key in payload if "Time Series" in key), None)
    if series_key is None:
        raise PriceFetchError("No time series data found", symbol=symbol, provider="alpha_vantage")

    first = datetime(start.year, start.month, start.day, tzinfo=timezone.utc).timestamp()
    last = datetime(end.year, end.month, end.day, 23, 59, 59, tzinfo=timezone.utc).timestamp()

    try:
        raws = []
        for stamp, values in payload[series_key].items():
            moment = datetime.fromisoformat(stamp)
            if moment.tzinfo is None:
                moment = moment.replace(tzinfo=timezone.utc)
            timestamp = int(moment.timestamp())
            if first <= timestamp <= last:
                raws.append({
                    "time": timestamp,
                    "open": values.get("1. open"),
                    "high": values.get("2. high"),
                    "low": values.get("3. low"),
                    "close": values.get("4. close"),
                })

        return parse_price_series(raws)
    except (MalformedDataError, ValueError, AttributeError) as e:
        raise PriceFetchError(f"Malformed price API candle: {e}", symbol=symbol,
                              provider="alpha_vantage") from e
