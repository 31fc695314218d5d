"""
Itinerary email: HTML rendering and delivery through the Resend API.
"""
from html import escape
from typing import List, Optional, Tuple

import httpx

from config import Settings, get_settings
from schemas import DayItinerary, Flight, TripDetails, TripPlan
from utils.logger import setup_api_logger

logger = setup_api_logger()

RESEND_URL = "https://api.resend.com/emails"


class EmailDeliveryError(Exception):
    pass


def format_money(amount: Optional[float]) -> str:
    return f"€{amount:,.0f}" if amount is not None else ""


def _flight_block(label: str, flight: Optional[Flight], travelers: int) -> str:
    if flight is None:
        return ""
    muted = "" if flight.included else ' style="opacity:0.5"'
    return (
        f'<tr{muted}><td style="padding:8px 0"><strong>{escape(label)}</strong><br>'
        f'{escape(flight.airline)} {escape(flight.flight_number)} · {escape(flight.flight_class.title())}<br>'
        f'{escape(flight.origin)} ({escape(flight.origin_code)}) {escape(flight.departure_time)} → '
        f'{escape(flight.destination)} ({escape(flight.destination_code)}) {escape(flight.arrival_time)}'
        f' · {escape(flight.duration)}</td>'
        f'<td style="text-align:right">{format_money(flight.price_per_person * travelers)}'
        f'<br><span style="color:#64748b">{format_money(flight.price_per_person)} / person</span></td></tr>'
    )


def _day_block(day: DayItinerary, travelers: int) -> str:
    """Activity prices are shown for the whole party."""
    rows = []
    for item in day.items:
        cost = format_money(item.cost * travelers) if item.cost else ""
        note = "" if item.included else " <em>(not included)</em>"
        rows.append(
            f'<li style="margin-bottom:6px"><strong>{escape(item.time)}</strong> {escape(item.title)}{note}'
            f'<br><span style="color:#64748b">{escape(item.description)}</span>'
            + (f' <span style="float:right">{cost}</span>' if cost else "")
            + "</li>"
        )
    heading = f"Day {day.day}" + (f" · {escape(day.date)}" if day.date else "")
    return f'<h3 style="margin:20px 0 8px">{heading}</h3><ul style="padding-left:18px">{"".join(rows)}</ul>'


def render_trip_email(details: TripDetails, plan: TripPlan, total: float) -> Tuple[str, str]:
    """Return (subject, html) for a stored trip.

    Sections for missing categories (no hotel, no car) are left out.
    """
    route = f"{details.departure_city} → {details.destination_city}"
    subject = f"Your trip itinerary: {route}"
    dates = ""
    if details.departure_date and details.return_date:
        dates = f"{details.departure_date:%b %d, %Y} – {details.return_date:%b %d, %Y}"
    travelers = details.passengers.traveler_count

    sections: List[str] = [
        '<h2 style="margin-top:24px">Flights</h2><table style="width:100%;border-collapse:collapse">'
        + _flight_block("Outbound", plan.outbound_flight, travelers)
        + _flight_block("Return", plan.return_flight, travelers)
        + "</table>"
    ]

    if plan.hotel is not None:
        hotel = plan.hotel
        sections.append(
            '<h2 style="margin-top:24px">Accommodation</h2>'
            f'<p><strong>{escape(hotel.name)}</strong> · {"★" * hotel.rating}<br>'
            f'{escape(hotel.address)} · {escape(hotel.distance_from_airport)} from the airport<br>'
            f'{format_money(hotel.price_per_night)} / night · total {format_money(hotel.total_price)}'
            + ("" if hotel.included else " <em>(not included)</em>")
            + f'<br><span style="color:#64748b">{escape(", ".join(hotel.amenities))}</span></p>'
        )

    if plan.car_rental is not None:
        car = plan.car_rental
        sections.append(
            '<h2 style="margin-top:24px">Car Rental</h2>'
            f'<p><strong>{escape(car.company)}</strong> · {escape(car.vehicle_name)} ({escape(car.vehicle_type)})<br>'
            f'Pickup: {escape(car.pickup_location)} {escape(car.pickup_time)}<br>'
            f'Drop-off: {escape(car.dropoff_location)} {escape(car.dropoff_time)}<br>'
            f'{format_money(car.price_per_day)} / day · total {format_money(car.total_price)}'
            + ("" if car.included else " <em>(not included)</em>")
            + "</p>"
        )

    if plan.itinerary:
        sections.append('<h2 style="margin-top:24px">Day-by-day itinerary</h2>'
                        + "".join(_day_block(day, travelers) for day in plan.itinerary))

    html = (
        '<!DOCTYPE html><html><body style="font-family:Arial,Helvetica,sans-serif;color:#0f172a;'
        'max-width:640px;margin:0 auto;padding:24px">'
        f'<h1 style="margin-bottom:4px">{escape(route)}</h1>'
        f'<p style="color:#64748b;margin-top:0">{escape(dates)}'
        f'{" · " if dates else ""}{travelers} traveler{"s" if travelers != 1 else ""}</p>'
        + "".join(sections)
        + '<div style="margin-top:32px;padding:16px;background:#f1f5f9;border-radius:8px">'
        f'<strong>Estimated total: {format_money(total)}</strong>'
        '<br><span style="color:#64748b;font-size:12px">Prices are estimates. '
        'Only items marked as included are counted.</span></div>'
        "</body></html>"
    )
    return subject, html


async def send_email(to_address: str, subject: str, html: str, settings: Optional[Settings] = None) -> str:
    """Send through Resend and return the provider's message id."""
    settings = settings or get_settings()
    if not settings.resend_api_key:
        raise EmailDeliveryError("Email provider not configured")
    try:
        async with httpx.AsyncClient(timeout=settings.http_timeout) as client:
            resp = await client.post(
                RESEND_URL,
                json={"from": settings.email_from, "to": [to_address], "subject": subject, "html": html},
                headers={"Authorization": f"Bearer {settings.resend_api_key}"},
            )
            resp.raise_for_status()
            data = resp.json()
    except httpx.HTTPStatusError as e:
        logger.error("Resend rejected email: %s %s", e.response.status_code, e.response.text[:200])
        raise EmailDeliveryError("Failed to send email") from e
    except (httpx.HTTPError, ValueError) as e:
        logger.error("Resend request failed: %s", e)
        raise EmailDeliveryError("Failed to send email") from e
    return data.get("id", "")
