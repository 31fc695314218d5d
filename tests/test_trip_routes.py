import json

import httpx

from models.Profile import Profile
from services.trip_email import render_trip_email
from services.itinerary_generator import generate_trip_plan


def _form(**overrides):
    form = {
        "departureCity": "Paris",
        "destinationCity": "Tokyo",
        "departureDate": "2025-03-01",
        "returnDate": "2025-03-08",
        "passengers": {"adults": 2, "children": 0, "infants": 0},
        "flightClass": "economy",
        "includeCarRental": True,
        "includeHotel": True,
    }
    form.update(overrides)
    return form


def _set_credits(db, user_id, amount):
    db.query(Profile).filter(Profile.id == user_id).update({"credits": amount})
    db.commit()


def test_plan_requires_sign_in(anon_client):
    resp = anon_client.post("/trips/plan", json=_form())

    assert resp.status_code == 401


def test_plan_spends_one_credit(client, db, profile):
    resp = client.post("/trips/plan", json=_form())

    assert resp.status_code == 200
    body = resp.json()
    assert body["creditsRemaining"] == 2
    assert body["totalCost"] == 5748
    assert body["details"]["destinationLocation"]["iataCode"] == "TYO"
    outbound = body["plan"]["outboundFlight"]
    assert (outbound["originCode"], outbound["destinationCode"]) == ("CDG", "NRT")
    assert body["plan"]["outboundFlight"]["class"] == "economy"
    assert len(body["plan"]["itinerary"]) == 8


def test_plan_without_credits(client, db, profile):
    _set_credits(db, profile.id, 0)

    resp = client.post("/trips/plan", json=_form())

    assert resp.status_code == 402
    assert resp.json()["detail"] == "You don't have enough credits to continue."


def test_first_plan_uses_signup_credit(client):
    first = client.post("/trips/plan", json=_form())
    second = client.post("/trips/plan", json=_form())

    assert first.status_code == 200
    assert first.json()["creditsRemaining"] == 0
    assert second.status_code == 402


def test_plan_unknown_city(client, db, profile):
    resp = client.post("/trips/plan", json=_form(destinationCity="Atlantis"))

    assert resp.status_code == 422
    assert resp.json()["detail"]["field"] == "destinationCity"
    db.expire_all()
    assert db.get(Profile, profile.id).credits == 3


def test_plan_return_before_departure(client, profile):
    resp = client.post("/trips/plan", json=_form(returnDate="2025-02-20"))

    assert resp.status_code == 422
    assert resp.json()["detail"]["field"] == "returnDate"


def test_plan_missing_date(client, profile):
    resp = client.post("/trips/plan", json=_form(departureDate=None))

    assert resp.status_code == 422
    assert resp.json()["detail"]["field"] == "departureDate"


def test_total_and_toggle(client, paris_tokyo, sequential_ids):
    plan = generate_trip_plan(paris_tokyo, sequential_ids).model_dump(by_alias=True, mode="json")
    passengers = {"adults": 2}

    total = client.post("/trips/plan/total", json={"plan": plan, "passengers": passengers})
    assert total.json() == {"totalCost": 5748}

    toggled = client.post("/trips/plan/toggle", json={
        "plan": plan, "passengers": passengers, "itemType": "carRental",
    })
    assert toggled.status_code == 200
    assert toggled.json()["carRental"]["included"] is False
    assert toggled.json()["totalCost"] == 5748 - 520

    unknown = client.post("/trips/plan/toggle", json={
        "plan": plan, "passengers": passengers, "itemType": "submarine",
    })
    assert unknown.json()["totalCost"] == 5748


def test_save_list_and_read(client, paris_tokyo, sequential_ids):
    plan = generate_trip_plan(paris_tokyo, sequential_ids)
    payload = {
        "details": paris_tokyo.model_dump(by_alias=True, mode="json"),
        "plan": plan.model_dump(by_alias=True, mode="json"),
    }

    saved = client.post("/trips/", json=payload)
    assert saved.status_code == 201
    trip_id = saved.json()["tripId"]
    assert saved.json()["itemsWarning"] is False

    [summary] = client.get("/trips/").json()
    assert summary["id"] == trip_id
    assert summary["isPreview"] is False
    assert summary["itemCount"] == 4 + sum(len(d.items) for d in plan.itinerary)

    stored = client.get(f"/trips/{trip_id}").json()
    assert stored["status"] == "complete"
    assert stored["plan"]["totalCost"] == 5748
    assert stored["plan"]["hotel"]["name"] == plan.hotel.name
    assert [i["id"] for i in stored["plan"]["itinerary"][0]["items"]] == [i.id for i in plan.itinerary[0].items]


def test_read_missing_trip(client):
    assert client.get("/trips/999").status_code == 404


def _save(client, paris_tokyo, sequential_ids):
    plan = generate_trip_plan(paris_tokyo, sequential_ids)
    resp = client.post("/trips/", json={
        "details": paris_tokyo.model_dump(by_alias=True, mode="json"),
        "plan": plan.model_dump(by_alias=True, mode="json"),
    })
    return resp.json()["tripId"]


def test_email_goes_to_signed_in_user(client, mock_http, paris_tokyo, sequential_ids):
    trip_id = _save(client, paris_tokyo, sequential_ids)
    sent = []

    def handler(request):
        sent.append(json.loads(request.content))
        assert request.headers["Authorization"] == "Bearer re_test_key"
        return httpx.Response(200, json={"id": "email-123"})

    mock_http(handler)

    resp = client.post("/trips/email", json={"tripId": trip_id, "to": "attacker@evil.com",
                                             "email": "attacker@evil.com"})

    assert resp.status_code == 200
    assert resp.json() == {"success": True, "id": "email-123"}
    [message] = sent
    assert message["to"] == ["real@user.com"]
    assert "Paris → Tokyo" in message["subject"]
    assert "Grand Tokyo Palace Hotel" in message["html"]


def test_email_requires_sign_in(anon_client):
    resp = anon_client.post("/trips/email", json={"tripId": 1})

    assert resp.status_code == 401


def test_email_provider_failure(client, mock_http, paris_tokyo, sequential_ids):
    trip_id = _save(client, paris_tokyo, sequential_ids)
    mock_http(lambda request: httpx.Response(422, json={"message": "invalid from"}))

    resp = client.post("/trips/email", json={"tripId": trip_id})

    assert resp.status_code == 502
    assert resp.json() == {"error": "Failed to send email"}


def test_email_unknown_trip(client):
    resp = client.post("/trips/email", json={"tripId": 12345})

    assert resp.status_code == 404


def test_email_skips_missing_sections(paris_tokyo, sequential_ids):
    details = paris_tokyo.model_copy(update={"include_hotel": False, "include_car_rental": False})
    plan = generate_trip_plan(details, sequential_ids)

    subject, html = render_trip_email(details, plan, plan.total_cost)

    assert subject == "Your trip itinerary: Paris → Tokyo"
    assert "Accommodation" not in html
    assert "Car Rental" not in html
    assert "Day 8" in html
    assert "2 travelers" in html


def test_credits_endpoints(client, profile):
    assert client.get("/credits/").json() == {"credits": 3}

    resp = client.post("/credits/deduct")

    assert resp.json() == {"success": True, "credits": 2}


def test_email_prices_cover_the_whole_party(paris_tokyo, sequential_ids):
    plan = generate_trip_plan(paris_tokyo, sequential_ids)

    _subject, html = render_trip_email(paris_tokyo, plan, plan.total_cost)

    assert "€712" in html and "€356 / person" in html
    assert "€756" in html and "€378 / person" in html
    # Welcome Dinner, 75 per person for two travelers
    assert "€150" in html
    assert "€1,750" in html
    assert "Estimated total: €5,748" in html
