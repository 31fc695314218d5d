import httpx


def test_autocomplete_is_reshaped(client, mock_http):
    def handler(request):
        assert request.url.path == "/maps/api/place/autocomplete/json"
        assert request.url.params["input"] == "Lis"
        assert request.url.params["key"] == "places-test-key"
        return httpx.Response(200, json={"status": "OK", "predictions": [{
            "place_id": "abc",
            "description": "Lisbon, Portugal",
            "structured_formatting": {"main_text": "Lisbon", "secondary_text": "Portugal"},
            "types": ["locality"],
        }]})

    mock_http(handler)

    resp = client.post("/places/", json={"action": "autocomplete", "input": "Lis"})

    assert resp.status_code == 200
    assert resp.json() == {"predictions": [{
        "placeId": "abc",
        "description": "Lisbon, Portugal",
        "mainText": "Lisbon",
        "secondaryText": "Portugal",
        "types": ["locality"],
    }]}


def test_autocomplete_short_input_skips_upstream(client, mock_http):
    def handler(request):
        raise AssertionError("upstream should not be called")

    mock_http(handler)

    resp = client.post("/places/", json={"action": "autocomplete", "input": "L"})

    assert resp.json() == {"predictions": []}


def test_upstream_error_status_gives_empty_result(client, mock_http):
    mock_http(lambda request: httpx.Response(200, json={
        "status": "REQUEST_DENIED", "error_message": "The provided API key is invalid.",
    }))

    resp = client.post("/places/", json={"action": "search", "query": "museums in Lisbon"})

    assert resp.status_code == 200
    assert resp.json() == {"places": [], "error": "The provided API key is invalid."}


def test_network_error_gives_empty_result(client, mock_http):
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    mock_http(handler)

    resp = client.post("/places/", json={"action": "details", "placeId": "abc"})

    assert resp.status_code == 200
    assert resp.json()["place"] is None
    assert "connection refused" in resp.json()["error"]


def test_nearby_search_summaries(client, mock_http):
    mock_http(lambda request: httpx.Response(200, json={"status": "OK", "results": [{
        "place_id": "p1",
        "name": "Belem Tower",
        "vicinity": "Av. Brasilia",
        "geometry": {"location": {"lat": 38.69, "lng": -9.21}},
        "rating": 4.6,
        "photos": [{"photo_reference": "ref1"}],
        "opening_hours": {"open_now": True},
    }]}))

    resp = client.post("/places/", json={"action": "nearby", "lat": 38.7, "lng": -9.1})

    [place] = resp.json()["places"]
    assert place["placeId"] == "p1"
    assert place["address"] == "Av. Brasilia"
    assert place["isOpen"] is True
    assert "maxwidth=400" in place["photoUrl"]
    assert "photo_reference=ref1" in place["photoUrl"]


def test_photo_url(client):
    resp = client.post("/places/", json={"action": "photo", "photoReference": "ref9", "maxWidth": 300})

    assert resp.json() == {"photoUrl": "https://places.test/maps/api/place/photo"
                                       "?maxwidth=300&photo_reference=ref9&key=places-test-key"}


def test_missing_field_is_bad_request(client):
    resp = client.post("/places/", json={"action": "details"})

    assert resp.status_code == 400
    assert resp.json()["detail"] == "placeId is required"


def test_invalid_action(client):
    resp = client.post("/places/", json={"action": "teleport"})

    assert resp.status_code == 400
    assert resp.json()["detail"] == "Invalid action"


def test_attractions_upstream_failure(client, mock_http):
    mock_http(lambda request: httpx.Response(503))

    resp = client.post("/attractions/", json={"city": "Lisbon", "lat": 38.7, "lon": -9.1})

    assert resp.status_code == 200
    body = resp.json()
    assert body["attractions"] == [] and body["count"] == 0
    assert body["error"]


def test_attractions_are_mapped(client, mock_http):
    mock_http(lambda request: httpx.Response(200, json=[
        {"xid": "N1", "name": "Jeronimos Monastery", "kinds": "historic,religion", "rate": 7,
         "dist": 812.4, "point": {"lat": 38.69, "lon": -9.2}},
        {"xid": "N2", "name": "  ", "kinds": "natural"},
    ]))

    resp = client.post("/attractions/", json={"city": "Lisbon", "lat": 38.7, "lon": -9.1})

    body = resp.json()
    assert body["count"] == 1
    assert "error" not in body
    [attraction] = body["attractions"]
    assert attraction["category"] == "Historic"
    assert attraction["rating"] == 10
    assert attraction["distance"] == 812


def test_activity_image(client, mock_http):
    mock_http(lambda request: httpx.Response(200, json={
        "results": [{"urls": {"regular": "https://images.test/x.jpg"}}],
    }))

    resp = client.post("/attractions/image", json={"query": "Lisbon tram"})

    assert resp.json() == {"imageUrl": "https://images.test/x.jpg"}
