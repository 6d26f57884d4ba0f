"""
Tests for the HTTP API, page access control and error envelopes
"""

from app.core.config import settings

# -------- Public --------

def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}

def test_list_events(client, wedding):
    response = client.get("/api/events")

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert [e["id"] for e in body["data"]["events"]] == ["WELCOME", "WEDDING", "DINNER", "AFTERPARTY"]

def test_get_event_with_children(client, wedding):
    data = client.get("/api/event/WEDDING").json()["data"]

    assert data["event"]["title"] == "Wedding Ceremony"
    assert [c["id"] for c in data["child_events"]] == ["DINNER", "AFTERPARTY"]

def test_get_unknown_event(client, wedding):
    response = client.get("/api/event/NOPE")

    assert response.status_code == 404
    assert response.json()["success"] is False

def test_event_qr_code(client, wedding):
    response = client.get("/api/event/WEDDING/qr.png")

    assert response.status_code == 200
    assert response.headers["content-type"] == "image/png"
    assert response.content.startswith(b"\x89PNG")

# -------- Guest auth --------

def test_guest_login_sets_cookie(client, wedding):
    response = client.post("/api/guest/login", json={"full_name": "alice tan"})

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["guest"]["full_name"] == "Alice Tan"
    assert client.cookies.get(settings.GUEST_COOKIE_NAME) == data["session_token"]
    assert "httponly" in response.headers["set-cookie"].lower()

def test_guest_login_errors(client, wedding):
    assert client.post("/api/guest/login", json={"full_name": "   "}).status_code == 400

    response = client.post("/api/guest/login", json={"full_name": "Mallory"})
    assert response.status_code == 404
    assert response.json()["error_code"] == "GUEST_NOT_FOUND"

def test_guest_login_rate_limited(client, wedding, monkeypatch):
    monkeypatch.setattr(settings, "RATE_LIMIT_PER_MINUTE", 2)

    for _ in range(2):
        client.post("/api/guest/login", json={"full_name": "Mallory"})
    response = client.post("/api/guest/login", json={"full_name": "Alice Tan"})

    assert response.status_code == 429

def test_validate_session(guest_client):
    token = guest_client.cookies.get(settings.GUEST_COOKIE_NAME)

    response = guest_client.post("/api/auth/validate-session", json={"session_token": token})
    assert response.status_code == 200
    assert response.json()["data"]["guest"]["full_name"] == "Alice Tan"
    assert "session_token" not in response.json()["data"]

    response = guest_client.post("/api/auth/validate-session", json={"use_cookie": True})
    assert response.json()["data"]["session_token"] == token

def test_validate_session_errors(client, wedding):
    assert client.post("/api/auth/validate-session", json={}).status_code == 400
    assert client.post("/api/auth/validate-session", json={"session_token": "bogus"}).status_code == 401

def test_guest_logout(guest_client):
    assert guest_client.post("/api/auth/logout").status_code == 200

    assert guest_client.cookies.get(settings.GUEST_COOKIE_NAME) is None
    assert guest_client.post("/api/rsvp", json={"event_code": "WEDDING", "response": "Yes"}).status_code == 401

# -------- RSVP --------

def test_submit_rsvp(guest_client):
    response = guest_client.post("/api/rsvp", json={
        "event_code": "WEDDING",
        "response": "No",
        "full_name": "Alice Tan",
    })

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["rsvp"]["response"] == "No"
    assert sorted(data["cascaded"]) == ["AFTERPARTY", "DINNER"]
    assert "Related events updated" in response.json()["message"]

def test_submit_rsvp_requires_session(client, wedding):
    response = client.post("/api/rsvp", json={"event_code": "WEDDING", "response": "Yes"})

    assert response.status_code == 401
    assert response.json()["success"] is False

def test_submit_rsvp_with_invalid_session(client, wedding):
    client.cookies.set(settings.GUEST_COOKIE_NAME, "bogus")

    response = client.post("/api/rsvp", json={"event_code": "WEDDING", "response": "Yes"})

    assert response.status_code == 403

def test_submit_rsvp_for_someone_else(guest_client):
    response = guest_client.post("/api/rsvp", json={
        "event_code": "WEDDING",
        "response": "Yes",
        "full_name": "Bob Lee",
    })

    assert response.status_code == 403

def test_submit_rsvp_domain_errors(guest_client):
    response = guest_client.post("/api/rsvp", json={"event_code": "NOPE", "response": "Yes"})
    assert response.status_code == 404
    assert response.json()["error_code"] == "EVENT_NOT_FOUND"

    response = guest_client.post("/api/rsvp", json={
        "event_code": "WEDDING",
        "response": "Yes",
        "plus_one": True,
        "adult_count": 3,
    })
    assert response.status_code == 422
    assert response.json()["error_code"] == "PARTY_TOO_LARGE"

def test_submit_rsvp_validation(guest_client):
    response = guest_client.post("/api/rsvp", json={"event_code": "WEDDING", "response": "Perhaps"})

    assert response.status_code == 422
    body = response.json()
    assert body["error_code"] == "VALIDATION_ERROR"
    assert body["details"]

# -------- Admin --------

def test_admin_login_errors(client, wedding):
    assert client.post("/api/admin/login", json={"username": "admin"}).status_code == 400
    assert client.post("/api/admin/login", json={"username": "admin", "password": "nope"}).status_code == 401

def test_admin_endpoints_require_session(client, wedding):
    for path in ("/api/admin/auth", "/api/admin/summary", "/api/admin/guests", "/api/admin/download?event=WEDDING"):
        assert client.get(path).status_code == 401

def test_admin_auth(admin_client):
    data = admin_client.get("/api/admin/auth").json()["data"]

    assert data == {"authenticated": True, "username": "Admin"}

def test_admin_token_validation(admin_client):
    token = admin_client.cookies.get(settings.ADMIN_COOKIE_NAME)

    response = admin_client.post("/api/admin/auth/validate", json={"admin_token": token})
    assert response.json()["data"] == {"is_admin": True, "username": "Admin"}

    response = admin_client.post("/api/admin/auth/validate", json={"admin_token": "bogus"})
    assert response.status_code == 401
    assert response.json()["details"] == {"is_admin": False}

    assert admin_client.post("/api/admin/auth/validate", json={}).status_code == 400

def test_admin_summary_and_guests(admin_client):
    admin_client.post("/api/guest/login", json={"full_name": "Alice Tan"})
    admin_client.post("/api/rsvp", json={"event_code": "WEDDING", "response": "Yes"})

    summary = admin_client.get("/api/admin/summary").json()["data"]["summary"]
    assert summary["events"]["WEDDING"]["yes"] == 1
    assert summary["total_attending"] == 1

    guests = admin_client.get("/api/admin/guests").json()["data"]["guests"]
    assert [g["full_name"] for g in guests] == ["Alice Tan", "bob lee"]
    assert guests[0]["event_responses"]["WEDDING"]["response"] == "Yes"

def test_admin_download(admin_client):
    response = admin_client.get("/api/admin/download?event=WEDDING")

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/csv")
    assert "attachment; filename=WEDDING-rsvps-" in response.headers["content-disposition"]
    assert response.text.startswith("Full Name,Event,Response")

    assert admin_client.get("/api/admin/download").status_code == 400
    assert admin_client.get("/api/admin/download?event=NOPE").status_code == 404

def test_admin_invited_count(admin_client):
    assert admin_client.get("/api/admin/invited-count?event_id=WEDDING").json()["data"]["count"] == 3
    assert admin_client.get("/api/admin/invited-count").status_code == 400
    assert admin_client.get("/api/admin/invited-count?event_id=NOPE").status_code == 404

def test_admin_logout(admin_client):
    assert admin_client.post("/api/admin/logout").status_code == 200

    assert admin_client.get("/api/admin/auth").status_code == 401

# -------- Pages --------

def test_landing_page(client, wedding):
    response = client.get("/")

    assert response.status_code == 200
    assert "Wedding Ceremony" in response.text
    assert settings.WEDDING_DATE in response.text

def test_rsvp_pages_redirect_to_guest_login(client, wedding):
    response = client.get("/rsvp/DINNER", follow_redirects=False)

    assert response.status_code == 303
    assert response.headers["location"] == "/guest-login?next=/rsvp/DINNER"

def test_rsvp_pages_for_guest(guest_client):
    response = guest_client.get("/rsvp")
    assert response.status_code == 200
    assert "Hello, Alice Tan" in response.text
    assert "/rsvp/WEDDING" in response.text

    response = guest_client.get("/rsvp/DINNER")
    assert response.status_code == 200
    assert "Wedding Dinner" in response.text

def test_rsvp_form_for_uninvited_event(client, wedding):
    client.post("/api/guest/login", json={"full_name": "Bob Lee"})

    response = client.get("/rsvp/AFTERPARTY")

    assert response.status_code == 404
    assert "Page not found" in response.text

def test_admin_pages(client, wedding):
    response = client.get("/admin", follow_redirects=False)
    assert response.status_code == 303
    assert response.headers["location"] == "/admin/login"

    assert client.get("/admin/login").status_code == 200

    client.post("/api/admin/login", json={"username": "admin", "password": "s3cret"})
    response = client.get("/admin")
    assert response.status_code == 200
    assert "Signed in as Admin" in response.text
    # Event codes from the API are escaped before they reach innerHTML
    assert "WeddingSite.escape(code)" in response.text

def test_encoded_spaces_are_stripped(client, wedding):
    response = client.get("/guest%20-login?next=/rsvp", follow_redirects=False)

    assert response.status_code == 307
    assert response.headers["location"] == "/guest-login?next=/rsvp"

def test_encoded_space_redirect_stays_on_site(client, wedding):
    response = client.get("http://testserver//evil.example/%20", follow_redirects=False)

    assert response.status_code == 307
    assert response.headers["location"] == "/evil.example/"

def test_guest_login_keeps_local_next(client, wedding):
    response = client.get("/guest-login?next=/rsvp/DINNER")

    assert 'data-next="/rsvp/DINNER"' in response.text

def test_guest_login_ignores_offsite_next(client, wedding):
    for target in ("//evil.example", "//evil.example/phish", "https://evil.example/", "/\\evil.example"):
        response = client.get("/guest-login", params={"next": target})

        assert response.status_code == 200
        assert 'data-next="/"' in response.text

def test_unknown_page_renders_not_found(client, wedding):
    response = client.get("/no-such-page")

    assert response.status_code == 404
    assert "Page not found" in response.text

def test_unknown_api_route_stays_json(client, wedding):
    response = client.get("/api/no-such-route")

    assert response.status_code == 404
    assert response.json()["success"] is False
