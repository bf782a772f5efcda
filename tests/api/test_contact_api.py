from datetime import datetime, timedelta, timezone


MESSAGE = "Hello, I would like to discuss a project with you."


def _payload(**form_overrides):
    form = {"name": "Ana", "email": "ana@x.com", "message": MESSAGE}
    form.update(form_overrides)
    return {
        "portfolioOwnerId": "u1",
        "formData": form,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "userAgent": "test",
    }


def _post(client, payload, ip="203.0.113.10", **headers):
    return client.post("/api/contact", json=payload, headers={"X-Forwarded-For": ip, **headers})


def test_ana_submission_succeeds(client):
    payload = _payload(message=f"  {MESSAGE}  ")

    res = _post(client, payload)

    assert res.status_code == 200
    body = res.json()
    assert body["message"] == "Contact form submitted successfully"
    assert body["data"]["form_data"]["message"] == MESSAGE
    assert body["data"]["portfolio_owner_id"] == "u1"
    assert body["rateLimitRemaining"] == 4


def test_invalid_email_is_400_naming_email(client):
    res = _post(client, _payload(email="not-an-email"))

    assert res.status_code == 400
    assert "email" in res.json()["error"].lower()


def test_sixth_request_is_429_but_other_ip_passes(client):
    for _ in range(5):
        assert _post(client, _payload()).status_code == 200

    res = _post(client, _payload())
    assert res.status_code == 429
    assert "error" in res.json()

    assert _post(client, _payload(), ip="198.51.100.20").status_code == 200


def test_foreign_origin_is_403(client):
    res = _post(client, _payload(), Origin="https://evil.example")
    assert res.status_code == 403


def test_allowed_origin_passes(client):
    res = _post(client, _payload(), Origin="https://noirkit.dev")
    assert res.status_code == 200


def test_missing_fields_is_400(client):
    res = _post(client, {"formData": {"name": "Ana"}})
    assert res.status_code == 400
    assert res.json() == {"error": "Missing required fields"}


def test_invalid_json_is_400(client):
    res = client.post(
        "/api/contact",
        content=b"{not json",
        headers={"Content-Type": "application/json", "X-Forwarded-For": "203.0.113.11"},
    )
    assert res.status_code == 400


def test_expired_timestamp_is_400(client):
    payload = _payload()
    payload["timestamp"] = (datetime.now(timezone.utc) - timedelta(minutes=6)).isoformat()

    res = _post(client, payload)

    assert res.status_code == 400


def test_script_tags_are_stripped(client):
    res = _post(client, _payload(name="<script>alert(1)</script>", extra={"note": "<b>hi</b>"}))

    assert res.status_code == 200
    form = res.json()["data"]["form_data"]
    assert form["name"] == "scriptalert(1)/script"
    assert form["extra"] == {"note": "bhi/b"}


# ── listing ──────────────────────────────────────────────────────────

def test_listing_requires_auth(client):
    res = client.get("/api/contact")
    assert res.status_code == 401
    assert res.json() == {"error": "Unauthorized"}


def test_listing_with_unknown_user_is_401(client, auth_headers_nonexistent_user):
    res = client.get("/api/contact", headers=auth_headers_nonexistent_user)
    assert res.status_code == 401


def test_listing_is_scoped_and_newest_first(client, owner_id, other_owner_id, auth_headers):
    first = _payload(message="First message for the owner")
    first["portfolioOwnerId"] = owner_id
    second = _payload(message="Second message for the owner")
    second["portfolioOwnerId"] = owner_id
    elsewhere = _payload()
    elsewhere["portfolioOwnerId"] = other_owner_id

    for p in (first, second, elsewhere):
        assert _post(client, p).status_code == 200

    res = client.get("/api/contact", headers=auth_headers)

    assert res.status_code == 200
    data = res.json()["data"]
    assert [d["form_data"]["message"] for d in data] == [
        "Second message for the owner",
        "First message for the owner",
    ]
    assert all(d["portfolio_owner_id"] == owner_id for d in data)
