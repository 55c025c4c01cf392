from pastelaria.utils.dates import local_tz, utcnow

from conftest import auth_headers


def open_shift(client, user, initial_cash=100):
    resp = client.post("/api/shifts/open", json={"initial_cash": initial_cash}, headers=auth_headers(user))
    assert resp.status_code == 200
    return resp.json()["id"]


def test_login(client, employee):
    resp = client.post("/api/auth/login", data={"username": "caixa1", "password": "0000"})
    assert resp.status_code == 200
    token = resp.json()["access_token"]

    me = client.get("/api/users/me", headers={"Authorization": f"Bearer {token}"})
    assert me.status_code == 200
    assert me.json()["username"] == "caixa1"
    assert me.json()["role"] == "employee"


def test_login_with_wrong_password(client, employee):
    resp = client.post("/api/auth/login", data={"username": "caixa1", "password": "errada"})
    assert resp.status_code == 401
    assert resp.json()["code"] == "unauthenticated"
    assert resp.headers["WWW-Authenticate"] == "Bearer"


def test_requests_without_token_are_rejected(client):
    assert client.get("/api/shifts/current").status_code == 401


def test_shift_close_flow(client, employee, products):
    headers = auth_headers(employee)
    shift_id = open_shift(client, employee)

    resp = client.post(
        f"/api/shifts/{shift_id}/records",
        json={"type": "sale", "payment_method": "cash", "product_id": products["carne"].id, "quantity": 2},
        headers=headers,
    )
    assert resp.status_code == 200
    assert resp.json()["total"] == "18.00"

    resp = client.post(
        f"/api/shifts/{shift_id}/withdrawals", json={"amount": "8.00", "reason": "gelo"}, headers=headers,
    )
    assert resp.status_code == 200

    current = client.get("/api/shifts/current", headers=headers).json()
    assert current["id"] == shift_id
    assert current["current_drawer"] == "110.00"

    body = {
        "shiftId": shift_id,
        "finalCashCount": 100,
        "payments": {"pix": 20, "stone_cumulative": 150.5, "pagbank_cumulative": 0},
    }
    resp = client.post("/api/shifts/close", json=body, headers=headers)
    assert resp.status_code == 400
    assert resp.json()["code"] == "invalid-argument"

    body["divergenceReason"] = "troco errado"
    resp = client.post("/api/shifts/close", json=body, headers=headers)
    assert resp.status_code == 200
    result = resp.json()
    assert result["success"] is True
    assert result["divergence"] == -10.0
    assert result["expectedCash"] == 110.0
    assert result["totalWithdrawals"] == 8.0
    assert result["realValues"] == {"stone": 150.5, "pagbank": 0.0}
    assert result["totalDigital"] == 170.5
    assert result["totalRevenue"] == 188.5

    resp = client.post("/api/shifts/close", json=body, headers=headers)
    assert resp.status_code == 409
    assert resp.json()["code"] == "failed-precondition"

    assert client.get("/api/shifts/current", headers=headers).json() is None


def test_recompute_requires_admin(client, admin, employee):
    shift_id = open_shift(client, employee)
    close = {"shiftId": shift_id, "finalCashCount": 100}
    assert client.post("/api/shifts/close", json=close, headers=auth_headers(employee)).status_code == 200

    resp = client.post("/api/shifts/recompute", json=close, headers=auth_headers(employee))
    assert resp.status_code == 403
    assert resp.json()["code"] == "permission-denied"

    recompute = {"shiftId": shift_id, "finalCashCount": 104, "divergenceReason": "achado no cofre"}
    resp = client.post("/api/shifts/recompute", json=recompute, headers=auth_headers(admin))
    assert resp.status_code == 200
    assert resp.json()["divergence"] == 4.0

    shift = client.get(f"/api/shifts/{shift_id}", headers=auth_headers(admin)).json()
    assert shift["status"] == "closed"
    assert shift["closing_state"] == "corrected"
    assert shift["divergence_reason"] == "achado no cofre"


def test_employee_cannot_read_someone_elses_shift(client, employee, other_employee):
    shift_id = open_shift(client, employee)
    resp = client.get(f"/api/shifts/{shift_id}", headers=auth_headers(other_employee))
    assert resp.status_code == 403


def test_unknown_shift_is_not_found(client, employee):
    resp = client.post(
        "/api/shifts/close", json={"shiftId": "nao-existe", "finalCashCount": 0}, headers=auth_headers(employee),
    )
    assert resp.status_code == 404
    assert resp.json()["code"] == "not-found"


def test_malformed_body_is_invalid_argument(client, employee):
    resp = client.post("/api/shifts/close", json={"finalCashCount": "muito"}, headers=auth_headers(employee))
    assert resp.status_code == 400
    assert resp.json()["code"] == "invalid-argument"


def test_consumption_record_over_http(client, employee, other_employee, products):
    shift_id = open_shift(client, employee)
    resp = client.post(
        f"/api/shifts/{shift_id}/records",
        json={"type": "consumption", "product_id": products["caldo"].id, "consumer_id": other_employee.id},
        headers=auth_headers(employee),
    )
    assert resp.status_code == 200
    assert resp.json()["record_type"] == "consumption"

    current = client.get("/api/shifts/current", headers=auth_headers(employee)).json()
    assert current["sales_cash"] == "0.00"


def test_admin_monitor_and_reports(client, admin, employee):
    shift_id = open_shift(client, employee, initial_cash=50)
    monitor = client.get("/api/shifts/open", headers=auth_headers(admin)).json()
    assert [s["id"] for s in monitor] == [shift_id]
    assert client.get("/api/shifts/open", headers=auth_headers(employee)).status_code == 403

    close = {"shiftId": shift_id, "finalCashCount": 48, "divergenceReason": "moedas", "payments": {"pix": 12}}
    assert client.post("/api/shifts/close", json=close, headers=auth_headers(employee)).status_code == 200

    today = utcnow().astimezone(local_tz()).date().isoformat()
    summary = client.get(
        "/api/reports/daily-summary", params={"target_date": today}, headers=auth_headers(admin),
    ).json()
    assert summary["shifts_count"] == 1
    assert summary["pix"] == "12.00"
    assert summary["total_divergence"] == "-2.00"
    assert summary["cards_real"] == {"stone": "0.00", "pagbank": "0.00"}

    discrepancies = client.get("/api/reports/audit/discrepancies", headers=auth_headers(admin)).json()
    assert [s["id"] for s in discrepancies] == [shift_id]

    trail = client.get("/api/reports/audit/trail", params={"shift_id": shift_id}, headers=auth_headers(admin)).json()
    assert [e["action"] for e in trail] == ["shift_closed"]


def test_envelope_over_http(client, admin, employee):
    shift_id = open_shift(client, employee)
    client.post("/api/shifts/close", json={"shiftId": shift_id, "finalCashCount": 100}, headers=auth_headers(employee))

    pending = client.get("/api/finance/envelopes/pending", headers=auth_headers(admin)).json()
    assert [s["id"] for s in pending] == [shift_id]

    resp = client.post(f"/api/finance/envelopes/{shift_id}/confirm", headers=auth_headers(admin))
    assert resp.status_code == 200
    assert resp.json()["movement_type"] == "entry"

    resp = client.post(f"/api/finance/envelopes/{shift_id}/confirm", headers=auth_headers(admin))
    assert resp.status_code == 409

    client.post("/api/finance/expenses", json={"description": "Óleo", "amount": "30.00"}, headers=auth_headers(admin))
    balance = client.get("/api/finance/balance", headers=auth_headers(admin)).json()
    assert balance == {"balance": "70.00", "entries": "100.00", "exits": "30.00"}


def test_events_feed(client, admin, employee):
    shift_id = open_shift(client, employee)
    events = client.get("/api/events/", headers=auth_headers(admin)).json()
    assert [e["event_type"] for e in events] == ["shift.opened"]
    assert events[0]["shift_id"] == shift_id

    later = client.get("/api/events/", params={"after": events[-1]["id"]}, headers=auth_headers(admin)).json()
    assert later == []


def test_products_lists_only_active(client, employee, products):
    names = [p["name"] for p in client.get("/api/products/", headers=auth_headers(employee)).json()]
    assert names == ["Caldo de Cana 500ml", "Pastel de Carne"]


def test_user_management(client, admin, employee):
    resp = client.post(
        "/api/users/",
        json={"username": "cozinha", "password": "2222", "full_name": "Cozinha"},
        headers=auth_headers(admin),
    )
    assert resp.status_code == 200
    new_id = resp.json()["id"]

    duplicate = client.post("/api/users/", json={"username": "cozinha", "password": "x"}, headers=auth_headers(admin))
    assert duplicate.status_code == 400

    assert client.post("/api/users/", json={"username": "x", "password": "x"}, headers=auth_headers(employee)).status_code == 403

    resp = client.delete(f"/api/users/{new_id}", headers=auth_headers(admin))
    assert resp.json()["is_active"] is False
    login = client.post("/api/auth/login", data={"username": "cozinha", "password": "2222"})
    assert login.status_code == 401


def test_oversized_amounts_are_invalid_argument(client, employee):
    shift_id = open_shift(client, employee)
    headers = auth_headers(employee)

    for body in (
        {"shiftId": shift_id, "finalCashCount": 1e30},
        {"shiftId": shift_id, "finalCashCount": 100, "payments": {"pix": "1e30"}},
        {"shiftId": shift_id, "finalCashCount": 100, "payments": {"stone_cumulative": 100000000}},
    ):
        resp = client.post("/api/shifts/close", json=body, headers=headers)
        assert resp.status_code == 400
        assert resp.json()["code"] == "invalid-argument"

    resp = client.post(f"/api/shifts/{shift_id}/withdrawals", json={"amount": "1e30", "reason": "x"}, headers=headers)
    assert resp.status_code == 400

    assert client.get(f"/api/shifts/{shift_id}", headers=headers).json()["status"] == "open"


def test_stranger_cannot_close_over_http(client, employee, other_employee):
    shift_id = open_shift(client, employee)
    resp = client.post(
        "/api/shifts/close", json={"shiftId": shift_id, "finalCashCount": 100}, headers=auth_headers(other_employee),
    )
    assert resp.status_code == 403
    assert resp.json()["code"] == "permission-denied"


def test_token_failures_carry_the_error_code(client, employee):
    for headers in ({}, {"Authorization": "Bearer lixo"}):
        resp = client.get("/api/shifts/current", headers=headers)
        assert resp.status_code == 401
        assert resp.json()["code"] == "unauthenticated"
        assert resp.headers["WWW-Authenticate"] == "Bearer"
