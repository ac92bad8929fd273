from io import BytesIO

from openpyxl import load_workbook


def booking_payload(room_id: int, check_in: str = "2024-01-10", check_out: str = "2024-01-12") -> dict:
    return {
        "customer_name": "Asha Rao",
        "customer_email": "asha@example.com",
        "roomId": room_id,
        "check_in": check_in,
        "check_out": check_out,
    }


def check(client, room_id, check_in, check_out):
    return client.post("/api/bookings/check", json={"roomId": room_id, "check_in": check_in, "check_out": check_out})


def test_booking_flow(bookings_client, staff_headers, make_room):
    room_id = make_room()

    availability = check(bookings_client, room_id, "2024-01-10", "2024-01-12")
    assert availability.status_code == 200
    assert availability.json() == {"available": True}

    create_resp = bookings_client.post("/api/bookings", json=booking_payload(room_id), headers=staff_headers)
    assert create_resp.status_code == 201
    booking = create_resp.json()
    assert booking["status"] == "booked"
    assert booking["roomId"] == room_id
    assert booking["check_in"] == "2024-01-10"

    overlapping = check(bookings_client, room_id, "2024-01-11", "2024-01-13")
    assert overlapping.status_code == 200
    assert overlapping.json() == {"available": False, "message": "Room already booked for these dates"}

    turnover = check(bookings_client, room_id, "2024-01-12", "2024-01-13")
    assert turnover.json()["available"] is True

    for status in ("checked-in", "checked-out"):
        resp = bookings_client.put(f"/api/bookings/{booking['id']}/status", json={"status": status}, headers=staff_headers)
        assert resp.status_code == 200
        assert resp.json()["status"] == status


def test_overlapping_creation_is_rejected(bookings_client, staff_headers, make_room):
    room_id = make_room()
    bookings_client.post("/api/bookings", json=booking_payload(room_id), headers=staff_headers)

    resp = bookings_client.post(
        "/api/bookings", json=booking_payload(room_id, "2024-01-11", "2024-01-13"), headers=staff_headers
    )
    assert resp.status_code == 400
    assert resp.json()["code"] == "room_unavailable"


def test_check_rejects_bad_input(bookings_client, make_room):
    room_id = make_room()

    missing = bookings_client.post("/api/bookings/check", json={"roomId": room_id, "check_in": "2024-01-10"})
    assert missing.status_code == 400

    unparseable = check(bookings_client, room_id, "2024-13-45", "2024-01-12")
    assert unparseable.status_code == 400

    reversed_stay = check(bookings_client, room_id, "2024-01-12", "2024-01-10")
    assert reversed_stay.status_code == 400
    assert reversed_stay.json()["code"] == "validation_error"


def test_check_unknown_room(bookings_client):
    resp = check(bookings_client, 999, "2024-01-10", "2024-01-12")

    assert resp.status_code == 404
    assert resp.json()["code"] == "not_found"


def test_create_requires_front_desk_role(bookings_client, make_room):
    room_id = make_room()

    assert bookings_client.post("/api/bookings", json=booking_payload(room_id)).status_code == 401


def test_status_update_rules(bookings_client, staff_headers, make_room):
    room_id = make_room()
    booking_id = bookings_client.post("/api/bookings", json=booking_payload(room_id), headers=staff_headers).json()["id"]

    unknown_value = bookings_client.put(
        f"/api/bookings/{booking_id}/status", json={"status": "confirmed"}, headers=staff_headers
    )
    assert unknown_value.status_code == 400

    skip_check_in = bookings_client.put(
        f"/api/bookings/{booking_id}/status", json={"status": "checked-out"}, headers=staff_headers
    )
    assert skip_check_in.status_code == 400
    assert skip_check_in.json()["code"] == "invalid_transition"

    cancel = bookings_client.put(f"/api/bookings/{booking_id}/status", json={"status": "cancelled"}, headers=staff_headers)
    assert cancel.status_code == 200

    after_cancel = bookings_client.put(
        f"/api/bookings/{booking_id}/status", json={"status": "checked-in"}, headers=staff_headers
    )
    assert after_cancel.status_code == 400
    assert after_cancel.json()["detail"] == "Booking is already cancelled; its status can no longer change"

    missing = bookings_client.put("/api/bookings/999/status", json={"status": "cancelled"}, headers=staff_headers)
    assert missing.status_code == 404


def test_listing_is_admin_only(bookings_client, admin_headers, staff_headers, make_room):
    room_id = make_room("305", tariff="6000")
    bookings_client.post("/api/bookings", json=booking_payload(room_id), headers=staff_headers)

    assert bookings_client.get("/api/bookings", headers=staff_headers).status_code == 403

    resp = bookings_client.get("/api/bookings", headers=admin_headers)
    assert resp.status_code == 200
    [booking] = resp.json()
    assert booking["room"]["room_number"] == "305"
    assert booking["room"]["tariff"] == 6000.0


def test_excel_export(bookings_client, admin_headers, staff_headers, make_room):
    room_id = make_room()
    bookings_client.post("/api/bookings", json=booking_payload(room_id), headers=admin_headers)

    assert bookings_client.get("/api/bookings/export/excel", headers=staff_headers).status_code == 403

    resp = bookings_client.get("/api/bookings/export/excel", headers=admin_headers)
    assert resp.status_code == 200
    assert resp.headers["content-type"].startswith("application/vnd.openxmlformats-officedocument.spreadsheetml.sheet")
    assert "bookings.xlsx" in resp.headers["content-disposition"]
    rows = list(load_workbook(BytesIO(resp.content))["Bookings"].iter_rows(values_only=True))
    assert rows[1][1] == "Asha Rao"
    assert rows[1][3] == "101"


def test_invoice(bookings_client, staff_headers, make_room):
    room_id = make_room()
    booking_id = bookings_client.post("/api/bookings", json=booking_payload(room_id), headers=staff_headers).json()["id"]

    resp = bookings_client.get(f"/api/invoices/{booking_id}/invoice", headers=staff_headers)
    assert resp.status_code == 200
    assert resp.headers["content-type"] == "application/pdf"
    assert f"invoice_{booking_id}.pdf" in resp.headers["content-disposition"]
    assert resp.content.startswith(b"%PDF")

    assert bookings_client.get("/api/invoices/999/invoice", headers=staff_headers).status_code == 404
