# tests/test_appointments_api.py

from datetime import date, timedelta


def reason(response):
    return response.json()["detail"]["reason"]


def test_client_books_a_slot(book, salon):
    r = book("10:00")
    assert r.status_code == 201, r.text
    body = r.json()
    assert body["time"] == "10:00"
    assert body["end_time"] == "10:45"
    assert body["status"] == "pending"
    assert body["client_id"] == salon.client_id
    assert body["client_name"] == "Cleo"
    assert body["total_price"] == 30.0
    assert body["is_guest"] is False


def test_european_date_format(book, salon):
    r = book("10:00", date=salon.day.strftime("%d.%m.%Y"))
    assert r.status_code == 201, r.text
    assert r.json()["date"] == salon.day.isoformat()


def test_out_of_hours(book):
    r = book("16:30")
    assert r.status_code == 422
    assert reason(r) == "OutOfHours"


def test_overlap_and_adjacent(book):
    assert book("10:00").status_code == 201
    r = book("10:30")
    assert r.status_code == 422
    assert reason(r) == "DoubleBooked"
    assert book("10:45").status_code == 201


def test_break_blocks_booking(client, book, salon):
    r = client.post(f"/staff/{salon.staff_id}/breaks", headers=salon.staff,
                    json={"type": "daily", "title": "Lunch", "start_time": "12:00", "end_time": "13:00"})
    assert r.status_code == 201, r.text
    r = book("12:30")
    assert r.status_code == 422
    assert reason(r) == "Excepted"
    assert book("13:00").status_code == 201


def test_vacation_blocks_booking(client, book, salon):
    r = client.post(f"/staff/{salon.staff_id}/vacations", headers=salon.owner, json={
        "title": "Summer", "start_date": salon.day.isoformat(),
        "end_date": (salon.day + timedelta(days=3)).isoformat(),
    })
    assert r.status_code == 201, r.text
    for start in ("09:00", "13:00", "16:00"):
        r = book(start)
        assert r.status_code == 422
        assert reason(r) == "Excepted"


def test_booking_in_the_past(book):
    r = book("10:00", day=date.today() - timedelta(days=7))
    assert r.status_code == 422
    assert reason(r) == "ValidationError"


def test_malformed_request_uses_error_envelope(book):
    r = book("10h")
    assert r.status_code == 422
    assert reason(r) == "ValidationError"
    assert r.json()["detail"]["errors"]


def test_staff_must_offer_the_service(client, book, salon):
    r = client.post(f"/salons/{salon.id}/staff", headers=salon.owner, json={"name": "Nina"})
    other_staff = r.json()["id"]
    r = book("10:00", staff_id=other_staff)
    assert r.status_code == 422
    assert reason(r) == "ValidationError"


def test_status_walk(client, book, salon):
    appt_id = book("10:00").json()["id"]

    r = client.patch(f"/appointments/{appt_id}", headers=salon.staff, json={"status": "in_progress"})
    assert r.status_code == 409
    assert reason(r) == "InvalidTransition"

    r = client.patch(f"/appointments/{appt_id}", headers=salon.owner, json={"status": "confirmed"})
    assert r.status_code == 200, r.text
    r = client.patch(f"/appointments/{appt_id}", headers=salon.staff, json={"status": "in_progress"})
    assert r.status_code == 200, r.text
    r = client.patch(f"/appointments/{appt_id}", headers=salon.staff, json={"status": "completed"})
    assert r.json()["status"] == "completed"

    r = client.patch(f"/appointments/{appt_id}", headers=salon.admin, json={"status": "cancelled"})
    assert r.status_code == 409


def test_client_cannot_confirm(client, book, salon):
    appt_id = book("10:00").json()["id"]
    r = client.patch(f"/appointments/{appt_id}", headers=salon.client, json={"status": "confirmed"})
    assert r.status_code == 409
    assert reason(r) == "InvalidTransition"


def test_missing_appointment_is_invalid_transition(client, salon):
    r = client.patch("/appointments/9999", headers=salon.admin, json={"status": "confirmed"})
    assert r.status_code == 409
    assert reason(r) == "InvalidTransition"


def test_cancel_frees_the_slot(client, book, salon):
    appt_id = book("10:00").json()["id"]
    r = client.put(f"/appointments/{appt_id}/cancel", headers=salon.client)
    assert r.status_code == 200, r.text
    assert r.json()["status"] == "cancelled"

    r = book("10:00")
    assert r.status_code == 201, r.text


def test_strangers_cannot_touch_an_appointment(client, book, register, salon):
    appt_id = book("10:00").json()["id"]
    _, stranger = register("stranger@example.com", "client")

    assert client.get(f"/appointments/{appt_id}", headers=stranger).status_code == 403
    r = client.put(f"/appointments/{appt_id}/cancel", headers=stranger)
    assert r.status_code == 403
    assert reason(r) == "Forbidden"
    assert client.get("/appointments", headers=stranger).json() == []


def test_listing_is_scoped_and_filtered(client, book, salon):
    book("10:00")
    book("11:00")
    for headers in (salon.client, salon.staff, salon.owner, salon.admin):
        assert len(client.get("/appointments", headers=headers).json()) == 2

    r = client.get("/appointments", headers=salon.owner, params={"status": "confirmed"})
    assert r.json() == []
    r = client.get("/appointments", headers=salon.owner, params={"date": salon.day.strftime("%d.%m.%Y")})
    assert [a["time"] for a in r.json()] == ["10:00", "11:00"]


def test_manual_booking_by_owner(book, salon):
    r = book("10:00", headers=salon.owner)
    assert r.status_code == 422
    assert reason(r) == "ValidationError"

    r = book("10:00", headers=salon.owner, client_name="Walk In", client_phone="+3622222")
    assert r.status_code == 201, r.text
    body = r.json()
    assert body["status"] == "confirmed"
    assert body["is_guest"] is True
    assert body["client_id"] is None


def test_owner_of_another_salon_cannot_book_manually(client, book, register, salon):
    _, rival = register("rival@example.com", "salon")
    r = book("10:00", headers=rival, client_name="X", client_phone="1")
    assert r.status_code == 403
    assert reason(r) == "Forbidden"


def test_auto_confirm(client, book, salon):
    r = client.put(f"/salons/{salon.id}", headers=salon.owner, json={"auto_confirm": True})
    assert r.status_code == 200, r.text
    assert book("10:00").json()["status"] == "confirmed"


def test_client_reschedules(client, book, salon):
    appt_id = book("10:00").json()["id"]
    book("14:00")

    r = client.patch(f"/appointments/{appt_id}", headers=salon.client, json={"time": "13:30"})
    assert r.status_code == 422
    assert reason(r) == "DoubleBooked"

    # moving within its own slot does not clash with itself
    r = client.patch(f"/appointments/{appt_id}", headers=salon.client, json={"time": "10:15"})
    assert r.status_code == 200, r.text
    assert (r.json()["time"], r.json()["end_time"]) == ("10:15", "11:00")

    r = client.patch(f"/appointments/{appt_id}", headers=salon.staff, json={"time": "11:00"})
    assert r.status_code == 403


def test_payment_status_is_for_the_salon(client, book, salon):
    appt_id = book("10:00").json()["id"]
    r = client.patch(f"/appointments/{appt_id}", headers=salon.client, json={"payment_status": "paid"})
    assert r.status_code == 403
    r = client.patch(f"/appointments/{appt_id}", headers=salon.owner,
                     json={"payment_status": "paid", "notes": "paid cash"})
    assert r.status_code == 200, r.text
    assert r.json()["payment_status"] == "paid"
    assert r.json()["notes"] == "paid cash"


def test_available_slots_endpoint(client, book, salon):
    book("10:00")
    r = client.get(f"/salons/{salon.id}/available-slots",
                   params={"staff_id": salon.staff_id, "service_id": salon.service_id,
                           "date": salon.day.isoformat()})
    assert r.status_code == 200, r.text
    starts = r.json()["available_starts"]
    assert "09:00" in starts
    assert "10:00" not in starts
    assert "10:30" not in starts
    assert "11:00" in starts
    assert "16:30" not in starts
