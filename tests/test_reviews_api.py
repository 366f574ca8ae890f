# tests/test_reviews_api.py


def complete(client, salon, appt_id):
    for headers, status in ((salon.owner, "confirmed"), (salon.staff, "in_progress"), (salon.staff, "completed")):
        r = client.patch(f"/appointments/{appt_id}", headers=headers, json={"status": status})
        assert r.status_code == 200, r.text


def test_review_flow(client, book, salon):
    first = book("10:00").json()["id"]
    second = book("11:00").json()["id"]

    r = client.post("/reviews", headers=salon.client, json={"appointment_id": first, "rating": 5})
    assert r.status_code == 422  # not completed yet

    complete(client, salon, first)
    complete(client, salon, second)

    r = client.post("/reviews", headers=salon.client, json={"appointment_id": first, "rating": 5, "comment": "Great"})
    assert r.status_code == 201, r.text
    review_id = r.json()["id"]
    r = client.post("/reviews", headers=salon.client, json={"appointment_id": first, "rating": 1})
    assert r.status_code == 409
    r = client.post("/reviews", headers=salon.client, json={"appointment_id": second, "rating": 4})
    assert r.status_code == 201, r.text

    shop = client.get(f"/salons/{salon.id}").json()
    assert (shop["rating"], shop["review_count"]) == (4.5, 2)
    stylist = client.get(f"/staff/{salon.staff_id}").json()
    assert (stylist["rating"], stylist["review_count"]) == (4.5, 2)

    r = client.post(f"/reviews/{review_id}/response", headers=salon.client, json={"response": "me too"})
    assert r.status_code == 403
    r = client.post(f"/reviews/{review_id}/response", headers=salon.owner, json={"response": "Thanks!"})
    assert r.json()["response"] == "Thanks!"

    reviews = client.get(f"/salons/{salon.id}/reviews").json()
    assert len(reviews) == 2


def test_only_own_appointments_can_be_reviewed(client, book, register, salon):
    appt_id = book("10:00").json()["id"]
    complete(client, salon, appt_id)
    _, stranger = register("stranger@example.com", "client")
    r = client.post("/reviews", headers=stranger, json={"appointment_id": appt_id, "rating": 3})
    assert r.status_code == 403
    r = client.post("/reviews", headers=salon.client, json={"appointment_id": appt_id, "rating": 6})
    assert r.status_code == 422
