from conftest import auth_header, make_booking, make_table, make_user, EVENING


def test_index(client):
    response = client.get("/")
    assert response.status_code == 200
    assert "running" in response.text


def test_create_booking(client, session, notifier):
    user = make_user(session)
    table = make_table(session, price=1000, offers=[{"title": "Opening week", "discount_percent": 20}])
    headers = auth_header(user)
    table_id = table.id
    session.close()

    response = client.post("/api/bookings", headers=headers, json={
        "table": table_id,
        "start_time": "2099-12-31T18:00:00",
    })

    assert response.status_code == 201
    data = response.json()
    assert data["message"] == "Booking created successfully"
    assert data["booking"]["status"] == "booked"
    assert data["booking"]["end_time"] == "2099-12-31T20:00:00"
    assert data["booking"]["final_price"] == 800
    assert data["tables"][0]["available"] is False
    assert len(notifier.sent) == 1


def test_booking_overlap(client, session):
    first = make_user(session, "A")
    second = make_user(session, "B")
    table = make_table(session)
    make_booking(session, first, table, EVENING)
    headers = auth_header(second)
    table_id = table.id
    session.close()

    response = client.post("/api/bookings", headers=headers, json={
        "table": table_id,
        "start_time": "2099-12-31T19:00:00",
    })

    assert response.status_code == 409
    assert "already booked" in response.json()["detail"]


def test_booking_errors_map_to_status_codes(client, session):
    user = make_user(session)
    headers = auth_header(user)
    session.close()

    assert client.post("/api/bookings", json={"table": 1}).status_code == 401
    assert client.post("/api/bookings", headers={"Authorization": "Bearer junk"}, json={"table": 1}).status_code == 401

    response = client.post("/api/bookings", headers=headers, json={})
    assert response.status_code == 400
    assert response.json()["detail"] == "Table is required"

    assert client.post("/api/bookings", headers=headers, json={"table": 99}).status_code == 404


def test_update_and_list_my_bookings(client, session, notifier):
    user = make_user(session)
    table = make_table(session)
    booking = make_booking(session, user, table, EVENING)
    headers = auth_header(user)
    booking_id = booking.id
    session.close()

    response = client.put(f"/api/bookings/{booking_id}", headers=headers, json={
        "start_time": "2099-12-31T21:00:00",
    })
    assert response.status_code == 200
    assert response.json()["end_time"] == "2099-12-31T23:00:00"

    missing = client.put(f"/api/bookings/{booking_id}", headers=headers, json={})
    assert missing.status_code == 400

    mine = client.get("/api/bookings/me", headers=headers).json()
    assert [b["id"] for b in mine] == [booking_id]
    assert mine[0]["table"]["table_number"] == 1


def test_cancel_booking(client, session):
    owner = make_user(session, "Owner")
    stranger = make_user(session, "Stranger")
    table = make_table(session)
    booking = make_booking(session, owner, table, EVENING)
    owner_headers, stranger_headers = auth_header(owner), auth_header(stranger)
    booking_id = booking.id
    session.close()

    response = client.post(f"/api/bookings/{booking_id}/cancel", headers=stranger_headers)
    assert response.status_code == 403

    response = client.post(f"/api/bookings/{booking_id}/cancel", headers=owner_headers)
    assert response.status_code == 200
    assert response.json()["message"] == "Booking cancelled"
    assert response.json()["tables"][0]["available"] is True


def test_list_tables_with_availability(client, session):
    user = make_user(session)
    busy = make_table(session, number=1, menu=[
        {"name": "Salad", "veg": True},
        {"name": "Fish", "veg": False},
    ])
    make_table(session, number=2)
    make_booking(session, user, busy, EVENING)
    session.close()

    assert client.get("/api/tables").status_code == 400

    response = client.get("/api/tables", params={"date": "2099-12-31", "time": "19:00", "veg": "true"})
    assert response.status_code == 200
    data = response.json()
    assert [(t["table_number"], t["available"]) for t in data] == [(1, False), (2, True)]
    assert [m["name"] for m in data[0]["filtered_food_menu"]] == ["Salad"]
    assert len(data[0]["food_menu"]) == 2

    later = client.get("/api/tables", params={"date": "2099-12-31", "time": "20:00"}).json()
    assert later[0]["available"] is True


def test_table_admin_endpoints(client, session):
    admin = make_user(session, "Manager", role="admin")
    user = make_user(session)
    admin_headers, user_headers = auth_header(admin), auth_header(user)
    session.close()

    payload = {
        "table_number": 10,
        "seats": 2,
        "price": 500,
        "offers": [{"title": "Early bird", "discount_percent": 10}],
        "food_menu": [{"name": "Coffee", "available_times": [{"from": "08:00", "to": "11:00"}]}],
    }
    assert client.post("/api/tables", headers=user_headers, json=payload).status_code == 403

    response = client.post("/api/tables", headers=admin_headers, json=payload)
    assert response.status_code == 201
    table = response.json()
    assert table["food_menu"][0]["available_times"] == [{"from": "08:00", "to": "11:00"}]

    assert client.post("/api/tables", headers=admin_headers, json=payload).status_code == 409

    response = client.put(f"/api/tables/{table['id']}", headers=admin_headers, json={"seats": 6})
    assert response.json()["seats"] == 6
    assert client.get(f"/api/tables/{table['id']}").json()["seats"] == 6

    response = client.delete(f"/api/tables/{table['id']}", headers=admin_headers)
    assert response.status_code == 200
    assert client.get(f"/api/tables/{table['id']}").status_code == 404


def test_admin_bookings(client, session):
    admin = make_user(session, "Manager", role="admin")
    user = make_user(session)
    table = make_table(session)
    make_booking(session, user, table, EVENING)
    admin_headers, user_headers = auth_header(admin), auth_header(user)
    session.close()

    assert client.get("/api/admin/bookings", headers=user_headers).status_code == 403

    response = client.get("/api/admin/bookings", headers=admin_headers)
    assert response.status_code == 200
    assert response.json()[0]["user"]["name"] == "Alice"
