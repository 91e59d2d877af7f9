from __future__ import annotations


def test_staff_reports_and_lists(client, login):
    login("staff")

    created = client.post("/api/attendance", json={"checkIn": "08:30", "checkOut": "17:00", "shiftType": "early"})
    assert created.status_code == 201
    body = created.get_json()
    assert body["checkIn"] == "08:30"
    assert body["shiftType"] == "early"
    assert body["workDate"] == "2025-06-01"

    listing = client.get("/api/attendance").get_json()
    assert [r["id"] for r in listing["reports"]] == [body["id"]]
    assert listing["statistics"]["averageWorkTime"] == "8時間30分"


def test_staff_cannot_delete(client, login):
    login("staff")
    report_id = client.post("/api/attendance", json={"checkIn": "09:00", "checkOut": "17:00"}).get_json()["id"]

    assert client.delete(f"/api/attendance/{report_id}").status_code == 403

    login("payroll")
    assert client.delete(f"/api/attendance/{report_id}").status_code == 200
    assert client.get("/api/attendance").get_json()["reports"] == []


def test_validation_errors_are_field_keyed(client, login):
    login("staff")

    resp = client.post("/api/attendance", json={"checkIn": "17:00", "checkOut": "09:00"})

    assert resp.status_code == 400
    assert resp.get_json()["errors"] == {"checkOut": "退勤時刻は出勤時刻より後にしてください"}
