from __future__ import annotations


def test_list_embeds_expansions(client, container, group_home):
    container.group_home_service.create_expansion(
        {
            "property_name": "ひまわり荘",
            "unit_name": "A棟",
            "expansion_type": "B",
            "new_rooms": ["104"],
            "start_date": "2024-10-01",
        }
    )

    body = client.get("/api/group-homes").get_json()

    assert body[0]["propertyName"] == "ひまわり荘"
    assert body[0]["residentRooms"] == ["101", "102", "103"]
    assert body[0]["expansions"][0]["expansionType"] == "B"
    assert body[0]["expansions"][0]["commonRoom"] is None


def test_create_update_delete(client):
    payload = {
        "propertyName": "さくら荘",
        "unitName": "1F",
        "postalCode": "530-0001",
        "address": "大阪府大阪市",
        "phoneNumber": "06-1111-2222",
        "residentRooms": ["1", "2"],
        "openingDate": "2023-01-01",
    }
    created = client.post("/api/group-homes", json=payload)
    assert created.status_code == 201
    gh_id = created.get_json()["id"]

    payload["residentRooms"] = ["1", "2", "3"]
    updated = client.put(f"/api/group-homes/{gh_id}", json=payload)
    assert updated.get_json()["residentRooms"] == ["1", "2", "3"]

    assert client.delete(f"/api/group-homes/{gh_id}").status_code == 200
    assert client.get(f"/api/group-homes/{gh_id}").status_code == 404


def test_units_and_rooms_endpoints(client, group_home):
    units = client.get("/api/units").get_json()
    assert units == [
        {"key": str(group_home.id), "propertyName": "ひまわり荘", "unitName": "A棟", "label": "ひまわり荘 - A棟"}
    ]

    rooms = client.get(f"/api/units/rooms?groupHomeId={group_home.id}").get_json()
    assert rooms == ["101", "102", "103"]

    by_name = client.get("/api/units/rooms?property_name=ひまわり荘&unit_name=A棟").get_json()
    assert by_name == rooms

    assert client.get("/api/units/rooms?group_home_id=expansion_99").status_code == 404

    props = client.get("/api/properties").get_json()
    assert props == [{"propertyName": "ひまわり荘", "units": ["A棟"]}]


def test_staff_cannot_create_group_home(client, login):
    login("staff")

    resp = client.post("/api/group-homes", json={})

    assert resp.status_code == 403


def test_statistics_endpoint(client, group_home):
    assert client.get("/api/group-homes/statistics").get_json()["totalRooms"] == 3


def test_rooms_given_as_text_are_rejected(client):
    resp = client.post(
        "/api/group-homes",
        json={
            "propertyName": "さくら荘",
            "unitName": "1F",
            "postalCode": "530-0001",
            "address": "大阪府大阪市",
            "phoneNumber": "06-1111-2222",
            "residentRooms": "101",
            "openingDate": "2023-01-01",
        },
    )

    assert resp.status_code == 400
    assert resp.get_json()["errors"] == {"residentRooms": "一覧の形式が正しくありません"}
    assert client.get("/api/group-homes").get_json() == []
