"""
Device management tests.
"""


def test_requires_authenticated_user(client):
    """Requests without a user identity are rejected."""
    response = client.get("/devices")

    assert response.status_code == 401


def test_create_device_owned_by_current_user(client, backend, user_headers, unique_id):
    """Created devices belong to the signed-in user."""
    response = client.post(
        "/devices", json={"device_id": f"dev-{unique_id}"}, headers=user_headers
    )

    assert response.status_code == 201
    data = response.json()
    assert data["device_id"] == f"dev-{unique_id}"
    assert data["owner"] == "alice"
    assert backend.devices[f"dev-{unique_id}"]["owner"] == "alice"


def test_create_device_rejects_blank_id(client, backend, user_headers):
    """Blank device ids never reach the backend."""
    response = client.post("/devices", json={"device_id": "   "}, headers=user_headers)

    assert response.status_code == 400
    assert backend.requests == []


def test_create_device_failure_is_reported(client, backend, user_headers):
    """A rejected create is reported as a backend failure."""
    backend.rejections["CreateDevices"] = [{"message": "ConditionalCheckFailed"}]

    response = client.post("/devices", json={"device_id": "d1"}, headers=user_headers)

    assert response.status_code == 502


def test_list_devices_only_returns_own_devices(client, backend, user_headers):
    """Device listing is scoped to the current owner."""
    backend.add_device("d1", "alice")
    backend.add_device("d2", "alice")
    backend.add_device("b1", "bob")

    response = client.get("/devices", headers=user_headers)

    assert response.status_code == 200
    assert [d["device_id"] for d in response.json()] == ["d1", "d2"]


def test_list_devices_follows_pagination(client, backend, user_headers):
    """All pages of the device list are fetched."""
    for i in range(250):
        backend.add_device(f"d{i}", "alice")

    response = client.get("/devices", headers=user_headers)

    assert len(response.json()) == 250
    assert backend.operations.count("ListDevices") == 3


def test_list_devices_backend_down(client, backend, user_headers):
    """An unreachable backend answers 502."""
    backend.unreachable.add("ListDevices")

    response = client.get("/devices", headers=user_headers)

    assert response.status_code == 502


def test_delete_selected_device_falls_back_to_next(client, backend, user_headers):
    """Deleting the selection moves it to another remaining device."""
    backend.add_device("d1", "alice")
    backend.add_device("d2", "alice")

    response = client.delete("/devices/d1?selected=d1", headers=user_headers)

    assert response.status_code == 200
    assert response.json() == {"device_id": "d1", "accepted": True, "selected": "d2"}
    assert "d1" not in backend.devices


def test_delete_last_device_clears_selection(client, backend, user_headers):
    """Deleting the only selected device clears the selection."""
    backend.add_device("d1", "alice")

    response = client.delete("/devices/d1?selected=d1", headers=user_headers)

    assert response.json()["selected"] is None


def test_delete_other_device_keeps_selection(client, backend, user_headers):
    """Deleting an unselected device keeps the selection."""
    backend.add_device("d1", "alice")
    backend.add_device("d2", "alice")

    response = client.delete("/devices/d2?selected=d1", headers=user_headers)

    assert response.json()["selected"] == "d1"


def test_delete_does_not_cascade_to_telemetry(client, backend, user_headers):
    """Deleting a device leaves its telemetry in place."""
    backend.add_device("d1", "alice")
    backend.add_reading("d1", 1000)

    client.delete("/devices/d1", headers=user_headers)

    assert len(backend.telemetry) == 1


def test_delete_failure_is_not_raised(client, backend, user_headers):
    """A failed delete is reported as not accepted."""
    backend.add_device("d1", "alice")
    backend.unreachable.add("DeleteDevices")

    response = client.delete("/devices/d1?selected=d1", headers=user_headers)

    assert response.status_code == 200
    assert response.json()["accepted"] is False


def test_delete_sent_when_device_list_unavailable(client, backend, user_headers):
    """A failed device listing does not stop the delete command."""
    backend.add_device("d1", "alice")
    backend.unreachable.add("ListDevices")

    response = client.delete("/devices/d1?selected=d1", headers=user_headers)

    assert response.status_code == 200
    assert response.json() == {"device_id": "d1", "accepted": True, "selected": None}
    assert "d1" not in backend.devices
