import pytest

pytestmark = pytest.mark.integration


def test_search_ranks_name_above_address(client, api):
    client.post(f"{api}/persons", json={
        "id": "person-1", "name": "Ahmed Khan", "phone": "+919876543210", "category": "resident",
    })
    client.post(f"{api}/persons", json={
        "id": "person-2", "name": "Ravi Kumar", "phone": "+919876543299", "category": "visitor",
        "address": "Khan Street, Poonch",
    })

    response = client.get(f"{api}/search", params={"q": "Khan"})

    assert response.status_code == 200
    data = response.json()
    assert [r["person"]["id"] for r in data["results"]] == ["person-1", "person-2"]
    assert data["total"] == 2


def test_search_requires_query(client, api):
    assert client.get(f"{api}/search").status_code == 422
    assert client.get(f"{api}/search", params={"q": "%%%"}).status_code == 422


def test_topology_device_lookup(client, api, topology):
    response = client.get(f"{api}/topology/devices/device-1")

    assert response.status_code == 200
    assert response.json()["node_id"] == "node-1"
    assert client.get(f"{api}/topology/devices/missing").status_code == 404
    assert client.post(
        f"{api}/topology/nodes", json={"village_id": "nowhere", "node_name": "Gate"},
    ).status_code == 422
