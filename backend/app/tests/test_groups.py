"""
Tests for group endpoints.
"""
import re


def test_create_group(client, auth_headers):
    response = client.post("/api/groups", json={"name": "  Flatmates "}, headers=auth_headers)
    assert response.status_code == 201
    data = response.json()
    assert data["name"] == "Flatmates"
    assert data["is_personal"] is False
    assert re.fullmatch(r"[A-Z0-9]{6}", data["invite_code"])


def test_blank_group_name_rejected(client, auth_headers):
    response = client.post("/api/groups", json={"name": "   "}, headers=auth_headers)
    assert response.status_code == 400


def test_join_by_code(client, auth_headers, other_headers, group_id):
    code = client.get(f"/api/groups/{group_id}", headers=auth_headers).json()["invite_code"]
    
    response = client.post("/api/groups/join", json={"invite_code": code.lower()}, headers=other_headers)
    assert response.status_code == 200
    assert response.json()["id"] == group_id
    
    # Joining again keeps a single membership
    client.post("/api/groups/join", json={"invite_code": code}, headers=other_headers)
    
    groups = {g["id"]: g for g in client.get("/api/groups", headers=other_headers).json()}
    assert groups[group_id]["role"] == "member"
    assert groups[group_id]["member_count"] == 2
    
    detail = client.get(f"/api/groups/{group_id}", headers=other_headers).json()
    assert [(m["display_name"], m["role"]) for m in detail["members"]] == [
        ("Alice", "owner"), ("Bob", "member")
    ]


def test_join_with_invalid_code(client, auth_headers):
    response = client.post("/api/groups/join", json={"invite_code": "ZZZZZZZ"}, headers=auth_headers)
    assert response.status_code == 404
    assert response.json() == {"error": "Invalid invite code"}


def test_list_groups_roles(client, auth_headers, group_id):
    groups = client.get("/api/groups", headers=auth_headers).json()
    assert [g["name"] for g in groups] == ["Personal", "Home Budget"]
    assert all(g["role"] == "owner" and g["member_count"] == 1 for g in groups)


def test_group_detail_hidden_from_non_members(client, group_id, other_headers):
    response = client.get(f"/api/groups/{group_id}", headers=other_headers)
    assert response.status_code == 404
