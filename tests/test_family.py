from conftest import auth_headers, make_medication, make_user


def test_get_group_lists_members(client, user, headers):
    resp = client.get("/api/v1/family", headers=headers)

    group = resp.get_json()["group"]
    assert resp.status_code == 200
    assert [m["email"] for m in group["members"]] == ["ana@example.com"]
    assert group["profiles"] == []


def test_admin_adds_registered_user(client, user, headers):
    other = make_user(email="luis@example.com", first_name="Luis", last_name="Gomez")

    resp = client.post("/api/v1/family/members", json={"email": "LUIS@example.com"}, headers=headers)

    assert resp.status_code == 201
    emails = {m["email"] for m in resp.get_json()["group"]["members"]}
    assert emails == {"ana@example.com", "luis@example.com"}
    assert other.is_group_admin is False

    again = client.post("/api/v1/family/members", json={"email": "luis@example.com"}, headers=headers)
    assert again.status_code == 409


def test_adding_unknown_email(client, headers):
    resp = client.post("/api/v1/family/members", json={"email": "ghost@example.com"}, headers=headers)
    assert resp.status_code == 404


def test_non_admin_cannot_add(client, user):
    member = make_user(email="luis@example.com", first_name="Luis", last_name="Perez", group=user.family_group)
    make_user(email="eve@example.com", first_name="Eve", last_name="Stone")

    resp = client.post("/api/v1/family/members", json={"email": "eve@example.com"}, headers=auth_headers(member))

    assert resp.status_code == 403


def test_members_share_inventory(client, user, headers):
    med = make_medication(user)
    member = make_user(email="luis@example.com", first_name="Luis", last_name="Perez", group=user.family_group)

    resp = client.get("/api/v1/medications", headers=auth_headers(member))

    assert [m["id"] for m in resp.get_json()["medications"]] == [med.id]


def test_remove_member_gives_them_own_group(client, user, headers):
    member = make_user(email="luis@example.com", first_name="Luis", last_name="Perez", group=user.family_group)
    make_medication(user)

    resp = client.delete(f"/api/v1/family/members/{member.id}", headers=headers)

    assert resp.status_code == 200
    assert member.family_group_id != user.family_group_id
    assert member.is_group_admin is True
    assert client.get("/api/v1/medications", headers=auth_headers(member)).get_json()["medications"] == []


def test_admin_cannot_remove_self(client, user, headers):
    resp = client.delete(f"/api/v1/family/members/{user.id}", headers=headers)
    assert resp.status_code == 400


def test_profiles_crud(client, headers):
    created = client.post("/api/v1/family/profiles", json={"name": "Sofia", "birth_date": "2018-04-02"}, headers=headers)
    assert created.status_code == 201
    profile_id = created.get_json()["profile"]["id"]

    updated = client.put(f"/api/v1/family/profiles/{profile_id}", json={"notes": "allergic to penicillin"}, headers=headers)
    assert updated.get_json()["profile"]["notes"] == "allergic to penicillin"
    assert updated.get_json()["profile"]["birth_date"] == "2018-04-02"

    group = client.get("/api/v1/family", headers=headers).get_json()["group"]
    assert [p["name"] for p in group["profiles"]] == ["Sofia"]

    assert client.delete(f"/api/v1/family/profiles/{profile_id}", headers=headers).status_code == 200
    assert client.delete(f"/api/v1/family/profiles/{profile_id}", headers=headers).status_code == 404


def test_profile_validation(client, headers):
    assert client.post("/api/v1/family/profiles", json={}, headers=headers).status_code == 400
    bad = client.post("/api/v1/family/profiles", json={"name": "Sofia", "birth_date": "yesterday"}, headers=headers)
    assert bad.status_code == 422


def test_profile_of_other_group_hidden(client, headers):
    stranger = make_user(email="eve@example.com", first_name="Eve", last_name="Stone")
    created = client.post("/api/v1/family/profiles", json={"name": "Tom"}, headers=auth_headers(stranger))
    profile_id = created.get_json()["profile"]["id"]

    resp = client.put(f"/api/v1/family/profiles/{profile_id}", json={"name": "Hacked"}, headers=headers)

    assert resp.status_code == 404
