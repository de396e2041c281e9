from datetime import timedelta

from botilyx.extensions import db
from botilyx.helpers import utcnow
from botilyx.models import AuditLog
from botilyx.utils.audit import AuditAction, AuditEntity, record_action

from conftest import auth_headers, make_user, set_preferences

TREATMENT = {
    "name": "Flu",
    "patient": "Ana",
    "medications": [{
        "medication_id": None,
        "dosage": "1 tablet",
        "frequency_hours": 12,
        "duration_days": 1,
        "start_option": "specific",
        "specific_date": "2030-01-01T08:00:00Z",
    }],
}


def _treatment_payload(medication_id):
    payload = dict(TREATMENT)
    payload["medications"] = [dict(TREATMENT["medications"][0], medication_id=medication_id)]
    return payload


def _history(client, headers, query=""):
    return client.get(f"/api/v1/history{query}", headers=headers)


class TestRecording:

    def test_medication_changes_are_recorded(self, client, user, headers):
        created = client.post("/api/v1/medications", json={"commercial_name": "Tafirol", "initial_quantity": 10,
                                                            "unit": "tablets"}, headers=headers).get_json()
        med_id = created["medication"]["id"]
        client.put(f"/api/v1/medications/{med_id}", json={"current_quantity": 4}, headers=headers)
        client.post(f"/api/v1/medications/{med_id}/archive", headers=headers)
        client.delete(f"/api/v1/medications/{med_id}", headers=headers)

        entries = AuditLog.query.filter_by(entity_type="medication").order_by(AuditLog.id).all()

        assert [e.action for e in entries] == ["create", "update", "archive", "delete"]
        assert all(e.entity_id == med_id for e in entries)
        update = entries[1]
        assert update.previous_data["current_quantity"] == 10
        assert update.new_data["current_quantity"] == 4

    def test_treatment_lifecycle_is_recorded(self, client, user, headers, medication):
        set_preferences(user, push=True)
        treatment_id = client.post("/api/v1/treatments", json=_treatment_payload(medication.id),
                                   headers=headers).get_json()["treatment"]["id"]
        client.post(f"/api/v1/treatments/{treatment_id}/finish", headers=headers)
        client.delete(f"/api/v1/treatments/{treatment_id}", headers=headers)

        entries = AuditLog.query.filter_by(entity_type="treatment").order_by(AuditLog.id).all()

        assert [e.action for e in entries] == ["create", "update", "delete"]
        assert entries[1].previous_data["is_active"] is True
        assert entries[1].new_data["is_active"] is False

    def test_rejected_request_leaves_no_entry(self, client, headers, medication):
        payload = _treatment_payload(medication.id)
        payload["medications"][0]["frequency_hours"] = 0

        assert client.post("/api/v1/treatments", json=payload, headers=headers).status_code == 422
        assert AuditLog.query.count() == 0

    def test_logins_are_recorded_with_client_metadata(self, client, user):
        client.post("/api/v1/auth/login", json={"email": "ana@example.com", "password": "wrong-one"})
        client.post("/api/v1/auth/login", json={"email": "ana@example.com", "password": "secret123"},
                    headers={"User-Agent": "Mozilla/5.0 (iPhone)", "X-Forwarded-For": "203.0.113.7, 10.0.0.1"})
        client.post("/api/v1/auth/login", json={"email": "ghost@example.com", "password": "secret123"})

        failed, ok = AuditLog.query.order_by(AuditLog.id).all()

        assert (failed.action, failed.entity_type) == ("login_failed", "session")
        assert ok.action == "login"
        assert ok.ip_address == "203.0.113.7"
        assert ok.device == "mobile"


class TestListing:

    def _seed(self, user, count, action=AuditAction.CREATE, entity=AuditEntity.MEDICATION):
        for i in range(count):
            record_action(user.id, action, entity, i + 1)
        db.session.commit()

    def test_pagination(self, client, user, headers):
        self._seed(user, 25)

        first = _history(client, headers).get_json()
        last = _history(client, headers, "?page=2&limit=20").get_json()

        assert len(first["history"]) == 20
        assert first["pagination"] == {"page": 1, "limit": 20, "total": 25, "total_pages": 2,
                                       "has_next_page": True, "has_prev_page": False}
        assert len(last["history"]) == 5
        assert last["pagination"]["has_prev_page"] is True
        assert first["history"][0]["entity_id"] == 25

    def test_limit_is_capped(self, client, user, headers):
        self._seed(user, 3)
        assert _history(client, headers, "?limit=500").get_json()["pagination"]["limit"] == 100

    def test_filters(self, client, user, headers):
        self._seed(user, 2)
        self._seed(user, 1, action=AuditAction.DELETE, entity=AuditEntity.TREATMENT)
        old = record_action(user.id, AuditAction.UPDATE, AuditEntity.MEDICATION, 99)
        old.created_at = utcnow() - timedelta(days=10)
        db.session.commit()

        by_action = _history(client, headers, "?action=delete").get_json()["history"]
        by_entity = _history(client, headers, "?entity_type=medication").get_json()["history"]
        recent = _history(client, headers, f"?date_from={(utcnow() - timedelta(days=1)).date().isoformat()}").get_json()

        assert [e["entity_type"] for e in by_action] == ["treatment"]
        assert len(by_entity) == 3
        assert recent["pagination"]["total"] == 3

    def test_bad_query_args(self, client, headers):
        assert _history(client, headers, "?page=0").status_code == 422
        assert _history(client, headers, "?limit=many").status_code == 422
        assert _history(client, headers, "?date_to=someday").status_code == 422

    def test_scoped_to_family_group(self, client, user, headers):
        member = make_user(email="luis@example.com", first_name="Luis", last_name="Perez", group=user.family_group)
        stranger = make_user(email="eve@example.com", first_name="Eve", last_name="Stone")
        self._seed(user, 1)
        self._seed(member, 2)
        self._seed(stranger, 4)

        mine = _history(client, headers).get_json()
        only_member = _history(client, headers, f"?user_id={member.id}").get_json()
        outsider = _history(client, headers, f"?user_id={stranger.id}").get_json()

        assert mine["pagination"]["total"] == 3
        assert {e["user"]["email"] for e in only_member["history"]} == {"luis@example.com"}
        assert outsider["history"] == []

    def test_filter_options(self, client, user, headers):
        member = make_user(email="luis@example.com", first_name="Luis", last_name="Perez", group=user.family_group)
        self._seed(user, 1)
        self._seed(member, 1, action=AuditAction.DELETE, entity=AuditEntity.SHOPPING_LIST)
        self._seed(make_user(email="eve@example.com", first_name="Eve", last_name="Stone"), 1,
                   action=AuditAction.LOGIN, entity=AuditEntity.SESSION)

        resp = client.get("/api/v1/history/filters", headers=headers).get_json()

        assert [u["email"] for u in resp["users"]] == ["ana@example.com", "luis@example.com"]
        assert resp["actions"] == ["create", "delete"]
        assert resp["entity_types"] == ["medication", "shopping_list"]

    def test_requires_authentication(self, client):
        assert client.get("/api/v1/history").status_code == 401


def test_shopping_list_actions_are_recorded(client, user, headers):
    created = client.post("/api/v1/shopping-lists", json={"name": "Run", "items": [{"name": "Aspirin", "price": 5}]},
                          headers=headers).get_json()["shopping_list"]
    client.delete(f"/api/v1/shopping-lists/{created['id']}", headers=headers)

    history = client.get("/api/v1/history?entity_type=shopping_list", headers=auth_headers(user)).get_json()["history"]

    assert [e["action"] for e in history] == ["delete", "create"]
    assert history[1]["new_data"]["total"] == 5.0
