"""Tests for the REST API."""

from civichub.moderation.models import Resource, ResourceDraft


def _submit(client, headers, **overrides):
    body = {
        "name": "Food Bank",
        "category": "food",
        "description": "Free groceries every Saturday",
        "address": "12 Main St",
        "phone": "555-0100",
        "email": "info@foodbank.org",
    }
    body.update(overrides)
    return client.post("/api/resources/submit", json=body, headers=headers)


def test_health(client):
    assert client.get("/health").json() == {"status": "healthy"}


def test_requires_authentication(client):
    resp = client.get("/api/admin/resource-submissions")
    assert resp.status_code == 401
    assert resp.json() == {"success": False, "error": "Authentication required"}

    resp = client.get("/api/auth/me", headers={"Authorization": "Bearer nope"})
    assert resp.status_code == 401


def test_non_admin_cannot_review(client, auth_headers, volunteer, moderator):
    for user in (volunteer, moderator):
        resp = client.patch("/api/admin/resource-submissions/x/approve", headers=auth_headers(user))
        assert resp.status_code == 403
        assert resp.json()["error"] == "Admin access required"


def test_submit_and_approve_flow(client, auth_headers, admin, volunteer, platform):
    submitted = _submit(client, auth_headers(volunteer))
    assert submitted.status_code == 201
    submission = submitted.json()["data"]
    assert submission["status"] == "pending"
    assert submission["submittedBy"] == volunteer.id

    admin_headers = auth_headers(admin)
    pending = client.get("/api/admin/resource-submissions", headers=admin_headers).json()["data"]
    assert [s["id"] for s in pending] == [submission["id"]]

    resp = client.patch(
        f"/api/admin/resource-submissions/{submission['id']}/approve",
        json={"featured": True, "adminNotes": "Verified by phone"},
        headers=admin_headers,
    )
    assert resp.status_code == 200
    body = resp.json()
    assert body["success"] is True
    assert body["message"] == "Resource approved and published successfully"
    resource_id = body["data"]["resourceId"]

    resource = client.get(f"/api/resources/{resource_id}").json()["data"]
    assert resource["featured"] is True
    assert resource["verified"] is True

    again = client.patch(
        f"/api/admin/resource-submissions/{submission['id']}/approve", headers=admin_headers
    )
    assert again.status_code == 400
    assert again.json()["error"] == "Submission already processed"

    me = client.get("/api/auth/me", headers=auth_headers(volunteer)).json()["data"]
    assert me["role"] == "organizer"


def test_approve_unknown_submission(client, auth_headers, admin):
    resp = client.patch("/api/admin/resource-submissions/missing/approve", headers=auth_headers(admin))
    assert resp.status_code == 404
    assert resp.json()["error"] == "Submission not found"


def test_reject_submission(client, auth_headers, admin, volunteer):
    submission = _submit(client, auth_headers(volunteer)).json()["data"]
    resp = client.patch(
        f"/api/admin/resource-submissions/{submission['id']}/reject",
        json={"reason": "Duplicate"},
        headers=auth_headers(admin),
    )
    assert resp.json()["message"] == "Submission rejected successfully"

    listed = client.get(
        "/api/admin/resource-submissions?status=rejected", headers=auth_headers(admin)
    ).json()["data"]
    assert listed[0]["rejectionReason"] == "Duplicate"


def test_submit_missing_fields(client, auth_headers, volunteer):
    resp = _submit(client, auth_headers(volunteer), phone="")
    assert resp.status_code == 400
    assert "phone" in resp.json()["error"]


def test_flag_and_review(client, auth_headers, volunteer, moderator, platform):
    platform.rules.create_rule("Scam", "wire transfer", priority=3)

    resp = client.post(
        "/api/admin/moderation/flags",
        json={"type": "post", "itemId": "p1", "reason": "Asks for a wire transfer"},
        headers=auth_headers(volunteer),
    )
    assert resp.status_code == 201
    flag = resp.json()["data"]
    assert flag["priority"] == "medium"
    assert [m["ruleName"] for m in flag["matchedRules"]] == ["Scam"]

    dup = client.post(
        "/api/admin/moderation/flags",
        json={"type": "post", "itemId": "p1", "reason": "again"},
        headers=auth_headers(volunteer),
    )
    assert dup.status_code == 400
    assert dup.json()["error"] == "Content already flagged by you"

    assert client.get("/api/admin/moderation/flags", headers=auth_headers(volunteer)).status_code == 403

    updated = client.patch(
        f"/api/admin/moderation/flags/{flag['id']}",
        json={"status": "resolved"},
        headers=auth_headers(moderator),
    ).json()
    assert updated["data"]["status"] == "resolved"
    assert updated["data"]["reviewedBy"] == moderator.id


def test_flag_requires_known_type(client, auth_headers, volunteer):
    resp = client.post(
        "/api/admin/moderation/flags",
        json={"type": "video", "itemId": "v1", "reason": "bad"},
        headers=auth_headers(volunteer),
    )
    assert resp.status_code == 400


def test_bulk_action(client, auth_headers, moderator, platform):
    platform.repository.create_resource(
        Resource(id="res1", draft=ResourceDraft(name="Clinic", category="health", description="..."))
    )

    resp = client.post(
        "/api/admin/moderation/bulk",
        json={"action": "approve", "itemIds": ["res1", "res2"], "type": "resource"},
        headers=auth_headers(moderator),
    )

    body = resp.json()
    assert resp.status_code == 200
    assert body["data"]["summary"] == {"total": 2, "success": 1, "failed": 1}
    assert body["data"]["results"][1] == {"id": "res2", "success": False, "error": "Resource not found"}
    assert body["message"] == "Bulk action completed: 1 succeeded, 1 failed"


def test_bulk_action_requires_item_ids(client, auth_headers, moderator):
    resp = client.post(
        "/api/admin/moderation/bulk",
        json={"action": "approve", "itemIds": []},
        headers=auth_headers(moderator),
    )
    assert resp.status_code == 400
    assert resp.json()["error"] == "Action and itemIds array are required"


def test_history_filters(client, auth_headers, admin, moderator, volunteer):
    submission = _submit(client, auth_headers(volunteer)).json()["data"]
    client.patch(
        f"/api/admin/resource-submissions/{submission['id']}/approve", headers=auth_headers(admin)
    )
    client.post(
        "/api/admin/moderation/flags",
        json={"type": "post", "itemId": "p9", "reason": "spam"},
        headers=auth_headers(volunteer),
    )

    headers = auth_headers(moderator)
    by_item = client.get(
        f"/api/admin/moderation/history?itemId={submission['id']}&type=submission", headers=headers
    ).json()["data"]
    assert [(a["action"], a["adminId"]) for a in by_item] == [("approve", admin.id)]

    by_admin = client.get(f"/api/admin/moderation/history?adminId={admin.id}", headers=headers).json()["data"]
    assert len(by_admin) == 1

    everything = client.get("/api/admin/moderation/history", headers=headers).json()["data"]
    assert len(everything) == 1

    bad = client.get("/api/admin/moderation/history?itemId=x&type=widget", headers=headers)
    assert bad.status_code == 400


def test_rules_crud(client, auth_headers, moderator, volunteer):
    headers = auth_headers(moderator)
    created = client.post(
        "/api/admin/moderation/rules",
        json={"name": "Spam", "pattern": "buy now", "priority": 4},
        headers=headers,
    )
    assert created.status_code == 201
    rule_id = created.json()["data"]["id"]

    toggled = client.put(
        f"/api/admin/moderation/rules/{rule_id}/toggle", json={"enabled": False}, headers=headers
    ).json()["data"]
    assert toggled["enabled"] is False

    updated = client.put(
        f"/api/admin/moderation/rules/{rule_id}", json={"priority": 7}, headers=headers
    ).json()["data"]
    assert updated["priority"] == 7

    assert client.get("/api/admin/moderation/rules", headers=auth_headers(volunteer)).status_code == 403
    assert client.delete(f"/api/admin/moderation/rules/{rule_id}", headers=headers).status_code == 200
    assert client.get(f"/api/admin/moderation/rules/{rule_id}", headers=headers).status_code == 404


def test_posts_and_notifications(client, auth_headers, volunteer, moderator):
    post = client.post(
        "/api/posts", json={"title": "Hello", "content": "World"}, headers=auth_headers(volunteer)
    ).json()["data"]
    assert [p["id"] for p in client.get("/api/posts").json()["data"]] == [post["id"]]

    resp = client.post(
        f"/api/admin/moderate/post/{post['id']}",
        json={"action": "reject", "reason": "Off topic"},
        headers=auth_headers(moderator),
    )
    assert resp.json()["data"]["status"] == "archived"
    assert client.get("/api/posts").json()["data"] == []

    vol_headers = auth_headers(volunteer)
    notes = client.get("/api/notifications?unreadOnly=true", headers=vol_headers).json()["data"]
    assert notes[0]["type"] == "post_moderated"

    read = client.patch(f"/api/notifications/{notes[0]['id']}/read", headers=vol_headers).json()["data"]
    assert read["read"] is True
    assert client.get("/api/notifications?unreadOnly=true", headers=vol_headers).json()["data"] == []


def test_logout(client, auth_headers, volunteer):
    headers = auth_headers(volunteer)
    assert client.delete("/api/auth/session", headers=headers).status_code == 200
    assert client.get("/api/auth/me", headers=headers).status_code == 401


def test_resource_listings(client, auth_headers, moderator, volunteer, platform):
    platform.repository.create_resource(
        Resource(id="live", draft=ResourceDraft(name="Clinic", category="health", description="..."), verified=True)
    )
    platform.repository.create_resource(
        Resource(id="draft", draft=ResourceDraft(name="Pantry", category="food", description="..."))
    )

    public = client.get("/api/resources").json()["data"]
    assert [r["id"] for r in public] == ["live"]
    assert client.get("/api/resources/draft").status_code == 404

    unverified = client.get(
        "/api/admin/resources?verified=false", headers=auth_headers(moderator)
    ).json()["data"]
    assert [r["id"] for r in unverified] == ["draft"]
    assert client.get("/api/admin/resources", headers=auth_headers(volunteer)).status_code == 403


def test_get_flag(client, auth_headers, volunteer, moderator):
    flag = client.post(
        "/api/admin/moderation/flags",
        json={"type": "comment", "itemId": "c1", "reason": "abuse", "priority": "high"},
        headers=auth_headers(volunteer),
    ).json()["data"]

    fetched = client.get(f"/api/admin/moderation/flags/{flag['id']}", headers=auth_headers(moderator))
    assert fetched.json()["data"]["priority"] == "high"
    assert client.get("/api/admin/moderation/flags/flag_x", headers=auth_headers(moderator)).status_code == 404
