from conftest import login


def _user(**overrides):
    payload = {"name": "New Editor", "email": "New@Example.com", "password": "longenough"}
    payload.update(overrides)
    return payload


def test_admin_creates_user_and_new_user_can_log_in(app, admin):
    r = admin.post("/api/users", json=_user())
    assert r.status_code == 201
    assert r.json["email"] == "new@example.com"
    assert r.json["role"] == "editor"
    assert r.json["hasPassword"] is True
    assert "password" not in r.json

    login(app.test_client(), "new@example.com", "longenough")


def test_register_alias_creates_user(admin):
    r = admin.post("/api/auth/register", json=_user(role="admin"))
    assert r.status_code == 201
    assert r.json["role"] == "admin"


def test_duplicate_email_conflicts(admin):
    r = admin.post("/api/users", json=_user(email="editor@example.com"))
    assert r.status_code == 409


def test_create_validation(admin):
    r = admin.post("/api/users", json=_user(password="short", role="owner", email="bad"))
    assert r.status_code == 400
    assert set(r.json["issues"]) == {"password", "role", "email"}


def test_editor_cannot_manage_users(editor, user_ids):
    assert editor.get("/api/users").status_code == 401
    assert editor.post("/api/users", json=_user()).status_code == 401
    r = editor.delete(f"/api/users/{user_ids['admin']}")
    assert r.status_code == 401
    assert r.json["error"] == "Unauthorized - Admin access required"


def test_list_and_get(admin, user_ids):
    emails = {u["email"] for u in admin.get("/api/users").json}
    assert emails == {"admin@example.com", "editor@example.com"}
    assert admin.get(f"/api/users/{user_ids['editor']}").json["name"] == "Ed Editor"
    assert admin.get("/api/users/xyz").status_code == 400


def test_update_is_strict(admin, user_ids):
    r = admin.patch(f"/api/users/{user_ids['editor']}", json={"email": "evil@example.com"})
    assert r.status_code == 400
    assert r.json["issues"]["email"] == ["Unrecognized field."]

    r = admin.patch(f"/api/users/{user_ids['editor']}", json={"password": "whatever123"})
    assert r.status_code == 400

    assert admin.get(f"/api/users/{user_ids['editor']}").json["email"] == "editor@example.com"

    r = admin.patch(f"/api/users/{user_ids['editor']}", json={"name": "Edwina", "role": "admin"})
    assert r.status_code == 200
    assert r.json["name"] == "Edwina"
    assert r.json["role"] == "admin"


def test_admin_cannot_demote_or_delete_self(admin, user_ids):
    r = admin.patch(f"/api/users/{user_ids['admin']}", json={"role": "editor"})
    assert r.status_code == 403

    r = admin.delete(f"/api/users/{user_ids['admin']}")
    assert r.status_code == 403
    assert r.json["error"] == "You cannot delete your own account"

    assert admin.patch(f"/api/users/{user_ids['admin']}", json={"name": "Ada"}).status_code == 200


def test_delete_user(admin, user_ids):
    r = admin.delete(f"/api/users/{user_ids['editor']}")
    assert r.status_code == 200
    assert r.json["message"] == "User deleted successfully"
    assert admin.get(f"/api/users/{user_ids['editor']}").status_code == 404


def test_blank_role_is_rejected(admin):
    r = admin.post("/api/users", json=_user(role=""))
    assert r.status_code == 400
    assert r.json["issues"]["role"] == ["Must be one of: admin, editor."]
    assert len(admin.get("/api/users").json) == 2
