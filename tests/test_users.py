from conftest import PASSWORD, VALID_TAX_ID, auth_headers, register


def test_list_users_ordered_by_name(client, make_user):
    make_user(name="Zeca")
    make_user(name="Ana")
    make_user(name="Bruno")

    response = client.get("/users")
    assert response.status_code == 200
    assert [u["name"] for u in response.json()] == ["Ana", "Bruno", "Zeca"]


def test_get_user(client, make_user):
    user = make_user(name="Ana", doubles=2, super_doubles=1)

    response = client.get(f"/users/{user.id}")
    assert response.status_code == 200
    assert response.json()["inventory"] == {"doubles": 2, "super_doubles": 1}

    missing = client.get("/users/999")
    assert missing.status_code == 404
    assert missing.json() == {"error": "User not found"}


def test_create_user(client):
    response = client.post("/users", json={"name": "Carla", "email": "Carla@fantasy12.com"})
    assert response.status_code == 201
    assert response.json()["email"] == "carla@fantasy12.com"
    assert response.json()["role"] == "user"

    duplicate = client.post("/users", json={"name": "Other", "email": "carla@fantasy12.com"})
    assert duplicate.status_code == 409


def test_create_user_is_rate_limited(client):
    for i in range(10):
        response = client.post("/users", json={"name": f"User {i}", "email": f"user{i}@fantasy12.com"})
        assert response.status_code == 201

    response = client.post("/users", json={"name": "One more", "email": "more@fantasy12.com"})
    assert response.status_code == 429
    assert response.json()["error"] == "Creation limit reached. Try again in 1 hour."


def test_update_own_profile(client, make_user):
    user = make_user(name="Ana")

    response = client.put(
        f"/users/{user.id}",
        json={"name": "Ana Maria", "phone": "11 98888-7777", "tax_id": "12345678900"},
        headers=auth_headers(user),
    )
    assert response.status_code == 200
    body = response.json()
    assert body["name"] == "Ana Maria"
    assert body["phone"] == "11 98888-7777"
    assert body["tax_id"] == VALID_TAX_ID


def test_update_requires_token(client, make_user):
    user = make_user(name="Ana")
    response = client.put(f"/users/{user.id}", json={"name": "X"})
    assert response.status_code == 401


def test_cannot_update_someone_else(client, make_user):
    ana = make_user(name="Ana")
    bruno = make_user(name="Bruno")

    response = client.put(f"/users/{bruno.id}", json={"name": "Hacked"}, headers=auth_headers(ana))
    assert response.status_code == 403
    assert response.json() == {"error": "You can only update your own profile"}


def test_privileged_fields_need_admin(client, make_user):
    ana = make_user(name="Ana")

    for payload in ({"balance": 1000}, {"role": "admin"}, {"inventory": {"doubles": 9, "super_doubles": 9}}):
        response = client.put(f"/users/{ana.id}", json=payload, headers=auth_headers(ana))
        assert response.status_code == 403


def test_null_privileged_fields_are_ignored(client, make_user):
    ana = make_user(name="Ana", balance=30)

    response = client.put(
        f"/users/{ana.id}",
        json={"name": "Ana Maria", "role": None, "balance": None, "inventory": None},
        headers=auth_headers(ana),
    )
    assert response.status_code == 200, response.text
    body = response.json()
    assert body["name"] == "Ana Maria"
    assert body["role"] == "user"
    assert body["balance"] == 30


def test_admin_updates_balance_and_inventory(client, make_user):
    admin = make_user(name="Admin", role="admin")
    ana = make_user(name="Ana")

    response = client.put(
        f"/users/{ana.id}",
        json={"balance": 150, "role": "pro", "inventory": {"doubles": 3, "super_doubles": 1}},
        headers=auth_headers(admin),
    )
    assert response.status_code == 200
    body = response.json()
    assert body["balance"] == 150
    assert body["role"] == "pro"
    assert body["inventory"] == {"doubles": 3, "super_doubles": 1}


def test_update_email_already_taken(client, make_user):
    ana = make_user(name="Ana")
    make_user(name="Bruno")

    response = client.put(
        f"/users/{ana.id}", json={"email": "bruno@fantasy12.com"}, headers=auth_headers(ana)
    )
    assert response.status_code == 409


def test_update_invalid_tax_id(client, make_user):
    ana = make_user(name="Ana")
    response = client.put(f"/users/{ana.id}", json={"tax_id": "111"}, headers=auth_headers(ana))
    assert response.status_code == 400


def test_delete_own_account(client):
    body = register(client)
    user_id = body["user"]["id"]
    headers = auth_headers(body["token"])

    response = client.delete(f"/users/{user_id}", headers=headers)
    assert response.status_code == 200
    assert response.json() == {"message": "Account deleted"}

    assert client.get(f"/users/{user_id}").status_code == 404
    assert client.get("/users").json() == []
    login = client.post("/auth/login", json={"email": "ana@fantasy12.com", "password": PASSWORD})
    assert login.status_code == 401


def test_cannot_delete_someone_else(client, make_user):
    ana = make_user(name="Ana")
    bruno = make_user(name="Bruno")

    response = client.delete(f"/users/{bruno.id}", headers=auth_headers(ana))
    assert response.status_code == 403
    assert client.get(f"/users/{bruno.id}").status_code == 200
