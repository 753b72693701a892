def test_profile_round_trip(client, wallet, login):
    headers = login(wallet)

    response = client.get("/api/users/profile", headers=headers)
    assert response.status_code == 200
    profile = response.json()["data"]
    assert profile["user"]["wallet_key"] == wallet.address
    assert profile["user"]["preferences"] == {"theme": "dark", "notifications": True}
    assert profile["stats"] == []

    response = client.put(
        "/api/users/profile",
        headers=headers,
        json={"username": "satoshi_01", "bio": "gm", "preferences": {"theme": "light"}},
    )
    assert response.status_code == 200, response.text
    user = response.json()["data"]["user"]
    assert user["username"] == "satoshi_01"
    assert user["bio"] == "gm"
    assert user["preferences"] == {"theme": "light", "notifications": True}

    # the cached profile was dropped on update
    assert client.get("/api/users/profile", headers=headers).json()["data"]["user"]["username"] == "satoshi_01"


def test_profile_validation(client, wallet, login):
    headers = login(wallet)
    for payload in ({"username": "no spaces!"}, {"bio": "x" * 501}, {"preferences": {"theme": "blue"}}):
        response = client.put("/api/users/profile", headers=headers, json=payload)
        assert response.status_code == 422, payload
        assert response.json()["error"]["code"] == "VALIDATION_ERROR"


def test_profile_requires_authentication(client):
    response = client.get("/api/users/profile")
    assert response.status_code == 401


def test_public_profile(client, wallet, make_wallet, login):
    login(wallet)
    response = client.get(f"/api/users/{wallet.address}")
    assert response.status_code == 200
    data = response.json()["data"]
    assert data["wallet_key"] == wallet.address
    assert "email" not in data

    response = client.get(f"/api/users/{make_wallet().address}")
    assert response.status_code == 404
    assert response.json()["error"]["code"] == "IDENTITY_NOT_FOUND"


def test_user_stats(client, ledger, wallet, login):
    headers = login(wallet)
    ledger.add_transaction(wallet.address, "sig-1")
    ledger.add_transaction(wallet.address, "sig-2", delta=500_000_000)
    assert client.post("/api/solana/sync", headers=headers).status_code == 200

    data = client.get("/api/users/stats", headers=headers).json()["data"]
    assert data["totals"]["total_transactions"] == 2
    assert data["totals"]["total_amount"] == 1.5
    assert {tx["signature"] for tx in data["recent_transactions"]} == {"sig-1", "sig-2"}

    profile = client.get("/api/users/profile", headers=headers).json()["data"]
    assert profile["user"]["transaction_count"] == 2
    assert profile["stats"] == [{"key": "other", "count": 2, "total_amount": 1.5}]
