"""
认证 API 测试
覆盖 /auth 端点
"""
from fastapi.testclient import TestClient


class TestRegister:

    def test_register_merchant(self, client: TestClient):
        response = client.post("/auth/register", json={"username": "merchant9", "password": "123456"})
        assert response.status_code == 201
        data = response.json()
        assert data["username"] == "merchant9"
        assert data["role"] == "merchant"
        assert "passwordHash" not in data

    def test_duplicate_username(self, client: TestClient, merchant_user):
        response = client.post("/auth/register", json={"username": "merchant1", "password": "123456"})
        assert response.status_code == 409
        assert response.json()["message"] == "Username already exists"

    def test_missing_password(self, client: TestClient):
        response = client.post("/auth/register", json={"username": "x"})
        assert response.status_code == 400
        assert "password" in response.json()["message"]


class TestLogin:

    def test_login_success(self, client: TestClient, merchant_user):
        response = client.post("/auth/login", json={"username": "merchant1", "password": "123456"})
        assert response.status_code == 200
        data = response.json()
        assert data["token"]
        assert data["tokenType"] == "bearer"
        assert data["user"] == {"id": merchant_user.id, "username": "merchant1", "role": "merchant"}

    def test_wrong_password(self, client: TestClient, merchant_user):
        response = client.post("/auth/login", json={"username": "merchant1", "password": "bad"})
        assert response.status_code == 401
        assert response.json()["message"] == "Invalid credentials"

    def test_role_mismatch(self, client: TestClient, merchant_user):
        response = client.post("/auth/login", json={
            "username": "merchant1", "password": "123456", "role": "admin"
        })
        assert response.status_code == 401
        assert response.json()["message"] == "Role mismatch"

    def test_token_works_for_me(self, client: TestClient, admin_user):
        token = client.post("/auth/login", json={"username": "admin", "password": "123456"}).json()["token"]
        response = client.get("/auth/me", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 200
        assert response.json()["role"] == "admin"


class TestMe:

    def test_no_token(self, client: TestClient):
        response = client.get("/auth/me")
        assert response.status_code == 401
        assert response.json()["message"] == "Access denied. No token provided."

    def test_invalid_token(self, client: TestClient):
        response = client.get("/auth/me", headers={"Authorization": "Bearer not-a-token"})
        assert response.status_code == 401
        assert response.json()["message"] == "Invalid token. Please log in again."

    def test_expired_token(self, client: TestClient, merchant_user):
        from datetime import timedelta
        from yisu.security.auth import create_access_token

        token = create_access_token(merchant_user.id, merchant_user.role, expires_delta=timedelta(seconds=-10))
        response = client.get("/auth/me", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 401
        assert "expired" in response.json()["message"]
