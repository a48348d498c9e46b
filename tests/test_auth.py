from clinic.core.config import settings
from clinic.services.auth_service import AuthService
from tests.conftest import register

# Test data
test_user_data = {
    "name": "Test User",
    "email": "test@example.com",
    "password": "TestPassword123",
    "role": "patient",
}

test_login_data = {
    "email": "test@example.com",
    "password": "TestPassword123"
}

class TestAuthentication:

    def test_register_user(self, client):
        """Test user registration."""
        response = client.post("/api/auth/register", json=test_user_data)
        assert response.status_code == 201

        data = response.json()
        assert data["user"]["email"] == test_user_data["email"]
        assert data["user"]["role"] == "patient"
        assert data["token_type"] == "bearer"
        assert data["expires_in"] == settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60
        assert "password" not in data["user"]
        assert "password_hash" not in data["user"]

    def test_register_doctor(self, client):
        doctor_data = {**test_user_data, "email": "doc@example.com", "role": "doctor"}
        response = client.post("/api/auth/register", json=doctor_data)
        assert response.status_code == 201
        assert response.json()["user"]["role"] == "doctor"

    def test_register_admin_rejected(self, client):
        """Admin accounts cannot be self-registered."""
        admin_data = {**test_user_data, "role": "admin"}
        response = client.post("/api/auth/register", json=admin_data)
        assert response.status_code == 422

    def test_register_duplicate_email(self, client):
        """Test registration with duplicate email."""
        client.post("/api/auth/register", json=test_user_data)

        duplicate = {**test_user_data, "email": "TEST@example.com"}
        response = client.post("/api/auth/register", json=duplicate)
        assert response.status_code == 400
        assert "already registered" in response.json()["detail"]

    def test_register_invalid_password(self, client):
        """Test registration with invalid password."""
        invalid_data = test_user_data.copy()
        invalid_data["password"] = "weak"

        response = client.post("/api/auth/register", json=invalid_data)
        assert response.status_code == 422

    def test_register_rate_limited(self, client):
        for i in range(settings.RATE_LIMIT_REQUESTS):
            response = client.post("/api/auth/register", json={
                **test_user_data, "email": f"user{i}@example.com"
            })
            assert response.status_code == 201

        response = client.post("/api/auth/register", json={
            **test_user_data, "email": "one-too-many@example.com"
        })
        assert response.status_code == 429

    def test_login_success(self, client):
        """Test successful login."""
        client.post("/api/auth/register", json=test_user_data)

        response = client.post("/api/auth/login", json=test_login_data)
        assert response.status_code == 200

        data = response.json()
        assert "access_token" in data
        assert data["token_type"] == "bearer"
        assert data["user"]["last_login"] is not None

    def test_login_invalid_credentials(self, client):
        """Test login with invalid credentials."""
        invalid_login = {
            "email": "nonexistent@example.com",
            "password": "wrongpassword"
        }

        response = client.post("/api/auth/login", json=invalid_login)
        assert response.status_code == 401
        assert response.json()["detail"] == "Invalid email or password"

    def test_login_wrong_password(self, client):
        """Test login with wrong password."""
        client.post("/api/auth/register", json=test_user_data)

        wrong_login = test_login_data.copy()
        wrong_login["password"] = "wrongpassword"

        response = client.post("/api/auth/login", json=wrong_login)
        assert response.status_code == 401

    def test_get_current_user(self, client):
        """Test getting current user info."""
        client.post("/api/auth/register", json=test_user_data)
        login_response = client.post("/api/auth/login", json=test_login_data)

        token = login_response.json()["access_token"]
        headers = {"Authorization": f"Bearer {token}"}

        response = client.get("/api/auth/me", headers=headers)
        assert response.status_code == 200
        assert response.json()["email"] == test_user_data["email"]

    def test_get_current_user_invalid_token(self, client):
        """Test get current user with invalid token."""
        headers = {"Authorization": "Bearer invalid_token"}

        response = client.get("/api/auth/me", headers=headers)
        assert response.status_code == 401
        assert response.json()["detail"] == "Could not validate credentials"
        assert response.headers["www-authenticate"] == "Bearer"

    def test_get_current_user_without_token(self, client):
        response = client.get("/api/auth/me")
        assert response.status_code == 401
        assert response.json()["detail"] == "Could not validate credentials"

    def test_verify_token(self, client):
        account = register(client, "Test User", "test@example.com")

        response = client.post("/api/auth/verify-token", headers=account["headers"])
        assert response.status_code == 200

        data = response.json()
        assert data["valid"] is True
        assert data["user_id"] == account["id"]
        assert data["role"] == "patient"
        assert data["expires"] - data["issued_at"] == settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60

    def test_verify_invalid_token(self, client):
        headers = {"Authorization": "Bearer not.a.token"}
        response = client.post("/api/auth/verify-token", headers=headers)
        assert response.status_code == 401

    def test_admin_seeded_once(self, client, admin, store):
        """Startup creates the admin account; seeding again leaves it alone."""
        existing = AuthService(store).ensure_admin()
        assert existing.id == admin["id"]

        response = client.get("/api/users", headers=admin["headers"])
        assert response.status_code == 200
        admins = [u for u in response.json() if u["role"] == "admin"]
        assert len(admins) == 1
        assert admins[0]["email"] == settings.ADMIN_EMAIL
