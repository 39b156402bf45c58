"""HTTP tests for the auth router: status codes, response bodies and admin-only role grants."""

import unittest
from collections.abc import Generator
from unittest.mock import patch

from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from app.core.config import settings
from app.core.database import get_db
from app.core.exceptions import SigningKeyMissingError
from app.core.security import PasswordPolicy, get_token_issuer
from app.main import app, run
from app.models import Base, UserRole
from app.services.auth import AuthService
from app.stores import RoleStore, UserStore

PREFIX = "/api/v1/auth"


class AuthApiTestCase(unittest.TestCase):
    """Runs the app against a private in-memory database."""

    def setUp(self) -> None:
        engine = create_engine(
            "sqlite://",
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
        Base.metadata.create_all(engine)
        self.SessionLocal = sessionmaker(bind=engine, autoflush=False)

        def override_get_db() -> Generator[Session, None, None]:
            db = self.SessionLocal()
            try:
                yield db
            finally:
                db.close()

        app.dependency_overrides[get_db] = override_get_db
        self.client = TestClient(app)

    def tearDown(self) -> None:
        app.dependency_overrides.clear()

    def register(self, username: str = "alice", password: str = "Str0ngPass!") -> dict:
        response = self.client.post(
            f"{PREFIX}/register",
            json={
                "username": username,
                "password": password,
                "email": f"{username}@example.com",
                "first_name": username.capitalize(),
                "last_name": "Tester",
            },
        )
        return {"status": response.status_code, **response.json()}

    def login(self, username: str = "alice", password: str = "Str0ngPass!"):
        return self.client.post(
            f"{PREFIX}/login", json={"username": username, "password": password}
        )

    def make_admin_directly(self, username: str) -> None:
        """Bootstrap an admin the way the create_user script does."""
        db = self.SessionLocal()
        try:
            service = AuthService(
                users=UserStore(db, PasswordPolicy()),
                roles=RoleStore(db),
                token_issuer=get_token_issuer(),
                db=db,
            )
            service.seed_roles()
            self.assertTrue(service.grant_role(username, UserRole.ADMIN).succeeded)
        finally:
            db.close()

    def bearer(self, username: str = "alice") -> dict[str, str]:
        token = self.login(username).json()["access_token"]
        return {"Authorization": f"Bearer {token}"}


class TestRegisterAndLogin(AuthApiTestCase):
    def test_register_then_login(self) -> None:
        registered = self.register()
        self.assertEqual(registered["status"], 200)
        self.assertTrue(registered["is_succeed"])
        self.assertEqual(registered["message"], "User created successfully")

        response = self.login()
        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertTrue(body["is_succeed"])
        self.assertEqual(body["message"], body["access_token"])
        self.assertEqual(body["token_type"], "bearer")
        payload = get_token_issuer().decode(body["access_token"])
        self.assertEqual(payload["role"], ["USER"])

    def test_duplicate_username_conflict(self) -> None:
        self.register()
        again = self.register()
        self.assertEqual(again["status"], 409)
        self.assertFalse(again["is_succeed"])

    def test_weak_password_bad_request(self) -> None:
        result = self.register(password="weakpass")
        self.assertEqual(result["status"], 400)
        self.assertFalse(result["is_succeed"])
        self.assertTrue(result["errors"])

    def test_invalid_credentials_identical(self) -> None:
        self.register()
        unknown = self.login("nobody")
        wrong = self.login("alice", "Wr0ngPass!")
        self.assertEqual(unknown.status_code, 401)
        self.assertEqual(wrong.status_code, 401)
        self.assertEqual(unknown.json(), wrong.json())
        self.assertEqual(wrong.json()["message"], "Invalid Credential")
        self.assertFalse(wrong.json()["is_succeed"])


class TestSeedRoles(AuthApiTestCase):
    def test_seed_twice(self) -> None:
        first = self.client.post(f"{PREFIX}/seed-roles")
        second = self.client.post(f"{PREFIX}/seed-roles")
        self.assertEqual(first.json()["message"], "Roles Seeding done successfully")
        self.assertEqual(second.json()["message"], "Roles Seeding is already done")
        self.assertTrue(second.json()["is_succeed"])


class TestRoleGrants(AuthApiTestCase):
    def test_requires_token(self) -> None:
        response = self.client.post(f"{PREFIX}/make-admin", json={"username": "alice"})
        self.assertEqual(response.status_code, 401)

    def test_requires_admin_role(self) -> None:
        self.register()
        response = self.client.post(
            f"{PREFIX}/make-staff", json={"username": "alice"}, headers=self.bearer()
        )
        self.assertEqual(response.status_code, 403)

    def test_admin_grants_roles(self) -> None:
        self.register("root")
        self.make_admin_directly("root")
        self.register("bob")
        headers = self.bearer("root")

        for path, message in (
            ("make-owner", "User is Owner"),
            ("make-staff", "User is Staff"),
            ("make-admin", "User is Admin"),
        ):
            response = self.client.post(
                f"{PREFIX}/{path}", json={"username": "bob"}, headers=headers
            )
            self.assertEqual(response.status_code, 200)
            self.assertEqual(response.json()["message"], message)

        me = self.client.get(f"{PREFIX}/me", headers=self.bearer("bob"))
        self.assertEqual(me.status_code, 200)
        self.assertEqual(sorted(me.json()["roles"]), ["ADMIN", "OWNER", "STAFF", "USER"])

    def test_unknown_user_not_found(self) -> None:
        self.register("root")
        self.make_admin_directly("root")
        response = self.client.post(
            f"{PREFIX}/make-owner", json={"username": "ghost"}, headers=self.bearer("root")
        )
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json()["message"], "Invalid Username")
        self.assertFalse(response.json()["is_succeed"])

    def test_garbage_token(self) -> None:
        response = self.client.get(
            f"{PREFIX}/me", headers={"Authorization": "Bearer not.a.jwt"}
        )
        self.assertEqual(response.status_code, 401)


class TestInfrastructureErrors(AuthApiTestCase):
    def test_missing_signing_key_is_503(self) -> None:
        def missing_issuer():
            raise SigningKeyMissingError("JWT signing secret is not configured")

        self.register()
        app.dependency_overrides[get_token_issuer] = missing_issuer
        response = self.login()
        self.assertEqual(response.status_code, 503)
        self.assertFalse(response.json()["is_succeed"])
        self.assertNotIn("secret", response.json()["message"].lower())


class TestHealth(AuthApiTestCase):
    def test_health_reports_db_and_signing(self) -> None:
        response = self.client.get("/api/v1/health/")
        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertEqual(body["database"], "connected")
        self.assertEqual(body["token_signing"], "configured")


class TestRun(unittest.TestCase):
    def test_serves_app_with_configured_host_and_port(self) -> None:
        with patch("app.main.uvicorn.run") as serve:
            run()
        serve.assert_called_once_with(
            "app.main:app", host=settings.API_HOST, port=settings.API_PORT, reload=False
        )


if __name__ == "__main__":
    unittest.main()
