from datetime import timedelta

import pytest
from cart.tests.factories import AdminFactory, UserFactory
from common.choices import UserRole
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import AccessToken
from users.tokens import issue_token_pair, refresh_token_for

ME = "/api/v1/auth/me/"


def _bearer(token) -> APIClient:
    client = APIClient()
    client.credentials(HTTP_AUTHORIZATION=f"Bearer {token}")
    return client


@pytest.mark.django_db
def test_signin_issues_tokens_carrying_email_and_role():
    user = UserFactory(email="jdoe@example.com")

    resp = APIClient().post("/api/v1/auth/signin/", {"email": "jdoe@example.com", "password": "pass"}, format="json")

    assert resp.status_code == 200
    access = AccessToken(resp.data["access"])
    assert access["email"] == "jdoe@example.com"
    assert access["role"] == UserRole.USER
    assert "refresh" in resp.data

    profile = _bearer(resp.data["access"]).get(ME)
    assert profile.status_code == 200
    assert profile.data["user"]["email"] == user.email
    assert profile.data["user"]["role"] == "user"


@pytest.mark.django_db
def test_signin_with_wrong_password_is_rejected():
    UserFactory(email="jdoe@example.com")

    resp = APIClient().post("/api/v1/auth/signin/", {"email": "jdoe@example.com", "password": "nope"}, format="json")

    assert resp.status_code == 400
    assert resp.data["message"] == "Invalid credentials"
    assert "access" not in resp.data


@pytest.mark.django_db
def test_missing_token_is_401():
    resp = APIClient().get(ME)

    assert resp.status_code == 401
    assert resp.data == {"message": "Authorization token required"}


@pytest.mark.django_db
def test_expired_token_is_401_token_expired():
    user = UserFactory()
    access = refresh_token_for(user).access_token
    access.set_exp(lifetime=timedelta(minutes=-5))

    resp = _bearer(str(access)).get(ME)

    assert resp.status_code == 401
    assert resp.data == {"message": "Token expired"}


@pytest.mark.django_db
def test_garbage_token_is_401_invalid_token():
    resp = _bearer("not.a.jwt").get(ME)

    assert resp.status_code == 401
    assert resp.data == {"message": "Invalid token"}


@pytest.mark.django_db
def test_refresh_token_is_not_accepted_as_access_token():
    pair = issue_token_pair(UserFactory())

    resp = _bearer(pair["refresh"]).get(ME)

    assert resp.status_code == 401
    assert resp.data == {"message": "Invalid token"}


@pytest.mark.django_db
def test_token_without_role_claim_is_invalid():
    user = UserFactory()
    access = AccessToken.for_user(user)
    access["email"] = user.email

    resp = _bearer(str(access)).get(ME)

    assert resp.status_code == 401
    assert resp.data == {"message": "Invalid token"}


@pytest.mark.django_db
def test_token_with_stale_role_is_invalid():
    user = UserFactory()
    access = issue_token_pair(user)["access"]
    user.role = UserRole.ADMIN
    user.save(update_fields=["role"])

    resp = _bearer(access).get(ME)

    assert resp.status_code == 401
    assert resp.data == {"message": "Invalid token"}


@pytest.mark.django_db
def test_unregistered_email_is_403():
    user = UserFactory()
    access = issue_token_pair(user)["access"]
    user.delete()

    resp = _bearer(access).get(ME)

    assert resp.status_code == 403
    assert resp.data == {"message": "User not registered"}


@pytest.mark.django_db
def test_admin_token_reaches_admin_endpoints():
    admin = AdminFactory()

    resp = _bearer(issue_token_pair(admin)["access"]).get("/api/v1/admin/orders/")

    assert resp.status_code == 200
    assert resp.data["orders"] == []


@pytest.mark.django_db
def test_user_role_token_is_refused_on_admin_endpoints():
    user = UserFactory()

    resp = _bearer(issue_token_pair(user)["access"]).get("/api/v1/admin/orders/")

    assert resp.status_code == 403
    assert resp.data == {"message": "Admin access required"}
