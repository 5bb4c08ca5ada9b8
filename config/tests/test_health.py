from unittest import mock

import pytest
from django.db import DatabaseError
from django.db.backends.base.base import BaseDatabaseWrapper
from rest_framework.test import APIClient


@pytest.mark.django_db
def test_health_reports_database_ok():
    resp = APIClient().get("/health/")

    assert resp.status_code == 200
    assert resp.data == {"status": "ok", "database": "ok"}


@pytest.mark.django_db
def test_health_reports_unavailable_database():
    with mock.patch.object(BaseDatabaseWrapper, "cursor", side_effect=DatabaseError("down")):
        resp = APIClient().get("/health/")

    assert resp.status_code == 503
    assert resp.data["database"] == "unavailable"
