import logging

from common.exceptions import InfrastructureError, NotFoundError, storefront_exception_handler
from django.db import DatabaseError
from django.http import Http404
from orders.services import EmptyCart, InsufficientStock
from rest_framework import exceptions


def _handle(exc):
    return storefront_exception_handler(exc, {"view": None})


def test_business_errors_render_message_and_payload():
    resp = _handle(InsufficientStock(7))

    assert resp.status_code == 400
    assert resp.data == {"message": "Insufficient stock for product 7", "product_id": 7}


def test_default_messages_apply_when_none_given():
    assert _handle(EmptyCart()).data == {"message": "Cart is empty"}
    assert _handle(NotFoundError()).data == {"message": "Not found."}
    assert _handle(InfrastructureError()).status_code == 500


def test_validation_errors_keep_field_detail():
    resp = _handle(exceptions.ValidationError({"quantity": ["Ensure this value is greater than or equal to 1."]}))

    assert resp.status_code == 400
    assert resp.data["message"] == "Ensure this value is greater than or equal to 1."
    assert resp.data["errors"] == {"quantity": ["Ensure this value is greater than or equal to 1."]}


def test_django_404_becomes_not_found():
    resp = _handle(Http404("secret detail"))

    assert resp.status_code == 404
    assert resp.data == {"message": "Not found."}


def test_unhandled_database_error_is_logged_and_hidden(caplog):
    error = DatabaseError("relation orders does not exist")
    with caplog.at_level(logging.ERROR, logger="storefront.errors"):
        resp = _handle(error)

    assert resp.status_code == 500
    assert resp.data == {"message": "Server error"}
    (record,) = [r for r in caplog.records if r.msg == "unhandled_database_error"]
    assert record.exc_info[1] is error


def test_authentication_failure_keeps_www_authenticate_header():
    exc = exceptions.AuthenticationFailed("Invalid token")
    exc.auth_header = 'Bearer realm="api"'

    resp = _handle(exc)

    assert resp.status_code == 401
    assert resp.data == {"message": "Invalid token"}
    assert resp["WWW-Authenticate"] == 'Bearer realm="api"'
