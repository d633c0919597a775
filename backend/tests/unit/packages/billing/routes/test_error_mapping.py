"""Unit tests for translating application errors into HTTP responses."""

import importlib
import warnings

import pytest

from common.core.exceptions import AppException
from packages.billing.exceptions import (
    FetchFailure,
    InvalidRequest,
    InvalidTransition,
    PlanUnavailable,
    SubmissionFailed,
)
from packages.billing.routes import errors
from packages.billing.routes.errors import to_http_exception
from packages.entitlements.exceptions import FeatureNotEntitled


@pytest.mark.parametrize(
    "error,expected_status",
    [
        (InvalidRequest("seat count must be positive"), 422),
        (PlanUnavailable("plan-x"), 404),
        (InvalidTransition("already approved"), 409),
        (FeatureNotEntitled("actor-1", "CUSTOMER_PRIVATE_ORDERS"), 403),
        (FetchFailure("timeout"), 503),
        (SubmissionFailed("rejected", error_code="400"), 502),
        (AppException("unexpected"), 500),
    ],
)
def test_status_codes(error, expected_status):
    exc = to_http_exception(error)

    assert exc.status_code == expected_status
    assert exc.detail == str(error)


def test_plan_unavailable_detail_names_plan():
    exc = to_http_exception(PlanUnavailable("plan-x", "plan is inactive"))

    assert exc.detail == "Plan plan-x: plan is inactive"


def test_uses_current_status_names():
    with warnings.catch_warnings():
        warnings.simplefilter("error", DeprecationWarning)
        importlib.reload(errors)

    assert errors.to_http_exception(InvalidRequest("bad")).status_code == 422
