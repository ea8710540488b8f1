import httpx
import pytest

from link_preview.core.errors import (
    FeatureDisabledError,
    FetchFailureError,
    InvalidPreviewError,
    LinkPreviewError,
    NoPreviewError,
    is_network_failure,
)


@pytest.mark.parametrize(
    ("error_class", "code"),
    [
        (FeatureDisabledError, "featureDisabled"),
        (FetchFailureError, "fetchFailure"),
        (InvalidPreviewError, "invalidPreview"),
        (NoPreviewError, "noPreview"),
    ],
)
def test_error_codes(error_class, code):
    error = error_class()

    assert isinstance(error, LinkPreviewError)
    assert error.code == code
    assert str(error) == code


@pytest.mark.parametrize(
    "error",
    [
        httpx.ConnectError("refused"),
        httpx.ReadTimeout("slow"),
        FetchFailureError("404"),
        TimeoutError(),
        ConnectionResetError(),
    ],
)
def test_network_failures(error):
    assert is_network_failure(error)


def test_network_failure_detected_through_cause():
    try:
        try:
            raise httpx.ConnectError("refused")
        except httpx.ConnectError as inner:
            raise RuntimeError("wrapped") from inner
    except RuntimeError as outer:
        assert is_network_failure(outer)


@pytest.mark.parametrize("error", [ValueError("x"), InvalidPreviewError(), KeyError("k")])
def test_other_errors_are_not_network_failures(error):
    assert not is_network_failure(error)
