from profile_analyzer.core.exceptions import (
    AnalyzerError,
    NotFoundError,
    RateLimitedError,
    StorageError,
    UnauthorizedError,
    UpstreamError,
    ValidationError,
)


def test_status_codes():
    cases = [
        (NotFoundError("x"), "not_found", 404),
        (RateLimitedError("x"), "rate_limited", 429),
        (UnauthorizedError("x"), "unauthorized", 401),
        (StorageError("x"), "storage_error", 500),
        (ValidationError("x"), "validation_error", 400),
    ]

    for error, kind, status in cases:
        assert isinstance(error, AnalyzerError)
        assert error.kind == kind
        assert error.status_code == status


def test_upstream_error_uses_upstream_status():
    assert UpstreamError("x", 503).status_code == 503
    assert UpstreamError("x", 422).status_code == 422
    assert UpstreamError("x", 304).status_code == 502


def test_to_dict():
    assert NotFoundError("gone").to_dict() == {"kind": "not_found", "message": "gone"}
    assert UpstreamError("bad", 500).to_dict() == {
        "kind": "upstream_error",
        "message": "bad",
        "upstream_status": 500,
    }


def test_annotate_returns_same_error():
    error = NotFoundError("gone")

    assert error.annotate("octocat", 12) is error
    assert error.username == "octocat"
    assert error.duration_ms == 12
