"""Shared assertions for API tests."""


def assert_envelope(body: dict, success: bool = True) -> None:
    """Common envelope shape checks."""
    assert body["success"] is success
    assert "timestamp" in body["meta"]
    assert "requestId" in body["meta"]
    if success:
        assert body["error"] is None
    else:
        assert "data" not in body
        assert body["error"]["code"]
        assert body["error"]["message"]
