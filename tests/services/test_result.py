"""Tests for ServiceResult and ServiceError."""

import json
from pathlib import Path

import pytest

from folio.domain.errors import ParseError, UnsupportedConstructError
from folio.services.result import ServiceError, ServiceResult


class TestServiceResult:
    def test_success_construction(self) -> None:
        result = ServiceResult(ok=True, op="build", data={"page_count": 3})
        assert result.ok is True
        assert result.data == {"page_count": 3}
        assert result.warnings == []
        assert result.error is None
        assert result.meta is None

    def test_json_serialization(self) -> None:
        result = ServiceResult(ok=True, op="build", data={"k": "v"}, meta={"elapsed_ms": 42})
        parsed = json.loads(result.model_dump_json())
        assert parsed["ok"] is True
        assert parsed["data"]["k"] == "v"
        assert parsed["meta"]["elapsed_ms"] == 42

    def test_frozen(self) -> None:
        result = ServiceResult(ok=True, op="test")
        with pytest.raises(Exception):
            result.ok = False  # type: ignore[misc]

    def test_failure_from_exception(self) -> None:
        exc = ParseError("bad header", path=Path("content/a.md"), stage="index")
        result = ServiceResult.failure("build", exc, warnings=["earlier"])
        assert result.ok is False
        assert result.warnings == ["earlier"]
        assert result.error == ServiceError(
            code="PARSE_ERROR",
            message="bad header",
            detail={"path": str(Path("content/a.md")), "stage": "index"},
        )


class TestServiceError:
    def test_detail_omits_unknown_context(self) -> None:
        error = ServiceError.from_exception(UnsupportedConstructError("widget"))
        assert error.code == "UNSUPPORTED_CONSTRUCT"
        assert error.message == "Unsupported construct: widget"
        assert error.detail == {}
