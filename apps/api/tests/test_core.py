"""
Tests for the ambient core: JSON log records, domain exceptions, CORS origins.
"""
import json
import logging
from datetime import date
from unittest.mock import patch

import pytest

from core.dependencies import check_date_range
from core.exceptions import DateRangeError, EventNotFoundError
from core.logging import JSONFormatter


class TestJSONFormatter:

    def _record(self, **extra):
        record = logging.LogRecord("services.test", logging.INFO, __file__, 10, "hello %s", ("world",), None)
        for k, v in extra.items():
            setattr(record, k, v)
        return record

    def test_fields(self):
        data = json.loads(JSONFormatter(environment="test").format(self._record()))

        assert data["message"] == "hello world"
        assert data["level"] == "INFO"
        assert data["logger"] == "services.test"
        assert data["service"] == "attune-api"
        assert data["environment"] == "test"

    def test_extra_fields_are_merged(self):
        record = self._record(extra_fields={"user_id": "u1", "day": date(2026, 6, 15)})
        data = json.loads(JSONFormatter(environment="test").format(record))

        assert data["user_id"] == "u1"
        assert data["day"] == "2026-06-15"


class TestExceptions:

    def test_event_not_found(self):
        exc = EventNotFoundError("water", "abc")

        assert exc.status_code == 404
        assert exc.error_code == "NOT_FOUND"
        assert exc.detail == "water event not found: abc"

    def test_reversed_range(self):
        with pytest.raises(DateRangeError) as info:
            check_date_range(date(2026, 6, 15), date(2026, 6, 14))
        assert info.value.error_code == "VALIDATION_ERROR_END"
        assert info.value.status_code == 422

    def test_range_too_long(self):
        with patch("core.dependencies.settings") as s:
            s.MAX_RANGE_DAYS = 7
            with pytest.raises(DateRangeError) as info:
                check_date_range(date(2026, 6, 1), date(2026, 6, 8))
            check_date_range(date(2026, 6, 1), date(2026, 6, 7))
        assert info.value.error_code == "VALIDATION_ERROR_RANGE"


class TestAllowedOrigins:

    def test_debug_allows_all(self):
        from main import allowed_origins
        with patch("main.settings") as s:
            s.DEBUG = True
            assert allowed_origins() == ["*"]

    def test_configured_origins(self):
        from main import allowed_origins
        with patch("main.settings") as s:
            s.DEBUG = False
            s.CORS_ORIGINS = "https://app.example.com, https://www.example.com,"
            assert allowed_origins() == ["https://app.example.com", "https://www.example.com"]

    def test_local_fallback(self):
        from main import LOCAL_DEV_ORIGINS, allowed_origins
        with patch("main.settings") as s:
            s.DEBUG = False
            s.CORS_ORIGINS = None
            assert allowed_origins() == LOCAL_DEV_ORIGINS
