import logging
import uuid

import pytest

pytestmark = pytest.mark.integration

URL = "/api/v1/orders/active-count/?farmer_id=1"


class TestCorrelationIdMiddleware:
    def test_returns_provided_request_id(self, auth_client):
        custom_id = "my-custom-request-id-123"
        response = auth_client.get(URL, HTTP_X_REQUEST_ID=custom_id)
        assert response["X-Request-ID"] == custom_id

    def test_generates_uuid_when_no_request_id(self, auth_client):
        response = auth_client.get(URL)
        request_id = response["X-Request-ID"]
        parsed = uuid.UUID(request_id, version=4)
        assert str(parsed) == request_id

    def test_rejected_requests_are_tagged_too(self, api_client):
        response = api_client.get(URL, HTTP_X_REQUEST_ID="unauth-req-1")
        assert response.status_code == 401
        assert response["X-Request-ID"] == "unauth-req-1"

    def test_correlation_id_in_logs(self, auth_client, caplog):
        custom_id = "log-test-correlation-456"
        with caplog.at_level(logging.INFO):
            auth_client.get(URL, HTTP_X_REQUEST_ID=custom_id)
        found = any(custom_id in record.getMessage() for record in caplog.records)
        assert found, (
            f"correlation_id '{custom_id}' not found in log records: "
            f"{[r.getMessage() for r in caplog.records]}"
        )
