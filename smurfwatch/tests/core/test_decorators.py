"""
Tests for the service error handler decorator.
"""

import pytest
from pydantic import ValidationError as PydanticValidationError

from smurfwatch.core.decorators import service_error_handler
from smurfwatch.core.exceptions import (
    InsufficientDataError,
    ServiceException,
    ValidationError,
    http_status_for,
)
from smurfwatch.core.riot_api.errors import NotFoundError, UpstreamUnavailableError
from smurfwatch.core.riot_api.models import SummonerDTO


class ExampleService:
    @service_error_handler("ExampleService")
    async def succeed(self, puuid: str) -> str:
        return puuid.upper()

    @service_error_handler("ExampleService")
    async def fail_with(self, error: Exception) -> None:
        raise error

    @service_error_handler("ExampleService")
    async def parse_summoner(self, payload: dict) -> SummonerDTO:
        return SummonerDTO(**payload)


@pytest.fixture
def service():
    return ExampleService()


class TestServiceErrorHandler:
    """Test cases for service_error_handler."""

    @pytest.mark.asyncio
    async def test_returns_result(self, service):
        assert await service.succeed("abc") == "ABC"

    @pytest.mark.asyncio
    async def test_riot_api_error_propagates_unchanged(self, service):
        error = NotFoundError("Resource not found", status_code=404)

        with pytest.raises(NotFoundError) as exc_info:
            await service.fail_with(error)

        assert exc_info.value is error

    @pytest.mark.asyncio
    async def test_service_exception_propagates_unchanged(self, service):
        error = InsufficientDataError()

        with pytest.raises(InsufficientDataError) as exc_info:
            await service.fail_with(error)

        assert exc_info.value is error

    @pytest.mark.asyncio
    async def test_value_error_becomes_validation_error(self, service):
        with pytest.raises(ValidationError) as exc_info:
            await service.fail_with(ValueError("Unknown platform: xx1"))

        error = exc_info.value
        assert error.service == "ExampleService"
        assert error.operation == "fail_with"
        assert "Unknown platform: xx1" in error.message
        assert isinstance(error.__cause__, ValueError)

    @pytest.mark.asyncio
    async def test_malformed_payload_is_upstream_error(self, service):
        with pytest.raises(UpstreamUnavailableError) as exc_info:
            await service.parse_summoner({"name": "NoPuuid"})

        error = exc_info.value
        assert isinstance(error.__cause__, PydanticValidationError)
        assert "Malformed upstream payload" in error.message
        assert "SummonerDTO" in error.message
        assert error.response_data["errors"][0]["loc"] == ("puuid",)
        assert http_status_for(error) == 503

    @pytest.mark.asyncio
    async def test_unexpected_error_wrapped(self, service):
        original = RuntimeError("boom")

        with pytest.raises(ServiceException) as exc_info:
            await service.fail_with(original)

        error = exc_info.value
        assert type(error) is ServiceException
        assert error.original_error is original
        assert "ExampleService.fail_with" in error.message

    @pytest.mark.asyncio
    async def test_custom_default_error_type(self):
        class Wrapped(ServiceException):
            pass

        @service_error_handler("Other", include_context=False, default_error_type=Wrapped)
        async def explode():
            raise KeyError("x")

        with pytest.raises(Wrapped) as exc_info:
            await explode()

        assert exc_info.value.context == {}
