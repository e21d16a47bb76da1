"""
Тесты иерархии исключений.
"""

import pytest

from component_inventory.core.exceptions import (
    ComponentInventoryError,
    ComponentSlugsEmptyError,
    ConfigError,
    FleetDBAPIError,
    FleetDBConnectionError,
    FleetDBError,
    format_error_for_log,
    is_retryable,
)


@pytest.mark.unit
class TestExceptionHierarchy:
    """Иерархия и сериализация."""

    def test_slugs_empty_is_config_error(self):
        error = ComponentSlugsEmptyError()
        assert isinstance(error, ConfigError)
        assert isinstance(error, ComponentInventoryError)
        assert error.key == "inventory.component_slugs"

    def test_fleetdb_errors(self):
        assert issubclass(FleetDBConnectionError, FleetDBError)
        assert issubclass(FleetDBAPIError, FleetDBError)

    def test_str_with_details(self):
        error = FleetDBAPIError("Bad request", status_code=400, endpoint="POST /api/v1/servers")
        assert str(error) == "Bad request (status_code=400, endpoint='POST /api/v1/servers')"

    def test_to_dict(self):
        error = ConfigError("Ошибка", config_file="config.yaml")
        assert error.to_dict() == {
            "error_type": "ConfigError",
            "message": "Ошибка",
            "details": {"config_file": "config.yaml"},
        }


@pytest.mark.unit
class TestErrorHelpers:
    """format_error_for_log и is_retryable."""

    def test_format_own_error(self):
        assert format_error_for_log(ComponentInventoryError("boom")) == "boom"

    def test_format_foreign_error(self):
        assert format_error_for_log(ValueError("boom")) == "ValueError: boom"

    @pytest.mark.parametrize("error, expected", [
        (FleetDBConnectionError("refused"), True),
        (FleetDBAPIError("server error", status_code=503), True),
        (FleetDBAPIError("bad request", status_code=400), False),
        (ComponentSlugsEmptyError(), False),
        (ValueError("x"), False),
    ])
    def test_is_retryable(self, error, expected):
        assert is_retryable(error) is expected
