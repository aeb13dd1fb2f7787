"""Tests unitarios para la configuración y los parámetros del Hub."""

import pytest
from pydantic import ValidationError

from app.core.config import Settings, ShipStationConfig


def make_settings(**overrides):
    values = {
        "SHIPSTATION_USERNAME": "env-user",
        "SHIPSTATION_PASSWORD": "env-secret",
        "SHIPSTATION_STORE_ID": "9",
        "SHIPSTATION_MARKETPLACE_ID": 2,
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


class TestSettings:
    """Tests para la validación de Settings."""

    def test_defaults(self):
        settings = Settings(_env_file=None)

        assert settings.SHIPSTATION_API_URL == "https://data.shipstation.com/1.1"
        assert settings.SHIPSTATION_LOOKUP_STRATEGY == "static"
        assert settings.SHIPSTATION_POLL_MODE == "modified"
        assert settings.SHIPSTATION_TIMESTAMP_OFFSET_HOURS == -7.0

    def test_strategy_is_normalized(self):
        assert make_settings(SHIPSTATION_LOOKUP_STRATEGY="REMOTE").SHIPSTATION_LOOKUP_STRATEGY == "remote"

    def test_invalid_strategy_rejected(self):
        with pytest.raises(ValidationError):
            make_settings(SHIPSTATION_LOOKUP_STRATEGY="psychic")

    def test_invalid_poll_mode_rejected(self):
        with pytest.raises(ValidationError):
            make_settings(SHIPSTATION_POLL_MODE="sometimes")

    def test_api_url_normalized(self):
        """Debe agregar el esquema y quitar la barra final."""
        assert make_settings(SHIPSTATION_API_URL="data.shipstation.com/1.1/").SHIPSTATION_API_URL == (
            "https://data.shipstation.com/1.1"
        )

    def test_invalid_timeout_rejected(self):
        with pytest.raises(ValidationError):
            make_settings(SHIPSTATION_TIMEOUT_SECONDS=0)


class TestShipStationConfig:
    """Tests para la combinación de parámetros del Hub con Settings."""

    def test_defaults_come_from_settings(self):
        config = ShipStationConfig.from_parameters({}, make_settings())

        assert config.username == "env-user"
        assert config.password == "env-secret"
        assert config.store_id == "9"
        assert config.marketplace_id == 2
        assert config.lookup_strategy == "static"
        assert config.poll_mode == "modified"
        assert config.since is None

    def test_parameters_override_settings(self):
        """Los parámetros del webhook tienen prioridad."""
        parameters = {
            "shipstation_username": "hub-user",
            "shipstation_password": "hub-secret",
            "shipstation_store_id": " 7 ",
            "marketplace_id": "5",
            "shipstation_lookup_strategy": "Remote",
            "shipstation_poll_mode": "created",
            "since": "2023-05-01T00:00:00Z",
        }

        config = ShipStationConfig.from_parameters(parameters, make_settings())

        assert config.username == "hub-user"
        assert config.password == "hub-secret"
        assert config.store_id == "7"
        assert config.marketplace_id == 5
        assert config.lookup_strategy == "remote"
        assert config.poll_mode == "created"
        assert config.since == "2023-05-01T00:00:00Z"

    def test_blank_parameters_fall_back(self):
        """Un parámetro vacío no pisa el valor configurado."""
        config = ShipStationConfig.from_parameters(
            {"shipstation_username": "", "shipstation_store_id": "  "}, make_settings()
        )

        assert config.username == "env-user"
        assert config.store_id == "9"

    def test_unknown_strategy_parameter_rejected(self):
        with pytest.raises(ValueError):
            ShipStationConfig.from_parameters({"shipstation_lookup_strategy": "psychic"}, make_settings())

    def test_unknown_poll_mode_parameter_rejected(self):
        with pytest.raises(ValueError):
            ShipStationConfig.from_parameters({"shipstation_poll_mode": "sometimes"}, make_settings())
