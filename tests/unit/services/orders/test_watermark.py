"""Tests unitarios para los watermarks de consulta de envíos."""

from datetime import UTC, datetime, timedelta, timezone

import pytest

from app.services.orders.watermark import (
    CreateDateWatermark,
    ModifyDateWatermark,
    create_watermark_tracker,
    format_watermark,
    parse_since,
    start_of_utc_day,
)
from app.utils.error_handler import ValidationException

NOW = datetime(2023, 5, 10, 15, 45, 30, tzinfo=UTC)


class TestParseSince:
    """Tests para el parámetro since del Hub."""

    def test_iso_with_z(self):
        assert parse_since("2023-05-01T08:00:00Z") == datetime(2023, 5, 1, 8, 0, tzinfo=UTC)

    def test_offset_is_converted_to_utc(self):
        """Debe convertir offsets a UTC."""
        assert parse_since("2023-05-01T08:00:00-03:00") == datetime(2023, 5, 1, 11, 0, tzinfo=UTC)

    def test_naive_is_utc(self):
        """Una fecha sin zona horaria se toma como UTC."""
        assert parse_since("2023-05-01T08:00:00") == datetime(2023, 5, 1, 8, 0, tzinfo=UTC)

    @pytest.mark.parametrize("value", [None, "", "   "])
    def test_missing_defaults_to_start_of_day(self, value):
        """Sin since se consulta desde el inicio del día UTC."""
        assert parse_since(value, now=NOW) == datetime(2023, 5, 10, tzinfo=UTC)

    def test_invalid_raises(self):
        with pytest.raises(ValidationException):
            parse_since("yesterday")

    def test_format_watermark(self):
        """Debe formatear en ISO-8601 UTC con sufijo Z."""
        moment = datetime(2023, 5, 1, 5, 0, tzinfo=timezone(timedelta(hours=-3)))
        assert format_watermark(moment) == "2023-05-01T08:00:00Z"


class TestModifyDateWatermark:
    """Tests para la estrategia por ModifyDate (solo fecha)."""

    def test_filter_truncates_to_day_and_requires_ship_date(self):
        """Debe filtrar desde medianoche UTC y solo envíos despachados."""
        predicate = ModifyDateWatermark().build_filter(datetime(2023, 5, 1, 13, 20, tzinfo=UTC))

        assert predicate.render() == "ModifyDate ge datetime'2023-05-01T00:00:00' and ShipDate ne null"

    def test_next_watermark_is_start_of_today(self):
        tracker = ModifyDateWatermark()

        assert tracker.next_watermark(datetime(2023, 5, 1, tzinfo=UTC), now=NOW) == start_of_utc_day(NOW)

    def test_next_watermark_never_goes_back(self):
        """Nunca debe retroceder respecto al since recibido."""
        since = datetime(2023, 5, 10, 12, 0, tzinfo=UTC)

        assert ModifyDateWatermark().next_watermark(since, now=NOW) == since


class TestCreateDateWatermark:
    """Tests para la estrategia por CreateDate con corrección horaria."""

    def test_filter_on_create_date(self):
        predicate = CreateDateWatermark().build_filter(datetime(2023, 5, 1, 8, 30, tzinfo=UTC))

        assert predicate.render() == "CreateDate ge datetime'2023-05-01T08:30:00'"

    def test_next_watermark_applies_offset(self):
        """Debe restar el offset configurado a la hora actual."""
        tracker = CreateDateWatermark(offset_hours=-7)

        assert tracker.next_watermark(datetime(2023, 5, 1, tzinfo=UTC), now=NOW) == NOW - timedelta(hours=7)

    def test_next_watermark_never_goes_back(self):
        """El offset no puede mover el watermark hacia atrás del since recibido."""
        since = NOW - timedelta(hours=1)

        assert CreateDateWatermark(offset_hours=-7).next_watermark(since, now=NOW) == since

    @pytest.mark.parametrize("hours", [0, 1, 6, 23, 48])
    def test_monotonic_over_consecutive_polls(self, hours):
        """Encadenar consultas nunca produce un watermark menor."""
        tracker = CreateDateWatermark()
        since = datetime(2023, 5, 1, tzinfo=UTC)

        first = tracker.next_watermark(since, now=NOW)
        second = tracker.next_watermark(first, now=NOW + timedelta(hours=hours))

        assert since <= first <= second


class TestCreateWatermarkTracker:
    """Tests para la factory de watermarks."""

    def test_modes(self):
        assert isinstance(create_watermark_tracker("modified"), ModifyDateWatermark)
        tracker = create_watermark_tracker("created", offset_hours=-8)
        assert isinstance(tracker, CreateDateWatermark)
        assert tracker.offset == timedelta(hours=-8)

    def test_unknown_mode(self):
        with pytest.raises(ValueError):
            create_watermark_tracker("sometimes")
