"""Tests unitarios para el constructor de filtros OData."""

from datetime import UTC, date, datetime, timedelta, timezone
from decimal import Decimal

import pytest

from app.db.shipstation.filters import AllOf, Predicate, field_eq, render_literal


class TestRenderLiteral:
    """Tests para el renderizado de literales por tipo."""

    def test_string_is_quoted(self):
        """Debe encerrar los strings entre comillas simples."""
        assert render_literal("R123") == "'R123'"

    def test_string_quotes_are_doubled(self):
        """Debe duplicar las comillas simples para evitar inyección en el filtro."""
        assert render_literal("O'Brien") == "'O''Brien'"
        assert render_literal("x' or 1 eq 1 or 'a") == "'x'' or 1 eq 1 or ''a'"

    def test_numbers_are_bare(self):
        """Debe renderizar enteros y decimales sin comillas."""
        assert render_literal(55) == "55"
        assert render_literal(Decimal("12.50")) == "12.50"

    def test_none_and_booleans(self):
        """Debe usar null, true y false."""
        assert render_literal(None) == "null"
        assert render_literal(True) == "true"
        assert render_literal(False) == "false"

    def test_aware_datetime_is_converted_to_utc(self):
        """Debe convertir fechas con zona horaria a UTC sin sufijo."""
        moment = datetime(2023, 1, 1, 5, 0, tzinfo=timezone(timedelta(hours=-3)))
        assert render_literal(moment) == "datetime'2023-01-01T08:00:00'"

    def test_naive_datetime_is_rendered_as_is(self):
        """Debe renderizar fechas sin zona horaria tal cual, a segundos."""
        assert render_literal(datetime(2023, 1, 1, 12, 30, 15, 999)) == "datetime'2023-01-01T12:30:15'"

    def test_date_starts_at_midnight(self):
        """Debe renderizar una fecha como medianoche."""
        assert render_literal(date(2023, 1, 1)) == "datetime'2023-01-01T00:00:00'"

    def test_unsupported_type_raises(self):
        """Debe rechazar tipos sin representación OData."""
        with pytest.raises(TypeError):
            render_literal({"a": 1})


class TestPredicate:
    """Tests para predicados y su composición."""

    def test_render_single_predicate(self):
        """Debe renderizar campo, operador y literal."""
        assert field_eq("OrderNumber", "R123").render() == "OrderNumber eq 'R123'"

    def test_conjunction_with_and(self):
        """Debe componer predicados con 'and'."""
        predicate = Predicate("ModifyDate", "ge", datetime(2023, 1, 1, tzinfo=UTC)) & Predicate(
            "ShipDate", "ne", None
        )

        assert isinstance(predicate, AllOf)
        assert str(predicate) == "ModifyDate ge datetime'2023-01-01T00:00:00' and ShipDate ne null"

    def test_conjunction_is_flat(self):
        """Debe aplanar conjunciones encadenadas."""
        predicate = field_eq("A", 1) & field_eq("B", 2) & field_eq("C", 3)

        assert len(predicate.predicates) == 3
        assert predicate.render() == "A eq 1 and B eq 2 and C eq 3"

    def test_invalid_field_name_rejected(self):
        """Debe rechazar nombres de campo que no son identificadores."""
        with pytest.raises(ValueError):
            Predicate("OrderNumber eq 'x' or OrderID", "eq", 1)

    def test_unknown_operator_rejected(self):
        """Debe rechazar operadores desconocidos."""
        with pytest.raises(ValueError):
            Predicate("OrderID", "like", 1)

    def test_unsupported_value_rejected_at_construction(self):
        """Debe fallar al construir, no al enviar la consulta."""
        with pytest.raises(TypeError):
            Predicate("OrderID", "eq", object())
