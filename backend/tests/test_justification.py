"""Justification text and fr-FR formatting."""
from decimal import Decimal

import pytest

from agency_pricing.engine.formatting import format_currency, format_days, format_hours, format_number
from agency_pricing.engine.justification import CLOSING_SENTENCE
from agency_pricing.schemas.calculation import CalculationMode


class TestFormatting:
    @pytest.mark.parametrize(
        "value,expected",
        [
            (Decimal("5880000"), "5 880 000"),
            (Decimal("1234.5"), "1 234,5"),
            (Decimal("1.20"), "1,2"),
            (Decimal("999"), "999"),
            (Decimal("-1500"), "-1 500"),
        ],
    )
    def test_format_number(self, value, expected):
        assert format_number(value) == expected

    def test_currency_is_whole_units(self):
        assert format_currency(Decimal("5880000.40")) == "5 880 000 FCFA"
        assert format_currency(Decimal("10"), label="EUR") == "10 EUR"

    def test_day_and_hour_nouns(self):
        assert format_days(Decimal("1.5")) == "1,5 jour"
        assert format_days(Decimal(10)) == "10 jours"
        assert format_hours(Decimal(1)) == "1 heure"
        assert format_hours(Decimal(80)) == "80 heures"


class TestGenerateJustification:
    def _justify(self, engine, units, mode=CalculationMode.DAILY, client_type=None, project_type=None, margin=None):
        result = engine.compute_cost(units, mode, client_type=client_type, margin_percentage=margin)
        return engine.generate_justification(result, units, mode, client_type=client_type, project_type=project_type)

    def test_none_without_cost(self, engine, client_types, project_types):
        assert self._justify(engine, {}, client_type=client_types[0], project_type=project_types[1], margin=40) is None
        # units on an inactive role cost nothing either
        assert self._justify(engine, {3: Decimal(5)}) is None

    def test_full_text_order(self, engine, client_types, project_types):
        sentences = self._justify(
            engine,
            {1: Decimal(10)},
            client_type=client_types[0],
            project_type=project_types[1],
            margin=40,
        )
        assert len(sentences) == 6
        assert sentences[0] == "L'équipe mobilisée sur ce projet comprend : Dev (10 jours)."
        assert "« Application mobile »" in sentences[1] and "élevée" in sentences[1]
        assert "×1,2" in sentences[2]
        assert "10 jours de travail" in sentences[3]
        assert "3 500 000 FCFA" in sentences[3] and "5 880 000 FCFA" in sentences[3]
        assert sentences[4].startswith("La marge de 40 %")
        assert sentences[5] == CLOSING_SENTENCE

    def test_minimal_text(self, engine, client_types):
        # no project type, neutral coefficient, no margin
        sentences = self._justify(engine, {2: Decimal(1)}, client_type=client_types[1])
        assert len(sentences) == 3
        assert sentences[0] == "L'équipe mobilisée sur ce projet comprend : Designer (1 jour)."
        assert sentences[-1] == CLOSING_SENTENCE

    def test_discount_coefficient_wording(self, engine, client_types):
        sentences = self._justify(engine, {1: Decimal(1)}, client_type=client_types[2])
        coefficient = sentences[1]
        assert "préférentiel" in coefficient
        assert "×0,85" in coefficient
        assert "remise de 15 %" in coefficient

    def test_hourly_roles_listed_in_hours(self, engine):
        sentences = self._justify(engine, {1: Decimal(80), 2: Decimal(4)}, mode=CalculationMode.HOURLY)
        assert sentences[0] == "L'équipe mobilisée sur ce projet comprend : Dev (80 heures), Designer (4 heures)."
        assert "10,5 jours de travail" in sentences[1]

    @pytest.mark.parametrize(
        "margin,marker",
        [(60, "forte valeur ajoutée"), (50, "forte valeur ajoutée"), (40, "équilibre solide"), (30, "tarif compétitif")],
    )
    def test_margin_tiers(self, engine, margin, marker):
        sentences = self._justify(engine, {1: Decimal(1)}, margin=margin)
        assert marker in sentences[-2]
