"""Client-facing justification text for a computed price."""
from collections.abc import Sequence
from decimal import Decimal
from typing import Protocol

from agency_pricing.config import get_settings
from agency_pricing.engine.formatting import format_currency, format_days, format_hours, format_number
from agency_pricing.engine.units import HOURS_PER_DAY, to_days
from agency_pricing.schemas.calculation import CalculationMode, CostResult


class NamedCoefficient(Protocol):
    name: str
    coefficient: Decimal


class ComplexityLabelled(Protocol):
    name: str
    complexity_level: str


COMPLEXITY_SENTENCES = {
    "high": (
        "Le projet « {name} » présente une complexité élevée : il requiert une expertise pointue "
        "et une coordination renforcée entre les intervenants."
    ),
    "medium": (
        "Le projet « {name} » présente une complexité modérée, qui demande une organisation "
        "structurée et un suivi régulier."
    ),
    "low": (
        "Le projet « {name} » présente une complexité maîtrisée, ce qui permet une exécution "
        "efficace dans des délais optimisés."
    ),
}

CLOSING_SENTENCE = (
    "Cette proposition vous garantit un accompagnement de qualité par une équipe expérimentée, "
    "engagée sur les délais comme sur les résultats."
)


def _complexity_key(level) -> str:
    return level.value if hasattr(level, "value") else str(level)


def _quantity(units: Decimal, mode: CalculationMode) -> str:
    return format_hours(units) if mode == CalculationMode.HOURLY else format_days(units)


def _roles_sentence(roles: Sequence[tuple[str, Decimal]], mode: CalculationMode) -> str:
    parts = ", ".join(f"{name} ({_quantity(units, mode)})" for name, units in roles)
    return f"L'équipe mobilisée sur ce projet comprend : {parts}."


def _coefficient_sentence(client_type: NamedCoefficient | None, coefficient: Decimal) -> str:
    label = f"Le profil client « {client_type.name} »" if client_type is not None else "Le profil client retenu"
    if coefficient > 1:
        return (
            f"{label} justifie un coefficient de ×{format_number(coefficient)}, "
            "reflétant un niveau d'exigence et d'accompagnement supérieur."
        )
    discount = (Decimal(1) - coefficient) * Decimal(100)
    return (
        f"{label} bénéficie d'un coefficient préférentiel de ×{format_number(coefficient)}, "
        f"soit une remise de {format_number(discount)} % sur le coût de production."
    )


def _margin_sentence(margin: Decimal) -> str:
    settings = get_settings()
    pct = format_number(margin)
    if margin >= settings.margin_tier_high:
        return (
            f"La marge de {pct} % reflète la forte valeur ajoutée de la prestation "
            "et la prise en charge des risques du projet."
        )
    if margin >= settings.margin_tier_medium:
        return f"La marge de {pct} % assure un équilibre solide entre compétitivité et qualité de service."
    return f"La marge de {pct} % permet de proposer un tarif compétitif sans compromis sur la qualité des livrables."


def generate_justification(
    result: CostResult,
    roles: Sequence[tuple[str, Decimal]],
    mode: CalculationMode,
    client_type: NamedCoefficient | None = None,
    project_type: ComplexityLabelled | None = None,
    hours_per_day: int = HOURS_PER_DAY,
) -> list[str] | None:
    """Ordered sentences explaining the price, or None while nothing is costed.

    roles holds (role name, quantity in mode units) for the roles counted in
    result, as returned by PricingEngine.billable_roles().
    """
    if result.internal_cost == 0:
        return None

    sentences: list[str] = []
    billable = [(name, units) for name, units in roles if units > 0]
    if billable:
        sentences.append(_roles_sentence(billable, mode))

    if project_type is not None:
        template = COMPLEXITY_SENTENCES.get(_complexity_key(project_type.complexity_level))
        if template:
            sentences.append(template.format(name=project_type.name))

    if result.coefficient != 1:
        sentences.append(_coefficient_sentence(client_type, result.coefficient))

    total_days = to_days(result.total_units, mode, hours_per_day)
    sentences.append(
        f"L'investissement total représente {format_days(total_days)} de travail, "
        f"pour un coût de production de {format_currency(result.internal_cost)} "
        f"et un prix recommandé de {format_currency(result.recommended_price)}."
    )

    if result.margin_percentage > 0:
        sentences.append(_margin_sentence(result.margin_percentage))

    sentences.append(CLOSING_SENTENCE)
    return sentences
