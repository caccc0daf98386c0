"""Renders the business data snapshot into the first user message."""

import math
from collections.abc import Callable
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation, localcontext
from typing import Any

from crm_assistant.schemas.internal import CallerIdentity, ContextSnapshot, SourceResult

PLACEHOLDER = "N/A"
EMPTY_SECTION_LINE = "- Nenhum registro disponível."
DEGRADED_WARNING = (
    "⚠️ AVISO: Alguns dados não puderam ser carregados devido a timeout na API. "
    "Responda com base nos dados disponíveis e sugira ao usuário tentar novamente."
)

Record = dict[str, Any]

# Decimal exponents a JS number can hold; beyond them it is Infinity or 0
MAX_EXPONENT = 308
MIN_EXPONENT = -324


def to_decimal(value: Any) -> Decimal:
    """Read a loosely typed numeric field; anything non-numeric is zero."""
    if value is None or isinstance(value, bool):
        return Decimal(0)
    if isinstance(value, int):
        return _in_range(Decimal(value))
    if isinstance(value, float):
        if not math.isfinite(value):
            return Decimal(0)
        return _in_range(Decimal(str(value)))
    if isinstance(value, str):
        try:
            number = Decimal(value.strip())
        except InvalidOperation:
            return Decimal(0)
        return _in_range(number)
    return Decimal(0)


def _in_range(number: Decimal) -> Decimal:
    if not number.is_finite() or number.is_zero():
        return Decimal(0)
    if not MIN_EXPONENT <= number.adjusted() <= MAX_EXPONENT:
        return Decimal(0)
    return number


def round_half_up(number: Decimal, exponent: Decimal) -> Decimal:
    """Round to ``exponent`` (e.g. ``Decimal("0.001")``) whatever the magnitude."""
    with localcontext() as ctx:
        ctx.prec = max(ctx.prec, number.adjusted() - exponent.as_tuple().exponent + 2)
        return number.quantize(exponent, rounding=ROUND_HALF_UP)


def format_number_pt_br(value: Any) -> str:
    """Format like ``Number.toLocaleString('pt-BR')``: ``1234.5 -> '1.234,5'``."""
    number = round_half_up(to_decimal(value), Decimal("0.001"))
    integer_part, fraction = f"{number.copy_abs():,.3f}".split(".")
    fraction = fraction.rstrip("0")
    text = integer_part.replace(",", ".")
    if fraction:
        text = f"{text},{fraction}"
    if number < 0:
        text = f"-{text}"
    return text


def text_field(record: Record, key: str) -> str:
    """Read a display field, falling back to the placeholder."""
    value = record.get(key)
    if value is None or value == "":
        return PLACEHOLDER
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def _lead_line(lead: Record) -> str:
    return (
        f"{text_field(lead, 'NOME')} | R$ {format_number_pt_br(lead.get('VALOR'))} | "
        f"{text_field(lead, 'CODESTAGIO')}"
    )


def _partner_line(partner: Record) -> str:
    return f"{text_field(partner, 'NOMEPARC')} | {text_field(partner, 'NOMECID')}"


def _product_line(product: Record) -> str:
    stock = to_decimal(product.get("ESTOQUE"))
    rounded = round_half_up(stock, Decimal("1"))
    marker = "✅" if stock > 0 else "⚠️"
    return f"{text_field(product, 'DESCRPROD')} | Estoque: {rounded:f} {marker}"


def _order_line(order: Record) -> str:
    return (
        f"#{text_field(order, 'NUNOTA')} | {text_field(order, 'NOMEPARC')} | "
        f"R$ {format_number_pt_br(order.get('VLRNOTA'))}"
    )


class ContextComposer:
    """Pure renderer of a ``ContextSnapshot`` into prompt text."""

    def compose(self, snapshot: ContextSnapshot, caller: CallerIdentity, user_message: str) -> str:
        """
        Build the augmented first message.

        The output depends only on the arguments, so identical inputs give
        byte-identical text. The user's message is appended last, verbatim.
        """
        parts = [
            "DADOS DO SISTEMA (para contexto da sua análise):",
            "",
            f"👤 USUÁRIO LOGADO: {caller.display_name}",
            "",
        ]

        if not snapshot.has_any_data:
            parts.extend([DEGRADED_WARNING, ""])

        parts.extend(
            [
                "📊 RESUMO GERAL:",
                f"- Total de Leads Ativos: {snapshot.leads.total}",
                f"- Total de Parceiros/Clientes: {snapshot.partners.total}",
                f"- Total de Produtos: {snapshot.products.total}",
                f"- Total de Pedidos: {snapshot.orders.total}",
                "",
            ]
        )

        parts.extend(self._section("💰 LEADS ({} mais recentes):", snapshot.leads, _lead_line))
        parts.extend(self._section("👥 PARCEIROS ({}):", snapshot.partners, _partner_line))
        parts.extend(self._section("📦 PRODUTOS ({}):", snapshot.products, _product_line))
        parts.extend(self._section("🛒 PEDIDOS ({}):", snapshot.orders, _order_line))

        parts.extend(["PERGUNTA DO USUÁRIO:", user_message])
        return "\n".join(parts)

    @staticmethod
    def _section(title: str, result: SourceResult, render: Callable[[Record], str]) -> list[str]:
        """Render a titled block; ``{}`` in the title is the number of displayed records."""
        lines = [render(record) for record in result.items] or [EMPTY_SECTION_LINE]
        return [title.format(len(result.items)), *lines, ""]
