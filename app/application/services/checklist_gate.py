"""Checklist gate: blocking items must be checked before drafting can end.

Also holds the per-filing-type templates used to seed a new workspace.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from app.domain.entities.workspace import ChecklistItemEntity


@dataclass(frozen=True)
class ChecklistTemplateItem:
    category: str
    title: str
    blocking: bool
    is_required: bool


def _item(category: str, title: str, blocking: bool, is_required: bool) -> ChecklistTemplateItem:
    return ChecklistTemplateItem(category, title, blocking, is_required)


CHECKLIST_TEMPLATES: dict[str, tuple[ChecklistTemplateItem, ...]] = {
    "CONTESTACAO": (
        _item("REQUISITOS_FORMAIS", "Qualificação completa do réu", True, True),
        _item("REQUISITOS_FORMAIS", "Endereçamento correto (vara/juízo)", True, True),
        _item("REQUISITOS_FORMAIS", "Número do processo informado", True, True),
        _item("DOCUMENTOS", "Procuração ad judicia anexada", True, True),
        _item("DOCUMENTOS", "Documentos comprobatórios anexados", False, False),
        _item("FUNDAMENTACAO", "Preliminares arguidas (se cabíveis)", False, False),
        _item("FUNDAMENTACAO", "Impugnação específica dos fatos", True, True),
        _item("FUNDAMENTACAO", "Fundamentação jurídica adequada", True, True),
        _item("PEDIDOS", "Pedido de improcedência formulado", True, True),
        _item("PEDIDOS", "Pedido de provas especificado", False, False),
        _item("ASSINATURAS", "Assinatura do advogado com OAB", True, True),
        _item("PROTOCOLO", "Verificar prazo antes do protocolo", True, True),
    ),
    "RECURSO_ESPECIAL": (
        _item("REQUISITOS_FORMAIS", "Tempestividade verificada", True, True),
        _item("REQUISITOS_FORMAIS", "Preparo (custas + porte de remessa)", True, True),
        _item("REQUISITOS_FORMAIS", "Prequestionamento demonstrado", True, True),
        _item("DOCUMENTOS", "Comprovante de preparo anexado", True, True),
        _item("DOCUMENTOS", "Cópia do acórdão recorrido", True, True),
        _item("FUNDAMENTACAO", "Violação de lei federal indicada (art. 105, III, a)", True, True),
        _item("FUNDAMENTACAO", "Divergência jurisprudencial (se alínea c)", False, False),
        _item("FUNDAMENTACAO", "Cotejo analítico realizado", False, False),
        _item("PEDIDOS", "Pedido de provimento formulado", True, True),
        _item("ASSINATURAS", "Assinatura do advogado com OAB", True, True),
        _item("PROTOCOLO", "Verificar prazo de 15 dias úteis", True, True),
    ),
    "AGRAVO_INSTRUMENTO": (
        _item("REQUISITOS_FORMAIS", "Hipótese de cabimento verificada (art. 1.015 CPC)", True, True),
        _item("REQUISITOS_FORMAIS", "Tempestividade (10 dias úteis)", True, True),
        _item("DOCUMENTOS", "Cópia da decisão agravada", True, True),
        _item("DOCUMENTOS", "Certidão de intimação", True, True),
        _item("DOCUMENTOS", "Procuração e documentos essenciais", True, True),
        _item("DOCUMENTOS", "Comprovante de preparo", True, True),
        _item("FUNDAMENTACAO", "Demonstração do cabimento", True, True),
        _item("FUNDAMENTACAO", "Pedido de tutela recursal (se cabível)", False, False),
        _item("PEDIDOS", "Pedido de reforma da decisão", True, True),
        _item("PROTOCOLO", "Informar juízo a quo em 3 dias (art. 1.018)", False, True),
        _item("ASSINATURAS", "Assinatura com OAB", True, True),
    ),
    "IMPUGNACAO_CUMPRIMENTO": (
        _item("REQUISITOS_FORMAIS", "Tempestividade (15 dias úteis)", True, True),
        _item("REQUISITOS_FORMAIS", "Garantia do juízo (se necessária)", False, False),
        _item("FUNDAMENTACAO", "Hipóteses do art. 525 CPC verificadas", True, True),
        _item("FUNDAMENTACAO", "Excesso de execução demonstrado com planilha", False, False),
        _item("DOCUMENTOS", "Planilha de cálculos própria", False, False),
        _item("PEDIDOS", "Pedido de extinção ou redução", True, True),
        _item("ASSINATURAS", "Assinatura com OAB", True, True),
    ),
    "EMBARGOS_DECLARACAO": (
        _item("REQUISITOS_FORMAIS", "Tempestividade (5 dias)", True, True),
        _item("FUNDAMENTACAO", "Omissão identificada e demonstrada", False, False),
        _item("FUNDAMENTACAO", "Contradição identificada e demonstrada", False, False),
        _item("FUNDAMENTACAO", "Obscuridade identificada e demonstrada", False, False),
        _item("FUNDAMENTACAO", "Erro material identificado", False, False),
        _item("FUNDAMENTACAO", "Efeito prequestionador indicado (se aplicável)", False, False),
        _item("PEDIDOS", "Pedido de integração/correção do julgado", True, True),
        _item("ASSINATURAS", "Assinatura com OAB", True, True),
    ),
    "APELACAO": (
        _item("REQUISITOS_FORMAIS", "Tempestividade (15 dias úteis)", True, True),
        _item("REQUISITOS_FORMAIS", "Preparo recolhido", True, True),
        _item("DOCUMENTOS", "Comprovante de preparo", True, True),
        _item("FUNDAMENTACAO", "Razões recursais fundamentadas", True, True),
        _item("FUNDAMENTACAO", "Pedido de reforma ou anulação", True, True),
        _item("FUNDAMENTACAO", "Prequestionamento para eventual recurso superior", False, False),
        _item("PEDIDOS", "Pedido de provimento ao recurso", True, True),
        _item("ASSINATURAS", "Assinatura com OAB", True, True),
        _item("PROTOCOLO", "Verificar prazo fatal antes do protocolo", True, True),
    ),
    "DEFAULT": (
        _item("REQUISITOS_FORMAIS", "Endereçamento correto", True, True),
        _item("REQUISITOS_FORMAIS", "Qualificação das partes", True, True),
        _item("DOCUMENTOS", "Procuração anexada", True, True),
        _item("FUNDAMENTACAO", "Fundamentação jurídica adequada", True, True),
        _item("PEDIDOS", "Pedidos formulados", True, True),
        _item("ASSINATURAS", "Assinatura do advogado", True, True),
        _item("PROTOCOLO", "Verificar prazo antes do protocolo", True, True),
    ),
}


def template_for(deadline_type: str | None) -> tuple[str, tuple[ChecklistTemplateItem, ...]]:
    """Return (template key, items) for a filing type; unknown types use DEFAULT."""
    key = (deadline_type or "").strip().upper()
    if key in CHECKLIST_TEMPLATES:
        return key, CHECKLIST_TEMPLATES[key]
    return "DEFAULT", CHECKLIST_TEMPLATES["DEFAULT"]


def blocking_unchecked(items: Iterable[ChecklistItemEntity]) -> list[ChecklistItemEntity]:
    """Blocking items that are not checked yet, in checklist order."""
    return sorted(
        (i for i in items if i.blocks_advancement),
        key=lambda i: i.position,
    )


def is_satisfied(items: Iterable[ChecklistItemEntity]) -> bool:
    """True iff no blocking item is unchecked."""
    return not blocking_unchecked(items)


def progress(items: Iterable[ChecklistItemEntity]) -> tuple[int, int]:
    """Return (checked count, total count)."""
    total = 0
    done = 0
    for item in items:
        total += 1
        if item.checked:
            done += 1
    return done, total
