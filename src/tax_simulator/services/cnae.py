"""CNAE catalogue used to pick an activity from an official activity code."""
from __future__ import annotations

import re
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict

from ..models.common import ActivityType, Annex


class CnaeEntry(BaseModel):
    model_config = ConfigDict(frozen=True)

    code: str
    description: str
    activity: ActivityType
    annex: Optional[Annex] = None
    prohibited_in_simples: bool = False


def _entry(code: str, description: str, activity: ActivityType, annex: Optional[Annex]) -> CnaeEntry:
    return CnaeEntry(
        code=code,
        description=description,
        activity=activity,
        annex=annex,
        prohibited_in_simples=annex is None,
    )


CATALOGUE: List[CnaeEntry] = [
    # Anexo I
    _entry("47.11-3-01", "Comércio varejista de mercadorias em geral - hipermercados", ActivityType.COMERCIO_VAREJO, Annex.I),
    _entry("47.11-3-02", "Comércio varejista de mercadorias em geral - supermercados", ActivityType.COMERCIO_VAREJO, Annex.I),
    _entry("47.12-1-00", "Comércio varejista - minimercados, mercearias e armazéns", ActivityType.COMERCIO_VAREJO, Annex.I),
    _entry("47.21-1-02", "Comércio varejista de produtos de padaria, laticínio, doces e balas", ActivityType.COMERCIO_VAREJO, Annex.I),
    _entry("47.81-4-00", "Comércio varejista de artigos do vestuário e acessórios", ActivityType.COMERCIO_VAREJO, Annex.I),
    _entry("47.82-2-01", "Comércio varejista de calçados", ActivityType.COMERCIO_VAREJO, Annex.I),
    _entry("46.11-7-01", "Representantes comerciais de matérias-primas agrícolas", ActivityType.COMERCIO_ATACADO, Annex.I),
    _entry("46.21-4-00", "Comércio atacadista de café em grão", ActivityType.COMERCIO_ATACADO, Annex.I),
    _entry("46.91-5-01", "Comércio atacadista de mercadorias em geral", ActivityType.COMERCIO_ATACADO, Annex.I),
    # Anexo II
    _entry("10.91-1-02", "Fabricação de produtos de padaria e confeitaria", ActivityType.INDUSTRIA_GERAL, Annex.II),
    _entry("14.12-6-01", "Confecção de peças do vestuário", ActivityType.INDUSTRIA_GERAL, Annex.II),
    _entry("25.11-0-00", "Fabricação de estruturas metálicas", ActivityType.INDUSTRIA_GERAL, Annex.II),
    # Anexo III
    _entry("62.01-5-01", "Desenvolvimento de programas de computador sob encomenda", ActivityType.TECNOLOGIA, Annex.III),
    _entry("62.02-3-00", "Desenvolvimento e licenciamento de programas customizáveis", ActivityType.TECNOLOGIA, Annex.III),
    _entry("62.03-1-00", "Desenvolvimento e licenciamento de programas não customizáveis", ActivityType.TECNOLOGIA, Annex.III),
    _entry("63.11-9-00", "Tratamento de dados, provedores de aplicação e hospedagem", ActivityType.TECNOLOGIA, Annex.III),
    _entry("85.11-2-00", "Educação infantil - creche", ActivityType.EDUCACAO, Annex.III),
    _entry("85.12-1-00", "Educação infantil - pré-escola", ActivityType.EDUCACAO, Annex.III),
    _entry("85.91-1-00", "Ensino de esportes", ActivityType.EDUCACAO, Annex.III),
    _entry("73.11-4-00", "Agências de publicidade", ActivityType.SERVICOS_GERAIS, Annex.III),
    _entry("82.11-3-00", "Serviços combinados de escritório e apoio administrativo", ActivityType.SERVICOS_GERAIS, Annex.III),
    _entry("96.02-5-01", "Cabeleireiros, manicure e pedicure", ActivityType.SERVICOS_GERAIS, Annex.III),
    # Anexo IV
    _entry("41.20-4-00", "Construção de edifícios", ActivityType.CONSTRUCAO_CIVIL, Annex.IV),
    _entry("42.11-1-01", "Construção de rodovias e ferrovias", ActivityType.CONSTRUCAO_CIVIL, Annex.IV),
    _entry("43.11-4-00", "Demolição e preparação de canteiros de obras", ActivityType.CONSTRUCAO_CIVIL, Annex.IV),
    # Anexo V
    _entry("69.11-7-01", "Serviços advocatícios", ActivityType.CONSULTORIA, Annex.V),
    _entry("69.20-6-01", "Atividades de contabilidade", ActivityType.CONSULTORIA, Annex.V),
    _entry("70.20-4-00", "Atividades de consultoria em gestão empresarial", ActivityType.CONSULTORIA, Annex.V),
    _entry("71.11-1-00", "Serviços de arquitetura", ActivityType.CONSULTORIA, Annex.V),
    _entry("71.12-0-00", "Serviços de engenharia", ActivityType.CONSULTORIA, Annex.V),
    _entry("86.10-1-01", "Atividades de atendimento hospitalar", ActivityType.SAUDE, Annex.V),
    _entry("86.20-2-99", "Atividades de atenção ambulatorial não especificadas", ActivityType.SAUDE, Annex.V),
    _entry("86.30-5-02", "Atividade médica ambulatorial com recursos para exames complementares", ActivityType.SAUDE, Annex.V),
    # vedadas no Simples
    _entry("64.11-1-00", "Banco Central", ActivityType.FINANCEIRO, None),
    _entry("64.21-2-00", "Bancos comerciais", ActivityType.FINANCEIRO, None),
    _entry("65.11-1-01", "Seguros de vida", ActivityType.FINANCEIRO, None),
]


def normalize_code(code: str) -> str:
    return re.sub(r"\D", "", code)


_BY_CODE: Dict[str, CnaeEntry] = {normalize_code(entry.code): entry for entry in CATALOGUE}


def find_cnae(code: str) -> Optional[CnaeEntry]:
    return _BY_CODE.get(normalize_code(code))


def activity_for_cnae(code: str) -> Optional[ActivityType]:
    entry = find_cnae(code)
    return entry.activity if entry else None


def is_prohibited_in_simples(code: str) -> bool:
    entry = find_cnae(code)
    return entry.prohibited_in_simples if entry else False


def search_cnae(term: str) -> List[CnaeEntry]:
    needle = term.strip().lower()
    if not needle:
        return []
    digits = normalize_code(needle)
    return [
        entry
        for entry in CATALOGUE
        if needle in entry.description.lower() or (digits and digits in normalize_code(entry.code))
    ]


def cnaes_for_activity(activity: ActivityType) -> List[CnaeEntry]:
    return [entry for entry in CATALOGUE if entry.activity == activity]
