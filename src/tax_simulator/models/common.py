from __future__ import annotations

from enum import Enum
from types import MappingProxyType
from typing import Annotated, Mapping, Tuple, TypeVar

from pydantic import AfterValidator, WrapSerializer

K = TypeVar("K")
V = TypeVar("V")


class TaxRegime(str, Enum):
    MEI = "mei"
    SIMPLES_NACIONAL = "simples_nacional"
    LUCRO_PRESUMIDO = "lucro_presumido"
    LUCRO_REAL = "lucro_real"


# Declaration order; drives presentation order and tie-breaks.
REGIME_ORDER: Tuple[TaxRegime, ...] = (
    TaxRegime.MEI,
    TaxRegime.SIMPLES_NACIONAL,
    TaxRegime.LUCRO_PRESUMIDO,
    TaxRegime.LUCRO_REAL,
)

REGIME_NAMES = {
    TaxRegime.MEI: "MEI",
    TaxRegime.SIMPLES_NACIONAL: "Simples Nacional",
    TaxRegime.LUCRO_PRESUMIDO: "Lucro Presumido",
    TaxRegime.LUCRO_REAL: "Lucro Real",
}


class ActivityType(str, Enum):
    COMERCIO_VAREJO = "comercio_varejo"
    COMERCIO_ATACADO = "comercio_atacado"
    INDUSTRIA_GERAL = "industria_geral"
    SERVICOS_GERAIS = "servicos_gerais"
    TECNOLOGIA = "tecnologia"
    CONSULTORIA = "consultoria"
    SAUDE = "saude"
    EDUCACAO = "educacao"
    FINANCEIRO = "financeiro"
    CONSTRUCAO_CIVIL = "construcao_civil"
    OUTROS = "outros"


class BusinessSector(str, Enum):
    COMERCIO = "comercio"
    INDUSTRIA = "industria"
    SERVICOS = "servicos"
    SERVICOS_ANEXO_IV = "servicos_anexo_iv"
    SERVICOS_ANEXO_V = "servicos_anexo_v"


class Annex(str, Enum):
    I = "I"
    II = "II"
    III = "III"
    IV = "IV"
    V = "V"


class TaxComponent(str, Enum):
    IRPJ = "irpj"
    CSLL = "csll"
    PIS = "pis"
    COFINS = "cofins"
    CPP = "cpp"
    IPI = "ipi"
    ICMS = "icms"
    ISS = "iss"


class LocalTax(str, Enum):
    ICMS = "icms"
    ISS = "iss"


class MeiCategory(str, Enum):
    COMERCIO = "comercio"
    INDUSTRIA = "industria"
    SERVICOS = "servicos"


class BrazilianState(str, Enum):
    AC = "AC"
    AL = "AL"
    AP = "AP"
    AM = "AM"
    BA = "BA"
    CE = "CE"
    DF = "DF"
    ES = "ES"
    GO = "GO"
    MA = "MA"
    MT = "MT"
    MS = "MS"
    MG = "MG"
    PA = "PA"
    PB = "PB"
    PR = "PR"
    PE = "PE"
    PI = "PI"
    RJ = "RJ"
    RN = "RN"
    RS = "RS"
    RO = "RO"
    RR = "RR"
    SC = "SC"
    SP = "SP"
    SE = "SE"
    TO = "TO"


def _freeze(value: Mapping) -> Mapping:
    return MappingProxyType(value)


def _serialize_as_dict(value, handler):
    return handler(dict(value))


# Read-only mapping for shared reference data and results.
FrozenDict = Annotated[
    Mapping[K, V],
    AfterValidator(_freeze),
    WrapSerializer(_serialize_as_dict),
]
