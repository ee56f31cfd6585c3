"""
Schema da aba de respostas do formulário (origem da sincronização).

O mapeamento é posicional: a ordem das colunas é o contrato. Ele é versionado
em RESPONSES_SCHEMA_VERSION e conferido no início de cada passada pelo
ResponseReader.
"""
import re
from dataclasses import dataclass
from datetime import datetime, timezone, tzinfo

RESPONSES_SCHEMA_VERSION = 1
RESPONSES_HEADER = [
    "Timestamp",
    "Employee Name",
    "Department",
    "Satisfaction Score",
    "Happiness Index",
    "Team Dynamics Score",
    "Leadership Score",
    "Growth Opportunities Score",
    "Company Culture Score",
    "Open Comments",
]

# Formatos gravados pelo Google Forms / digitados à mão na planilha
TIMESTAMP_FORMATS = (
    "%m/%d/%Y %H:%M:%S",
    "%m/%d/%Y %H:%M",
    "%m/%d/%Y",
    "%Y-%m-%d %H:%M:%S",
    "%Y-%m-%d %H:%M",
    "%Y-%m-%d",
)

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


def parse_int(value: str) -> int:
    """
    Lê o inteiro no início da célula; qualquer outra coisa vira 0.

    >>> parse_int("8"), parse_int("8.5"), parse_int(" 7 pts"), parse_int("n/a")
    (8, 8, 7, 0)
    """
    match = _LEADING_INT.match(value or "")
    return int(match.group(1)) if match else 0


def parse_timestamp(value: str, local_tz: tzinfo = timezone.utc) -> datetime | None:
    """
    Converte o timestamp da planilha em um instante UTC.

    Aceita ISO 8601 (com "Z" ou offset) e os formatos de TIMESTAMP_FORMATS.
    Valores sem fuso são interpretados em local_tz.

    Returns:
        datetime | None: Instante com tzinfo UTC, ou None se vazio/ilegível.
    """
    value = (value or "").strip()
    if not value:
        return None

    parsed: datetime | None = None
    try:
        parsed = datetime.fromisoformat(value[:-1] + "+00:00" if value.endswith("Z") else value)
    except ValueError:
        for fmt in TIMESTAMP_FORMATS:
            try:
                parsed = datetime.strptime(value, fmt)
                break
            except ValueError:
                continue

    if parsed is None:
        return None

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=local_tz)
    return parsed.astimezone(timezone.utc)


def _cell(row: list[str], index: int) -> str:
    return row[index] if index < len(row) and row[index] is not None else ""


@dataclass
class SheetRow:
    """
    Uma resposta bruta do formulário, exatamente como lida da planilha.

    Existe só durante uma passada. As notas não são validadas aqui (1-10 é
    apenas a faixa nominal).

    Attributes:
        timestamp (str): Timestamp como texto da planilha.
        employee_name (str): Nome do colaborador (pode ser vazio).
        department (str): Departamento (pode ser vazio).
        satisfaction_score (int): Satisfação geral.
        happiness_index (int): Índice de felicidade.
        team_dynamics_score (int): Dinâmica do time.
        leadership_score (int): Liderança.
        growth_opportunities_score (int): Oportunidades de crescimento.
        company_culture_score (int): Cultura da empresa.
        open_comments (str): Comentário livre (pode ser vazio).
    """
    timestamp: str
    employee_name: str = ""
    department: str = ""
    satisfaction_score: int = 0
    happiness_index: int = 0
    team_dynamics_score: int = 0
    leadership_score: int = 0
    growth_opportunities_score: int = 0
    company_culture_score: int = 0
    open_comments: str = ""

    @classmethod
    def from_row(cls, row_data: list[str]) -> "SheetRow":
        """
        Decodifica uma linha posicionalmente, de forma tolerante.

        Células ausentes viram "" (texto) ou 0 (notas); notas não numéricas
        também viram 0. Uma célula malformada nunca interrompe a passada.
        """
        return cls(
            timestamp=_cell(row_data, 0).strip(),
            employee_name=_cell(row_data, 1),
            department=_cell(row_data, 2),
            satisfaction_score=parse_int(_cell(row_data, 3)),
            happiness_index=parse_int(_cell(row_data, 4)),
            team_dynamics_score=parse_int(_cell(row_data, 5)),
            leadership_score=parse_int(_cell(row_data, 6)),
            growth_opportunities_score=parse_int(_cell(row_data, 7)),
            company_culture_score=parse_int(_cell(row_data, 8)),
            open_comments=_cell(row_data, 9),
        )

    def parsed_timestamp(self, local_tz: tzinfo = timezone.utc) -> datetime | None:
        """Instante UTC da resposta, ou None se o timestamp for vazio/ilegível."""
        return parse_timestamp(self.timestamp, local_tz)
