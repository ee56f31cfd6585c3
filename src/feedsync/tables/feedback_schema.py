"""
Definição de schemas para os registros de feedback classificados.

- ClassifiedEntry: resposta nova + sentimento, montada antes da persistência
- PersistedFeedback: registro durável gravado na aba de feedback
"""
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone

from .response_schema import SheetRow

FEEDBACK_TABLE_NAME = "Feedback"
FEEDBACK_TABLE_HEADER = [
    "id",
    "timestamp",
    "employee_name",
    "department",
    "satisfaction_score",
    "happiness_index",
    "team_dynamics_score",
    "leadership_score",
    "growth_opportunities_score",
    "company_culture_score",
    "open_comments",
    "sentiment_score",
    "sentiment_label",
    "processed_at",
    "created_at",
]

SENTIMENT_LABELS = ("positive", "neutral", "negative")


def clamp_score(value) -> float:
    """Converte para float e limita a [-1, 1]; valores não numéricos viram 0."""
    try:
        score = float(value)
    except (TypeError, ValueError):
        return 0.0
    except OverflowError:  # inteiro grande demais para float
        return 1.0 if value > 0 else -1.0
    if score != score:  # NaN
        return 0.0
    return max(-1.0, min(1.0, score))


def normalize_label(value) -> str:
    """Rótulos fora de SENTIMENT_LABELS viram "neutral"."""
    return value if value in SENTIMENT_LABELS else "neutral"


def _isoformat(moment: datetime) -> str:
    return moment.astimezone(timezone.utc).isoformat()


@dataclass(frozen=True)
class ClassifiedEntry:
    """
    Resposta estritamente mais nova que o high-water mark, já classificada.

    Imutável após a criação. O score é limitado a [-1, 1] e o rótulo
    normalizado na construção, qualquer que seja a origem.

    Attributes:
        timestamp (datetime): Instante da resposta (UTC).
        sentiment_score (float): Score do sentimento em [-1, 1].
        sentiment_label (str): "positive", "neutral" ou "negative".
    """
    timestamp: datetime
    employee_name: str
    department: str
    satisfaction_score: int
    happiness_index: int
    team_dynamics_score: int
    leadership_score: int
    growth_opportunities_score: int
    company_culture_score: int
    open_comments: str
    sentiment_score: float = 0.0
    sentiment_label: str = "neutral"

    def __post_init__(self):
        object.__setattr__(self, 'sentiment_score', clamp_score(self.sentiment_score))
        object.__setattr__(self, 'sentiment_label', normalize_label(self.sentiment_label))

    @classmethod
    def from_sheet_row(
        cls, row: SheetRow, timestamp: datetime, score: float, label: str
    ) -> "ClassifiedEntry":
        """
        Combina a linha da planilha com o timestamp já interpretado e o sentimento.

        Args:
            row (SheetRow): Linha lida da planilha.
            timestamp (datetime): Instante UTC de row.timestamp.
            score (float): Score do classificador.
            label (str): Rótulo do classificador.
        """
        return cls(
            timestamp=timestamp,
            employee_name=row.employee_name,
            department=row.department,
            satisfaction_score=row.satisfaction_score,
            happiness_index=row.happiness_index,
            team_dynamics_score=row.team_dynamics_score,
            leadership_score=row.leadership_score,
            growth_opportunities_score=row.growth_opportunities_score,
            company_culture_score=row.company_culture_score,
            open_comments=row.open_comments,
            sentiment_score=score,
            sentiment_label=label,
        )


@dataclass(frozen=True)
class PersistedFeedback:
    """
    Registro durável de feedback, como gravado no armazenamento.

    Attributes:
        entry (ClassifiedEntry): Conteúdo classificado.
        feedback_id (str): Identificador gerado (UUID4).
        processed_at (str): Quando a sincronização processou a linha (ISO 8601).
        created_at (str): Quando o registro foi criado no armazenamento (ISO 8601).
    """
    entry: ClassifiedEntry
    feedback_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    processed_at: str = field(default_factory=lambda: _isoformat(datetime.now(timezone.utc)))
    created_at: str = field(default_factory=lambda: _isoformat(datetime.now(timezone.utc)))

    def to_row(self) -> list:
        """
        Converte para lista de valores na ordem de FEEDBACK_TABLE_HEADER.

        Returns:
            list: Valores para inserir no Google Sheets.
        """
        entry = self.entry
        return [
            self.feedback_id,
            _isoformat(entry.timestamp),
            entry.employee_name,
            entry.department,
            entry.satisfaction_score,
            entry.happiness_index,
            entry.team_dynamics_score,
            entry.leadership_score,
            entry.growth_opportunities_score,
            entry.company_culture_score,
            entry.open_comments,
            entry.sentiment_score,
            entry.sentiment_label,
            self.processed_at,
            self.created_at,
        ]
