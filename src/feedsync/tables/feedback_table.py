"""
Armazenamento de feedback classificado.

FeedbackStore é tudo que o orquestrador exige de um armazenamento: ler o
high-water mark e inserir um lote de forma atômica. FeedbackTable implementa
esse contrato sobre uma aba do Google Sheets.
"""
import logging
from collections.abc import Callable, Sequence
from datetime import datetime, timezone
from typing import Protocol

from gspread import Spreadsheet, Worksheet

from ..errors import StoreError
from ..gateway import append_rows, get_column_values, get_worksheet
from .feedback_schema import (
    FEEDBACK_TABLE_HEADER,
    FEEDBACK_TABLE_NAME,
    ClassifiedEntry,
    PersistedFeedback,
)
from .response_schema import parse_timestamp

logger = logging.getLogger(__name__)


class FeedbackStore(Protocol):
    def latest_timestamp(self) -> datetime | None:
        """Maior timestamp já persistido, ou None se o armazenamento estiver vazio."""
        ...

    def insert_batch(self, entries: Sequence[ClassifiedEntry]) -> int:
        """Insere todas as entradas ou nenhuma; retorna quantas foram gravadas."""
        ...


class FeedbackTable:
    """
    Aba "Feedback" da planilha de armazenamento.

    A aba é aberta na primeira operação (e criada com o cabeçalho se não
    existir), de modo que falhas de conexão aparecem como StoreError dentro
    da passada. O registro é append-only: nenhuma linha existente é alterada.
    """

    def __init__(
        self,
        open_spreadsheet: Callable[[], Spreadsheet],
        worksheet_name: str = FEEDBACK_TABLE_NAME,
    ):
        """
        Args:
            open_spreadsheet: Função que abre a planilha de armazenamento.
            worksheet_name: Nome da aba de feedback.
        """
        self._open_spreadsheet = open_spreadsheet
        self.worksheet_name = worksheet_name
        self._worksheet: Worksheet | None = None

    @property
    def worksheet(self) -> Worksheet:
        if self._worksheet is None:
            self._worksheet = get_worksheet(
                self._open_spreadsheet(),
                self.worksheet_name,
                FEEDBACK_TABLE_HEADER,
                create=True,
            )
            logger.info("Feedback Table inicializada (%s)", self.worksheet_name)
        return self._worksheet

    def latest_timestamp(self) -> datetime | None:
        """
        Lê a coluna de timestamp inteira e retorna o maior instante.

        Sempre consulta a planilha: o valor nunca é guardado entre passadas.

        Raises:
            StoreError: Se a leitura falhar.
        """
        try:
            column_index = FEEDBACK_TABLE_HEADER.index("timestamp") + 1
            values = get_column_values(self.worksheet, column_index)
        except Exception as e:
            raise StoreError(f"Falha ao ler o último timestamp de '{self.worksheet_name}': {e}") from e

        instants = [
            instant
            for instant in (parse_timestamp(value) for value in values[1:])
            if instant is not None
        ]
        if not instants:
            return None
        return max(instants)

    def insert_batch(self, entries: Sequence[ClassifiedEntry]) -> int:
        """
        Grava o lote inteiro em uma única requisição de append.

        Args:
            entries: Entradas classificadas, na ordem de importação.

        Returns:
            int: Número de registros gravados.

        Raises:
            StoreError: Se a escrita for rejeitada; nesse caso nada foi gravado.
        """
        if not entries:
            return 0

        now = datetime.now(timezone.utc).isoformat()

        rows = [
            PersistedFeedback(entry, processed_at=now, created_at=now).to_row()
            for entry in entries
        ]

        try:
            append_rows(self.worksheet, rows)
        except Exception as e:
            raise StoreError(
                f"Falha ao inserir {len(rows)} registros em '{self.worksheet_name}': {e}"
            ) from e

        logger.info("%d registros inseridos em '%s'.", len(rows), self.worksheet_name)
        return len(rows)
