"""
Leitor da aba de respostas do formulário no Google Sheets.
"""
import logging
from collections.abc import Callable

from gspread import Client, Spreadsheet

from ..errors import FetchError
from ..gateway import Token, authorize, get_range_values
from .response_schema import RESPONSES_HEADER, RESPONSES_SCHEMA_VERSION, SheetRow

logger = logging.getLogger(__name__)

DEFAULT_RANGE = "Form Responses 1!A:K"


def _normalize(label: str) -> str:
    return " ".join(label.split()).casefold()


def check_header(header: list[str], strict: bool) -> None:
    """
    Confere o cabeçalho da aba contra o schema versionado.

    Menos colunas que o schema sempre falha: o mapeamento posicional
    zeraria campos silenciosamente. Com strict, os nomes também precisam
    bater (sem diferenciar maiúsculas/espaços).

    Raises:
        FetchError: Se o cabeçalho não satisfizer o schema.
    """
    if len(header) < len(RESPONSES_HEADER):
        raise FetchError(
            f"Cabeçalho da planilha tem {len(header)} colunas; o schema "
            f"v{RESPONSES_SCHEMA_VERSION} exige {len(RESPONSES_HEADER)}: {RESPONSES_HEADER}"
        )

    if not strict:
        return

    mismatches = [
        f"coluna {index + 1}: esperado '{expected}', encontrado '{found}'"
        for index, (expected, found) in enumerate(zip(RESPONSES_HEADER, header))
        if _normalize(expected) != _normalize(found)
    ]
    if mismatches:
        raise FetchError(
            f"Cabeçalho da planilha não corresponde ao schema v{RESPONSES_SCHEMA_VERSION}: "
            + "; ".join(mismatches)
        )


class ResponseReader:
    """
    Busca todas as respostas do intervalo configurado e as converte em SheetRow.

    As linhas saem na ordem da planilha (de cima para baixo), que não é
    necessariamente cronológica.
    """

    def __init__(
        self,
        spreadsheet_id: str,
        range_name: str = DEFAULT_RANGE,
        strict_header: bool = False,
        tries: int = 3,
        client_factory: Callable[[Token], Client] = authorize,
    ):
        """
        Args:
            spreadsheet_id (str): ID da planilha de respostas.
            range_name (str): Intervalo A1 lido a cada passada.
            strict_header (bool): Exige nomes de coluna idênticos ao schema.
            tries (int): Tentativas para erros transitórios de leitura.
            client_factory: Cria o cliente gspread a partir do token.
        """
        self.spreadsheet_id = spreadsheet_id
        self.range_name = range_name
        self.strict_header = strict_header
        self.tries = tries
        self._client_factory = client_factory

    def _open(self, token: Token) -> Spreadsheet:
        client = self._client_factory(token)
        return client.open_by_key(self.spreadsheet_id)

    def fetch(self, token: Token) -> list[SheetRow]:
        """
        Lê o intervalo inteiro, descarta o cabeçalho e decodifica as linhas.

        Args:
            token (Token): Bearer token da passada atual.

        Returns:
            list[SheetRow]: Respostas na ordem da planilha.

        Raises:
            FetchError: Em falha de transporte/API ou cabeçalho fora do schema.
        """
        try:
            spreadsheet = self._open(token)
            values = get_range_values(spreadsheet, self.range_name, tries=self.tries)
        except Exception as e:
            raise FetchError(f"Falha ao ler '{self.range_name}': {e}") from e

        if not values:
            logger.info("Intervalo '%s' está vazio.", self.range_name)
            return []

        header, *data = values
        check_header(header, self.strict_header)

        rows = [
            SheetRow.from_row(row)
            for row in data
            if any(str(cell).strip() for cell in row)
        ]
        logger.info("%d respostas lidas de '%s'.", len(rows), self.range_name)
        return rows
