"""Testes para o ResponseReader (leitura da planilha de respostas)."""
from unittest.mock import Mock

import pytest

from feedsync.errors import FetchError
from feedsync.gateway import Token
from feedsync.tables.response_schema import RESPONSES_HEADER
from feedsync.tables.response_table import ResponseReader, check_header

FORM_HEADER = [
    "Carimbo de data/hora",
    "Nome",
    "Departamento",
    "Satisfação",
    "Felicidade",
    "Time",
    "Liderança",
    "Crescimento",
    "Cultura",
    "Comentários",
]


def make_reader(values=None, error=None, **kwargs):
    """Cria um ResponseReader cujo cliente gspread é mockado."""
    spreadsheet = Mock()
    spreadsheet.title = "Respostas"
    if error is not None:
        spreadsheet.values_get.side_effect = error
    else:
        spreadsheet.values_get.return_value = {"values": values} if values is not None else {}
    client = Mock()
    client.open_by_key.return_value = spreadsheet
    factory = Mock(return_value=client)
    reader = ResponseReader("sheet_id", client_factory=factory, tries=1, **kwargs)
    return reader, factory, client, spreadsheet


class TestFetch:
    """Testes para ResponseReader.fetch."""

    def test_discards_header_and_keeps_order(self):
        """Deve descartar o cabeçalho e manter a ordem da planilha."""
        reader, factory, client, spreadsheet = make_reader(
            [
                FORM_HEADER,
                ["1/3/2024 10:00:00", "B", "TI", "5"],
                ["1/2/2024 10:00:00", "A", "RH", "9"],
            ]
        )
        token = Token(value="t")

        rows = reader.fetch(token)

        assert [row.employee_name for row in rows] == ["B", "A"]
        assert rows[1].satisfaction_score == 9
        factory.assert_called_once_with(token)
        client.open_by_key.assert_called_once_with("sheet_id")
        spreadsheet.values_get.assert_called_once_with("Form Responses 1!A:K")

    def test_blank_rows_are_skipped(self):
        """Linhas completamente vazias devem ser ignoradas."""
        reader, *_ = make_reader([FORM_HEADER, ["", " "], [], ["2024-01-02", "A"]])

        rows = reader.fetch(Token(value="t"))

        assert len(rows) == 1

    def test_empty_sheet_returns_no_rows(self):
        """Planilha sem valores deve retornar lista vazia."""
        reader, *_ = make_reader(None)

        assert reader.fetch(Token(value="t")) == []

    def test_header_only_returns_no_rows(self):
        """Só o cabeçalho deve retornar lista vazia."""
        reader, *_ = make_reader([FORM_HEADER])

        assert reader.fetch(Token(value="t")) == []

    def test_transport_error_raises_fetch_error(self):
        """Falha na API deve virar FetchError."""
        reader, *_ = make_reader(error=RuntimeError("500 Internal Error"))

        with pytest.raises(FetchError, match="500 Internal Error"):
            reader.fetch(Token(value="t"))

    def test_open_error_raises_fetch_error(self):
        """Falha ao abrir a planilha deve virar FetchError."""
        reader, factory, client, _ = make_reader([FORM_HEADER])
        client.open_by_key.side_effect = RuntimeError("403 Forbidden")

        with pytest.raises(FetchError, match="403"):
            reader.fetch(Token(value="t"))

    def test_narrow_header_fails_fast(self):
        """Cabeçalho com menos colunas que o schema deve falhar."""
        reader, *_ = make_reader([FORM_HEADER[:6], ["2024-01-02", "A"]])

        with pytest.raises(FetchError, match="6 colunas"):
            reader.fetch(Token(value="t"))


class TestCheckHeader:
    """Testes para check_header."""

    def test_lenient_accepts_any_labels(self):
        """Sem strict, apenas o número de colunas é conferido."""
        check_header(FORM_HEADER, strict=False)

    def test_extra_columns_are_accepted(self):
        """Colunas a mais (ex: coluna K) não devem falhar."""
        check_header(RESPONSES_HEADER + ["Email"], strict=True)

    def test_strict_accepts_case_and_space_differences(self):
        """Com strict, diferenças de caixa e espaços são toleradas."""
        check_header([f"  {label.upper()} " for label in RESPONSES_HEADER], strict=True)

    def test_strict_rejects_reordered_columns(self):
        """Com strict, colunas trocadas devem falhar com descrição."""
        header = list(RESPONSES_HEADER)
        header[3], header[4] = header[4], header[3]

        with pytest.raises(FetchError, match="coluna 4"):
            check_header(header, strict=True)
