"""Testes unitários para o módulo operations."""

from unittest.mock import Mock, patch

import pytest

from feedsync.gateway.operations import (
    append_row,
    append_rows,
    get_column_values,
    get_range_values,
    get_row,
    select_first_by_columns,
    update_row,
)


@pytest.fixture
def mock_worksheet():
    """Aba mockada."""
    worksheet = Mock()
    worksheet.title = "Feedback"
    return worksheet


class TestGetRangeValues:
    """Testes para get_range_values."""

    def test_returns_values(self):
        """Deve retornar as linhas do intervalo."""
        spreadsheet = Mock()
        spreadsheet.values_get.return_value = {"range": "A1:K3", "values": [["h"], ["1"]]}

        assert get_range_values(spreadsheet, "Form Responses 1!A:K") == [["h"], ["1"]]
        spreadsheet.values_get.assert_called_once_with("Form Responses 1!A:K")

    def test_empty_range_returns_empty_list(self):
        """Intervalo sem valores deve virar lista vazia."""
        spreadsheet = Mock()
        spreadsheet.values_get.return_value = {"range": "A1:K1"}

        assert get_range_values(spreadsheet, "A:K") == []

    @patch("feedsync.gateway._retry.time.sleep")
    def test_retries_transient_errors(self, mock_sleep):
        """Deve repetir erros transitórios até o limite de tentativas."""
        spreadsheet = Mock()
        spreadsheet.values_get.side_effect = [RuntimeError("503"), {"values": [["h"]]}]

        assert get_range_values(spreadsheet, "A:K", tries=2) == [["h"]]
        assert spreadsheet.values_get.call_count == 2


class TestColumnAndRowReads:
    """Testes para leituras de coluna e linha."""

    def test_get_column_values(self, mock_worksheet):
        """Deve ler a coluna pelo índice 1-based."""
        mock_worksheet.col_values.return_value = ["timestamp", "2024-01-01T00:00:00+00:00"]

        assert get_column_values(mock_worksheet, 2) == ["timestamp", "2024-01-01T00:00:00+00:00"]
        mock_worksheet.col_values.assert_called_once_with(2)

    def test_get_row_returns_none_for_empty_row(self, mock_worksheet):
        """Linha vazia deve virar None."""
        mock_worksheet.row_values.return_value = []

        assert get_row(mock_worksheet, 5) is None

    def test_get_row_returns_values(self, mock_worksheet):
        """Deve retornar os valores da linha."""
        mock_worksheet.row_values.return_value = ["a", "b"]

        assert get_row(mock_worksheet, 2) == ["a", "b"]


class TestSelectFirstByColumns:
    """Testes para select_first_by_columns."""

    def test_finds_first_match_after_header(self, mock_worksheet):
        """Deve pular o cabeçalho e retornar a primeira linha compatível."""
        mock_worksheet.get_all_values.return_value = [
            ["Nome", "Status"],
            ["outro", "ACTIVE"],
            ["sync", "RELEASED"],
            ["sync", "ACTIVE"],
        ]

        result = select_first_by_columns(mock_worksheet, {"Nome": 0, "Status": 1}, {"Nome": "sync"})

        assert result == (3, ["sync", "RELEASED"])

    def test_short_rows_compare_as_empty(self, mock_worksheet):
        """Células ausentes devem ser tratadas como vazias."""
        mock_worksheet.get_all_values.return_value = [["Nome", "Status"], ["sync"]]

        result = select_first_by_columns(
            mock_worksheet, {"Nome": 0, "Status": 1}, {"Nome": "sync", "Status": ""}
        )

        assert result == (2, ["sync"])

    def test_returns_none_without_match(self, mock_worksheet):
        """Deve retornar None se nenhuma linha satisfizer os filtros."""
        mock_worksheet.get_all_values.return_value = [["Nome"], ["outro"]]

        assert select_first_by_columns(mock_worksheet, {"Nome": 0}, {"Nome": "sync"}) is None


class TestWrites:
    """Testes para escritas."""

    def test_append_rows_single_request(self, mock_worksheet):
        """Deve gravar todas as linhas em uma única chamada."""
        rows = [["1", "a"], ["2", "b"]]

        append_rows(mock_worksheet, rows)

        mock_worksheet.append_rows.assert_called_once_with(rows, value_input_option="RAW")

    def test_append_rows_empty_is_noop(self, mock_worksheet):
        """Lista vazia não deve gerar requisição."""
        append_rows(mock_worksheet, [])

        mock_worksheet.append_rows.assert_not_called()

    def test_append_rows_is_not_retried(self, mock_worksheet):
        """Falha na escrita em lote não deve ser repetida (evita duplicação)."""
        mock_worksheet.append_rows.side_effect = RuntimeError("timeout")

        with pytest.raises(RuntimeError):
            append_rows(mock_worksheet, [["1"]])

        assert mock_worksheet.append_rows.call_count == 1

    def test_append_row(self, mock_worksheet):
        """Deve adicionar uma linha."""
        append_row(mock_worksheet, ["a"])

        mock_worksheet.append_row.assert_called_once_with(["a"])

    def test_update_row(self, mock_worksheet):
        """Deve substituir a linha inteira pelo intervalo da linha."""
        update_row(mock_worksheet, 4, ["a", "b"])

        mock_worksheet.update.assert_called_once_with(values=[["a", "b"]], range_name="4:4")
