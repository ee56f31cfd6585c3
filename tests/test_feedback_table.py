"""Testes para os registros de feedback e a FeedbackTable."""
from datetime import datetime, timezone
from unittest.mock import Mock, patch

import pytest

from feedsync.errors import StoreError
from feedsync.tables.feedback_schema import (
    FEEDBACK_TABLE_HEADER,
    ClassifiedEntry,
    PersistedFeedback,
    clamp_score,
)
from feedsync.tables.feedback_table import FeedbackTable
from feedsync.tables.response_schema import SheetRow

UTC = timezone.utc


def make_entry(timestamp=datetime(2024, 1, 2, tzinfo=UTC), score=0.5, label="positive"):
    row = SheetRow.from_row(["", "Ana", "RH", "8", "7", "6", "5", "4", "3", "great"])
    return ClassifiedEntry.from_sheet_row(row, timestamp, score, label)


class TestClassifiedEntry:
    """Testes para ClassifiedEntry."""

    @pytest.mark.parametrize(
        "raw, expected", [(2.5, 1.0), (-7, -1.0), (0.3, 0.3), ("abc", 0.0), (None, 0.0), (float("nan"), 0.0),
         (10 ** 400, 1.0), (-(10 ** 400), -1.0)]
    )
    def test_score_is_clamped(self, raw, expected):
        """O score deve ficar sempre em [-1, 1]."""
        assert make_entry(score=raw).sentiment_score == expected
        assert clamp_score(raw) == expected

    def test_invalid_label_becomes_neutral(self):
        """Rótulo fora do conjunto válido deve virar neutral."""
        assert make_entry(label="mixed").sentiment_label == "neutral"

    def test_entry_is_immutable(self):
        """ClassifiedEntry não pode ser alterada após criada."""
        entry = make_entry()

        with pytest.raises(Exception):  # FrozenInstanceError
            entry.sentiment_label = "negative"


class TestPersistedFeedback:
    """Testes para PersistedFeedback."""

    def test_to_row_follows_header(self):
        """A linha deve seguir a ordem de FEEDBACK_TABLE_HEADER."""
        record = PersistedFeedback(
            make_entry(), feedback_id="id-1", processed_at="p", created_at="c"
        )

        row = dict(zip(FEEDBACK_TABLE_HEADER, record.to_row()))

        assert row["id"] == "id-1"
        assert row["timestamp"] == "2024-01-02T00:00:00+00:00"
        assert row["employee_name"] == "Ana"
        assert row["satisfaction_score"] == 8
        assert row["company_culture_score"] == 3
        assert row["sentiment_score"] == 0.5
        assert row["sentiment_label"] == "positive"
        assert (row["processed_at"], row["created_at"]) == ("p", "c")

    def test_generated_ids_are_unique(self):
        """Cada registro deve receber um identificador próprio."""
        entry = make_entry()

        assert PersistedFeedback(entry).feedback_id != PersistedFeedback(entry).feedback_id


@pytest.fixture
def table():
    """FeedbackTable com a aba mockada."""
    worksheet = Mock()
    worksheet.title = "Feedback"
    with patch("feedsync.tables.feedback_table.get_worksheet", return_value=worksheet) as get_ws:
        feedback_table = FeedbackTable(Mock())
        feedback_table.mock_worksheet = worksheet
        feedback_table.mock_get_worksheet = get_ws
        yield feedback_table


class TestLatestTimestamp:
    """Testes para FeedbackTable.latest_timestamp."""

    def test_empty_store_returns_none(self, table):
        """Armazenamento só com cabeçalho deve retornar None."""
        table.mock_worksheet.col_values.return_value = ["timestamp"]

        assert table.latest_timestamp() is None

    def test_returns_maximum_not_last(self, table):
        """Deve retornar o maior timestamp, não o último gravado."""
        table.mock_worksheet.col_values.return_value = [
            "timestamp",
            "2024-01-03T00:00:00+00:00",
            "2024-01-05T00:00:00+00:00",
            "2024-01-04T00:00:00+00:00",
            "",
            "lixo",
        ]

        assert table.latest_timestamp() == datetime(2024, 1, 5, tzinfo=UTC)
        table.mock_worksheet.col_values.assert_called_once_with(
            FEEDBACK_TABLE_HEADER.index("timestamp") + 1
        )

    def test_reads_fresh_every_call(self, table):
        """O high-water mark não deve ser guardado entre chamadas."""
        table.mock_worksheet.col_values.side_effect = [
            ["timestamp"],
            ["timestamp", "2024-01-03T00:00:00+00:00"],
        ]

        assert table.latest_timestamp() is None
        assert table.latest_timestamp() == datetime(2024, 1, 3, tzinfo=UTC)

    def test_read_error_raises_store_error(self, table):
        """Falha de leitura deve virar StoreError."""
        table.mock_worksheet.col_values.side_effect = ValueError("bad request")

        with pytest.raises(StoreError, match="último timestamp"):
            table.latest_timestamp()

    def test_open_error_raises_store_error(self):
        """Falha ao abrir a planilha de armazenamento deve virar StoreError."""
        feedback_table = FeedbackTable(Mock(side_effect=RuntimeError("sem acesso")))

        with pytest.raises(StoreError, match="sem acesso"):
            feedback_table.latest_timestamp()


class TestInsertBatch:
    """Testes para FeedbackTable.insert_batch."""

    def test_single_append_for_whole_batch(self, table):
        """O lote inteiro deve ser gravado em uma única chamada."""
        entries = [make_entry(), make_entry(datetime(2024, 1, 3, tzinfo=UTC))]

        assert table.insert_batch(entries) == 2

        table.mock_worksheet.append_rows.assert_called_once()
        rows = table.mock_worksheet.append_rows.call_args[0][0]
        assert [row[1] for row in rows] == [
            "2024-01-02T00:00:00+00:00",
            "2024-01-03T00:00:00+00:00",
        ]
        assert rows[0][0] != rows[1][0]

    def test_empty_batch_does_not_touch_sheet(self, table):
        """Lote vazio não deve abrir a aba nem escrever."""
        assert table.insert_batch([]) == 0

        table.mock_get_worksheet.assert_not_called()

    def test_rejected_batch_raises_store_error(self, table):
        """Escrita rejeitada deve virar StoreError, sem nova tentativa."""
        table.mock_worksheet.append_rows.side_effect = RuntimeError("quota exceeded")

        with pytest.raises(StoreError, match="quota exceeded"):
            table.insert_batch([make_entry()])

        assert table.mock_worksheet.append_rows.call_count == 1
