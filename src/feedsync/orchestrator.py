import functools
import logging
import os
import socket
import uuid
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from datetime import datetime, timezone, tzinfo
from typing import Protocol
from zoneinfo import ZoneInfo

from gspread import Spreadsheet

from .config import Config
from .errors import AuthError, FetchError, StoreError, SyncError
from .gateway import (
    SyncLock,
    Token,
    TokenMinter,
    configure_rate_limiting,
    get_spreadsheet,
    load_service_account_info,
)
from .sentiment import SentimentClassifier, build_classifier
from .tables.feedback_schema import ClassifiedEntry
from .tables.feedback_table import FeedbackStore, FeedbackTable
from .tables.response_schema import SheetRow
from .tables.response_table import ResponseReader

logger = logging.getLogger(__name__)

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
LOCK_NAME = "sync-google-sheets"


class Minter(Protocol):
    def mint(self) -> Token:
        ...


class Reader(Protocol):
    def fetch(self, token: Token) -> list[SheetRow]:
        ...


@dataclass(frozen=True)
class SyncResult:
    """Resultado de uma passada bem-sucedida (0 processados também é sucesso)."""
    processed: int

    @property
    def message(self) -> str:
        return f"Successfully processed {self.processed} new entries"

    def to_dict(self) -> dict:
        return {"success": True, "processed": self.processed, "message": self.message}


class SyncOrchestrator:
    """
    Executa passadas de sincronização planilha de respostas -> armazenamento.

    Fluxo de uma passada:
    1. Emite o token (AuthError encerra a passada)
    2. Lê todas as respostas (FetchError encerra a passada)
    3. Lê o high-water mark do armazenamento (vazio = epoch)
    4. Mantém só linhas com timestamp válido e estritamente maior que ele
    5. Classifica o comentário de cada linha, preservando a ordem da planilha
    6. Grava tudo em um único insert em lote (StoreError encerra a passada)

    Qualquer erro das etapas 1, 2, 3 e 6 vira um SyncError; nenhuma etapa
    seguinte é executada e nada é gravado.
    """

    def __init__(
        self,
        minter: Minter,
        reader: Reader,
        store: FeedbackStore,
        classifier: SentimentClassifier,
        lock: SyncLock | None = None,
        local_tz: tzinfo = timezone.utc,
        classify_workers: int = 1,
    ):
        """
        Args:
            minter: Emite o bearer token da planilha de respostas.
            reader: Lê as respostas com o token.
            store: Armazenamento de feedback (high-water mark e insert em lote).
            classifier: Estratégia de classificação de sentimento.
            lock: Lock consultivo entre passadas concorrentes (opcional).
            local_tz: Fuso dos timestamps sem offset da planilha.
            classify_workers: Threads para classificar linhas em paralelo.
        """
        self.minter = minter
        self.reader = reader
        self.store = store
        self.classifier = classifier
        self.lock = lock
        self.local_tz = local_tz
        self.classify_workers = classify_workers

    @classmethod
    def from_config(cls, config: Config | None = None) -> "SyncOrchestrator":
        """
        Monta o orquestrador com os componentes reais do Google Sheets e da OpenAI.

        Crie um orquestrador por passada: a conexão com o armazenamento fica
        guardada na instância.
        """
        config = config or Config()

        configure_rate_limiting(config.sheets_min_interval)

        @functools.cache
        def open_store() -> Spreadsheet:
            if config.store_service_account_file:
                info = load_service_account_info(service_account_file=config.store_service_account_file)
            else:
                info = load_service_account_info(
                    config.service_account_json, config.service_account_file
                )
            return get_spreadsheet(config.store_spreadsheet_id, info)

        lock = None
        if config.lock_ttl_seconds > 0:
            lock = SyncLock(
                open_store,
                LOCK_NAME,
                holder_id=f"{socket.gethostname()}:{os.getpid()}:{uuid.uuid4().hex[:8]}",
                ttl_seconds=config.lock_ttl_seconds,
            )

        return cls(
            minter=TokenMinter(config.service_account_json, config.service_account_file),
            reader=ResponseReader(
                config.spreadsheet_id,
                config.sheet_range,
                strict_header=config.strict_header,
            ),
            store=FeedbackTable(open_store),
            classifier=build_classifier(
                config.openai_api_key,
                model=config.openai_model,
                backend=config.sentiment_backend,
                timeout=config.openai_timeout,
                max_retries=config.openai_max_retries,
            ),
            lock=lock,
            local_tz=ZoneInfo(config.sheet_timezone),
            classify_workers=config.classify_workers,
        )

    def run(self) -> SyncResult:
        """
        Executa uma passada completa de sincronização.

        Returns:
            SyncResult: Quantidade de entradas novas gravadas.

        Raises:
            SyncError: Se qualquer etapa com efeito externo falhar, ou se outra
                passada detiver o lock.
        """
        if self.lock is None:
            return self._run_pass()

        try:
            acquired = self.lock.acquire()
        except Exception as e:
            logger.error("Erro ao adquirir o lock de sincronização: %s", e, exc_info=True)
            raise SyncError(f"Falha ao adquirir o lock de sincronização: {e}") from e

        if not acquired:
            raise SyncError("Outra sincronização está em andamento. Tente novamente mais tarde.")

        try:
            return self._run_pass()
        finally:
            self.lock.release()

    def _run_pass(self) -> SyncResult:
        logger.info("Iniciando sincronização do Google Sheets...")

        try:
            token = self.minter.mint()
            logger.info("Token de acesso ao Google Sheets obtido")

            rows = self.reader.fetch(token)
            logger.info("%d linhas obtidas do Google Sheets", len(rows))

            # Lido a cada passada, sempre antes de decidir o que gravar
            high_water_mark = self.store.latest_timestamp() or EPOCH
            logger.info("Último timestamp no armazenamento: %s", high_water_mark.isoformat())

            candidates = self._select_new_rows(rows, high_water_mark)
            entries = self._classify(candidates)
            logger.info("Processando %d novas entradas", len(entries))

            if entries:
                self._renew_lock()
                self.store.insert_batch(entries)
                logger.info("%d novas entradas inseridas com sucesso", len(entries))

        except (AuthError, FetchError, StoreError) as e:
            logger.error("Erro na sincronização (%s): %s", type(e).__name__, e, exc_info=True)
            raise SyncError(str(e)) from e

        return SyncResult(processed=len(entries))

    def _renew_lock(self) -> None:
        # O TTL pode ter vencido durante a classificação
        if self.lock is None:
            return

        try:
            renewed = self.lock.acquire()
        except Exception as e:
            logger.error("Erro ao renovar o lock de sincronização: %s", e, exc_info=True)
            raise SyncError(f"Falha ao renovar o lock de sincronização: {e}") from e

        if not renewed:
            raise SyncError(
                "Lock de sincronização perdido durante a passada. Nenhuma entrada foi gravada."
            )

    def _select_new_rows(
        self, rows: list[SheetRow], high_water_mark: datetime
    ) -> list[tuple[SheetRow, datetime]]:
        selected: list[tuple[SheetRow, datetime]] = []
        invalid = 0

        for row in rows:
            instant = row.parsed_timestamp(self.local_tz)
            if instant is None:
                invalid += 1
                continue
            if instant <= high_water_mark:
                continue
            selected.append((row, instant))

        if invalid:
            logger.warning("%d linhas ignoradas por timestamp vazio ou inválido", invalid)
        return selected

    def _classify(self, candidates: list[tuple[SheetRow, datetime]]) -> list[ClassifiedEntry]:
        texts = [row.open_comments for row, _ in candidates]

        if self.classify_workers > 1 and len(texts) > 1:
            with ThreadPoolExecutor(max_workers=self.classify_workers) as executor:
                sentiments = list(executor.map(self.classifier.classify, texts))
        else:
            sentiments = [self.classifier.classify(text) for text in texts]

        return [
            ClassifiedEntry.from_sheet_row(row, instant, sentiment.score, sentiment.label)
            for (row, instant), sentiment in zip(candidates, sentiments)
        ]
