"""
Lock consultivo de sincronização guardado na própria planilha de armazenamento.

Duas passadas simultâneas (ex: "sincronizar agora" manual sobrepondo a
execução agendada) leriam o mesmo high-water mark e inseririam as mesmas
linhas. O lock serializa as passadas: quem não consegue adquiri-lo desiste.

O lock tem TTL, então um processo que morre sem liberá-lo bloqueia novas
passadas no máximo por ttl_seconds.
"""
import logging
import time
from collections.abc import Callable

from gspread import Spreadsheet, Worksheet

from .operations import append_row, get_row, select_first_by_columns, update_row
from .worksheet import get_header_mapping, get_worksheet

logger = logging.getLogger(__name__)

LOCK_SHEET_NAME = "Sync Locks"
LOCK_HEADER = [
    "Nome do Lock",
    "ID do Detentor",
    "Timestamp de Aquisição",
    "Timestamp de Expiração",
    "Status",
]


class SyncLock:
    """
    Lock com TTL identificado por nome, com um detentor por vez.

    Attributes:
        lock_name (str): Identidade do job protegido (ex: "sync-google-sheets").
        holder_id (str): Identificador único de quem tenta adquirir o lock.
        ttl_seconds (int): Validade do lock após a aquisição.
    """

    def __init__(
        self,
        open_spreadsheet: Callable[[], Spreadsheet],
        lock_name: str,
        holder_id: str,
        ttl_seconds: int = 300,
        settle_seconds: float = 1.0,
    ):
        """
        Args:
            open_spreadsheet: Função que abre a planilha onde o lock é guardado.
            lock_name: Nome do lock.
            holder_id: ID deste processo.
            ttl_seconds: Validade do lock em segundos.
            settle_seconds: Espera antes de reler a linha para confirmar a posse.
        """
        self._open_spreadsheet = open_spreadsheet
        self.lock_name = lock_name
        self.holder_id = holder_id
        self.ttl_seconds = ttl_seconds
        self.settle_seconds = settle_seconds

    def _worksheet(self) -> Worksheet:
        return get_worksheet(
            spreadsheet=self._open_spreadsheet(),
            worksheet_name=LOCK_SHEET_NAME,
            header=LOCK_HEADER,
            create=True,
        )

    def acquire(self) -> bool:
        """
        Tenta adquirir (ou renovar) o lock.

        Returns:
            bool: True se este processo detém o lock ao final da chamada.
        """
        ws = self._worksheet()
        mapping = get_header_mapping(ws)

        now = time.time()
        expires_at = now + self.ttl_seconds

        result = select_first_by_columns(ws, mapping, {"Nome do Lock": self.lock_name})

        if result is None:
            logger.info("Lock '%s' não existe. Criando e adquirindo.", self.lock_name)
            new_row = [""] * len(LOCK_HEADER)
            new_row[mapping["Nome do Lock"]] = self.lock_name
            new_row[mapping["ID do Detentor"]] = self.holder_id
            new_row[mapping["Timestamp de Aquisição"]] = f"{now:.6f}"
            new_row[mapping["Timestamp de Expiração"]] = f"{expires_at:.6f}"
            new_row[mapping["Status"]] = "ACTIVE"
            append_row(ws, new_row)

            # Dois processos podem ter criado a linha ao mesmo tempo: vale a primeira
            time.sleep(self.settle_seconds)
            return self._confirm(ws, mapping)

        row_number, row_data = result
        row_data = row_data + [""] * (len(LOCK_HEADER) - len(row_data))

        current_holder = row_data[mapping["ID do Detentor"]]
        try:
            current_expiration = float(row_data[mapping["Timestamp de Expiração"]])
        except ValueError:
            current_expiration = 0.0

        is_free = current_expiration < now or row_data[mapping["Status"]] != "ACTIVE"

        if current_holder != self.holder_id and not is_free:
            logger.info(
                "Lock '%s' em uso por '%s' até %.0f.",
                self.lock_name,
                current_holder,
                current_expiration,
            )
            return False

        row_data[mapping["ID do Detentor"]] = self.holder_id
        row_data[mapping["Timestamp de Aquisição"]] = f"{now:.6f}"
        row_data[mapping["Timestamp de Expiração"]] = f"{expires_at:.6f}"
        row_data[mapping["Status"]] = "ACTIVE"
        update_row(ws, row_number, row_data)

        # Outro processo pode ter escrito na mesma linha ao mesmo tempo
        time.sleep(self.settle_seconds)
        check_row = get_row(ws, row_number)
        return self._is_holder(check_row, mapping)

    def _confirm(self, ws: Worksheet, mapping: dict[str, int]) -> bool:
        result = select_first_by_columns(ws, mapping, {"Nome do Lock": self.lock_name})
        return self._is_holder(result[1] if result else None, mapping)

    def _is_holder(self, row: list[str] | None, mapping: dict[str, int]) -> bool:
        if row and len(row) > mapping["ID do Detentor"] and row[mapping["ID do Detentor"]] == self.holder_id:
            logger.info("Lock '%s' adquirido por '%s'.", self.lock_name, self.holder_id)
            return True

        logger.info("Lock '%s' perdido para outro processo.", self.lock_name)
        return False

    def release(self) -> None:
        """
        Libera o lock se este processo for o detentor atual.

        Erros são registrados e não propagados: o TTL garante a liberação.
        """
        try:
            ws = self._worksheet()
            mapping = get_header_mapping(ws)
            result = select_first_by_columns(ws, mapping, {"Nome do Lock": self.lock_name})

            if result is None:
                logger.warning("Tentativa de liberar lock inexistente: '%s'.", self.lock_name)
                return

            row_number, row_data = result
            row_data = row_data + [""] * (len(LOCK_HEADER) - len(row_data))

            if row_data[mapping["ID do Detentor"]] != self.holder_id:
                logger.warning(
                    "Lock '%s' não pertence a '%s' (atual: '%s').",
                    self.lock_name,
                    self.holder_id,
                    row_data[mapping["ID do Detentor"]],
                )
                return

            row_data[mapping["Status"]] = "RELEASED"
            row_data[mapping["Timestamp de Expiração"]] = "0"
            update_row(ws, row_number, row_data)
            logger.info("Lock '%s' liberado.", self.lock_name)

        except Exception as e:
            logger.error(
                "Erro ao liberar o lock '%s': %s", self.lock_name, str(e), exc_info=True
            )
