import logging
import time
from collections.abc import Callable
from typing import TypeVar

from gspread.exceptions import SpreadsheetNotFound, WorksheetNotFound

logger = logging.getLogger(__name__)

ReturnType = TypeVar("ReturnType")

# Erros lógicos: repetir a chamada não muda o resultado
NON_RETRYABLE_EXCEPTIONS = (
    WorksheetNotFound,
    SpreadsheetNotFound,
    ValueError,
    KeyError,
    TypeError,
)

_last_request_time: float = 0.0
_min_interval_seconds: float = 0.0


def configure_rate_limiting(min_interval_seconds: float) -> None:
    """
    Define o intervalo mínimo entre duas requisições à API do Google Sheets.

    Args:
        min_interval_seconds: Intervalo mínimo em segundos (0 desativa).
    """
    global _min_interval_seconds
    _min_interval_seconds = max(0.0, min_interval_seconds)
    logger.info("Rate limiting configurado: %.2fs entre requisições", _min_interval_seconds)


def _apply_rate_limit() -> None:
    global _last_request_time

    if _min_interval_seconds > 0:
        elapsed = time.time() - _last_request_time
        wait = _min_interval_seconds - elapsed
        if wait > 0:
            logger.debug("Rate limiting: aguardando %.3fs", wait)
            time.sleep(wait)

    _last_request_time = time.time()


def retry(
    function: Callable[[], ReturnType],
    tries: int = 3,
    delay: float = 1.0,
    backoff: float = 2.0,
) -> ReturnType:
    """
    Executa uma chamada à API repetindo-a com atraso exponencial em caso de falha transitória.

    Exceções em NON_RETRYABLE_EXCEPTIONS são relançadas imediatamente. Use
    tries=1 para operações não idempotentes (ex: inserção em lote), em que
    repetir após uma resposta perdida poderia duplicar linhas.

    Args:
        function (Callable): A chamada a ser executada.
        tries (int): Número máximo de tentativas.
        delay (float): Atraso inicial entre tentativas, em segundos.
        backoff (float): Fator multiplicativo aplicado ao atraso após cada falha.

    Returns:
        O resultado da chamada, se bem-sucedida.
    """
    exception: Exception | None = None
    wait = delay

    for attempt in range(1, tries + 1):
        try:
            _apply_rate_limit()
            return function()

        except NON_RETRYABLE_EXCEPTIONS:
            raise

        except Exception as e:
            exception = e
            if attempt == tries:
                logger.error(
                    "Chamada falhou após %d tentativa(s): %s", tries, str(e), exc_info=True
                )
                break

            logger.warning(
                "Tentativa %d falhou com erro: %s. Retentando em %.2f segundos...",
                attempt,
                str(e),
                wait,
            )
            time.sleep(wait)
            wait *= backoff

    assert exception is not None
    raise exception
