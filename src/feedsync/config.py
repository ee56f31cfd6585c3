from dataclasses import dataclass
import os
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from dotenv import load_dotenv

# Carrega as variáveis de ambiente do arquivo .env
load_dotenv()

_TRUE_VALUES = {"1", "true", "yes", "on", "sim"}


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return default
    return value.strip().lower() in _TRUE_VALUES


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return default
    try:
        return int(value)
    except ValueError:
        raise ValueError(f"A variável de ambiente '{name}' deve ser um inteiro: {value!r}")


def _env_float(name: str, default: float) -> float:
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return default
    try:
        return float(value)
    except ValueError:
        raise ValueError(f"A variável de ambiente '{name}' deve ser um número: {value!r}")


@dataclass(frozen=True)
class Config:
    """
    Configurações da sincronização, obtidas de variáveis de ambiente.

    Valores passados diretamente têm prioridade sobre o ambiente. Só a
    presença do ID da planilha é validada aqui: credencial ausente é um
    AuthError da passada, e a chave da OpenAI é opcional.

    Attributes:
        spreadsheet_id (str | None): Planilha de respostas (SPREADSHEET_ID).
        service_account_json (str | None): JSON da service account (GOOGLE_SERVICE_ACCOUNT_JSON).
        service_account_file (str | None): Arquivo da service account (SERVICE_ACCOUNT_FILE).
        store_spreadsheet_id (str | None): Planilha de armazenamento (STORE_SPREADSHEET_ID, padrão SPREADSHEET_ID).
        store_service_account_file (str | None): Credencial do armazenamento (STORE_SERVICE_ACCOUNT_FILE, padrão a mesma da leitura).
        sheet_range (str | None): Intervalo lido (SHEET_RANGE).
        sheet_timezone (str | None): Fuso dos timestamps sem offset (SHEET_TIMEZONE).
        strict_header (bool | None): Exige cabeçalho idêntico ao schema (SHEET_STRICT_HEADER).
        openai_api_key (str | None): Chave da OpenAI (OPENAI_API_KEY).
        openai_model (str | None): Modelo de chat (OPENAI_MODEL).
        openai_timeout (float | None): Limite em segundos de cada requisição à OpenAI (OPENAI_TIMEOUT).
        openai_max_retries (int | None): Retentativas internas do cliente OpenAI (OPENAI_MAX_RETRIES).
        sentiment_backend (str | None): "keyword" força a heurística (SENTIMENT_BACKEND).
        lock_ttl_seconds (int | None): TTL do lock de sincronização; 0 desativa (SYNC_LOCK_TTL).
        classify_workers (int | None): Threads de classificação por passada (CLASSIFY_WORKERS).
        sheets_min_interval (float | None): Intervalo mínimo entre requisições ao Sheets (SHEETS_MIN_INTERVAL).
    """
    spreadsheet_id: str | None = None
    service_account_json: str | None = None
    service_account_file: str | None = None
    store_spreadsheet_id: str | None = None
    store_service_account_file: str | None = None
    sheet_range: str | None = None
    sheet_timezone: str | None = None
    strict_header: bool | None = None
    openai_api_key: str | None = None
    openai_model: str | None = None
    openai_timeout: float | None = None
    openai_max_retries: int | None = None
    sentiment_backend: str | None = None
    lock_ttl_seconds: int | None = None
    classify_workers: int | None = None
    sheets_min_interval: float | None = None

    def __post_init__(self):
        defaults = {
            'spreadsheet_id': lambda: os.getenv('SPREADSHEET_ID') or os.getenv('GOOGLE_SHEETS_ID'),
            'service_account_json': lambda: os.getenv('GOOGLE_SERVICE_ACCOUNT_JSON'),
            'service_account_file': lambda: os.getenv('SERVICE_ACCOUNT_FILE'),
            'store_service_account_file': lambda: os.getenv('STORE_SERVICE_ACCOUNT_FILE'),
            'sheet_range': lambda: os.getenv('SHEET_RANGE', 'Form Responses 1!A:K'),
            'sheet_timezone': lambda: os.getenv('SHEET_TIMEZONE', 'UTC'),
            'strict_header': lambda: _env_bool('SHEET_STRICT_HEADER', False),
            'openai_api_key': lambda: os.getenv('OPENAI_API_KEY'),
            'openai_model': lambda: os.getenv('OPENAI_MODEL', 'gpt-4o-mini'),
            'openai_timeout': lambda: _env_float('OPENAI_TIMEOUT', 30.0),
            'openai_max_retries': lambda: _env_int('OPENAI_MAX_RETRIES', 2),
            'sentiment_backend': lambda: os.getenv('SENTIMENT_BACKEND'),
            'lock_ttl_seconds': lambda: _env_int('SYNC_LOCK_TTL', 300),
            'classify_workers': lambda: _env_int('CLASSIFY_WORKERS', 1),
            'sheets_min_interval': lambda: _env_float('SHEETS_MIN_INTERVAL', 0.0),
        }
        for name, default in defaults.items():
            if getattr(self, name) is None:
                object.__setattr__(self, name, default())

        if not self.spreadsheet_id:
            raise ValueError("A variável de ambiente 'SPREADSHEET_ID' é obrigatória.")
        if self.store_spreadsheet_id is None:
            object.__setattr__(
                self,
                'store_spreadsheet_id',
                os.getenv('STORE_SPREADSHEET_ID') or self.spreadsheet_id,
            )
        try:
            ZoneInfo(self.sheet_timezone)
        except (ZoneInfoNotFoundError, ValueError):
            raise ValueError(f"SHEET_TIMEZONE inválido: {self.sheet_timezone!r}.")
        if self.openai_timeout <= 0:
            raise ValueError("OPENAI_TIMEOUT deve ser maior que zero.")
        if self.openai_max_retries < 0:
            raise ValueError("OPENAI_MAX_RETRIES não pode ser negativo.")
        if self.classify_workers < 1:
            raise ValueError("CLASSIFY_WORKERS deve ser pelo menos 1.")
        if self.sentiment_backend not in (None, "", "openai", "keyword"):
            raise ValueError(
                f"SENTIMENT_BACKEND inválido: {self.sentiment_backend!r} (use 'openai' ou 'keyword')."
            )
