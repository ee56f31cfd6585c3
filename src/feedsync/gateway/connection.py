import json
import logging
from dataclasses import dataclass, field
from datetime import datetime

from google.auth.exceptions import GoogleAuthError
from google.auth.transport.requests import Request
from google.oauth2.credentials import Credentials as BearerCredentials
from google.oauth2.service_account import Credentials
from gspread import Client, Spreadsheet, SpreadsheetNotFound

from ..errors import AuthError
from ._retry import retry


logger = logging.getLogger(__name__)

READONLY_SCOPES = [
    'https://www.googleapis.com/auth/spreadsheets.readonly',
]
READWRITE_SCOPES = [
    'https://www.googleapis.com/auth/spreadsheets',
]
TOKEN_URI = 'https://oauth2.googleapis.com/token'
REQUIRED_FIELDS = ('client_email', 'private_key')


@dataclass(frozen=True)
class Token:
    """
    Bearer token de curta duração para a API do Google Sheets.

    O valor nunca aparece no repr, para não vazar em logs ou tracebacks.

    Attributes:
        value (str): O access token.
        expiry (datetime | None): Momento de expiração (UTC, naive, como o google-auth retorna).
    """
    value: str = field(repr=False)
    expiry: datetime | None = None


def load_service_account_info(
    service_account_json: str | None = None,
    service_account_file: str | None = None,
) -> dict:
    """
    Carrega o bundle da service account a partir do JSON em memória ou de um arquivo.

    O JSON em memória (GOOGLE_SERVICE_ACCOUNT_JSON) tem prioridade sobre o arquivo.

    Args:
        service_account_json (str | None): Conteúdo JSON da service account.
        service_account_file (str | None): Caminho para o arquivo JSON da service account.

    Returns:
        dict: Informações da service account.

    Raises:
        AuthError: Se nenhuma credencial estiver configurada ou se ela estiver malformada.
    """
    if service_account_json:
        raw = service_account_json
    elif service_account_file:
        try:
            with open(service_account_file, "r", encoding="utf-8") as f:
                raw = f.read()
        except OSError as e:
            raise AuthError(
                f"Não foi possível ler o arquivo de service account '{service_account_file}': {e}"
            ) from e
    else:
        raise AuthError(
            "Nenhuma credencial de service account configurada "
            "(GOOGLE_SERVICE_ACCOUNT_JSON ou SERVICE_ACCOUNT_FILE)."
        )

    try:
        info = json.loads(raw)
    except json.JSONDecodeError as e:
        raise AuthError(f"A credencial da service account não é um JSON válido: {e}") from e

    if not isinstance(info, dict):
        raise AuthError("A credencial da service account deve ser um objeto JSON.")

    missing = [name for name in REQUIRED_FIELDS if not info.get(name)]
    if missing:
        raise AuthError(
            f"Campos obrigatórios ausentes na service account: {', '.join(missing)}"
        )

    return info


def _service_account_credentials(info: dict, scopes: list[str]) -> Credentials:
    info = {**info}
    info.setdefault('token_uri', TOKEN_URI)
    try:
        return Credentials.from_service_account_info(info, scopes=scopes)
    except (ValueError, KeyError, TypeError) as e:
        raise AuthError(f"Service account inválida: {e}") from e


def mint_token(info: dict) -> Token:
    """
    Troca a credencial de longa duração da service account por um bearer token.

    O google-auth monta a asserção JWT assinada (iss = client_email, escopo
    somente leitura, aud = token URI, exp = iat + 1h) e a envia ao endpoint de
    token. Não há retry: uma falha aqui encerra a passada.

    Args:
        info (dict): Bundle da service account (ver load_service_account_info).

    Returns:
        Token: Bearer token válido por aproximadamente uma hora.

    Raises:
        AuthError: Se a credencial for inválida ou a troca falhar.
    """
    credentials = _service_account_credentials(info, READONLY_SCOPES)

    logger.debug("Solicitando token de acesso para %s", info.get('client_email'))
    try:
        credentials.refresh(Request())
    except (GoogleAuthError, ValueError) as e:
        raise AuthError(f"Falha na troca do token da service account: {e}") from e

    if not credentials.token:
        raise AuthError("O endpoint de token não retornou um access token.")

    logger.info("Token de acesso obtido (expira em %s).", credentials.expiry)
    return Token(value=credentials.token, expiry=credentials.expiry)


def authorize(token: Token) -> Client:
    """
    Cria um cliente gspread autenticado apenas com o bearer token já emitido.

    Args:
        token (Token): Token obtido com mint_token.

    Returns:
        Client: Cliente do gspread.
    """
    return Client(auth=BearerCredentials(token=token.value))


def _connect_service_account(info: dict) -> Client:
    """
    Conecta-se à API do Google Sheets com permissão de escrita.

    Args:
        info (dict): Bundle da service account.

    Returns:
        Client: Cliente autenticado do gspread.
    """
    logger.debug("Conectando à API do Google Sheets como: %s", info.get('client_email'))
    credentials = _service_account_credentials(info, READWRITE_SCOPES)
    client = Client(auth=credentials)
    logger.info("Conexão estabelecida com sucesso à API do Google Sheets.")
    return client


def get_spreadsheet(spreadsheet_id: str, info: dict) -> Spreadsheet:
    """
    Abre a planilha de armazenamento pelo seu ID usando a service account.

    Args:
        spreadsheet_id (str): ID da planilha do Google Sheets.
        info (dict): Bundle da service account.

    Returns:
        Spreadsheet: Objeto da planilha obtida.
    """
    try:
        logger.debug("Obtendo a planilha com ID: %s", spreadsheet_id)
        client = _connect_service_account(info)
        spreadsheet = retry(lambda: client.open_by_key(spreadsheet_id))
        logger.info("Planilha obtida com sucesso: %s", spreadsheet.title)
        return spreadsheet

    except SpreadsheetNotFound:
        logger.error("Planilha com ID %s não encontrada.", spreadsheet_id)
        raise


class TokenMinter:
    """
    Emite um token novo a cada chamada de mint(), a partir da configuração.

    O bundle da service account é relido a cada passada e não fica guardado.
    """

    def __init__(
        self,
        service_account_json: str | None = None,
        service_account_file: str | None = None,
    ):
        self._service_account_json = service_account_json
        self._service_account_file = service_account_file

    def mint(self) -> Token:
        info = load_service_account_info(self._service_account_json, self._service_account_file)
        return mint_token(info)
