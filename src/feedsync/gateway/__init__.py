"""
Gateway para acesso ao Google Sheets.

Este módulo encapsula a autenticação e as operações de leitura e escrita na
API do Google Sheets usadas pela sincronização.

Módulos:
    - connection: Emissão de token e abertura de planilhas
    - worksheet: Abas e cabeçalhos
    - operations: Leitura de intervalos e escrita de linhas
    - leader: Lock consultivo entre passadas concorrentes
"""

from ._retry import configure_rate_limiting
from .connection import (
    Token,
    TokenMinter,
    authorize,
    get_spreadsheet,
    load_service_account_info,
    mint_token,
)
from .leader import SyncLock
from .operations import (
    append_row,
    append_rows,
    get_column_values,
    get_range_values,
    get_row,
    select_first_by_columns,
    update_row,
)
from .worksheet import get_header_mapping, get_worksheet

__all__ = [
    "Token",
    "TokenMinter",
    "load_service_account_info",
    "mint_token",
    "authorize",
    "get_spreadsheet",
    "get_worksheet",
    "get_header_mapping",
    "get_range_values",
    "get_column_values",
    "select_first_by_columns",
    "append_row",
    "append_rows",
    "get_row",
    "update_row",
    "SyncLock",
    "configure_rate_limiting",
]
