"""
feedsync

Sincronização das respostas do formulário de satisfação (Google Sheets) para o
armazenamento de feedback do dashboard de RH, com classificação de sentimento
dos comentários.

Este módulo expõe as principais classes para uso externo:

- Config: Configuração obtida de variáveis de ambiente
- SyncOrchestrator: Executa passadas de sincronização
- SyncResult: Resultado de uma passada bem-sucedida
- SyncError: Falha terminal de uma passada
"""

from .__version__ import __version__
from .config import Config
from .errors import AuthError, FetchError, StoreError, SyncError
from .orchestrator import SyncOrchestrator, SyncResult

__all__ = [
    '__version__',
    'Config',
    'SyncOrchestrator',
    'SyncResult',
    'AuthError',
    'FetchError',
    'StoreError',
    'SyncError',
]
