"""
Hierarquia de exceções da sincronização.

Cada etapa com efeito externo levanta seu próprio tipo de erro; o orquestrador
converte qualquer um deles em um único SyncError, que é o resultado terminal
de uma passada com falha.

Falhas de classificação de sentimento NÃO fazem parte desta hierarquia: são
absorvidas pelo fallback determinístico em feedsync.sentiment.
"""


class FeedsyncError(Exception):
    """Base para todos os erros do pacote."""


class AuthError(FeedsyncError):
    """Credencial ausente/inválida ou falha na troca do token."""


class FetchError(FeedsyncError):
    """Falha ao ler as respostas da planilha de origem."""


class StoreError(FeedsyncError):
    """Falha de leitura ou escrita no armazenamento de feedback."""


class SyncError(FeedsyncError):
    """Resultado terminal de uma passada de sincronização que falhou."""
