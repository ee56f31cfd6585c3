"""
Exemplo: Demonstração de tratamento de erros.

Cada etapa com efeito externo tem seu próprio erro (AuthError, FetchError,
StoreError). O orquestrador converte todos em SyncError e guarda a causa
original em __cause__, sem gravar nada.
"""

from dotenv import load_dotenv

from feedsync import AuthError, Config, FetchError, StoreError, SyncError, SyncOrchestrator

# Carrega variáveis de ambiente do .env
load_dotenv()


def main():
    """
    Executa uma passada e mostra qual etapa falhou.

    Para ver cada caso:
    - AuthError: remova GOOGLE_SERVICE_ACCOUNT_JSON e SERVICE_ACCOUNT_FILE
    - FetchError: aponte SHEET_RANGE para uma aba inexistente
    - StoreError: use uma STORE_SPREADSHEET_ID sem permissão de escrita
    """
    config = Config()

    try:
        result = SyncOrchestrator.from_config(config).run()
    except SyncError as e:
        cause = e.__cause__
        if isinstance(cause, AuthError):
            print(f"🔐 Falha de credencial: {cause}")
        elif isinstance(cause, FetchError):
            print(f"📥 Falha ao ler a planilha: {cause}")
        elif isinstance(cause, StoreError):
            print(f"🗄️  Falha ao gravar: {cause}")
        else:
            print(f"❌ Sincronização não executada: {e}")
        return

    print(f"✅ {result.message}")


if __name__ == "__main__":
    main()
