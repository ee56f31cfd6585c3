"""
Exemplo básico de uso do feedsync.

Este script executa passadas de sincronização em intervalos fixos,
no lugar de um agendador externo (cron, Cloud Scheduler etc.).
"""

import time

from dotenv import load_dotenv

from feedsync import Config, SyncError, SyncOrchestrator

# Carrega variáveis de ambiente do arquivo .env
load_dotenv()

INTERVAL_SECONDS = 300


def main():
    """Função principal."""
    config = Config()

    print("=" * 60)
    print(f"🚀 Sincronização da planilha {config.spreadsheet_id}")
    print(f"📥 Intervalo: {config.sheet_range}")
    print(f"🗄️  Armazenamento: {config.store_spreadsheet_id}")
    print(f"🧠 OpenAI: {'sim' if config.openai_api_key else 'não (neutro)'}")
    print("=" * 60)
    print("\n💡 Pressione Ctrl+C para parar\n")

    total = 0
    while True:
        try:
            # Um orquestrador novo por passada: nenhum token é reaproveitado
            result = SyncOrchestrator.from_config(config).run()
            total += result.processed
            print(f"✅ {result.message} (total: {total})")

        except KeyboardInterrupt:
            print("\n🛑 Recebido sinal de parada...")
            break
        except SyncError as e:
            # A próxima passada recomeça do high-water mark, sem duplicar nada
            print(f"❌ Passada falhou: {e}")

        try:
            time.sleep(INTERVAL_SECONDS)
        except KeyboardInterrupt:
            print("\n🛑 Recebido sinal de parada...")
            break

    print(f"\n✨ Finalizado. Total de entradas importadas: {total}")


if __name__ == "__main__":
    main()
