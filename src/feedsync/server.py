"""
Endpoint HTTP que dispara uma passada de sincronização.

POST /sync (ou /) executa a passada e responde com
{"success": true, "processed": N, "message": ...}; em falha, status 500 com
{"success": false, "error": ...}. OPTIONS responde ao preflight de CORS sem corpo.
"""
import logging
from collections.abc import Callable

from flask import Flask, Response, jsonify, request

from .orchestrator import SyncOrchestrator

logger = logging.getLogger(__name__)

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "authorization, x-client-info, apikey, content-type",
    "Access-Control-Allow-Methods": "POST, OPTIONS",
}


def create_app(
    orchestrator_factory: Callable[[], SyncOrchestrator] = SyncOrchestrator.from_config,
) -> Flask:
    """
    Cria a aplicação Flask.

    Args:
        orchestrator_factory: Cria um orquestrador novo a cada requisição, para
            que nenhuma credencial sobreviva além de uma passada.
    """
    app = Flask(__name__)

    @app.after_request
    def add_cors_headers(response: Response) -> Response:
        response.headers.update(CORS_HEADERS)
        return response

    @app.route("/", methods=["POST", "OPTIONS"])
    @app.route("/sync", methods=["POST", "OPTIONS"])
    def sync():
        if request.method == "OPTIONS":
            return Response(status=200)

        try:
            result = orchestrator_factory().run()
        except Exception as e:
            logger.error("Erro na função de sincronização: %s", e, exc_info=True)
            return jsonify({"success": False, "error": str(e)}), 500

        return jsonify(result.to_dict())

    return app
