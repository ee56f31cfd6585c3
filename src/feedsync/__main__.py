"""Ponto de entrada para execução do módulo como script."""

import argparse
import json
import logging
import sys

from .config import Config
from .errors import SyncError
from .orchestrator import SyncOrchestrator


def main(argv: list[str] | None = None) -> int:
    """
    Executa uma passada de sincronização, ou sobe o endpoint HTTP com "serve".

    Returns:
        int: Código de saída (0 sucesso, 1 falha).
    """
    parser = argparse.ArgumentParser(prog="feedsync")
    parser.add_argument("command", nargs="?", choices=["sync", "serve"], default="sync")
    parser.add_argument("--host", default="0.0.0.0")
    parser.add_argument("--port", type=int, default=8000)
    parser.add_argument("-v", "--verbose", action="store_true")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        config = Config()
    except ValueError as e:
        print(f"Erro de configuração: {e}", file=sys.stderr)
        return 1

    if args.command == "serve":
        from .server import create_app

        create_app(lambda: SyncOrchestrator.from_config(config)).run(host=args.host, port=args.port)
        return 0

    try:
        result = SyncOrchestrator.from_config(config).run()
    except SyncError as e:
        print(json.dumps({"success": False, "error": str(e)}))
        return 1

    print(json.dumps(result.to_dict()))
    return 0


if __name__ == "__main__":
    sys.exit(main())
