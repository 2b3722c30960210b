import socket
import sys
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from flask import Flask
from werkzeug.serving import make_server

from .config import Settings, ListenerBindError, VERSION

MESSAGE = 'Hello World from ECS Fargate! 🎉'
METHODS = ['GET', 'HEAD', 'POST', 'PUT', 'PATCH', 'DELETE', 'OPTIONS']


def _iso_now(now: Optional[datetime] = None) -> str:
    now = now or datetime.now(timezone.utc)
    return now.astimezone(timezone.utc).isoformat(timespec='milliseconds').replace('+00:00', 'Z')


def build_payload(settings: Settings, now: Optional[datetime] = None) -> Dict[str, Any]:
    return {
        'message': MESSAGE,
        'db_url_env_present': settings.db_url_env_present,
        'db_url': settings.public_db_url,
        'time': _iso_now(now),
        'version': VERSION,
    }


def create_app(settings: Optional[Settings] = None) -> Flask:
    """Build the Flask app.

    Every request, whatever its method, path, headers or body, is answered
    with 200 and the status payload. Settings are bound here once; the
    handler never reads the environment.
    """
    settings = settings or Settings.from_env()
    app = Flask(__name__)
    app.json.ensure_ascii = False

    @app.route('/', defaults={'path': ''}, methods=METHODS)
    @app.route('/<path:path>', methods=METHODS)
    def greeting(path: str):
        return build_payload(settings), 200

    # Unknown verbs and paths the converter cannot match still get the payload
    @app.errorhandler(404)
    @app.errorhandler(405)
    def fallback(_err):
        return build_payload(settings), 200

    return app


def _bind_socket(host: str, port: int) -> socket.socket:
    sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
    try:
        sock.bind((host, port))
        sock.listen(socket.SOMAXCONN)
    except (OSError, OverflowError):
        sock.close()
        raise
    return sock


def make_listener(settings: Settings):
    """Bind the listening socket and wrap it in a threaded werkzeug server.

    The socket is bound here rather than inside werkzeug, which would print
    and sys.exit on its own when the port is taken.
    """
    try:
        sock = _bind_socket(settings.host, settings.port)
    except (OSError, OverflowError) as e:
        raise ListenerBindError(f"cannot listen on {settings.host}:{settings.port}: {e}") from e
    try:
        # werkzeug dups the fd, so our handle can be closed afterwards
        return make_server(settings.host, settings.port, create_app(settings), threaded=True, fd=sock.fileno())
    finally:
        sock.close()


def serve(settings: Settings) -> None:
    server = make_listener(settings)
    print(f"[server] Server running on port {server.server_address[1]}", flush=True)
    print(f"[server] DB URL configured: {str(settings.db_url_env_present).lower()}", flush=True)
    server.serve_forever()


def main() -> None:
    try:
        serve(Settings.from_env())
    except ListenerBindError as e:
        print(f"[server] startup failed: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == '__main__':
    main()
