from flask import Flask
from flask_cors import CORS
from flask_socketio import SocketIO
import click
from config import Config
from tapclock.broadcast import BroadcastGateway, NAMESPACE
from tapclock.rooms import RoomRegistry
from tapclock.services.clock.scheduler import TickScheduler

socketio = SocketIO(async_mode=None)
registry = RoomRegistry()
gateway = BroadcastGateway()
scheduler = TickScheduler(registry, gateway)


def create_app(config_class=Config):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)

    allowed_origins = flask_app.config.get('CORS_ORIGINS') or []
    CORS(flask_app, supports_credentials=True, origins=allowed_origins)

    # Initialize Socket.IO after app is created
    socketio.init_app(flask_app, cors_allowed_origins=allowed_origins)

    registry.init_app(flask_app)
    gateway.init_app(socketio, namespace=NAMESPACE)
    scheduler.init_app(flask_app)

    from tapclock.main import main
    flask_app.register_blueprint(main)

    # Register Socket.IO event handlers on the freshly initialized server
    from tapclock.socketio_events import register_socketio_handlers
    register_socketio_handlers()

    @click.command('serve')
    @click.option('--host', default=None, help='Interface to bind (defaults to HOST).')
    @click.option('--port', default=None, type=int, help='Port to bind (defaults to PORT).')
    def serve_command(host, port):
        """Runs the clock server with the tick scheduler."""
        host = host or flask_app.config.get('HOST', '0.0.0.0')
        port = port or flask_app.config.get('PORT', 3000)
        scheduler.ensure_started(socketio)
        click.echo(f'Clock server running at http://{host}:{port}')
        socketio.run(flask_app, host=host, port=port, allow_unsafe_werkzeug=True)

    flask_app.cli.add_command(serve_command)

    return flask_app
