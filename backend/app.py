"""
Voice Activity Transcriber - Backend Entrypoint

Wires the HTTP routes, Socket.IO handlers and the silence watcher together.
"""
import eventlet
eventlet.monkey_patch()

from flask import Flask
from flask_socketio import SocketIO
from flask_cors import CORS

# Import route and handler registrations
from api.routes import register_routes
from ws.handlers import register_socket_handlers
from services.recording import run_silence_watcher
from config import PORT, SECRET_KEY

# Create Flask app
app = Flask(__name__)
app.config["SECRET_KEY"] = SECRET_KEY

# Enable CORS for all routes (allows pollers on other origins)
CORS(app)

# Create Socket.IO instance
socketio = SocketIO(app, cors_allowed_origins="*", async_mode="eventlet")

# Register routes and handlers
register_routes(app)
register_socket_handlers(socketio)

# Close sessions whose callers went quiet
socketio.start_background_task(run_silence_watcher, socketio)

# Main entry point
if __name__ == "__main__":
    print(f"[BOOT] Server listening on port {PORT}")
    socketio.run(app, host="0.0.0.0", port=PORT, debug=True, use_reloader=False)
