"""
Entry point for the Dancefloor backend.
"""

import os
from dancefloor.app_factory import create_app


app, socketio = create_app()


if __name__ == "__main__":
    port = int(os.environ.get("PORT", 8000))
    socketio.run(app, host="0.0.0.0", port=port, debug=False, allow_unsafe_werkzeug=True)
