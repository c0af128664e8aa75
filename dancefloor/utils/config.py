"""
Configuration module for Dancefloor.
Handles app configuration, logging and server-side session storage.
"""

import logging
import os
import tempfile
import redis
from flask_session import Session
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()


logger = logging.getLogger(__name__)


def get_redis_url():
    """Get Redis URL with proper SSL configuration for Heroku"""
    redis_url = os.getenv("REDIS_URL")

    if redis_url and redis_url.startswith("rediss://"):
        return redis_url + "?ssl_cert_reqs=none"
    elif redis_url:
        return redis_url
    else:
        return "redis://localhost:6379/0"


def create_redis_client():
    """Connect to Redis for session storage, None when it is unreachable"""
    try:
        client = redis.from_url(
            get_redis_url(),
            socket_connect_timeout=3,
            socket_timeout=3,
        )
        client.ping()
        return client
    except redis.RedisError as e:
        logger.warning(f"Redis connection failed: {e}")
        return None


def configure_logging(level=None):
    """Configure root logging once for the whole process"""
    level = (level or os.getenv("LOG_LEVEL", "INFO")).upper()
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


def configure_session_storage(app):
    """Configure session storage with fallback for Redis failures"""
    app.config.setdefault("SESSION_PERMANENT", True)
    app.config.setdefault("SESSION_USE_SIGNER", True)
    app.config.setdefault("SESSION_KEY_PREFIX", "dancefloor:")
    app.config.setdefault("SESSION_COOKIE_HTTPONLY", True)
    app.config.setdefault("SESSION_COOKIE_SAMESITE", "Lax")

    if app.config.get("SESSION_TYPE"):
        return False

    if os.getenv("FLASK_ENV") == "production":
        redis_client = create_redis_client()
        if redis_client is not None:
            app.config["SESSION_TYPE"] = "redis"
            app.config["SESSION_REDIS"] = redis_client
            app.config["SESSION_COOKIE_SECURE"] = True
            logger.info("Using Redis for session storage (production)")
            return True
        logger.warning("Redis session storage unavailable, falling back to filesystem")

    app.config["SESSION_TYPE"] = "filesystem"
    app.config.setdefault("SESSION_FILE_DIR", os.path.join(tempfile.gettempdir(), "dancefloor_sessions"))
    logger.info(f"Using filesystem for session storage ({app.config['SESSION_FILE_DIR']})")
    return False


def init_app(app, test_config=None):
    """Load configuration onto the Flask app"""
    app.config["SECRET_KEY"] = os.getenv("SECRET_KEY", "dev-secret-change-in-production")
    app.config["DATABASE_URL"] = os.getenv("DATABASE_URL")
    app.config["CORS_ORIGIN"] = os.getenv("CORS_ORIGIN", "*")
    app.config["SOCKETIO_ASYNC_MODE"] = os.getenv("SOCKETIO_ASYNC_MODE", "threading")

    if test_config:
        app.config.update(test_config)

    configure_logging(app.config.get("LOG_LEVEL"))
    configure_session_storage(app)

    # Initialize Flask-Session
    Session(app)

    logger.info("Configuration initialized successfully")
    return app.config
