"""Redis client construction.

For a managed instance (Memorystore, ElastiCache, ...):
- Set REDIS_HOST to the instance address
- Set REDIS_PASSWORD if authentication is enabled
- Set STORAGE_BACKEND=redis to persist slices and repositories there
"""
import redis
from typing import Optional

from app.core.logging import get_logger
from app.core.config import Settings, settings as default_settings

logger = get_logger(__name__)


def create_redis_client(
    settings: Optional[Settings] = None,
    decode_responses: bool = True
) -> Optional[redis.Redis]:
    """Create a pooled Redis client and check that it answers.

    Args:
        settings: Connection settings (defaults to the process settings)
        decode_responses: Whether to decode responses to strings

    Returns:
        Redis client instance or None if unavailable
    """
    settings = settings or default_settings
    host, port = settings.redis_host, settings.redis_port

    logger.info(f"Initializing Redis connection pool: {host}:{port}")

    try:
        pool = redis.ConnectionPool(
            host=host,
            port=port,
            db=settings.redis_db,
            password=settings.redis_password,
            decode_responses=decode_responses,
            max_connections=50,
            socket_connect_timeout=5,
            socket_timeout=5,
        )
        client = redis.Redis(connection_pool=pool)
        client.ping()
        logger.info("Redis connection established successfully")
        return client

    except redis.ConnectionError as e:
        logger.error(f"Failed to connect to Redis: {e}", exc_info=True)
        return None
    except Exception as e:
        logger.error(f"Redis initialization error: {e}", exc_info=True)
        return None
