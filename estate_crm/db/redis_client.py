# db/redis_client.py
import redis.asyncio as redis

from estate_crm.core import config

# Shared client for the dashboard cache, chat sessions, token revocation
# and the admin bootstrap lock. Closed in the app lifespan.
redis_client = redis.from_url(config.REDIS_URL, decode_responses=True)


async def get_redis():
    """Dependency: `redis: Redis = Depends(get_redis)`"""
    yield redis_client
