import redis.asyncio as redis
from utils.config import settings

redis_client = redis.from_url(
    settings.REDIS_URL,
    decode_responses=True
)

STREAM_KEY = "notification_stream"
GROUP = "notification_group"
CONSUMER = "fastapi_worker"


async def init_stream_group():
    try:
        await redis_client.xgroup_create(
            STREAM_KEY, GROUP, id="0", mkstream=True
        )
    except redis.ResponseError as e:
        if "BUSYGROUP" not in str(e):
            raise


async def push_notification_event(data: dict):
    # stream fields must be flat strings
    fields = {k: str(v) for k, v in data.items() if v is not None}
    await redis_client.xadd(STREAM_KEY, fields)
