from typing import Optional

from arq import create_pool
from arq.connections import ArqRedis
from arq.connections import RedisSettings as ArqRedisSettings
from loguru import logger

from playerstats.core.config import RedisSettings


def get_arq_redis_settings() -> ArqRedisSettings:
    redis_config = RedisSettings()
    return ArqRedisSettings(
        host=redis_config.redis_host,
        port=redis_config.redis_port,
        password=redis_config.redis_password,
    )


class MailQueue:
    """Hands outgoing mail to the arq worker."""

    def __init__(self, pool: Optional[ArqRedis] = None):
        self.pool = pool

    async def send(self, to: str, subject: str, body: str) -> None:
        pool = self.pool or await create_pool(get_arq_redis_settings())
        try:
            job = await pool.enqueue_job("send_mail_task", to, subject, body)
            logger.info(f"Queued mail to {to}: {subject!r} (job {job.job_id if job else 'duplicate'})")
        finally:
            if self.pool is None:
                await pool.close()


async def get_mail_queue() -> MailQueue:
    return MailQueue()
