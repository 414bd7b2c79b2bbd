from playerstats.services.mail_queue import get_arq_redis_settings
from playerstats.tasks.mail_task import send_mail_task


class WorkerSettings:
    functions = [send_mail_task]

    redis_settings = get_arq_redis_settings()
