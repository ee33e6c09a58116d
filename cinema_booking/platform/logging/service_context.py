"""
Service context extraction for distributed logging.

Identifies the emitting worker in log lines so concurrent finalize attempts
on different workers can be told apart.
"""

from functools import lru_cache
import os
import socket


@lru_cache(maxsize=1)
def get_service_context() -> str:
    service_name = os.getenv('SERVICE_NAME', 'booking-core')
    deploy_env = os.getenv('DEPLOY_ENV', 'local_dev')

    # Container hostnames are unique per replica; fall back to PID locally
    worker_id = os.getenv('HOSTNAME') or socket.gethostname() or 'local'
    if deploy_env == 'local_dev':
        worker_id = str(os.getpid())

    return f'{service_name}@{deploy_env}:{worker_id[:12]}'
