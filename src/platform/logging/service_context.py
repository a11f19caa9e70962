"""
Service context for distributed logging.

Every log line carries `{service}@{env}:{instance}` so lines from many
stateless replicas can be told apart in the aggregated stream.
"""

from functools import lru_cache
import os
import socket


@lru_cache(maxsize=1)
def get_service_context() -> str:
    service_name = os.getenv('SERVICE_NAME', 'seat-management-service')
    deploy_env = os.getenv('DEPLOY_ENV', 'local_dev')

    # Containers get a unique hostname per replica; fall back to PID locally
    instance = os.getenv('HOSTNAME') or socket.gethostname() or ''
    if not instance or deploy_env == 'local_dev':
        instance = str(os.getpid())

    return f'{service_name}@{deploy_env}:{instance[:12]}'
