import asyncio
from typing import List, Optional, Union

from redis.asyncio import ConnectionPool as AsyncConnectionPool, Redis as AsyncRedis
from redis.asyncio.cluster import ClusterNode, RedisCluster
from redis.exceptions import RedisClusterException

from src.platform.config.core_setting import settings
from src.platform.logging.loguru_io import Logger


# Type alias for client that works in both standalone and cluster mode
KvrocksClientType = Union[AsyncRedis, RedisCluster]


def _parse_cluster_nodes(nodes_str: str) -> List[ClusterNode]:
    """Parse "host1:port1,host2:port2" into ClusterNode objects."""
    nodes: List[ClusterNode] = []
    for node in nodes_str.split(','):
        node = node.strip()
        if not node:
            continue
        host, port_str = node.split(':')
        nodes.append(ClusterNode(host=host, port=int(port_str)))
    return nodes


class KvrocksClient:
    """
    Async Kvrocks Client with connection pool.

    Every command is bounded by the pool's socket timeouts; a slow or
    unreachable store surfaces as redis TimeoutError / ConnectionError
    instead of blocking the caller.

    Usage:
        await kvrocks_client.initialize()  # In startup
        client = kvrocks_client.get_client()  # In handlers
    """

    def __init__(self) -> None:
        self._client: Optional[KvrocksClientType] = None

    async def initialize(self) -> KvrocksClientType:
        """Initialize connection pool (idempotent)"""
        if self._client is not None:
            return self._client

        if settings.KVROCKS_CLUSTER_MODE:
            self._client = await self._initialize_cluster()
        else:
            self._client = await self._initialize_standalone()

        return self._client

    async def _initialize_standalone(self) -> AsyncRedis:
        pool = AsyncConnectionPool.from_url(
            f'redis://{settings.KVROCKS_HOST}:{settings.KVROCKS_PORT}/{settings.KVROCKS_DB}',
            password=settings.KVROCKS_PASSWORD or None,
            decode_responses=settings.REDIS_DECODE_RESPONSES,
            max_connections=settings.KVROCKS_POOL_MAX_CONNECTIONS,
            socket_timeout=settings.KVROCKS_POOL_SOCKET_TIMEOUT,
            socket_connect_timeout=settings.KVROCKS_POOL_SOCKET_CONNECT_TIMEOUT,
            socket_keepalive=settings.KVROCKS_POOL_SOCKET_KEEPALIVE,
            health_check_interval=settings.KVROCKS_POOL_HEALTH_CHECK_INTERVAL,
        )
        client = AsyncRedis.from_pool(pool)
        await client.ping()  # Fail-fast
        return client

    async def _initialize_cluster(self) -> RedisCluster:
        """Initialize cluster client, waiting for the cluster to finish slot assignment."""
        if not settings.KVROCKS_CLUSTER_NODES:
            raise ValueError(
                'KVROCKS_CLUSTER_NODES must be set when KVROCKS_CLUSTER_MODE is True. '
                'Format: "host1:port1,host2:port2"'
            )

        startup_nodes = _parse_cluster_nodes(settings.KVROCKS_CLUSTER_NODES)
        max_retries = 30
        retry_delay = 2.0

        for attempt in range(max_retries):
            try:
                client = RedisCluster(
                    startup_nodes=startup_nodes,
                    password=settings.KVROCKS_PASSWORD or None,
                    decode_responses=settings.REDIS_DECODE_RESPONSES,
                    max_connections=settings.KVROCKS_POOL_MAX_CONNECTIONS,
                    socket_timeout=settings.KVROCKS_POOL_SOCKET_TIMEOUT,
                    socket_connect_timeout=settings.KVROCKS_POOL_SOCKET_CONNECT_TIMEOUT,
                    socket_keepalive=settings.KVROCKS_POOL_SOCKET_KEEPALIVE,
                    health_check_interval=settings.KVROCKS_POOL_HEALTH_CHECK_INTERVAL,
                    require_full_coverage=True,
                    read_from_replicas=False,  # Lock markers must be read from masters
                )
                await client.ping()
                Logger.base.info('✅ [KVROCKS] Cluster connected')
                return client
            except RedisClusterException as e:
                if attempt < max_retries - 1:
                    Logger.base.warning(
                        f'⏳ [KVROCKS] Waiting for cluster... attempt {attempt + 1}/{max_retries} | {e}'
                    )
                    await asyncio.sleep(retry_delay)
                else:
                    raise

        raise RedisClusterException('Failed to connect to Kvrocks cluster')

    def get_client(self) -> KvrocksClientType:
        if self._client is None:
            raise RuntimeError(
                'Kvrocks client not initialized. '
                'Call await kvrocks_client.initialize() during startup.'
            )
        return self._client

    async def disconnect(self) -> None:
        """Close connection pool"""
        if self._client is not None:
            await self._client.aclose()
            self._client = None


# Global singleton
kvrocks_client = KvrocksClient()
