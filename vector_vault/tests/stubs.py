from redis.exceptions import ConnectionError as RedisConnectionError


class BrokenRedis:
    """Cache client whose server is gone."""

    def __init__(self):
        self.closed = False

    async def get(self, key):
        raise RedisConnectionError("Connection refused")

    async def set(self, key, value, ex=None):
        raise RedisConnectionError("Connection refused")

    async def delete(self, *keys):
        raise RedisConnectionError("Connection refused")

    async def ping(self):
        raise RedisConnectionError("Connection refused")

    async def aclose(self):
        self.closed = True


class FlakyRedis:
    """Wraps a working cache client and fails selected calls."""

    def __init__(self, client, fail_delete=False, fail_set_keys=()):
        self.client = client
        self.fail_delete = fail_delete
        self.fail_set_keys = set(fail_set_keys)

    async def get(self, key):
        return await self.client.get(key)

    async def set(self, key, value, ex=None):
        if key in self.fail_set_keys:
            raise RedisConnectionError("Connection reset by peer")
        return await self.client.set(key, value, ex=ex)

    async def delete(self, *keys):
        if self.fail_delete:
            raise RedisConnectionError("Connection reset by peer")
        return await self.client.delete(*keys)

    async def ping(self):
        return await self.client.ping()
