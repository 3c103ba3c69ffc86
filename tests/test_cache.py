import unittest
from unittest.mock import patch

from mcp_usecases.agent.cache import ToolCache


class TestToolCache(unittest.IsolatedAsyncioTestCase):
    async def test_coroutine_results_are_cached(self):
        cache = ToolCache(ttl_seconds=60)
        calls = []

        async def lookup(name, limit=10):
            calls.append(name)
            return f"{name}:{limit}"

        cached = cache.cached(lookup)
        self.assertEqual(await cached("rome", limit=5), "rome:5")
        self.assertEqual(await cached("rome", limit=5), "rome:5")
        self.assertEqual(calls, ["rome"])

        await cached("paris", limit=5)
        self.assertEqual(calls, ["rome", "paris"])
        self.assertEqual(len(cache), 2)

    def test_plain_function_cached(self):
        cache = ToolCache()
        calls = []

        def square(x):
            calls.append(x)
            return x * x

        cached = cache.cached(square)
        self.assertEqual(cached(3), 9)
        self.assertEqual(cached(3), 9)
        self.assertEqual(calls, [3])

    def test_entries_expire(self):
        cache = ToolCache(ttl_seconds=10)
        calls = []

        def lookup(x):
            calls.append(x)
            return x

        cached = cache.cached(lookup)
        with patch("mcp_usecases.agent.cache.time.time", return_value=1000.0):
            cached("a")
        with patch("mcp_usecases.agent.cache.time.time", return_value=1005.0):
            cached("a")
        self.assertEqual(len(calls), 1)
        with patch("mcp_usecases.agent.cache.time.time", return_value=1011.0):
            cached("a")
        self.assertEqual(len(calls), 2)

    def test_clear(self):
        cache = ToolCache()
        cache.cached(lambda x: x)(1)
        cache.clear()
        self.assertEqual(len(cache), 0)

    async def test_exceptions_are_not_cached(self):
        cache = ToolCache(ttl_seconds=60)
        calls = []

        async def lookup(name):
            calls.append(name)
            if len(calls) == 1:
                raise RuntimeError("503 Service Unavailable")
            return name.upper()

        cached = cache.cached(lookup)
        with self.assertRaises(RuntimeError):
            await cached("rome")
        self.assertEqual(len(cache), 0)
        self.assertEqual(await cached("rome"), "ROME")
        self.assertEqual(await cached("rome"), "ROME")
        self.assertEqual(calls, ["rome", "rome"])

    def test_expired_entries_dropped_on_store(self):
        cache = ToolCache(ttl_seconds=10)
        cached = cache.cached(lambda x: x)
        with patch("mcp_usecases.agent.cache.time.time", return_value=1000.0):
            cached("a")
            cached("b")
        with patch("mcp_usecases.agent.cache.time.time", return_value=1005.0):
            cached("c")
        self.assertEqual(len(cache), 3)
        with patch("mcp_usecases.agent.cache.time.time", return_value=1012.0):
            cached("d")
        self.assertEqual(len(cache), 2)


if __name__ == "__main__":
    unittest.main()
