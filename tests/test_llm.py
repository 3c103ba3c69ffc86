import json
import unittest

import httpx

from mcp_usecases.agent.llm import CloudflareProvider, get_llm_provider


class TestGetLLMProvider(unittest.TestCase):
    def test_cloudflare_without_account_id(self):
        with self.assertRaises(ValueError) as ctx:
            get_llm_provider("cloudflare", "token")
        self.assertIn("account id", str(ctx.exception))

    def test_unknown_provider(self):
        with self.assertRaises(ValueError):
            get_llm_provider("gemini", "key")

    def test_cloudflare_provider_name_is_case_insensitive(self):
        provider = get_llm_provider("Cloudflare", "token", account_id="acct")
        self.assertIsInstance(provider, CloudflareProvider)
        self.assertEqual(provider.account_id, "acct")


class TestCloudflareProvider(unittest.IsolatedAsyncioTestCase):
    async def test_generate_text(self):
        requests = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            return httpx.Response(200, json={"result": {"response": "Done."}, "success": True})

        provider = CloudflareProvider(
            "token", account_id="acct", model="@cf/test-model", transport=httpx.MockTransport(handler)
        )
        self.assertEqual(await provider.generate_text("Summarize", system_prompt="Be brief"), "Done.")

        request = requests[0]
        self.assertIn("/accounts/acct/ai/run/", str(request.url))
        self.assertEqual(request.headers["Authorization"], "Bearer token")
        body = json.loads(request.content)
        self.assertEqual([m["role"] for m in body["messages"]], ["system", "user"])

    async def test_unexpected_payload(self):
        transport = httpx.MockTransport(lambda request: httpx.Response(200, json={"result": {}}))
        provider = CloudflareProvider("token", account_id="acct", transport=transport)
        with self.assertRaises(ValueError):
            await provider.generate_text("Summarize")


if __name__ == "__main__":
    unittest.main()
