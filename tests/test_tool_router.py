import tempfile
import unittest
from pathlib import Path

from fakes import FakeFetcher, build_service

from rules_mirror.adapters.mcp.tool_router import TOOLS, ToolRouter

RULE_FILES = {
    "rules/a.mdc": "rule a",
    "rules/README.md": "how to use the rules",
}


class ToolRouterTests(unittest.IsolatedAsyncioTestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self._tmp.cleanup)
        self.fetcher = FakeFetcher(Path(self._tmp.name) / "mirror", files=RULE_FILES)
        self.router = ToolRouter(build_service(self.fetcher))

    def test_tool_names(self) -> None:
        self.assertEqual(
            [tool.name for tool in TOOLS],
            ["get_rule", "list_rules", "get_all_rules", "get_rule_readme", "refresh_rules"],
        )

    async def test_get_rule(self) -> None:
        result = await self.router.call_tool("get_rule", {"ruleName": "a"})
        self.assertFalse(result.is_error)
        self.assertTrue(result.text.endswith("rule a"))

    async def test_get_rule_requires_name(self) -> None:
        result = await self.router.call_tool("get_rule", {})
        self.assertTrue(result.is_error)
        self.assertIn("ruleName", result.text)

    async def test_refresh_argument_defaults_to_false(self) -> None:
        await self.router.call_tool("list_rules")
        await self.router.call_tool("list_rules", {"refresh": False})
        self.assertEqual(self.fetcher.calls, ["clone"])
        await self.router.call_tool("get_all_rules", {"refresh": True})
        self.assertEqual(self.fetcher.calls, ["clone", "update"])

    async def test_refresh_rules(self) -> None:
        result = await self.router.call_tool("refresh_rules", {})
        self.assertFalse(result.is_error)
        self.assertEqual(self.fetcher.calls, ["clone"])

    async def test_readme_tool(self) -> None:
        result = await self.router.call_tool("get_rule_readme", None)
        self.assertEqual(result.text, "how to use the rules")

    async def test_unknown_tool(self) -> None:
        result = await self.router.call_tool("delete_rules", {})
        self.assertTrue(result.is_error)
        self.assertEqual(result.text, "Unknown tool: delete_rules")

    async def test_read_resource_routes_readme_and_rules(self) -> None:
        readme = await self.router.read_resource("rule://README")
        self.assertEqual(readme.text, "how to use the rules")
        rule = await self.router.read_resource("rule://a")
        self.assertIn("# Rule: a", rule.text)

    async def test_read_resource_rejects_foreign_uri(self) -> None:
        result = await self.router.read_resource("file:///etc/passwd")
        self.assertTrue(result.is_error)
        self.assertIn("Invalid resource URI", result.text)


if __name__ == "__main__":
    unittest.main()
