import os
import tempfile
import textwrap
import unittest
from pathlib import Path
from unittest import mock

from pydantic import ValidationError

from rules_mirror.config.loader import ConfigError, YamlConfigLoader
from rules_mirror.config.models import ConfigLoadRequest

MINIMAL_CONFIG = textwrap.dedent(
    """\
    repository:
      url: https://example.com/rules.git
    """
)


class YamlConfigLoaderTests(unittest.IsolatedAsyncioTestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self._tmp.cleanup)
        self.root = Path(self._tmp.name)
        self.config_path = self.root / "config.yaml"
        # Keep the real environment from leaking overrides into these tests.
        patcher = mock.patch.dict(os.environ, {}, clear=True)
        patcher.start()
        self.addCleanup(patcher.stop)

    async def _load(self, text: str):
        self.config_path.write_text(text, encoding="utf-8")
        request = ConfigLoadRequest(yaml_path=str(self.config_path), env_prefix="RULES_MIRROR__", dotenv_path=None)
        return await YamlConfigLoader().load(request)

    async def test_defaults_applied(self) -> None:
        config = await self._load(MINIMAL_CONFIG)
        self.assertEqual(config.repository.url, "https://example.com/rules.git")
        self.assertIsNone(config.repository.ref)
        self.assertEqual(config.repository.cache_ttl_seconds, 3600.0)
        self.assertEqual(tuple(config.rules.extensions), (".mdc", ".md", ".txt"))
        self.assertEqual(config.logging.level, "INFO")

    async def test_full_config(self) -> None:
        config = await self._load(
            textwrap.dedent(
                """\
                logging:
                  level: DEBUG
                repository:
                  url: git@example.com:team/rules.git
                  ref: release
                  cache_dir: /tmp/rules
                  cache_ttl_seconds: 60
                  fetch_timeout_seconds: 30
                rules:
                  root_candidates: [docs/rules, .]
                  extensions: [md, .txt]
                """
            )
        )
        self.assertEqual(config.repository.ref, "release")
        self.assertEqual(config.repository.fetch_timeout_seconds, 30.0)
        self.assertEqual(tuple(config.rules.root_candidates), ("docs/rules", "."))
        self.assertEqual(tuple(config.rules.extensions), (".md", ".txt"))

    async def test_env_override_replaces_and_adds_values(self) -> None:
        os.environ["RULES_MIRROR__REPOSITORY__CACHE_TTL_SECONDS"] = "10"
        os.environ["RULES_MIRROR__REPOSITORY__REF"] = "main"
        config = await self._load(MINIMAL_CONFIG)
        self.assertEqual(config.repository.cache_ttl_seconds, 10.0)
        self.assertEqual(config.repository.ref, "main")

    async def test_env_override_of_unknown_key_raises(self) -> None:
        os.environ["RULES_MIRROR__REPOSITORY__BRANCHES"] = "main"
        with self.assertRaises(ConfigError) as ctx:
            await self._load(MINIMAL_CONFIG)
        self.assertIn("repository.branches", str(ctx.exception))

    async def test_env_override_of_text_setting_keeps_raw_string(self) -> None:
        for raw in ("2024", "1.0", "no", "on"):
            with self.subTest(ref=raw):
                os.environ["RULES_MIRROR__REPOSITORY__REF"] = raw
                config = await self._load(MINIMAL_CONFIG)
                self.assertEqual(config.repository.ref, raw)

    async def test_env_override_parses_non_text_settings_as_yaml(self) -> None:
        os.environ["RULES_MIRROR__REPOSITORY__FETCH_TIMEOUT_SECONDS"] = "null"
        os.environ["RULES_MIRROR__RULES__EXTENSIONS"] = "[.md]"
        config = await self._load(MINIMAL_CONFIG + "  fetch_timeout_seconds: 5\n")
        self.assertIsNone(config.repository.fetch_timeout_seconds)
        self.assertEqual(tuple(config.rules.extensions), (".md",))

    async def test_env_override_without_key_raises(self) -> None:
        os.environ["RULES_MIRROR__"] = "x"
        with self.assertRaises(ConfigError):
            await self._load(MINIMAL_CONFIG)

    async def test_env_override_of_section_raises(self) -> None:
        os.environ["RULES_MIRROR__REPOSITORY"] = "x"
        with self.assertRaises(ConfigError):
            await self._load(MINIMAL_CONFIG)

    async def test_missing_url_is_rejected(self) -> None:
        with self.assertRaises(ValidationError):
            await self._load("repository:\n  url: '   '\n")
        with self.assertRaises(ValidationError):
            await self._load("logging:\n  level: INFO\n")

    async def test_unknown_key_is_rejected(self) -> None:
        with self.assertRaises(ValidationError):
            await self._load(MINIMAL_CONFIG + "  branch: main\n")

    async def test_invalid_yaml_raises_config_error(self) -> None:
        with self.assertRaises(ConfigError):
            await self._load("repository: [unclosed\n")

    async def test_non_mapping_yaml_raises_config_error(self) -> None:
        with self.assertRaises(ConfigError):
            await self._load("- just\n- a list\n")

    async def test_missing_file_is_seeded_from_example(self) -> None:
        (self.root / "examples").mkdir()
        (self.root / "examples" / "config.yaml").write_text(MINIMAL_CONFIG, encoding="utf-8")
        previous = os.getcwd()
        os.chdir(self.root)
        self.addCleanup(os.chdir, previous)

        target = self.root / "data" / "config" / "config.yaml"
        config = await YamlConfigLoader().load(ConfigLoadRequest(yaml_path=str(target), dotenv_path=None))
        self.assertTrue(target.is_file())
        self.assertEqual(config.repository.url, "https://example.com/rules.git")

    async def test_missing_file_without_example_raises(self) -> None:
        previous = os.getcwd()
        os.chdir(self.root)
        self.addCleanup(os.chdir, previous)
        with self.assertRaises(FileNotFoundError):
            await YamlConfigLoader().load(ConfigLoadRequest(yaml_path="nope.yaml", dotenv_path=None))

    async def test_dotenv_values_feed_overrides(self) -> None:
        dotenv_path = self.root / ".env"
        dotenv_path.write_text("RULES_MIRROR__REPOSITORY__REF=from-dotenv\n", encoding="utf-8")
        self.config_path.write_text(MINIMAL_CONFIG, encoding="utf-8")
        request = ConfigLoadRequest(yaml_path=str(self.config_path), dotenv_path=str(dotenv_path))
        config = await YamlConfigLoader().load(request)
        self.assertEqual(config.repository.ref, "from-dotenv")


if __name__ == "__main__":
    unittest.main()
