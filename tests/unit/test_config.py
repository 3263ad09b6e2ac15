import json
import sys
import tempfile
import unittest
from pathlib import Path

ROOT = Path(__file__).resolve().parents[2]
sys.path.insert(0, str(ROOT / "packages" / "core"))

from libsync_core.config import ConfigError, SyncConfig, load_config, redacted, set_libs_dir, set_repo


class ConfigTests(unittest.TestCase):
    def test_load_default_when_missing(self):
        with tempfile.TemporaryDirectory() as tmp:
            cfg = load_config(Path(tmp) / "missing.json", environ={})
            self.assertIsInstance(cfg, SyncConfig)
            self.assertEqual(cfg.source.slug, "elliottech/lighter-go")
            self.assertEqual(cfg.source.tag, "latest")
            self.assertEqual(cfg.layout.libs_dir, "libs")
            self.assertEqual(cfg.network.api_timeout_s, 30)
            self.assertIsNone(cfg.network.token)

    def test_file_values_merge_over_defaults(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "libsync.json"
            path.write_text(
                json.dumps(
                    {
                        "source": {"owner": "acme", "tag": "v0.9.0", "api_base": "https://ghe.example/api/v3/"},
                        "layout": {"libs_dir": "vendor\\libs\\"},
                        "network": {"download_timeout_s": 0, "unknown": True},
                        "extra": {"ignored": 1},
                    }
                ),
                encoding="utf-8",
            )
            cfg = load_config(path, environ={})
            self.assertEqual(cfg.source.slug, "acme/lighter-go")
            self.assertEqual(cfg.source.tag, "v0.9.0")
            self.assertEqual(cfg.source.api_base, "https://ghe.example/api/v3")
            self.assertEqual(cfg.layout.libs_dir, "vendor/libs")
            self.assertEqual(cfg.network.download_timeout_s, 1)
            self.assertFalse(hasattr(cfg.network, "unknown"))

    def test_invalid_file_raises(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "libsync.json"
            path.write_text("{not json", encoding="utf-8")
            with self.assertRaises(ConfigError):
                load_config(path, environ={})

            path.write_text("[]", encoding="utf-8")
            with self.assertRaises(ConfigError):
                load_config(path, environ={})

            path.write_text(json.dumps({"network": {"api_timeout_s": "soon"}}), encoding="utf-8")
            with self.assertRaises(ConfigError):
                load_config(path, environ={})

    def test_env_overrides(self):
        env = {
            "LIBSYNC_CA_BUNDLE": "/tmp/ca.pem",
            "LIBSYNC_ALLOW_INSECURE_TLS": "yes",
            "GITHUB_TOKEN": "ghp_secret",
        }
        cfg = load_config(None, environ=env)
        self.assertEqual(cfg.network.ca_bundle, "/tmp/ca.pem")
        self.assertTrue(cfg.network.allow_insecure_tls)
        self.assertEqual(cfg.network.token, "ghp_secret")
        self.assertEqual(redacted(cfg)["network"]["token"], "***REDACTED***")

    def test_set_repo(self):
        cfg = load_config(None, environ={})
        set_repo(cfg, "someone/fork")
        self.assertEqual(cfg.source.slug, "someone/fork")
        for bad in ("nofork", "/repo", "owner/", "a/b/c"):
            with self.assertRaises(ConfigError):
                set_repo(cfg, bad)

    def test_set_libs_dir(self):
        cfg = load_config(None, environ={})
        set_libs_dir(cfg, "vendor\\libs\\")
        self.assertEqual(cfg.layout.libs_dir, "vendor/libs")
        for bad in ("", "   ", "/", "/abs/libs", "C:\\libs"):
            with self.assertRaises(ConfigError):
                set_libs_dir(cfg, bad)
        self.assertEqual(cfg.layout.libs_dir, "vendor/libs")

    def test_absolute_libs_dir_in_file_raises(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "libsync.json"
            path.write_text(json.dumps({"layout": {"libs_dir": "/opt/libs"}}), encoding="utf-8")
            with self.assertRaises(ConfigError):
                load_config(path, environ={})


if __name__ == "__main__":
    unittest.main()
