import json

import pytest

from misskeyvt.config import ConfigError, load, parse


def write(tmp_path, content: str) -> str:
    path = tmp_path / "config.json"
    path.write_text(content, encoding="utf-8")
    return str(path)


class TestConfig:
    def test_valid(self, tmp_path) -> None:
        path = write(tmp_path, json.dumps({"instance_url": " https://example.test ", "access_token": "secret"}))
        config = load(path)

        assert config.instanceUrl == "https://example.test"
        assert config.accessToken == "secret"
        assert "secret" not in repr(config)

    def test_missing_file(self, tmp_path) -> None:
        with pytest.raises(ConfigError, match="does not exist"):
            load(str(tmp_path / "nope.json"))

    def test_invalid_json(self, tmp_path) -> None:
        with pytest.raises(ConfigError, match="not valid JSON"):
            load(write(tmp_path, "{instance_url"))

    @pytest.mark.parametrize(
        "data",
        [
            [],
            "https://example.test",
            {},
            {"instance_url": "https://example.test"},
            {"access_token": "secret"},
            {"instance_url": "", "access_token": "secret"},
            {"instance_url": "https://example.test", "access_token": 5},
        ],
    )
    def test_malformed(self, data) -> None:
        with pytest.raises(ConfigError):
            parse(data)
