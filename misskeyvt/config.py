import json
from typing import Any, Dict


class ConfigError(Exception):
    pass


class Config:
    def __init__(self, instanceUrl: str, accessToken: str) -> None:
        self.instanceUrl = instanceUrl
        self.accessToken = accessToken

    def __repr__(self) -> str:
        # Never echo the token into logs.
        return f"Config(instanceUrl={self.instanceUrl!r})"


def parse(data: Any) -> Config:
    if not isinstance(data, dict):
        raise ConfigError("Config must be a JSON object!")

    values: Dict[str, str] = {}
    for key in ["instance_url", "access_token"]:
        value = data.get(key)
        if not isinstance(value, str) or not value.strip():
            raise ConfigError(f"Config is missing a value for \"{key}\"!")
        values[key] = value.strip()

    return Config(values["instance_url"], values["access_token"])


def load(path: str) -> Config:
    try:
        with open(path, "r", encoding="utf-8") as fp:
            data = json.load(fp)
    except FileNotFoundError:
        raise ConfigError(f"Config file {path} does not exist!")
    except OSError as e:
        raise ConfigError(f"Cannot read config file {path}: {e.strerror}")
    except json.JSONDecodeError as e:
        raise ConfigError(f"Config file {path} is not valid JSON: {e.msg} at line {e.lineno}")
    except UnicodeDecodeError:
        raise ConfigError(f"Config file {path} is not valid UTF-8!")

    return parse(data)
