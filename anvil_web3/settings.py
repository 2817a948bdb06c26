import copy
import json
from types import SimpleNamespace


class IndexableNamespace(SimpleNamespace):
    def __len__(self):
        return len(self.__dict__)

    def __getitem__(self, key):
        return self.__dict__[key]

    def __contains__(self, key):
        return key in self.__dict__

    def get(self, key, default=None):
        return self.__dict__.get(key, default)


def _merge(target: IndexableNamespace, values: dict) -> None:
    # nested dicts extend an existing namespace, anything else replaces the value
    for k, v in values.items():
        current = target.__dict__.get(k, None)
        if isinstance(v, dict):
            if not isinstance(current, IndexableNamespace):
                current = IndexableNamespace()
                target.__dict__[k] = current
            _merge(current, v)
        else:
            target.__dict__[k] = v


class Settings(IndexableNamespace):
    default_settings = {
        "anvil": {
            "executable": "anvil",
            "host": "127.0.0.1",
            "liveness_timeout": 60,
            "poll_interval": 1.0,
            "suppress_output": True,
        },
    }

    @classmethod
    def from_json(cls, json: dict):
        """
        Create settings from the defaults, overridden by `json`.
        """
        o = cls()
        _merge(o, copy.deepcopy(cls.default_settings))
        _merge(o, json)
        return o

    @classmethod
    def from_file(cls, path_to_json: str):
        with open(path_to_json, "r") as f:
            return cls.from_json(json.load(f))

    def register(self, json: dict):
        """
        Update the current settings. Keys not present in `json` keep their value.

        Example:
            settings.register({"anvil": {"executable": "/opt/foundry/bin/anvil"}})
        """
        _merge(self, json)

    def reset_settings_to_default(self):
        self.__dict__.clear()
        _merge(self, copy.deepcopy(self.default_settings))


settings = Settings.from_json({})
