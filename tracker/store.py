"""Key-value stores backing the two persisted documents.

Each key holds one JSON-compatible document that is replaced wholesale on
write. Writers read, modify and set the whole document; with two concurrent
writers the last one wins.
"""

import copy
import logging
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml

from .errors import StoreUnavailable

log = logging.getLogger(__name__)

LEASE_KEY = "lease:default"
READINGS_KEY = "readings:default"


class Store:
    """get/set interface consumed by the service layer."""

    def get(self, key: str) -> Optional[Any]:
        raise NotImplementedError

    def set(self, key: str, value: Any) -> None:
        raise NotImplementedError


class MemoryStore(Store):
    """Dict-backed store. Values are deep-copied in and out."""

    def __init__(self, initial: Optional[Dict[str, Any]] = None):
        self._data: Dict[str, Any] = copy.deepcopy(initial) if initial else {}

    def get(self, key: str) -> Optional[Any]:
        return copy.deepcopy(self._data.get(key))

    def set(self, key: str, value: Any) -> None:
        self._data[key] = copy.deepcopy(value)


class YamlStore(Store):
    """
    Single YAML file holding every key as a top-level mapping entry.

    A missing file reads as empty; it is created on the first write.
    """

    def __init__(self, filename: Union[str, Path]):
        self.filename = Path(filename)

    def _load(self) -> Dict[str, Any]:
        if not self.filename.exists():
            return {}
        try:
            with open(self.filename, "r") as fp:
                data = yaml.load(fp, Loader=yaml.SafeLoader)
        except (OSError, yaml.YAMLError) as e:
            raise StoreUnavailable(f"Cannot read {self.filename}: {e}") from e
        if data is None:
            return {}
        if not isinstance(data, dict):
            raise StoreUnavailable(f"{self.filename} does not contain a mapping")
        return data

    def get(self, key: str) -> Optional[Any]:
        return self._load().get(key)

    def set(self, key: str, value: Any) -> None:
        data = self._load()
        data[key] = value
        try:
            self.filename.parent.mkdir(parents=True, exist_ok=True)
            with open(self.filename, "w") as fp:
                yaml.dump(
                    data,
                    fp,
                    default_flow_style=False,
                    allow_unicode=True,
                    sort_keys=False,
                    width=120,
                )
        except OSError as e:
            raise StoreUnavailable(f"Cannot write {self.filename}: {e}") from e
        log.debug("Wrote %s to %s", key, self.filename)
