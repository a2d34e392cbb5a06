"""Settings sources: one YAML document per top-level section, plus `-o` overrides

Sources only produce whole sections. `Settings` lists the override source
ahead of the YAML one and pydantic-settings deep-merges earlier sources over
later ones, so an override replaces just the keys it names.
"""

import functools
import typing as t
from pathlib import Path

import pydantic as p
import yaml
from pydantic_settings import PydanticBaseSettingsSource
from pydantic_settings import SettingsError

import registrar.lib.util as util
from registrar.model import DeploymentEnvironment

# fields of Settings that describe where to load from, not what was loaded
BootFields: t.Final[frozenset[str]] = frozenset({"env", "root", "override"})


class SettingsCurrentState(t.TypedDict):
    root: p.AnyUrl
    env: DeploymentEnvironment
    override: tuple[str, ...]


class SectionSource(PydanticBaseSettingsSource):
    @property
    def boot(self) -> SettingsCurrentState:
        return t.cast(SettingsCurrentState, self.current_state)

    def load(self, section: str) -> t.Any:
        """Value for `section`; raises KeyError when this source has nothing for it"""
        raise NotImplementedError

    def get_field_value(self, field: p.fields.FieldInfo, field_name: str) -> tuple[t.Any, str, bool]:
        if field_name in BootFields:
            raise KeyError(field_name)
        value = self.load(field_name)
        return value, field_name, isinstance(value, dict)

    def __call__(self) -> dict[str, t.Any]:
        data: dict[str, t.Any] = {}
        for name, field in self.settings_cls.model_fields.items():
            try:
                value, key, _ = self.get_field_value(field, name)
            except KeyError:
                continue
            except (ValueError, yaml.YAMLError) as e:
                raise SettingsError(f"error parsing section {name!r} from {self.__class__.__name__}") from e
            data[key] = value
        return data


class OverrideSettingsSource(SectionSource):
    """`-o grading.history_page_size=25` pairs; values are parsed as YAML"""

    @functools.cached_property
    def sections(self) -> dict[str, t.Any]:
        tree: dict[str, t.Any] = {}
        for pair in self.boot["override"]:
            path, sep, raw = pair.partition("=")
            if not sep:
                raise ValueError(f"override {pair!r} is not of the form key=value")
            *parents, leaf = path.strip().split(".")
            node = tree
            for key in parents:
                node = node.setdefault(key, {})
            node[leaf] = yaml.safe_load(raw.strip())
        return tree

    def load(self, section: str) -> t.Any:
        return self.sections[section]


class YAMLCascadingSettingsSource(SectionSource):
    """`<root>/<section>.yaml`, then `<root>/env.d/<env>/<section>.yaml` merged over it

    The local environment reads the root files alone.
    """

    @functools.cached_property
    def directories(self) -> list[Path]:
        root = self.boot["root"]
        if root.scheme != "file" or root.path is None:
            raise ValueError(f"configuration root {root} is not a local directory")
        env = self.boot["env"]
        dirs = [Path(root.path)]
        if env is not DeploymentEnvironment.Local:
            dirs.append(Path(root.path) / "env.d" / env.value)
        return dirs

    def load(self, section: str) -> t.Any:
        docs = [yaml.safe_load(fn.read_text(encoding="utf8")) for fn in self.files(section)]
        if not docs:
            raise KeyError(section)
        merged = docs[0]
        for doc in docs[1:]:
            if isinstance(merged, dict) and isinstance(doc, dict):
                merged = util.deep_update(t.cast(dict[t.Any, t.Any], merged), doc)
            else:
                merged = doc
        return merged

    def files(self, section: str) -> list[Path]:
        return [fn for fn in (d / f"{section}.yaml" for d in self.directories) if fn.exists()]
