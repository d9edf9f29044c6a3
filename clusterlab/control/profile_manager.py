import copy
import hashlib
import json
import re
import shutil
import sys
from pathlib import Path
from typing import Dict, Iterable, Optional

from ..engines.base import coerce_int
from .config import COLOR_MODES, DEFAULTS, LIMITS, MODE_DATASETS, PROFILE_PRESETS

METADATA_FILE = "metadata.json"


def _warn(message: str) -> None:
    print(f"[Clusterlab][WARN] {message}", file=sys.stderr)


def _dir_name(name: str) -> str:
    slug = re.sub(r"[^0-9a-zA-Z]+", "-", name.strip().lower()).strip("-") or "profil"
    return f"{slug}-{hashlib.sha1(name.encode('utf-8')).hexdigest()[:8]}"


def _read_json(path: Path) -> Optional[dict]:
    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as exc:
        _warn(f"Skipping unreadable profile file {path}: {exc}")
        return None
    if not isinstance(payload, dict):
        _warn(f"Skipping profile file {path}: expected an object")
        return None
    return payload


def _write_json(path: Path, payload: dict) -> None:
    path.write_text(json.dumps(payload, ensure_ascii=False, indent=2, sort_keys=True), encoding="utf-8")


def _clean_value(section: str, key: str, value):
    """Return ``value`` checked against the form limits, or ``None`` to drop it."""

    if section == "simulation" and key == "dataset":
        text = str(value or "").strip().lower()
        return text or None
    if section == "view" and key == "color_mode":
        text = str(value or "").strip().lower()
        return text if text in {mode for mode, _label in COLOR_MODES} else None
    if section == "view" and key == "show_trails":
        return value if isinstance(value, bool) else None
    limits = LIMITS.get(f"{section}.{key}")
    if limits is None:
        return None
    number = coerce_int(value)
    low, high, step = limits
    if number is None or not low <= number <= high or (number - low) % step:
        return None
    return number


class ProfileManager:
    """Named parameter profiles stored as JSON.

    Each profile is a directory under ``path`` holding ``metadata.json`` (the
    display name, which may contain any character) and one file per section.
    Only the ``simulation`` and ``view`` sections are kept; values outside
    :data:`LIMITS` are dropped when a profile is read or saved, so the control
    window never receives a value its widgets cannot show.
    """

    DEFAULT_PROFILE = "Défaut"
    SECTIONS = ("simulation", "view")

    def __init__(self, storage_path: Optional[Path] = None):
        self.path = Path(storage_path) if storage_path is not None else Path.home() / ".clusterlab" / "profiles"
        self._profiles: Dict[str, dict] = {}
        self._dirs: Dict[str, Path] = {}
        self._load()

    # ---------------------------------------------------------------- storage
    @classmethod
    def _coerce_state(cls, state: dict) -> dict:
        out: Dict[str, dict] = {}
        for section in cls.SECTIONS:
            values = state.get(section) if isinstance(state, dict) else None
            if not isinstance(values, dict):
                continue
            kept = {}
            for key, value in values.items():
                cleaned = _clean_value(section, key, value)
                if cleaned is not None:
                    kept[key] = cleaned
            out[section] = kept
        return out

    def _load(self) -> None:
        self._profiles = {}
        self._dirs = {}
        if self.path.is_dir():
            for directory in sorted(p for p in self.path.iterdir() if p.is_dir()):
                name = directory.name
                meta_path = directory / METADATA_FILE
                if meta_path.exists():
                    meta = _read_json(meta_path)
                    if meta is not None and isinstance(meta.get("name"), str):
                        name = meta["name"]
                sections = {}
                for section in self.SECTIONS:
                    section_path = directory / f"{section}.json"
                    if section_path.exists():
                        payload = _read_json(section_path)
                        if payload is not None:
                            sections[section] = payload
                if sections:
                    self._profiles[name] = self._coerce_state(sections)
                    self._dirs[name] = directory

        missing = {}
        if self.DEFAULT_PROFILE not in self._profiles:
            missing[self.DEFAULT_PROFILE] = DEFAULTS
        for name, data in PROFILE_PRESETS.items():
            if name not in self._profiles:
                missing[name] = data
        for name, data in missing.items():
            self._profiles[name] = self._coerce_state(data)
            self._persist(name)

    def _persist(self, name: str) -> None:
        directory = self._dirs.get(name) or self.path / _dir_name(name)
        directory.mkdir(parents=True, exist_ok=True)
        _write_json(directory / METADATA_FILE, {"name": name})
        payload = self._profiles[name]
        for section in self.SECTIONS:
            section_path = directory / f"{section}.json"
            if section in payload:
                _write_json(section_path, payload[section])
            elif section_path.exists():
                section_path.unlink()
        self._dirs[name] = directory

    def _discard(self, name: str) -> None:
        directory = self._dirs.pop(name, None)
        if directory is not None and directory.exists():
            shutil.rmtree(directory, ignore_errors=True)

    # --------------------------------------------------------------- profiles
    def list_profiles(self, mode: Optional[str] = None) -> Iterable[str]:
        """Default profile first, then the others by name.

        With ``mode`` set, profiles whose dataset that engine cannot build are
        left out.
        """

        others = sorted((n for n in self._profiles if n != self.DEFAULT_PROFILE and self._fits(n, mode)), key=str.lower)
        return [self.DEFAULT_PROFILE, *others]

    def _fits(self, name: str, mode: Optional[str]) -> bool:
        if mode not in MODE_DATASETS:
            return True
        dataset = self._profiles[name].get("simulation", {}).get("dataset")
        return dataset is None or dataset in MODE_DATASETS[mode]

    def has_profile(self, name: str) -> bool:
        return name in self._profiles

    def get_profile(self, name: str, defaults: Optional[dict] = None) -> dict:
        """Profile ``name`` (or the default one) laid over ``defaults``."""

        out = copy.deepcopy(defaults if defaults is not None else DEFAULTS)
        data = self._profiles.get(name, self._profiles[self.DEFAULT_PROFILE])
        for section, values in data.items():
            out.setdefault(section, {}).update(copy.deepcopy(values))
        return out

    def save_profile(self, name: str, state: dict) -> None:
        clean_name = name.strip()
        if not clean_name:
            raise ValueError("Profile name cannot be empty")
        self._profiles[clean_name] = self._coerce_state(state)
        self._persist(clean_name)

    def delete_profile(self, name: str) -> None:
        if name == self.DEFAULT_PROFILE:
            raise ValueError("Default profile cannot be deleted")
        if self._profiles.pop(name, None) is not None:
            self._discard(name)

    def rename_profile(self, old: str, new: str) -> None:
        new_name = new.strip()
        if not new_name:
            raise ValueError("Profile name cannot be empty")
        if old == self.DEFAULT_PROFILE:
            raise ValueError("Default profile cannot be renamed")
        if old not in self._profiles:
            raise KeyError(old)
        if new_name in self._profiles:
            raise ValueError("Profile already exists")
        self._profiles[new_name] = self._profiles.pop(old)
        self._discard(old)
        self._persist(new_name)

    def profile_equals(self, name: str, state: dict) -> bool:
        """True when every value stored under ``name`` matches ``state``."""
        clean = self._coerce_state(state)
        return name in self._profiles and self.get_profile(name, clean) == clean

    def reload(self) -> None:
        self._load()
