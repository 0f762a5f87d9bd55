import base64
import json
import logging
import zlib
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any
from codeplay.core.languages import LANGUAGES, Language

log = logging.getLogger("storage")

SESSION_KEY = "cp_last_session"
THEME_KEY = "cp_theme"
THEMES = ("light", "dark")


@dataclass
class SnippetData:
    language: Language
    code: str

    def to_dict(self) -> dict:
        data = asdict(self)
        data["language"] = self.language.value
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "SnippetData":
        return cls(language=Language(data["language"]), code=str(data["code"]))

    @classmethod
    def default(cls) -> "SnippetData":
        return cls(Language.python, LANGUAGES[Language.python].snippet)


class SettingsStore:
    """Small JSON key-value file. Loaded once, written through on every set."""

    def __init__(self, path: str | Path):
        self.path = Path(path)
        self._data: dict[str, Any] = {}

    def load(self) -> "SettingsStore":
        try:
            raw = json.loads(self.path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            raw = {}
        except (OSError, ValueError) as e:
            log.warning("ignoring unreadable settings file %s: %s", self.path, e)
            raw = {}
        self._data = raw if isinstance(raw, dict) else {}
        return self

    def get(self, key: str, default: Any = None) -> Any:
        return self._data.get(key, default)

    def set(self, key: str, value: Any):
        self._data[key] = value
        self._flush()

    def delete(self, key: str):
        if self._data.pop(key, None) is not None:
            self._flush()

    def _flush(self):
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        tmp.write_text(json.dumps(self._data), encoding="utf-8")
        tmp.replace(self.path)

    def load_theme(self) -> str:
        theme = self.get(THEME_KEY)
        return theme if theme in THEMES else "dark"

    def save_theme(self, theme: str):
        if theme not in THEMES:
            raise ValueError(f"theme must be one of {THEMES}, got {theme!r}")
        self.set(THEME_KEY, theme)

    def load_session(self) -> SnippetData:
        saved = self.get(SESSION_KEY)
        if not isinstance(saved, dict):
            return SnippetData.default()
        try:
            language = Language(saved.get("language") or Language.python)
        except ValueError:
            return SnippetData.default()
        code = saved.get("code")
        if not isinstance(code, str):
            code = LANGUAGES[Language.python].snippet
        return SnippetData(language, code)

    def save_session(self, data: SnippetData):
        self.set(SESSION_KEY, data.to_dict())


def encode_snippet(data: SnippetData) -> str:
    raw = json.dumps(data.to_dict(), separators=(",", ":")).encode("utf-8")
    packed = base64.urlsafe_b64encode(zlib.compress(raw, 9))
    return packed.decode("ascii").rstrip("=")


def decode_snippet(fragment: str | None) -> SnippetData | None:
    if not fragment:
        return None
    token = fragment.removeprefix("#")
    if not token:
        return None
    try:
        padded = token + "=" * (-len(token) % 4)
        raw = zlib.decompress(base64.b64decode(padded, altchars=b"-_", validate=True))
        return SnippetData.from_dict(json.loads(raw))
    except (ValueError, KeyError, TypeError, zlib.error) as e:
        log.error("Failed to decode snippet: %s", e)
        return None


def initial_state(fragment: str | None = None, store: SettingsStore | None = None) -> SnippetData:
    shared = decode_snippet(fragment)
    if shared:
        return shared
    if store is not None:
        return store.load_session()
    return SnippetData.default()
