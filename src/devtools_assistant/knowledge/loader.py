"""File loaders turning uploads into knowledge base documents."""

from __future__ import annotations

import json
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Any


@dataclass(slots=True)
class LoadedFile:
    content: str
    metadata: dict[str, Any]


class Loader(ABC):
    """Reads one family of file formats."""

    extensions: tuple[str, ...] = ()
    file_type = "text"

    def load(self, path: Path) -> LoadedFile:
        try:
            raw = path.read_text(encoding="utf-8")
        except UnicodeDecodeError as exc:
            raise ValueError(f"{path.name} is not UTF-8 text") from exc
        return LoadedFile(
            content=self.normalize(raw),
            metadata={"filename": path.name, "type": self.file_type, "size": len(raw)},
        )

    @abstractmethod
    def normalize(self, raw: str) -> str:
        """Turn the raw file text into searchable document content."""


class PlainTextLoader(Loader):
    extensions = (".txt", ".log", ".csv")

    def normalize(self, raw: str) -> str:
        return raw


class MarkdownLoader(PlainTextLoader):
    extensions = (".md", ".markdown")
    file_type = "markdown"


class JsonLoader(Loader):
    """Re-serializes JSON with sorted keys so equal payloads give equal text."""

    extensions = (".json",)
    file_type = "json"

    def normalize(self, raw: str) -> str:
        try:
            payload: Any = json.loads(raw)
        except json.JSONDecodeError as exc:
            raise ValueError(f"Invalid JSON: {exc}") from exc
        if isinstance(payload, (dict, list)):
            return json.dumps(payload, ensure_ascii=False, sort_keys=True, indent=2)
        return str(payload)


class LoaderRegistry:
    def __init__(self, loaders: list[Loader] | None = None) -> None:
        self._by_extension: dict[str, Loader] = {}
        for loader in loaders or [PlainTextLoader(), MarkdownLoader(), JsonLoader()]:
            self.register(loader)

    def register(self, loader: Loader) -> None:
        self._by_extension.update({extension.lower(): loader for extension in loader.extensions})

    def supported_extensions(self) -> list[str]:
        return sorted(self._by_extension)

    def load(self, path: str | Path) -> LoadedFile:
        file_path = Path(path)
        loader = self._by_extension.get(file_path.suffix.lower())
        if loader is None:
            raise ValueError(
                f"Unsupported file type {file_path.suffix or '(none)'}; "
                f"expected one of {', '.join(self.supported_extensions())}"
            )
        return loader.load(file_path)
