from __future__ import annotations

import re
import uuid
from pathlib import Path

_UNSAFE = re.compile(r"[^A-Za-z0-9._-]+")


def safe_filename(name: str) -> str:
    base = Path(name or "").name.strip()
    cleaned = _UNSAFE.sub("_", base).strip("._")
    return cleaned or "file"


class FileBlobStore:
    """Uploaded file contents on disk under `root/<company>/<uuid>_<name>`."""

    def __init__(self, root: str | Path):
        self.root = Path(root)
        self.root.mkdir(parents=True, exist_ok=True)

    def save(self, content: bytes, *, filename: str, company_id: str | None = None) -> str:
        folder = safe_filename(company_id or "shared")
        rel = Path(folder) / f"{uuid.uuid4().hex}_{safe_filename(filename)}"
        target = self.root / rel
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(content)
        return rel.as_posix()

    def _resolve(self, storage_path: str) -> Path:
        target = (self.root / storage_path).resolve()
        if self.root.resolve() not in target.parents:
            raise ValueError(f"storage path escapes the file store: {storage_path}")
        return target

    def read(self, storage_path: str) -> bytes:
        return self._resolve(storage_path).read_bytes()

    def delete(self, storage_path: str) -> bool:
        target = self._resolve(storage_path)
        try:
            target.unlink()
        except FileNotFoundError:
            return False
        return True
