"""Formula file discovery."""

from __future__ import annotations

from pathlib import Path
from typing import Generator, Iterable, Tuple


def iter_formula_files(
    root_paths: Iterable[str], extensions: Tuple[str, ...] = (".rb",)
) -> Generator[Path, None, None]:
    """Yield formula files given directly or found beneath the provided directories."""

    for root in root_paths:
        root_path = Path(root)
        if root_path.is_file():
            yield root_path
            continue
        for path in sorted(root_path.rglob("*")):
            if path.suffix in extensions and path.is_file():
                yield path
