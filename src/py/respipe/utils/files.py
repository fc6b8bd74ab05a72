import asyncio
import glob
import mimetypes
from pathlib import Path
from typing import AsyncIterator, Iterable

from ..model import FileUnit

mimetypes.init()

# Overrides for extensions the platform's tables get wrong or miss
MIME_TYPES: dict[str, str] = dict(
	bz2="application/x-bzip",
	gz="application/x-gzip",
	js="application/javascript",
	mjs="application/javascript",
	map="application/json",
	md="text/markdown",
)

DEFAULT_MIME_TYPE: str = "application/octet-stream"

GLOB_MAGIC: str = "*?["


def contentType(path: Path | str) -> str:
	"""Guesses the content type from the given path's extension."""
	name = str(path)
	ext = name.rsplit(".", 1)[-1].lower() if "." in name else ""
	return (
		res
		if (res := MIME_TYPES.get(ext))
		else mimetypes.guess_type(name)[0] or DEFAULT_MIME_TYPE
	)


def isGlob(ref: str) -> bool:
	return any(_ in ref for _ in GLOB_MAGIC)


def expand(refs: Iterable[str]) -> list[Path]:
	"""Expands the references to a list of paths, in order. Globs expand to
	their sorted matches, references starting with `!` remove the paths
	they match from what was collected so far. Paths are listed once."""
	paths: list[Path] = []
	for ref in refs:
		if ref.startswith("!"):
			excluded = set(_match(ref[1:]))
			paths = [_ for _ in paths if _ not in excluded]
		else:
			for p in _match(ref):
				if p not in paths:
					paths.append(p)
	return paths


def _match(ref: str) -> list[Path]:
	if isGlob(ref):
		return [Path(_) for _ in sorted(glob.glob(ref, recursive=True))]
	else:
		return [Path(ref)]


def readFile(path: Path | str) -> FileUnit | None:
	"""Reads the file at the given path, returning `None` when there is
	no regular file there."""
	p = Path(path)
	if not p.is_file():
		return None
	with open(p, "rb") as f:
		return FileUnit(p, f.read())


async def src(refs: Iterable[str]) -> AsyncIterator[FileUnit]:
	"""Streams the files designated by the references. Missing files are
	not an error, they are absent from the stream. Reads happen in a worker
	thread, so each one suspends the stream."""
	for path in expand(refs):
		if unit := await asyncio.to_thread(readFile, path):
			yield unit


# EOF
