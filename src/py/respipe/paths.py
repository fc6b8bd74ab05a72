import os.path
from pathlib import Path
from typing import Iterable

# NOTE: References are not checked against the root, so `..` segments
# can reach anywhere on the filesystem. This is only meant for local
# development servers.

NEGATION: str = "!"


def isAbsolute(ref: str) -> bool:
	"""A reference is absolute when normalizing it is the same as resolving
	it against the current directory."""
	return os.path.abspath(ref) == os.path.normpath(ref)


def resolvePath(root: str | Path, ref: str | Path) -> str:
	"""Resolves the file reference against `root`, keeping a leading `!`
	(which negates a glob) around the resolved path."""
	ref = str(ref)
	if ref.startswith(NEGATION):
		return NEGATION + resolvePath(root, ref[len(NEGATION) :])
	elif isAbsolute(ref):
		return ref
	else:
		return os.path.normpath(os.path.join(str(root), ref))


def resolvePaths(
	root: str | Path, refs: str | Path | Iterable[str | Path]
) -> list[str]:
	"""Resolves one or more references, preserving their order."""
	items: Iterable[str | Path] = (refs,) if isinstance(refs, (str, Path)) else refs
	return [resolvePath(root, _) for _ in items]


def requestReference(path: str) -> str:
	"""The file reference for a request path, ie. without its leading slash."""
	return path[1:] if path.startswith("/") else path


# EOF
