import inspect
from typing import Any, AsyncIterator, Awaitable, Callable, Iterable

from .model import FileUnit, TFileStream, TStage
from .utils.files import src
from .utils.io import asBytes

# -----------------------------------------------------------------------------
#
# RUNNER
#
# -----------------------------------------------------------------------------

TProvider = Callable[[Iterable[str]], TFileStream]


async def run(
	paths: Iterable[str],
	stages: Iterable[TStage],
	request: Any = None,
	*,
	provider: TProvider = src,
) -> bytes | None:
	"""Streams the files at `paths` through the stages, in order, and
	returns the concatenation of the resulting units' content. Returns `None`
	when no unit came out of the last stage."""
	stream: TFileStream = provider(paths)
	for stage in stages:
		stream = stage(stream, request)
	count: int = 0
	content = bytearray()
	async for unit in stream:
		count += 1
		content += unit.content
	return bytes(content) if count else None


# -----------------------------------------------------------------------------
#
# STAGES
#
# -----------------------------------------------------------------------------
# Helpers to create the usual stages. They all take the legacy single
# argument form, so they can be used as factories, and compose in a
# pipeline function like `contents(bytes.upper)(files)`.


async def _resolve(value: Any) -> Any:
	return await value if inspect.isawaitable(value) else value


def each(
	transform: Callable[[FileUnit], FileUnit | None | Awaitable[FileUnit | None]],
) -> Callable[[TFileStream], TFileStream]:
	"""Maps every unit with `transform`, which may be asynchronous. Units
	for which it returns `None` are dropped."""

	async def stage(stream: TFileStream) -> AsyncIterator[FileUnit]:
		async for unit in stream:
			res = await _resolve(transform(unit))
			if res is not None:
				yield res

	return stage


def where(
	predicate: Callable[[FileUnit], bool],
) -> Callable[[TFileStream], TFileStream]:
	"""Only keeps the units matching the predicate."""
	return each(lambda _: _ if predicate(_) else None)


def contents(
	transform: Callable[[bytes], bytes | str],
) -> Callable[[TFileStream], TFileStream]:
	"""Rewrites the content of every unit."""
	return each(lambda _: _._replace(content=asBytes(transform(_.content))))


# EOF
