from pathlib import Path
from typing import (
	Any,
	AsyncIterable,
	Callable,
	Iterable,
	NamedTuple,
	Protocol,
	TypeAlias,
)

from .config import INDEX_FILE, ROOT
from .utils.logging import TLogFunction, warning

# -----------------------------------------------------------------------------
#
# FILE UNITS
#
# -----------------------------------------------------------------------------


class FileUnit(NamedTuple):
	"""A file flowing through a pipeline: its path and in-memory content.
	Stages rewrite units with `unit._replace(content=…)`."""

	path: Path
	content: bytes

	@property
	def name(self) -> str:
		return self.path.name

	@property
	def suffix(self) -> str:
		return self.path.suffix

	@property
	def text(self) -> str:
		return self.content.decode("utf8")


TFileStream: TypeAlias = AsyncIterable[FileUnit]
# A normalized transform stage, given the stream of units and the request
TStage: TypeAlias = Callable[[TFileStream, Any], TFileStream]
# A legacy stage transform, as returned by a factory
TTransform: TypeAlias = Callable[[TFileStream], TFileStream]
TFactory: TypeAlias = Callable[[], TTransform]

# -----------------------------------------------------------------------------
#
# PATTERNS
#
# -----------------------------------------------------------------------------


class Searchable(Protocol):
	"""Anything that can test a string, like a compiled regular expression."""

	def search(self, string: str) -> Any: ...


class ExactPattern(NamedTuple):
	"""Matches a request path that is exactly equal to the value."""

	value: str

	@property
	def key(self) -> str:
		return self.value

	def matches(self, path: str) -> bool:
		return self.value == path

	def __str__(self) -> str:
		return self.value


class RegexPattern(NamedTuple):
	"""Matches a request path using the `search` method of the wrapped
	regular expression (or anything that offers the same method)."""

	regex: Searchable

	@property
	def key(self) -> str:
		source = getattr(self.regex, "pattern", self.regex)
		return source.decode("utf8") if isinstance(source, bytes) else str(source)

	def matches(self, path: str) -> bool:
		return bool(self.regex.search(path))

	def __str__(self) -> str:
		return self.key


TPattern: TypeAlias = ExactPattern | RegexPattern


def pattern(url: Any, indexFile: str = INDEX_FILE) -> TPattern:
	"""Creates the pattern for the given target URL. Literal URLs ending
	in `/` designate the index file of that directory."""
	if isinstance(url, str):
		return ExactPattern(f"{url}{indexFile}" if url.endswith("/") else url)
	elif callable(getattr(url, "search", None)):
		return RegexPattern(url)
	else:
		raise ValueError(f"Target URL must be a string or a pattern, got: {url!r}")


# -----------------------------------------------------------------------------
#
# STAGES
#
# -----------------------------------------------------------------------------


def fromPipeline(pipeline: TStage) -> tuple[TStage, ...]:
	"""A pipeline function is a single stage, given the request."""
	if not callable(pipeline):
		raise ValueError(f"Pipeline must be callable, got: {pipeline!r}")
	return (pipeline,)


def fromFactory(factory: TFactory) -> TStage:
	"""Wraps a legacy factory as a stage. The factory is invoked on every
	run, so that each request gets its own transform."""
	if not callable(factory):
		raise ValueError(f"Factory must be callable, got: {factory!r}")

	def stage(stream: TFileStream, request: Any) -> TFileStream:
		return factory()(stream)

	return stage


def asStages(
	pipeline: TStage | None = None, factories: Iterable[TFactory] | None = None
) -> tuple[TStage, ...]:
	"""Normalizes both configuration styles to a tuple of stages. The
	`pipeline` function wins when both are given."""
	if pipeline is not None:
		return fromPipeline(pipeline)
	else:
		return tuple(fromFactory(_) for _ in factories or ())


# -----------------------------------------------------------------------------
#
# CONFIGURATION
#
# -----------------------------------------------------------------------------


class MiddlewareConfig(NamedTuple):
	root: str = ROOT
	indexFile: str = INDEX_FILE
	warn: TLogFunction = warning

	@staticmethod
	def Make(value: "MiddlewareConfig | dict[str, Any] | None") -> "MiddlewareConfig":
		if value is None:
			return MiddlewareConfig()
		elif isinstance(value, MiddlewareConfig):
			return value
		else:
			# Empty root and index fall back to the defaults
			return MiddlewareConfig(
				root=str(value.get("root") or ROOT),
				indexFile=value.get("indexFile") or INDEX_FILE,
				warn=warning if value.get("warn") is None else value["warn"],
			)


class CacheEntry(NamedTuple):
	mimeType: str
	charset: str | None
	content: bytes


class Target(NamedTuple):
	"""A rule mapping a URL pattern to a set of files and the stages
	their content goes through."""

	pattern: TPattern
	files: tuple[str, ...] | None = None
	stages: tuple[TStage, ...] = ()
	mimeType: str | None = None
	cacheKey: Any = None
	deprecated: bool = False
	# The URL as given, the pattern depends on the index file
	url: Any = None

	@property
	def key(self) -> Any:
		"""The effective cache key, `None` when the target is not cached."""
		if self.cacheKey is True:
			return self.pattern.key
		else:
			return self.cacheKey or None

	@staticmethod
	def Make(
		url: Any = None,
		files: str | Path | Iterable[str | Path] | None = None,
		pipeline: TStage | None = None,
		factories: Iterable[TFactory] | None = None,
		mimeType: str | None = None,
		cache: Any = None,
		cacheKey: Any = None,
		*,
		indexFile: str = INDEX_FILE,
	) -> "Target":
		if url is None:
			raise ValueError("Target is missing its `url`")
		return Target(
			pattern=pattern(url, indexFile),
			files=(
				None
				if files is None
				else (
					(str(files),)
					if isinstance(files, (str, Path))
					else tuple(str(_) for _ in files)
				)
			),
			stages=asStages(pipeline, factories),
			mimeType=mimeType,
			cacheKey=cacheKey if cacheKey is not None else cache,
			deprecated=factories is not None,
			url=url,
		)

	@staticmethod
	def From(value: "Target | dict[str, Any]", indexFile: str = INDEX_FILE) -> "Target":
		if isinstance(value, Target):
			return (
				value
				if value.url is None
				else value._replace(pattern=pattern(value.url, indexFile))
			)
		elif isinstance(value, dict):
			return Target.Make(**value, indexFile=indexFile)
		else:
			raise ValueError(f"Unsupported target type {type(value)}: {value}")


# EOF
