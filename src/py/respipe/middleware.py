import inspect
from typing import Any, Callable, Iterable
from urllib.parse import urlparse

from .cache import ResponseCache
from .content import ContentType, resolveContentType
from .model import CacheEntry, MiddlewareConfig, Target
from .paths import requestReference, resolvePaths
from .pipeline import TProvider, run
from .utils.files import src

# --
# # Resource Pipeline
#
# A connect-style middleware `(request, response, next)` that serves one
# or more files as a single response, after passing them through the
# stages of the first target whose URL matches the request.


TNext = Callable[[], Any]


class ResourcePipeline:
	"""Dispatches requests to the first matching target, and either writes
	the response or calls `next`, never both."""

	def __init__(
		self,
		config: MiddlewareConfig,
		targets: Iterable[Target],
		*,
		provider: TProvider = src,
	) -> None:
		self.config: MiddlewareConfig = config
		self.targets: tuple[Target, ...] = tuple(targets)
		self.cache: ResponseCache = ResponseCache()
		self.provider: TProvider = provider
		if any(_.deprecated for _ in self.targets):
			self.config.warn(
				"The `factories` target property is deprecated, use `pipeline` instead",
				Targets=[str(_.pattern) for _ in self.targets if _.deprecated],
			)

	def normalize(self, url: str) -> str:
		"""Returns the path of the URL, with the index file for directories."""
		path: str = urlparse(url).path or "/"
		return f"{path}{self.config.indexFile}" if path.endswith("/") else path

	def match(self, path: str) -> Target | None:
		for target in self.targets:
			if target.pattern.matches(path):
				return target
		return None

	async def __call__(self, request: Any, response: Any, next: TNext) -> None:
		path: str = self.normalize(getattr(request, "url", None) or request.path)
		target = self.match(path)
		if target is None:
			await self.forward(next)
			return
		key = target.key
		if key is not None and (entry := self.cache.get(key)):
			self.send(response, entry)
			return
		# NOTE: The request path is not checked for `..`, anything under
		# (or above) the root can be served.
		files: list[str] = resolvePaths(
			self.config.root,
			target.files if target.files is not None else requestReference(path),
		)
		content: bytes | None = await run(
			files, target.stages, request, provider=self.provider
		)
		if content is None:
			self.config.warn(
				"Resource pipeline matched URL but found no files",
				Pattern=str(target.pattern),
				Path=path,
				Files=files,
			)
			await self.forward(next)
		else:
			content_type = resolveContentType(target.mimeType, path)
			entry = CacheEntry(content_type.mimeType, content_type.charset, content)
			if key is not None:
				self.cache.put(key, entry)
			self.send(response, entry)

	def send(self, response: Any, entry: CacheEntry) -> None:
		response.setHeader(
			"Content-Type", ContentType(entry.mimeType, entry.charset).header
		)
		response.end(entry.content)

	async def forward(self, next: TNext) -> None:
		res = next()
		if inspect.isawaitable(res):
			await res

	def clear(self, cacheKey: Any) -> bool:
		"""Removes the cached response for the given key."""
		return self.cache.clear(cacheKey)


def resourcePipeline(
	config: MiddlewareConfig | dict[str, Any] | Iterable[Any] | None = None,
	targets: Iterable[Target | dict[str, Any]] | None = None,
	*,
	provider: TProvider = src,
) -> ResourcePipeline:
	"""Creates the middleware. The configuration can be omitted and the
	targets given as the first argument."""
	if targets is None and not isinstance(config, (dict, MiddlewareConfig)):
		targets = config if config is not None else ()
		config = None
	options = MiddlewareConfig.Make(config)  # type: ignore[arg-type]
	return ResourcePipeline(
		options,
		[Target.From(_, options.indexFile) for _ in targets or ()],
		provider=provider,
	)


# EOF
