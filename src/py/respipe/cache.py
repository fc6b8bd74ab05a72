from typing import Any, Iterator

from .model import CacheEntry

# NOTE: The cache is only touched from the event loop, so it is not locked.
# Requests for the same key that arrive before the first one completes all
# run the pipeline, and the last one to complete is what stays cached.


class ResponseCache:
	"""Maps cache keys to computed responses, for the lifetime of the
	middleware. There is no expiry: entries go away when cleared."""

	__slots__ = ["entries"]

	def __init__(self) -> None:
		self.entries: dict[Any, CacheEntry] = {}

	def get(self, key: Any) -> CacheEntry | None:
		return self.entries.get(key)

	def put(self, key: Any, entry: CacheEntry) -> CacheEntry:
		self.entries[key] = entry
		return entry

	def clear(self, key: Any) -> bool:
		"""Removes the entry for `key`, telling if there was one."""
		return self.entries.pop(key, None) is not None

	def __contains__(self, key: Any) -> bool:
		return key in self.entries

	def __len__(self) -> int:
		return len(self.entries)

	def __iter__(self) -> Iterator[Any]:
		return iter(self.entries)


# EOF
