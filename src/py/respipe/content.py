import re
from typing import NamedTuple

from .utils.files import contentType

# Types that are served with an explicit text charset
RE_CHARSET_TYPES = re.compile(r"^text/|^application/(javascript|json)")

DEFAULT_CHARSET: str = "UTF-8"


class ContentType(NamedTuple):
	mimeType: str
	charset: str | None = None

	@property
	def header(self) -> str:
		"""The value of the `Content-Type` header."""
		return (
			f"{self.mimeType}; charset={self.charset}" if self.charset else self.mimeType
		)


def mimeType(path: str) -> str:
	return contentType(path)


def charset(mimeType: str) -> str | None:
	"""Returns the charset for textual types, `None` for binary ones."""
	return DEFAULT_CHARSET if RE_CHARSET_TYPES.match(mimeType) else None


def resolveContentType(explicit: str | None, path: str) -> ContentType:
	"""An explicit MIME type is used as-is, without a charset. Otherwise the
	type is guessed from the path's extension."""
	if explicit:
		return ContentType(explicit)
	else:
		t = mimeType(path)
		return ContentType(t, charset(t))


# EOF
