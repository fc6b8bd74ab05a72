from typing import NamedTuple
from urllib.parse import parse_qsl, urlparse

from .utils.io import DEFAULT_ENCODING, EOL, asBytes

# -----------------------------------------------------------------------------
#
# HELPERS
#
# -----------------------------------------------------------------------------

HTTP_STATUS: dict[int, str] = {
	200: "OK",
	204: "No Content",
	400: "Bad Request",
	404: "Not Found",
	405: "Method Not Allowed",
	500: "Internal Server Error",
}


def headername(name: str, *, headers: dict[str, str] = {}) -> str:
	"""Normalizes the header name as `Kebab-Case`."""
	if name in headers:
		return headers[name]
	key: str = name.lower()
	if key in headers:
		return headers[key]
	else:
		normalized: str = "-".join(_.capitalize() for _ in name.split("-"))
		headers[key] = normalized
		return normalized


# -----------------------------------------------------------------------------
#
# ERRORS
#
# -----------------------------------------------------------------------------


class HTTPRequestError(Exception):
	"""Raised when a request head can't be parsed."""

	def __init__(self, message: str, status: int = 400):
		super().__init__(message)
		self.message: str = message
		self.status: int = status


# -----------------------------------------------------------------------------
#
# REQUEST
#
# -----------------------------------------------------------------------------


class HTTPRequestLine(NamedTuple):
	"""Represents a request status line"""

	method: str
	url: str
	protocol: str


class HTTPRequest:
	"""A request as seen by middlewares: the raw `url` is kept, as
	middlewares parse it themselves."""

	__slots__ = ["method", "url", "protocol", "headers"]

	@staticmethod
	def Parse(head: bytes) -> "HTTPRequest":
		"""Parses the head of a request, up to (and without) the empty line."""
		# NOTE: Latin-1 decodes any byte, non-ASCII header values are kept as-is
		lines: list[str] = head.decode("latin1").split(EOL.decode("ascii"))
		parts = lines[0].split(" ")
		if len(parts) != 3:
			raise HTTPRequestError(f"Malformed request line: {lines[0]!r}")
		line = HTTPRequestLine(*parts)
		headers: dict[str, str] = {}
		for ln in lines[1:]:
			if not ln:
				continue
			name, sep, value = ln.partition(":")
			if not sep:
				raise HTTPRequestError(f"Malformed header line: {ln!r}")
			headers[headername(name.strip())] = value.strip()
		return HTTPRequest(line.method, line.url, headers, line.protocol)

	def __init__(
		self,
		method: str,
		url: str,
		headers: dict[str, str] | None = None,
		protocol: str = "HTTP/1.1",
	):
		self.method: str = method
		self.url: str = url
		self.protocol: str = protocol
		self.headers: dict[str, str] = headers or {}

	@property
	def path(self) -> str:
		return urlparse(self.url).path

	@property
	def query(self) -> dict[str, str]:
		return dict(parse_qsl(urlparse(self.url).query))

	def header(self, name: str) -> str | None:
		return self.headers.get(headername(name))

	def __str__(self) -> str:
		return f"Request({self.method} {self.url} {self.headers})"


# -----------------------------------------------------------------------------
#
# RESPONSE
#
# -----------------------------------------------------------------------------


class HTTPResponse:
	"""A response that middlewares fill with `setHeader` and complete
	with `end`."""

	__slots__ = ["protocol", "status", "message", "headers", "body", "isEnded"]

	def __init__(self, protocol: str = "HTTP/1.1", status: int = 200):
		self.protocol: str = protocol
		self.status: int = status
		self.message: str | None = None
		self.headers: dict[str, str] = {}
		self.body: bytes | None = None
		self.isEnded: bool = False

	def getHeader(self, name: str) -> str | None:
		return self.headers.get(headername(name))

	def setHeader(self, name: str, value: str | int | None) -> "HTTPResponse":
		if value is None:
			self.headers.pop(headername(name), None)
		else:
			self.headers[headername(name)] = str(value)
		return self

	def end(self, content: str | bytes | None = None) -> "HTTPResponse":
		if self.isEnded:
			raise RuntimeError(f"Response has already ended: {self}")
		self.body = asBytes(content) if content is not None else None
		self.isEnded = True
		return self

	def head(self) -> bytes:
		"""Serializes the head as a payload."""
		status: int = self.status
		message: str = self.message or HTTP_STATUS.get(status, "Unknown status")
		headers: dict[str, str] = self.headers | {
			"Content-Length": str(len(self.body or b"")),
			"Connection": "close",
		}
		lines: list[str] = [f"{k}: {v}" for k, v in headers.items()]
		lines.insert(0, f"{self.protocol} {status} {message}")
		lines.append("")
		lines.append("")
		return "\r\n".join(lines).encode(DEFAULT_ENCODING)

	def __str__(self) -> str:
		return f"Response({self.protocol} {self.status} {self.headers})"


# EOF
