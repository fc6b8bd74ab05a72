import asyncio
import inspect
import socket
import threading
from dataclasses import dataclass
from signal import SIGINT, SIGTERM
from typing import Any, Callable, NamedTuple

from .config import HOST, LOG_REQUESTS, PORT
from .http import HTTPRequest, HTTPRequestError, HTTPResponse
from .utils.io import EOH
from .utils.logging import debug, error, event, exception, info, warning

# --
# # Development Server
#
# A minimal HTTP/1.1 server running connect-style handlers on the event
# loop. Each connection carries exactly one request, the response closes
# it. Request bodies are ignored.

THandler = Callable[[HTTPRequest, HTTPResponse, Callable[[], Any]], Any]


@dataclass(slots=True)
class ServerState:
	isRunning: bool = True

	def stop(self) -> None:
		info("Server stopping…")
		self.isRunning = False

	def onException(
		self, loop: asyncio.AbstractEventLoop, context: dict[str, Any]
	) -> None:
		e = context.get("exception")
		if e:
			exception(e)


class ServerOptions(NamedTuple):
	host: str = HOST
	port: int = PORT
	backlog: int = 1_000
	timeout: float = 10.0
	# This is the polling timeout for accepting new requests.
	polling: float = 1.0
	readsize: int = 4_096
	# Requests heads larger than this are rejected
	maxhead: int = 64_000
	logRequests: bool = LOG_REQUESTS
	condition: Callable[[], bool] | None = None
	stopSignals: bool = True


OPTIONS: ServerOptions = ServerOptions()


SERVER_ERROR: bytes = (
	b"HTTP/1.1 500 Internal Server Error\r\n"
	b"Content-Type: text/plain\r\n"
	b"Content-Length: 39\r\n"
	b"Connection: close\r\n"
	b"\r\n"
	b"Internal server error: Request not sent"
)

SERVER_BAD_REQUEST: bytes = (
	b"HTTP/1.1 400 Bad Request\r\n"
	b"Content-Type: text/plain\r\n"
	b"Content-Length: 11\r\n"
	b"Connection: close\r\n"
	b"\r\n"
	b"Bad Request"
)

# -----------------------------------------------------------------------------
#
# CHAIN
#
# -----------------------------------------------------------------------------


def notFound(request: HTTPRequest, response: HTTPResponse) -> None:
	response.status = 404
	response.setHeader("Content-Type", "text/plain")
	response.end(b"Not Found")


def chain(
	*handlers: THandler,
) -> Callable[[HTTPRequest, HTTPResponse], Any]:
	"""Composes the handlers so that each one can pass the request to the
	next. When the last one passes, the response is a 404."""

	async def step(index: int, request: HTTPRequest, response: HTTPResponse) -> None:
		if index >= len(handlers):
			notFound(request, response)
			return
		res = handlers[index](
			request, response, lambda: step(index + 1, request, response)
		)
		if inspect.isawaitable(res):
			await res

	async def process(request: HTTPRequest, response: HTTPResponse) -> None:
		await step(0, request, response)

	return process


# -----------------------------------------------------------------------------
#
# SERVER
#
# -----------------------------------------------------------------------------


class AIOSocketServer:
	"""AsyncIO backend using sockets directly."""

	@classmethod
	async def ReadHead(
		cls,
		client: socket.socket,
		*,
		loop: asyncio.AbstractEventLoop,
		options: ServerOptions,
	) -> bytes | None:
		"""Reads from the client until the end of the request head, returning
		the head without its final empty line."""
		buffer = bytearray()
		while (end := buffer.find(EOH)) == -1:
			if len(buffer) > options.maxhead:
				raise HTTPRequestError("Request head is too large")
			chunk = await asyncio.wait_for(
				loop.sock_recv(client, options.readsize), timeout=options.timeout
			)
			if not chunk:
				return None
			buffer += chunk
		return bytes(buffer[:end])

	@classmethod
	async def OnRequest(
		cls,
		process: Callable[[HTTPRequest, HTTPResponse], Any],
		client: socket.socket,
		*,
		loop: asyncio.AbstractEventLoop,
		options: ServerOptions,
	) -> None:
		"""Reads one request from the client, processes it and writes
		the response."""
		try:
			try:
				head = await cls.ReadHead(client, loop=loop, options=options)
			except TimeoutError:
				warning("Client timed out", Client=f"{id(client):x}")
				return
			if head is None:
				debug("Client did not send a complete request", Client=f"{id(client):x}")
				return
			try:
				req = HTTPRequest.Parse(head)
			except HTTPRequestError as e:
				warning("Malformed request", Error=e.message)
				await loop.sock_sendall(client, SERVER_BAD_REQUEST)
				return
			if options.logRequests:
				event(req.method, req.url)
			await loop.sock_sendall(client, await cls.SendResponse(req, process))
		except BrokenPipeError:
			# Client did an early close
			pass
		except Exception as e:
			exception(e)
		finally:
			client.close()

	@staticmethod
	async def SendResponse(
		request: HTTPRequest,
		process: Callable[[HTTPRequest, HTTPResponse], Any],
	) -> bytes:
		"""Processes the request and returns the response payload."""
		res = HTTPResponse(protocol=request.protocol)
		try:
			r = process(request, res)
			if inspect.isawaitable(r):
				await r
		except Exception as e:
			exception(e, f"Failed to process {request.method} {request.url}")
			return SERVER_ERROR
		if not res.isEnded:
			warning(
				"Server did not send a response",
				Method=request.method,
				Path=request.path,
			)
			return SERVER_ERROR
		return res.head() + (
			b"" if request.method == "HEAD" or res.body is None else res.body
		)

	@classmethod
	async def Serve(
		cls,
		process: Callable[[HTTPRequest, HTTPResponse], Any],
		options: ServerOptions = OPTIONS,
	) -> None:
		"""Main server coroutine."""
		server = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
		server.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
		port: int = options.port
		try:
			server.bind((options.host, port))
		except OSError as e:
			error(
				f"Unable to bind to {options.host}:{options.port}, aborting.",
				"HOSTPORTERR",
			)
			server.close()
			raise e from e

		server.listen(options.backlog)
		server.setblocking(False)

		tasks: set[asyncio.Task[None]] = set()
		loop = asyncio.get_running_loop()

		state = ServerState()
		# Signal handlers can only be set from the main thread
		if (
			options.stopSignals
			and threading.current_thread() is threading.main_thread()
		):
			loop.add_signal_handler(SIGINT, lambda: state.stop())
			loop.add_signal_handler(SIGTERM, lambda: state.stop())
		loop.set_exception_handler(state.onException)

		info(
			"Resource pipeline server listening",
			icon="🚀",
			Host=options.host,
			Port=port,
		)

		try:
			while state.isRunning:
				if options.condition and not options.condition():
					break
				try:
					client, _ = await asyncio.wait_for(
						loop.sock_accept(server), timeout=options.polling or 1.0
					)
				except TimeoutError:
					continue
				client.setblocking(False)
				task = loop.create_task(
					cls.OnRequest(process, client, loop=loop, options=options)
				)
				tasks.add(task)
				task.add_done_callback(tasks.discard)
		finally:
			server.close()
			for task in tasks:
				task.cancel()
			await asyncio.gather(*tasks, return_exceptions=True)


def run(
	*handlers: THandler,
	host: str = HOST,
	port: int = PORT,
	condition: Callable[[], bool] | None = None,
	timeout: float = OPTIONS.timeout,
	logRequests: bool = LOG_REQUESTS,
) -> None:
	"""Runs the server with the given chain of handlers."""
	options = ServerOptions(
		host=host,
		port=port,
		condition=condition,
		timeout=timeout,
		logRequests=logRequests,
	)
	try:
		asyncio.run(AIOSocketServer.Serve(chain(*handlers), options))
	except KeyboardInterrupt:
		event("ManualShutdown")
	event("EOK")


# EOF
