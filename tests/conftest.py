"""
Shared fixtures for the respipe tests.

Tests run from the repository root, so that fixture files can be
referenced as `tests/fixtures/…`, like a development server would
reference its assets.
"""

import asyncio
from pathlib import Path
from typing import Any, NamedTuple

import pytest

from respipe.model import MiddlewareConfig

REPOSITORY: Path = Path(__file__).parent.parent
FIXTURES: str = "tests/fixtures"


@pytest.fixture(autouse=True)
def inRepository(monkeypatch):
	monkeypatch.chdir(REPOSITORY)


def readFile(path: str) -> bytes:
	return (REPOSITORY / path).read_bytes()


class Request(NamedTuple):
	url: str


class Response:
	"""Records what the middleware does to the response."""

	def __init__(self) -> None:
		self.headers: dict[str, str] = {}
		self.content: bytes | None = None
		self.endCount: int = 0

	def setHeader(self, name: str, value: str) -> None:
		self.headers[name] = value

	def end(self, content: bytes) -> None:
		self.endCount += 1
		self.content = content


class Exchange(NamedTuple):
	request: Request
	response: Response
	nextCount: int

	@property
	def content(self) -> str | None:
		return None if self.response.content is None else self.response.content.decode()

	@property
	def responded(self) -> bool:
		return self.response.endCount > 0

	@property
	def forwarded(self) -> bool:
		return self.nextCount > 0


def exchange(url: str, middleware: Any) -> Exchange:
	"""Runs the middleware for a request to `url`."""
	request = Request(url)
	response = Response()
	calls: list[int] = []

	def next() -> None:
		calls.append(1)

	asyncio.run(middleware(request, response, next))
	return Exchange(request, response, len(calls))


class Warnings:
	"""A warning sink for the middleware configuration."""

	def __init__(self) -> None:
		self.entries: list[tuple[str, dict[str, Any]]] = []

	def __call__(self, message: str, **context: Any) -> None:
		self.entries.append((message, context))

	@property
	def count(self) -> int:
		return len(self.entries)


@pytest.fixture
def warned() -> Warnings:
	return Warnings()


@pytest.fixture
def config(warned) -> MiddlewareConfig:
	return MiddlewareConfig(warn=warned)
