import argparse
import re
from typing import Any

from .config import HOST, INDEX_FILE, PORT, ROOT
from .middleware import resourcePipeline
from .model import MiddlewareConfig, Target
from .server import run
from .utils.logging import info

# URL prefix marking a regular expression
REGEX_PREFIX: str = "~"

# Serves the request path from the root when no target is given
DEFAULT_TARGET: str = f"{REGEX_PREFIX}^/"


def parseTarget(
	value: str,
	*,
	cache: bool = False,
	mimeType: str | None = None,
	indexFile: str = INDEX_FILE,
) -> Target:
	"""Parses a `URL[=FILE[,FILE…]]` target. URLs starting with `~` are
	regular expressions. `cache` only applies to literal URLs."""
	url, sep, files = value.partition("=")
	if not url:
		raise ValueError(f"Target is missing its URL: {value!r}")
	isRegex: bool = url.startswith(REGEX_PREFIX)
	pattern: Any = re.compile(url[len(REGEX_PREFIX) :]) if isRegex else url
	return Target.Make(
		url=pattern,
		files=[_ for _ in files.split(",") if _] if sep else None,
		mimeType=mimeType,
		# A regex target serves many paths, which would all share its key
		cache=(cache and not isRegex) or None,
		indexFile=indexFile,
	)


def parser() -> argparse.ArgumentParser:
	parser = argparse.ArgumentParser(
		prog="respipe",
		description="Serves (and concatenates) local files for development",
		formatter_class=argparse.ArgumentDefaultsHelpFormatter,
	)
	parser.add_argument(
		"-H",
		"--host",
		action="store",
		dest="host",
		help="Specifies the host to listen on",
		default=HOST,
	)
	parser.add_argument(
		"-p",
		"--port",
		action="store",
		dest="port",
		type=int,
		help="Specifies the port",
		default=PORT,
	)
	parser.add_argument(
		"-r",
		"--root",
		action="store",
		dest="root",
		help="Directory against which relative files are resolved",
		default=ROOT,
	)
	parser.add_argument(
		"-i",
		"--index",
		action="store",
		dest="index",
		help="File served for URLs ending in a slash",
		default=INDEX_FILE,
	)
	parser.add_argument(
		"-c",
		"--cache",
		action="store_true",
		dest="cache",
		help="Caches the response of every literal target",
	)
	parser.add_argument(
		"-m",
		"--mime-type",
		action="store",
		dest="mimeType",
		help="Forces the MIME type of every target",
	)
	parser.add_argument(
		"targets",
		nargs="*",
		metavar="TARGET",
		help="URL[=FILE[,FILE…]], URLs starting with ~ are regular expressions",
		default=[DEFAULT_TARGET],
	)
	return parser


def main(args: list[str] | None = None) -> None:
	options = parser().parse_args(args)
	targets = [
		parseTarget(
			_, cache=options.cache, mimeType=options.mimeType, indexFile=options.index
		)
		for _ in options.targets
	]
	middleware = resourcePipeline(
		MiddlewareConfig(root=options.root, indexFile=options.index), targets
	)
	info("Serving files", Root=options.root, Targets=[str(_.pattern) for _ in targets])
	run(middleware, host=options.host, port=options.port)


if __name__ == "__main__":
	main()

# EOF
