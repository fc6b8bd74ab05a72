"""
Development Server Example

This demonstrates a development web server where local assets are
served with a live transformation phase.
Features shown:
- Concatenation of scripts, with globs and exclusions
- A pipeline expanding `<!-- include: path -->` directives in HTML
- Cached targets, and a URL to clear the cache
- Fallback to a plain file server for everything else

Usage:
    python devserver.py [ROOT]

Test with:
    curl http://localhost:8000/app.js
    curl http://localhost:8000/
    curl http://localhost:8000/_clear
"""

import re
import sys
from pathlib import Path

from respipe import FileUnit, each, resourcePipeline, run
from respipe.utils.logging import info

ROOT: str = sys.argv[1] if len(sys.argv) > 1 else "."

RE_INCLUDE = re.compile(rb"<!--\s*include:\s*(\S+)\s*-->")


def include(unit: FileUnit) -> FileUnit:
	"""Replaces include directives with the content of the referenced file,
	relative to the including file."""

	def replace(match: re.Match[bytes]) -> bytes:
		path = unit.path.parent / match.group(1).decode()
		return path.read_bytes() if path.exists() else match.group(0)

	return unit._replace(content=RE_INCLUDE.sub(replace, unit.content))


assets = resourcePipeline(
	{"root": ROOT},
	[
		{
			"url": "/app.js",
			"files": ["js/**/*.js", "!js/**/*.test.js"],
			"cache": True,
		},
		{
			"url": re.compile(r"\.html$"),
			"pipeline": lambda files, request: each(include)(files),
		},
		# Everything else is served as-is
		{"url": re.compile("^/")},
	],
)


def clear(request, response, next):
	if request.path != "/_clear":
		return next()
	cleared = assets.clear("/app.js")
	info("Cache cleared", Cleared=cleared)
	response.setHeader("Content-Type", "text/plain")
	response.end(b"Cleared\n" if cleared else b"Nothing to clear\n")


if __name__ == "__main__":
	info("Starting development server", Root=str(Path(ROOT).absolute()))
	run(clear, assets)

# EOF
