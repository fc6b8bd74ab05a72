import os.path

from respipe.paths import isAbsolute, requestReference, resolvePath, resolvePaths


def test_resolves_against_root():
	assert resolvePath("./test", "fixtures/file.html") == os.path.normpath(
		"test/fixtures/file.html"
	)


def test_keeps_absolute_paths():
	path = os.path.abspath("tests/fixtures/file.html")
	assert resolvePath("./test", path) == path
	assert isAbsolute(path)


def test_relative_paths_are_not_absolute():
	assert not isAbsolute("fixtures/file.html")
	assert not isAbsolute("./fixtures")


def test_normalizes_segments():
	assert resolvePath("a//b", "./c/../d.js") == os.path.normpath("a/b/d.js")


def test_keeps_negation():
	assert resolvePath("root", "!lib/*.test.js") == "!" + os.path.normpath(
		"root/lib/*.test.js"
	)


def test_accepts_a_single_reference():
	assert resolvePaths(".", "a.js") == ["a.js"]


def test_preserves_order():
	assert resolvePaths("src", ["b.js", "a.js", "c.js"]) == [
		os.path.normpath("src/b.js"),
		os.path.normpath("src/a.js"),
		os.path.normpath("src/c.js"),
	]


def test_request_reference_strips_the_leading_slash():
	assert requestReference("/x/index.html") == "x/index.html"
	assert requestReference("x.html") == "x.html"
	assert requestReference("//x.html") == "/x.html"
