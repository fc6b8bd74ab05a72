import asyncio
from pathlib import Path
from typing import AsyncIterator

import pytest

from conftest import FIXTURES, readFile
from respipe.model import FileUnit, Target, asStages
from respipe.pipeline import contents, each, run, where
from respipe.utils.files import expand, readFile as readUnit, src


def runStages(paths, stages, request=None):
	return asyncio.run(run(paths, stages, request))


class TestRunner:
	def test_concatenates_without_stages(self):
		paths = [f"{FIXTURES}/file2.html", f"{FIXTURES}/file.html"]
		assert runStages(paths, ()) == readFile(paths[0]) + readFile(paths[1])

	def test_signals_no_files(self):
		assert runStages([f"{FIXTURES}/missing.html"], ()) is None
		assert runStages([], ()) is None

	def test_stages_see_the_output_of_the_previous_stage(self):
		seen: list[bytes] = []

		def record(content: bytes) -> bytes:
			seen.append(content)
			return content

		stages = asStages(
			factories=[lambda: contents(lambda _: b"x"), lambda: contents(record)]
		)
		assert runStages([f"{FIXTURES}/file.html"], stages) == b"x"
		assert seen == [b"x"]

	def test_stages_can_add_units(self):
		async def split(files, request) -> AsyncIterator[FileUnit]:
			async for unit in files:
				for line in unit.content.splitlines(keepends=True):
					yield unit._replace(content=line)
				yield unit._replace(path=unit.path.with_suffix(".extra"), content=b"!")

		assert runStages([f"{FIXTURES}/a.js"], (split,)) == b"var a = 1;\n!"

	def test_passes_the_request(self):
		requests: list[object] = []
		request = object()

		def pipeline(files, req):
			requests.append(req)
			return files

		runStages([f"{FIXTURES}/a.js"], asStages(pipeline), request)
		assert requests == [request]

	def test_uses_the_given_provider(self):
		async def provider(paths) -> AsyncIterator[FileUnit]:
			for p in paths:
				yield FileUnit(Path(p), p.encode())

		assert asyncio.run(run(["a", "b"], (), provider=provider)) == b"ab"


class TestStages:
	def test_pipeline_takes_precedence_over_factories(self):
		def pipeline(files, request):
			return files

		assert asStages(pipeline, [lambda: contents(bytes.upper)]) == (pipeline,)

	def test_no_stages(self):
		assert asStages() == ()
		assert Target.Make(url="/").stages == ()

	def test_factories_are_invoked_per_run(self):
		calls: list[int] = []

		def factory():
			calls.append(1)
			return contents(bytes.upper)

		stages = asStages(factories=[factory])
		assert calls == []
		assert runStages([f"{FIXTURES}/a.js"], stages) == b"VAR A = 1;\n"
		assert runStages([f"{FIXTURES}/a.js"], stages) == b"VAR A = 1;\n"
		assert calls == [1, 1]

	def test_rejects_non_callables(self):
		with pytest.raises(ValueError):
			asStages(pipeline="not callable")  # type: ignore[arg-type]
		with pytest.raises(ValueError):
			asStages(factories=[None])  # type: ignore[list-item]

	def test_each_drops_none(self):
		stage = each(lambda _: None if _.name == "a.js" else _)
		paths = [f"{FIXTURES}/a.js", f"{FIXTURES}/b.js"]
		assert runStages(paths, asStages(factories=[lambda: stage])) == readFile(paths[1])

	def test_each_accepts_coroutines(self):
		async def upper(unit: FileUnit) -> FileUnit:
			await asyncio.sleep(0)
			return unit._replace(content=unit.content.upper())

		stages = asStages(factories=[lambda: each(upper)])
		assert runStages([f"{FIXTURES}/b.js"], stages) == b"VAR B = 2;\n"

	def test_where_filters(self):
		stages = asStages(factories=[lambda: where(lambda _: _.suffix == ".html")])
		paths = [f"{FIXTURES}/a.js", f"{FIXTURES}/file.html"]
		assert runStages(paths, stages) == readFile(paths[1])

	def test_contents_accepts_text(self):
		stages = asStages(factories=[lambda: contents(lambda _: _.decode().strip())])
		assert runStages([f"{FIXTURES}/a.js"], stages) == b"var a = 1;"


class TestFiles:
	def test_reads_files(self):
		unit = readUnit(f"{FIXTURES}/a.js")
		assert unit is not None
		assert unit.path == Path(f"{FIXTURES}/a.js")
		assert unit.text == "var a = 1;\n"

	def test_missing_files_and_directories_are_not_read(self):
		assert readUnit(f"{FIXTURES}/missing.js") is None
		assert readUnit(FIXTURES) is None

	def test_expands_globs_in_order(self):
		assert expand([f"{FIXTURES}/b.js", f"{FIXTURES}/*.js"]) == [
			Path(f"{FIXTURES}/b.js"),
			Path(f"{FIXTURES}/a.js"),
			Path(f"{FIXTURES}/a.test.js"),
		]

	def test_negation_removes_matches(self):
		assert expand([f"{FIXTURES}/*.js", f"!{FIXTURES}/a*.js"]) == [
			Path(f"{FIXTURES}/b.js")
		]

	def test_keeps_missing_literal_paths(self):
		assert expand(["missing.js"]) == [Path("missing.js")]

	def test_reading_a_file_lets_other_tasks_run(self):
		events: list[str] = []

		async def scenario():
			async def tick():
				events.append("tick")

			task = asyncio.ensure_future(tick())
			async for unit in src([f"{FIXTURES}/a.js"]):
				events.append(unit.name)
			await task

		asyncio.run(scenario())
		assert events == ["tick", "a.js"]
