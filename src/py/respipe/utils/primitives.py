from pathlib import Path
from typing import Any

TLiteral = bool | int | float | str | bytes
TComposite = (
	list[TLiteral] | dict[TLiteral, TLiteral] | set[TLiteral] | tuple[TLiteral, ...]
)
TPrimitive = TLiteral | TComposite | None


def asPrimitive(value: Any) -> TPrimitive:
	"""Converts the given value to something that can be rendered in a
	log line: paths become strings, namedtuples become dicts and sequences
	are converted item by item."""
	if value is None or type(value) in (bool, float, int, str, bytes):
		return value
	elif isinstance(value, Path):
		return str(value)
	elif isinstance(value, tuple) and hasattr(value, "_fields"):
		return {k: asPrimitive(getattr(value, k)) for k in value._fields}
	elif isinstance(value, (list, tuple, set)):
		return [asPrimitive(_) for _ in value]
	elif isinstance(value, dict):
		return {str(k): asPrimitive(v) for k, v in value.items()}
	else:
		return str(value)


# EOF
