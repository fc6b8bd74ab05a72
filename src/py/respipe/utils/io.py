DEFAULT_ENCODING: str = "utf8"
EOL: bytes = b"\r\n"
# Marks the end of an HTTP head
EOH: bytes = EOL + EOL


def asBytes(value: str | bytes | bytearray | None) -> bytes:
	if isinstance(value, bytes):
		return value
	elif isinstance(value, bytearray):
		return bytes(value)
	elif isinstance(value, str):
		return bytes(value, DEFAULT_ENCODING)
	elif value is None:
		return b""
	else:
		raise ValueError(f"Expected bytes or str, got: {value}")


# EOF
