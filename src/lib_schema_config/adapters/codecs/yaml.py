"""YAML reference codec for configuration snapshots.

Purpose
-------
Read and write the reference wire format: an optional first line
``# version: N`` carrying the version tag, followed by a YAML mapping whose
leaves are strings, numbers, booleans or flat lists of those. Adapters are
small wrappers around ``yaml.safe_load``/``yaml.safe_dump`` so error handling
and observability live in one place.

Contents
--------
* :func:`parse_version` – extract the version tag from the header line.
* :class:`YamlDecoder` – :class:`~lib_schema_config.application.ports.Decoder`
  over text, bytes or a readable stream.
* :class:`YamlEncoder` – :class:`~lib_schema_config.application.ports.Encoder`
  writing to a text stream.
* :func:`read_file` / :func:`write_file` – path based helpers used by
  :mod:`lib_schema_config.core`.

System Role
-----------
The store depends only on the ports; this module is the one place that knows
about YAML.
"""

from __future__ import annotations

import io
import re
from pathlib import Path
from typing import IO, Any, Mapping, Union

import yaml

from ...domain.errors import InvalidFormat, NotFound
from ...observability import log_debug, log_error

VERSION_HEADER = re.compile(r"^# version:\s*(\d+).*")

Source = Union[str, bytes, IO[str], IO[bytes]]


def parse_version(text: str) -> int:
    """Return the version tag encoded in the first line of *text* (``0`` when absent).

    Examples
    --------
    >>> parse_version("# version: 3\\ndaemon: {}\\n")
    3
    >>> parse_version("daemon: {}\\n")
    0
    """

    first_line = text.split("\n", 1)[0].rstrip("\r")
    match = VERSION_HEADER.match(first_line)
    if match is None:
        return 0
    return int(match.group(1))


class YamlDecoder:
    """Decode one YAML document into ``(version, tree)``.

    Parameters
    ----------
    source:
        Document text, raw UTF-8 bytes, or a readable (text or binary) stream.
        Streams are consumed on the first :meth:`decode` call.
    origin:
        Label used in error messages and log events (usually the file path).

    Examples
    --------
    >>> YamlDecoder("# version: 2\\na:\\n  b: 1\\n").decode()
    (2, {'a': {'b': 1}})
    """

    def __init__(self, source: Source, *, origin: str = "<string>") -> None:
        self._source = source
        self._origin = origin

    def decode(self) -> tuple[int, Mapping[str, Any]]:
        text = self._text()
        try:
            data = yaml.safe_load(text)
        except yaml.YAMLError as exc:
            log_error("config_file_invalid", path=self._origin, format="yaml", error=str(exc))
            raise InvalidFormat(f"Invalid YAML in {self._origin}: {exc}") from exc
        if data is None:
            data = {}
        if not isinstance(data, Mapping):
            log_error("config_file_invalid", path=self._origin, format="yaml", error="not a mapping")
            raise InvalidFormat(f"File {self._origin} did not produce a mapping")
        version = parse_version(text)
        log_debug("config_file_loaded", path=self._origin, format="yaml", version=version)
        return version, data

    def _text(self) -> str:
        payload = self._source
        if not isinstance(payload, (str, bytes)):
            payload = payload.read()
        if isinstance(payload, bytes):
            try:
                return payload.decode("utf-8")
            except UnicodeDecodeError as exc:
                log_error("config_file_invalid", path=self._origin, format="yaml", error=str(exc))
                raise InvalidFormat(f"Invalid UTF-8 in {self._origin}: {exc}") from exc
        return payload


class YamlEncoder:
    """Encode ``(version, tree)`` as YAML into a text stream.

    Keys are written sorted so saved files diff cleanly.

    >>> buffer = io.StringIO()
    >>> YamlEncoder(buffer).encode(1, {"b": [1, 2], "a": "x"})
    >>> print(buffer.getvalue(), end="")
    # version: 1
    a: x
    b:
    - 1
    - 2
    """

    def __init__(self, sink: IO[str]) -> None:
        self._sink = sink

    def encode(self, version: int, tree: Mapping[str, Any]) -> None:
        self._sink.write(f"# version: {version}\n")
        if tree:
            yaml.safe_dump(dict(tree), self._sink, sort_keys=True, default_flow_style=False, allow_unicode=True)


def read_file(path: Union[str, Path]) -> YamlDecoder:
    """Read the file at *path* and return a decoder over its contents.

    Raises
    ------
    NotFound
        When *path* is not an existing file.
    """

    file_path = Path(path)
    if not file_path.is_file():
        raise NotFound(f"Configuration file not found: {path}")
    payload = file_path.read_bytes()
    log_debug("config_file_read", path=str(path), size=len(payload))
    return YamlDecoder(payload, origin=str(path))


def write_file(path: Union[str, Path], version: int, tree: Mapping[str, Any]) -> None:
    """Write a snapshot to *path*, replacing the file in one step.

    The target is untouched and no scratch file is left behind when writing fails.
    """

    buffer = io.StringIO()
    YamlEncoder(buffer).encode(version, tree)
    file_path = Path(path)
    file_path.parent.mkdir(parents=True, exist_ok=True)
    scratch = file_path.with_name(file_path.name + ".tmp")
    try:
        scratch.write_text(buffer.getvalue(), encoding="utf-8")
        scratch.replace(file_path)
    except BaseException:
        scratch.unlink(missing_ok=True)
        log_error("config_file_write_failed", path=str(path), version=version)
        raise
    log_debug("config_file_written", path=str(path), version=version)
