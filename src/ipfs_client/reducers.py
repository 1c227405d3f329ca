"""
Reduction of daemon response bodies into JSON values.

The daemon replies either with one JSON document or with newline-delimited
JSON (one document per line). This module frames the body into lines and
folds the parsed lines into the shape each operation needs:

- ``parse_json``: the whole body is one document
- ``collect_array``: every line is one list element, in order
- ``merge_records``: lines describe named entities and are merged per name
- ``find_first``: stop at the first line that satisfies a predicate

A single malformed line fails the whole reduction; partial results are
never returned.
"""

import codecs
import json
from typing import Any, Callable, Dict, Iterable, Iterator, List, Mapping, Tuple, Union

from .exceptions import JSONSyntaxError, NotFoundError
from .properties import get_property

Chunk = Union[bytes, str]
Matcher = Callable[[Any], Tuple[bool, Any]]


def decode_text(data: bytes) -> str:
    """Decode a whole reply body as UTF-8, failing like malformed JSON."""
    try:
        return data.decode("utf-8")
    except UnicodeDecodeError as e:
        raise JSONSyntaxError(f"Invalid UTF-8: {e}", data.decode("utf-8", "replace"), cause=e) from e


def _decode_chunk(
    decoder: codecs.IncrementalDecoder,
    pending: str,
    data: bytes,
    final: bool = False,
) -> str:
    try:
        return decoder.decode(data, final)
    except UnicodeDecodeError as e:
        # e.object holds the bytes buffered from earlier chunks plus data
        start = e.object.rfind(b"\n", 0, e.start) + 1
        end = e.object.find(b"\n", e.start)
        line = e.object[start:end if end >= 0 else None].decode("utf-8", "replace")
        if start == 0:
            line = pending + line
        raise JSONSyntaxError(f"Invalid UTF-8: {e}", line, cause=e) from e


def iter_lines(chunks: Iterable[Chunk]) -> Iterator[str]:
    """
    Split a stream of body chunks into text lines.

    Chunks may split lines (and multi-byte characters) anywhere. The empty
    segment after a final newline is not yielded; a last line without a
    newline is.

    Raises:
        JSONSyntaxError: If the body is not valid UTF-8
    """
    decoder = codecs.getincrementaldecoder("utf-8")()
    pending = ""

    for chunk in chunks:
        if isinstance(chunk, bytes):
            chunk = _decode_chunk(decoder, pending, chunk)
        pending += chunk

        while True:
            newline = pending.find("\n")
            if newline < 0:
                break
            line, pending = pending[:newline], pending[newline + 1:]
            yield line.rstrip("\r")

    pending += _decode_chunk(decoder, pending, b"", final=True)
    if pending:
        yield pending.rstrip("\r")


def parse_json(text: str) -> Any:
    """Parse one JSON document, attaching the raw input on failure."""
    try:
        return json.loads(text)
    except ValueError as e:
        raise JSONSyntaxError(str(e), text, cause=e) from e


def collect_array(lines: Iterable[str]) -> List[Any]:
    """Parse every line and return the documents in line order."""
    return [parse_json(line) for line in lines]


def merge_records(
    lines: Iterable[str],
    key_field: str,
    fields: Mapping[str, str],
    key_name: str,
) -> List[Dict[str, Any]]:
    """
    Merge lines that describe named entities into one record per entity.

    Args:
        lines: NDJSON lines
        key_field: Property naming the entity on every line, e.g. "Name"
        fields: Maps reply properties to record keys, e.g. {"Hash": "hash"}
        key_name: Record key that receives the entity name, e.g. "path"

    Returns:
        Records in the order their entity was first seen

    Raises:
        JSONSyntaxError: If a line is not valid JSON
        MissingFieldError: If a line lacks ``key_field`` (1-based line number)
    """
    records: Dict[str, Dict[str, Any]] = {}

    for line_number, line in enumerate(lines, start=1):
        doc = parse_json(line)
        name = get_property(doc, key_field, line_number)

        record = records.setdefault(name, {key_name: name})
        for source, target in fields.items():
            if source in doc:
                record[target] = doc[source]

    return list(records.values())


def find_first(lines: Iterable[str], match: Matcher, target: str) -> Any:
    """
    Return the value selected by the first line ``match`` accepts.

    ``match`` receives each parsed line and returns ``(found, value)``.
    Remaining lines are not read once a match is found.

    Raises:
        JSONSyntaxError: If a line is not valid JSON
        NotFoundError: If no line matches; carries the body read so far
    """
    seen = []

    for line in lines:
        seen.append(line)
        found, value = match(parse_json(line))
        if found:
            return value

    raise NotFoundError(target, "\n".join(seen))
