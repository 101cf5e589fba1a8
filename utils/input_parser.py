"""
Input Parser for the Banker's Safety Checker.

Reads the whitespace-delimited text format (or a JSON scenario) and produces
an immutable SystemDescription. Every format violation raises
InputFormatError with a message naming the field being read.
"""

import json
import re
import sys
import numpy as np
from typing import Any, Dict, Optional, TextIO, Tuple
from pathlib import Path

from models.description import ResourceRequest, SystemDescription


class InputFormatError(Exception):
    """Exception raised when the input is malformed or incomplete."""
    pass


_PROCESS_TOKEN = re.compile(r"[Pp]([0-9]+)")

# Largest count the integer matrices can hold
MAX_COUNT = int(np.iinfo(np.int_).max)


class _TokenStream:
    """Sequential reader over whitespace-delimited tokens."""

    def __init__(self, text: str):
        self._tokens = text.split()
        self._pos = 0

    def has_more(self) -> bool:
        return self._pos < len(self._tokens)

    def next(self, what: str) -> str:
        if not self.has_more():
            raise InputFormatError(f"Unexpected end of input reading {what}")
        token = self._tokens[self._pos]
        self._pos += 1
        return token

    def next_int(self, what: str) -> int:
        token = self.next(what)
        error = InputFormatError(f"Expected non-negative integer for {what} but found '{token}'")
        try:
            value = int(token)
        except ValueError:
            raise error from None
        if value < 0:
            raise error
        if value > MAX_COUNT:
            raise InputFormatError(f"Value for {what} out of range: '{token}'")
        return value

    def next_row(self, length: int, what: str) -> Tuple[int, ...]:
        return tuple(self.next_int(what) for _ in range(length))


def _expect_keyword(stream: _TokenStream, keyword: str) -> None:
    token = stream.next(keyword)
    if token != keyword:
        raise InputFormatError(f"Expected '{keyword}' but found '{token}'")


def _read_dimension(stream: _TokenStream, keyword: str, position: str, what: str) -> int:
    """Read a lowercase-tolerant dimension keyword and its count."""
    token = stream.next(keyword)
    if token not in (keyword, keyword.lower()):
        raise InputFormatError(f"Expected '{keyword}' {position} but found '{token}'")
    return stream.next_int(what)


def parse_process_label(label: str) -> int:
    """
    Parse the process index from a request token such as "P1" or "p1".

    Raises:
        InputFormatError: If the token is not P/p followed by digits
    """
    match = _PROCESS_TOKEN.fullmatch(label)
    if not match:
        raise InputFormatError(f"Cannot parse process index from '{label}'")
    return int(match.group(1))


def parse_text(text: str) -> SystemDescription:
    """
    Parse the text format.

    Layout:
        R <numResources>
        P <numProcesses>
        Available <R ints>
        Max <P rows of R ints>
        Allocation <P rows of R ints>
        [Pk <R ints>]

    Args:
        text: Whole input

    Returns:
        SystemDescription (request is None if no request line)

    Raises:
        InputFormatError: On any keyword mismatch, premature end of input,
            non-integer or negative number, or unparseable process index
    """
    stream = _TokenStream(text)

    num_resources = _read_dimension(stream, "R", "at start", "number of resources")
    num_processes = _read_dimension(stream, "P", "token", "number of processes")

    _expect_keyword(stream, "Available")
    available = stream.next_row(num_resources, "Available")

    _expect_keyword(stream, "Max")
    max_demand = tuple(
        stream.next_row(num_resources, f"Max row {i}") for i in range(num_processes)
    )

    _expect_keyword(stream, "Allocation")
    allocation = tuple(
        stream.next_row(num_resources, f"Allocation row {i}") for i in range(num_processes)
    )

    request = None
    if stream.has_more():
        label = stream.next("request")
        pid = parse_process_label(label)
        amounts = stream.next_row(num_resources, f"request for {label}")
        request = ResourceRequest(label=label, pid=pid, amounts=amounts)

    return SystemDescription(
        num_resources=num_resources,
        num_processes=num_processes,
        available=available,
        max_demand=max_demand,
        allocation=allocation,
        request=request
    )


def parse_stream(stream: TextIO) -> SystemDescription:
    """Parse the text format from an open stream."""
    return parse_text(stream.read())


def _json_row(value: Any, length: int, what: str) -> Tuple[int, ...]:
    if not isinstance(value, list):
        raise InputFormatError(f"Scenario field {what} must be a list")
    if len(value) != length:
        raise InputFormatError(
            f"Scenario field {what} has {len(value)} entries, expected {length}"
        )
    for item in value:
        if isinstance(item, bool) or not isinstance(item, int) or item < 0:
            raise InputFormatError(
                f"Scenario field {what} must contain non-negative integers, found {item!r}"
            )
        if item > MAX_COUNT:
            raise InputFormatError(f"Value for {what} out of range: '{item}'")
    return tuple(value)


def _json_matrix(data: Dict, key: str, num_resources: int) -> Tuple[Tuple[int, ...], ...]:
    rows = data[key]
    if not isinstance(rows, list):
        raise InputFormatError(f"Scenario field '{key}' must be a list of rows")
    return tuple(
        _json_row(row, num_resources, f"'{key}' row {i}") for i, row in enumerate(rows)
    )


def parse_scenario(data: Dict) -> SystemDescription:
    """
    Build a description from a JSON scenario object.

    Expected keys: available, max, allocation, optional
    request {"process": k, "amounts": [...]}. R and P come from list sizes.

    Raises:
        InputFormatError: If fields are missing or mis-shaped
    """
    if not isinstance(data, dict):
        raise InputFormatError("Scenario must be a JSON object")
    for key in ('available', 'max', 'allocation'):
        if key not in data:
            raise InputFormatError(f"Scenario missing '{key}' field")

    if not isinstance(data['available'], list):
        raise InputFormatError("Scenario field 'available' must be a list")
    num_resources = len(data['available'])
    available = _json_row(data['available'], num_resources, "'available'")

    max_demand = _json_matrix(data, 'max', num_resources)
    allocation = _json_matrix(data, 'allocation', num_resources)
    if len(allocation) != len(max_demand):
        raise InputFormatError(
            f"Scenario 'allocation' has {len(allocation)} rows but 'max' has {len(max_demand)}"
        )

    request = None
    if data.get('request') is not None:
        req_data = data['request']
        if not isinstance(req_data, dict) or 'process' not in req_data or 'amounts' not in req_data:
            raise InputFormatError("Scenario 'request' needs 'process' and 'amounts'")
        pid = req_data['process']
        if isinstance(pid, bool) or not isinstance(pid, int):
            raise InputFormatError(f"Cannot parse process index from {pid!r}")
        amounts = _json_row(req_data['amounts'], num_resources, "'request.amounts'")
        request = ResourceRequest(label=f"P{pid}", pid=pid, amounts=amounts)

    return SystemDescription(
        num_resources=num_resources,
        num_processes=len(max_demand),
        available=available,
        max_demand=max_demand,
        allocation=allocation,
        request=request
    )


def load_description(source: str = "-", stdin: Optional[TextIO] = None) -> SystemDescription:
    """
    Load a description from a file path, or from standard input for "-".

    Paths ending in .json are read as JSON scenarios; anything else uses the
    text format.

    Raises:
        InputFormatError: If the file is missing, unreadable or malformed
    """
    if source == "-":
        try:
            return parse_stream(stdin if stdin is not None else sys.stdin)
        except UnicodeDecodeError as e:
            raise InputFormatError(f"Cannot decode input {source}: {e}")

    path = Path(source)
    try:
        text = path.read_text(encoding='utf-8')
    except UnicodeDecodeError as e:
        raise InputFormatError(f"Cannot decode input {source}: {e}")
    except FileNotFoundError:
        raise InputFormatError(f"Input file not found: {source}")
    except OSError as e:
        raise InputFormatError(f"Cannot read input file {source}: {e}")

    if path.suffix.lower() == '.json':
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise InputFormatError(f"Invalid JSON in scenario file: {e}")
        return parse_scenario(data)

    return parse_text(text)
