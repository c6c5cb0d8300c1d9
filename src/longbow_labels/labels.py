from __future__ import annotations

import json
import re
from collections import Counter
from dataclasses import dataclass
from dataclasses import field
from pathlib import Path
from typing import Iterable
from typing import Iterator
from typing import TextIO

from loguru import logger

from longbow_labels.longbow import KeyAvailability
from longbow_labels.longbow import Longbow
from longbow_labels.longbow import LongbowError


LABEL_TYPE = 'VERACODE'

# Tab, LF, CR and printable ASCII survive, everything else is dropped
NON_PRINTABLE = re.compile(r'[^\t\n\r\x20-\x7e]')


@dataclass
class LabelSpec:
    key: str
    values: list[str] = field(default_factory=list)

    @property
    def available_values(self) -> list[dict]:
        return [{'value': value} for value in self.values]


@dataclass
class LineReport:
    """Result of processing one line of the label file."""

    key: str
    status: str
    text: str


@dataclass
class RunSummary:
    counts: Counter = field(default_factory=Counter)
    skipped: int = 0

    def add(self, report: LineReport) -> None:
        self.counts[report.status] += 1

    def __str__(self) -> str:
        return (
            f'created: {self.counts["created"]}, already existing: {self.counts["exists"]}, '
            f'failed: {self.counts["failed"] + self.counts["unknown"] + self.counts["error"]}, skipped: {self.skipped}'
        )


def sanitize_line(line: str) -> str:
    """
    Cleans up a raw line of the label file.

    Surrounding whitespace and non-printable characters get removed first, then all spaces. Finally, pairs of commas
    get replaced by a single one. This happens in one pass only, so ',,,' turns into ',,'.

    Args:
        line (str): The raw line.

    Returns:
        str: The sanitized line, which can be empty.
    """

    line = line.strip()
    line = NON_PRINTABLE.sub('', line)
    line = line.replace(' ', '')
    line = line.replace(',,', ',')

    return line


def sanitize_lines(lines: Iterable[str]) -> Iterator[str]:
    for line in lines:
        yield sanitize_line(line)


def read_label_lines(label_file: Path | str) -> Iterator[str]:
    """
    Opens `label_file` right away and returns an iterator over its sanitized lines.

    The lines themselves are read lazily, the file gets closed once the iterator is exhausted.

    Args:
        label_file (Path | str): Path to the label file.

    Returns:
        Iterator[str]: Every sanitized line, including the ones which ended up empty.

    Raises:
        OSError: If `label_file` can't be opened, e.g. because it doesn't exist or isn't readable.
    """

    f = open(label_file, encoding='utf-8', errors='replace')

    return _read_lines(f)


def _read_lines(f: TextIO) -> Iterator[str]:
    with f:
        yield from sanitize_lines(f)


def parse_line(line: str) -> LabelSpec:
    """Split a sanitized line into the label key (first item) and its values (the rest).

    A single trailing comma doesn't add an empty value, so `sev,High,Low,` has two values.
    """

    key, *values = line.split(',')
    if values and values[-1] == '':
        values.pop()

    return LabelSpec(key, values)


def build_payload(label: LabelSpec) -> dict:
    return {
        'key': label.key,
        'type': LABEL_TYPE,
        'description': '',
        'availableValues': label.available_values,
        'settings': {'valueRequired': False, 'valuesManagement': False},
    }


def process_line(line: str, client: Longbow) -> LineReport:
    """
    Creates the label described by `line` if its key doesn't exist yet.

    Existing keys are never touched, so values can't be added to them. Failures get turned into a report instead of
    being raised, which lets the caller carry on with the next line.

    Args:
        line (str): A sanitized line of the label file.
        client (Longbow): The API client.

    Returns:
        LineReport: What happened, with the text to show to the user.
    """

    label = parse_line(line)
    payload = build_payload(label)

    try:
        result = client.check_key_available(label.key)

        if result.availability is KeyAvailability.AVAILABLE:
            outcome = client.create_label(payload)
            if outcome.success:
                values = json.dumps(payload['availableValues'])
                return LineReport(label.key, 'created', f'Created key: {label.key}\nCreated values: {values}')
            else:
                logger.debug(f'Creation of "{label.key}" failed with HTTP {outcome.status_code}')
                return LineReport(
                    label.key,
                    'failed',
                    f'Failed to create label {label.key}. HTTP status: {outcome.status_code}\n{outcome.body}',
                )
        elif result.availability is KeyAvailability.TAKEN:
            return LineReport(label.key, 'exists', f'Key already exists: {label.key}')
        else:
            return LineReport(
                label.key,
                'unknown',
                f'Error: the key check for {label.key} did not return true or false. The response was:\n\n{result.body}',
            )
    except LongbowError as e:
        logger.debug(e)
        return LineReport(label.key, 'error', f'Failed to process label {label.key}: {e}')
