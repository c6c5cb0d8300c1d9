import sys
from pathlib import Path

from loguru import logger
from tqdm import tqdm

from longbow_labels.labels import RunSummary
from longbow_labels.labels import process_line
from longbow_labels.labels import read_label_lines


@logger.catch
def main(label_file: str = '') -> RunSummary:
    """
    Read label definitions from a file and create the labels which don't exist yet.

    Each line is handled completely, i.e. key check, creation and report, before the next one is read. Failures of a
    single line are reported and don't stop the run.

    Args:
        label_file (str, optional): The path to the label file. Defaults to the configured `label_file`.

    Returns:
        RunSummary: The number of labels per outcome.
    """

    from longbow_labels import api
    from longbow_labels import config

    label_file = Path(label_file or config.create_labels['label_file'])
    skip_empty = config.create_labels['skip_empty']
    hide_progress = config.globals['hide_progress']

    if not label_file.is_file():
        logger.critical(f'Label list file not found: {label_file}')
        sys.exit(1)

    try:
        label_lines = read_label_lines(label_file)
    except OSError as e:
        logger.critical(f'Could not open label list file {label_file}: {e}')
        sys.exit(1)

    summary = RunSummary()

    try:
        tqdm.write('')

        for line_number, line in enumerate(
            tqdm(
                label_lines,
                ncols=80,
                position=0,
                leave=False,
                disable=hide_progress,
            ),
            start=1,
        ):
            if not line and skip_empty:
                logger.warning(f'Skipping line {line_number}: it is empty after removing spaces and unprintable characters.')
                summary.skipped += 1
                continue

            report = process_line(line, api)
            summary.add(report)
            tqdm.write(report.text + '\n')

        tqdm.write('')
        logger.success(f'Finished creating labels! ({summary})')
    except KeyboardInterrupt:
        logger.info('Received keyboard interrupt from user.')
        sys.exit(1)

    return summary
