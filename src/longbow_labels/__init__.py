from longbow_labels.config import Config


def setup_config():
    global config

    config = Config()


def setup_logger() -> None:
    """Setup loguru logging handlers."""

    import sys

    from loguru import logger

    handlers = [
        dict(
            sink=sys.stderr,
            backtrace=False,
            diagnose=False,
            colorize=True,
            level=config.logging['log_level'],
            filter=lambda record: record['level'].no < 30,
            format='<le>[{level}]</le> {message}',
        ),
        dict(
            sink=sys.stderr,
            backtrace=False,
            diagnose=False,
            colorize=True,
            level='WARNING',
            filter=lambda record: record['level'].no < 40,
            format=''.join(
                '<ly>[{level}]</ly> <ly>[{module}.{function}]</ly> {message}',
            ),
        ),
        dict(
            sink=sys.stderr,
            backtrace=False,
            diagnose=False,
            colorize=True,
            level='ERROR',
            format=''.join(
                '<lr>[{level}]</lr> <ly>[{module}.{function}]</ly> {message}',
            ),
        ),
    ]

    if config.logging['log_enabled']:
        handlers.append(
            dict(
                sink=config.logging['log_file'],
                colorize=config.logging['log_colorized'],
                level=config.logging['log_level'],
                diagnose=False,
                format=''.join(
                    '<lm>[{level}]</lm> <lg>[{time:DD.MM.YYYY, HH:mm:ss zz}]</lg> <ly>[{module}.{function}]</ly> {message}',
                ),
            ),
        )

    logger.configure(handlers=handlers)


def setup_client():
    from longbow_labels.longbow import Longbow

    global api

    api = Longbow(
        config.base_url,
        config.globals['tenant_id'],
        config.globals['api_key'],
        config.globals['timeout'],
    )
