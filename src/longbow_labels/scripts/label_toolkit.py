import shutil

import click
from click.core import ParameterSource

from longbow_labels import setup_client
from longbow_labels import setup_config
from longbow_labels import setup_logger
from longbow_labels.config import CREATE_LABELS_DEFAULTS
from longbow_labels.config import GLOBALS_DEFAULTS
from longbow_labels.config import LOGGING_DEFAULTS
from longbow_labels.config import REGIONS


# Which config section each command line option belongs to
OPTION_SECTIONS = {
    'api_key': 'globals',
    'tenant_id': 'globals',
    'region': 'globals',
    'url': 'globals',
    'timeout': 'globals',
    'hide_progress': 'globals',
    'log_enabled': 'logging',
    'log_colorized': 'logging',
    'log_file': 'logging',
    'log_level': 'logging',
    'keep_empty': 'create_labels',
}


def collect_overrides(ctx: click.Context) -> dict:
    """Collect the options which were explicitly set on the command line, grouped by config section.

    Args:
        ctx (click.Context): The Click context of the invoked command.

    Returns:
        dict: The overrides in the format `Config.override_config()` expects.
    """

    overrides = {}

    for param in ctx.command.params:
        parameter_source = ctx.get_parameter_source(param.name)
        if parameter_source == ParameterSource.COMMANDLINE and param.name in OPTION_SECTIONS:
            section = OPTION_SECTIONS[param.name]
            if param.name == 'keep_empty':
                overrides.setdefault(section, {}).update({'skip_empty': not ctx.params[param.name]})
            else:
                overrides.setdefault(section, {}).update({param.name: ctx.params[param.name]})

    return overrides


CONTEXT_SETTINGS = {'help_option_names': ['-h', '--help'], 'max_content_width': shutil.get_terminal_size().columns - 10}


@click.command(context_settings=CONTEXT_SETTINGS, epilog='Example: create-labels --region eu ./labels.txt')
@click.argument('label_file', required=False)
@click.option('--api-key', help='API key which will be used to authenticate with the Longbow API.')
@click.option('--tenant-id', help='The tenant the labels will be created for.')
@click.option(
    '--region',
    type=click.Choice(list(REGIONS), case_sensitive=False),
    help=f'Regional API endpoint to use (default: {GLOBALS_DEFAULTS["region"]}).',
)
@click.option('--url', help='Base URL of the API. Takes precedence over --region.')
@click.option('--timeout', type=float, help=f'Seconds to wait for each API call (default: {GLOBALS_DEFAULTS["timeout"]}).')
@click.option('--hide-progress', is_flag=True, help=f'Hides the progress bar (default: {GLOBALS_DEFAULTS["hide_progress"]}).')
@click.option(
    '--keep-empty',
    is_flag=True,
    help=f'Send lines which are empty after sanitizing to the API instead of skipping them (default: {not CREATE_LABELS_DEFAULTS["skip_empty"]}).',
)
# Logging options
@click.option('--log-enabled', is_flag=True, help=f'Create a log file (default: {LOGGING_DEFAULTS["log_enabled"]}).')
@click.option('--log-colorized', is_flag=True, help=f'Colorize the log output (default: {LOGGING_DEFAULTS["log_colorized"]}).')
@click.option('--log-file', help=f'Output file for the log (default: {LOGGING_DEFAULTS["log_file"]})')
@click.option(
    '--log-level',
    type=click.Choice(['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'], case_sensitive=True),
    help=f'Set the log level (default: {LOGGING_DEFAULTS["log_level"]}).',
)
@click.pass_context
def cli(
    ctx,
    label_file,
    api_key,
    tenant_id,
    region,
    url,
    timeout,
    hide_progress,
    keep_empty,
    log_enabled,
    log_colorized,
    log_file,
    log_level,
):
    """Create key:value labels for a Longbow tenant from a comma-separated file.

    Each line of LABEL_FILE holds a label key followed by its values, e.g. "severity,High,Medium,Low".
    Keys which already exist are skipped. LABEL_FILE defaults to ./labels.txt.

    Defaults can also be set in a config file.
    """

    overrides = collect_overrides(ctx)

    setup_config()
    setup_logger()

    from longbow_labels import config

    config.override_config(overrides)
    if 'logging' in overrides:
        setup_logger()

    setup_client()

    from longbow_labels.scripts import create_labels

    create_labels.main(label_file or config.create_labels['label_file'])


if __name__ == '__main__':
    cli()
