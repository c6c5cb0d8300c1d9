import os
import sys
import tomllib
import urllib.parse

import validators
from loguru import logger
from validators import ValidationError


REGIONS = {
    'us': 'https://api.longbow.security:443',
    'eu': 'https://api.eu.longbow.security:443',
}

GLOBALS_DEFAULTS = {
    'api_key': None,
    'tenant_id': None,
    'region': 'us',
    'url': None,
    'timeout': 30,
    'hide_progress': False,
}

LOGGING_DEFAULTS = {
    'log_enabled': False,
    'log_file': 'longbow_labels.log',
    'log_level': 'INFO',
    'log_colorized': True,
}

CREATE_LABELS_DEFAULTS = {
    'label_file': 'labels.txt',
    'skip_empty': True,
}

# Checked in order, the first one which is set wins
API_KEY_ENV_VARS = ['LONGBOW_API_KEY', 'KEY']
TENANT_ID_ENV_VAR = 'LONGBOW_TENANT_ID'


class Config:
    """Reference to the default config values and the user config (CLI/config.toml/environment)."""

    def __init__(self) -> None:
        """
        Initializes a new instance of the Config class.

        The defaults get overlaid by the first config.toml found in the default locations, which are different for
        Windows and Linux, and then by the environment. Validation is left to `validate_config()`, since the CLI can
        still supply missing options.

        Args:
            None

        Returns:
            None
        """

        self.globals = dict(GLOBALS_DEFAULTS)
        self.logging = dict(LOGGING_DEFAULTS)
        self.create_labels = dict(CREATE_LABELS_DEFAULTS)

        # Define default locations for the config file
        if os.name == 'nt':  # Windows
            default_locations = [
                os.path.join(os.getcwd(), 'config.toml'),
                os.path.join(os.getenv('USERPROFILE', ''), 'longbow-labels', 'config.toml'),
                os.path.join(os.getenv('APPDATA', ''), 'longbow-labels', 'config.toml'),
            ]
        else:  # Linux
            default_locations = [
                os.path.join(os.getcwd(), 'config.toml'),
                os.path.expanduser('~/.config/longbow-labels/config.toml'),
                '/etc/longbow-labels/config.toml',
            ]

        config_file = None
        for location in default_locations:
            if os.path.isfile(location):
                config_file = location
                break

        if config_file:
            with open(config_file, 'rb') as f:
                try:
                    config = tomllib.load(f)
                except tomllib.TOMLDecodeError as e:
                    logger.critical(f'Could not parse {config_file}: {e}')
                    sys.exit(1)

            for section, values in config.items():
                if hasattr(self, section) and isinstance(values, dict):
                    getattr(self, section).update(values)

        self.load_environment()

    def load_environment(self) -> None:
        """Take the API key and tenant ID from the environment if they are set there."""

        for env_var in API_KEY_ENV_VARS:
            api_key = os.getenv(env_var)
            if api_key:
                self.globals['api_key'] = api_key
                break

        tenant_id = os.getenv(TENANT_ID_ENV_VAR)
        if tenant_id:
            self.globals['tenant_id'] = tenant_id

    def override_config(self, overrides: dict) -> None:
        """Override options with command line arguments.

        Args:
            overrides (dict): A dictionary containing the options to override, keyed by section.
        """

        for section, items in overrides.items():
            section_dict = getattr(self, section)
            for item in items:
                section_dict[item] = items[item]
            setattr(self, section, section_dict)

        self.validate_config()

    @property
    def base_url(self) -> str:
        """The explicit `url` if set, otherwise the endpoint of the configured region."""

        return self.globals['url'] or REGIONS[self.globals['region']]

    def validate_credentials(self) -> None:
        """Check if the API key and tenant ID are set."""

        if not self.globals['api_key']:
            logger.critical('You have to specify an API key!')
            logger.critical(f'Set it with --api-key, in config.toml or with the {API_KEY_ENV_VARS[0]} environment variable.')
            sys.exit(1)

        if not self.globals['tenant_id']:
            logger.critical('You have to specify a tenant ID!')
            logger.critical(f'Set it with --tenant-id, in config.toml or with the {TENANT_ID_ENV_VAR} environment variable.')
            sys.exit(1)

    def validate_url(self) -> None:
        """Sanitize the API url.

        Make sure that the region exists or the URL itself is valid, of scheme HTTP/s and remove trailing '/' char.
        """

        if not self.globals['url']:
            if self.globals['region'] not in REGIONS:
                logger.critical(f'The region "{self.globals["region"]}" is not valid!')
                logger.critical(f'Choose between {", ".join(REGIONS)}.')
                sys.exit(1)
            return

        self.globals['url'] = self.globals['url'].strip()
        result = validators.url(self.globals['url'])

        if isinstance(result, ValidationError):
            logger.critical(f'Your API URL "{self.globals["url"]}" is not valid!')
            sys.exit(1)

        parsed_url = urllib.parse.urlsplit(self.globals['url'])

        if parsed_url.scheme not in ('http', 'https'):
            logger.critical('API URL must be of HTTP or HTTPS scheme!')
            sys.exit(1)

        self.globals['url'] = self.globals['url'].rstrip('/')

    def validate_timeout(self) -> None:
        """Make sure the timeout is a positive number of seconds."""

        try:
            self.globals['timeout'] = float(self.globals['timeout'])
        except (TypeError, ValueError):
            logger.critical(f'Your timeout "{self.globals["timeout"]}" is not a number!')
            sys.exit(1)

        if self.globals['timeout'] <= 0:
            logger.critical(f'Your timeout "{self.globals["timeout"]}" has to be greater than 0!')
            sys.exit(1)

    def validate_config(self) -> None:
        """Validate the config by calling the individual validation methods."""

        self.validate_credentials()
        self.validate_url()
        self.validate_timeout()
