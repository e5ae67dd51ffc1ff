"""
Configuration for text conversion.
"""
import codecs
import json
import logging
import pathlib
from dataclasses import dataclass, fields

logger = logging.getLogger(__name__)

DEFAULT_LOCATIONS = (
    '~/.config/strconv/options.json',
    '/etc/strconv/options.json',
    'strconv.json',
    )


@dataclass
class ConversionOptions:
    """Options

    - encoding: client encoding used to decode field bytes and encode buffers
    - array_delimiter: element separator for array literals
    """
    encoding: str = 'utf-8'
    array_delimiter: str = ','

    _instance = None

    def __post_init__(self):
        try:
            codecs.lookup(self.encoding)
        except LookupError as e:
            raise ValueError(f'Unknown encoding {self.encoding!r}') from e
        if len(self.array_delimiter) != 1 or self.array_delimiter in '{}"\\':
            raise ValueError(f'array_delimiter must be a single plain character, '
                             f'got {self.array_delimiter!r}')

    @classmethod
    def get_instance(cls) -> 'ConversionOptions':
        """Get singleton instance, loading the first default config found."""
        if cls._instance is None:
            instance = cls()
            for location in DEFAULT_LOCATIONS:
                path = pathlib.Path(location).expanduser()
                if path.exists():
                    instance = instance.load_config(path)
                    break
            cls._instance = instance
        return cls._instance

    @classmethod
    def set_instance(cls, options: 'ConversionOptions') -> None:
        cls._instance = options

    @classmethod
    def reset(cls) -> None:
        cls._instance = None

    def load_config(self, config_file) -> 'ConversionOptions':
        """Return options merged with the values of a JSON file.

        Unknown keys are ignored. An unreadable file leaves the options
        unchanged; invalid values raise ValueError.
        """
        try:
            with pathlib.Path(config_file).open() as f:
                config = json.load(f)
        except (OSError, ValueError) as e:
            logger.warning(f'Failed to load conversion options: {e}')
            return self

        known = {f.name for f in fields(self)}
        values = {f.name: getattr(self, f.name) for f in fields(self)}
        for key, value in config.items():
            if key in known:
                values[key] = value
            else:
                logger.debug(f'Ignoring unknown option {key!r} in {config_file}')
        options = type(self)(**values)
        logger.info(f'Loaded conversion options from {config_file}')
        return options


def get_options() -> ConversionOptions:
    return ConversionOptions.get_instance()
