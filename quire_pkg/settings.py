#!/usr/bin/env python3
"""
Settings loader for the Quire static site generator.
Supports configuration from quire.json, quire.yml or quire.yaml files.
"""

import os
import json
import yaml
from typing import Dict, Any, Optional

from .errors import ConfigurationError
from .metadata import Kind


class SiteConfig:
    """Immutable, normalized configuration consumed by one pipeline run."""

    __slots__ = ('source_dir', 'output_dir', 'sitename', 'site_url', 'sources',
                 'routes', 'blogpost_template', 'workers', 'log_dir')

    def __init__(self, source_dir: str, output_dir: str, sitename: str = '', site_url: str = '',
                 sources: Optional[Dict[str, str]] = None, routes: Optional[Dict[str, str]] = None,
                 blogpost_template: str = 'blogpost.html', workers: Optional[int] = None,
                 log_dir: Optional[str] = None):
        values = {
            'source_dir': source_dir,
            'output_dir': output_dir,
            'sitename': sitename,
            'site_url': site_url,
            'sources': dict(sources or {}),
            'routes': dict(routes or {}),
            'blogpost_template': blogpost_template,
            'workers': workers,
            'log_dir': log_dir,
        }
        for key, value in values.items():
            object.__setattr__(self, key, value)
        self.validate()

    def __setattr__(self, key, value):
        raise AttributeError(f"SiteConfig is immutable, cannot set '{key}'")

    def validate(self) -> None:
        """Raise ConfigurationError for values the pipeline cannot work with."""
        for glob_pattern, kind in self.sources.items():
            if kind not in Kind.ALL:
                raise ConfigurationError(
                    f"Unknown source kind '{kind}' for '{glob_pattern}', expected one of {', '.join(Kind.ALL)}"
                )
        for name, template in self.routes.items():
            if not isinstance(template, str):
                raise ConfigurationError(f"Route '{name}' must be a string")
        for key in ('sitename', 'site_url', 'blogpost_template'):
            if not isinstance(getattr(self, key), str):
                raise ConfigurationError(f"'{key}' must be a string")
        if self.workers is not None and (isinstance(self.workers, bool) or not isinstance(self.workers, int)
                                         or self.workers < 1):
            raise ConfigurationError("'workers' must be a positive integer")

    def with_overrides(self, **overrides) -> 'SiteConfig':
        values = {key: getattr(self, key) for key in self.__slots__}
        values.update(overrides)
        return SiteConfig(**values)

    def __repr__(self):
        return f"SiteConfig(source_dir={self.source_dir!r}, output_dir={self.output_dir!r})"


class QuireSettings:
    """Load and manage Quire configuration settings."""

    # Default configuration
    DEFAULT_SETTINGS = {
        'source_dir': '.',
        'output_dir': 'output',
        'sitename': '',
        'site_url': '',
        'sources': {},
        'routes': {},
        'blogpost_template': 'blogpost.html',
        'workers': None,
        'log_dir': None,
    }

    # Config file names to look for (in order of preference)
    CONFIG_FILES = ['quire.json', 'quire.yml', 'quire.yaml']

    def __init__(self, config_dir: str = None):
        """
        Initialize settings loader.

        Args:
            config_dir: Directory to look for config files and to resolve
                relative paths against. Defaults to current directory.
        """
        self.config_dir = config_dir or os.getcwd()
        self.settings = self.DEFAULT_SETTINGS.copy()
        self.config_file_path = None

    def load_settings(self, config_path: Optional[str] = None) -> Dict[str, Any]:
        """
        Load settings from a configuration file.

        Args:
            config_path: Explicit config file. When omitted the first of
                CONFIG_FILES found in config_dir is used.

        Returns:
            Dictionary of configuration settings
        """
        config_file = config_path or self._find_config_file()
        if not config_file:
            raise ConfigurationError(
                f"No configuration file found in {self.config_dir} (looked for {', '.join(self.CONFIG_FILES)})"
            )

        self.config_file_path = config_file
        loaded_settings = self._load_config_file(config_file)
        if not isinstance(loaded_settings, dict):
            raise ConfigurationError(f"Configuration file {config_file} must contain a mapping")
        unknown = set(loaded_settings) - set(self.DEFAULT_SETTINGS)
        if unknown:
            raise ConfigurationError(f"Unknown settings in {config_file}: {', '.join(sorted(unknown))}")
        for key in ('sources', 'routes'):
            if key in loaded_settings and not isinstance(loaded_settings[key], dict):
                raise ConfigurationError(f"'{key}' in {config_file} must be a mapping")
        self.settings.update(loaded_settings)
        return self.settings.copy()

    def _find_config_file(self) -> Optional[str]:
        """
        Find the first available configuration file.

        Returns:
            Path to config file or None if not found
        """
        for filename in self.CONFIG_FILES:
            config_path = os.path.join(self.config_dir, filename)
            if os.path.exists(config_path):
                return config_path
        return None

    def _load_config_file(self, config_path: str) -> Dict[str, Any]:
        """
        Load configuration from a file.

        Args:
            config_path: Path to the configuration file

        Returns:
            Dictionary of configuration settings
        """
        file_ext = os.path.splitext(config_path)[1].lower()
        try:
            with open(config_path, 'r', encoding='utf-8') as f:
                if file_ext in ['.yml', '.yaml']:
                    return yaml.safe_load(f) or {}
                elif file_ext == '.json':
                    return json.load(f) or {}
                else:
                    raise ConfigurationError(f"Unsupported config file format: {file_ext}")
        except FileNotFoundError:
            raise ConfigurationError(f"Configuration file not found: {config_path}")
        except PermissionError:
            raise ConfigurationError(f"Permission denied reading configuration file: {config_path}")
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in configuration file {config_path}: {e}")
        except json.JSONDecodeError as e:
            raise ConfigurationError(f"Invalid JSON in configuration file {config_path}: {e}")
        except (IOError, OSError) as e:
            raise ConfigurationError(f"Error reading configuration file {config_path}: {e}")

    def merge_with_args(self, args_dict: Dict[str, Any]) -> Dict[str, Any]:
        """
        Merge configuration settings with command-line arguments.
        Command-line arguments take precedence over config file settings.

        Args:
            args_dict: Dictionary of command-line arguments

        Returns:
            Merged configuration dictionary
        """
        merged = self.settings.copy()
        for key, value in args_dict.items():
            if value is not None and key in self.DEFAULT_SETTINGS:
                merged[key] = value
        self.settings = merged
        return merged.copy()

    def normalize_path(self, path: str) -> str:
        """Expand ~ and make path absolute against config_dir."""
        path = os.path.expanduser(path)
        if not os.path.isabs(path):
            path = os.path.join(self.config_dir, path)
        return os.path.normpath(path)

    def to_config(self) -> SiteConfig:
        """Build the immutable SiteConfig handed to the pipeline."""
        settings = self.settings
        site_url = settings['site_url'] or ''
        if not isinstance(site_url, str):
            raise ConfigurationError("'site_url' must be a string")
        return SiteConfig(
            source_dir=self.normalize_path(str(settings['source_dir'])),
            output_dir=self.normalize_path(str(settings['output_dir'])),
            sitename=settings['sitename'],
            site_url=site_url.rstrip('/'),
            sources=settings['sources'],
            routes=settings['routes'],
            blogpost_template=settings['blogpost_template'],
            workers=settings['workers'],
            log_dir=self.normalize_path(str(settings['log_dir'])) if settings['log_dir'] else None,
        )
