"""
Repositories resolving workflow and freezone form definitions by name.

The generic workflow repository fails hard: a missing or malformed document
raises ConfigurationError. Form lookups by freezone code return a
FormConfigLookup instead, so an unknown freezone is an ordinary outcome the
caller checks with ``valid``.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Union

from ..core.config import settings
from .compiler import load_workflow
from .errors import ConfigurationError, FormConfigNotFound
from .form_config import FormConfigDefinition, load_form_config
from .models import WorkflowDefinition
from .sources import ConfigCache, ConfigSource, DirectoryConfigSource, version_marker

logger = logging.getLogger(__name__)

FORM_SUFFIX = "_company_formation_form"


class WorkflowRepository:
    def __init__(self, source: ConfigSource, cache: Optional[ConfigCache] = None):
        self.source = source
        self.cache = cache if cache is not None else ConfigCache()

    def load(self, workflow_type: str) -> WorkflowDefinition:
        key = (workflow_type or "").strip()
        if not key or not self.source.exists(key):
            raise ConfigurationError([f"Workflow file not found: {key or '<blank>'}"])
        return self.cache.get_or_load(self.source, key, lambda document, _: load_workflow(document))

    def available_workflows(self) -> List[str]:
        return [key for key in self.source.keys() if not key.endswith(FORM_SUFFIX)]

    @staticmethod
    def formation_workflow_type(free_zone: str) -> str:
        """ Workflow key used when starting a company formation in ``free_zone``. """
        return f"{free_zone.strip().lower()}_company_formation"


@dataclass(frozen=True)
class FormConfigLookup:
    """ Outcome of resolving a freezone: a definition, or the reason there is none. """
    freezone_code: str
    definition: Optional[FormConfigDefinition] = None
    error: Optional[Union[FormConfigNotFound, ConfigurationError]] = None

    @property
    def valid(self) -> bool:
        return self.definition is not None

    @property
    def not_found(self) -> bool:
        return isinstance(self.error, FormConfigNotFound)

    def unwrap(self) -> FormConfigDefinition:
        if self.definition is None:
            raise self.error or FormConfigNotFound(self.freezone_code)
        return self.definition


class FormConfigRepository:
    def __init__(
        self,
        source: ConfigSource,
        cache: Optional[ConfigCache] = None,
        default_freezone: Optional[str] = None,
    ):
        self.source = source
        self.cache = cache if cache is not None else ConfigCache()
        self.default_freezone = self.normalize_code(default_freezone or settings.DEFAULT_FREEZONE)

    @staticmethod
    def normalize_code(freezone_code: Optional[str]) -> str:
        return (freezone_code or "").strip().upper()

    @staticmethod
    def source_key(freezone_code: str) -> str:
        return f"{freezone_code.strip().lower()}{FORM_SUFFIX}"

    def lookup(self, freezone_code: Optional[str]) -> FormConfigLookup:
        code = self.normalize_code(freezone_code)
        if not code:
            return FormConfigLookup(code, error=FormConfigNotFound(freezone_code))

        key = self.source_key(code)
        if not self.source.exists(key):
            logger.warning("No form configuration for freezone %s", code)
            return FormConfigLookup(code, error=FormConfigNotFound(code, key))

        try:
            definition = self.cache.get_or_load(
                self.source, key, lambda document, modified: load_form_config(document, version_marker(modified))
            )
        except ConfigurationError as e:
            logger.error("Invalid freezone config for %s: %s", code, e)
            return FormConfigLookup(code, error=e)
        return FormConfigLookup(code, definition=definition)

    def load(self, freezone_code: Optional[str]) -> FormConfigDefinition:
        return self.lookup(freezone_code).unwrap()

    def available_freezones(self) -> List[str]:
        return sorted(
            key[: -len(FORM_SUFFIX)].upper() for key in self.source.keys() if key.endswith(FORM_SUFFIX)
        )


def build_workflow_repository(config_dir: Optional[Union[str, Path]] = None) -> WorkflowRepository:
    return WorkflowRepository(DirectoryConfigSource(config_dir or settings.FORMATION_CONFIG_DIR))


def build_form_config_repository(config_dir: Optional[Union[str, Path]] = None) -> FormConfigRepository:
    return FormConfigRepository(DirectoryConfigSource(config_dir or settings.FORMATION_CONFIG_DIR))
