"""
Run configuration and the backend registry.

A survey run picks its collection backend at runtime, by name, from a
registry. The choice (plus backend options and log level) can be written
in YAML:

    backend: scripted
    log_level: DEBUG
    options:
      answers:
        name: Alice
        age: 30

The SURVEYFORM_LOG_LEVEL environment variable overrides the configured
log level.
"""

import logging
import os
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Mapping, Optional, Union

import yaml

from surveyform.protocol import SurveyBackend

logger = logging.getLogger(__name__)

DEFAULT_BACKEND = "scripted"
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

_BACKENDS: Dict[str, Callable[..., SurveyBackend]] = {}


@dataclass
class RunConfig:
    """
    Settings for one survey run.

    Properties:
        backend: Registered backend name
        options: Keyword arguments passed to the backend factory
        log_level: Logging level name for configure_logging()
    """

    backend: str = DEFAULT_BACKEND
    options: Dict[str, Any] = field(default_factory=dict)
    log_level: str = "WARNING"

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "RunConfig":
        unknown = set(data) - {"backend", "options", "log_level"}
        if unknown:
            raise ValueError(f"Unknown configuration keys: {', '.join(sorted(unknown))}")
        options = data.get("options") or {}
        if not isinstance(options, Mapping):
            raise ValueError("'options' must be a mapping")
        return cls(
            backend=str(data.get("backend", DEFAULT_BACKEND)),
            options=dict(options),
            log_level=str(data.get("log_level", "WARNING")).upper(),
        )


def load_config(text: str) -> RunConfig:
    """Parse a YAML document into a RunConfig. An empty document gives the defaults."""
    data = yaml.safe_load(text)
    if data is None:
        return RunConfig()
    if not isinstance(data, Mapping):
        raise ValueError("Configuration must be a YAML mapping")
    return RunConfig.from_dict(data)


def load_config_file(path: Union[str, os.PathLike]) -> RunConfig:
    with open(path) as f:
        return load_config(f.read())


def configure_logging(level: Optional[str] = None) -> None:
    """Attach a basic handler to the package logger. SURVEYFORM_LOG_LEVEL wins over `level`."""
    level = os.environ.get("SURVEYFORM_LOG_LEVEL", level or "WARNING").upper()
    package_logger = logging.getLogger("surveyform")
    package_logger.setLevel(level)
    if not package_logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        package_logger.addHandler(handler)


# =========================================================================
# BACKEND REGISTRY
# =========================================================================


def register_backend(name: str, factory: Callable[..., SurveyBackend]) -> None:
    """Register a backend factory under `name`, replacing any previous one."""
    _BACKENDS[name] = factory
    logger.debug(f"Registered backend '{name}'")


def available_backends() -> List[str]:
    _load_builtin_backends()
    return sorted(_BACKENDS)


def _load_builtin_backends() -> None:
    import surveyform.backends  # noqa: F401  (registers the built-in backends)


def create_backend(spec: Union[None, str, SurveyBackend, RunConfig, Mapping[str, Any]] = None) -> SurveyBackend:
    """
    Resolve a backend from a name, an instance, a RunConfig or a config mapping.

    Raises:
        ValueError: no backend is registered under the requested name
    """
    if isinstance(spec, SurveyBackend):
        return spec
    if spec is None:
        spec = RunConfig()
    elif isinstance(spec, str):
        spec = RunConfig(backend=spec)
    elif isinstance(spec, Mapping):
        spec = RunConfig.from_dict(spec)

    _load_builtin_backends()
    factory = _BACKENDS.get(spec.backend)
    if factory is None:
        raise ValueError(f"Unknown backend '{spec.backend}'. Available: {', '.join(sorted(_BACKENDS))}")
    logger.info(f"Using backend '{spec.backend}'")
    return factory(**spec.options)


__all__ = [
    "RunConfig",
    "load_config",
    "load_config_file",
    "configure_logging",
    "register_backend",
    "available_backends",
    "create_backend",
    "DEFAULT_BACKEND",
]
