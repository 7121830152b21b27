import logging
import threading
from typing import Any, Mapping, Optional

from pydantic import ValidationError

from quotecraft.core.config import Settings, settings as default_settings
from quotecraft.core.errors import ConfigInvalid
from quotecraft.schemas.pricing import PricingConfig

logger = logging.getLogger(__name__)


def _field_path(exc: ValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "pricing"
    loc = [str(part) for part in errors[0]["loc"]]
    return ".".join(loc) or "pricing"


class PricingConfigStore:
    """Holds the process-wide pricing snapshot.

    Readers call get() once and keep the returned snapshot for the whole
    computation. Writers build a complete new snapshot and swap the
    reference; the lock only serializes writers against each other.
    """

    def __init__(self, initial: Optional[PricingConfig] = None, settings: Settings = default_settings):
        self._settings = settings
        self._config = initial if initial is not None else PricingConfig.from_settings(settings)
        self._write_lock = threading.Lock()

    def get(self) -> PricingConfig:
        return self._config

    def update(self, partial: Mapping[str, Any]) -> PricingConfig:
        """Shallow merge of top-level keys; a supplied key replaces the whole value."""
        aliases = {name: info.alias or name for name, info in PricingConfig.model_fields.items()}
        aliases.update({alias: alias for alias in list(aliases.values())})
        changes = {}
        for key, value in partial.items():
            if key not in aliases:
                raise ConfigInvalid(key, f"Unknown pricing field: {key}")
            changes[aliases[key]] = value

        with self._write_lock:
            merged = self._config.model_dump(by_alias=True)
            merged.update(changes)
            try:
                candidate = PricingConfig.model_validate(merged)
            except ValidationError as e:
                field = _field_path(e)
                logger.warning(f"Rejected pricing update on {field}: {e.errors()[0]['msg']}")
                raise ConfigInvalid(field, f"Invalid value for {field}") from e
            self._config = candidate

        logger.info(f"Pricing configuration updated: {sorted(changes)}")
        return candidate

    def reset(self) -> PricingConfig:
        with self._write_lock:
            self._config = PricingConfig.from_settings(self._settings)
        logger.info("Pricing configuration reset to environment defaults")
        return self._config
