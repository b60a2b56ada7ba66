# pricewatch/config/spec.py
from typing import Type, Callable, Optional, Any
from pydantic import validate_call
from pricewatch.logger import logger


class ConfigSpec:
    """Self-validating configuration specification"""

    def __init__(
        self,
        type: Type = str,
        default: Any = None,
        validator: Optional[Callable[[Any], bool]] = None,
        description: str = "",
        required: bool = False,
        secret: bool = False,
    ):
        self.type = type
        self.default = default
        self.validator = validator or (lambda x: True)
        self.description = description
        self.required = required
        self.secret = secret

    def is_missing(self, value: Any) -> bool:
        return value is None or (isinstance(value, str) and not value.strip())

    @validate_call
    def validate(self, value: Any) -> Any:
        """Convert and validate the value"""
        if self.is_missing(value):
            logger.debug(f"Using default for config: {self.description or self.default}")
            return self.default

        try:
            # Special handling for bools
            if self.type == bool:
                converted = str(value).strip().lower() in ('true', '1', 't', 'yes')
            else:
                converted = self.type(str(value).strip())

            if not self.validator(converted):
                raise ValueError(f"Validation failed for value: {value}")

            return converted

        except (ValueError, TypeError) as e:
            shown = "REDACTED" if self.secret else value
            logger.warning(
                f"Config validation error for {shown!r} (using default {self.default}): {str(e)}"
            )
            return self.default
