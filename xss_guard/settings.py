"""
Sanitization configuration
Immutable settings model plus the defaults-then-overlay merge
"""
from typing import Any, Dict, Literal, Mapping, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class SanitizationConfig(BaseModel):
    """Settings read by every sanitize call"""

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        alias_generator=to_camel,
        populate_by_name=True,
    )

    allowed_tags: Tuple[str, ...] = (
        "p", "br", "b", "i", "ul", "ol", "li", "span", "div", "a", "img",
    )
    allowed_attributes: Tuple[str, ...] = (
        "id", "class", "style", "href", "target", "src",
    )
    strip_ignore_tag: bool = False
    enable_logging: bool = False
    log_format: Literal["simple", "detailed"] = "simple"
    max_input_length: Optional[int] = Field(default=None, gt=0)

    @field_validator("allowed_tags", "allowed_attributes", mode="before")
    @classmethod
    def _normalize_names(cls, value: Any) -> Tuple[str, ...]:
        """Lowercase, strip and de-duplicate names, keeping first-seen order"""
        if value is None:
            return ()
        if isinstance(value, str):
            value = value.split(",")
        names = []
        for name in value:
            name = str(name).strip().lower()
            if name and name not in names:
                names.append(name)
        return tuple(names)


DEFAULT_SANITIZATION_CONFIG = SanitizationConfig()

ConfigOverrides = Union[SanitizationConfig, Mapping[str, Any]]


def _field_names(overrides: Mapping[str, Any]) -> Dict[str, Any]:
    aliases = {
        field.alias: name
        for name, field in SanitizationConfig.model_fields.items()
        if field.alias
    }
    return {aliases.get(key, key): value for key, value in overrides.items()}


def merge_config(
    base: SanitizationConfig, overrides: Optional[ConfigOverrides] = None
) -> SanitizationConfig:
    """
    Overlay the provided fields on top of a complete configuration

    Args:
        base: Configuration supplying every omitted field
        overrides: Partial mapping (field names or camelCase aliases) or a
            full SanitizationConfig

    Returns:
        A new, validated SanitizationConfig

    Raises:
        pydantic.ValidationError: on unknown keys or invalid values
    """
    if overrides is None:
        return base
    if isinstance(overrides, SanitizationConfig):
        return overrides

    data = base.model_dump()
    data.update(_field_names(overrides))
    return SanitizationConfig.model_validate(data)
