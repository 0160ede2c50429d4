"""
Import option handling.

ImportChoices validates the option vocabulary users pick from when they
start an import; ImportOptions is the immutable set of policy flags derived
from those choices and consumed by the import policy.
"""

from dataclasses import dataclass, field
from typing import Any, List, Literal, Mapping, Optional, Union

from pydantic import BaseModel, Field, ValidationError, field_validator

from ..utils.error_handler import ConfigurationError
from .tag_set import DEFAULT_MAX_TAG_LENGTH, TAG_SEPARATOR, MergeStrategy, TagSet


class ImportChoices(BaseModel):
    """User-facing import choices."""

    invalid_bookmark_tag: Literal["skip_tag", "skip_bookmark", "fail_import"] = Field(
        default="skip_tag",
        description="What to do with a bookmark carrying an invalid tag",
    )
    tags_merge_overflow: Literal[
        "", "skip_bookmark", "fail_import", "ignore_all_tags"
    ] = Field(
        default="",
        description="What to do when file tags plus user tags exceed the cap",
    )
    bookmark_tags_exceeded: Literal["slice", "skip_bookmark", "fail_import"] = Field(
        default="slice",
        description="What to do with a bookmark carrying too many tags",
    )
    merge_strategy: MergeStrategy = Field(
        default=MergeStrategy.USER_DEFINED_TAGS_FIRST,
        description="Which tags win when merged tags do not fit",
    )
    include_bookmark_tags: bool = Field(
        default=True, description="Keep the tags found in the import file"
    )
    tags: List[str] = Field(
        default_factory=list, description="Tags added to every imported bookmark"
    )

    @field_validator("tags", mode="before")
    @classmethod
    def split_tags(cls, v):
        """Accept comma separated strings as well as lists."""
        if v is None:
            return []
        if isinstance(v, str):
            return [tag.strip() for tag in v.split(TAG_SEPARATOR) if tag.strip()]
        return v


@dataclass(frozen=True)
class ImportOptions:
    """Policy configuration for a single import."""

    skip_if_any_invalid_tag: bool = False
    skip_on_merge_overflow: bool = False
    skip_if_too_many_tags: bool = False
    fail_if_any_invalid_tag: bool = False
    fail_on_merge_overflow: bool = False
    fail_if_too_many_tags: bool = False
    user_tags: TagSet = field(default_factory=TagSet)

    # Tag resolution settings
    include_import_file_tags: bool = True
    ignore_all_tags_on_merge_overflow: bool = False
    merge_strategy: MergeStrategy = MergeStrategy.USER_DEFINED_TAGS_FIRST

    @property
    def halts_on_failure(self) -> bool:
        return (
            self.fail_if_any_invalid_tag
            or self.fail_on_merge_overflow
            or self.fail_if_too_many_tags
        )

    @classmethod
    def from_choices(
        cls,
        choices: Optional[Union[ImportChoices, Mapping[str, Any]]] = None,
        max_tag_length: int = DEFAULT_MAX_TAG_LENGTH,
    ) -> "ImportOptions":
        """
        Derive policy flags from user choices.

        Args:
            choices: ImportChoices instance or a raw mapping of choices
            max_tag_length: Tag length limit used for the user tags

        Returns:
            ImportOptions instance

        Raises:
            ConfigurationError: If the choices are not valid
        """
        if choices is None:
            choices = ImportChoices()
        elif not isinstance(choices, ImportChoices):
            try:
                choices = ImportChoices(**dict(choices))
            except ValidationError as e:
                raise ConfigurationError(f"Invalid import options: {e}") from e

        return cls(
            skip_if_any_invalid_tag=choices.invalid_bookmark_tag == "skip_bookmark",
            fail_if_any_invalid_tag=choices.invalid_bookmark_tag == "fail_import",
            skip_on_merge_overflow=choices.tags_merge_overflow == "skip_bookmark",
            fail_on_merge_overflow=choices.tags_merge_overflow == "fail_import",
            ignore_all_tags_on_merge_overflow=(
                choices.tags_merge_overflow == "ignore_all_tags"
            ),
            skip_if_too_many_tags=choices.bookmark_tags_exceeded == "skip_bookmark",
            fail_if_too_many_tags=choices.bookmark_tags_exceeded == "fail_import",
            user_tags=TagSet(choices.tags, max_tag_length),
            include_import_file_tags=choices.include_bookmark_tags,
            merge_strategy=choices.merge_strategy,
        )
