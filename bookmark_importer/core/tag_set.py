"""
Tag set value type and tag resolution helpers.

A TagSet models the tag list of one bookmark: which tags are valid, how many
there are, and whether merging with the user's tags overflows the
per-bookmark cap. Order never affects a decision; only validity and count do.
"""

from enum import Enum
from typing import Iterable, Iterator, List, Optional, Union

# Maximum number of characters a tag may have
DEFAULT_MAX_TAG_LENGTH = 22

TAG_SEPARATOR = ","


def is_valid_tag(tag: str, max_length: int = DEFAULT_MAX_TAG_LENGTH) -> bool:
    """
    Check a single tag against the tag format rules.

    A valid tag is a non-empty string without whitespace or commas and no
    longer than ``max_length`` characters.
    """
    if not isinstance(tag, str) or not tag:
        return False

    if len(tag) > max_length:
        return False

    return not any(ch.isspace() or ch == TAG_SEPARATOR for ch in tag)


class TagSet:
    """Ordered, duplicate-free collection of tag strings."""

    def __init__(
        self,
        tags: Iterable[str] = (),
        max_tag_length: int = DEFAULT_MAX_TAG_LENGTH,
    ):
        self.max_tag_length = max_tag_length

        unique: List[str] = []
        seen = set()
        for tag in tags:
            if tag in seen:
                continue
            seen.add(tag)
            unique.append(tag)

        self._tags = tuple(unique)

    @classmethod
    def from_string(
        cls, value: Optional[str], max_tag_length: int = DEFAULT_MAX_TAG_LENGTH
    ) -> "TagSet":
        """Build a tag set from a comma separated string such as ``"a, b,c"``."""
        if not value:
            return cls((), max_tag_length)

        tags = (part.strip() for part in value.split(TAG_SEPARATOR))
        return cls((tag for tag in tags if tag), max_tag_length)

    def all(self) -> List[str]:
        return list(self._tags)

    def count(self) -> int:
        return len(self._tags)

    def is_valid(self, tag: str) -> bool:
        return is_valid_tag(tag, self.max_tag_length)

    def has_invalid(self) -> bool:
        """True if any tag fails the tag format rules."""
        return any(not self.is_valid(tag) for tag in self._tags)

    def invalid(self) -> List[str]:
        return [tag for tag in self._tags if not self.is_valid(tag)]

    def valid_only(self) -> "TagSet":
        """The subset of tags passing the tag format rules."""
        return TagSet(
            (tag for tag in self._tags if self.is_valid(tag)), self.max_tag_length
        )

    def merged_with(self, other: Union["TagSet", Iterable[str]]) -> "TagSet":
        """Union of both tag sets, keeping this set's tags first."""
        return TagSet((*self._tags, *other), self.max_tag_length)

    def take(self, limit: int) -> "TagSet":
        return TagSet(self._tags[: max(limit, 0)], self.max_tag_length)

    def will_overflow_when_merged_with(
        self, user_tags: Union["TagSet", Iterable[str]], cap: int
    ) -> bool:
        """
        Determine if the valid tags merged with the user's tags exceed the cap.

        Args:
            user_tags: Tags the user asked to add to every imported bookmark
            cap: Maximum tags allowed per bookmark

        Returns:
            True if the merged tag count is greater than ``cap``
        """
        return self.valid_only().merged_with(user_tags).count() > cap

    def __iter__(self) -> Iterator[str]:
        return iter(self._tags)

    def __len__(self) -> int:
        return len(self._tags)

    def __contains__(self, tag: object) -> bool:
        return tag in self._tags

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, TagSet):
            return NotImplemented
        return set(self._tags) == set(other._tags)

    def __hash__(self) -> int:
        return hash(frozenset(self._tags))

    def __repr__(self) -> str:
        return f"TagSet({list(self._tags)!r})"


class MergeStrategy(str, Enum):
    """How user tags and import file tags are combined when both do not fit."""

    USER_DEFINED_TAGS_FIRST = "user_defined_tags_first"
    IMPORT_FILE_TAGS_FIRST = "import_file_tags_first"

    def merge(self, user_tags: TagSet, import_tags: TagSet, cap: int) -> TagSet:
        if self is MergeStrategy.USER_DEFINED_TAGS_FIRST:
            merged = user_tags.merged_with(import_tags)
        else:
            merged = import_tags.merged_with(user_tags)

        return merged.take(cap)


def resolve_tags(tags: TagSet, options, cap: int) -> TagSet:
    """
    Work out the tags a bookmark is stored with.

    Args:
        tags: Tags found in the import file for the bookmark
        options: ImportOptions of the running import
        cap: Maximum tags allowed per bookmark

    Returns:
        The final tag set, never larger than ``cap``
    """
    user_tags = options.user_tags

    if not options.include_import_file_tags:
        return user_tags

    import_tags = tags.valid_only().take(cap)
    merged = import_tags.merged_with(user_tags)

    if merged.count() <= cap:
        return merged

    if options.ignore_all_tags_on_merge_overflow:
        return TagSet((), tags.max_tag_length)

    return options.merge_strategy.merge(user_tags, import_tags, cap)
