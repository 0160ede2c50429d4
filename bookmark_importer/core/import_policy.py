"""
Import policy.

Pure decision functions run for every candidate bookmark: should it fail
the whole import, should it be skipped, or may it be imported. Checks run in
a fixed order and the first match wins.
"""

from typing import Callable, Optional

from ..utils.validators import is_valid_bookmark_url
from .data_models import Candidate, FailReason, SkipReason
from .import_options import ImportOptions


class ImportPolicy:
    """Classifies candidates against the options of an import."""

    def __init__(
        self,
        max_tags_cap: int,
        url_validator: Callable[[str], bool] = is_valid_bookmark_url,
    ):
        """
        Args:
            max_tags_cap: Maximum tags allowed per bookmark
            url_validator: Predicate deciding whether a URL is acceptable
        """
        self.max_tags_cap = max_tags_cap
        self.url_validator = url_validator

    def classify_for_failure(
        self, candidate: Candidate, options: ImportOptions
    ) -> Optional[FailReason]:
        """
        Decide whether a candidate fails the import.

        An invalid URL always fails; the tag checks only apply when the
        matching ``fail_*`` option is set.
        """
        tags = candidate.tags

        if not self.url_validator(candidate.url):
            return FailReason.INVALID_URL

        if options.fail_if_any_invalid_tag and tags.has_invalid():
            return FailReason.INVALID_TAG

        if options.fail_on_merge_overflow and tags.will_overflow_when_merged_with(
            options.user_tags, self.max_tags_cap
        ):
            return FailReason.MERGE_OVERFLOW

        if (
            options.fail_if_too_many_tags
            and tags.valid_only().count() > self.max_tags_cap
        ):
            return FailReason.TOO_MANY_TAGS

        return None

    def classify_for_skip(
        self, candidate: Candidate, options: ImportOptions
    ) -> Optional[SkipReason]:
        """Decide whether a candidate that did not fail should be skipped."""
        tags = candidate.tags

        if options.skip_if_any_invalid_tag and tags.has_invalid():
            return SkipReason.INVALID_TAG

        if (
            options.skip_on_merge_overflow
            and tags.valid_only().merged_with(options.user_tags).count()
            > self.max_tags_cap
        ):
            return SkipReason.TAG_MERGE_OVERFLOW

        if (
            options.skip_if_too_many_tags
            and tags.valid_only().count() > self.max_tags_cap
        ):
            return SkipReason.TAGS_TOO_LARGE

        return None

    @staticmethod
    def should_halt_processing(options: ImportOptions) -> bool:
        """True if a failure stops the classification of later candidates."""
        return options.halts_on_failure
