from __future__ import annotations


class PracticeTracksError(Exception):
    """Base class for errors raised by this package."""


class InvalidReferenceError(PracticeTracksError, ValueError):
    """The input does not contain a recognisable YouTube video id."""

    def __init__(self, reference: str):
        super().__init__(f"not a YouTube URL or video id: {reference!r}")
        self.reference = reference


class InvalidLevelsError(PracticeTracksError, ValueError):
    pass


class MetadataUnavailableError(PracticeTracksError):
    """The oEmbed endpoint did not return a usable title."""


class DurationUnavailableError(PracticeTracksError):
    """The video never reported a positive duration within the wait."""
