"""Hard length bounds for free-text slots (characters, after trimming)."""

STORY_MIN_CHARS = 20
STORY_MAX_CHARS = 900
NOTES_MAX_CHARS = 300
COMBINED_MAX_CHARS = 1200

# Lyrics-review turns longer than this with no action keyword count as feedback.
IMPLICIT_REVISION_MIN_CHARS = 15
