class WordStreakError(Exception):
    pass


class NoteLookupError(WordStreakError):
    """Note storage could not be read. Not evidence that the note is missing."""


class SettingsStoreError(WordStreakError):
    """Persisted streak settings could not be loaded or saved."""
