"""StudyHub: turn uploaded study material into flashcards."""

__version__ = "0.1.0"
