"""tagdrill - self-quizzing over plant tag reference tables."""

__version__ = "0.1.0"
