"""Chat bot plugin logic: reminders, group management, music, searches and small games."""

__version__ = "0.1.0"