"""Content hub for a retail outlet: team roster, memories, news, guestbook."""

__version__ = "0.1.0"
