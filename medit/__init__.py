"""Core pieces of a small Emacs-style text editor: buffers, motion, screen, Blowfish and MEL."""

__version__ = "0.1.0"