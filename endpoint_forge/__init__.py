"""endpoint-forge — scaffold Next.js API route handlers for the portfolio app."""

__version__ = "0.1.0"
