"""A small component package used by the scanner and app tests."""
