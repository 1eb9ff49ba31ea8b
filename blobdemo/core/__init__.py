"""Core package: settings, errors and the round-trip walkthrough."""
