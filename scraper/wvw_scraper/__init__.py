"""WvW match snapshot capture and coverage-window statistics."""
