"""
Entry point for running the caregiver CLI as a module.

Usage:
    python -m pacing.delivery status
    python -m pacing.delivery override
    python -m pacing.delivery --help
"""
from .cli import main

if __name__ == "__main__":
    main()
