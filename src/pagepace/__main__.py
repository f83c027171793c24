"""Main entry point for the pagepace package."""

from pagepace.tracker.cli import app


def main():
    """Run the pagepace command line interface."""
    app()


if __name__ == "__main__":
    main()
