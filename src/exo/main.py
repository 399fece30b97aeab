"""Console entry point for exo.

Usage:
  exo init                 # Create config, directories and templates
  exo day                  # Create or open today's daily note
  exo zet "A title"        # Create a Zettel and link it from today
  exo idea "A title"       # Capture an idea
  exo templates            # List templates
  exo config [get|set]     # Show or change settings
"""

from exo.interfaces.cli.app import app


def main():
    """Main entry point."""
    app()


if __name__ == "__main__":
    main()
