"""Command-line host for the webpage analyzer form."""
