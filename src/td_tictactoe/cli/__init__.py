"""Command-line interface for td-tictactoe."""
