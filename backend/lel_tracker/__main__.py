from lel_tracker.cli import cli

cli()
