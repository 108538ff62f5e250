from extdump.cli import cli

cli()
