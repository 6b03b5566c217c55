"""Allow ``python -m genremap.cli`` execution."""

from genremap.cli.scrape import main

main()
