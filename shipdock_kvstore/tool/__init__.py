"""Command line tool for shipdock-kvstore."""
