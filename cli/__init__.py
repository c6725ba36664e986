"""Command line front end for tidyscrape."""
