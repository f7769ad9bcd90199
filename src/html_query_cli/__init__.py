"""Command-line front end for html_query."""
