"""Presentation helpers: markup rendering, HTML pages and the console front end."""
