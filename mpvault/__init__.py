"""
mpvault: Public-Account Article Archiver

A small toolkit for pulling articles off a public-account publishing platform:
it pages through an account's publish list, downloads each article page and
packs the page together with its images and stylesheets into a self-contained
zip archive for offline reading.
"""

__version__ = "1.0"
__author__ = "mpvault Project"
__description__ = "Public-Account Article Archiver"
