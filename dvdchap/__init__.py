"""dvdchap: DVD-Video chapter extractor."""

__version__ = "0.1.0"
