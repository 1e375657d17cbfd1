"""optar: encode arbitrary data into printable monochrome raster pages."""

__version__ = "0.1.0"
