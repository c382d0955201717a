"""Plugin CMS: content management backend with runtime-toggleable plugins."""

__version__ = "1.0.0"
