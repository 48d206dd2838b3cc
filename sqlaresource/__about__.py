__version__ = "1.0.0"
__description__ = "sqlaresource : SqlAlchemy model REST resources for Flask"
