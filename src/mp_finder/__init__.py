"""
mp_finder – locator-driven entity search and filtering.

Import path convention::

    from mp_finder.kernel.locator import Locator
    from mp_finder.kernel.errors import LocatorProcessError, NotFoundError
    from mp_finder.application.finder import FinderImpl, TypedFinderBuilder
    from mp_finder.application.pagination import PagerData
"""

__version__ = "0.1.0"
__all__ = ["__version__"]
