"""Mandrill Mailer.

A mailer that delivers application email through the Mandrill transactional API.
"""

__version__ = "0.1.0"
__author__ = "Mandrill Mailer Team"
__email__ = "devops@example.com"

# Package metadata
__all__ = ["__version__", "__author__", "__email__"]
