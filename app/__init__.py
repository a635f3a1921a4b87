"""
Pull Request Reviewer Assignment Service

A backend service that manages teams and automatically assigns, reassigns
and tracks code reviewers for pull requests.
"""

__version__ = "1.0.0"
