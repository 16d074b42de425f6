"""
Document-store access layer of the project ideas platform.

Subpackages are imported explicitly (``projectideas.domain``,
``projectideas.repositories``, ``projectideas.use_cases``...); nothing is
re-exported here.
"""
