"""Exceptions raised by the program engine."""


class ProgramDefinitionError(ValueError):
    """
    Raised when a program definition is internally inconsistent.

    These are authoring defects (e.g. an ``update_tm`` rule on a slot with no
    training-max key), never problems with user-entered data.
    """
