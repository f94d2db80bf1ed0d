"""
Exceptions raised while constructing score parameters.
"""


class InvalidArgumentError(ValueError):
    """
    Raised when inputs to the score-parameter builder are malformed.

    Covers unknown score types, dimension mismatches, non-positive
    hyperparameters, invalid data values for the chosen family and
    non-positive edge penalties. Construction is aborted and no partial
    object is returned.
    """
