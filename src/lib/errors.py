"""
Composition errors

Every structural violation found while composing a document is fatal and
raised as a CompositionError subclass naming the offending document and,
where there is one, the directive or section.
"""

from typing import Optional


class CompositionError(Exception):
    """
    Raised when a document violates the directive markup rules

    Attributes:
        document: File name of the page or layout being composed
        name: Directive, section or variable involved (if any)
    """

    def __init__(self, message: str, document: str, name: Optional[str] = None):
        super().__init__(message)
        self.document = document
        self.name = name


class MissingRequiredMarker(CompositionError):
    """@doBody absent from a layout, or a required section not supplied"""
    pass


class DuplicateMarker(CompositionError):
    """@doBody repeated in a layout, or a section defined twice in a page"""
    pass


class UnterminatedBlock(CompositionError):
    """Section or variables block without its closing directive"""
    pass


class MalformedAssignment(CompositionError):
    """Line inside a variables block that is not name=value"""
    pass


class EmptyReference(CompositionError):
    """Empty variables import reference or empty layout name"""
    pass
