"""lengthlint - redundant length checks next to Array#some()/Array#every()."""

__version__ = "0.3.0"
