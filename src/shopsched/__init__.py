"""shopsched - machine scheduling with precedence constraints."""

__version__ = "0.1.0"
