"""Convert binary game saves to editable JSON and back."""

__version__ = '0.1.0'
