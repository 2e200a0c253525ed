"""Kernel text – inflection and markup helpers."""
from grid_export.kernel.text.inflector import camel2words, class_words
from grid_export.kernel.text.markup import plain_label, strip_html

__all__ = ["camel2words", "class_words", "plain_label", "strip_html"]
